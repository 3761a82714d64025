"""
Pytest configuration for podman-lifecycle tests.
"""

import os
import sys

import pytest

# Add the src directory to the Python path
src_path = os.path.join(os.path.dirname(__file__), '..', 'src')
sys.path.insert(0, os.path.abspath(src_path))

# Import test fixtures
from tests.fixtures.fake_podman import *  # noqa: E402,F401,F403


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Setup test environment before running tests."""
    os.environ["TEST_MODE"] = "true"
    os.environ.setdefault("LOG_LEVEL", "INFO")

    yield


@pytest.fixture
def no_sleep(monkeypatch):
    """Make backoff and polling sleeps instantaneous, recording requested delays."""
    delays = []
    monkeypatch.setattr("time.sleep", lambda seconds: delays.append(seconds))
    return delays


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running"
    )
    config.addinivalue_line(
        "markers", "requires_podman: marks tests that require a reachable Podman socket"
    )

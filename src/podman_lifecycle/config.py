"""
Environment-derived configuration.

The only input that shapes the transport is the runtime directory root; the
remaining knobs are timeouts and defaults for the command-line workflow.
"""

from __future__ import annotations

import os
from typing import Optional

RUNTIME_DIR_ENV = "XDG_RUNTIME_DIR"
CONTAINER_HOST_ENV = "CONTAINER_HOST"
SOCKET_SUBPATH = "podman/podman.sock"

API_TIMEOUT = int(os.getenv("PODMAN_API_TIMEOUT", "60"))
POLL_INTERVAL = float(os.getenv("PODMAN_POLL_INTERVAL", "0.25"))
WAIT_TIMEOUT = float(os.getenv("PODMAN_WAIT_TIMEOUT", "30"))
STOP_TIMEOUT = int(os.getenv("PODMAN_STOP_TIMEOUT", "10"))
DEFAULT_IMAGE = os.getenv("PODMAN_DEFAULT_IMAGE", "registry.fedoraproject.org/fedora:latest")


def runtime_dir() -> str:
    """Return the runtime directory root, falling back to /run/user/<uid>."""
    value = os.environ.get(RUNTIME_DIR_ENV)
    if value:
        return value
    return f"/run/user/{os.getuid()}"


def socket_uri(runtime_root: Optional[str] = None) -> str:
    """Build the well-known local socket URI under a runtime directory."""
    root = (runtime_root or runtime_dir()).rstrip("/")
    return f"unix://{root}/{SOCKET_SUBPATH}"


def default_endpoint(runtime_root: Optional[str] = None) -> str:
    """
    Resolve the endpoint a session should connect to.

    An explicit runtime directory wins; otherwise ``CONTAINER_HOST`` is
    honoured before falling back to the runtime-directory socket.
    """
    if runtime_root:
        return socket_uri(runtime_root)
    return os.environ.get(CONTAINER_HOST_ENV) or socket_uri()


__all__ = [
    "API_TIMEOUT",
    "DEFAULT_IMAGE",
    "POLL_INTERVAL",
    "STOP_TIMEOUT",
    "WAIT_TIMEOUT",
    "default_endpoint",
    "runtime_dir",
    "socket_uri",
]

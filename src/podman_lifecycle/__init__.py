"""
podman-lifecycle - client-side container lifecycle orchestration.

This package drives a single container through a Podman (or any
Docker-compatible) API socket:
- Session establishment over a reusable connection
- Image resolution with pull policies
- Unit specs built from an image or a root filesystem
- Create, start, wait, inspect and stop with typed errors
"""

from __future__ import annotations

__version__ = "1.0.0"

# Core exports
from podman_lifecycle.core import (
    CreationError,
    ImagePullError,
    ImageResolver,
    ImageSource,
    InspectError,
    InvalidIdentityError,
    LifecycleController,
    LifecycleError,
    PullOptions,
    PullPolicy,
    RootfsSource,
    Session,
    SessionConnectionError,
    SpecSubmittedError,
    StartError,
    StateObserver,
    StopError,
    UnitSnapshot,
    UnitSpec,
    UnitState,
    UnitSummary,
    WaitError,
    WaitTimeoutError,
    new_spec,
)
from podman_lifecycle.utils.logger import get_logger

__all__ = [
    "CreationError",
    "ImagePullError",
    "ImageResolver",
    "ImageSource",
    "InspectError",
    "InvalidIdentityError",
    "LifecycleController",
    "LifecycleError",
    "PullOptions",
    "PullPolicy",
    "RootfsSource",
    "Session",
    "SessionConnectionError",
    "SpecSubmittedError",
    "StartError",
    "StateObserver",
    "StopError",
    "UnitSnapshot",
    "UnitSpec",
    "UnitState",
    "UnitSummary",
    "WaitError",
    "WaitTimeoutError",
    "get_logger",
    "new_spec",
    "__version__",
]

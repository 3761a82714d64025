"""
Core lifecycle logic for podman-lifecycle.

This module contains the session, image, spec, lifecycle and observer
components.
"""

from __future__ import annotations

from podman_lifecycle.core.errors import (
    CreationError,
    ImagePullError,
    InspectError,
    InvalidIdentityError,
    LifecycleError,
    SessionConnectionError,
    SpecSubmittedError,
    StartError,
    StopError,
    WaitError,
    WaitTimeoutError,
)
from podman_lifecycle.core.images import ImageResolver, PullOptions, PullPolicy
from podman_lifecycle.core.lifecycle import LifecycleController
from podman_lifecycle.core.observer import StateObserver
from podman_lifecycle.core.session import Session
from podman_lifecycle.core.state import UnitSnapshot, UnitState, UnitSummary
from podman_lifecycle.core.unit_spec import ImageSource, RootfsSource, UnitSpec, new_spec

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
    "new_spec",
]

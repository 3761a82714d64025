"""
Error taxonomy for lifecycle operations.

Each stage raises its own error type; docker SDK exceptions are translated at
the call site and chained so the remote's original response stays reachable.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Type

from docker.errors import APIError, DockerException, NotFound
from requests.exceptions import RequestException


class LifecycleError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionConnectionError(LifecycleError, ConnectionError):
    """Transport unreachable, malformed endpoint or unauthorized."""


class ImagePullError(LifecycleError):
    """Source image unavailable."""


class CreationError(LifecycleError):
    """Invalid spec or resource exhaustion on the remote side."""


class StartError(LifecycleError):
    pass


class StopError(LifecycleError):
    pass


class InspectError(LifecycleError):
    """Identity unknown or removed."""


class WaitError(LifecycleError):
    """Remote-reported failure while waiting for a state."""


class WaitTimeoutError(LifecycleError, TimeoutError):
    """Target state not reached before the deadline."""


class InvalidIdentityError(StartError, StopError, InspectError, WaitError):
    """The remote service does not know the unit identity."""


class SpecSubmittedError(LifecycleError):
    """A unit spec was modified after it was submitted for creation."""


def explain(e: APIError) -> str:
    """Short human-readable reason from a docker SDK API error."""
    return str(e.explanation or e)


@contextmanager
def translate_remote_errors(
    error_cls: Type[LifecycleError],
    action: str,
    *,
    not_found: Optional[Type[LifecycleError]] = None,
) -> Iterator[None]:
    """
    Translate docker SDK exceptions raised inside the block.

    Args:
        error_cls: Error raised for API errors reported by the remote.
        action: Short description used as the message prefix.
        not_found: Error raised when the remote answers 404. Defaults to
            ``error_cls``.
    """
    try:
        yield
    except NotFound as e:
        raise (not_found or error_cls)(f"{action}: {explain(e)}", status_code=e.status_code) from e
    except APIError as e:
        raise error_cls(f"{action}: {explain(e)}", status_code=e.status_code) from e
    except (DockerException, RequestException) as e:
        raise SessionConnectionError(f"{action}: transport failure: {e}") from e


__all__ = [
    "CreationError",
    "ImagePullError",
    "InspectError",
    "InvalidIdentityError",
    "LifecycleError",
    "SessionConnectionError",
    "SpecSubmittedError",
    "StartError",
    "StopError",
    "WaitError",
    "WaitTimeoutError",
    "explain",
    "translate_remote_errors",
]

from __future__ import annotations

import time
from typing import Optional, Type

from podman_lifecycle.config import POLL_INTERVAL
from podman_lifecycle.core.errors import (
    InspectError,
    InvalidIdentityError,
    LifecycleError,
    WaitError,
    WaitTimeoutError,
    translate_remote_errors,
)
from podman_lifecycle.core.session import Session
from podman_lifecycle.core.state import UnitSnapshot, UnitState
from podman_lifecycle.utils.logger import logger


def read_snapshot(
    session: Session,
    unit_id: str,
    error_cls: Type[LifecycleError] = InspectError,
) -> UnitSnapshot:
    """Fetch the current remote view of a unit."""
    if not unit_id:
        raise InvalidIdentityError("Unit identity is empty")
    with translate_remote_errors(error_cls, f"Failed to inspect unit {unit_id}", not_found=InvalidIdentityError):
        attrs = session.client.api.inspect_container(unit_id)
    return UnitSnapshot.from_inspect(attrs)


class StateObserver:
    """
    Blocks until a unit reaches a target state.

    The remote is polled every ``poll_interval`` seconds. Observing never
    changes the unit's state.
    """

    def __init__(self, session: Session, poll_interval: float = POLL_INTERVAL) -> None:
        self._session = session
        self._poll_interval = poll_interval

    def await_state(
        self,
        unit_id: str,
        target: UnitState,
        timeout: Optional[float] = None,
    ) -> UnitSnapshot:
        """
        Wait for ``unit_id`` to report ``target``.

        The remote is probed at least once, so a zero timeout checks the
        current state without waiting. ``timeout=None`` waits indefinitely.

        Returns:
            The snapshot in which the target state was observed.

        Raises:
            WaitTimeoutError: the deadline elapsed first.
            WaitError: the unit reached a terminal state other than ``target``
                or the remote reported a failure.
            InvalidIdentityError: the remote does not know the unit.
        """
        target = UnitState(target)
        deadline = None if timeout is None else time.monotonic() + max(timeout, 0)
        logger.info(f"Waiting for unit {unit_id} to be {target.value} (timeout: {timeout}s)")

        while True:
            snapshot = read_snapshot(self._session, unit_id, WaitError)
            if snapshot.state == target:
                logger.info(f"Unit {unit_id} is {target.value}")
                return snapshot
            if snapshot.state.is_terminal and not target.is_terminal:
                logger.error(f"Unit {unit_id} reached {snapshot.state.value} while waiting for {target.value}")
                raise WaitError(
                    f"Unit {unit_id} is {snapshot.state.value} (exit code {snapshot.exit_code}), "
                    f"it will not become {target.value}"
                )

            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.warning(f"Timed out waiting for unit {unit_id} to be {target.value}, last state {snapshot.state.value}")
                    raise WaitTimeoutError(
                        f"Unit {unit_id} did not become {target.value} within {timeout}s "
                        f"(last state: {snapshot.state.value})"
                    )
                time.sleep(min(self._poll_interval, remaining))
            else:
                time.sleep(self._poll_interval)


__all__ = ["StateObserver", "read_snapshot"]

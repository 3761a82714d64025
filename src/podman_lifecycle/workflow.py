"""
End-to-end lifecycle walk-through.

Pulls an image, creates a terminal-enabled unit from it, starts it, waits for
it to run, reports on it and stops it, printing progress as it goes. The
first failing stage aborts the run; the unit is left in place for the caller
to clean up.
"""

from __future__ import annotations

import sys
from typing import List, Optional, TextIO

from pydantic import BaseModel

from podman_lifecycle.config import POLL_INTERVAL, STOP_TIMEOUT, WAIT_TIMEOUT
from podman_lifecycle.core.images import ImageResolver, PullOptions
from podman_lifecycle.core.lifecycle import LifecycleController
from podman_lifecycle.core.session import Session
from podman_lifecycle.core.state import UnitSnapshot, UnitState
from podman_lifecycle.core.unit_spec import new_spec
from podman_lifecycle.utils.logger import logger


class WorkflowResult(BaseModel):
    unit_id: str
    image_tags: List[str]
    running: UnitSnapshot
    stopped: UnitSnapshot
    latest_name: Optional[str] = None


def run_workflow(
    session: Session,
    image: str,
    *,
    pull_options: Optional[PullOptions] = None,
    rootfs: bool = False,
    wait_timeout: Optional[float] = WAIT_TIMEOUT,
    stop_timeout: Optional[int] = STOP_TIMEOUT,
    poll_interval: Optional[float] = None,
    out: Optional[TextIO] = None,
) -> WorkflowResult:
    """
    Run every lifecycle stage in order against ``image``.

    With ``rootfs`` set, ``image`` is a root filesystem path on the remote
    host and the pull stage is skipped.
    """
    out = out or sys.stdout

    def echo(line: str) -> None:
        print(line, file=out)

    resolver = ImageResolver(session)
    controller = LifecycleController(
        session, poll_interval=POLL_INTERVAL if poll_interval is None else poll_interval
    )

    image_tags: List[str] = []
    if not rootfs:
        echo("Pulling image...")
        resolver.ensure_image(image, pull_options)

        image_tags = resolver.list_image_tags()
        echo(str(image_tags))

    spec = new_spec(image, rootfs=rootfs)
    spec.terminal = True
    unit_id = controller.create(spec)

    echo(f"Starting container {unit_id[:12]}...")
    controller.start(unit_id)
    running = controller.await_state(unit_id, UnitState.RUNNING, timeout=wait_timeout)

    latest = controller.latest_unit()
    latest_name = latest.name if latest else None
    if latest_name:
        echo(f"Latest container is {latest_name}")

    snapshot = controller.inspect(unit_id)
    echo(f"Container uses image {snapshot.image_name}")
    echo(f"Container running status is {snapshot.status}")

    echo("Stopping the container...")
    controller.stop(unit_id, timeout=stop_timeout)

    stopped = controller.inspect(unit_id)
    echo(f"Container running status is now {stopped.status}")
    logger.info(f"Workflow for {image} finished, unit {unit_id} is {stopped.state.value}")

    return WorkflowResult(
        unit_id=unit_id,
        image_tags=image_tags,
        running=running,
        stopped=stopped,
        latest_name=latest_name,
    )


__all__ = ["WorkflowResult", "run_workflow"]

from __future__ import annotations

from typing import Any, Dict, Optional

from docker.errors import create_api_error_from_http_exception
from docker.utils import parse_bytes
from requests.exceptions import HTTPError

from podman_lifecycle.config import POLL_INTERVAL, STOP_TIMEOUT
from podman_lifecycle.core.errors import (
    CreationError,
    InspectError,
    InvalidIdentityError,
    StartError,
    StopError,
    translate_remote_errors,
)
from podman_lifecycle.core.observer import StateObserver, read_snapshot
from podman_lifecycle.core.session import Session
from podman_lifecycle.core.state import UnitSnapshot, UnitState, UnitSummary
from podman_lifecycle.core.unit_spec import ImageSource, RootfsSource, UnitSpec, normalize_resources
from podman_lifecycle.utils.logger import logger

LIBPOD_API_VERSION = "v4.0.0"
CPU_PERIOD = 100_000


def _already_stopped(e: StopError) -> bool:
    text = str(e).lower()
    return "already stopped" in text or "is not running" in text


def _libpod_resource_limits(resources: Dict[str, Any]) -> Dict[str, Any]:
    limits: Dict[str, Any] = {}
    if "mem_limit" in resources:
        limits["memory"] = {"limit": parse_bytes(resources["mem_limit"])}
    if "nano_cpus" in resources:
        limits["cpu"] = {
            "quota": resources["nano_cpus"] * CPU_PERIOD // 1_000_000_000,
            "period": CPU_PERIOD,
        }
    return limits


class LifecycleController:
    """
    Drives create, start, wait, inspect and stop for units on one session.

    The controller keeps no state of its own: every call goes to the remote
    service, errors are raised to the caller unchanged in kind, and nothing is
    retried or rolled back.
    """

    def __init__(self, session: Session, poll_interval: float = POLL_INTERVAL) -> None:
        self._session = session
        self._observer = StateObserver(session, poll_interval=poll_interval)

    # ---------- create ----------

    def create(self, spec: UnitSpec) -> str:
        """
        Create a unit from ``spec`` and return its identity.

        The spec is frozen from this point on. A failure leaves no identity
        allocated.
        """
        spec.mark_submitted()
        if isinstance(spec.source, RootfsSource):
            unit_id = self._create_from_rootfs(spec, spec.source)
        else:
            unit_id = self._create_from_image(spec, spec.source)
        logger.info(f"Unit created: {unit_id}")
        return unit_id

    def _create_from_image(self, spec: UnitSpec, source: ImageSource) -> str:
        logger.info(f"Creating new unit from image: {source.reference}")
        kwargs: Dict[str, Any] = {
            "tty": spec.terminal,
            "labels": spec.all_labels(),
        }
        if spec.name:
            kwargs["name"] = spec.name
        if spec.env:
            kwargs["environment"] = dict(spec.env)
        if spec.command:
            kwargs["command"] = list(spec.command)
        kwargs.update(normalize_resources(spec.resources))
        kwargs.update(spec.overrides)
        logger.debug(f"Create kwargs: {kwargs}")

        try:
            with translate_remote_errors(CreationError, f"Failed to create unit from {source.reference}"):
                try:
                    container = self._session.client.containers.create(source.reference, **kwargs)
                except TypeError as e:
                    # unknown override keys are rejected by the client before any request
                    raise CreationError(f"Invalid creation option for {source.reference}: {e}") from e
        except CreationError as e:
            logger.error(str(e))
            raise
        return container.id

    def _create_from_rootfs(self, spec: UnitSpec, source: RootfsSource) -> str:
        logger.info(f"Creating new unit from rootfs: {source.path} (overlay: {source.overlay})")
        payload: Dict[str, Any] = {
            "rootfs": source.path,
            "rootfs_overlay": source.overlay,
            "terminal": spec.terminal,
            "labels": spec.all_labels(),
        }
        if spec.name:
            payload["name"] = spec.name
        if spec.env:
            payload["env"] = dict(spec.env)
        if spec.command:
            payload["command"] = list(spec.command)
        limits = _libpod_resource_limits(normalize_resources(spec.resources))
        if limits:
            payload["resource_limits"] = limits
        payload.update(spec.overrides)
        logger.debug(f"Create payload: {payload}")

        api = self._session.client.api
        url = f"{api.base_url}/{LIBPOD_API_VERSION}/libpod/containers/create"
        try:
            with translate_remote_errors(CreationError, f"Failed to create unit from rootfs {source.path}"):
                try:
                    response = api.post(url, json=payload, timeout=api.timeout)
                except TypeError as e:
                    raise CreationError(f"Invalid creation option for rootfs {source.path}: {e}") from e
                try:
                    response.raise_for_status()
                except HTTPError as e:
                    create_api_error_from_http_exception(e)
                body = response.json()
        except CreationError as e:
            logger.error(str(e))
            raise
        unit_id = body.get("Id") if isinstance(body, dict) else None
        if not unit_id:
            raise CreationError(f"Remote returned no identity for rootfs {source.path}: {body!r}")
        return unit_id

    # ---------- start / stop ----------

    def start(self, unit_id: str) -> None:
        """
        Start a created or stopped unit.

        Starting an already running unit is left to the remote; callers must
        not assume a repeated start is free of side effects.
        """
        if not unit_id:
            raise InvalidIdentityError("Unit identity is empty")
        logger.info(f"Starting unit: {unit_id}")
        try:
            with translate_remote_errors(StartError, f"Failed to start unit {unit_id}", not_found=InvalidIdentityError):
                self._session.client.api.start(unit_id)
        except StartError as e:
            logger.error(str(e))
            raise
        logger.info(f"Unit {unit_id} started")

    def stop(self, unit_id: str, timeout: Optional[int] = STOP_TIMEOUT) -> None:
        """Stop a running unit. An already stopped unit is not an error."""
        if not unit_id:
            raise InvalidIdentityError("Unit identity is empty")
        logger.info(f"Stopping unit: {unit_id} (timeout: {timeout}s)")
        try:
            with translate_remote_errors(StopError, f"Failed to stop unit {unit_id}", not_found=InvalidIdentityError):
                self._session.client.api.stop(unit_id, timeout=timeout)
        except StopError as e:
            if not isinstance(e, InvalidIdentityError) and _already_stopped(e):
                logger.warning(f"Unit {unit_id} was already stopped")
                return
            logger.error(str(e))
            raise
        logger.info(f"Unit {unit_id} stopped")

    # ---------- observation ----------

    def await_state(
        self,
        unit_id: str,
        target: UnitState,
        timeout: Optional[float] = None,
    ) -> UnitSnapshot:
        return self._observer.await_state(unit_id, target, timeout=timeout)

    def inspect(self, unit_id: str) -> UnitSnapshot:
        snapshot = read_snapshot(self._session, unit_id, InspectError)
        logger.debug(f"Unit {unit_id}: image={snapshot.image_name} state={snapshot.state.value}")
        return snapshot

    def latest_unit(self) -> Optional[UnitSummary]:
        """The most recently created unit, or None when there are none."""
        with translate_remote_errors(InspectError, "Failed to list units"):
            rows = self._session.client.api.containers(all=True, latest=True)
        if not rows:
            return None
        return UnitSummary.from_listing(rows[0])


__all__ = ["LifecycleController"]

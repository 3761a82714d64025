"""
Unit tests for the lifecycle controller against the fake remote.
"""

import pytest
from docker.errors import APIError

from podman_lifecycle.core.errors import (
    CreationError,
    InspectError,
    InvalidIdentityError,
    SessionConnectionError,
    SpecSubmittedError,
    StartError,
    StopError,
)
from podman_lifecycle.core.lifecycle import LifecycleController
from podman_lifecycle.core.state import UnitState
from podman_lifecycle.core.unit_spec import LABEL_KEY, new_spec
from tests.fixtures.fake_podman import make_response

IMAGE = "example/base:latest"


@pytest.fixture
def controller(session, remote):
    remote.images.add(IMAGE)
    return LifecycleController(session, poll_interval=0)


@pytest.fixture
def unit_id(controller):
    spec = new_spec(IMAGE)
    spec.terminal = True
    return controller.create(spec)


class TestCreate:
    """Unit creation."""

    def test_create_returns_remote_identity(self, controller, remote):
        spec = new_spec(IMAGE)
        spec.terminal = True
        spec.name = "walkthrough"
        spec.env = {"MODE": "test"}
        spec.resources = {"memory": "64m", "cpu": "0.5"}

        unit_id = controller.create(spec)

        assert unit_id in remote.units
        call = remote.create_calls[0]
        assert call["image"] == IMAGE
        assert call["tty"] is True
        assert call["name"] == "walkthrough"
        assert call["environment"] == {"MODE": "test"}
        assert call["mem_limit"] == "64m"
        assert call["nano_cpus"] == 500_000_000
        assert call["labels"][LABEL_KEY] == "podman-lifecycle"

    def test_new_unit_is_created_not_running(self, controller, unit_id):
        assert controller.inspect(unit_id).state == UnitState.CREATED

    def test_overrides_are_passed_through(self, controller, remote):
        spec = new_spec(IMAGE)
        spec.overrides = {"working_dir": "/srv", "user": "1000"}
        controller.create(spec)

        call = remote.create_calls[0]
        assert call["working_dir"] == "/srv"
        assert call["user"] == "1000"

    def test_command_override_wins(self, controller, remote):
        spec = new_spec(IMAGE)
        spec.command = ["/bin/sh"]
        spec.overrides = {"command": ["sleep", "60"]}
        controller.create(spec)

        assert remote.create_calls[0]["command"] == ["sleep", "60"]

    def test_unset_command_is_left_to_the_image(self, controller, remote):
        controller.create(new_spec(IMAGE))

        assert remote.create_calls[0]["command"] is None

    def test_unknown_override_is_a_creation_error(self, controller, remote):
        spec = new_spec(IMAGE)
        spec.overrides = {"bogus_option": 1}

        with pytest.raises(CreationError, match="bogus_option") as exc_info:
            controller.create(spec)
        assert isinstance(exc_info.value.__cause__, TypeError)
        assert remote.units == {}

    def test_unserializable_rootfs_override_is_a_creation_error(self, controller, remote):
        spec = new_spec("/var/lib/rootfs/fedora", rootfs=True)
        spec.overrides = {"hostname": object()}

        with pytest.raises(CreationError):
            controller.create(spec)
        assert remote.units == {}

    def test_missing_image_allocates_nothing(self, controller, remote):
        with pytest.raises(CreationError, match="example/absent:1.0"):
            controller.create(new_spec("example/absent:1.0"))
        assert remote.units == {}

    def test_spec_is_frozen_once_submitted(self, controller):
        spec = new_spec(IMAGE)
        controller.create(spec)

        assert spec.submitted
        with pytest.raises(SpecSubmittedError):
            spec.terminal = True
        with pytest.raises(SpecSubmittedError):
            spec.env["LATE"] = "1"

    def test_create_from_rootfs_uses_libpod(self, controller, remote):
        spec = new_spec("/var/lib/rootfs/fedora", rootfs=True)
        spec.terminal = True
        spec.command = ["/bin/sh"]
        spec.resources = {"memory": "128m", "cpus": "0.5"}

        unit_id = controller.create(spec)

        assert unit_id in remote.units
        post = remote.post_calls[0]
        assert post["url"].endswith("/v4.0.0/libpod/containers/create")
        assert post["json"]["rootfs"] == "/var/lib/rootfs/fedora"
        assert post["json"]["terminal"] is True
        assert post["json"]["command"] == ["/bin/sh"]
        assert post["json"]["resource_limits"] == {
            "memory": {"limit": 128 * 1024 * 1024},
            "cpu": {"quota": 50_000, "period": 100_000},
        }

    def test_rootfs_unsupported_by_remote(self, controller, remote):
        remote.libpod = False

        with pytest.raises(CreationError) as exc_info:
            controller.create(new_spec("/var/lib/rootfs/fedora", rootfs=True))
        assert exc_info.value.status_code == 404
        assert remote.units == {}


class TestStart:
    """Starting units."""

    def test_start_runs_unit(self, controller, unit_id):
        controller.start(unit_id)
        assert controller.inspect(unit_id).state == UnitState.RUNNING

    def test_start_before_create_fails(self, controller):
        never_created = "f" * 64
        with pytest.raises(InvalidIdentityError) as exc_info:
            controller.start(never_created)
        assert isinstance(exc_info.value, StartError)

    def test_start_with_empty_identity(self, controller, remote):
        with pytest.raises(InvalidIdentityError):
            controller.start("")
        assert remote.start_calls == []

    def test_transport_failure_during_start(self, controller, remote, unit_id):
        remote.transport_down = True
        with pytest.raises(SessionConnectionError):
            controller.start(unit_id)

    def test_start_is_not_retried(self, controller, remote, unit_id, monkeypatch, fake_client):
        def broken(container):
            remote.start_calls.append(container)
            raise APIError("boom", response=make_response(500), explanation="crun: permission denied")

        monkeypatch.setattr(fake_client.api, "start", broken)
        with pytest.raises(StartError, match="permission denied"):
            controller.start(unit_id)
        assert remote.start_calls == [unit_id]
        # No rollback: the created unit is left in place
        assert unit_id in remote.units


class TestInspect:
    """Inspecting units."""

    def test_inspect_reports_creation_image(self, controller, unit_id):
        controller.start(unit_id)
        snapshot = controller.inspect(unit_id)

        assert snapshot.id == unit_id
        assert snapshot.image_name == IMAGE
        assert snapshot.state == UnitState.RUNNING
        assert snapshot.status == "running"
        assert snapshot.name == "unit_1"

    def test_inspect_unknown_identity(self, controller):
        with pytest.raises(InspectError):
            controller.inspect("0" * 64)

    def test_state_is_never_cached(self, controller, remote, unit_id):
        before = remote.inspect_calls
        controller.inspect(unit_id)
        controller.inspect(unit_id)
        assert remote.inspect_calls == before + 2

    def test_latest_unit(self, controller):
        assert controller.latest_unit() is None

        controller.create(new_spec(IMAGE))
        spec = new_spec(IMAGE)
        spec.name = "newest"
        controller.create(spec)

        latest = controller.latest_unit()
        assert latest.name == "newest"
        assert latest.state == UnitState.CREATED


class TestStop:
    """Stopping units."""

    def test_stop_reports_terminal_state(self, controller, remote, unit_id):
        controller.start(unit_id)
        assert controller.inspect(unit_id).state == UnitState.RUNNING

        controller.stop(unit_id, timeout=3)

        snapshot = controller.inspect(unit_id)
        assert snapshot.state == UnitState.EXITED
        assert snapshot.state.is_terminal
        assert remote.stop_calls == [(unit_id, 3)]

    def test_stopping_twice_is_tolerated(self, controller, unit_id):
        controller.start(unit_id)
        controller.stop(unit_id)
        controller.stop(unit_id)
        assert controller.inspect(unit_id).state == UnitState.EXITED

    @pytest.mark.parametrize("status,explanation", [
        (409, "container abc is already stopped"),
        (500, "can only stop running containers: abc is not running"),
    ])
    def test_already_stopped_response_is_tolerated(self, controller, remote, unit_id, status, explanation):
        remote.stop_error = APIError("stop", response=make_response(status), explanation=explanation)
        controller.stop(unit_id)

    def test_other_stop_failures_surface(self, controller, remote, unit_id):
        remote.stop_error = APIError("stop", response=make_response(500), explanation="timed out killing process")
        with pytest.raises(StopError, match="timed out killing process"):
            controller.stop(unit_id)

    def test_stop_unknown_identity(self, controller):
        with pytest.raises(InvalidIdentityError) as exc_info:
            controller.stop("0" * 64)
        assert isinstance(exc_info.value, StopError)

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class UnitState(str, Enum):
    """Lifecycle phase reported by the remote service."""

    CREATED = "created"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"
    EXITED = "exited"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "UnitState":
        value = (raw or "").strip().lower()
        value = _STATUS_ALIASES.get(value, value)
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (UnitState.EXITED, UnitState.STOPPED)


# libpod and Docker spell a few phases differently
_STATUS_ALIASES = {
    "configured": "created",
    "restarting": "running",
    "dead": "exited",
}


class UnitSnapshot(BaseModel):
    """Point-in-time view of a unit, always fetched fresh."""

    id: str
    name: str = ""
    image_name: str = ""
    state: UnitState = UnitState.UNKNOWN
    status: str = ""
    exit_code: Optional[int] = None
    started_at: Optional[str] = None
    finished_at: Optional[str] = None

    @classmethod
    def from_inspect(cls, attrs: Dict[str, Any]) -> "UnitSnapshot":
        state = attrs.get("State") or {}
        if isinstance(state, str):
            # Some engines report a bare status string
            state = {"Status": state}
        config = attrs.get("Config") or {}
        status = state.get("Status") or ""
        return cls(
            id=attrs.get("Id") or attrs.get("ID") or "",
            name=(attrs.get("Name") or "").lstrip("/"),
            image_name=attrs.get("ImageName") or config.get("Image") or attrs.get("Image") or "",
            state=UnitState.parse(status),
            status=status,
            exit_code=state.get("ExitCode"),
            started_at=state.get("StartedAt"),
            finished_at=state.get("FinishedAt"),
        )


class UnitSummary(BaseModel):
    """One row of a unit listing."""

    id: str
    names: List[str] = Field(default_factory=list)
    image: str = ""
    state: UnitState = UnitState.UNKNOWN
    status: str = ""

    @property
    def name(self) -> str:
        return self.names[0] if self.names else ""

    @classmethod
    def from_listing(cls, row: Dict[str, Any]) -> "UnitSummary":
        return cls(
            id=row.get("Id") or row.get("ID") or "",
            names=[n.lstrip("/") for n in (row.get("Names") or [])],
            image=row.get("Image") or "",
            state=UnitState.parse(row.get("State")),
            status=row.get("Status") or "",
        )


__all__ = ["UnitSnapshot", "UnitState", "UnitSummary"]

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SessionState(str, Enum):
    idle = "idle"
    fetching = "fetching"
    done = "done"


class SessionOutcome(str, Enum):
    attached_desktop = "attached_desktop"
    attached_immersive = "attached_immersive"
    transport_error = "transport_error"
    http_error = "http_error"
    decode_error = "decode_error"
    empty_scene = "empty_scene"
    rig_missing = "rig_missing"
    pipeline_error = "pipeline_error"


class EnvironmentMode(str, Enum):
    desktop = "desktop"
    immersive = "immersive"


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

class LoadRequest(BaseModel):
    """Start a load session. An empty ``url`` falls back to the sample asset."""

    url: str | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("url", mode="after")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        return value.strip() if value else value


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

class SessionView(BaseModel):
    id: str
    address: str
    state: SessionState
    outcome: SessionOutcome | None = None
    mode: EnvironmentMode | None = None
    detail: str = ""
    attached_under: str | None = None
    started_at: datetime
    finished_at: datetime | None = None


class SessionAccepted(BaseModel):
    session_id: str
    address: str
    state: SessionState = SessionState.fetching
    status_url: str = "/sessions/current"


class SceneNodeView(BaseModel):
    name: str
    type: str
    position: list[float]
    scale: list[float]
    vertices: int | None = None
    faces: int | None = None
    children: list["SceneNodeView"] = Field(default_factory=list)
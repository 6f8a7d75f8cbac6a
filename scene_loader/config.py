from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SERVICE_ROOT = Path(__file__).resolve().parents[1]

load_dotenv(SERVICE_ROOT / ".env", override=False)

# Khronos Group glTF sample model
DEFAULT_ASSET_URL = (
    "https://raw.githubusercontent.com/KhronosGroup/glTF-Sample-Models/"
    "master/2.0/Duck/glTF-Binary/Duck.glb"
)


class LoaderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SCENE_LOADER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    service_name: str = "scene-loader-service"
    host: str = "0.0.0.0"
    port: int = 8110
    log_level: str = "INFO"

    # Asset source
    default_asset_url: str = DEFAULT_ASSET_URL
    asset_file_type: str = "glb"

    # Storage (auxiliary references declared by the asset resolve from here)
    storage_dir: Path = Field(default_factory=lambda: SERVICE_ROOT / "data")
    remote_assets_subdir: str = "remote_assets"

    # Tick loop
    tick_rate_hz: float = Field(default=60.0, ge=1.0, le=1000.0)

    # Sessions
    autoload_on_start: bool = False
    session_wait_timeout_seconds: int = Field(default=120, ge=1, le=3600)

    # Desktop rig
    desktop_forward_speed: float = Field(default=3.0, gt=0.0, le=100.0)
    desktop_turn_speed: float = Field(default=1.5, gt=0.0, le=100.0)

    # Immersive rig
    immersive_asset_offset: float = Field(default=2.0, ge=0.0, le=100.0)
    xr_interface_name: str = "OpenXR"
    xr_rig_name: str = "XROrigin3D"
    xr_interface_available: bool = False
    immersive_move_speed: float = Field(default=3.0, gt=0.0, le=100.0)
    immersive_smooth_turn_speed: float = Field(default=2.0, gt=0.0, le=100.0)
    immersive_teleport_distance: float = Field(default=5.0, gt=0.0, le=1000.0)
    stick_deadzone: float = Field(default=0.1, ge=0.0, lt=1.0)

    # Auth
    api_key: str | None = None

    @field_validator("asset_file_type", mode="after")
    @classmethod
    def _lower_file_type(cls, value: str) -> str:
        return value.strip().lower().lstrip(".")

    @property
    def base_resolution_path(self) -> Path:
        return self.storage_dir / self.remote_assets_subdir


settings = LoaderSettings()

"""
Loader host: owns the scene tree and drives it.

Provides:
  - Main scene assembly (reference world, XR rig + immersive controller,
    scene composer)
  - The cooperative tick loop as a background asyncio task
  - Session start / get / wait operations for the API and CLI
"""

from __future__ import annotations

import asyncio
import logging

from engine.scene import Node3D
from engine.tree import SceneTree
from engine.world_builder import WorldBuilder
from engine.xr import XRInterface, create_xr_rig

from .config import LoaderSettings
from .core.composer import SceneComposer, SessionRecord
from .core.fetcher import AssetFetcher
from .core.immersive_controller import ImmersiveLocomotionController

logger = logging.getLogger(__name__)


def build_main_scene(settings: LoaderSettings, fetcher: AssetFetcher | None = None) -> tuple[Node3D, SceneComposer]:
    main = Node3D("Main")
    main.add_child(WorldBuilder())
    main.add_child(create_xr_rig(settings.xr_rig_name))
    main.add_child(
        ImmersiveLocomotionController(
            move_speed=settings.immersive_move_speed,
            smooth_turn_speed=settings.immersive_smooth_turn_speed,
            teleport_max_distance=settings.immersive_teleport_distance,
            deadzone=settings.stick_deadzone,
            interface_name=settings.xr_interface_name,
            rig_name=settings.xr_rig_name,
        )
    )
    composer = SceneComposer(settings, fetcher=fetcher, autostart=settings.autoload_on_start)
    main.add_child(composer)
    return main, composer


class LoaderHost:
    def __init__(self, settings: LoaderSettings, fetcher: AssetFetcher | None = None):
        self.settings = settings
        self.tree = SceneTree()
        self.tree.xr_server.add_interface(
            XRInterface(settings.xr_interface_name, available=settings.xr_interface_available)
        )
        self.main_scene, self.composer = build_main_scene(settings, fetcher)
        self._stop = asyncio.Event()
        self._loop_task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    async def startup(self) -> None:
        self.settings.base_resolution_path.mkdir(parents=True, exist_ok=True)
        self._stop.clear()
        # entering the tree readies nodes; autoload needs the running loop
        self.tree.change_scene(self.main_scene)
        self._loop_task = asyncio.create_task(
            self.tree.run(self.settings.tick_rate_hz, stop_event=self._stop),
            name="scene-tick-loop",
        )
        logger.info("loader_host_started tick_rate_hz=%s", self.settings.tick_rate_hz)

    async def shutdown(self) -> None:
        self._stop.set()
        if self._loop_task:
            await asyncio.gather(self._loop_task, return_exceptions=True)
            self._loop_task = None
        await self.tree.shutdown()
        logger.info("loader_host_stopped frames=%d", self.tree.frames)

    def start_session(self, address: str | None = None) -> SessionRecord:
        return self.composer.on_session_start(address or "")

    def get_session(self) -> SessionRecord:
        record = self.composer.session
        if record is None:
            raise KeyError("No load session has been started")
        return record

    async def wait_for_completion(self, timeout_seconds: float | None = None) -> SessionRecord:
        timeout = timeout_seconds or self.settings.session_wait_timeout_seconds
        return await self.composer.wait_for_completion(timeout)

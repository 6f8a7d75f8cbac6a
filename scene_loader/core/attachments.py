"""
Where a normalized asset ends up, per environment mode.

Both variants share one capability, "accept a child asset, expose a movable
frame", and nothing else:

  - ``DesktopAttachment`` builds and owns a fresh desktop controller
  - ``ImmersiveAttachment`` borrows the host's existing XR rig by name
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from engine.scene import Node3D

from ..errors import RigNotFoundError
from .desktop_controller import DesktopLocomotionController

logger = logging.getLogger(__name__)


class AssetAttachment(Protocol):
    def attach(self, asset_root: Node3D) -> Node3D:
        """Attach ``asset_root`` and return the frame that moves it."""
        ...


@dataclass
class DesktopAttachment:
    parent: Node3D
    forward_speed: float = 3.0
    turn_speed: float = 1.5

    def attach(self, asset_root: Node3D) -> Node3D:
        controller = DesktopLocomotionController(
            forward_speed=self.forward_speed,
            turn_speed=self.turn_speed,
        )
        controller.add_child(asset_root)
        self.parent.add_child(controller)
        logger.info("asset_attached mode=desktop controller=%s", controller.name)
        return controller


@dataclass
class ImmersiveAttachment:
    scene_root: Node3D
    rig_name: str = "XROrigin3D"
    forward_offset: float = 2.0

    def resolve_rig(self) -> Node3D:
        if self.scene_root.name == self.rig_name:
            return self.scene_root
        rig = self.scene_root.find_child(self.rig_name)
        if rig is None:
            raise RigNotFoundError(f"immersive rig '{self.rig_name}' not found in scene")
        return rig

    def attach(self, asset_root: Node3D) -> Node3D:
        rig = self.resolve_rig()
        # in front of the player: forward is -Z in rig space
        asset_root.position = (0.0, 0.0, -self.forward_offset)
        rig.add_child(asset_root)
        logger.info("asset_attached mode=immersive rig=%s", rig.name)
        return rig

"""
Motion-controller locomotion for a head-mounted playspace rig.

The controller is a sibling of the rig, never its owner.  The rig origin,
camera and hand controllers are looked up by name on every tick; a node
that is missing just skips the action that needed it.

Two phases:
  1. ``_ready``: bring up the XR interface once.  Failure leaves the
     controller inert; desktop fallback happens through environment
     detection, not here.
  2. ``_physics_process``: stick locomotion, smooth turn and teleport,
     only while the interface is still initialized.
"""

from __future__ import annotations

import logging
import weakref

import numpy as np

from engine.scene import Node3D
from engine.xr import XRController3D, XRInterface

from ..errors import ImmersiveInitError

logger = logging.getLogger(__name__)


def _horizontal(vector: np.ndarray) -> np.ndarray | None:
    flat = np.array([vector[0], 0.0, vector[2]])
    length = np.linalg.norm(flat)
    if length == 0.0:
        return None
    return flat / length


class ImmersiveLocomotionController(Node3D):
    def __init__(
        self,
        name: str = "ImmersiveController",
        move_speed: float = 3.0,
        smooth_turn_speed: float = 2.0,
        teleport_max_distance: float = 5.0,
        deadzone: float = 0.1,
        interface_name: str = "OpenXR",
        rig_name: str = "XROrigin3D",
        camera_name: str = "XRCamera3D",
        left_hand: str = "LeftHand",
        right_hand: str = "RightHand",
        stick_input: str = "move",
        teleport_button: str = "select",
    ):
        super().__init__(name)
        self.move_speed = move_speed
        self.smooth_turn_speed = smooth_turn_speed
        self.teleport_max_distance = teleport_max_distance
        self.deadzone = deadzone
        self.interface_name = interface_name
        self.rig_name = rig_name
        self.camera_name = camera_name
        self.left_hand = left_hand
        self.right_hand = right_hand
        self.stick_input = stick_input
        self.teleport_button = teleport_button

        self._interface_ref: weakref.ref[XRInterface] | None = None
        self._select_was_pressed = False

    def set_speed(self, speed: float) -> None:
        self.move_speed = speed

    def set_smooth_turn_speed(self, turn_speed: float) -> None:
        self.smooth_turn_speed = turn_speed

    def set_teleport_distance(self, distance: float) -> None:
        self.teleport_max_distance = distance

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    @property
    def interface(self) -> XRInterface | None:
        return self._interface_ref() if self._interface_ref is not None else None

    @property
    def active(self) -> bool:
        interface = self.interface
        return interface is not None and interface.is_initialized()

    def _ready(self) -> None:
        try:
            self.initialize_interface()
        except ImmersiveInitError as exc:
            logger.warning("xr_init_failed reason=%s, falling back to desktop mode", exc)
        logger.info("immersive_controller_ready active=%s", self.active)

    def initialize_interface(self) -> XRInterface:
        tree = self.tree
        if tree is None:
            raise ImmersiveInitError("controller is not inside a scene tree")

        xr_server = tree.xr_server
        interface = xr_server.find_interface(self.interface_name)
        if interface is None:
            raise ImmersiveInitError(f"{self.interface_name} interface not found")

        if not interface.initialize():
            raise ImmersiveInitError(f"{self.interface_name} interface failed to initialize")

        xr_server.set_primary_interface(interface)
        self._interface_ref = weakref.ref(interface)
        logger.info("xr_interface_initialized name=%s", interface.name)
        return interface

    # ------------------------------------------------------------------
    # Lookups (fresh every tick)
    # ------------------------------------------------------------------

    def _rig_origin(self) -> Node3D | None:
        tree = self.tree
        if tree is None or tree.current_scene is None:
            return None
        if tree.current_scene.name == self.rig_name:
            return tree.current_scene
        return tree.current_scene.find_child(self.rig_name)

    def _hand(self, origin: Node3D, name: str) -> XRController3D | None:
        node = origin.find_child(name)
        return node if isinstance(node, XRController3D) else None

    def _stick(self, origin: Node3D, hand: str) -> np.ndarray:
        controller = self._hand(origin, hand)
        if controller is None:
            return np.zeros(2)
        return controller.get_vector2(self.stick_input)

    # ------------------------------------------------------------------
    # Per tick
    # ------------------------------------------------------------------

    def _physics_process(self, delta: float) -> None:
        if not self.active:
            return
        origin = self._rig_origin()
        if origin is None:
            self._select_was_pressed = False
            return
        self.handle_movement(origin, delta)
        self.handle_teleportation(origin)

    def handle_movement(self, origin: Node3D, delta: float) -> None:
        left_stick = self._stick(origin, self.left_hand)
        right_stick = self._stick(origin, self.right_hand)

        magnitude = float(np.linalg.norm(left_stick))
        if magnitude > self.deadzone:
            camera = origin.find_child(self.camera_name)
            if camera is not None:
                basis = camera.global_transform
                forward = _horizontal(-basis.z_axis)
                right = _horizontal(basis.x_axis)
                if forward is not None and right is not None:
                    direction = forward * left_stick[1] + right * left_stick[0]
                    step = self.move_speed * magnitude * delta
                    origin.position = origin.position + direction * step

        if abs(right_stick[0]) > self.deadzone:
            origin.rotate_y(-right_stick[0] * self.smooth_turn_speed * delta)

    def handle_teleportation(self, origin: Node3D) -> None:
        controller = self._hand(origin, self.right_hand)
        pressed = controller is not None and controller.is_button_pressed(self.teleport_button)
        rising = pressed and not self._select_was_pressed
        self._select_was_pressed = pressed
        if not rising:
            return

        transform = controller.global_transform
        direction = -transform.z_axis
        length = np.linalg.norm(direction)
        if length == 0.0:
            return
        target = transform.origin + direction / length * self.teleport_max_distance

        position = origin.position
        position[0] = target[0]
        position[2] = target[2]
        origin.position = position
        logger.info("teleported target=%s", np.round(position, 4).tolist())

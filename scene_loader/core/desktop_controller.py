"""
Keyboard-driven desktop rig.

Moves on the controller's own local axes (forward = -Z, right = +X) and
yaws in place; a follow camera sits behind and above it.  No collision.
"""

from __future__ import annotations

import logging

import numpy as np

from engine.scene import Camera3D, Node3D

logger = logging.getLogger(__name__)

MOVE_FORWARD = "move_forward"
MOVE_BACKWARD = "move_backward"
MOVE_LEFT = "move_left"
MOVE_RIGHT = "move_right"
ROTATE_LEFT = "rotate_left"
ROTATE_RIGHT = "rotate_right"


class DesktopLocomotionController(Node3D):
    def __init__(
        self,
        name: str = "DesktopController",
        forward_speed: float = 5.0,
        turn_speed: float = 2.0,
        camera_distance: float = 10.0,
        camera_height: float = 5.0,
        camera_pitch: float = -0.3,
    ):
        super().__init__(name)
        self.forward_speed = forward_speed
        self.turn_speed = turn_speed
        self.camera_distance = camera_distance
        self.camera_height = camera_height
        self.camera_pitch = camera_pitch
        self.yaw = 0.0
        self.camera: Camera3D | None = None

    def set_speed(self, speed: float) -> None:
        self.forward_speed = speed

    def set_rotation_speed(self, rotation_speed: float) -> None:
        self.turn_speed = rotation_speed

    def _ready(self) -> None:
        camera = Camera3D("FollowCamera")
        camera.position = (0.0, self.camera_height, self.camera_distance)
        camera.rotate_x(self.camera_pitch)
        self.add_child(camera)
        camera.make_current()
        self.camera = camera
        logger.info("follow_camera_attached controller=%s", self.name)

    def _physics_process(self, delta: float) -> None:
        tree = self.tree
        if tree is None:
            return
        actions = tree.input

        # (right, forward) intent; forward is -Z
        movement = np.zeros(2)
        if actions.is_action_pressed(MOVE_FORWARD):
            movement[1] -= 1.0
        if actions.is_action_pressed(MOVE_BACKWARD):
            movement[1] += 1.0
        if actions.is_action_pressed(MOVE_LEFT):
            movement[0] -= 1.0
        if actions.is_action_pressed(MOVE_RIGHT):
            movement[0] += 1.0

        rotation_input = 0.0
        if actions.is_action_pressed(ROTATE_LEFT):
            rotation_input -= 1.0
        if actions.is_action_pressed(ROTATE_RIGHT):
            rotation_input += 1.0

        length = float(np.linalg.norm(movement))
        if length > 0.0:
            movement = movement / length * self.forward_speed * delta
            right = self.transform.x_axis
            forward = self.transform.z_axis
            self.position = self.position + forward * movement[1] + right * movement[0]

        if rotation_input != 0.0:
            amount = rotation_input * self.turn_speed * delta
            self.rotate_y(amount)
            self.yaw += amount

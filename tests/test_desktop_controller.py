import math
import unittest

import numpy as np

from engine.scene import rotation_about_y
from engine.tree import SceneTree
from scene_loader.core.desktop_controller import (
    MOVE_FORWARD,
    MOVE_LEFT,
    MOVE_RIGHT,
    ROTATE_RIGHT,
    DesktopLocomotionController,
)


class TestDesktopLocomotionController(unittest.TestCase):
    def setUp(self):
        self.tree = SceneTree()
        self.controller = DesktopLocomotionController(forward_speed=3.0, turn_speed=1.5)
        self.tree.change_scene(self.controller)

    def test_forward_moves_along_world_forward(self):
        self.tree.input.press(MOVE_FORWARD)
        self.tree.process_frame(1.0)

        np.testing.assert_allclose(self.controller.position, [0.0, 0.0, -3.0])
        np.testing.assert_allclose(self.controller.transform.basis, np.eye(3))
        self.assertEqual(self.controller.yaw, 0.0)

    def test_diagonal_is_normalized(self):
        self.tree.input.press(MOVE_FORWARD)
        self.tree.input.press(MOVE_RIGHT)
        self.tree.process_frame(1.0)

        self.assertAlmostEqual(float(np.linalg.norm(self.controller.position)), 3.0)
        self.assertGreater(self.controller.position[0], 0.0)
        self.assertLess(self.controller.position[2], 0.0)

    def test_opposing_keys_cancel(self):
        self.tree.input.press(MOVE_LEFT)
        self.tree.input.press(MOVE_RIGHT)
        self.tree.process_frame(1.0)
        np.testing.assert_allclose(self.controller.position, [0.0, 0.0, 0.0])

    def test_rotation_accumulates_yaw(self):
        self.tree.input.press(ROTATE_RIGHT)
        self.tree.process_frame(1.0)

        self.assertAlmostEqual(self.controller.yaw, 1.5)
        np.testing.assert_allclose(self.controller.transform.basis, rotation_about_y(1.5), atol=1e-12)
        np.testing.assert_allclose(self.controller.position, [0.0, 0.0, 0.0])

    def test_movement_follows_current_heading(self):
        self.controller.rotate_y(math.pi / 2)
        self.tree.input.press(MOVE_FORWARD)
        self.tree.process_frame(1.0)

        # local -Z after a quarter turn about +Y is world -X
        np.testing.assert_allclose(self.controller.position, [-3.0, 0.0, 0.0], atol=1e-12)

    def test_idle_tick_changes_nothing(self):
        self.tree.process_frame(1.0)
        np.testing.assert_allclose(self.controller.position, [0.0, 0.0, 0.0])
        self.assertEqual(self.controller.yaw, 0.0)

    def test_follow_camera_is_current(self):
        camera = self.controller.camera
        self.assertIsNotNone(camera)
        self.assertIs(self.controller.find_child("FollowCamera"), camera)
        self.assertTrue(camera.current)
        np.testing.assert_allclose(camera.position, [0.0, 5.0, 10.0])

    def test_setters(self):
        self.controller.set_speed(7.0)
        self.controller.set_rotation_speed(0.5)
        self.assertEqual(self.controller.forward_speed, 7.0)
        self.assertEqual(self.controller.turn_speed, 0.5)


if __name__ == "__main__":
    unittest.main()

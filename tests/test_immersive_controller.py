import math
import unittest

import numpy as np

from engine.scene import Node3D, rotation_about_y
from engine.tree import SceneTree
from engine.xr import XRInterface, create_xr_rig
from scene_loader.core.immersive_controller import ImmersiveLocomotionController


def _build(available=True, register=True):
    tree = SceneTree()
    interface = XRInterface("OpenXR", available=available)
    if register:
        tree.xr_server.add_interface(interface)
    main = Node3D("Main")
    rig = create_xr_rig("XROrigin3D")
    main.add_child(rig)
    controller = ImmersiveLocomotionController(teleport_max_distance=5.0)
    main.add_child(controller)
    tree.change_scene(main)
    return tree, rig, controller, interface


class TestImmersiveInitialization(unittest.TestCase):
    def test_successful_init_becomes_primary(self):
        tree, _, controller, interface = _build()

        self.assertTrue(controller.active)
        self.assertIs(controller.interface, interface)
        self.assertIs(tree.xr_server.primary_interface, interface)

    def test_missing_interface_leaves_controller_inert(self):
        with self.assertLogs("scene_loader.core.immersive_controller", level="WARNING"):
            tree, rig, controller, _ = _build(register=False)

        self.assertFalse(controller.active)
        self.assertIsNone(tree.xr_server.primary_interface)

        rig.find_child("LeftHand").set_vector2("move", 0.0, 1.0)
        tree.process_frame(1.0)
        np.testing.assert_allclose(rig.position, [0.0, 0.0, 0.0])

    def test_failed_initialize_leaves_controller_inert(self):
        tree, rig, controller, _ = _build(available=False)

        self.assertFalse(controller.active)
        self.assertIsNone(tree.xr_server.primary_interface)
        rig.find_child("RightHand").press_button("select")
        tree.process_frame(1.0)
        np.testing.assert_allclose(rig.position, [0.0, 0.0, 0.0])

    def test_interface_going_down_stops_updates(self):
        tree, rig, controller, interface = _build()
        interface.uninitialize()

        rig.find_child("LeftHand").set_vector2("move", 0.0, 1.0)
        tree.process_frame(1.0)

        self.assertFalse(controller.active)
        np.testing.assert_allclose(rig.position, [0.0, 0.0, 0.0])


class TestImmersiveLocomotion(unittest.TestCase):
    def setUp(self):
        self.tree, self.rig, self.controller, _ = _build()
        self.left = self.rig.find_child("LeftHand")
        self.right = self.rig.find_child("RightHand")
        self.camera = self.rig.find_child("XRCamera3D")

    def test_left_stick_moves_rig_along_camera_forward(self):
        self.left.set_vector2("move", 0.0, 1.0)
        self.tree.process_frame(1.0)

        np.testing.assert_allclose(self.rig.position, [0.0, 0.0, -3.0], atol=1e-12)
        np.testing.assert_allclose(self.camera.position, [0.0, 1.7, 0.0])

    def test_camera_pitch_does_not_lift_the_rig(self):
        self.camera.rotate_x(-0.6)
        self.left.set_vector2("move", 0.0, 1.0)
        self.tree.process_frame(1.0)

        self.assertAlmostEqual(float(self.rig.position[1]), 0.0)
        np.testing.assert_allclose(self.rig.position, [0.0, 0.0, -3.0], atol=1e-9)

    def test_stick_inside_deadzone_is_ignored(self):
        self.left.set_vector2("move", 0.05, 0.05)
        self.right.set_vector2("move", 0.08, 0.0)
        self.tree.process_frame(1.0)

        np.testing.assert_allclose(self.rig.position, [0.0, 0.0, 0.0])
        np.testing.assert_allclose(self.rig.transform.basis, np.eye(3))

    def test_right_stick_smooth_turns_rig(self):
        self.right.set_vector2("move", 1.0, 0.0)
        self.tree.process_frame(0.5)

        np.testing.assert_allclose(self.rig.transform.basis, rotation_about_y(-1.0), atol=1e-12)

    def test_teleport_projects_fixed_distance_and_keeps_height(self):
        self.rig.position = (0.0, 0.75, 0.0)
        self.right.position = (1.0, 1.3, 0.0)
        self.right.rotate_y(math.pi / 2)  # facing world -X

        self.right.press_button("select")
        self.tree.process_frame(1.0 / 60.0)

        # O = (1, 2.05, 0), D = (-1, 0, 0): target = O + 5 * D
        np.testing.assert_allclose(self.rig.position, [-4.0, 0.75, 0.0], atol=1e-9)

    def test_teleport_fires_once_per_press(self):
        self.right.position = (0.0, 1.3, 0.0)
        self.right.press_button("select")
        self.tree.process_frame(1.0 / 60.0)
        np.testing.assert_allclose(self.rig.position, [0.0, 0.0, -5.0], atol=1e-9)

        self.tree.process_frame(1.0 / 60.0)
        np.testing.assert_allclose(self.rig.position, [0.0, 0.0, -5.0], atol=1e-9)

        self.right.release_button("select")
        self.tree.process_frame(1.0 / 60.0)
        self.right.press_button("select")
        self.tree.process_frame(1.0 / 60.0)
        np.testing.assert_allclose(self.rig.position, [0.0, 0.0, -10.0], atol=1e-9)

    def test_missing_nodes_skip_actions(self):
        self.rig.remove_child(self.left)
        self.rig.remove_child(self.camera)
        self.right.set_vector2("move", 0.0, 1.0)

        self.tree.process_frame(1.0)

        np.testing.assert_allclose(self.rig.position, [0.0, 0.0, 0.0])

    def test_rig_is_resolved_fresh_each_tick(self):
        main = self.tree.current_scene
        main.remove_child(self.rig)
        self.left.set_vector2("move", 0.0, 1.0)
        self.tree.process_frame(1.0)

        replacement = create_xr_rig("XROrigin3D")
        main.add_child(replacement)
        replacement.find_child("LeftHand").set_vector2("move", 0.0, 1.0)
        self.tree.process_frame(1.0)

        np.testing.assert_allclose(self.rig.position, [0.0, 0.0, 0.0])
        np.testing.assert_allclose(replacement.position, [0.0, 0.0, -3.0], atol=1e-12)


if __name__ == "__main__":
    unittest.main()

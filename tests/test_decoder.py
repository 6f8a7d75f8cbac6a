import tempfile
import unittest
from unittest.mock import patch

import numpy as np
import trimesh

from engine.scene import MeshInstance3D
from scene_loader.core.decoder import decode_asset
from scene_loader.errors import DecodeError, EmptySceneError
from tests.helpers import box_glb_bytes


class TestDecodeAsset(unittest.TestCase):
    def setUp(self):
        self.base_path = tempfile.mkdtemp()

    def test_glb_becomes_detached_node_tree(self):
        asset = decode_asset(box_glb_bytes((2.0, 2.0, 2.0)), self.base_path, root_name="crate")

        self.assertEqual(asset.root.name, "crate")
        self.assertIsNone(asset.root.parent)
        self.assertFalse(asset.root.is_inside_tree())
        self.assertEqual(asset.mesh_count, 1)

        meshes = [n for n in asset.root.iter_tree() if isinstance(n, MeshInstance3D)]
        self.assertEqual(len(meshes), 1)
        np.testing.assert_allclose(meshes[0].mesh.extents, [2.0, 2.0, 2.0], atol=1e-5)

    def test_node_transforms_are_kept(self):
        box = trimesh.creation.box()
        scene = trimesh.Scene()
        transform = np.eye(4)
        transform[:3, 3] = [1.0, 2.0, 3.0]
        scene.add_geometry(box, node_name="Crate", geom_name="crate_mesh", transform=transform)

        asset = decode_asset(scene.export(file_type="glb"), self.base_path)

        crate = asset.root.find_child("Crate")
        self.assertIsInstance(crate, MeshInstance3D)
        np.testing.assert_allclose(crate.global_transform.origin, [1.0, 2.0, 3.0], atol=1e-6)

    def test_missing_base_path_is_tolerated(self):
        asset = decode_asset(box_glb_bytes(), "/nonexistent/remote_assets")
        self.assertEqual(asset.mesh_count, 1)

    def test_garbage_is_decode_error(self):
        with self.assertRaises(DecodeError):
            decode_asset(b"this is not a glb file", self.base_path)

    def test_empty_payload_is_decode_error(self):
        with self.assertRaises(DecodeError):
            decode_asset(b"", self.base_path)

    def test_scene_without_geometry_is_empty_scene(self):
        with patch("scene_loader.core.decoder.trimesh.load", return_value=trimesh.Scene()):
            with self.assertRaises(EmptySceneError):
                decode_asset(b"glTF-placeholder", self.base_path)

    def test_empty_scene_is_not_a_decode_error(self):
        self.assertFalse(issubclass(EmptySceneError, DecodeError))


if __name__ == "__main__":
    unittest.main()

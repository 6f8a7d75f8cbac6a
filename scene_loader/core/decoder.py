"""
Decoder adapter around trimesh's in-memory glTF/GLB parser.

The parser is treated as opaque: whatever it raises becomes ``DecodeError``.
Its scene graph is rebuilt as ``Node3D`` / ``MeshInstance3D`` nodes that keep
the original node names and local transforms.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path

import trimesh
from trimesh.resolvers import FilePathResolver

from engine.scene import MeshInstance3D, Node3D, Transform3D

from ..errors import DecodeError, EmptySceneError

logger = logging.getLogger(__name__)


@dataclass
class DecodedAsset:
    root: Node3D
    node_count: int = 0
    mesh_count: int = 0


def _resolver_for(base_path: str | Path | None) -> FilePathResolver | None:
    # FilePathResolver refuses paths that do not exist yet.
    if not base_path:
        return None
    path = Path(base_path).expanduser()
    if not path.is_dir():
        logger.debug("decoder_base_path_missing path=%s", path)
        return None
    return FilePathResolver(str(path))


def decode_asset(
    payload: bytes,
    base_path: str | Path | None,
    file_type: str = "glb",
    root_name: str = "AssetRoot",
) -> DecodedAsset:
    """Parse ``payload`` and rebuild it as a detached node subtree.

    Raises:
        DecodeError: the parser rejected the buffer.
        EmptySceneError: the buffer parsed but holds no renderable mesh.
    """
    if not payload:
        raise DecodeError("empty payload")

    try:
        scene = trimesh.load(
            io.BytesIO(payload),
            file_type=file_type,
            resolver=_resolver_for(base_path),
            force="scene",
        )
    except Exception as exc:
        raise DecodeError(f"{type(exc).__name__}: {exc}") from exc

    if not isinstance(scene, trimesh.Scene):
        raise DecodeError(f"parser returned {type(scene).__name__}, expected Scene")

    renderable = [
        name for name, geom in scene.geometry.items()
        if isinstance(geom, trimesh.Trimesh) and len(geom.faces) > 0
    ]
    if not renderable:
        raise EmptySceneError("asset contains no renderable geometry")

    root = Node3D(root_name)
    asset = DecodedAsset(root=root)
    _build_children(scene, scene.graph.base_frame, root, asset)

    if asset.mesh_count == 0:
        raise EmptySceneError("no scene node references renderable geometry")

    logger.info(
        "decode_completed bytes=%d nodes=%d meshes=%d",
        len(payload), asset.node_count, asset.mesh_count,
    )
    return asset


def _build_children(scene: trimesh.Scene, frame: str, parent: Node3D, asset: DecodedAsset) -> None:
    children = scene.graph.transforms.children.get(frame, [])
    for child_frame in children:
        matrix, geometry_name = scene.graph.get(frame_to=child_frame, frame_from=frame)
        geometry = scene.geometry.get(geometry_name) if geometry_name else None

        if isinstance(geometry, trimesh.Trimesh):
            node: Node3D = MeshInstance3D(str(child_frame), mesh=geometry)
            asset.mesh_count += 1
        else:
            node = Node3D(str(child_frame))

        node.transform = Transform3D.from_matrix(matrix)
        parent.add_child(node)
        asset.node_count += 1
        _build_children(scene, child_frame, node, asset)

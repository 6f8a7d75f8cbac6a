"""Shared fixtures for the loader tests."""

import asyncio
import tempfile
from pathlib import Path

import httpx
import trimesh

from engine.scene import Node3D
from engine.tree import SceneTree
from engine.xr import XRInterface, create_xr_rig
from scene_loader.config import LoaderSettings
from scene_loader.core.composer import SceneComposer
from scene_loader.core.fetcher import AssetFetcher

ASSET_URL = "https://assets.test/models/crate.glb"


def box_glb_bytes(extents=(1.0, 1.0, 1.0)) -> bytes:
    return trimesh.creation.box(extents=extents).export(file_type="glb")


def make_settings(**overrides) -> LoaderSettings:
    overrides.setdefault("storage_dir", Path(tempfile.mkdtemp()))
    return LoaderSettings(**overrides)


def mock_fetcher(handler) -> AssetFetcher:
    return AssetFetcher(transport=httpx.MockTransport(handler))


def serve_bytes(payload: bytes, status_code: int = 200, seen: list | None = None):
    def _handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(str(request.url))
        return httpx.Response(status_code, content=payload)

    return _handler


def build_scene(settings, fetcher, with_rig=True, immersive=False):
    """Main scene with an optional XR rig; returns (tree, main, composer)."""
    tree = SceneTree()
    interface = XRInterface(settings.xr_interface_name, available=immersive)
    tree.xr_server.add_interface(interface)
    if immersive:
        interface.initialize()
        tree.xr_server.set_primary_interface(interface)

    main = Node3D("Main")
    if with_rig:
        main.add_child(create_xr_rig(settings.xr_rig_name))
    composer = SceneComposer(settings, fetcher=fetcher)
    main.add_child(composer)
    tree.change_scene(main)
    return tree, main, composer


async def tick_until_done(tree, record, timeout=5.0, delta=1.0 / 60.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not record.done_event.is_set():
        if loop.time() > deadline:
            raise AssertionError(f"session {record.id} did not settle in {timeout}s")
        await asyncio.sleep(0.005)
        tree.process_frame(delta)
    return record


def count_nodes(node) -> int:
    return sum(1 for _ in node.iter_tree())

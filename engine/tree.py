"""
Scene tree and cooperative tick loop.

The tree is single-threaded: every scene mutation happens inside
``process_frame``.  Work finishing anywhere else (an asyncio task, another
thread) hands its continuation to ``call_deferred``; the queue is drained at
the start of the next frame, before any node is processed.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque
from typing import Any, Callable

from .input import Input
from .scene import Camera3D, Node3D
from .xr import XRServer

logger = logging.getLogger(__name__)


class SceneTree:
    def __init__(self, input_map: Input | None = None, xr_server: XRServer | None = None):
        self.input = input_map or Input()
        self.xr_server = xr_server or XRServer()
        self.root = Node3D("root")
        self.current_scene: Node3D | None = None
        self.current_camera: Camera3D | None = None
        self.frames = 0
        self._deferred: deque[tuple[Callable[..., Any], tuple[Any, ...]]] = deque()
        self._deferred_lock = threading.Lock()
        self._tasks: set[asyncio.Task] = set()
        self.root._enter_tree(self)

    def change_scene(self, scene: Node3D) -> None:
        if self.current_scene is not None:
            self.root.remove_child(self.current_scene)
        self.current_scene = scene
        self.root.add_child(scene)
        logger.info("scene_changed name=%s", scene.name)

    # ------------------------------------------------------------------
    # Scene-mutation context
    # ------------------------------------------------------------------

    def call_deferred(self, fn: Callable[..., Any], *args: Any) -> None:
        """Queue ``fn(*args)`` for the next frame. Safe from any thread."""
        with self._deferred_lock:
            self._deferred.append((fn, args))

    def pending_deferred(self) -> int:
        with self._deferred_lock:
            return len(self._deferred)

    def flush_deferred(self) -> int:
        with self._deferred_lock:
            batch = list(self._deferred)
            self._deferred.clear()
        for fn, args in batch:
            try:
                fn(*args)
            except Exception:
                logger.exception("deferred_call_failed fn=%s", getattr(fn, "__qualname__", fn))
        return len(batch)

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def process_frame(self, delta: float) -> None:
        self.flush_deferred()
        for node in list(self.root.iter_tree()):
            if node.is_inside_tree():
                node._physics_process(delta)
        self.frames += 1

    def track(self, task: asyncio.Task) -> asyncio.Task:
        """Keep a reference to host-level work so shutdown can cancel it."""
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run(
        self,
        tick_rate_hz: float = 60.0,
        stop_event: asyncio.Event | None = None,
        max_frames: int | None = None,
    ) -> None:
        delta = 1.0 / tick_rate_hz
        stop_event = stop_event or asyncio.Event()
        logger.info("tick_loop_started rate_hz=%s", tick_rate_hz)
        try:
            while not stop_event.is_set():
                if max_frames is not None and self.frames >= max_frames:
                    break
                self.process_frame(delta)
                await asyncio.sleep(delta)
        finally:
            logger.info("tick_loop_stopped frames=%d", self.frames)

    async def shutdown(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

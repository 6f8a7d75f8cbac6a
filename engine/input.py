from __future__ import annotations

import threading


class Input:
    """Named-action input map.

    The host (window layer, test, API) presses and releases actions; nodes
    only ever query them.
    """

    def __init__(self) -> None:
        self._pressed: set[str] = set()
        self._lock = threading.Lock()

    def press(self, action: str) -> None:
        with self._lock:
            self._pressed.add(action)

    def release(self, action: str) -> None:
        with self._lock:
            self._pressed.discard(action)

    def release_all(self) -> None:
        with self._lock:
            self._pressed.clear()

    def is_action_pressed(self, action: str) -> bool:
        with self._lock:
            return action in self._pressed

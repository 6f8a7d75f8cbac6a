"""
XR (head-mounted display) host services.

``XRServer`` is the interface registry, ``XRInterface`` a display runtime
that may or may not come up when initialized.  The node types mirror a
standard playspace rig:

    XROrigin3D
      ├── XRCamera3D
      ├── LeftHand   (XRController3D)
      └── RightHand  (XRController3D)
"""

from __future__ import annotations

import logging

import numpy as np

from .scene import Camera3D, Node3D

logger = logging.getLogger(__name__)


class XRInterface:
    def __init__(self, name: str, available: bool = True):
        self.name = name
        self.available = available
        self._initialized = False

    def initialize(self) -> bool:
        if self._initialized:
            return True
        self._initialized = self.available
        return self._initialized

    def uninitialize(self) -> None:
        self._initialized = False

    def is_initialized(self) -> bool:
        return self._initialized

    def __repr__(self) -> str:
        return f"<XRInterface '{self.name}' initialized={self._initialized}>"


class XRServer:
    def __init__(self) -> None:
        self._interfaces: dict[str, XRInterface] = {}
        self._primary: XRInterface | None = None

    def add_interface(self, interface: XRInterface) -> None:
        self._interfaces[interface.name] = interface

    def remove_interface(self, interface: XRInterface) -> None:
        self._interfaces.pop(interface.name, None)
        if self._primary is interface:
            self._primary = None

    def find_interface(self, name: str) -> XRInterface | None:
        return self._interfaces.get(name)

    def is_registered(self, interface: XRInterface) -> bool:
        return self._interfaces.get(interface.name) is interface

    @property
    def primary_interface(self) -> XRInterface | None:
        return self._primary

    def set_primary_interface(self, interface: XRInterface | None) -> None:
        if interface is not None and not self.is_registered(interface):
            raise ValueError(f"Interface '{interface.name}' is not registered")
        self._primary = interface
        logger.info("xr_primary_interface_set name=%s", interface.name if interface else None)


class XROrigin3D(Node3D):
    pass


class XRCamera3D(Camera3D):
    pass


class XRController3D(Node3D):
    def __init__(self, name: str | None = None):
        super().__init__(name)
        self._vectors: dict[str, np.ndarray] = {}
        self._buttons: set[str] = set()

    def set_vector2(self, input_name: str, x: float, y: float) -> None:
        self._vectors[input_name] = np.array([x, y], dtype=float)

    def get_vector2(self, input_name: str) -> np.ndarray:
        value = self._vectors.get(input_name)
        return np.zeros(2) if value is None else value.copy()

    def press_button(self, button: str) -> None:
        self._buttons.add(button)

    def release_button(self, button: str) -> None:
        self._buttons.discard(button)

    def is_button_pressed(self, button: str) -> bool:
        return button in self._buttons


def create_xr_rig(name: str = "XROrigin3D", head_height: float = 1.7) -> XROrigin3D:
    origin = XROrigin3D(name)
    camera = XRCamera3D("XRCamera3D")
    camera.position = (0.0, head_height, 0.0)
    origin.add_child(camera)
    for hand, x in (("LeftHand", -0.25), ("RightHand", 0.25)):
        controller = XRController3D(hand)
        controller.position = (x, head_height - 0.4, -0.3)
        origin.add_child(controller)
    return origin

"""
Minimal retained-mode scene graph.

Nodes carry a local ``Transform3D`` (3x3 basis + origin, columns are the
local x / y / z axes expressed in parent space).  Conventions:

  - +Y is up
  - -Z is forward, +X is right
  - rotations applied through ``rotate_*`` act in parent space

A node is "inside the tree" once it is reachable from a ``SceneTree`` root.
Entering the tree readies children before their parent, and ``_ready`` runs
only once per node.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Iterator

import numpy as np

if TYPE_CHECKING:
    import trimesh

    from .tree import SceneTree


def rotation_about_y(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def rotation_about_x(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


class Transform3D:
    __slots__ = ("basis", "origin")

    def __init__(self, basis: Any = None, origin: Any = None):
        self.basis = np.eye(3) if basis is None else np.array(basis, dtype=float).reshape(3, 3)
        self.origin = np.zeros(3) if origin is None else np.array(origin, dtype=float).reshape(3)

    @classmethod
    def from_matrix(cls, matrix: Any) -> "Transform3D":
        m = np.asarray(matrix, dtype=float)
        return cls(m[:3, :3], m[:3, 3])

    def to_matrix(self) -> np.ndarray:
        m = np.eye(4)
        m[:3, :3] = self.basis
        m[:3, 3] = self.origin
        return m

    def copy(self) -> "Transform3D":
        return Transform3D(self.basis, self.origin)

    def __matmul__(self, other: "Transform3D") -> "Transform3D":
        return Transform3D(self.basis @ other.basis, self.basis @ other.origin + self.origin)

    def xform(self, point: Any) -> np.ndarray:
        return self.basis @ np.asarray(point, dtype=float) + self.origin

    @property
    def x_axis(self) -> np.ndarray:
        return self.basis[:, 0].copy()

    @property
    def y_axis(self) -> np.ndarray:
        return self.basis[:, 1].copy()

    @property
    def z_axis(self) -> np.ndarray:
        return self.basis[:, 2].copy()

    def __repr__(self) -> str:
        return f"Transform3D(origin={self.origin.tolist()}, basis={self.basis.tolist()})"


class Node3D:
    def __init__(self, name: str | None = None):
        self.name = name or type(self).__name__
        self.transform = Transform3D()
        self._parent: Node3D | None = None
        self._children: list[Node3D] = []
        self._tree: SceneTree | None = None
        self._is_ready = False

    # ------------------------------------------------------------------
    # Hierarchy
    # ------------------------------------------------------------------

    @property
    def parent(self) -> Node3D | None:
        return self._parent

    @property
    def tree(self) -> SceneTree | None:
        return self._tree

    def is_inside_tree(self) -> bool:
        return self._tree is not None

    def get_children(self) -> list[Node3D]:
        return list(self._children)

    def add_child(self, child: Node3D) -> None:
        if child is self:
            raise ValueError("A node cannot be its own child")
        if child._parent is not None:
            raise ValueError(f"Node '{child.name}' already has parent '{child._parent.name}'")
        child._parent = self
        self._children.append(child)
        if self._tree is not None:
            child._enter_tree(self._tree)

    def remove_child(self, child: Node3D) -> None:
        if child._parent is not self:
            raise ValueError(f"Node '{child.name}' is not a child of '{self.name}'")
        self._children.remove(child)
        child._parent = None
        if child._tree is not None:
            child._exit_tree()

    def find_child(self, name: str, recursive: bool = True) -> Node3D | None:
        """Depth-first, pre-order search over descendants (self excluded)."""
        for child in self._children:
            if child.name == name:
                return child
            if recursive:
                found = child.find_child(name, recursive=True)
                if found is not None:
                    return found
        return None

    def iter_tree(self) -> Iterator[Node3D]:
        yield self
        for child in list(self._children):
            yield from child.iter_tree()

    def _enter_tree(self, tree: SceneTree) -> None:
        self._tree = tree
        for child in list(self._children):
            child._enter_tree(tree)
        if not self._is_ready:
            self._is_ready = True
            self._ready()

    def _exit_tree(self) -> None:
        for child in list(self._children):
            child._exit_tree()
        self._tree = None

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _ready(self) -> None:
        pass

    def _physics_process(self, delta: float) -> None:
        pass

    # ------------------------------------------------------------------
    # Spatial
    # ------------------------------------------------------------------

    @property
    def position(self) -> np.ndarray:
        return self.transform.origin.copy()

    @position.setter
    def position(self, value: Any) -> None:
        self.transform.origin = np.array(value, dtype=float).reshape(3)

    @property
    def scale(self) -> np.ndarray:
        return np.linalg.norm(self.transform.basis, axis=0)

    @scale.setter
    def scale(self, value: Any) -> None:
        target = np.array(value, dtype=float).reshape(3)
        basis = self.transform.basis
        for i in range(3):
            column = basis[:, i]
            length = np.linalg.norm(column)
            unit = column / length if length > 0.0 else np.eye(3)[:, i]
            basis[:, i] = unit * target[i]

    def rotate_y(self, angle: float) -> None:
        self.transform.basis = rotation_about_y(angle) @ self.transform.basis

    def rotate_x(self, angle: float) -> None:
        self.transform.basis = rotation_about_x(angle) @ self.transform.basis

    @property
    def global_transform(self) -> Transform3D:
        if self._parent is None:
            return self.transform.copy()
        return self._parent.global_transform @ self.transform

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": type(self).__name__,
            "position": [round(float(v), 6) for v in self.transform.origin],
            "scale": [round(float(v), 6) for v in self.scale],
            "children": [child.to_dict() for child in self._children],
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} '{self.name}'>"


class MeshInstance3D(Node3D):
    def __init__(
        self,
        name: str | None = None,
        mesh: trimesh.Trimesh | None = None,
        color: tuple[float, float, float, float] | None = None,
    ):
        super().__init__(name)
        self.mesh = mesh
        self.color = color

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.mesh is not None:
            data["vertices"] = int(len(self.mesh.vertices))
            data["faces"] = int(len(self.mesh.faces))
        return data


class Camera3D(Node3D):
    @property
    def current(self) -> bool:
        return self._tree is not None and self._tree.current_camera is self

    def make_current(self) -> None:
        if self._tree is None:
            raise RuntimeError(f"Camera '{self.name}' is not inside a scene tree")
        self._tree.current_camera = self

"""
Static reference scenery: a grey ground slab plus a few coloured cubes and
spheres so that locomotion has something to be judged against.
"""

from __future__ import annotations

import logging

import trimesh

from .scene import MeshInstance3D, Node3D

logger = logging.getLogger(__name__)

RED = (1.0, 0.0, 0.0, 1.0)
GREEN = (0.0, 1.0, 0.0, 1.0)
BLUE = (0.0, 0.0, 1.0, 1.0)
YELLOW = (1.0, 1.0, 0.0, 1.0)
MAGENTA = (1.0, 0.0, 1.0, 1.0)
GREY = (0.5, 0.5, 0.5, 1.0)

CUBE_POSITIONS = [
    (10.0, 0.0, 0.0),
    (-10.0, 0.0, 0.0),
    (0.0, 0.0, 10.0),
    (0.0, 0.0, -10.0),
    (15.0, 5.0, 15.0),
    (-15.0, 3.0, -15.0),
]
CUBE_COLORS = (RED, BLUE, GREEN)

SPHERE_POSITIONS = [
    (5.0, 8.0, 5.0),
    (-5.0, 6.0, -5.0),
    (20.0, 2.0, 0.0),
    (0.0, 10.0, 20.0),
]
SPHERE_COLORS = (YELLOW, MAGENTA)


class WorldBuilder(Node3D):
    def __init__(self, name: str = "WorldBuilder", build_on_ready: bool = True):
        super().__init__(name)
        self.build_on_ready = build_on_ready

    def _ready(self) -> None:
        if self.build_on_ready:
            self.create_world()

    def create_ground(self) -> MeshInstance3D:
        ground = MeshInstance3D(
            "Ground",
            mesh=trimesh.creation.box(extents=(100.0, 0.5, 100.0)),
            color=GREY,
        )
        ground.position = (0.0, -2.0, 0.0)
        self.add_child(ground)
        logger.info("ground_created")
        return ground

    def create_reference_objects(self) -> list[MeshInstance3D]:
        created: list[MeshInstance3D] = []
        for i, position in enumerate(CUBE_POSITIONS):
            cube = MeshInstance3D(
                f"Cube{i}",
                mesh=trimesh.creation.box(extents=(2.0, 2.0, 2.0)),
                color=CUBE_COLORS[i % len(CUBE_COLORS)],
            )
            cube.position = position
            self.add_child(cube)
            created.append(cube)

        # radius 1.5 / height 3.0 sphere
        for i, position in enumerate(SPHERE_POSITIONS):
            sphere = MeshInstance3D(
                f"Sphere{i}",
                mesh=trimesh.creation.icosphere(subdivisions=2, radius=1.5),
                color=SPHERE_COLORS[i % len(SPHERE_COLORS)],
            )
            sphere.position = position
            self.add_child(sphere)
            created.append(sphere)

        logger.info("reference_objects_created count=%d", len(created))
        return created

    def create_world(self) -> None:
        self.create_ground()
        self.create_reference_objects()

"""Shared meshes for the test-suite."""
from __future__ import annotations

import math

import pytest

from meshsubdivision.config import PRESET_MODELS
from meshsubdivision.controller.initializer import MeshInitializer
from meshsubdivision.model.io import ObjIO
from meshsubdivision.model.mesh import Mesh

TETRAHEDRON_POSITIONS = [[1, 1, 1], [-1, -1, 1], [-1, 1, -1], [1, -1, -1]]
TETRAHEDRON_FACES = [[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 3]]

OCTAHEDRON_POSITIONS = [[1, 0, 0], [-1, 0, 0], [0, 1, 0], [0, -1, 0], [0, 0, 1], [0, 0, -1]]
OCTAHEDRON_FACES = [
    [0, 2, 4], [2, 1, 4], [1, 3, 4], [3, 0, 4],
    [2, 0, 5], [1, 2, 5], [3, 1, 5], [0, 3, 5],
]

UNIT_TRIANGLE_POSITIONS = [[0, 0, 0], [1, 0, 0], [0, 1, 0]]


def hexagon_positions(apex_height: float = 1.0) -> list[list[float]]:
    """Centre vertex raised to ``apex_height`` above a unit hexagon in z=0."""
    ring = [
        [math.cos(k * math.pi / 3.0), math.sin(k * math.pi / 3.0), 0.0]
        for k in range(6)
    ]
    return [[0.0, 0.0, apex_height]] + ring


HEXAGON_FACES = [[0, 1 + k, 1 + (k + 1) % 6] for k in range(6)]


@pytest.fixture
def initializer() -> MeshInitializer:
    return MeshInitializer()


@pytest.fixture
def tetrahedron(initializer: MeshInitializer) -> Mesh:
    return initializer.construct_half_edge_mesh(TETRAHEDRON_POSITIONS, TETRAHEDRON_FACES)


@pytest.fixture
def octahedron(initializer: MeshInitializer) -> Mesh:
    return initializer.construct_half_edge_mesh(OCTAHEDRON_POSITIONS, OCTAHEDRON_FACES)


@pytest.fixture
def unit_triangle(initializer: MeshInitializer) -> Mesh:
    return initializer.construct_half_edge_mesh(UNIT_TRIANGLE_POSITIONS, [[0, 1, 2]])


@pytest.fixture
def hexagon(initializer: MeshInitializer) -> Mesh:
    return initializer.construct_half_edge_mesh(hexagon_positions(), HEXAGON_FACES)


@pytest.fixture
def icosahedron() -> Mesh:
    return ObjIO.load_mesh(PRESET_MODELS["icosahedron"])


@pytest.fixture
def plane() -> Mesh:
    return ObjIO.load_mesh(PRESET_MODELS["plane"])


@pytest.fixture
def open_cube() -> Mesh:
    return ObjIO.load_mesh(PRESET_MODELS["open_cube"], triangulate=True)


@pytest.fixture
def quad_cube() -> Mesh:
    return ObjIO.load_mesh(PRESET_MODELS["cube"])

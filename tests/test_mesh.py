from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from meshsubdivision.controller.subdivision import LoopSubdivider
from meshsubdivision.model.entities import NO_TWIN
from meshsubdivision.model.errors import (
    DegenerateGeometry,
    IndexOutOfRange,
    InvalidTopology,
    NonManifoldVertex,
)
from meshsubdivision.model.mesh import Mesh, MeshBuilder

from conftest import TETRAHEDRON_FACES, TETRAHEDRON_POSITIONS


# =============================================================================
# Counts and queries
# =============================================================================

def test_tetrahedron_counts(tetrahedron):
    assert tetrahedron.vertex_count() == 4
    assert tetrahedron.half_edge_count() == 12
    assert tetrahedron.face_count() == 4
    assert tetrahedron.edge_count() == 6
    assert tetrahedron.count_edges() == 6
    assert tetrahedron.euler_characteristic() == 2


def test_stats_string(unit_triangle):
    stats = unit_triangle.stats()
    assert stats.num_boundary_half_edges == 3
    assert stats.euler_characteristic == 1
    assert str(stats) == "V=3 E=3 F=1 H=3 boundary=3 chi=1"


def test_validate_accepts_constructed_meshes(tetrahedron, octahedron, unit_triangle, hexagon):
    for mesh in (tetrahedron, octahedron, unit_triangle, hexagon):
        mesh.validate()


def test_face_cycle_follows_winding(tetrahedron):
    half_edges = tetrahedron.half_edges
    for f, polygon in enumerate(TETRAHEDRON_FACES):
        cycle = tetrahedron.face_half_edges(f)
        assert [half_edges[h].origin for h in cycle] == polygon


def test_one_ring_of_closed_vertex(tetrahedron):
    for v in range(4):
        ring = tetrahedron.one_ring(v)
        assert sorted(ring) == sorted(set(range(4)) - {v})
        assert not tetrahedron.is_boundary_vertex(v)


def test_one_ring_is_counter_clockwise(hexagon):
    assert hexagon.one_ring(0) in ([1, 2, 3, 4, 5, 6][k:] + [1, 2, 3, 4, 5, 6][:k] for k in range(6))


def test_boundary_neighbors(unit_triangle):
    # Outgoing boundary half-edge 0 -> 1, incoming boundary half-edge 2 -> 0
    assert unit_triangle.boundary_neighbors(0) == (1, 2)
    assert unit_triangle.boundary_neighbors(1) == (2, 0)
    assert unit_triangle.one_ring(0) == [1, 2]


def test_boundary_neighbors_rejects_interior_vertex(hexagon):
    assert hexagon.is_boundary_vertex(1)
    assert not hexagon.is_boundary_vertex(0)
    with pytest.raises(ValueError):
        hexagon.boundary_neighbors(0)


def test_destination_and_boundary_half_edges(unit_triangle, tetrahedron):
    assert unit_triangle.destination(0) == 1
    assert all(unit_triangle.is_boundary_half_edge(h) for h in range(3))
    assert tetrahedron.boundary_half_edge_count() == 0


def test_indexed_accessors_are_bounds_checked(tetrahedron):
    with pytest.raises(IndexOutOfRange):
        tetrahedron.vertex(4)
    with pytest.raises(IndexError):
        tetrahedron.half_edge(-1)
    with pytest.raises(IndexOutOfRange) as info:
        tetrahedron.face(10)
    assert info.value.size == 4


# =============================================================================
# Immutability
# =============================================================================

def test_entities_are_frozen(tetrahedron):
    vertex = tetrahedron.vertex(0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        vertex.valence = 7
    with pytest.raises(ValueError):
        vertex.coords[0] = 5.0
    assert isinstance(tetrahedron.vertices, tuple)


# =============================================================================
# Validation failures
# =============================================================================

def test_validate_detects_broken_twin(tetrahedron):
    half_edges = list(tetrahedron.half_edges)
    half_edges[0] = dataclasses.replace(half_edges[0], twin=NO_TWIN)
    broken = Mesh(tetrahedron.vertices, half_edges, tetrahedron.faces)

    with pytest.raises(InvalidTopology):
        broken.validate()


def test_validate_detects_stale_edge_count(tetrahedron):
    broken = Mesh(tetrahedron.vertices, tetrahedron.half_edges, tetrahedron.faces, edge_count=7)
    with pytest.raises(InvalidTopology):
        broken.validate()


def test_wrong_valence_is_non_manifold(tetrahedron):
    vertices = list(tetrahedron.vertices)
    vertices[0] = dataclasses.replace(vertices[0], valence=2)
    broken = Mesh(vertices, tetrahedron.half_edges, tetrahedron.faces)

    with pytest.raises(NonManifoldVertex) as info:
        broken.outgoing_half_edges(0)
    assert info.value.vertex == 0


def test_face_cycle_not_closing(tetrahedron):
    faces = list(tetrahedron.faces)
    faces[0] = dataclasses.replace(faces[0], valence=4)
    broken = Mesh(tetrahedron.vertices, tetrahedron.half_edges, faces)

    with pytest.raises(InvalidTopology):
        broken.face_half_edges(0)


# =============================================================================
# Builder
# =============================================================================

def test_builder_rejects_out_of_range_references():
    builder = MeshBuilder(n_vertices=3, n_half_edges=3, n_faces=1, edge_count=3)
    with pytest.raises(IndexOutOfRange):
        builder.set_half_edge(0, origin=3, next=1, prev=2, face=0, edge_index=0)
    with pytest.raises(IndexOutOfRange):
        builder.set_half_edge(0, origin=0, next=1, prev=2, face=0, edge_index=3)
    with pytest.raises(IndexOutOfRange):
        builder.set_face(1, side=0, valence=3)


def test_builder_refuses_unpopulated_slots():
    builder = MeshBuilder(n_vertices=3, n_half_edges=3, n_faces=1, edge_count=3)
    for v in range(3):
        builder.set_vertex(v, [v, 0.0, 0.0], valence=2)
    with pytest.raises(InvalidTopology):
        builder.build()


def test_builder_requires_vertex_before_outgoing():
    builder = MeshBuilder(n_vertices=1, n_half_edges=1, n_faces=1, edge_count=1)
    with pytest.raises(InvalidTopology):
        builder.set_outgoing(0, 0)


# =============================================================================
# Normals and render attributes
# =============================================================================

def test_unit_triangle_normals(unit_triangle):
    face_normals, vertex_normals = unit_triangle.recompute_normals()
    np.testing.assert_allclose(face_normals, [[0.0, 0.0, 1.0]])
    np.testing.assert_allclose(vertex_normals, np.tile([0.0, 0.0, 1.0], (3, 1)))
    assert unit_triangle.face_normals is face_normals


def test_tetrahedron_normals_point_outwards(tetrahedron):
    face_normals, vertex_normals = tetrahedron.recompute_normals()
    coords = tetrahedron.vertex_coords()

    np.testing.assert_allclose(np.linalg.norm(vertex_normals, axis=1), 1.0)
    # Regular tetrahedron centred at the origin: vertex normals are radial
    np.testing.assert_allclose(vertex_normals, coords / np.sqrt(3.0), atol=1e-12)
    for f in range(4):
        centroid = coords[TETRAHEDRON_FACES[f]].mean(axis=0)
        assert np.dot(face_normals[f], centroid) > 0.0


def test_octahedron_vertex_normal_is_axis(octahedron):
    _, vertex_normals = octahedron.recompute_normals()
    np.testing.assert_allclose(vertex_normals[0], [1.0, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(vertex_normals[5], [0.0, 0.0, -1.0], atol=1e-12)


def test_zero_length_edge_raises(initializer):
    mesh = initializer.construct_half_edge_mesh([[0, 0, 0], [0, 0, 0], [1, 0, 0]], [[0, 1, 2]])
    with pytest.raises(DegenerateGeometry):
        mesh.recompute_normals()
    assert mesh.vertex_normals is None


def test_collinear_face_raises(initializer):
    mesh = initializer.construct_half_edge_mesh([[0, 0, 0], [1, 0, 0], [2, 0, 0]], [[0, 1, 2]])
    with pytest.raises(DegenerateGeometry):
        mesh.recompute_normals()


@pytest.mark.parametrize("scale", [1e-6, 1e-9, 1e6])
def test_normals_do_not_depend_on_mesh_scale(initializer, scale):
    positions = [[0.0, 0.0, 0.0], [scale, 0.0, 0.0], [0.0, scale, 0.0]]
    mesh = initializer.construct_half_edge_mesh(positions, [[0, 1, 2]])

    face_normals, vertex_normals = mesh.recompute_normals()
    np.testing.assert_allclose(face_normals, [[0.0, 0.0, 1.0]])
    np.testing.assert_allclose(vertex_normals, np.tile([0.0, 0.0, 1.0], (3, 1)))


def test_small_subdivided_mesh_keeps_valid_normals(initializer):
    positions = np.array(TETRAHEDRON_POSITIONS, dtype=float) * 1e-6
    mesh = initializer.construct_half_edge_mesh(positions, TETRAHEDRON_FACES)
    for _ in range(2):
        mesh = LoopSubdivider().subdivide(mesh)

    _, vertex_normals = mesh.recompute_normals()
    np.testing.assert_allclose(np.linalg.norm(vertex_normals, axis=1), 1.0)


def test_small_collinear_face_still_raises(initializer):
    mesh = initializer.construct_half_edge_mesh([[0, 0, 0], [1e-6, 0, 0], [2e-6, 0, 0]], [[0, 1, 2]])
    with pytest.raises(DegenerateGeometry):
        mesh.recompute_normals()


def test_render_attributes(tetrahedron):
    attributes = tetrahedron.extract_render_attributes()

    assert attributes.positions.shape == (4, 3)
    assert attributes.normals.shape == (4, 3)
    assert attributes.indices.dtype == np.uint32
    assert attributes.indices.tolist() == [i for face in TETRAHEDRON_FACES for i in face]
    assert attributes.triangles.shape == (4, 3)
    assert attributes.is_triangulated


def test_render_attributes_of_quads(quad_cube):
    attributes = quad_cube.extract_render_attributes()

    assert attributes.face_valences.tolist() == [4] * 6
    assert len(attributes.indices) == 24
    with pytest.raises(ValueError):
        attributes.triangles

"""
Loop Subdivision
================
One step of Loop subdivision on manifold triangle meshes, boundaries included.

The step runs in three phases over a freshly allocated output mesh:

1. Sizes: ``V + E`` vertices, ``4F`` faces, ``4H`` half-edges, ``2E + 3F`` edges.
2. Geometry: vertex points (indices ``0..V-1``) and edge points
   (index ``V + edge_index``) from the Loop stencils.
3. Topology: every control half-edge ``h`` spawns the half-edges ``3h``,
   ``3h + 1``, ``3h + 2`` (corner triangle ``h``) and ``3H + h`` (the centre
   triangle of its face). All connectivity follows from index arithmetic:
   https://diglib.eg.org/bitstream/handle/10.2312/egs20221028/041-044.pdf

The arithmetic assumes a face-contiguous layout, i.e. face ``f`` owns the
half-edges ``3f .. 3f + 2``. Meshes coming from ``MeshInitializer`` or from a
previous Loop step always have it.
"""
from __future__ import annotations

import logging
from math import cos, pi
from typing import TYPE_CHECKING

from meshsubdivision.controller.subdivision.base import SubdivisionScheme, Subdivider
from meshsubdivision.controller.subdivision.registry import register_subdivider
from meshsubdivision.model.entities import NO_TWIN
from meshsubdivision.model.errors import InvalidTopology
from meshsubdivision.model.mesh import Mesh, MeshBuilder

if TYPE_CHECKING:
    import numpy as np
    import numpy.typing as npt
    from meshsubdivision.model.entities import HalfEdge

logger = logging.getLogger(__name__)

INTERIOR_EDGE_POINT_VALENCE = 6
BOUNDARY_EDGE_POINT_VALENCE = 4


def loop_beta(valence: int) -> float:
    """
    Weight of each one-ring neighbour for an interior vertex (Loop's stencil).

    Args:
        valence: Number of edges incident to the vertex.
    """
    center = 0.375 + 0.25 * cos(2.0 * pi / valence)
    return (0.625 - center * center) / valence


@register_subdivider
class LoopSubdivider(Subdivider):
    """
    Performs Loop subdivision on triangle meshes.
    """
    KEY = SubdivisionScheme.LOOP

    def subdivide(self, control_mesh: Mesh) -> Mesh:
        """
        Subdivides the provided control mesh and returns the subdivided mesh.

        Args:
            control_mesh: Triangle mesh with face-contiguous half-edges.

        Returns:
            A new mesh; ``control_mesh`` is left untouched.

        Raises:
            InvalidTopology: Non-triangular faces or an unexpected half-edge layout.
            NonManifoldVertex: A vertex one-ring does not close.
            IndexOutOfRange: A derived index escapes the allocated sizes.
        """
        self._check_control_mesh(control_mesh)
        builder = self._reserve_sizes(control_mesh)
        self._geometry_refinement(control_mesh, builder)
        self._topology_refinement(control_mesh, builder)
        new_mesh = builder.build()

        logger.info(f"Loop subdivision: {control_mesh!r} -> {new_mesh!r}")
        return new_mesh

    @staticmethod
    def _check_control_mesh(control_mesh: Mesh) -> None:
        for face in control_mesh.faces:
            if face.valence != 3:
                raise InvalidTopology(
                    f"Loop subdivision requires triangles, face {face.index} has {face.valence} sides."
                )

        if control_mesh.half_edge_count() != 3 * control_mesh.face_count():
            raise InvalidTopology(
                f"Expected {3 * control_mesh.face_count()} half-edges for "
                f"{control_mesh.face_count()} triangles, got {control_mesh.half_edge_count()}."
            )

        for edge in control_mesh.half_edges:
            h = edge.index
            base = h - h % 3
            if edge.face != h // 3 or edge.next != base + (h + 1) % 3 or edge.prev != base + (h + 2) % 3:
                raise InvalidTopology(
                    f"Half-edge {h} is not laid out face-contiguously (face={edge.face}, "
                    f"next={edge.next}, prev={edge.prev})."
                )

    @staticmethod
    def _reserve_sizes(control_mesh: Mesh) -> MeshBuilder:
        """Allocate the output collections and compute the new edge count."""
        new_num_edges = 2 * control_mesh.edge_count() + 3 * control_mesh.face_count()
        new_num_faces = 4 * control_mesh.face_count()
        new_num_half_edges = 4 * control_mesh.half_edge_count()
        new_num_verts = control_mesh.vertex_count() + control_mesh.edge_count()

        logger.debug(
            f"Reserving V={new_num_verts} E={new_num_edges} F={new_num_faces} H={new_num_half_edges}"
        )
        return MeshBuilder(
            n_vertices=new_num_verts,
            n_half_edges=new_num_half_edges,
            n_faces=new_num_faces,
            edge_count=new_num_edges,
        )

    # ---- GEOMETRY REFINEMENT ----

    def _geometry_refinement(self, control_mesh: Mesh, builder: MeshBuilder) -> None:
        """
        Calculates the coordinates of the vertex and edge points.

        Connectivity of the new vertices is left to the topology refinement.
        """
        coords = control_mesh.vertex_coords()

        # Vertex points
        for vertex in control_mesh.vertices:
            point = self._vertex_point(control_mesh, coords, vertex.index)
            builder.set_vertex(vertex.index, point, valence=vertex.valence)

        # Edge points, once per undirected edge
        num_verts = control_mesh.vertex_count()
        for edge in control_mesh.half_edges:
            if edge.twin != NO_TWIN and edge.index < edge.twin:
                continue
            valence = BOUNDARY_EDGE_POINT_VALENCE if edge.is_boundary else INTERIOR_EDGE_POINT_VALENCE
            point = self._edge_point(control_mesh, coords, edge)
            builder.set_vertex(num_verts + edge.edge_index, point, valence=valence)

    @staticmethod
    def _vertex_point(
        control_mesh: Mesh,
        coords: npt.NDArray[np.float64],
        v: int,
    ) -> npt.NDArray[np.float64]:
        if control_mesh.is_boundary_vertex(v):
            next_vertex, prev_vertex = control_mesh.boundary_neighbors(v)
            return (coords[next_vertex] + coords[prev_vertex]) / 8.0 + 0.75 * coords[v]

        ring = control_mesh.one_ring(v)
        valence = len(ring)
        beta = loop_beta(valence)
        return coords[v] * (1.0 - valence * beta) + coords[ring].sum(axis=0) * beta

    @staticmethod
    def _edge_point(
        control_mesh: Mesh,
        coords: npt.NDArray[np.float64],
        edge: HalfEdge,
    ) -> npt.NDArray[np.float64]:
        half_edges = control_mesh.half_edges
        p0 = coords[edge.origin]
        p1 = coords[half_edges[edge.next].origin]

        if edge.is_boundary:
            return (p0 + p1) / 2.0

        # Opposite corners of the two triangles sharing the edge
        p2 = coords[half_edges[half_edges[edge.twin].prev].origin]
        p3 = coords[half_edges[half_edges[edge.next].next].origin]
        return (p0 + p1) * (3.0 / 8.0) + (p2 + p3) * (1.0 / 8.0)

    # ---- TOPOLOGY REFINEMENT ----

    def _topology_refinement(self, control_mesh: Mesh, builder: MeshBuilder) -> None:
        """
        Splits every control half-edge into four and links them up.
        """
        num_half_edges = control_mesh.half_edge_count()
        num_verts = control_mesh.vertex_count()
        num_edges = control_mesh.edge_count()
        half_edges = control_mesh.half_edges

        # Loop subdivision generates only triangles
        for f in range(builder.face_count):
            builder.set_face(f, side=3 * f, valence=3)

        for edge in half_edges:
            h = edge.index
            prev = half_edges[edge.prev]

            h1 = 3 * h
            h2 = 3 * h + 1
            h3 = 3 * h + 2
            h4 = 3 * num_half_edges + h

            twin1 = NO_TWIN if edge.twin == NO_TWIN else 3 * half_edges[edge.twin].next + 2
            twin2 = 3 * num_half_edges + h
            twin3 = NO_TWIN if prev.twin == NO_TWIN else 3 * prev.twin
            twin4 = 3 * h + 1

            vert1 = edge.origin
            vert2 = num_verts + edge.edge_index
            vert3 = num_verts + prev.edge_index
            vert4 = vert3

            edge1 = 2 * edge.edge_index + (0 if h > edge.twin else 1)
            edge2 = 2 * num_edges + h
            edge3 = 2 * prev.edge_index + (1 if prev.index > prev.twin else 0)
            edge4 = edge2

            self._set_half_edge_data(builder, h1, edge1, vert1, twin1)
            self._set_half_edge_data(builder, h2, edge2, vert2, twin2)
            self._set_half_edge_data(builder, h3, edge3, vert3, twin3)
            self._set_half_edge_data(builder, h4, edge4, vert4, twin4)

    @staticmethod
    def _set_half_edge_data(builder: MeshBuilder, h: int, edge_index: int, vert_index: int, twin: int) -> None:
        """
        Sets a single half-edge of the new mesh and claims its origin.

        Args:
            builder: The new mesh being populated.
            h: Index of the half-edge.
            edge_index: Index of the undirected edge the half-edge belongs to.
            vert_index: Index of the vertex the half-edge originates from.
            twin: Index of the twin, ``NO_TWIN`` on the boundary.
        """
        base = h - h % 3
        builder.set_half_edge(
            h,
            origin=vert_index,
            next=base + (h + 1) % 3,
            prev=base + (h + 2) % 3,
            face=h // 3,
            edge_index=edge_index,
            twin=twin,
        )
        builder.set_outgoing(vert_index, h)

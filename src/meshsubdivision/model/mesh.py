"""
Half-Edge Mesh
==============
The Mesh container and its populate contract.

Why is this file needed?
------------------------
1. Ownership: a Mesh owns three index-addressable collections (vertices,
   half-edges, faces). Every cross-reference is an index into the same Mesh.
2. Queries: counts, face cycles and vertex one-rings used by the subdividers.
3. Render buffers: positions, angle-weighted vertex normals and the flattened
   polygon index list, derived on request from the half-edge structure.

Meshes are immutable once built. ``MeshBuilder`` is the only way to populate a
fresh one (used by ``MeshInitializer`` and by the subdividers).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence, TYPE_CHECKING

import numpy as np

from meshsubdivision.config import DEGENERATE_TOLERANCE
from meshsubdivision.model.entities import Face, HalfEdge, NO_TWIN, UNSET, Vertex
from meshsubdivision.model.errors import (
    DegenerateGeometry,
    IndexOutOfRange,
    InvalidTopology,
    NonManifoldVertex,
)

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class RenderAttributes:
    """
    Flattened geometry handed to a renderer.

    Attributes:
        positions: (V, 3) vertex coordinates in vertex-index order.
        normals: (V, 3) unit vertex normals, parallel to ``positions``.
        indices: Face-vertex indices, each face's cycle in winding order.
        face_valences: Number of entries in ``indices`` belonging to each face.
    """
    positions: npt.NDArray[np.float64]
    normals: npt.NDArray[np.float64]
    indices: npt.NDArray[np.uint32]
    face_valences: npt.NDArray[np.int64]

    @property
    def is_triangulated(self) -> bool:
        return bool(np.all(self.face_valences == 3))

    @property
    def triangles(self) -> npt.NDArray[np.uint32]:
        """(F, 3) triangle index array. Only valid for pure triangle meshes."""
        if not self.is_triangulated:
            raise ValueError("Render attributes contain non-triangular faces.")
        return self.indices.reshape(-1, 3)


@dataclass
class MeshStats:
    """Return object containing mesh counts."""
    num_vertices: int
    num_edges: int
    num_faces: int
    num_half_edges: int
    num_boundary_half_edges: int
    euler_characteristic: int

    def __str__(self) -> str:
        return (
            f"V={self.num_vertices} E={self.num_edges} F={self.num_faces} "
            f"H={self.num_half_edges} boundary={self.num_boundary_half_edges} "
            f"chi={self.euler_characteristic}"
        )


class Mesh:
    """
    Representation of a polygon mesh using the half-edge data structure.
    """
    def __init__(
        self,
        vertices: Iterable[Vertex] = (),
        half_edges: Iterable[HalfEdge] = (),
        faces: Iterable[Face] = (),
        edge_count: Optional[int] = None,
    ) -> None:
        """
        Initialize the mesh from fully populated entity collections.

        Args:
            vertices: Vertices, ``vertices[i].index == i``.
            half_edges: Half-edges, ``half_edges[i].index == i``.
            faces: Faces, ``faces[i].index == i``.
            edge_count: Number of undirected edges. Counted from the twin
                        pairing when omitted.
        """
        self._vertices: tuple[Vertex, ...] = tuple(vertices)
        self._half_edges: tuple[HalfEdge, ...] = tuple(half_edges)
        self._faces: tuple[Face, ...] = tuple(faces)
        self._edge_count: int = self.count_edges() if edge_count is None else edge_count

        # Derived caches, recomputed by recompute_normals()
        self._face_normals: Optional[npt.NDArray[np.float64]] = None
        self._vertex_normals: Optional[npt.NDArray[np.float64]] = None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(V={self.vertex_count()}, E={self.edge_count()}, "
            f"F={self.face_count()}, H={self.half_edge_count()})"
        )

    # ---- COLLECTIONS ----

    @property
    def vertices(self) -> tuple[Vertex, ...]:
        return self._vertices

    @property
    def half_edges(self) -> tuple[HalfEdge, ...]:
        return self._half_edges

    @property
    def faces(self) -> tuple[Face, ...]:
        return self._faces

    def vertex(self, index: int) -> Vertex:
        _check_index("Vertex", index, len(self._vertices))
        return self._vertices[index]

    def half_edge(self, index: int) -> HalfEdge:
        _check_index("Half-edge", index, len(self._half_edges))
        return self._half_edges[index]

    def face(self, index: int) -> Face:
        _check_index("Face", index, len(self._faces))
        return self._faces[index]

    def vertex_count(self) -> int:
        return len(self._vertices)

    def half_edge_count(self) -> int:
        return len(self._half_edges)

    def face_count(self) -> int:
        return len(self._faces)

    def edge_count(self) -> int:
        return self._edge_count

    def count_edges(self) -> int:
        """Count undirected edges from the twin pairing (not the cached value)."""
        return sum(1 for h in self._half_edges if h.twin == NO_TWIN or h.index > h.twin)

    def vertex_coords(self) -> npt.NDArray[np.float64]:
        """(V, 3) array of vertex coordinates, built from the vertex records."""
        return np.array([v.coords for v in self._vertices], dtype=np.float64).reshape(-1, 3)

    # ---- TOPOLOGICAL QUERIES ----

    def destination(self, h: int) -> int:
        """Index of the vertex half-edge ``h`` points to."""
        half_edge = self.half_edge(h)
        return self._half_edges[half_edge.next].origin

    def is_boundary_half_edge(self, h: int) -> bool:
        return self.half_edge(h).twin == NO_TWIN

    def boundary_half_edge_count(self) -> int:
        return sum(1 for h in self._half_edges if h.twin == NO_TWIN)

    def is_triangle_mesh(self) -> bool:
        return all(f.valence == 3 for f in self._faces)

    def euler_characteristic(self) -> int:
        return self.vertex_count() - self.edge_count() + self.face_count()

    def stats(self) -> MeshStats:
        return MeshStats(
            num_vertices=self.vertex_count(),
            num_edges=self.edge_count(),
            num_faces=self.face_count(),
            num_half_edges=self.half_edge_count(),
            num_boundary_half_edges=self.boundary_half_edge_count(),
            euler_characteristic=self.euler_characteristic(),
        )

    def face_half_edges(self, f: int) -> list[int]:
        """
        Half-edges of face ``f`` in winding order, starting at its side.

        Raises:
            InvalidTopology: If walking ``next`` ``valence`` times does not return
                             to the side, or returns to it early.
        """
        face = self.face(f)
        cycle: list[int] = []
        h = face.side
        for _ in range(face.valence):
            cycle.append(h)
            h = self._half_edges[h].next
        if h != face.side or len(set(cycle)) != len(cycle):
            raise InvalidTopology(
                f"Boundary cycle of face {f} does not close after {face.valence} steps."
            )
        return cycle

    def outgoing_half_edges(self, v: int) -> list[int]:
        """
        Outgoing half-edges of vertex ``v`` in counter-clockwise order.

        For a boundary vertex the list starts at its outgoing boundary half-edge
        and ends at the half-edge following its incoming boundary half-edge.
        Both rotations are bounded by the vertex valence.

        Raises:
            NonManifoldVertex: If the rotation does not close within the valence,
                               or the star does not match the valence.
        """
        vertex = self.vertex(v)
        half_edges = self._half_edges
        start = vertex.outgoing

        # Rotate clockwise until the boundary is hit or the star closes
        first = start
        for _ in range(vertex.valence):
            twin = half_edges[first].twin
            if twin == NO_TWIN:
                break
            first = half_edges[twin].next
            if first == start:
                break
        else:
            raise NonManifoldVertex(v)

        # Collect counter-clockwise from there
        fan = [first]
        h = first
        closed = False
        for _ in range(vertex.valence):
            twin = half_edges[half_edges[h].prev].twin
            if twin == NO_TWIN:
                break
            h = twin
            if h == first:
                closed = True
                break
            fan.append(h)
        else:
            raise NonManifoldVertex(v)

        expected = vertex.valence if closed else vertex.valence - 1
        if len(fan) != expected:
            raise NonManifoldVertex(
                v, f"Vertex {v} has valence {vertex.valence} but its edge star holds {len(fan) + (not closed)} edges."
            )
        return fan

    def is_boundary_vertex(self, v: int) -> bool:
        fan = self.outgoing_half_edges(v)
        return self._half_edges[fan[0]].twin == NO_TWIN

    def boundary_neighbors(self, v: int) -> tuple[int, int]:
        """
        The two boundary neighbours of a boundary vertex.

        Returns:
            (next, previous): the destination of the outgoing boundary half-edge
            and the origin of the incoming boundary half-edge.
        """
        fan = self.outgoing_half_edges(v)
        half_edges = self._half_edges
        if half_edges[fan[0]].twin != NO_TWIN:
            raise ValueError(f"Vertex {v} is not a boundary vertex.")
        next_vertex = half_edges[half_edges[fan[0]].next].origin
        prev_vertex = half_edges[half_edges[fan[-1]].prev].origin
        return next_vertex, prev_vertex

    def one_ring(self, v: int) -> list[int]:
        """Indices of the vertices adjacent to ``v``, counter-clockwise."""
        fan = self.outgoing_half_edges(v)
        half_edges = self._half_edges
        ring = [half_edges[half_edges[h].next].origin for h in fan]
        if half_edges[fan[0]].twin == NO_TWIN:
            ring.append(half_edges[half_edges[fan[-1]].prev].origin)
        return ring

    # ---- VALIDATION ----

    def validate(self) -> None:
        """
        Check every structural invariant of the half-edge mesh.

        Raises:
            IndexOutOfRange: A reference points outside its collection.
            InvalidTopology: A next/prev/twin/face relation is inconsistent.
            NonManifoldVertex: A vertex star does not close or match its valence.
        """
        n_v, n_h, n_f = self.vertex_count(), self.half_edge_count(), self.face_count()
        half_edges = self._half_edges

        for i, vertex in enumerate(self._vertices):
            if vertex.index != i:
                raise InvalidTopology(f"Vertex at position {i} carries index {vertex.index}.")
            _check_index("Half-edge", vertex.outgoing, n_h)
            if half_edges[vertex.outgoing].origin != i:
                raise InvalidTopology(f"Outgoing half-edge of vertex {i} does not originate there.")
            if vertex.valence <= 0:
                raise InvalidTopology(f"Vertex {i} has non-positive valence {vertex.valence}.")

        for i, h in enumerate(half_edges):
            if h.index != i:
                raise InvalidTopology(f"Half-edge at position {i} carries index {h.index}.")
            _check_index("Vertex", h.origin, n_v)
            _check_index("Half-edge", h.next, n_h)
            _check_index("Half-edge", h.prev, n_h)
            _check_index("Face", h.face, n_f)
            if half_edges[h.next].prev != i or half_edges[h.prev].next != i:
                raise InvalidTopology(f"next/prev links of half-edge {i} are not symmetric.")
            if half_edges[h.next].face != h.face:
                raise InvalidTopology(f"Half-edge {i} and its next lie on different faces.")
            if h.twin != NO_TWIN:
                _check_index("Half-edge", h.twin, n_h)
                twin = half_edges[h.twin]
                if twin.twin != i:
                    raise InvalidTopology(f"Twin of half-edge {i} does not point back to it.")
                if twin.edge_index != h.edge_index:
                    raise InvalidTopology(f"Half-edge {i} and its twin carry different edge indices.")
                if twin.origin != half_edges[h.next].origin or half_edges[twin.next].origin != h.origin:
                    raise InvalidTopology(f"Half-edge {i} and its twin do not share their endpoints.")

        for i, face in enumerate(self._faces):
            if face.index != i:
                raise InvalidTopology(f"Face at position {i} carries index {face.index}.")
            _check_index("Half-edge", face.side, n_h)
            if half_edges[face.side].face != i:
                raise InvalidTopology(f"Side of face {i} belongs to face {half_edges[face.side].face}.")
            self.face_half_edges(i)

        if self._edge_count != self.count_edges():
            raise InvalidTopology(
                f"Cached edge count {self._edge_count} differs from the twin pairing ({self.count_edges()})."
            )

        for i in range(n_v):
            self.outgoing_half_edges(i)

    # ---- RENDER ATTRIBUTES ----

    @property
    def face_normals(self) -> Optional[npt.NDArray[np.float64]]:
        """Face normals from the last recompute_normals() call."""
        return self._face_normals

    @property
    def vertex_normals(self) -> Optional[npt.NDArray[np.float64]]:
        """Vertex normals from the last recompute_normals() call."""
        return self._vertex_normals

    def recompute_normals(self) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Recalculates the face and vertex normals.

        Vertex normals are an angle-weighted sum of the incident face normals:
        every half-edge adds ``sqrt(1 - cos^2) * faceNormal / (|a||b|)`` to its
        origin, with ``a`` and ``b`` the edges towards the previous and next
        vertex of the face.

        Returns:
            (face_normals, vertex_normals) with shapes (F, 3) and (V, 3).

        Raises:
            DegenerateGeometry: On zero-length edges, zero-area faces or a
                                vanishing vertex normal.
        """
        positions = self.vertex_coords()
        origin = np.fromiter((h.origin for h in self._half_edges), dtype=np.int64, count=self.half_edge_count())
        nxt = np.fromiter((h.next for h in self._half_edges), dtype=np.int64, count=self.half_edge_count())
        prv = np.fromiter((h.prev for h in self._half_edges), dtype=np.int64, count=self.half_edge_count())
        face = np.fromiter((h.face for h in self._half_edges), dtype=np.int64, count=self.half_edge_count())
        sides = np.fromiter((f.side for f in self._faces), dtype=np.int64, count=self.face_count())

        current = positions[origin]
        edge_a = positions[origin[prv]] - current
        edge_b = positions[origin[nxt]] - current
        length_a = np.linalg.norm(edge_a, axis=1)
        length_b = np.linalg.norm(edge_b, axis=1)

        # Tolerances scale with the mesh, so tiny but valid parts are accepted
        scale = float(np.linalg.norm(np.ptp(positions, axis=0))) if len(positions) else 0.0
        zero_length = (length_a <= DEGENERATE_TOLERANCE * scale) | (length_b <= DEGENERATE_TOLERANCE * scale)
        if np.any(zero_length):
            h = int(np.flatnonzero(zero_length)[0])
            raise DegenerateGeometry(f"Zero-length edge next to half-edge {h} at vertex {int(origin[h])}.")

        # Face normals from two boundary edges of each face; |a x b| is compared with |a||b|
        face_normals = np.cross(edge_b[sides], edge_a[sides])
        face_lengths = np.linalg.norm(face_normals, axis=1)
        zero_area = face_lengths <= DEGENERATE_TOLERANCE * length_a[sides] * length_b[sides]
        if np.any(zero_area):
            raise DegenerateGeometry(f"Face {int(np.flatnonzero(zero_area)[0])} has zero area.")
        face_normals /= face_lengths[:, np.newaxis]

        edge_lengths = length_a * length_b
        cosine = np.einsum("ij,ij->i", edge_a, edge_b) / edge_lengths
        weight = np.sqrt(np.clip(1.0 - cosine * cosine, 0.0, None)) / edge_lengths

        vertex_normals = np.zeros_like(positions)
        np.add.at(vertex_normals, origin, weight[:, np.newaxis] * face_normals[face])
        total_weight = np.zeros(len(positions))
        np.add.at(total_weight, origin, weight)

        vertex_lengths = np.linalg.norm(vertex_normals, axis=1)
        vanishing = vertex_lengths <= DEGENERATE_TOLERANCE * total_weight
        if np.any(vanishing):
            raise DegenerateGeometry(f"Normal of vertex {int(np.flatnonzero(vanishing)[0])} vanishes.")
        vertex_normals /= vertex_lengths[:, np.newaxis]

        self._face_normals = face_normals
        self._vertex_normals = vertex_normals
        return face_normals, vertex_normals

    def extract_render_attributes(self) -> RenderAttributes:
        """
        Extracts the normals, vertex coordinates and indices into easy-to-access buffers.
        """
        _, vertex_normals = self.recompute_normals()

        half_edges = self._half_edges
        indices: list[int] = []
        for f in range(self.face_count()):
            indices.extend(half_edges[h].origin for h in self.face_half_edges(f))

        return RenderAttributes(
            positions=self.vertex_coords(),
            normals=vertex_normals.copy(),
            indices=np.array(indices, dtype=np.uint32),
            face_valences=np.array([f.valence for f in self._faces], dtype=np.int64),
        )


class MeshBuilder:
    """
    Populate contract for a fresh Mesh of known size.

    The three collections are allocated up front. Every reference handed to a
    setter is bounds-checked against those sizes, and ``build()`` refuses to
    produce a mesh with unpopulated slots.
    """
    def __init__(self, n_vertices: int, n_half_edges: int, n_faces: int, edge_count: int) -> None:
        self._vertices: list[Optional[Vertex]] = [None] * n_vertices
        self._half_edges: list[Optional[HalfEdge]] = [None] * n_half_edges
        self._faces: list[Optional[Face]] = [None] * n_faces
        self.edge_count = edge_count

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(V={self.vertex_count}, E={self.edge_count}, "
            f"F={self.face_count}, H={self.half_edge_count})"
        )

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def half_edge_count(self) -> int:
        return len(self._half_edges)

    @property
    def face_count(self) -> int:
        return len(self._faces)

    def vertex(self, index: int) -> Optional[Vertex]:
        _check_index("Vertex", index, self.vertex_count)
        return self._vertices[index]

    def half_edge(self, index: int) -> Optional[HalfEdge]:
        _check_index("Half-edge", index, self.half_edge_count)
        return self._half_edges[index]

    def set_vertex(
        self,
        index: int,
        coords: Sequence[float] | npt.NDArray[np.float64],
        valence: int,
        outgoing: int = UNSET,
    ) -> None:
        _check_index("Vertex", index, self.vertex_count)
        if outgoing != UNSET:
            _check_index("Half-edge", outgoing, self.half_edge_count)
        self._vertices[index] = Vertex(index=index, coords=coords, outgoing=outgoing, valence=valence)

    def set_outgoing(self, vertex: int, half_edge: int) -> None:
        _check_index("Vertex", vertex, self.vertex_count)
        _check_index("Half-edge", half_edge, self.half_edge_count)
        current = self._vertices[vertex]
        if current is None:
            raise InvalidTopology(f"Vertex {vertex} must be set before its outgoing half-edge.")
        self._vertices[vertex] = replace(current, outgoing=half_edge)

    def set_half_edge(
        self,
        index: int,
        origin: int,
        next: int,
        prev: int,
        face: int,
        edge_index: int,
        twin: int = NO_TWIN,
    ) -> None:
        _check_index("Half-edge", index, self.half_edge_count)
        _check_index("Vertex", origin, self.vertex_count)
        _check_index("Half-edge", next, self.half_edge_count)
        _check_index("Half-edge", prev, self.half_edge_count)
        _check_index("Face", face, self.face_count)
        _check_index("Edge", edge_index, self.edge_count)
        if twin != NO_TWIN:
            _check_index("Half-edge", twin, self.half_edge_count)
        self._half_edges[index] = HalfEdge(
            index=index, origin=origin, twin=twin, next=next, prev=prev, face=face, edge_index=edge_index
        )

    def set_face(self, index: int, side: int, valence: int) -> None:
        _check_index("Face", index, self.face_count)
        _check_index("Half-edge", side, self.half_edge_count)
        self._faces[index] = Face(index=index, side=side, valence=valence)

    def build(self) -> Mesh:
        """
        Freeze the populated collections into a Mesh.

        Raises:
            InvalidTopology: If any slot was never populated or a vertex has no
                             outgoing half-edge.
        """
        for kind, items in (("Vertex", self._vertices), ("Half-edge", self._half_edges), ("Face", self._faces)):
            missing = [i for i, item in enumerate(items) if item is None]
            if missing:
                raise InvalidTopology(f"{len(missing)} {kind.lower()} slot(s) never populated, first is {missing[0]}.")

        unlinked = [v.index for v in self._vertices if v.outgoing == UNSET]
        if unlinked:
            raise InvalidTopology(f"Vertex {unlinked[0]} has no outgoing half-edge.")

        return Mesh(
            vertices=self._vertices,
            half_edges=self._half_edges,
            faces=self._faces,
            edge_count=self.edge_count,
        )


def _check_index(kind: str, index: int, size: int) -> None:
    if not 0 <= index < size:
        raise IndexOutOfRange(kind, index, size)

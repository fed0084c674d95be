"""
Half-Edge Mesh Construction
===========================
Turns polygon soup (positions + vertex-index faces) into a half-edge Mesh.

Why is this file needed?
------------------------
1. Translation: file readers only know indexed polygons; the subdividers need
   the full origin/twin/next/prev/face connectivity.
2. Layout: half-edges are laid out face by face, so triangle meshes come out
   face-contiguous (face ``f`` owns half-edges ``3f .. 3f + 2``), which is what
   the Loop index arithmetic relies on.
3. Validation: orientation conflicts, edges shared by more than two faces and
   non-manifold vertices are rejected here, before any subdivision runs.
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence, TYPE_CHECKING

import numpy as np

from meshsubdivision.model.entities import NO_TWIN, UNSET
from meshsubdivision.model.errors import IndexOutOfRange, InvalidTopology
from meshsubdivision.model.mesh import Mesh, MeshBuilder

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


def fan_triangulate(polygons: Iterable[Sequence[int]]) -> list[list[int]]:
    """Split every polygon into a fan of triangles around its first vertex."""
    triangles: list[list[int]] = []
    for polygon in polygons:
        for i in range(1, len(polygon) - 1):
            triangles.append([polygon[0], polygon[i], polygon[i + 1]])
    return triangles


class MeshInitializer:
    """
    Builds half-edge meshes from indexed polygons.
    """
    def __init__(self, triangulate: bool = False) -> None:
        """
        Args:
            triangulate: Fan-triangulate polygons with more than three sides.
        """
        self.triangulate = triangulate

    def construct_half_edge_mesh(
        self,
        positions: Sequence[Sequence[float]] | npt.NDArray[np.float64],
        faces: Iterable[Sequence[int]],
    ) -> Mesh:
        """
        Construct a validated half-edge mesh.

        Args:
            positions: (N, 3) vertex coordinates.
            faces: Zero-based vertex indices of each polygon, counter-clockwise.

        Raises:
            IndexOutOfRange: A face references a vertex that does not exist.
            InvalidTopology: Degenerate polygons, inconsistent orientation or
                             edges shared by more than two faces.
            NonManifoldVertex: A vertex whose faces do not form a single fan.
        """
        coords = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        polygons = [[int(i) for i in face] for face in faces]

        for f, polygon in enumerate(polygons):
            if len(polygon) < 3:
                raise InvalidTopology(f"Face {f} has only {len(polygon)} vertices.")
            if len(set(polygon)) != len(polygon):
                raise InvalidTopology(f"Face {f} repeats a vertex: {polygon}.")
            for i in polygon:
                if not 0 <= i < len(coords):
                    raise IndexOutOfRange("Vertex", i, len(coords))

        if self.triangulate:
            polygons = fan_triangulate(polygons)

        coords, polygons = self._drop_unused_vertices(coords, polygons)
        mesh = self._link(coords, polygons)
        mesh.validate()

        logger.info(f"Constructed half-edge mesh {mesh!r}")
        return mesh

    @staticmethod
    def _drop_unused_vertices(
        coords: npt.NDArray[np.float64],
        polygons: list[list[int]],
    ) -> tuple[npt.NDArray[np.float64], list[list[int]]]:
        used = sorted({i for polygon in polygons for i in polygon})
        if len(used) == len(coords):
            return coords, polygons

        logger.warning(f"Dropping {len(coords) - len(used)} vertices not referenced by any face.")
        remap = {old: new for new, old in enumerate(used)}
        return coords[used], [[remap[i] for i in polygon] for polygon in polygons]

    @staticmethod
    def _link(coords: npt.NDArray[np.float64], polygons: list[list[int]]) -> Mesh:
        # 1) Directed edges, face by face
        origins: list[int] = []
        nexts: list[int] = []
        prevs: list[int] = []
        face_of: list[int] = []
        directed: dict[tuple[int, int], int] = {}

        for f, polygon in enumerate(polygons):
            base = len(origins)
            k = len(polygon)
            for i, u in enumerate(polygon):
                w = polygon[(i + 1) % k]
                h = base + i
                if (u, w) in directed:
                    raise InvalidTopology(
                        f"Directed edge ({u}, {w}) of face {f} already belongs to face "
                        f"{face_of[directed[(u, w)]]}: inconsistent orientation or non-manifold edge."
                    )
                directed[(u, w)] = h
                origins.append(u)
                nexts.append(base + (i + 1) % k)
                prevs.append(base + (i - 1) % k)
                face_of.append(f)

        # 2) Twins and undirected edge indices (order of first appearance)
        n_half_edges = len(origins)
        twins = [directed.get((origins[nexts[h]], origins[h]), NO_TWIN) for h in range(n_half_edges)]
        edge_index = [UNSET] * n_half_edges
        valence = [0] * len(coords)
        edge_count = 0
        for h in range(n_half_edges):
            twin = twins[h]
            if twin != NO_TWIN and twin < h:
                edge_index[h] = edge_index[twin]
                continue
            edge_index[h] = edge_count
            edge_count += 1
            valence[origins[h]] += 1
            valence[origins[nexts[h]]] += 1

        # 3) Populate
        builder = MeshBuilder(
            n_vertices=len(coords),
            n_half_edges=n_half_edges,
            n_faces=len(polygons),
            edge_count=edge_count,
        )
        for v, point in enumerate(coords):
            builder.set_vertex(v, point, valence=valence[v])

        boundary_claimed: set[int] = set()
        for h in range(n_half_edges):
            builder.set_half_edge(
                h,
                origin=origins[h],
                next=nexts[h],
                prev=prevs[h],
                face=face_of[h],
                edge_index=edge_index[h],
                twin=twins[h],
            )
            # A boundary vertex keeps an outgoing boundary half-edge
            if origins[h] not in boundary_claimed:
                builder.set_outgoing(origins[h], h)
                if twins[h] == NO_TWIN:
                    boundary_claimed.add(origins[h])

        offset = 0
        for f, polygon in enumerate(polygons):
            builder.set_face(f, side=offset, valence=len(polygon))
            offset += len(polygon)

        return builder.build()

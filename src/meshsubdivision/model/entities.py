"""
Half-Edge Entities
==================
Vertex, HalfEdge and Face records of the half-edge data structure.

Every cross-reference is an integer index into the collections of the mesh
that owns the record, so a record can never point into another mesh. The
records are frozen; a mesh is built once (see ``MeshBuilder``) and never edited.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

# Twin of a half-edge lying on the open boundary of the mesh.
NO_TWIN = -1

# Reference not assigned yet (only seen while a mesh is being populated).
UNSET = -1


@dataclass(frozen=True)
class Vertex:
    """
    A point of the mesh plus its local connectivity metadata.

    Attributes:
        index: Position in the owning mesh's vertex collection.
        coords: Read-only [X, Y, Z] coordinates.
        outgoing: Index of one half-edge whose origin is this vertex.
        valence: Number of edges incident to the vertex.
    """
    index: int
    coords: npt.NDArray[np.float64] = field(compare=False)
    outgoing: int = UNSET
    valence: int = 0

    def __post_init__(self) -> None:
        coords = np.array(self.coords, dtype=np.float64).reshape(3)
        coords.setflags(write=False)
        object.__setattr__(self, "coords", coords)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(index={self.index}, coords={self.coords.tolist()}, "
            f"outgoing={self.outgoing}, valence={self.valence})"
        )


@dataclass(frozen=True)
class HalfEdge:
    """
    One directed side of an undirected mesh edge.

    ``next``/``prev`` walk counter-clockwise around ``face``. ``twin`` is
    ``NO_TWIN`` on the boundary. A half-edge and its twin share ``edge_index``.
    """
    index: int
    origin: int = UNSET
    twin: int = NO_TWIN
    next: int = UNSET
    prev: int = UNSET
    face: int = UNSET
    edge_index: int = UNSET

    @property
    def is_boundary(self) -> bool:
        return self.twin == NO_TWIN


@dataclass(frozen=True)
class Face:
    """A polygon given by one of its half-edges and its number of sides."""
    index: int
    side: int = UNSET
    valence: int = 0

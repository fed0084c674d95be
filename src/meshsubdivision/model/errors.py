"""
Mesh Errors
===========
Exceptions raised by the half-edge core.

All of them derive from ``MeshError`` (itself a ``ValueError``) so callers can
reject a bad import or keep the previous subdivision level with a single
``except`` clause.
"""


class MeshError(ValueError):
    """Base class for every failure of the mesh core."""


class InvalidTopology(MeshError):
    """A face cycle, twin pairing or half-edge layout is inconsistent."""


class NonManifoldVertex(MeshError):
    """The one-ring walk around a vertex did not close within its valence."""

    def __init__(self, vertex: int, message: str | None = None) -> None:
        self.vertex = vertex
        super().__init__(message or f"One-ring of vertex {vertex} does not close; mesh is not manifold there.")


class DegenerateGeometry(MeshError):
    """Zero-length edges or zero-area faces where a direction is required."""


class IndexOutOfRange(MeshError, IndexError):
    """A derived index falls outside the bounds of its collection."""

    def __init__(self, kind: str, index: int, size: int) -> None:
        self.kind = kind
        self.index = index
        self.size = size
        super().__init__(f"{kind} index {index} out of range for collection of size {size}.")

"""
meshsubdivision
===============
Half-edge meshes and Loop subdivision.

    >>> from meshsubdivision import ObjIO, SubdivisionLevels
    >>> levels = SubdivisionLevels(ObjIO.load_mesh("assets/icosahedron.obj"))
    >>> levels.level(2).stats()
"""
from importlib.metadata import PackageNotFoundError, version

from meshsubdivision.controller.initializer import MeshInitializer
from meshsubdivision.controller.levels import SubdivisionLevels
from meshsubdivision.controller.subdivision import LoopSubdivider, SubdivisionScheme, Subdivider, get_subdivider
from meshsubdivision.model.entities import NO_TWIN, Face, HalfEdge, Vertex
from meshsubdivision.model.errors import (
    DegenerateGeometry,
    IndexOutOfRange,
    InvalidTopology,
    MeshError,
    NonManifoldVertex,
)
from meshsubdivision.model.io import ObjIO
from meshsubdivision.model.mesh import Mesh, MeshBuilder, MeshStats, RenderAttributes

try:
    __version__ = version("meshsubdivision")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    "DegenerateGeometry",
    "Face",
    "HalfEdge",
    "IndexOutOfRange",
    "InvalidTopology",
    "LoopSubdivider",
    "Mesh",
    "MeshBuilder",
    "MeshError",
    "MeshInitializer",
    "MeshStats",
    "NO_TWIN",
    "NonManifoldVertex",
    "ObjIO",
    "RenderAttributes",
    "SubdivisionLevels",
    "SubdivisionScheme",
    "Subdivider",
    "Vertex",
    "get_subdivider",
]

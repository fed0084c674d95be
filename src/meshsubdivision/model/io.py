"""
Input/Output Manager (OBJ)
Reads polygon meshes through meshio and writes meshes back to disk.
"""
from __future__ import annotations

import errno
import logging
import os
from typing import Optional, TYPE_CHECKING

import meshio
import numpy as np
import pyvista as pv

from meshsubdivision.controller.initializer import MeshInitializer
from meshsubdivision.view.vtk_utils import VtkUtils

if TYPE_CHECKING:
    import numpy.typing as npt
    from meshsubdivision.model.mesh import Mesh

# Get module logger
logger = logging.getLogger(__name__)

# meshio cell blocks that hold surface polygons
SURFACE_CELL_TYPES = ("triangle", "quad", "polygon")

# Suffixes written through PyVista instead of meshio's OBJ writer
PYVISTA_SUFFIXES = (".vtk", ".vtp", ".ply", ".stl")


def _cell_type(valence: int) -> str:
    return {3: "triangle", 4: "quad"}.get(valence, "polygon")


class ObjIO:
    @staticmethod
    def read(filepath: str, file_format: Optional[str] = None) -> tuple[npt.NDArray[np.float64], list[list[int]]]:
        """
        Read the points and surface polygons of a mesh file.

        The format is taken from the suffix unless ``file_format`` is given.
        Triangle, quad and polygon cell blocks are collected in file order;
        any other cell block (lines, vertices) is skipped.

        Returns:
            (positions, faces): (N, 3) coordinates and zero-based polygons.

        Raises:
            FileNotFoundError: If ``filepath`` does not exist.
            ValueError: If meshio cannot parse the file, or the faces reference
                        vertices that do not exist.
        """
        logger.info(f"Reading mesh file: {filepath}")
        if not os.path.isfile(filepath):
            raise FileNotFoundError(errno.ENOENT, "Mesh file not found", filepath)

        try:
            data = meshio.read(filepath, file_format=file_format)
        except (meshio.ReadError, ValueError, IndexError) as e:
            raise ValueError(f"{filepath}: cannot read mesh ({e}).") from e

        positions = np.asarray(data.points, dtype=np.float64)
        if positions.ndim != 2 or positions.shape[1] != 3:
            raise ValueError(f"{filepath}: vertices need 3 coordinates, got shape {positions.shape}.")

        faces: list[list[int]] = []
        for block in data.cells:
            if block.type not in SURFACE_CELL_TYPES:
                logger.debug(f"Skipping {len(block.data)} '{block.type}' cells.")
                continue
            faces.extend([int(i) for i in cell] for cell in block.data)

        n = len(positions)
        for f, face in enumerate(faces):
            bad = [i for i in face if not 0 <= i < n]
            if bad:
                raise ValueError(f"{filepath}: face {f} references vertex {bad[0] + 1} outside 1..{n}.")

        logger.debug(f"Read {n} vertices and {len(faces)} faces.")
        return positions, faces

    @staticmethod
    def write(mesh: Mesh, filepath: str, include_normals: bool = False) -> None:
        """
        Write ``mesh`` as an OBJ file.

        Consecutive faces of equal valence share one meshio cell block, so the
        face order of the mesh is kept in the file.

        Args:
            mesh: Mesh to write.
            filepath: Destination path.
            include_normals: Also write the angle-weighted vertex normals.
        """
        half_edges = mesh.half_edges
        blocks: list[tuple[str, list[list[int]]]] = []
        for f in range(mesh.face_count()):
            ids = [half_edges[h].origin for h in mesh.face_half_edges(f)]
            if blocks and len(blocks[-1][1][0]) == len(ids):
                blocks[-1][1].append(ids)
            else:
                blocks.append((_cell_type(len(ids)), [ids]))

        point_data = {}
        if include_normals:
            _, normals = mesh.recompute_normals()
            point_data["obj:vn"] = normals

        out = meshio.Mesh(
            mesh.vertex_coords(),
            [(cell_type, np.array(cells, dtype=np.int64)) for cell_type, cells in blocks],
            point_data=point_data,
        )
        meshio.write(filepath, out, file_format="obj")
        logger.info(f"Mesh written to: {filepath}")

    @staticmethod
    def load_mesh(filepath: str, triangulate: bool = False) -> Mesh:
        """Read a mesh file and construct its half-edge mesh."""
        positions, faces = ObjIO.read(filepath)
        return MeshInitializer(triangulate=triangulate).construct_half_edge_mesh(positions, faces)

    @staticmethod
    def export_mesh(mesh: Mesh, filepath: str) -> None:
        """
        Export ``mesh``; ``.obj`` goes through meshio with vertex normals,
        VTK-readable formats go through PyVista.
        """
        ext = os.path.splitext(filepath)[1].lower()
        if ext == ".obj":
            ObjIO.write(mesh, filepath, include_normals=True)
            return

        if ext not in PYVISTA_SUFFIXES:
            raise ValueError(f"Unsupported export format '{ext}'.")

        polydata: pv.PolyData = VtkUtils.mesh_to_polydata(mesh)
        polydata.save(filepath)
        logger.info(f"Mesh exported to: {filepath}")

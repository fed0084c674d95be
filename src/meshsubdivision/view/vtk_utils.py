"""
VTK Utilities
Helper functions converting half-edge meshes into PyVista data.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import pyvista as pv

if TYPE_CHECKING:
    from meshsubdivision.model.mesh import Mesh, RenderAttributes

logger = logging.getLogger(__name__)


class VtkUtils:
    @staticmethod
    def faces_to_vtk_cells(
        indices: npt.NDArray[np.uint32],
        face_valences: npt.NDArray[np.int64],
    ) -> npt.NDArray[np.int64]:
        """
        Convert flattened face-vertex indices into a VTK cell array.

        Args:
            indices: Face-vertex indices, face after face.
            face_valences: Number of vertices of each face.

        Returns:
            [n0, i0, i1, ..., n1, j0, j1, ...] as expected by ``pv.PolyData``.
        """
        valences = np.asarray(face_valences, dtype=np.int64)
        starts = np.cumsum(valences) - valences
        return np.insert(np.asarray(indices, dtype=np.int64), starts, valences)

    @staticmethod
    def render_attributes_to_polydata(attributes: RenderAttributes) -> pv.PolyData:
        """Build a PolyData surface with the vertex normals as point data."""
        if len(attributes.face_valences) == 0:
            return pv.PolyData(attributes.positions)

        cells = VtkUtils.faces_to_vtk_cells(attributes.indices, attributes.face_valences)
        pd = pv.PolyData(attributes.positions, cells)
        pd.point_data["Normals"] = attributes.normals
        return pd

    @staticmethod
    def mesh_to_polydata(mesh: Mesh) -> pv.PolyData:
        """Extract the render attributes of ``mesh`` and wrap them in a PolyData."""
        pd = VtkUtils.render_attributes_to_polydata(mesh.extract_render_attributes())
        logger.debug(f"Converted {mesh!r} to PolyData with {pd.n_cells} cells.")
        return pd

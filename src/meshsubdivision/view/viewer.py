"""
Interactive Subdivision Viewer (PyVista)
========================================
A plotter window showing one subdivision level at a time.

Controls:
    slider  -- choose the subdivision level
    w       -- toggle the wireframe overlay
    s       -- toggle smooth (Phong) / flat shading
"""
from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

import pyvista as pv

from meshsubdivision.model.errors import MeshError
from meshsubdivision.view.vtk_utils import VtkUtils

if TYPE_CHECKING:
    from meshsubdivision.controller.levels import SubdivisionLevels

logger = logging.getLogger(__name__)

MESH_COLOR = "lightsteelblue"
EDGE_COLOR = "dimgray"


class SubdivisionViewer:
    def __init__(self, levels: SubdivisionLevels, off_screen: bool = False) -> None:
        """
        Args:
            levels: Level cache providing the meshes to display.
            off_screen: Render without opening a window (screenshots, tests).
        """
        self.levels = levels
        self.plotter = pv.Plotter(off_screen=off_screen)
        self.current_level: int = 0
        self.wireframe: bool = True
        self.smooth_shading: bool = True
        self._polydata: Optional[pv.PolyData] = None

    @property
    def polydata(self) -> Optional[pv.PolyData]:
        """Surface of the level currently shown."""
        return self._polydata

    def set_level(self, level: int) -> bool:
        """
        Display ``level``. On failure the previously shown level stays.

        Returns:
            True if the requested level is now shown.
        """
        try:
            mesh = self.levels.level(level)
            polydata = VtkUtils.mesh_to_polydata(mesh)
        except MeshError as e:
            logger.error(f"Cannot display level {level}, keeping level {self.current_level}: {e}")
            return False

        self._polydata = polydata
        self.current_level = level
        self._redraw()
        logger.info(f"Showing level {level}: {mesh.stats()}")
        return True

    def toggle_wireframe(self) -> None:
        self.wireframe = not self.wireframe
        self._redraw()

    def toggle_shading(self) -> None:
        self.smooth_shading = not self.smooth_shading
        self._redraw()

    def show(self, level: int = 0, screenshot: Optional[str] = None) -> None:
        """Open the window (or render off-screen) starting at ``level``."""
        self.set_level(level)
        self.plotter.add_slider_widget(
            self._on_slider,
            rng=[0, self.levels.max_level],
            value=level,
            title="Subdivision level",
            fmt="%.0f",
        )
        self.plotter.add_key_event("w", self.toggle_wireframe)
        self.plotter.add_key_event("s", self.toggle_shading)
        self.plotter.show(screenshot=screenshot)

    def _on_slider(self, value: float) -> None:
        level = int(round(value))
        if level != self.current_level:
            self.set_level(level)

    def _redraw(self) -> None:
        if self._polydata is None:
            return
        self.plotter.add_mesh(
            self._polydata,
            name="mesh",
            color=MESH_COLOR,
            smooth_shading=self.smooth_shading,
            show_edges=self.wireframe,
            edge_color=EDGE_COLOR,
            reset_camera=False,
        )
        self.plotter.render()

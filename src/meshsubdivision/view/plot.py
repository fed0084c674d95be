"""
Matplotlib debug plot of a half-edge mesh.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional, TYPE_CHECKING

import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Line3DCollection, Poly3DCollection

if TYPE_CHECKING:
    from matplotlib.figure import Figure
    from mpl_toolkits.mplot3d.axes3d import Axes3D
    from meshsubdivision.model.mesh import Mesh


def plot_mesh(
    mesh: Mesh,
    show_indices: bool = False,
    ax: Optional[Axes3D] = None,
    show: bool = False,
) -> tuple[Figure, Axes3D]:
    """
    Plot the faces of ``mesh`` with its boundary edges highlighted.

    Args:
        mesh: Mesh to draw.
        show_indices: Label every vertex with its index.
        ax: Existing 3D axes to draw into. A new figure is created otherwise.
        show: Call ``plt.show()`` before returning.
    """
    if ax is None:
        fig = plt.figure()
        ax = fig.add_subplot(projection="3d")
    else:
        fig = ax.get_figure()

    coords = mesh.vertex_coords()
    half_edges = mesh.half_edges

    polygons = [
        coords[[half_edges[h].origin for h in mesh.face_half_edges(f)]]
        for f in range(mesh.face_count())
    ]
    ax.add_collection3d(
        Poly3DCollection(polygons, facecolor="#A0C4FF", edgecolor="black", linewidths=0.5, alpha=0.5)
    )

    boundary = [
        (coords[h.origin], coords[half_edges[h.next].origin])
        for h in half_edges if h.is_boundary
    ]
    if boundary:
        ax.add_collection3d(Line3DCollection(boundary, colors="red", linewidths=2.0, label="boundary"))

    if show_indices:
        for vertex in mesh.vertices:
            x, y, z = vertex.coords
            ax.text(x, y, z, str(vertex.index), fontsize=9, color="k")

    if len(coords):
        ax.auto_scale_xyz(coords[:, 0], coords[:, 1], coords[:, 2])

    ax.set_title(f"{mesh!r} plotted at {datetime.now().strftime('%d.%m.%Y %H:%M:%S')}")
    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_zlabel("Z")

    if show:
        plt.show()
    return fig, ax

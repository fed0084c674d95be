"""
Configuration & Path Management
===============================
Central registry for file paths and numerical constants.

Nothing in here is mutable application state: the mesh core only ever takes a
Mesh as input, these values are plain module constants.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    PRESET_MODELS (dict[str, str]): Preset name -> absolute path of its OBJ file.
    MAX_SUBDIVISION_LEVEL (int): Highest level SubdivisionLevels will compute.
    DEGENERATE_TOLERANCE (float): Relative tolerance. Edges shorter than this fraction
        of the bounding-box diagonal, and corners whose sine falls below it,
        count as degenerate.
"""
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to a resource shipped next to the sources.
    """
    # config.py is in src/meshsubdivision/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Global Constants
ASSETS_PATH: str = get_resource_path("assets")

PRESET_MODELS: dict[str, str] = {
    name: os.path.join(ASSETS_PATH, f"{name}.obj")
    for name in ("tetrahedron", "octahedron", "icosahedron", "cube", "plane", "open_cube")
}

MAX_SUBDIVISION_LEVEL: int = 6
DEGENERATE_TOLERANCE: float = 1e-12

if not os.path.exists(ASSETS_PATH):
    logger.warning(f"Assets path not found at {ASSETS_PATH}")

"""
Subdivision Levels
==================
Keeps the sequence of meshes produced by repeated subdivision.

Level 0 is the imported mesh, level k + 1 is ``subdivide(level k)``. Levels are
computed lazily and cached, so moving a level slider back and forth only pays
for each step once.
"""
from __future__ import annotations

import logging

from meshsubdivision.config import MAX_SUBDIVISION_LEVEL
from meshsubdivision.controller.subdivision import SubdivisionScheme, get_subdivider
from meshsubdivision.model.errors import MeshError
from meshsubdivision.model.mesh import Mesh

logger = logging.getLogger(__name__)


class SubdivisionLevels:
    """
    Cached sequence of subdivision levels for one base mesh.
    """
    def __init__(
        self,
        base_mesh: Mesh,
        scheme: SubdivisionScheme | str = SubdivisionScheme.LOOP,
        max_level: int = MAX_SUBDIVISION_LEVEL,
    ) -> None:
        """
        Args:
            base_mesh: The level-0 mesh.
            scheme: Which subdivision rule produces the next level.
            max_level: Highest level that may be requested.
        """
        self.subdivider = get_subdivider(scheme)
        self.max_level = max_level
        self._meshes: list[Mesh] = [base_mesh]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(scheme={self.subdivider.KEY!r}, levels={len(self._meshes)})"

    def __len__(self) -> int:
        return len(self._meshes)

    def __getitem__(self, level: int) -> Mesh:
        return self.level(level)

    @property
    def base(self) -> Mesh:
        return self._meshes[0]

    @property
    def depth(self) -> int:
        """Number of cached levels beyond the base mesh."""
        return len(self._meshes) - 1

    def reset(self, base_mesh: Mesh) -> None:
        """Replace the base mesh and forget every computed level."""
        self._meshes = [base_mesh]

    def level(self, level: int) -> Mesh:
        """
        Return the mesh at ``level``, subdividing as far as needed.

        Raises:
            ValueError: If ``level`` lies outside ``0..max_level``.
            MeshError: If a subdivision step fails. Levels computed before the
                       failure stay cached.
        """
        if not 0 <= level <= self.max_level:
            raise ValueError(f"Subdivision level must lie in 0..{self.max_level}, got {level}.")

        for k in range(len(self._meshes) - 1, level):
            try:
                self._meshes.append(self.subdivider.subdivide(self._meshes[k]))
            except MeshError as e:
                logger.error(f"Subdivision of level {k} failed: {e}")
                raise
            logger.debug(f"Level {k + 1}: {self._meshes[-1].stats()}")

        return self._meshes[level]

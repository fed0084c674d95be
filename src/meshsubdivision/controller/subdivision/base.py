from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from meshsubdivision.model.mesh import Mesh


class SubdivisionScheme(StrEnum):
    LOOP = "loop"


class Subdivider(ABC):
    """
    Capability interface: refine a mesh by one subdivision step.
    """
    KEY: SubdivisionScheme

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(scheme='{self.KEY}')"

    @abstractmethod
    def subdivide(self, control_mesh: Mesh) -> Mesh:
        """
        Return a new mesh, one subdivision step finer than ``control_mesh``.

        The control mesh is read-only for the duration of the call.
        """
        pass

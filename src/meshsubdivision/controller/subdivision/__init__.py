"""
Subdivision schemes.

Importing this package registers every built-in scheme, so callers only need
``get_subdivider("loop")``.
"""
from meshsubdivision.controller.subdivision.base import SubdivisionScheme, Subdivider
from meshsubdivision.controller.subdivision.registry import get_subdivider, list_schemes, register_subdivider
from meshsubdivision.controller.subdivision.loop import LoopSubdivider, loop_beta

__all__ = [
    "LoopSubdivider",
    "SubdivisionScheme",
    "Subdivider",
    "get_subdivider",
    "list_schemes",
    "loop_beta",
    "register_subdivider",
]

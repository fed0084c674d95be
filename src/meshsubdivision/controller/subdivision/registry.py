from __future__ import annotations

from meshsubdivision.controller.subdivision.base import SubdivisionScheme, Subdivider

_REGISTRY: dict[SubdivisionScheme, type[Subdivider]] = {}


def register_subdivider(cls: type[Subdivider]) -> type[Subdivider]:
    """Class decorator to register a subdivider by its KEY."""
    key = getattr(cls, "KEY", None)
    if not key:
        raise ValueError(f"{cls.__name__} must define KEY")
    _REGISTRY[SubdivisionScheme(key)] = cls
    return cls


def get_subdivider(scheme: SubdivisionScheme | str) -> Subdivider:
    try:
        key = SubdivisionScheme(scheme)
    except ValueError:
        raise KeyError(f"No subdivider registered for scheme '{scheme}'") from None
    cls = _REGISTRY.get(key)
    if not cls:
        raise KeyError(f"No subdivider registered for scheme '{scheme}'")
    return cls()


def list_schemes() -> list[str]:
    return [str(key) for key in _REGISTRY]

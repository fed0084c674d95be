from __future__ import annotations

import logging

import pytest

from meshsubdivision.config import MAX_SUBDIVISION_LEVEL
from meshsubdivision.controller.levels import SubdivisionLevels
from meshsubdivision.model.errors import InvalidTopology


def test_base_level(tetrahedron):
    levels = SubdivisionLevels(tetrahedron)
    assert len(levels) == 1
    assert levels.depth == 0
    assert levels.base is tetrahedron
    assert levels[0] is tetrahedron
    assert levels.max_level == MAX_SUBDIVISION_LEVEL


def test_levels_are_computed_lazily_and_cached(tetrahedron):
    levels = SubdivisionLevels(tetrahedron)

    second = levels.level(2)
    assert len(levels) == 3
    assert second.face_count() == 64

    first = levels[1]
    assert first.face_count() == 16
    assert levels.level(2) is second
    assert levels[1] is first


@pytest.mark.parametrize("level", [-1, 4])
def test_level_out_of_range(tetrahedron, level):
    levels = SubdivisionLevels(tetrahedron, max_level=3)
    with pytest.raises(ValueError):
        levels.level(level)
    assert len(levels) == 1


def test_reset(tetrahedron, octahedron):
    levels = SubdivisionLevels(tetrahedron)
    levels.level(2)

    levels.reset(octahedron)
    assert len(levels) == 1
    assert levels.base is octahedron
    assert levels[1].face_count() == 32


def test_unknown_scheme(tetrahedron):
    with pytest.raises(KeyError):
        SubdivisionLevels(tetrahedron, scheme="butterfly")


def test_failure_keeps_computed_levels(quad_cube, caplog):
    levels = SubdivisionLevels(quad_cube)

    with caplog.at_level(logging.ERROR, logger="meshsubdivision"):
        with pytest.raises(InvalidTopology):
            levels.level(1)

    assert len(levels) == 1
    assert levels.base is quad_cube
    assert "Subdivision of level 0 failed" in caplog.text


def test_repr(tetrahedron):
    levels = SubdivisionLevels(tetrahedron)
    levels.level(1)
    assert repr(levels) == "SubdivisionLevels(scheme=<SubdivisionScheme.LOOP: 'loop'>, levels=2)"

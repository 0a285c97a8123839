from __future__ import annotations

from geodesy.core import assemble, detect_anchor, relocate_sticky_blocks
from geodesy.geometry import Direction, Position, Region
from geodesy.voxels import (
    BLOCKER_MARKER,
    EMPTY,
    FRAME,
    MACHINE_MARKER,
    OBSTRUCTION,
    STICKY_A,
    STICKY_B,
    actuator,
    other,
)

GEODE = Region(Position(0, 0, 0), Position(2, 2, 2))


def _lane(y, z):
    return Region(Position(0, y, z), Position(2, y, z))


def _place_markers(world, sticky=STICKY_A):
    world.set(Position(4, 1, 1), sticky)
    world.set(Position(6, 1, 1), BLOCKER_MARKER)
    for y in (2, 3, 4):
        world.set(Position(6, y, 1), MACHINE_MARKER)


def test_relocation_moves_sticky_one_step_inwards(world):
    world.set(Position(5, 1, 1), STICKY_B)
    moved = relocate_sticky_blocks(world, GEODE)
    assert moved == 1
    assert world.get(Position(4, 1, 1)) == STICKY_B
    assert world.get(Position(5, 1, 1)) == EMPTY


def test_relocation_never_replaces_obstruction(world):
    world.set(Position(4, 1, 1), OBSTRUCTION)
    world.set(Position(5, 1, 1), STICKY_A)
    assert relocate_sticky_blocks(world, GEODE) == 0
    assert world.get(Position(5, 1, 1)) == STICKY_A


def test_relocation_moves_any_non_empty_block(world):
    world.set(Position(1, -3, 1), other("minecraft:stone"))
    assert relocate_sticky_blocks(world, GEODE) == 1
    assert world.get(Position(1, -2, 1)) == other("minecraft:stone")


def test_detect_anchor_reads_markers(world):
    _place_markers(world)
    anchor = detect_anchor(world, _lane(1, 1), Direction.EAST)
    assert anchor is not None
    assert anchor.marker_pos == Position(6, 1, 1)
    assert anchor.blocker_pos == Position(5, 1, 1)
    assert anchor.anchor == Position(5, 2, 1)
    assert anchor.along is Direction.EAST
    assert anchor.up is Direction.UP
    assert anchor.sticky == STICKY_B


def test_detect_anchor_without_blocker_is_none(world):
    assert detect_anchor(world, _lane(1, 1), Direction.EAST) is None


def test_assemble_builds_machine_with_swapped_sticky(world):
    _place_markers(world, STICKY_A)
    result = assemble(world, GEODE)

    assert len(result.anchors) == 1
    assert world.get(Position(6, 1, 1)) == EMPTY
    assert world.get(Position(5, 1, 1)) == FRAME
    assert world.get(Position(5, 2, 1)) == EMPTY
    assert world.get(Position(6, 2, 1)) == actuator(Direction.WEST)
    assert world.get(Position(6, 3, 1)) == STICKY_B
    assert world.get(Position(6, 4, 1)) == STICKY_B
    assert world.get(Position(13, 2, 1)) == FRAME
    # The duct wall itself stays.
    assert world.get(Position(4, 1, 1)) == STICKY_A


def test_blocker_without_machine_marker_is_skipped(world):
    world.set(Position(4, 1, 1), STICKY_A)
    world.set(Position(6, 1, 1), BLOCKER_MARKER)
    before = dict(world.blocks)

    result = assemble(world, GEODE)

    assert result.anchors == []
    assert world.blocks == before


def test_short_marker_line_is_skipped(world):
    _place_markers(world)
    world.set(Position(6, 4, 1), EMPTY)
    result = assemble(world, GEODE)
    assert result.anchors == []
    assert world.get(Position(6, 1, 1)) == BLOCKER_MARKER


def test_missing_sticky_is_skipped(world):
    _place_markers(world)
    world.set(Position(4, 1, 1), other("minecraft:moss_carpet"))
    result = assemble(world, GEODE)
    assert result.anchors == []
    assert world.get(Position(5, 1, 1)) == EMPTY


def test_markers_along_the_lane_are_skipped(world):
    world.set(Position(4, 1, 1), STICKY_A)
    world.set(Position(6, 1, 1), BLOCKER_MARKER)
    for x in (7, 8, 9):
        world.set(Position(x, 1, 1), MACHINE_MARKER)
    assert assemble(world, GEODE).anchors == []


def test_each_marked_lane_gets_a_machine(world):
    _place_markers(world)
    # Second machine on the north face, markers stacked westwards.
    world.set(Position(1, 1, -2), STICKY_B)
    world.set(Position(1, 1, -4), BLOCKER_MARKER)
    for x in (0, -1, -2):
        world.set(Position(x, 1, -4), MACHINE_MARKER)

    result = assemble(world, GEODE)

    assert sorted(a.along.label for a in result.anchors) == ["east", "north"]
    north = next(a for a in result.anchors if a.along is Direction.NORTH)
    assert north.up is Direction.WEST
    assert north.sticky == STICKY_A
    assert north.anchor == Position(0, 1, -3)

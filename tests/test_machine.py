from __future__ import annotations

import pytest

from geodesy.geometry import Direction, Position
from geodesy.grid import MemoryGrid
from geodesy.machine import build_machine, machine_operations, machine_template
from geodesy.voxels import (
    EMPTY,
    FRAME,
    OUTPUT_INDICATOR,
    SIGNAL_EMITTER,
    SOURCE,
    STICKY_A,
    STICKY_B,
    actuator,
    signal_sensor,
)

E, W, U = Direction.EAST, Direction.WEST, Direction.UP


def test_template_layout_east_up_slime():
    S = STICKY_A
    expected = [
        ((0, 0, 0), EMPTY),
        ((0, 1, 0), EMPTY),
        ((0, 2, 0), EMPTY),
        ((1, 0, 0), actuator(W)),
        ((1, 1, 0), S),
        ((1, 2, 0), S),
        ((2, 2, 0), S),
        ((2, 1, 0), signal_sensor(U)),
        ((2, 0, 0), OUTPUT_INDICATOR),
        ((3, 0, 0), signal_sensor(W)),
        ((3, 1, 0), S),
        ((3, 2, 0), S),
        ((4, 0, 0), actuator(E)),
        ((4, 1, 0), S),
        ((5, 0, 0), STICKY_A),
        ((5, 1, 0), actuator(W)),
        ((7, 0, 0), STICKY_A),
        ((7, 1, 0), SIGNAL_EMITTER),
        ((6, 1, 0), signal_sensor(U)),
        ((6, 0, 0), STICKY_A),
        ((6, 1, 0), signal_sensor(E)),
        ((8, 0, 0), FRAME),
    ]
    got = [(tuple(p.offset), p.state) for p in machine_template(E, U, S)]
    assert got == expected


def test_template_is_a_pure_function():
    first = machine_template(E, U, STICKY_A)
    second = machine_template(E, U, STICKY_A)
    assert first == second
    assert machine_template(E, U, STICKY_B) != first


def test_honey_variant_only_changes_the_chosen_sticky_cells():
    slime = machine_template(E, U, STICKY_A)
    honey = machine_template(E, U, STICKY_B)
    changed = [(a.offset, b.state) for a, b in zip(slime, honey) if a != b]
    assert len(changed) == 6
    assert all(state == STICKY_B for _offset, state in changed)
    # The lower slime row of the pulling half is always slime.
    assert honey[14].state == STICKY_A


def test_observer_written_twice_ends_live():
    ops = machine_operations(Position(0, 0, 0), Position(10, 0, 0), E, U, STICKY_A)
    writes = [state for pos, state in ops if pos == Position(16, 1, 0)]
    assert writes == [signal_sensor(U), signal_sensor(E)]


def test_template_rejects_bad_parameters():
    with pytest.raises(ValueError):
        machine_template(E, U, SOURCE)
    with pytest.raises(ValueError):
        machine_template(E, W, STICKY_A)


def test_build_machine_applies_in_order():
    world = MemoryGrid()
    anchor = Position(5, 2, 1)
    blocker = Position(5, 1, 1)
    count = build_machine(world, blocker, anchor, E, U, STICKY_B)
    assert count == 23
    assert world.get(blocker) == FRAME
    assert world.get(Position(6, 2, 1)) == actuator(W)
    assert world.get(Position(6, 3, 1)) == STICKY_B
    assert world.get(Position(11, 3, 1)) == signal_sensor(E)
    assert world.get(Position(13, 2, 1)) == FRAME
    assert world.get(anchor) == EMPTY


def test_template_follows_other_orientations():
    template = machine_template(Direction.NORTH, Direction.WEST, STICKY_A)
    offsets = [tuple(p.offset) for p in template]
    assert offsets[3] == (0, 0, -1)
    assert offsets[4] == (-1, 0, -1)
    assert template[3].state == actuator(Direction.SOUTH)
    assert offsets[-1] == (0, 0, -8)

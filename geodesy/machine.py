"""Flying machine template placed at each detected anchor.

Side view with ``along`` pointing right and ``up`` pointing up::

    S HHH
    S HVHH[<N
    SB[L>]SSSB

The template is a fixed write sequence. Order matters: later writes replace
earlier ones so no observer fires while the machine is only half built.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from .geometry import Direction, Position
from .grid import Grid
from .voxels import (
    EMPTY,
    FRAME,
    OUTPUT_INDICATOR,
    SIGNAL_EMITTER,
    STICKY_A,
    Role,
    VoxelState,
    actuator,
    signal_sensor,
)

ORIGIN = Position(0, 0, 0)


@dataclass(frozen=True)
class Placement:
    offset: Position
    state: VoxelState


def _layers(along: Direction, up: Direction, sticky: VoxelState) -> Tuple[Tuple[int, Tuple[Tuple[int, VoxelState], ...]], ...]:
    # (cursor advance along ``along`` before the layer, ((up level, state), ...))
    back = along.opposite()
    return (
        # Machine markers are wiped first.
        (0, ((0, EMPTY), (1, EMPTY), (2, EMPTY))),
        (1, ((0, actuator(back)), (1, sticky), (2, sticky))),
        (1, ((2, sticky), (1, signal_sensor(up)), (0, OUTPUT_INDICATOR))),
        (1, ((0, signal_sensor(back)), (1, sticky), (2, sticky))),
        (1, ((0, actuator(along)), (1, sticky))),
        (1, ((0, STICKY_A), (1, actuator(back)))),
        # Skip a layer, place the note block, then come back for the observer.
        (2, ((0, STICKY_A), (1, SIGNAL_EMITTER))),
        (-1, ((1, signal_sensor(up)), (0, STICKY_A), (1, signal_sensor(along)))),
        (2, ((0, FRAME),)),
    )


def machine_template(along: Direction, up: Direction, sticky: VoxelState) -> Tuple[Placement, ...]:
    if sticky.role not in (Role.STICKY_A, Role.STICKY_B):
        raise ValueError(f"machine needs a sticky block, got {sticky.role.value}")
    if along.axis is up.axis:
        raise ValueError(f"along={along} and up={up} must be orthogonal")
    out: List[Placement] = []
    cursor = ORIGIN
    for advance, cells in _layers(along, up, sticky):
        cursor = cursor.offset(along, advance)
        for level, state in cells:
            out.append(Placement(cursor.offset(up, level), state))
    return tuple(out)


def machine_operations(
    blocker_pos: Position,
    anchor: Position,
    along: Direction,
    up: Direction,
    sticky: VoxelState,
) -> List[Tuple[Position, VoxelState]]:
    ops: List[Tuple[Position, VoxelState]] = [(blocker_pos, FRAME)]
    for placement in machine_template(along, up, sticky):
        ops.append((anchor.translate(placement.offset), placement.state))
    return ops


def build_machine(
    world: Grid,
    blocker_pos: Position,
    anchor: Position,
    along: Direction,
    up: Direction,
    sticky: VoxelState,
) -> int:
    ops = machine_operations(blocker_pos, anchor, along, up, sticky)
    for pos, state in ops:
        world.set(pos, state)
    return len(ops)

"""Geode detection, work area preparation, projection and machine assembly."""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .errors import DegenerateEfficiencyWarning, EmptyRegionError, MalformedMarkerError
from .geometry import Direction, Position, Region
from .grid import Grid
from .machine import build_machine
from .voxels import (
    CONTAINMENT_WALL,
    EMPTY,
    FRAME,
    MACHINE_WALL,
    OBSTRUCTION,
    SOURCE,
    STICKY_SWAP,
    Role,
    VoxelState,
    growable_node,
    node_indicator,
)

LOG = logging.getLogger("geodesy.core")

# Distance between the geode bounds and the duct walls placed by projections.
WALL_OFFSET = 2
# Work area margin around the geode.
BUILD_MARGIN = 16
PRESERVE_ROLES = {Role.SOURCE, Role.EXTERNAL_TRIGGER}
HIGHLIGHT_OFFSET = WALL_OFFSET + 1


# --- Region detector ---


def detect_geode(world: Grid, pos1: Tuple[int, int, int], pos2: Tuple[int, int, int]) -> Region:
    scan = Region(Position(*pos1), Position(*pos2))
    sources = [pos for pos in scan.positions() if world.get(pos).role is Role.SOURCE]
    if not sources:
        raise EmptyRegionError(f"No source blocks found in {scan}")
    # One extra layer so the nodes growing on the outer sources are included.
    geode = Region.encompass(sources).expand(1)
    LOG.info("Detected geode %s (%d source blocks)", geode, len(sources))
    return geode


# --- Work area ---


def work_area(geode: Region, margin: int = BUILD_MARGIN) -> Region:
    return geode.expand(margin)


def marker_position(geode: Region, margin: int = BUILD_MARGIN) -> Position:
    return work_area(geode, margin).hi


def marker_command(bounds: Tuple[int, ...]) -> str:
    return "/geodesy area {} {} {} {} {} {}".format(*bounds)


def read_work_area_marker(world: Grid, geode: Region, margin: int = BUILD_MARGIN) -> Optional[Tuple[int, ...]]:
    state = world.get(marker_position(geode, margin))
    if state.role is not Role.EXTERNAL_TRIGGER or len(state.payload) != 6:
        return None
    return state.payload


def prepare_work_area(world: Grid, geode: Region, force: bool = False, margin: int = BUILD_MARGIN) -> bool:
    """Clear the work area around ``geode`` and wall it in.

    Returns False without touching the world when the work area marker is
    already in place and ``force`` is not set.
    """
    work = work_area(geode, margin)
    marker_pos = work.hi
    if not force and world.get(marker_pos).role is Role.EXTERNAL_TRIGGER:
        LOG.info("Work area already prepared (marker at %s)", tuple(marker_pos))
        return False

    cleared = 0
    for pos in work.positions():
        state = world.get(pos)
        if state.role is Role.EMPTY or state.role in PRESERVE_ROLES:
            continue
        world.set(pos, EMPTY)
        cleared += 1

    # Keep water and falling blocks from leaking out of the work area.
    for pos in work.expand(1).wall_positions():
        world.set(pos, CONTAINMENT_WALL)

    world.set(marker_pos, VoxelState(Role.EXTERNAL_TRIGGER, payload=geode.bounds))
    LOG.info("Prepared work area %s (cleared=%d, marker=%s)", work, cleared, marker_command(geode.bounds))
    return True


def highlight_geode(world: Grid, geode: Region) -> Position:
    pos = geode.lo.translate((-HIGHLIGHT_OFFSET, -HIGHLIGHT_OFFSET, -HIGHLIGHT_OFFSET))
    payload = (HIGHLIGHT_OFFSET, HIGHLIGHT_OFFSET, HIGHLIGHT_OFFSET) + geode.size
    world.set(pos, VoxelState(Role.HIGHLIGHT, payload=payload))
    return pos


def draw_frame(world: Grid, geode: Region) -> int:
    count = 0
    for pos in geode.expand(WALL_OFFSET).edge_positions():
        world.set(pos, FRAME)
        count += 1
    return count


# --- Growth ---


def grow_clusters(world: Grid, geode: Region) -> int:
    grown = 0
    for pos in geode.positions():
        if world.get(pos).role is not Role.SOURCE:
            continue
        for direction in Direction:
            bud_pos = pos.offset(direction)
            if world.get(bud_pos).role is Role.EMPTY:
                world.set(bud_pos, growable_node(direction))
                grown += 1
    return grown


def count_nodes(world: Grid, geode: Region) -> int:
    return sum(1 for pos in geode.positions() if world.get(pos).role is Role.GROWABLE_NODE)


def replace_nodes_with_indicators(world: Grid, geode: Region) -> int:
    """Swap the nodes left after projection for buttons so items cannot get stuck on them."""
    replaced = 0
    for pos in geode.positions():
        state = world.get(pos)
        if state.role is Role.GROWABLE_NODE:
            world.set(pos, node_indicator(state.facing or Direction.UP))
            replaced += 1
    return replaced


def compute_efficiency(total: int, left: int) -> Optional[float]:
    if total == 0:
        warnings.warn("geode has no growable nodes; efficiency is not applicable", DegenerateEfficiencyWarning, stacklevel=2)
        return None
    return 100.0 * (total - left) / total


# --- Projection ---


@dataclass
class ProjectionCounts:
    blocked: int = 0
    machines: int = 0
    empty: int = 0


def classify_slice(world: Grid, lane: Region) -> Tuple[bool, bool]:
    has_source = False
    has_node = False
    for pos in lane.positions():
        role = world.get(pos).role
        if role is Role.SOURCE:
            has_source = True
        elif role is Role.GROWABLE_NODE:
            has_node = True
    return has_source, has_node


def project_geode(world: Grid, geode: Region, direction: Direction) -> ProjectionCounts:
    counts = ProjectionCounts()
    back = direction.opposite()
    for lane in geode.slices(direction.axis):
        has_source, has_node = classify_slice(world, lane)
        if has_source:
            wall = OBSTRUCTION
            counts.blocked += 1
        elif has_node:
            wall = MACHINE_WALL
            counts.machines += 1
            # A flying machine sweeps this lane: everything in it is harvested.
            for pos in lane.positions():
                world.set(pos, EMPTY)
        else:
            wall = EMPTY
            counts.empty += 1
        world.set(lane.endpoint(direction).offset(direction, WALL_OFFSET), wall)
        world.set(lane.endpoint(back).offset(back, WALL_OFFSET), OBSTRUCTION)
    LOG.debug(
        "Projected %s: blocked=%d machines=%d empty=%d",
        direction,
        counts.blocked,
        counts.machines,
        counts.empty,
    )
    return counts


# --- Assembly ---


@dataclass(frozen=True)
class Anchor:
    marker_pos: Position
    blocker_pos: Position
    anchor: Position
    along: Direction
    up: Direction
    sticky: VoxelState


@dataclass
class AssemblyResult:
    moved: int = 0
    anchors: List[Anchor] = field(default_factory=list)


def relocate_sticky_blocks(world: Grid, geode: Region) -> int:
    moved = 0
    for direction in Direction:
        for lane in geode.slices(direction.axis):
            target_pos = lane.endpoint(direction).offset(direction, WALL_OFFSET)
            source_pos = target_pos.offset(direction, 1)
            source = world.get(source_pos)
            if source.role is Role.EMPTY or world.get(target_pos).role is Role.OBSTRUCTION:
                continue
            world.set(target_pos, source)
            world.set(source_pos, EMPTY)
            moved += 1
    return moved


def _find_machine_marker(world: Grid, blocker_pos: Position) -> Position:
    for direction in Direction:
        pos = blocker_pos.offset(direction)
        if world.get(pos).role is Role.MACHINE_MARKER:
            return pos
    raise MalformedMarkerError(f"no machine marker next to blocker marker at {tuple(blocker_pos)}")


def _find_machine_direction(world: Grid, first_machine_pos: Position) -> Direction:
    for direction in Direction:
        if (
            world.get(first_machine_pos.offset(direction, 1)).role is Role.MACHINE_MARKER
            and world.get(first_machine_pos.offset(direction, 2)).role is Role.MACHINE_MARKER
        ):
            return direction
    raise MalformedMarkerError(f"no line of three machine markers from {tuple(first_machine_pos)}")


def detect_anchor(world: Grid, lane: Region, direction: Direction) -> Optional[Anchor]:
    """Read the markers at the end of ``lane``.

    Returns None when the lane has no blocker marker and raises
    MalformedMarkerError when the markers around it are unusable.
    """
    end = lane.endpoint(direction)
    marker_pos = end.offset(direction, WALL_OFFSET + 2)
    if world.get(marker_pos).role is not Role.BLOCKER_MARKER:
        return None
    first_machine_pos = _find_machine_marker(world, marker_pos)
    up = _find_machine_direction(world, first_machine_pos)
    if up.axis is direction.axis:
        raise MalformedMarkerError(f"machine markers at {tuple(first_machine_pos)} run along the lane")
    # The machine uses the other sticky block so it does not pick up the items it drops.
    sticky = STICKY_SWAP.get(world.get(end.offset(direction, WALL_OFFSET)).role)
    if sticky is None:
        raise MalformedMarkerError(f"no sticky block in front of blocker marker at {tuple(marker_pos)}")
    # The machine is built one block closer to the geode than the markers.
    back = direction.opposite()
    return Anchor(
        marker_pos=marker_pos,
        blocker_pos=marker_pos.offset(back),
        anchor=first_machine_pos.offset(back),
        along=direction,
        up=up,
        sticky=sticky,
    )


def assemble(world: Grid, geode: Region) -> AssemblyResult:
    result = AssemblyResult(moved=relocate_sticky_blocks(world, geode))
    for direction in Direction:
        for lane in geode.slices(direction.axis):
            try:
                anchor = detect_anchor(world, lane, direction)
            except MalformedMarkerError as exc:
                LOG.debug("Skipping lane %s: %s", lane, exc)
                continue
            if anchor is None:
                continue
            # The skull is not overwritten by the machine, wipe it explicitly.
            world.set(anchor.marker_pos, EMPTY)
            build_machine(world, anchor.blocker_pos, anchor.anchor, anchor.along, anchor.up, anchor.sticky)
            result.anchors.append(anchor)
    LOG.info("Assembly done: moved=%d machines=%d", result.moved, len(result.anchors))
    return result

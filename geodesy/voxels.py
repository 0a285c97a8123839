"""Voxel roles and the block-state strings they map to in the world."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .errors import SnapshotError
from .geometry import Direction


class Role(Enum):
    EMPTY = "empty"
    SOURCE = "source"
    GROWABLE_NODE = "growable_node"
    NODE_INDICATOR = "node_indicator"
    STICKY_A = "sticky_a"
    STICKY_B = "sticky_b"
    OBSTRUCTION = "obstruction"
    FRAME = "frame"
    MACHINE_WALL = "machine_wall"
    BLOCKER_MARKER = "blocker_marker"
    MACHINE_MARKER = "machine_marker"
    ACTUATOR = "actuator"
    SIGNAL_EMITTER = "signal_emitter"
    SIGNAL_SENSOR = "signal_sensor"
    OUTPUT_INDICATOR = "output_indicator"
    CONTAINMENT_WALL = "containment_wall"
    EXTERNAL_TRIGGER = "external_trigger"
    HIGHLIGHT = "highlight"
    OTHER = "other"


@dataclass(frozen=True)
class VoxelState:
    role: Role
    facing: Optional[Direction] = None
    payload: Tuple[int, ...] = ()
    name: str = ""


EMPTY = VoxelState(Role.EMPTY)
SOURCE = VoxelState(Role.SOURCE)
STICKY_A = VoxelState(Role.STICKY_A)
STICKY_B = VoxelState(Role.STICKY_B)
OBSTRUCTION = VoxelState(Role.OBSTRUCTION)
FRAME = VoxelState(Role.FRAME)
MACHINE_WALL = VoxelState(Role.MACHINE_WALL)
BLOCKER_MARKER = VoxelState(Role.BLOCKER_MARKER)
MACHINE_MARKER = VoxelState(Role.MACHINE_MARKER)
SIGNAL_EMITTER = VoxelState(Role.SIGNAL_EMITTER)
OUTPUT_INDICATOR = VoxelState(Role.OUTPUT_INDICATOR)
CONTAINMENT_WALL = VoxelState(Role.CONTAINMENT_WALL)


def growable_node(facing: Direction) -> VoxelState:
    return VoxelState(Role.GROWABLE_NODE, facing)


def node_indicator(facing: Direction) -> VoxelState:
    return VoxelState(Role.NODE_INDICATOR, facing)


def actuator(facing: Direction) -> VoxelState:
    return VoxelState(Role.ACTUATOR, facing)


def signal_sensor(facing: Direction) -> VoxelState:
    return VoxelState(Role.SIGNAL_SENSOR, facing)


def other(name: str) -> VoxelState:
    return VoxelState(Role.OTHER, name=name)


STICKY_SWAP = {Role.STICKY_A: STICKY_B, Role.STICKY_B: STICKY_A}


MATERIALS: Dict[Role, str] = {
    Role.EMPTY: "minecraft:air",
    Role.SOURCE: "minecraft:budding_amethyst",
    Role.GROWABLE_NODE: "minecraft:amethyst_cluster",
    Role.NODE_INDICATOR: "minecraft:polished_blackstone_button",
    Role.STICKY_A: "minecraft:slime_block",
    Role.STICKY_B: "minecraft:honey_block",
    Role.OBSTRUCTION: "minecraft:crying_obsidian",
    Role.FRAME: "minecraft:obsidian",
    Role.MACHINE_WALL: "minecraft:moss_block",
    Role.BLOCKER_MARKER: "minecraft:wither_skeleton_wall_skull",
    Role.MACHINE_MARKER: "minecraft:zombie_wall_head",
    Role.ACTUATOR: "minecraft:sticky_piston",
    Role.SIGNAL_EMITTER: "minecraft:note_block",
    Role.SIGNAL_SENSOR: "minecraft:observer",
    Role.OUTPUT_INDICATOR: "minecraft:redstone_lamp",
    Role.CONTAINMENT_WALL: "minecraft:tinted_glass",
    Role.EXTERNAL_TRIGGER: "minecraft:command_block",
    Role.HIGHLIGHT: "minecraft:structure_block",
}

AIR_BLOCKS = {"minecraft:air", "minecraft:cave_air", "minecraft:void_air"}

_ROLE_BY_BLOCK = {name: role for role, name in MATERIALS.items()}

# Default facing of directional blocks placed without a facing property.
_DEFAULT_FACING = {
    Role.GROWABLE_NODE: Direction.UP,
    Role.NODE_INDICATOR: Direction.NORTH,
    Role.ACTUATOR: Direction.NORTH,
    Role.SIGNAL_SENSOR: Direction.SOUTH,
}

# Buttons mount on a face; their facing only matters on walls.
_BUTTON_FACE = {
    Direction.DOWN: "ceiling",
    Direction.UP: "floor",
    Direction.NORTH: "wall",
    Direction.SOUTH: "wall",
    Direction.WEST: "wall",
    Direction.EAST: "wall",
}

STATE_RE = re.compile(r"^(?P<name>[a-z0-9_./-]+:[a-z0-9_./-]+)(?:\[(?P<props>.*)\])?$")


def parse_block_state(state: str) -> Tuple[str, Dict[str, str]]:
    raw = state.strip()
    if raw and ":" not in raw.split("[", 1)[0]:
        raw = "minecraft:" + raw
    m = STATE_RE.match(raw)
    if not m:
        raise SnapshotError(f"invalid block state syntax: {state}")
    props: Dict[str, str] = {}
    props_raw = m.group("props")
    if props_raw:
        for segment in props_raw.split(","):
            segment = segment.strip()
            if not segment:
                continue
            if "=" not in segment:
                raise SnapshotError(f"invalid property segment '{segment}' in state '{state}'")
            k, v = segment.split("=", 1)
            key, value = k.strip(), v.strip()
            if not key or not value:
                raise SnapshotError(f"invalid property segment '{segment}' in state '{state}'")
            if key in props:
                raise SnapshotError(f"duplicate property '{key}' in state '{state}'")
            props[key] = value
    return m.group("name"), props


def canonical_state(name: str, props: Dict[str, str]) -> str:
    if not props:
        return name
    return f"{name}[{','.join(f'{k}={props[k]}' for k in sorted(props))}]"


def block_name(state: VoxelState) -> str:
    if state.role is Role.OTHER:
        return state.name
    name = MATERIALS[state.role]
    if state.role not in _DEFAULT_FACING:
        return name
    facing = state.facing or _DEFAULT_FACING[state.role]
    if state.role is Role.NODE_INDICATOR:
        face = _BUTTON_FACE[facing]
        horizontal = facing if face == "wall" else Direction.NORTH
        return canonical_state(name, {"face": face, "facing": horizontal.label})
    return canonical_state(name, {"facing": facing.label})


def parse_block(state: str, payload: Tuple[int, ...] = ()) -> VoxelState:
    name, props = parse_block_state(state)
    if name in AIR_BLOCKS:
        return EMPTY
    role = _ROLE_BY_BLOCK.get(name)
    if role is None:
        return other(canonical_state(name, props))
    facing: Optional[Direction] = None
    if role in _DEFAULT_FACING:
        facing = _parse_facing(role, props, state)
    return VoxelState(role, facing, tuple(int(v) for v in payload))


def _parse_facing(role: Role, props: Dict[str, str], state: str) -> Direction:
    if role is Role.NODE_INDICATOR:
        face = props.get("face", "wall")
        if face == "ceiling":
            return Direction.DOWN
        if face == "floor":
            return Direction.UP
        if face != "wall":
            raise SnapshotError(f"invalid button face '{face}' in state '{state}'")
    raw = props.get("facing")
    if raw is None:
        return _DEFAULT_FACING[role]
    try:
        return Direction.parse(raw)
    except ValueError as exc:
        raise SnapshotError(f"invalid facing '{raw}' in state '{state}'") from exc

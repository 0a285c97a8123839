"""Voxel grid access and the JSON world snapshot format."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol, Tuple

from .errors import SnapshotError
from .geometry import Position
from .voxels import EMPTY, Role, VoxelState, block_name, parse_block

SNAPSHOT_FORMAT = 1


class Grid(Protocol):
    def get(self, pos: Position) -> VoxelState:
        ...

    def set(self, pos: Position, state: VoxelState) -> None:
        ...


class MemoryGrid:
    """Dictionary-backed grid; cells never written read as empty."""

    def __init__(self, blocks: Optional[Dict[Position, VoxelState]] = None) -> None:
        self.blocks: Dict[Position, VoxelState] = {}
        for pos, state in (blocks or {}).items():
            self.set(Position(*pos), state)

    def get(self, pos: Position) -> VoxelState:
        return self.blocks.get(Position(*pos), EMPTY)

    def set(self, pos: Position, state: VoxelState) -> None:
        key = Position(*pos)
        if state.role is Role.EMPTY:
            self.blocks.pop(key, None)
        else:
            self.blocks[key] = state

    def items(self) -> Iterator[Tuple[Position, VoxelState]]:
        for pos in sorted(self.blocks):
            yield pos, self.blocks[pos]

    def count(self, role: Role) -> int:
        return sum(1 for state in self.blocks.values() if state.role is role)

    def __len__(self) -> int:
        return len(self.blocks)

    def to_snapshot(self) -> Dict[str, object]:
        entries: List[Dict[str, object]] = []
        for pos, state in self.items():
            entry: Dict[str, object] = {"x": pos.x, "y": pos.y, "z": pos.z, "block": block_name(state)}
            if state.payload:
                entry["data"] = list(state.payload)
            entries.append(entry)
        return {"format": SNAPSHOT_FORMAT, "blocks": entries}

    @classmethod
    def from_snapshot(cls, data: object) -> "MemoryGrid":
        if not isinstance(data, dict) or not isinstance(data.get("blocks"), list):
            raise SnapshotError("snapshot must be an object with a 'blocks' list")
        fmt = data.get("format", SNAPSHOT_FORMAT)
        if fmt != SNAPSHOT_FORMAT:
            raise SnapshotError(f"unsupported snapshot format: {fmt}")
        grid = cls()
        for idx, entry in enumerate(data["blocks"]):
            if not isinstance(entry, dict):
                raise SnapshotError(f"blocks[{idx}] must be an object")
            try:
                pos = Position(int(entry["x"]), int(entry["y"]), int(entry["z"]))
                payload = tuple(int(v) for v in entry.get("data", ()))
                block = str(entry["block"])
            except (KeyError, TypeError, ValueError) as exc:
                raise SnapshotError(f"blocks[{idx}] is malformed: {exc}") from exc
            grid.set(pos, parse_block(block, payload))
        return grid

    @classmethod
    def load(cls, path: Path) -> "MemoryGrid":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise SnapshotError(f"Failed to parse world snapshot {path}: {exc}") from exc
        return cls.from_snapshot(data)

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_snapshot(), indent=2, sort_keys=True) + "\n", encoding="utf-8")


def load_or_create(path: Path) -> MemoryGrid:
    if not path.exists():
        return MemoryGrid()
    return MemoryGrid.load(path)

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Iterable, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from geodesy.geometry import Position
from geodesy.grid import MemoryGrid
from geodesy.voxels import SOURCE, Role


@pytest.fixture()
def world() -> MemoryGrid:
    return MemoryGrid()


def place_sources(world: MemoryGrid, positions: Iterable[Tuple[int, int, int]]) -> None:
    for pos in positions:
        world.set(Position(*pos), SOURCE)


def cells_with_roles(world: MemoryGrid, *roles: Role) -> dict:
    return {pos: state for pos, state in world.items() if state.role in roles}


def write_snapshot(path: Path, sources: Iterable[Tuple[int, int, int]]) -> None:
    blocks = [{"x": x, "y": y, "z": z, "block": "minecraft:budding_amethyst"} for x, y, z in sources]
    path.write_text(json.dumps({"format": 1, "blocks": blocks}), encoding="utf-8")

"""Integer voxel geometry: axes, directions, positions and axis-aligned regions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, NamedTuple, Tuple


class Axis(Enum):
    X = "x"
    Y = "y"
    Z = "z"


class Direction(Enum):
    # Declaration order is the search order for every "first match" scan.
    DOWN = ("down", Axis.Y, -1)
    UP = ("up", Axis.Y, 1)
    NORTH = ("north", Axis.Z, -1)
    SOUTH = ("south", Axis.Z, 1)
    WEST = ("west", Axis.X, -1)
    EAST = ("east", Axis.X, 1)

    def __init__(self, label: str, axis: Axis, sign: int) -> None:
        self.label = label
        self.axis = axis
        self.sign = sign

    @property
    def vector(self) -> Tuple[int, int, int]:
        return (
            self.sign if self.axis is Axis.X else 0,
            self.sign if self.axis is Axis.Y else 0,
            self.sign if self.axis is Axis.Z else 0,
        )

    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    @classmethod
    def parse(cls, name: str) -> "Direction":
        key = name.strip().upper()
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"unknown direction: {name!r}") from None

    def __str__(self) -> str:
        return self.label


_OPPOSITES = {
    Direction.DOWN: Direction.UP,
    Direction.UP: Direction.DOWN,
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.WEST: Direction.EAST,
    Direction.EAST: Direction.WEST,
}


class Position(NamedTuple):
    x: int
    y: int
    z: int

    def offset(self, direction: Direction, distance: int = 1) -> "Position":
        dx, dy, dz = direction.vector
        return Position(self.x + dx * distance, self.y + dy * distance, self.z + dz * distance)

    def translate(self, other: Tuple[int, int, int]) -> "Position":
        return Position(self.x + other[0], self.y + other[1], self.z + other[2])


def _span(a: int, b: int) -> range:
    return range(a, b + 1)


@dataclass(frozen=True)
class Region:
    """Axis-aligned box of voxels, both corners inclusive.

    The two corners may be given in any order; they are normalised so that
    ``lo`` holds the minimum and ``hi`` the maximum of every coordinate.
    """

    lo: Position
    hi: Position

    def __post_init__(self) -> None:
        a, b = Position(*self.lo), Position(*self.hi)
        object.__setattr__(self, "lo", Position(min(a.x, b.x), min(a.y, b.y), min(a.z, b.z)))
        object.__setattr__(self, "hi", Position(max(a.x, b.x), max(a.y, b.y), max(a.z, b.z)))

    @classmethod
    def encompass(cls, positions: Iterable[Tuple[int, int, int]]) -> "Region":
        pts = list(positions)
        if not pts:
            raise ValueError("cannot encompass an empty set of positions")
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        zs = [p[2] for p in pts]
        return cls(Position(min(xs), min(ys), min(zs)), Position(max(xs), max(ys), max(zs)))

    @property
    def bounds(self) -> Tuple[int, int, int, int, int, int]:
        return (self.lo.x, self.lo.y, self.lo.z, self.hi.x, self.hi.y, self.hi.z)

    @property
    def dimensions(self) -> Tuple[int, int, int]:
        return (self.hi.x - self.lo.x, self.hi.y - self.lo.y, self.hi.z - self.lo.z)

    @property
    def size(self) -> Tuple[int, int, int]:
        dx, dy, dz = self.dimensions
        return (dx + 1, dy + 1, dz + 1)

    @property
    def volume(self) -> int:
        sx, sy, sz = self.size
        return sx * sy * sz

    def expand(self, n: int) -> "Region":
        return Region(
            Position(self.lo.x - n, self.lo.y - n, self.lo.z - n),
            Position(self.hi.x + n, self.hi.y + n, self.hi.z + n),
        )

    def contains(self, pos: Tuple[int, int, int]) -> bool:
        return (
            self.lo.x <= pos[0] <= self.hi.x
            and self.lo.y <= pos[1] <= self.hi.y
            and self.lo.z <= pos[2] <= self.hi.z
        )

    def endpoint(self, direction: Direction) -> Position:
        return self.hi if direction.sign > 0 else self.lo

    def _extremes(self, pos: Position) -> int:
        return (
            (pos.x in (self.lo.x, self.hi.x))
            + (pos.y in (self.lo.y, self.hi.y))
            + (pos.z in (self.lo.z, self.hi.z))
        )

    def positions(self) -> Iterator[Position]:
        for x in _span(self.lo.x, self.hi.x):
            for y in _span(self.lo.y, self.hi.y):
                for z in _span(self.lo.z, self.hi.z):
                    yield Position(x, y, z)

    def wall_positions(self) -> Iterator[Position]:
        """Cells of the one-voxel shell of this region."""
        for pos in self.positions():
            if self._extremes(pos) >= 1:
                yield pos

    def edge_positions(self) -> Iterator[Position]:
        """Cells on the twelve edges of this region."""
        for pos in self.positions():
            if self._extremes(pos) >= 2:
                yield pos

    def slices(self, axis: Axis) -> Iterator["Region"]:
        """Split the region into one-voxel lanes running along ``axis``.

        Every lane spans the full extent along ``axis`` and pins the other two
        coordinates, so ``lane.endpoint(d)`` for a direction ``d`` on that axis
        is the lane's cell on the face whose normal is ``d``.
        """
        lo, hi = self.lo, self.hi
        if axis is Axis.X:
            for y in _span(lo.y, hi.y):
                for z in _span(lo.z, hi.z):
                    yield Region(Position(lo.x, y, z), Position(hi.x, y, z))
        elif axis is Axis.Y:
            for x in _span(lo.x, hi.x):
                for z in _span(lo.z, hi.z):
                    yield Region(Position(x, lo.y, z), Position(x, hi.y, z))
        elif axis is Axis.Z:
            for x in _span(lo.x, hi.x):
                for y in _span(lo.y, hi.y):
                    yield Region(Position(x, y, lo.z), Position(x, y, hi.z))
        else:
            raise ValueError(f"unknown axis: {axis!r}")

    def __str__(self) -> str:
        return "({}, {}, {})-({}, {}, {})".format(*self.bounds)

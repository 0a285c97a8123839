"""Operator commands: area, project, analyze and assemble."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .core import (
    BUILD_MARGIN,
    AssemblyResult,
    compute_efficiency,
    count_nodes,
    detect_geode,
    draw_frame,
    grow_clusters,
    highlight_geode,
    marker_command,
    marker_position,
    prepare_work_area,
    project_geode,
    replace_nodes_with_indicators,
)
from .core import assemble as assemble_machines
from .errors import GeodesyError
from .geometry import Direction, Position, Region
from .grid import Grid, MemoryGrid
from .voxels import Role

LOG = logging.getLogger("geodesy.session")

ANALYZE_LAYOUTS: Tuple[Tuple[Direction, ...], ...] = (
    (Direction.EAST,),
    (Direction.SOUTH,),
    (Direction.UP,),
    (Direction.EAST, Direction.SOUTH),
    (Direction.SOUTH, Direction.UP),
    (Direction.UP, Direction.EAST),
    (Direction.EAST, Direction.SOUTH, Direction.UP),
)


def layout_name(directions: Iterable[Direction]) -> str:
    return ", ".join(d.label for d in directions)


@dataclass
class ProjectionReport:
    directions: List[Direction]
    total: int = 0
    collected: int = 0
    efficiency: Optional[float] = None

    @property
    def name(self) -> str:
        return layout_name(self.directions)

    @property
    def percent(self) -> Optional[int]:
        if self.efficiency is None:
            return None
        return int(self.efficiency)

    def to_dict(self) -> Dict[str, object]:
        return {
            "layout": self.name,
            "directions": [d.label for d in self.directions],
            "total": self.total,
            "collected": self.collected,
            "efficiency": self.efficiency,
            "percent": self.percent,
            "status": "ok" if self.efficiency is not None else "not_applicable",
        }


def region_dict(region: Region) -> Dict[str, int]:
    x1, y1, z1, x2, y2, z2 = region.bounds
    return {"x1": x1, "y1": y1, "z1": z1, "x2": x2, "y2": y2, "z2": z2}


def assembly_dict(result: AssemblyResult) -> Dict[str, object]:
    return {
        "moved": result.moved,
        "machines": [
            {
                "anchor": list(a.anchor),
                "blocker": list(a.blocker_pos),
                "along": a.along.label,
                "up": a.up.label,
                "sticky": a.sticky.role.value,
            }
            for a in result.anchors
        ],
    }


@dataclass
class GeodesySession:
    """Holds the geode selected by ``area`` for the following commands."""

    world: Grid
    build_margin: int = BUILD_MARGIN
    geode: Optional[Region] = field(default=None)

    def _require_geode(self) -> Region:
        if self.geode is None:
            raise GeodesyError("No geode selected; run the area command first")
        return self.geode

    def area(self, pos1: Tuple[int, int, int], pos2: Tuple[int, int, int]) -> Region:
        geode = detect_geode(self.world, pos1, pos2)
        self.geode = geode
        prepare_work_area(self.world, geode, force=False, margin=self.build_margin)
        highlight_geode(self.world, geode)
        return geode

    def restore(self, bounds: Sequence[int]) -> Region:
        if len(bounds) != 6:
            raise GeodesyError(f"Geode bounds need 6 integers, got {len(bounds)}")
        self.geode = Region(Position(*bounds[:3]), Position(*bounds[3:]))
        return self.geode

    def project(self, directions: Sequence[Direction]) -> ProjectionReport:
        geode = self._require_geode()
        prepare_work_area(self.world, geode, force=True, margin=self.build_margin)
        grow_clusters(self.world, geode)
        draw_frame(self.world, geode)

        report = ProjectionReport(directions=list(directions))
        # No direction: only the frame is wanted.
        if not directions:
            return report

        report.total = count_nodes(self.world, geode)
        for direction in directions:
            project_geode(self.world, geode, direction)
        left = replace_nodes_with_indicators(self.world, geode)
        report.collected = report.total - left
        grow_clusters(self.world, geode)

        report.efficiency = compute_efficiency(report.total, left)
        if report.efficiency is None:
            LOG.warning('Layout efficiency for "%s": not applicable (no growable nodes)', report.name)
        else:
            LOG.info(
                'Layout efficiency for "%s": %d%% (%d/%d)',
                report.name,
                report.percent,
                report.collected,
                report.total,
            )
        return report

    def analyze(self) -> List[ProjectionReport]:
        LOG.info("Running all possible projections to determine efficiencies...")
        reports = [self.project(layout) for layout in ANALYZE_LAYOUTS]
        # Clean up the results of the last projection.
        self.project([])
        LOG.info("...projection complete. Use your judgement to choose the best set of projections.")
        LOG.info("Tips:")
        LOG.info("1. You can change the order of projections to make the flying machine layouts simpler.")
        LOG.info("2. You can change EAST to WEST, SOUTH to NORTH, UP to DOWN depending on your liking.")
        LOG.info("Those changes will not affect the farm's efficiency.")
        return reports

    def assemble(self) -> AssemblyResult:
        return assemble_machines(self.world, self._require_geode())

    def describe(self) -> Dict[str, object]:
        if self.geode is None:
            return {"geode": None}
        return {
            "geode": region_dict(self.geode),
            "marker": {
                "position": list(marker_position(self.geode, self.build_margin)),
                "command": marker_command(self.geode.bounds),
            },
        }


def find_marker_bounds(world: MemoryGrid, margin: int = BUILD_MARGIN) -> Optional[Tuple[int, ...]]:
    """Geode bounds recorded by the first work area marker that sits where that geode puts it."""
    for pos, state in world.items():
        if state.role is not Role.EXTERNAL_TRIGGER or len(state.payload) != 6:
            continue
        bounds = state.payload
        geode = Region(Position(*bounds[:3]), Position(*bounds[3:]))
        if marker_position(geode, margin) == pos:
            return bounds
    return None

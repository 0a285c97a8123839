"""Run geodesy commands against a JSON world snapshot.

Usage (example):
  geodesy --world data/world.json area -20 -40 10 20 -10 50
  geodesy --world data/world.json analyze
  geodesy --world data/world.json project east south
  geodesy --world data/world.json assemble
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .actions import run_analyze, run_area, run_assemble, run_project
from .config import Settings
from .errors import GeodesyError
from .geometry import Direction
from .grid import MemoryGrid, load_or_create
from .logging_config import configure_logging
from .session import GeodesySession, find_marker_bounds

LOG = logging.getLogger("geodesy.cli")


def _direction(value: str) -> Direction:
    try:
        return Direction.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _parse_args(argv: List[str], settings: Settings) -> argparse.Namespace:
    ap = argparse.ArgumentParser(prog="geodesy", description="Design amethyst geode farms in a world snapshot.")
    ap.add_argument("--world", default=str(settings.world_path), help="World snapshot (JSON)")
    ap.add_argument("--build-margin", type=int, default=settings.build_margin)
    ap.add_argument("--geode", nargs=6, type=int, metavar=("X1", "Y1", "Z1", "X2", "Y2", "Z2"), default=None,
                    help="Geode bounds to use instead of the ones stored in the work area marker")
    ap.add_argument("--json-out", default=None)
    ap.add_argument("--dry-run", action="store_true", help="Do not write the world snapshot back")
    ap.add_argument("--log-level", default=settings.log_level)
    sub = ap.add_subparsers(dest="command", required=True)

    area = sub.add_parser("area", help="Detect the geode and prepare the work area")
    area.add_argument("coords", nargs=6, type=int, metavar="N")

    project = sub.add_parser("project", help="Project the geode along the given directions")
    project.add_argument("directions", nargs="*", type=_direction)

    sub.add_parser("analyze", help="Report the efficiency of the standard layouts")
    sub.add_parser("assemble", help="Build flying machines at the marked anchors")
    return ap.parse_args(argv)


def _resume(session: GeodesySession, world: MemoryGrid, args: argparse.Namespace) -> None:
    if args.geode is not None:
        session.restore(args.geode)
        return
    bounds = find_marker_bounds(world, args.build_margin)
    if bounds is None:
        raise GeodesyError("No work area marker found in the world; run the area command first or pass --geode")
    session.restore(bounds)


def execute(args: argparse.Namespace, world: MemoryGrid) -> Dict[str, Any]:
    session = GeodesySession(world, build_margin=args.build_margin)
    if args.command == "area":
        c = args.coords
        return run_area(session, (c[0], c[1], c[2]), (c[3], c[4], c[5]))
    _resume(session, world, args)
    if args.command == "project":
        return run_project(session, args.directions)
    if args.command == "analyze":
        return run_analyze(session)
    return run_assemble(session)


def main(argv: Optional[List[str]] = None) -> int:
    settings = Settings.from_env()
    args = _parse_args(sys.argv[1:] if argv is None else argv, settings)
    configure_logging(args.log_level)

    world_path = Path(args.world)
    status = 0
    try:
        world = load_or_create(world_path)
        result = execute(args, world)
        result["status"] = "ok"
        if not args.dry_run:
            world.save(world_path)
    except GeodesyError as exc:
        LOG.error("%s failed: %s", args.command, exc)
        result = {"command": args.command, "status": "error", "error": str(exc)}
        status = 1

    payload = json.dumps(result, indent=2, sort_keys=True)
    if args.json_out:
        out = Path(args.json_out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(payload + "\n", encoding="utf-8")
    print(payload)
    return status


if __name__ == "__main__":
    raise SystemExit(main())

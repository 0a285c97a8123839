"""Command wrappers returning JSON-ready payloads for the CLI and the API."""

from __future__ import annotations

from typing import Any, Dict, Sequence, Tuple

from .geometry import Direction
from .session import GeodesySession, assembly_dict, region_dict


def run_area(session: GeodesySession, pos1: Tuple[int, int, int], pos2: Tuple[int, int, int]) -> Dict[str, Any]:
    session.area(pos1, pos2)
    payload = session.describe()
    payload["command"] = "area"
    return payload


def run_project(session: GeodesySession, directions: Sequence[Direction]) -> Dict[str, Any]:
    report = session.project(directions)
    return {"command": "project", "report": report.to_dict()}


def run_analyze(session: GeodesySession) -> Dict[str, Any]:
    reports = session.analyze()
    return {"command": "analyze", "reports": [r.to_dict() for r in reports]}


def run_assemble(session: GeodesySession) -> Dict[str, Any]:
    result = session.assemble()
    payload = assembly_dict(result)
    payload["command"] = "assemble"
    if session.geode is not None:
        payload["geode"] = region_dict(session.geode)
    return payload

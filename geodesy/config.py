from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .core import BUILD_MARGIN
from .errors import GeodesyError


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise GeodesyError(f"Invalid {name}: {raw}") from exc
    if value < minimum:
        raise GeodesyError(f"Invalid {name}: {raw} (must be >= {minimum})")
    return value


@dataclass
class Settings:
    world_path: Path
    build_margin: int
    job_history: int
    log_level: str

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            world_path=Path(os.environ.get("GEODESY_WORLD", "./data/world.json")),
            build_margin=_env_int("GEODESY_BUILD_MARGIN", BUILD_MARGIN),
            job_history=_env_int("GEODESY_JOB_HISTORY", 100, minimum=1),
            log_level=os.environ.get("GEODESY_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )

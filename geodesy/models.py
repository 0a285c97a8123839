from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .geometry import Direction

JobStatus = Literal["queued", "running", "succeeded", "failed"]


class AreaRequest(BaseModel):
    pos1: Tuple[int, int, int]
    pos2: Tuple[int, int, int]


class ProjectRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    directions: List[str] = Field(default_factory=list, max_length=6)

    @field_validator("directions")
    @classmethod
    def validate_directions(cls, value: List[str]) -> List[str]:
        out = []
        for name in value:
            try:
                out.append(Direction.parse(name).label)
            except ValueError as exc:
                raise ValueError(f"Unknown direction '{name}'; expected one of: down, up, north, south, west, east") from exc
        return out

    def parsed(self) -> List[Direction]:
        return [Direction.parse(name) for name in self.directions]


class RegionModel(BaseModel):
    x1: int
    y1: int
    z1: int
    x2: int
    y2: int
    z2: int


class MarkerModel(BaseModel):
    position: Tuple[int, int, int]
    command: str


class GeodeResponse(BaseModel):
    geode: Optional[RegionModel] = None
    marker: Optional[MarkerModel] = None


class JobResponse(BaseModel):
    job_id: str
    status: JobStatus


class JobDetailsResponse(BaseModel):
    id: str
    command: str
    status: JobStatus
    started_at: Optional[str]
    finished_at: Optional[str]
    result: Optional[Dict[str, Any]]
    error: Optional[str]


class JobListResponse(BaseModel):
    jobs: List[JobDetailsResponse]

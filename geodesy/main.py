from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict

from fastapi import Depends, FastAPI, HTTPException, Request, status

from .actions import run_analyze, run_area, run_assemble, run_project
from .config import Settings
from .grid import MemoryGrid, load_or_create
from .jobs import JobQueue
from .logging_config import configure_logging
from .models import AreaRequest, GeodeResponse, JobDetailsResponse, JobListResponse, JobResponse, ProjectRequest
from .session import GeodesySession, find_marker_bounds

LOG = logging.getLogger("geodesy.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    world = load_or_create(settings.world_path)
    session = GeodesySession(world, build_margin=settings.build_margin)
    bounds = find_marker_bounds(world, settings.build_margin)
    if bounds is not None:
        session.restore(bounds)
        LOG.info("Resumed geode %s from work area marker", session.geode)

    app.state.settings = settings
    app.state.world = world
    app.state.session = session
    app.state.jobs = JobQueue(history_limit=settings.job_history)
    app.state.jobs.start()
    try:
        yield
    finally:
        app.state.jobs.stop()


app = FastAPI(title="Geodesy", lifespan=lifespan)


def get_session(request: Request) -> GeodesySession:
    return request.app.state.session


def get_jobs(request: Request) -> JobQueue:
    return request.app.state.jobs


def enqueue_command(request: Request, command: str, fn: Callable[[], Dict[str, Any]]) -> JobResponse:
    settings: Settings = request.app.state.settings
    world: MemoryGrid = request.app.state.world

    def job() -> Dict[str, Any]:
        payload = fn()
        world.save(settings.world_path)
        return payload

    record = get_jobs(request).enqueue(command, job)
    return JobResponse(job_id=record.id, status=record.status)


@app.get("/healthz")
async def healthz() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/api/geode", response_model=GeodeResponse)
async def api_geode(session: GeodesySession = Depends(get_session)):
    return session.describe()


@app.post("/api/area", response_model=JobResponse)
async def api_area(payload: AreaRequest, request: Request, session: GeodesySession = Depends(get_session)):
    return enqueue_command(request, "area", lambda: run_area(session, payload.pos1, payload.pos2))


@app.post("/api/project", response_model=JobResponse)
async def api_project(payload: ProjectRequest, request: Request, session: GeodesySession = Depends(get_session)):
    directions = payload.parsed()
    return enqueue_command(request, "project", lambda: run_project(session, directions))


@app.post("/api/analyze", response_model=JobResponse)
async def api_analyze(request: Request, session: GeodesySession = Depends(get_session)):
    return enqueue_command(request, "analyze", lambda: run_analyze(session))


@app.post("/api/assemble", response_model=JobResponse)
async def api_assemble(request: Request, session: GeodesySession = Depends(get_session)):
    return enqueue_command(request, "assemble", lambda: run_assemble(session))


@app.get("/api/jobs", response_model=JobListResponse)
async def api_jobs(jobs: JobQueue = Depends(get_jobs)):
    return JobListResponse(jobs=[record.to_dict() for record in jobs.list()])


@app.get("/api/jobs/{job_id}", response_model=JobDetailsResponse)
async def api_job_details(job_id: str, jobs: JobQueue = Depends(get_jobs)):
    record = jobs.get(job_id)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return record.to_dict()

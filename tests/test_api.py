from __future__ import annotations

import time
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from conftest import write_snapshot

from geodesy.grid import MemoryGrid
from geodesy.main import app
from geodesy.voxels import Role


@pytest.fixture()
def world_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    path = tmp_path / "world.json"
    write_snapshot(path, [(0, 0, 0)])
    monkeypatch.setenv("GEODESY_WORLD", str(path))
    monkeypatch.setenv("GEODESY_BUILD_MARGIN", "3")
    monkeypatch.setenv("GEODESY_JOB_HISTORY", "10")
    return path


@pytest.fixture()
def client(world_path: Path):
    with TestClient(app) as test_client:
        yield test_client


def wait_for_job(client, job_id: str, timeout: float = 5.0) -> dict:
    deadline = time.time() + timeout
    while time.time() < deadline:
        response = client.get(f"/api/jobs/{job_id}")
        payload = response.json()
        if payload["status"] in {"succeeded", "failed"}:
            return payload
        time.sleep(0.05)
    raise AssertionError(f"Job {job_id} did not finish in time")


def _submit(client, path: str, **kwargs) -> dict:
    response = client.post(path, **kwargs)
    assert response.status_code == 200
    return wait_for_job(client, response.json()["job_id"])


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_area_job_prepares_and_saves(client, world_path: Path):
    assert client.get("/api/geode").json()["geode"] is None

    job = _submit(client, "/api/area", json={"pos1": [-5, -5, -5], "pos2": [5, 5, 5]})

    assert job["status"] == "succeeded"
    assert job["command"] == "area"
    assert job["result"]["marker"]["command"] == "/geodesy area -1 -1 -1 1 1 1"
    geode = client.get("/api/geode").json()
    assert geode["geode"] == {"x1": -1, "y1": -1, "z1": -1, "x2": 1, "y2": 1, "z2": 1}
    assert MemoryGrid.load(world_path).count(Role.EXTERNAL_TRIGGER) == 1


def test_project_job_reports_efficiency(client):
    _submit(client, "/api/area", json={"pos1": [-5, -5, -5], "pos2": [5, 5, 5]})
    job = _submit(client, "/api/project", json={"directions": ["East", "UP"]})

    assert job["status"] == "succeeded"
    report = job["result"]["report"]
    assert report["directions"] == ["east", "up"]
    assert report["total"] == 6


def test_restart_resumes_geode_from_marker(world_path: Path):
    with TestClient(app) as first:
        _submit(first, "/api/area", json={"pos1": [-5, -5, -5], "pos2": [5, 5, 5]})
    with TestClient(app) as second:
        assert second.get("/api/geode").json()["geode"]["x2"] == 1


def test_project_before_area_fails(client):
    job = _submit(client, "/api/project", json={"directions": ["east"]})
    assert job["status"] == "failed"
    assert "area command" in job["error"]


def test_unknown_direction_is_rejected(client):
    response = client.post("/api/project", json={"directions": ["sideways"]})
    assert response.status_code == 422


def test_area_needs_three_coordinates(client):
    response = client.post("/api/area", json={"pos1": [0, 0], "pos2": [1, 1, 1]})
    assert response.status_code == 422


def test_unknown_job_is_404(client):
    response = client.get("/api/jobs/does-not-exist")
    assert response.status_code == 404
    assert response.json()["detail"] == "Job not found"


def test_job_list_is_newest_first(client):
    first = _submit(client, "/api/analyze")
    second = _submit(client, "/api/assemble")
    jobs = client.get("/api/jobs").json()["jobs"]
    assert [job["id"] for job in jobs] == [second["id"], first["id"]]
    assert all(job["status"] == "failed" for job in jobs)

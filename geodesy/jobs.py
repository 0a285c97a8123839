"""Single worker job queue: geodesy commands never run concurrently."""

from __future__ import annotations

import logging
import queue
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .errors import GeodesyError

LOG = logging.getLogger("geodesy.jobs")

JobCallable = Callable[[], Dict[str, Any]]


@dataclass
class JobRecord:
    id: str
    command: str
    status: str = "queued"
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "command": self.command,
            "status": self.status,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "result": self.result,
            "error": self.error,
        }


@dataclass
class _QueuedJob:
    record: JobRecord
    fn: JobCallable = field(repr=False)


class JobQueue:
    def __init__(self, history_limit: int = 100) -> None:
        self._history_limit = history_limit
        self._queue: "queue.Queue[Optional[_QueuedJob]]" = queue.Queue()
        self._records: "OrderedDict[str, JobRecord]" = OrderedDict()
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._worker_loop, name="geodesy-worker", daemon=True)
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        self._thread.start()
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._queue.put(None)
        self._thread.join(timeout=5)
        self._started = False

    def enqueue(self, command: str, fn: JobCallable) -> JobRecord:
        record = JobRecord(id=str(uuid.uuid4()), command=command)
        with self._lock:
            self._records[record.id] = record
            while len(self._records) > self._history_limit:
                self._records.popitem(last=False)
        self._queue.put(_QueuedJob(record=record, fn=fn))
        return self._copy(record)

    def list(self) -> List[JobRecord]:
        with self._lock:
            return [self._copy(record) for record in reversed(self._records.values())]

    def get(self, job_id: str) -> Optional[JobRecord]:
        with self._lock:
            record = self._records.get(job_id)
            return self._copy(record) if record else None

    def _worker_loop(self) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                self._queue.task_done()
                return

            self._mark_running(item.record.id)
            try:
                result = item.fn()
            except GeodesyError as exc:
                LOG.warning("Job %s (%s) failed: %s", item.record.id, item.record.command, exc)
                self._mark_finished(item.record.id, result=None, error=str(exc))
            except Exception as exc:  # noqa: BLE001
                LOG.exception("Job %s (%s) crashed", item.record.id, item.record.command)
                self._mark_finished(item.record.id, result=None, error=f"{type(exc).__name__}: {exc}")
            else:
                self._mark_finished(item.record.id, result=result, error=None)
            finally:
                self._queue.task_done()

    def _mark_running(self, job_id: str) -> None:
        with self._lock:
            record = self._records.get(job_id)
            if record is not None:
                record.status = "running"
                record.started_at = self._utcnow()

    def _mark_finished(self, job_id: str, *, result: Optional[Dict[str, Any]], error: Optional[str]) -> None:
        with self._lock:
            record = self._records.get(job_id)
            if record is None:
                return
            record.status = "failed" if error is not None else "succeeded"
            record.result = result
            record.error = error
            record.finished_at = self._utcnow()

    @staticmethod
    def _utcnow() -> str:
        return datetime.now(tz=timezone.utc).isoformat()

    @staticmethod
    def _copy(record: JobRecord) -> JobRecord:
        return JobRecord(
            id=record.id,
            command=record.command,
            status=record.status,
            started_at=record.started_at,
            finished_at=record.finished_at,
            result=record.result,
            error=record.error,
        )

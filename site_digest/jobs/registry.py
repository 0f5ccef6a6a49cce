"""
Process-wide registry of crawl-and-summarize jobs.

Every job moves ``pending -> done`` or ``pending -> failed`` exactly once.
Each entry carries its own lock, so unrelated jobs never contend.
"""
from __future__ import annotations

import enum
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

__all__ = ("JobState", "JobStatus", "JobStateError", "JobRegistry")


class JobState(str, enum.Enum):
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class JobStatus:
    state: JobState
    summary: Optional[str] = None
    error: Optional[str] = None

    @property
    def terminal(self) -> bool:
        return self.state is not JobState.PENDING

    def to_dict(self) -> Dict[str, Any]:
        """Poll response body: ``{"status": ...}`` plus summary or error."""
        body: Dict[str, Any] = {"status": self.state.value}
        if self.state is JobState.DONE:
            body["summary"] = self.summary
        elif self.state is JobState.FAILED:
            body["error"] = self.error
        return body


PENDING = JobStatus(JobState.PENDING)


class JobStateError(RuntimeError):
    """A terminal job was written to again."""


class _Entry:
    __slots__ = ("lock", "status")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.status = PENDING


class JobRegistry:
    """Maps opaque job ids to their current :class:`JobStatus`."""

    def __init__(self, id_factory: Callable[[], str] = lambda: uuid.uuid4().hex) -> None:
        self._entries: Dict[str, _Entry] = {}
        self._id_factory = id_factory

    def create(self) -> str:
        """Allocate a fresh id and register it as pending."""
        entry = _Entry()
        while True:
            job_id = self._id_factory()
            if self._entries.setdefault(job_id, entry) is entry:
                return job_id

    def get(self, job_id: str) -> Optional[JobStatus]:
        entry = self._entries.get(job_id)
        return None if entry is None else entry.status

    def complete(self, job_id: str, summary: str) -> None:
        self._finish(job_id, JobStatus(JobState.DONE, summary=summary))

    def fail(self, job_id: str, error: str) -> None:
        self._finish(job_id, JobStatus(JobState.FAILED, error=error))

    def _finish(self, job_id: str, status: JobStatus) -> None:
        entry = self._entries.get(job_id)
        if entry is None:
            raise KeyError(job_id)
        with entry.lock:
            if entry.status.terminal:
                raise JobStateError(
                    f"job {job_id} is already {entry.status.state.value}; refusing {status.state.value}"
                )
            entry.status = status

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

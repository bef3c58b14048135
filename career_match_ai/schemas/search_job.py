"""Asynchronous search job (webset) as observed by polling. Lives for one request."""

from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field


class JobStatus(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    IDLE = "idle"


class PollState(str, Enum):
    """Polling state machine. Every terminal state except TIMEOUT_NO_RESULTS fetches items."""

    CREATED = "created"
    RUNNING = "running"
    IDLE = "idle"
    EARLY_EXIT = "early_exit"
    TIMEOUT_WITH_RESULTS = "timeout_with_results"
    TIMEOUT_NO_RESULTS = "timeout_no_results"


class SearchProgress(BaseModel):
    found: int = 0
    analyzed: int = 0
    completion: float = Field(default=0.0, description="Completion percent reported upstream")


class AsyncSearchJob(BaseModel):
    """Latest known state of a webset job."""

    id: str
    status: str = JobStatus.CREATED.value
    progress: Optional[SearchProgress] = None

    @property
    def is_idle(self) -> bool:
        return self.status == JobStatus.IDLE.value

    @property
    def found(self) -> int:
        return self.progress.found if self.progress else 0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], job_id: Optional[str] = None) -> "AsyncSearchJob":
        """Build from a create/get response; progress comes from the first search, if any."""
        progress = None
        searches = payload.get("searches") or []
        if searches and isinstance(searches[0], Mapping):
            raw = searches[0].get("progress")
            if isinstance(raw, Mapping):
                progress = SearchProgress(
                    found=int(raw.get("found") or 0),
                    analyzed=int(raw.get("analyzed") or 0),
                    completion=float(raw.get("completion") or 0),
                )
        return cls(
            id=str(payload.get("id") or job_id or ""),
            status=str(payload.get("status") or JobStatus.CREATED.value),
            progress=progress,
        )

"""Task lifecycle statuses and the time spent in each."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional


class Status(str, Enum):
    """A stage in the lifecycle of a task."""

    PENDING = "pending"
    QUEUED = "queued"
    RUNNING = "running"
    EXITED = "exited"
    ERRORED = "errored"
    CANCELED = "canceled"

    def __str__(self) -> str:
        return self.value

    def is_final(self) -> bool:
        """Return True if the status is a final status."""
        return self in _FINAL


_FINAL = frozenset({Status.ERRORED, Status.EXITED, Status.CANCELED})

MAX_STATUS_LEN = max(len(status.value) for status in Status)


@dataclass
class StatusTimestamps:
    """Times at which a task entered and left a status."""

    started: Optional[datetime] = None
    ended: Optional[datetime] = None

    def elapsed(self) -> timedelta:
        """Time spent in the status, up to now if it has not yet ended."""
        if self.started is None:
            return timedelta(0)
        if self.ended is None:
            return datetime.now() - self.started
        return self.ended - self.started
"""Ordering of tasks for display."""

from __future__ import annotations

from typing import Any

from pug.task.status import Status


def by_state(i: Any, j: Any) -> int:
    """Compare two tasks by state, for use with ``functools.cmp_to_key``.

    Order: running (oldest update first), queued (newest first), pending
    (newest first), then finished tasks (newest first).
    """
    newest_first = 1 if i.updated < j.updated else -1
    if i.state == Status.PENDING:
        if j.state == Status.PENDING:
            return newest_first
        if j.state in (Status.QUEUED, Status.RUNNING):
            return 1
        return -1
    if i.state == Status.QUEUED:
        if j.state == Status.QUEUED:
            return newest_first
        if j.state == Status.RUNNING:
            return 1
        return -1
    if i.state == Status.RUNNING:
        if j.state == Status.RUNNING:
            return -1 if i.updated < j.updated else 1
        return -1
    if j.state in (Status.PENDING, Status.QUEUED, Status.RUNNING):
        return 1
    return newest_first
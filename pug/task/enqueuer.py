"""Moves pending tasks onto the queue when they are free to run."""

from __future__ import annotations

import logging
import threading
from typing import Any, List, Set

from pug.task.service import ListOptions, NotFoundError
from pug.task.status import Status
from pug.task.task import Task

logger = logging.getLogger(__name__)


class Enqueuer:
    """Decides which pending tasks may be enqueued.

    A task may be enqueued if it is immediate, or if its workspace and module
    are not blocked by another task and all the tasks it depends on have
    exited successfully.
    """

    def __init__(self, tasks: Any) -> None:
        self.tasks = tasks

    def enqueuable(self) -> List[Task]:
        """Return the pending tasks to move to the queued status."""
        active = self.tasks.list(ListOptions(status=[Status.QUEUED, Status.RUNNING]))
        blocked_modules: Set[str] = set()
        blocked_workspaces: Set[str] = set()
        for task in active:
            if task.blocking:
                if task.module_id is not None:
                    blocked_modules.add(task.module_id)
                if task.workspace_id is not None:
                    blocked_workspaces.add(task.workspace_id)

        pending = self.tasks.list(ListOptions(status=[Status.PENDING], oldest=True))
        enqueue: List[Task] = []
        for task in pending:
            if task.immediate:
                enqueue.append(task)
                continue
            if task.workspace_id is not None and task.workspace_id in blocked_workspaces:
                continue
            if task.module_id is not None and task.module_id in blocked_modules:
                continue
            if not self._dependencies_met(task):
                continue
            enqueue.append(task)
            if task.blocking:
                if task.workspace_id is not None:
                    blocked_workspaces.add(task.workspace_id)
                if task.module_id is not None:
                    blocked_modules.add(task.module_id)
        return enqueue

    def _dependencies_met(self, task: Task) -> bool:
        for dep_id in task.depends_on:
            try:
                dependency = self.tasks.get(dep_id)
            except Exception:
                return False
            if dependency.state == Status.EXITED:
                continue
            if dependency.state in (Status.CANCELED, Status.ERRORED):
                # A failed dependency cancels the task, with the reason why.
                task._stdout.write(b"task dependency failed")
                task.update_state(Status.CANCELED)
                return False
            return False
        return True


def start_enqueuer(service: Any) -> threading.Thread:
    """Enqueue tasks in the background whenever a task event occurs."""
    enqueuer = Enqueuer(service)
    sub = service.task_broker.subscribe()

    def loop() -> None:
        for _event in sub:
            for task in enqueuer.enqueuable():
                try:
                    service.enqueue(task.id)
                except NotFoundError as exc:
                    logger.error("enqueuing task: %s", exc)

    thread = threading.Thread(target=loop, daemon=True)
    thread.start()
    return thread
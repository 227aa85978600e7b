"""Starts queued tasks, keeping within the limits on concurrency."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, List

from pug.task.service import ListOptions
from pug.task.status import Status
from pug.task.task import Task, TaskError

logger = logging.getLogger(__name__)


class Runner:
    """Picks queued tasks to run.

    No more than ``max_tasks`` tasks run at once (immediate tasks excepted),
    and no more than one exclusive task runs at once.
    """

    def __init__(self, max_tasks: int, tasks: Any) -> None:
        self.max_tasks = max_tasks
        self.tasks = tasks

    def runnable(self) -> List[Task]:
        """Return the queued tasks that may be started now, oldest first."""
        exclusive_taken = False
        running = self.tasks.list(ListOptions(status=[Status.RUNNING]))
        avail = self.max_tasks - len(running)

        queued = self.tasks.list(ListOptions(status=[Status.QUEUED], oldest=True))
        runnable: List[Task] = []
        for task in queued:
            # Immediate tasks are exempt from the maximum, so the number of
            # free slots may go negative.
            if avail <= 0 and not task.immediate:
                continue
            if task.exclusive:
                if exclusive_taken:
                    continue
                exclusive_taken = True
                if self.tasks.list(ListOptions(exclusive=True, status=[Status.RUNNING])):
                    continue
            avail -= 1
            runnable.append(task)
        return runnable


def start_runner(service: Any, max_tasks: int) -> Callable[[], None]:
    """Run tasks in the background on every task event.

    Returns a function that waits for the tasks started so far to finish.
    """
    runner = Runner(max_tasks, service)
    sub = service.task_broker.subscribe()
    waiters: List[threading.Thread] = []
    lock = threading.Lock()

    def loop() -> None:
        for _event in sub:
            for task in runner.runnable():
                try:
                    wait = task.start()
                except TaskError as exc:
                    logger.error("starting task %s: %s", task, exc)
                    continue
                logger.debug("started task: %s", task)
                thread = threading.Thread(target=wait, daemon=True)
                with lock:
                    waiters.append(thread)
                thread.start()

    threading.Thread(target=loop, daemon=True).start()

    def wait_all() -> None:
        with lock:
            threads = list(waiters)
        for thread in threads:
            thread.join()

    return wait_all
"""The task service: creation, storage, listing and cancelation of tasks."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, TypeVar

from pug.task.group import Group, new_group
from pug.task.spec import Spec
from pug.task.status import Status
from pug.task.task import UPDATED_EVENT, Task, TaskFactory

logger = logging.getLogger(__name__)

CREATED_EVENT = "created"
DELETED_EVENT = "deleted"

T = TypeVar("T")


class NotFoundError(LookupError):
    """Raised when a resource does not exist."""


@dataclass(frozen=True)
class Event:
    """A change to a resource."""

    type: str
    payload: Any


_CLOSED = object()


class Broker:
    """Fans out published events to every subscriber."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: List[queue.Queue] = []
        self._closed = False

    def subscribe(self) -> Iterator[Event]:
        """Return an iterator over events published from now on.

        The iterator ends when the broker is closed.
        """
        q: queue.Queue = queue.Queue()
        with self._lock:
            if self._closed:
                q.put(_CLOSED)
            else:
                self._subscribers.append(q)
        return self._receive(q)

    @staticmethod
    def _receive(q: queue.Queue) -> Iterator[Event]:
        while True:
            item = q.get()
            if item is _CLOSED:
                return
            yield item

    def publish(self, event: str, payload: Any) -> None:
        """Send an event to all subscribers."""
        with self._lock:
            subscribers = list(self._subscribers)
        for q in subscribers:
            q.put(Event(event, payload))

    def close(self) -> None:
        """End every subscription."""
        with self._lock:
            self._closed = True
            subscribers = list(self._subscribers)
            self._subscribers.clear()
        for q in subscribers:
            q.put(_CLOSED)


class _Table(Generic[T]):
    """A thread-safe store of resources that publishes changes."""

    def __init__(self, broker: Broker) -> None:
        self._items: Dict[str, T] = {}
        self._lock = threading.Lock()
        self._broker = broker

    def add(self, item_id: str, item: T) -> None:
        with self._lock:
            self._items[item_id] = item
        self._broker.publish(CREATED_EVENT, item)

    def get(self, item_id: str) -> T:
        with self._lock:
            try:
                return self._items[item_id]
            except KeyError:
                raise NotFoundError(f"resource not found: {item_id}") from None

    def update(self, item_id: str, fn: Callable[[T], None]) -> T:
        item = self.get(item_id)
        fn(item)
        self._broker.publish(UPDATED_EVENT, item)
        return item

    def delete(self, item_id: str) -> None:
        with self._lock:
            item = self._items.pop(item_id, None)
        if item is not None:
            self._broker.publish(DELETED_EVENT, item)

    def list(self) -> List[T]:
        with self._lock:
            return list(self._items.values())


@dataclass
class ListOptions:
    """Filters and ordering for listing tasks."""

    # Match tasks with this module path.
    path: Optional[str] = None
    # Match tasks having one of these statuses.
    status: Optional[List[Status]] = None
    # Order oldest first rather than newest first.
    oldest: bool = False
    # Only blocking tasks.
    blocking: bool = False
    # Only exclusive tasks.
    exclusive: bool = False


class Service:
    """Creates and keeps track of tasks and task groups."""

    def __init__(
        self,
        program: str = "",
        workdir: str = "",
        user_envs: Optional[List[str]] = None,
        user_args: Optional[List[str]] = None,
        terragrunt: bool = False,
    ) -> None:
        self.task_broker = Broker()
        self.group_broker = Broker()
        self._tasks: _Table[Task] = _Table(self.task_broker)
        self._groups: _Table[Group] = _Table(self.group_broker)
        self._counter = 0
        self._counter_lock = threading.Lock()
        self.factory = TaskFactory(
            program=program,
            workdir=workdir,
            user_envs=list(user_envs or []),
            user_args=list(user_args or []),
            terragrunt=terragrunt,
            publisher=self.task_broker,
            on_finish=self._task_finished,
        )

    def _task_finished(self, _task: Task) -> None:
        with self._counter_lock:
            self._counter -= 1

    def create(self, spec: Spec) -> Task:
        """Create a pending task; it must be enqueued before it is processed.

        If ``spec.wait`` is set, block until the task finishes, raising its
        error if it fails.
        """
        task = self.factory.new_task(spec)
        logger.info("created task: %s", task)

        self._tasks.add(task.id, task)
        with self._counter_lock:
            self._counter += 1

        if spec.after_create is not None:
            spec.after_create(task)

        def watch() -> None:
            try:
                task.wait()
            except Exception as exc:
                logger.error("task failed: %s: %s", task, exc)
                return
            logger.info("completed task: %s", task)

        threading.Thread(target=watch, daemon=True).start()
        if spec.wait:
            task.wait()
        return task

    def create_group(self, *specs: Spec) -> Group:
        """Create a task group from one or more specs."""
        group = new_group(self, *specs)
        logger.debug("created task group: %s", group)
        self.add_group(group)
        return group

    def add_group(self, group: Group) -> None:
        """Store a task group."""
        self._groups.add(group.id, group)

    def enqueue(self, task_id: str) -> Task:
        """Move a task onto the global queue."""
        try:
            task = self._tasks.update(task_id, lambda t: t.update_state(Status.QUEUED))
        except NotFoundError as exc:
            logger.error("enqueuing task: %s", exc)
            raise
        logger.debug("enqueued task: %s", task)
        return task

    def list(self, opts: Optional[ListOptions] = None) -> List[Task]:
        """List tasks matching the options, newest first unless ``oldest``."""
        opts = opts or ListOptions()

        def matches(task: Task) -> bool:
            if opts.path is not None and opts.path != task.path:
                return False
            if opts.status is not None and task.state not in opts.status:
                return False
            if opts.blocking and not task.blocking:
                return False
            if opts.exclusive and not task.exclusive:
                return False
            return True

        tasks = [task for task in self._tasks.list() if matches(task)]
        tasks.sort(key=lambda task: task.updated, reverse=not opts.oldest)
        return tasks

    def list_groups(self) -> List[Group]:
        return self._groups.list()

    def get(self, task_id: str) -> Task:
        return self._tasks.get(task_id)

    def get_group(self, group_id: str) -> Group:
        return self._groups.get(group_id)

    def cancel(self, task_id: str) -> Task:
        """Cancel a task, raising if it does not exist or has finished."""
        try:
            task = self._tasks.get(task_id)
            task.cancel()
        except Exception as exc:
            logger.error("canceling task %s: %s", task_id, exc)
            raise
        logger.info("canceled task: %s", task)
        return task

    def delete(self, task_id: str) -> None:
        self._tasks.delete(task_id)

    def counter(self) -> int:
        """Number of live tasks."""
        with self._counter_lock:
            return self._counter
"""Task groups: several tasks created together from a set of specs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from pug.task.dependency_graph import create_dependent_tasks
from pug.task.spec import Spec, new_id
from pug.task.status import Status
from pug.task.task import Task, TaskError

MULTI_COMMAND = "multi"


@dataclass(eq=False)
class Group:
    """A set of tasks created together."""

    id: str = field(default_factory=lambda: new_id("tg"))
    created: datetime = field(default_factory=datetime.now)
    command: str = ""
    tasks: List[Task] = field(default_factory=list)
    create_errors: List[Exception] = field(default_factory=list)

    def __str__(self) -> str:
        return self.command

    def includes_task(self, task_id: str) -> bool:
        """Return True if the group holds a task with the given ID."""
        return any(task.id == task_id for task in self.tasks)

    def finished(self) -> int:
        """Number of tasks in a final status."""
        return sum(1 for task in self.tasks if task.state.is_final())

    def exited(self) -> int:
        """Number of tasks that exited successfully."""
        return sum(1 for task in self.tasks if task.state == Status.EXITED)

    def errored(self) -> int:
        """Number of tasks that errored."""
        return sum(1 for task in self.tasks if task.state == Status.ERRORED)


def new_group(service: Any, *specs: Spec) -> Group:
    """Create a group of tasks from specs using ``service.create``.

    Raises ``TaskError`` if no specs are given, if the specs disagree on
    whether to respect module dependencies or on the dependency order, or if
    no task at all could be created.
    """
    if not specs:
        raise TaskError("no specs provided")

    respect: Optional[bool] = None
    inverse: Optional[bool] = None
    for spec in specs:
        deps = spec.dependencies is not None
        if respect is None:
            respect = deps
        elif respect != deps:
            raise TaskError("not all specs share same respect-module-dependencies setting")
        inv = spec.dependencies is not None and spec.dependencies.inverse_dependency_order
        if inverse is None:
            inverse = inv
        elif inverse != inv:
            raise TaskError("not all specs share same inverse-dependency-order setting")

    group = Group()
    if respect:
        group.tasks = create_dependent_tasks(service, bool(inverse), *specs)
    else:
        for spec in specs:
            try:
                task = service.create(spec)
            except Exception as exc:
                group.create_errors.append(exc)
                continue
            group.tasks.append(task)

    if not group.tasks:
        raise TaskError("all tasks failed to be created")

    for task in group.tasks:
        if not group.command:
            group.command = str(task)
        elif group.command != str(task):
            group.command = MULTI_COMMAND
    return group


def sort_groups_by_created(i: Group, j: Group) -> int:
    """Compare groups newest first, for use with ``functools.cmp_to_key``.

    Groups created at the same moment are never reported as equal: the
    second argument is placed first.
    """
    age_difference = (j.created - i.created).total_seconds()
    if age_difference < 0:
        return -1
    return 1
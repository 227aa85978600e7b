"""Creation of tasks that respect their modules' dependencies."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, List

from pug.task.spec import Spec
from pug.task.task import Task, TaskError


@dataclass(eq=False)
class _Node:
    """A module together with the specs that belong to it."""

    dependencies: List[str]
    specs: List[Spec] = field(default_factory=list)
    created: List[str] = field(default_factory=list)
    incoming: List["_Node"] = field(default_factory=list)
    outgoing: List["_Node"] = field(default_factory=list)
    visited: bool = False
    tasks_created: bool = False


class _GraphBuilder:
    def __init__(self, creator: Any) -> None:
        self.creator = creator
        self.nodes: Dict[str, _Node] = {}
        self.tasks: List[Task] = []
        self.create_errors: List[Exception] = []

    def visit(self, node: _Node) -> None:
        node.visited = True
        for dep_id in node.dependencies:
            dep = self.nodes.get(dep_id)
            if dep is None:
                continue
            if not dep.visited:
                self.visit(dep)
            dep.incoming.append(node)
            node.outgoing.append(dep)

    def create_tasks(self, node: _Node, reverse: bool) -> None:
        node.tasks_created = True
        depends_on: List[str] = []
        for other in node.incoming if reverse else node.outgoing:
            if not other.tasks_created:
                self.create_tasks(other, reverse)
            depends_on.extend(other.created)
        for spec in node.specs:
            task = self.create_task(dataclasses.replace(spec, depends_on=list(depends_on)))
            if task is not None:
                node.created.append(task.id)

    def create_task(self, spec: Spec) -> Any:
        try:
            task = self.creator.create(spec)
        except Exception as exc:
            self.create_errors.append(exc)
            return None
        self.tasks.append(task)
        return task


def create_dependent_tasks(creator: Any, reverse: bool, *specs: Spec) -> List[Task]:
    """Create tasks from specs so that each depends on its modules' dependencies.

    ``creator`` has a ``create(spec)`` method returning a task. With
    ``reverse`` the order is inverted: tasks on a module depend on the tasks
    of the modules that depend on it, as needed when destroying.
    """
    builder = _GraphBuilder(creator)
    for spec in specs:
        node = builder.nodes.get(spec.module_id)
        if node is None:
            deps = spec.dependencies.module_ids if spec.dependencies is not None else []
            node = _Node(dependencies=list(deps))
            builder.nodes[spec.module_id] = node
        node.specs.append(spec)

    for node in builder.nodes.values():
        if not node.visited:
            builder.visit(node)
    for node in builder.nodes.values():
        if not node.tasks_created:
            builder.create_tasks(node, reverse)

    if not builder.tasks:
        raise TaskError(f"failed to create all {len(builder.create_errors)} tasks; see logs")
    return builder.tasks
"""Specifications from which tasks are created."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional


def new_id(kind: str) -> str:
    """Return a new unique identifier for a resource of the given kind."""
    return f"{kind}-{uuid.uuid4().hex}"


@dataclass
class Execution:
    """The program and arguments to execute.

    If ``program`` is empty the configured default program is run with
    ``terraform_command`` as its leading arguments.
    """

    program: str = ""
    terraform_command: List[str] = field(default_factory=list)
    args: List[str] = field(default_factory=list)


@dataclass
class Dependencies:
    """Require a task to respect its module's dependencies within a group.

    With ``inverse_dependency_order`` set, the order is reversed: a task on a
    module waits for tasks on the modules that depend on it.
    """

    module_ids: List[str] = field(default_factory=list)
    inverse_dependency_order: bool = False


Callback = Callable[[Any], None]


@dataclass
class Spec:
    """A specification for creating a task."""

    module_id: Optional[str] = None
    workspace_id: Optional[str] = None
    execution: Execution = field(default_factory=Execution)
    # Only executed if the first program exits successfully.
    additional_execution: Optional[Execution] = None
    identifier: str = ""
    path: str = ""
    env: List[str] = field(default_factory=list)
    blocking: bool = False
    exclusive: bool = False
    json: bool = False
    immediate: bool = False
    wait: bool = False
    description: str = ""
    # Called before the task is deemed exited; returns a summary and may raise
    # to place the task into an errored state.
    before_exited: Optional[Callable[[Any], Any]] = None
    after_exited: Optional[Callback] = None
    after_queued: Optional[Callback] = None
    after_running: Optional[Callback] = None
    after_error: Optional[Callback] = None
    after_canceled: Optional[Callback] = None
    after_create: Optional[Callback] = None
    after_finish: Optional[Callback] = None
    dependencies: Optional[Dependencies] = None
    # Tasks that must all exit successfully before this task is enqueued.
    depends_on: List[str] = field(default_factory=list)


SpecFunc = Callable[[str], Spec]
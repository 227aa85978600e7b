"""Tasks: executions of a command-line program, and the factory that makes them."""

from __future__ import annotations

import os
import signal
import subprocess
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import IO, Any, Callable, Dict, Iterator, List, Optional

from pug.task.buffer import Buffer
from pug.task.spec import Execution, Spec, new_id
from pug.task.status import Status, StatusTimestamps

UPDATED_EVENT = "updated"

Callback = Optional[Callable[["Task"], None]]


class TaskError(Exception):
    """Raised when a task cannot be created, started, canceled or fails."""


@dataclass(eq=False)
class Task:
    """An execution of a command-line program."""

    id: str = field(default_factory=lambda: new_id("task"))
    module_id: Optional[str] = None
    workspace_id: Optional[str] = None
    identifier: str = ""
    program: str = ""
    args: List[str] = field(default_factory=list)
    additional_execution: Optional[Execution] = None
    path: str = ""
    blocking: bool = False
    state: Status = Status.PENDING
    json: bool = False
    immediate: bool = False
    additional_env: List[str] = field(default_factory=list)
    depends_on: List[str] = field(default_factory=list)
    # Summarises the outcome of the task to the end-user.
    summary: Any = None
    description: str = ""
    exclusive: bool = False
    terragrunt: bool = False
    created: datetime = field(default_factory=datetime.now)
    updated: datetime = field(default_factory=datetime.now)
    # Set once the task finishes with an error.
    err: Optional[BaseException] = None
    # The spec the task was created from, retained so it can be retried.
    spec: Spec = field(default_factory=Spec)

    after_create: Callback = None
    after_queued: Callback = None
    after_running: Callback = None
    before_exited: Optional[Callable[["Task"], Any]] = None
    after_exited: Callback = None
    after_error: Callback = None
    after_canceled: Callback = None
    after_finish: Callback = None
    on_update: Callback = field(default=None, repr=False)
    on_finish: Callback = field(default=None, repr=False)

    _stdout: Buffer = field(init=False, default_factory=Buffer, repr=False)
    _combined: Buffer = field(init=False, default_factory=Buffer, repr=False)
    _lock: threading.RLock = field(init=False, default_factory=threading.RLock, repr=False)
    _finished: threading.Event = field(init=False, default_factory=threading.Event, repr=False)
    _timestamps: Dict[Status, StatusTimestamps] = field(
        init=False,
        default_factory=lambda: {Status.PENDING: StatusTimestamps(started=datetime.now())},
        repr=False,
    )
    _proc: Optional[subprocess.Popen] = field(init=False, default=None, repr=False)

    def __str__(self) -> str:
        return self.description

    def new_reader(self, combined: bool = False) -> IO[bytes]:
        """Return a reader over the output written so far.

        With ``combined`` the reader includes stderr as well as stdout.
        """
        if combined:
            return self._combined.new_reader()
        return self._stdout.new_reader()

    def new_streamer(self) -> Iterator[bytes]:
        """Yield combined output as it is written, ending when the task finishes."""
        return self._combined.stream()

    def is_active(self) -> bool:
        return self.state in (Status.QUEUED, Status.RUNNING)

    def elapsed(self, status: Status) -> timedelta:
        """Return how long the task has spent in the given status."""
        stamps = self._timestamps.get(status)
        if stamps is None:
            return timedelta(0)
        return stamps.elapsed()

    def wait(self) -> None:
        """Block until the task finishes; raise its error if it failed."""
        self._finished.wait()
        if self.state != Status.EXITED and self.err is not None:
            raise self.err

    def cancel(self) -> None:
        """Cancel the task.

        A pending or queued task is canceled outright; a running task is sent
        an interrupt signal.
        """
        with self._lock:
            if self.state.is_final():
                raise TaskError("task has already finished")
            if self.state in (Status.PENDING, Status.QUEUED):
                self.update_state(Status.CANCELED)
                return
            if self._proc is not None:
                self._proc.send_signal(signal.SIGINT)

    def start(self) -> Callable[[], None]:
        """Start a queued task; return a function that waits for it to finish."""
        with self._lock:
            if self.state != Status.QUEUED:
                raise TaskError("invalid state transition")
            try:
                proc = self._spawn(self.program, self.args)
            except OSError as exc:
                self.err = TaskError(f"starting task: {exc}")
                self.update_state(Status.ERRORED)
                raise self.err from exc
            self.update_state(Status.RUNNING)
            self._proc = proc
            pumps = self._pump(proc)

        def wait() -> None:
            state = Status.EXITED
            code = proc.wait()
            for thread in pumps:
                thread.join()
            if code != 0:
                state = Status.ERRORED
                self.err = TaskError(f"task failed: exit status {code}")
            elif self.additional_execution is not None:
                extra = self.additional_execution
                try:
                    extra_proc = self._spawn(extra.program, extra.args)
                except OSError as exc:
                    state = Status.ERRORED
                    self.err = TaskError(f"task failed: {exc}")
                else:
                    extra_pumps = self._pump(extra_proc)
                    extra_code = extra_proc.wait()
                    for thread in extra_pumps:
                        thread.join()
                    if extra_code != 0:
                        state = Status.ERRORED
                        self.err = TaskError(f"task failed: exit status {extra_code}")
            with self._lock:
                self.update_state(state)

        return wait

    def _spawn(self, program: str, args: List[str]) -> subprocess.Popen:
        env: Dict[str, str] = {}
        for entry in self.additional_env:
            key, _, value = entry.partition("=")
            env[key] = value
        env.update(os.environ)
        return subprocess.Popen(
            [program, *args],
            cwd=self.path or None,
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )

    def _pump(self, proc: subprocess.Popen) -> List[threading.Thread]:
        def copy(stream: Any, sinks: List[Buffer]) -> None:
            with stream:
                for chunk in iter(lambda: stream.read1(65536), b""):
                    for sink in sinks:
                        sink.write(chunk)

        threads = [
            threading.Thread(target=copy, args=(proc.stdout, [self._stdout, self._combined]), daemon=True),
            threading.Thread(target=copy, args=(proc.stderr, [self._combined]), daemon=True),
        ]
        for thread in threads:
            thread.start()
        return threads

    def _record_end(self, now: datetime) -> None:
        self._timestamps.setdefault(self.state, StatusTimestamps()).ended = now

    def update_state(self, state: Status) -> None:
        """Move the task into a new status, firing callbacks."""
        now = datetime.now()
        self.updated = now

        self._record_end(now)
        self._timestamps[state] = StatusTimestamps(started=now)

        # Close output before before_exited runs, as it may read to the end.
        if state.is_final():
            self._stdout.close()
            self._combined.close()

        if state == Status.EXITED and self.before_exited is not None:
            try:
                summary = self.before_exited(self)
            except Exception as exc:
                state = Status.ERRORED
                self.err = exc
                summary = None
            self.summary = summary

        self.state = state
        if self.on_update is not None:
            self.on_update(self)

        if self.state.is_final():
            self._record_end(now)
            self._finished.set()
            if self.on_finish is not None:
                self.on_finish(self)
            if self.after_finish is not None:
                self.after_finish(self)

        callback = {
            Status.QUEUED: self.after_queued,
            Status.RUNNING: self.after_running,
            Status.CANCELED: self.after_canceled,
            Status.ERRORED: self.after_error,
            Status.EXITED: self.after_exited,
        }.get(state)
        if callback is not None:
            callback(self)


@dataclass
class TaskFactory:
    """Makes tasks from specs using shared configuration."""

    program: str = ""
    workdir: str = ""
    # Additional user-supplied environment variables and CLI args.
    user_envs: List[str] = field(default_factory=list)
    user_args: List[str] = field(default_factory=list)
    terragrunt: bool = False
    # Object with a publish(event, task) method, told of every state change.
    publisher: Any = None
    # Called whenever a task terminates.
    on_finish: Callback = None

    def new_task(self, spec: Spec) -> Task:
        """Create a pending task from a spec."""
        if spec.workspace_id is not None and spec.module_id is None:
            raise TaskError("workspace ID cannot be provided without module ID")

        def publish(task: Task) -> None:
            if self.publisher is not None:
                self.publisher.publish(UPDATED_EVENT, task)

        if spec.execution.program == "":
            program = self.program
            args = list(spec.execution.terraform_command)
        else:
            program = spec.execution.program
            args = []
        args += self.user_args
        args += spec.execution.args

        description = spec.description
        if not description:
            if spec.execution.terraform_command:
                description = " ".join(spec.execution.terraform_command)
            else:
                description = spec.execution.program

        env = [*self.user_envs, *spec.env]
        if program == "terragrunt" and self.terragrunt:
            env.append("TERRAGRUNT_FORWARD_TF_STDOUT=1")
            args.append("--terragrunt-non-interactive")

        return Task(
            id=new_id("task"),
            module_id=spec.module_id,
            workspace_id=spec.workspace_id,
            identifier=spec.identifier,
            program=program,
            args=args,
            additional_execution=spec.additional_execution,
            path=os.path.join(self.workdir, spec.path),
            blocking=spec.blocking,
            json=spec.json,
            immediate=spec.immediate,
            additional_env=env,
            depends_on=list(spec.depends_on),
            description=description,
            exclusive=spec.exclusive,
            terragrunt=self.terragrunt,
            spec=spec,
            after_create=spec.after_create,
            after_queued=spec.after_queued,
            after_running=spec.after_running,
            before_exited=spec.before_exited,
            after_exited=spec.after_exited,
            after_error=spec.after_error,
            after_canceled=spec.after_canceled,
            after_finish=spec.after_finish,
            on_update=publish,
            on_finish=self.on_finish,
        )
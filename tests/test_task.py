import sys
from datetime import timedelta

import pytest

from pug.task.spec import Execution, Spec
from pug.task.status import Status
from pug.task.task import UPDATED_EVENT, TaskError, TaskFactory

TASK_SCRIPT = """
import sys
for word in ("foo", "bar", "baz"):
    print(word)
sys.stdout.flush()
sys.stderr.write("err\\n")
sys.stderr.flush()
print("bye")
sys.stdout.flush()
"""

KILLME_SCRIPT = """
import signal, sys, time
signal.signal(signal.SIGINT, lambda *a: sys.exit(0))
sys.stdout.write("ok, you can kill me now\\n")
sys.stdout.flush()
time.sleep(30)
sys.exit(1)
"""


class RecordingPublisher:
    def __init__(self):
        self.events = []

    def publish(self, event, payload):
        self.events.append((event, payload.state))


def script_task(tmp_path, source, **spec_kwargs):
    script = tmp_path / "script.py"
    script.write_text(source)
    factory = TaskFactory(program=sys.executable, publisher=RecordingPublisher())
    spec = Spec(execution=Execution(args=[str(script)]), **spec_kwargs)
    return factory.new_task(spec)


def test_new_reader(tmp_path):
    task = script_task(tmp_path, TASK_SCRIPT)
    task.update_state(Status.QUEUED)
    task.start()()

    assert task.new_reader(False).read() == b"foo\nbar\nbaz\nbye\n"
    # A second reader starts again from the beginning.
    assert task.new_reader(False).read() == b"foo\nbar\nbaz\nbye\n"

    combined = task.new_reader(True).read().decode()
    assert "foo\nbar\nbaz\n" in combined
    assert "bye\n" in combined
    assert "err" in combined
    assert task.state == Status.EXITED


def test_cancel_running(tmp_path):
    task = script_task(tmp_path, KILLME_SCRIPT)
    task.update_state(Status.QUEUED)
    waitfn = task.start()
    assert next(task.new_streamer()) == b"ok, you can kill me now\n"
    task.cancel()
    waitfn()
    assert task.err is None
    assert task.state == Status.EXITED


def test_failed_program_errors(tmp_path):
    task = script_task(tmp_path, "import sys; sys.exit(3)")
    task.update_state(Status.QUEUED)
    task.start()()
    assert task.state == Status.ERRORED
    with pytest.raises(TaskError, match="exit status 3"):
        task.wait()


def test_missing_program_errors(tmp_path):
    factory = TaskFactory(program=str(tmp_path / "does-not-exist"))
    task = factory.new_task(Spec())
    task.update_state(Status.QUEUED)
    with pytest.raises(TaskError, match="starting task"):
        task.start()
    assert task.state == Status.ERRORED


def test_additional_execution_runs_after_success(tmp_path):
    extra = Execution(program=sys.executable, args=["-c", "print('second')"])
    task = script_task(tmp_path, "print('first')", additional_execution=extra)
    task.update_state(Status.QUEUED)
    task.start()()
    assert task.state == Status.EXITED
    assert task.new_reader(False).read() == b"first\nsecond\n"


def test_start_requires_queued():
    task = TaskFactory(program="true").new_task(Spec())
    with pytest.raises(TaskError, match="invalid state transition"):
        task.start()


def test_cancel_pending_and_finished():
    canceled = []
    task = TaskFactory().new_task(Spec(after_canceled=canceled.append))
    task.cancel()
    assert task.state == Status.CANCELED
    assert canceled == [task]
    with pytest.raises(TaskError, match="already finished"):
        task.cancel()
    # Canceled without error: wait returns normally.
    task.wait()


def test_workspace_without_module_rejected():
    with pytest.raises(TaskError):
        TaskFactory().new_task(Spec(workspace_id="workspace-1"))


def test_new_task_arguments_and_description():
    factory = TaskFactory(
        program="terraform",
        workdir="/work",
        user_envs=["A=1"],
        user_args=["-no-color"],
    )
    task = factory.new_task(
        Spec(
            path="mod",
            env=["B=2"],
            execution=Execution(terraform_command=["state", "rm"], args=["addr"]),
        )
    )
    assert task.program == "terraform"
    assert task.args == ["state", "rm", "-no-color", "addr"]
    assert task.description == "state rm"
    assert str(task) == "state rm"
    assert task.additional_env == ["A=1", "B=2"]
    assert task.path.replace("\\", "/") == "/work/mod"
    assert task.state == Status.PENDING


def test_non_terraform_program_description():
    factory = TaskFactory(program="terraform")
    task = factory.new_task(Spec(execution=Execution(program="ls", args=["-l"])))
    assert task.program == "ls"
    assert task.args == ["-l"]
    assert task.description == "ls"


def test_terragrunt_flags():
    factory = TaskFactory(program="terragrunt", terragrunt=True)
    task = factory.new_task(Spec(execution=Execution(terraform_command=["plan"])))
    assert task.args == ["plan", "--terragrunt-non-interactive"]
    assert task.additional_env[-1] == "TERRAGRUNT_FORWARD_TF_STDOUT=1"


def test_before_exited_failure_marks_errored():
    def before(_task):
        raise ValueError("bad summary")

    errors = []
    task = TaskFactory().new_task(Spec(before_exited=before, after_error=errors.append))
    task.update_state(Status.EXITED)
    assert task.state == Status.ERRORED
    assert errors == [task]
    with pytest.raises(ValueError, match="bad summary"):
        task.wait()


def test_before_exited_sets_summary():
    task = TaskFactory().new_task(Spec(before_exited=lambda t: "+1~0-0"))
    task.update_state(Status.EXITED)
    assert task.summary == "+1~0-0"
    assert task.state == Status.EXITED


def test_publisher_and_finish_hooks():
    publisher = RecordingPublisher()
    finished = []
    factory = TaskFactory(publisher=publisher, on_finish=finished.append)
    task = factory.new_task(Spec())
    task.update_state(Status.QUEUED)
    assert task.is_active()
    task.update_state(Status.CANCELED)
    assert not task.is_active()
    assert publisher.events == [
        (UPDATED_EVENT, Status.QUEUED),
        (UPDATED_EVENT, Status.CANCELED),
    ]
    assert finished == [task]


def test_elapsed():
    task = TaskFactory().new_task(Spec())
    assert task.elapsed(Status.RUNNING) == timedelta(0)
    task.update_state(Status.QUEUED)
    assert task.elapsed(Status.PENDING) >= timedelta(0)
    assert task.elapsed(Status.EXITED) == timedelta(0)
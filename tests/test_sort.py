from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import cmp_to_key

from pug.task.sort import by_state
from pug.task.status import Status

BASE = datetime(2024, 1, 1)


@dataclass
class FakeTask:
    name: str
    state: Status
    updated: datetime


def at(seconds):
    return BASE + timedelta(seconds=seconds)


def test_groups_by_state():
    running = FakeTask("running", Status.RUNNING, at(1))
    queued = FakeTask("queued", Status.QUEUED, at(2))
    pending = FakeTask("pending", Status.PENDING, at(3))
    exited = FakeTask("exited", Status.EXITED, at(4))
    assert by_state(running, queued) == -1
    assert by_state(queued, pending) == -1
    assert by_state(pending, exited) == -1
    assert by_state(exited, running) == 1
    got = sorted([exited, pending, queued, running], key=cmp_to_key(by_state))
    assert got == [running, queued, pending, exited]


def test_running_oldest_first():
    old = FakeTask("old", Status.RUNNING, at(1))
    new = FakeTask("new", Status.RUNNING, at(2))
    assert by_state(old, new) == -1
    assert sorted([new, old], key=cmp_to_key(by_state)) == [old, new]


def test_queued_pending_finished_newest_first():
    for state in (Status.QUEUED, Status.PENDING, Status.ERRORED):
        old = FakeTask("old", state, at(1))
        new = FakeTask("new", state, at(2))
        assert by_state(old, new) == 1
        assert sorted([old, new], key=cmp_to_key(by_state)) == [new, old]


def test_mixed_finished_states_share_ordering():
    errored = FakeTask("errored", Status.ERRORED, at(1))
    canceled = FakeTask("canceled", Status.CANCELED, at(3))
    exited = FakeTask("exited", Status.EXITED, at(2))
    assert by_state(canceled, exited) == -1
    assert by_state(exited, errored) == -1
    assert by_state(errored, canceled) == 1
    got = sorted([errored, exited, canceled], key=cmp_to_key(by_state))
    assert got == [canceled, exited, errored]


def test_antisymmetric_across_states():
    tasks = [FakeTask(s.value, s, at(n)) for n, s in enumerate(Status)]
    for a in tasks:
        for b in tasks:
            if a is not b:
                assert by_state(a, b) == -by_state(b, a)


def test_full_ordering():
    r1 = FakeTask("r1", Status.RUNNING, at(1))
    r2 = FakeTask("r2", Status.RUNNING, at(5))
    q1 = FakeTask("q1", Status.QUEUED, at(2))
    q2 = FakeTask("q2", Status.QUEUED, at(6))
    p1 = FakeTask("p1", Status.PENDING, at(3))
    f1 = FakeTask("f1", Status.EXITED, at(4))
    f2 = FakeTask("f2", Status.CANCELED, at(7))
    assert by_state(r2, q2) == -1
    assert by_state(q1, p1) == -1
    assert by_state(f1, f2) == 1
    got = sorted([f1, p1, q1, r2, f2, q2, r1], key=cmp_to_key(by_state))
    assert got == [r1, r2, q2, q1, p1, f2, f1]
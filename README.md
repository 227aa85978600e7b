# pug

`pug` runs command-line programs such as `terraform` as *tasks*, across
many modules and workspaces. It also provides small building blocks for a
terminal interface that shows them.

It has no dependencies beyond the standard library. Install with the
`test` extra to run the tests with pytest.

## Tasks

A task is one run of a program, described by a `Spec` (`pug.task.spec`).
Its `Execution` names either a program and its arguments, or, when no
program is given, a terraform sub-command (`terraform_command`) for the
default program configured on the service.

`Service` (`pug.task.service`) creates tasks with `create`, keeps them,
lists them with `list` and `ListOptions` (filter by path, status, blocking
or exclusive; newest first unless `oldest` is set), and fetches, cancels or
deletes them with `get`, `cancel` and `delete`. Looking up an unknown task
raises `NotFoundError`. `counter()` gives the number of live tasks.
Additions, updates and deletions of tasks are published on
`Service.task_broker`, a `Broker` whose `subscribe()` returns an iterator
of `Event`s.

```python
from pug.task.service import ListOptions, Service
from pug.task.spec import Execution, Spec
from pug.task.status import Status

service = Service(program="terraform", workdir="/srv/infra")
task = service.create(Spec(path="vpc", execution=Execution(terraform_command=["plan"])))
print(task.description)                                   # "plan"
print(service.list(ListOptions(status=[Status.PENDING])))
```

Each task moves through the states of `Status` (`pug.task.status`):

    pending -> queued -> running -> exited | errored | canceled

`Status.is_final()` tells whether a state is one of the last three, and
`Task.elapsed(status)` how long the task spent in a state.

Scheduling happens in two steps, each run in a background thread that
wakes on every task event:

* `Enqueuer` (`pug.task.enqueuer`, started with `start_enqueuer(service)`)
  moves pending tasks into the queue. Immediate tasks always go ahead;
  blocking tasks hold back further tasks on the same module or workspace;
  tasks that depend on others wait until those have exited, and are
  canceled if any of them were canceled or errored.
* `Runner` (`pug.task.runner`, started with `start_runner(service,
  max_tasks)`) starts queued tasks, never more than `max_tasks` at once
  (immediate tasks excepted) and never more than one exclusive task at a
  time. `start_runner` returns a function that waits for the tasks it has
  started.

A task can also be driven by hand: `Task.start()` runs a queued task's
program and returns a function that waits for it; `Task.wait()` blocks
until the task finishes and raises its error if it failed;
`Task.cancel()` cancels a pending or queued task, or sends an interrupt
to a running one. Failures raise `TaskError`.

### Groups and dependencies

`Service.create_group(*specs)` creates several tasks together as a `Group`
(`pug.task.group`), whose `exited()`, `errored()` and `finished()` count
its tasks by outcome. When the specs carry `Dependencies`, the tasks are
linked so that a module's tasks wait for those of the modules it depends
on; with `inverse_dependency_order` set, as when destroying
infrastructure, the direction is reversed. `create_dependent_tasks` in
`pug.task.dependency_graph` builds these links. All specs of a group must
agree on both settings, otherwise `TaskError` is raised.

### Output

A task's output is kept in a `Buffer` (`pug.task.buffer`).
`Task.new_reader(combined)` returns a copy of what has been written so
far, stdout alone or stdout and stderr combined, and `Task.new_streamer()`
yields combined output as it arrives until the task finishes.

`by_state` (`pug.task.sort`) compares tasks for display: running, then
queued, then pending, then finished. Use it with `functools.cmp_to_key`.

## Terminal helpers

`pug.tui` holds pieces of an interface that need no terminal library:

```python
from datetime import datetime, timedelta

from pug.tui.ago import ago
from pug.tui.sanitize import sanitize_colors
from pug.tui.scrollbar import scrollbar

now = datetime.now()
print(ago(now, now - timedelta(seconds=47)))   # "50s ago"

print(sanitize_colors(b"\x1b[31mred \nstill red\x1b[0m"))
# the colour is reset before each newline and restored after it

print(scrollbar(10, 100, 20, 0))               # a 10-line scrollbar
```

* `pug.tui.navigation` describes pages (`Kind`, `Page`, `NavigationMsg`,
  `new_navigation_msg`); `first_page_kind` maps the names `modules`,
  `workspaces`, `tasks` and `logs` to a page kind and raises `ValueError`
  for any other name.
* `pug.tui.cache.Cache` keeps page models by key, so a page remembers its
  state when the user returns to it; `update` and `update_all` pass a
  message to the models and keep what they return.
* `pug.tui.keys` defines the key maps (`COMMON`, `GLOBAL`, `FILTER`,
  `NAVIGATION`, `SPLIT`, `MODULE`, `LOGS`), each made of `Binding`s that
  know which keys they `matches`; `key_map_to_slice` lists a key map's
  bindings in order.

## What it does not do

The package has no command to run and no interactive screens: it does not
draw tables, previews or prompts, and does not read key presses from a
terminal. It does not discover modules or workspaces on disk, nor read
terraform state, plans or costs; module and workspace IDs are plain
strings supplied by the caller. Tasks are kept in memory only.
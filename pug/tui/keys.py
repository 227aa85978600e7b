"""Key bindings and the key maps of the interface."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, List, Tuple


@dataclass(frozen=True)
class Binding:
    """Keys that trigger an action, with help text for the user."""

    keys: Tuple[str, ...] = ()
    help_key: str = ""
    help_desc: str = ""
    disabled: bool = False

    @property
    def enabled(self) -> bool:
        return not self.disabled and bool(self.keys)

    def matches(self, key: str) -> bool:
        """Return True if the key pressed triggers this binding."""
        return self.enabled and key in self.keys


def _bind(*keys: str, help: Tuple[str, str]) -> Binding:
    return Binding(keys=keys, help_key=help[0], help_desc=help[1])


def key_map_to_slice(keymap: Any) -> List[Binding]:
    """Return the bindings of a key map dataclass in field order.

    Anything that is not a dataclass instance gives an empty list.
    """
    if not dataclasses.is_dataclass(keymap) or isinstance(keymap, type):
        return []
    bindings = []
    for f in dataclasses.fields(keymap):
        value = getattr(keymap, f.name)
        if not isinstance(value, Binding):
            raise TypeError(f"field {f.name} is not a key binding")
        bindings.append(value)
    return bindings


@dataclass(frozen=True)
class CommonKeyMap:
    """Keys shared by several models."""

    plan: Binding = _bind("p", help=("p", "plan"))
    plan_destroy: Binding = _bind("P", help=("P", "plan destroy"))
    apply: Binding = _bind("a", help=("a", "apply"))
    destroy: Binding = _bind("d", help=("d", "destroy"))
    cancel: Binding = _bind("c", help=("c", "cancel"))
    delete: Binding = _bind("D", help=("D", "delete"))
    state: Binding = _bind("s", help=("s", "state"))
    retry: Binding = _bind("r", help=("r", "retry"))
    reload: Binding = _bind("ctrl+r", help=("ctrl+r", "reload"))
    module: Binding = _bind("m", help=("m", "module"))
    workspace: Binding = _bind("w", help=("w", "workspace"))
    edit: Binding = _bind("e", help=("e", "edit"))
    init: Binding = _bind("i", help=("i", "init"))
    init_upgrade: Binding = _bind("u", help=("u", "init -upgrade"))
    validate: Binding = _bind("v", help=("v", "validate"))
    format: Binding = _bind("f", help=("f", "format"))
    cost: Binding = _bind("$", help=("$", "cost"))


@dataclass(frozen=True)
class GlobalKeyMap:
    """Keys available everywhere."""

    modules: Binding = _bind("m", help=("m", "modules"))
    workspaces: Binding = _bind("w", help=("w", "workspaces"))
    tasks: Binding = _bind("t", help=("t", "tasks"))
    task_groups: Binding = _bind("T", help=("T", "taskgroups"))
    logs: Binding = _bind("l", help=("l", "logs"))
    back: Binding = _bind("esc", help=("esc", "back"))
    select: Binding = _bind(" ", help=("<space>", "select"))
    select_all: Binding = _bind("ctrl+a", help=("ctrl+a", "select all"))
    select_clear: Binding = _bind("ctrl+\\", help=("ctrl+\\", "clear selection"))
    select_range: Binding = _bind("ctrl+@", help=("ctrl+<space>", "select range"))
    filter: Binding = _bind("/", help=("/", "filter"))
    autoscroll: Binding = _bind("ctrl+s", help=("ctrl+s", "toggle autoscroll"))
    quit: Binding = _bind("ctrl+c", help=("ctrl+c", "exit"))
    suspend: Binding = _bind("ctrl+z", help=("ctrl+z", "suspend"))
    help: Binding = _bind("?", help=("?", "close help"))


@dataclass(frozen=True)
class FilterKeyMap:
    """Keys available in filter mode."""

    blur: Binding = _bind("enter", help=("enter", "exit filter"))
    close: Binding = _bind("esc", help=("esc", "clear filter"))


@dataclass(frozen=True)
class NavigationKeyMap:
    """Keys for moving around a list or view."""

    line_up: Binding = _bind("up", "k", help=("↑/k", "up"))
    line_down: Binding = _bind("down", "j", help=("↓/j", "down"))
    page_up: Binding = _bind("pgup", help=("pgup", "page up"))
    page_down: Binding = _bind("pgdown", help=("pgdn", "page down"))
    half_page_up: Binding = _bind("ctrl+u", help=("ctrl+u", "½ page up"))
    half_page_down: Binding = _bind("ctrl+d", help=("ctrl+d", "½ page down"))
    goto_top: Binding = _bind("home", "g", help=("g/home", "go to start"))
    goto_bottom: Binding = _bind("end", "G", help=("G/end", "go to end"))


@dataclass(frozen=True)
class SplitKeyMap:
    """Keys for the split list and preview panes."""

    toggle_split: Binding = _bind("S", help=("S", "toggle split"))
    increase_split: Binding = _bind("+", help=("+", "increase split"))
    decrease_split: Binding = _bind("-", help=("-", "decrease split"))
    switch_pane: Binding = _bind("tab", help=("tab", "switch pane"))


@dataclass(frozen=True)
class ModuleKeyMap:
    """Keys specific to the module list."""

    reload_modules: Binding = _bind("ctrl+r", help=("ctrl+r", "reload modules"))
    reload_workspaces: Binding = _bind("ctrl+w", help=("ctrl+w", "reload workspaces"))
    enter: Binding = _bind("enter", help=("enter", "state"))
    execute: Binding = _bind("x", help=("x", "execute program"))


@dataclass(frozen=True)
class LogsKeyMap:
    """Keys specific to the log list."""

    enter: Binding = _bind("enter", help=("enter", "view message"))


COMMON = CommonKeyMap()
GLOBAL = GlobalKeyMap()
FILTER = FilterKeyMap()
NAVIGATION = NavigationKeyMap()
SPLIT = SplitKeyMap()
MODULE = ModuleKeyMap()
LOGS = LogsKeyMap()
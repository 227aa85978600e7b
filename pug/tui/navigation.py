"""Pages of the interface and instructions to navigate between them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class Kind(IntEnum):
    """The kind of model shown on a page."""

    MODULE_LIST = 0
    WORKSPACE_LIST = 1
    TASK_LIST = 2
    TASK = 3
    TASK_GROUP_LIST = 4
    TASK_GROUP = 5
    RESOURCE_LIST = 6
    RESOURCE = 7
    LOG_LIST = 8
    LOG = 9


_FIRST_PAGES = {
    "modules": Kind.MODULE_LIST,
    "workspaces": Kind.WORKSPACE_LIST,
    "tasks": Kind.TASK_LIST,
    "logs": Kind.LOG_LIST,
}


@dataclass(frozen=True)
class Page:
    """Identifies an instance of a model: its kind and the resource it shows.

    ``id`` is None for global listings.
    """

    kind: Kind
    id: Optional[str] = None


@dataclass(frozen=True)
class NavigationMsg:
    """An instruction to navigate to a page."""

    page: Page
    tag: int = 0


def first_page_kind(name: str) -> Kind:
    """Return the kind of page the user asked to start on.

    Raises ``ValueError`` for an unknown name.
    """
    try:
        return _FIRST_PAGES[name]
    except KeyError:
        choices = ", ".join(_FIRST_PAGES)
        raise ValueError(f"invalid first page, must be one of: [{choices}]") from None


def new_navigation_msg(kind: Kind, parent: Optional[str] = None) -> NavigationMsg:
    """Build a message to navigate to a page of the given kind and resource."""
    return NavigationMsg(page=Page(kind=kind, id=parent))
from dataclasses import dataclass, field

import pytest

from pug.tui.keys import (
    COMMON,
    GLOBAL,
    NAVIGATION,
    SPLIT,
    Binding,
    key_map_to_slice,
)


def _viewport_bindings():
    return [
        Binding(keys=("pgdown", " ", "f"), help_key="f/pgdn", help_desc="page down"),
        Binding(keys=("pgup", "b"), help_key="b/pgup", help_desc="page up"),
        Binding(keys=("u", "ctrl+u"), help_key="u", help_desc="½ page up"),
        Binding(keys=("d", "ctrl+d"), help_key="d", help_desc="½ page down"),
        Binding(keys=("down", "j"), help_key="↓/j", help_desc="down"),
        Binding(keys=("up", "k"), help_key="↑/k", help_desc="up"),
    ]


@dataclass
class ViewportKeyMap:
    page_down: Binding = field(default_factory=lambda: _viewport_bindings()[0])
    page_up: Binding = field(default_factory=lambda: _viewport_bindings()[1])
    half_page_up: Binding = field(default_factory=lambda: _viewport_bindings()[2])
    half_page_down: Binding = field(default_factory=lambda: _viewport_bindings()[3])
    down: Binding = field(default_factory=lambda: _viewport_bindings()[4])
    up: Binding = field(default_factory=lambda: _viewport_bindings()[5])


@dataclass
class BadKeyMap:
    up: Binding = field(default_factory=Binding)
    name: str = "not a binding"


def test_key_map_to_slice():
    assert key_map_to_slice(ViewportKeyMap()) == _viewport_bindings()


def test_key_map_to_slice_not_a_key_map():
    assert key_map_to_slice("modules") == []
    assert key_map_to_slice(ViewportKeyMap) == []


def test_key_map_to_slice_rejects_non_binding_field():
    with pytest.raises(TypeError):
        key_map_to_slice(BadKeyMap())


def test_navigation_key_map_order():
    bindings = key_map_to_slice(NAVIGATION)
    assert bindings[0] == NAVIGATION.line_up
    assert bindings[-1] == NAVIGATION.goto_bottom
    assert len(bindings) == 8


def test_matches():
    assert NAVIGATION.line_up.matches("k")
    assert NAVIGATION.line_up.matches("up")
    assert not NAVIGATION.line_up.matches("j")


def test_disabled_binding_never_matches():
    binding = Binding(keys=("x",), help_key="x", help_desc="execute", disabled=True)
    assert not binding.enabled
    assert not binding.matches("x")


def test_binding_without_keys_never_matches():
    assert not Binding(help_key="n", help_desc="cancel").matches("n")


def test_shared_keys():
    assert COMMON.plan.matches("p")
    assert COMMON.cost.help_desc == "cost"
    assert GLOBAL.select.matches(" ")
    assert GLOBAL.select.help_key == "<space>"
    assert SPLIT.switch_pane.matches("tab")
from __future__ import annotations

import pytest

from vim_submode.adapters.memory import (
    MAX_EXPANSION_DEPTH,
    MemoryHost,
    MemoryKeyDriver,
    RecursiveMappingError,
)
from vim_submode.host import SubmodeHost, is_insert_like
from vim_submode.keymaps import Binding
from vim_submode.submode import SessionState, SubmodeEngine


@pytest.fixture()
def host() -> MemoryHost:
    return MemoryHost()


@pytest.fixture()
def engine(host: MemoryHost) -> SubmodeEngine:
    return SubmodeEngine(host)


@pytest.fixture()
def driver(engine: SubmodeEngine, host: MemoryHost) -> MemoryKeyDriver:
    return MemoryKeyDriver(engine, host)


def test_memory_host_satisfies_host_protocol(host: MemoryHost) -> None:
    assert isinstance(host, SubmodeHost)


@pytest.mark.parametrize(
    ("mode", "expected"),
    [("i", True), ("ic", True), ("R", True), ("Rv", True), ("n", False), ("v", False)],
)
def test_insert_like_modes(mode: str, expected: bool) -> None:
    assert is_insert_like(mode) is expected


def test_insert_mode_scroll_submode_exits_on_liveness(
    engine: SubmodeEngine, host: MemoryHost, driver: MemoryKeyDriver
) -> None:
    host.mode = "i"
    host.position = (12, 3)
    engine.enter("scrollwin", "i", "", "<C-g>j", "<C-x><C-e>")

    driver.feed("<C-g>j")

    assert host.actions() == ["<C-x><C-e>"]
    assert engine.active_name() == "scrollwin"
    assert host.scheduler.pending_count == 2

    # the mapping timeout ends the pending <Plug> prefix
    host.expanding = False
    host.settle()

    assert engine.session().state is SessionState.IDLE
    assert host.command_line == ""
    assert host.position == (12, 3)
    assert host.position_writes == [(12, 3)]
    assert host.messages == []


def test_insert_mode_exit_undoes_aborted_cursor_move(
    engine: SubmodeEngine, host: MemoryHost, driver: MemoryKeyDriver
) -> None:
    host.mode = "i"
    host.position = (12, 3)
    engine.enter("scrollwin", "i", "", "<C-g>k", "<C-x><C-y>")
    host.on_execute("<C-x><C-y>", lambda h: setattr(h, "position", (11, 3)))

    driver.feed("<C-g>k")
    assert host.position == (11, 3)

    host.expanding = False
    driver.settle()

    assert not engine.is_active()
    assert host.command_line == ""
    assert host.position == (12, 3)
    assert host.position_writes == [(12, 3)]


def test_repeat_key_after_trigger_taken_by_other_submode(
    engine: SubmodeEngine, host: MemoryHost, driver: MemoryKeyDriver
) -> None:
    engine.enter("winmove", "n", "", "<C-a>j", "x1")
    engine.enter("winmove", "n", "", "gj", "x2")
    engine.enter("down", "n", "", "gj", "y")

    driver.feed("<C-a>j")
    driver.feed("j")

    assert host.actions() == ["x1", "x1"]
    assert engine.active_name() == "winmove"

    driver.feed("x")
    driver.feed("gj")

    assert host.actions() == ["x1", "x1", "y"]
    assert engine.active_name() == "down"


def test_repeat_key_typed_through_driver(
    engine: SubmodeEngine, host: MemoryHost, driver: MemoryKeyDriver
) -> None:
    engine.enter("scrollwin", "n", "", "]z", "zz")
    engine.enter("scrollwin", "n", "", "[z", "zt")

    driver.feed("]z]][")

    assert host.actions() == ["zz", "zz", "zz", "zt"]
    session = engine.session()
    assert session.entered_count == 1
    assert session.repeat_count == 3
    assert driver.typeahead == ()


def test_display_shows_name_while_submode_waits(
    engine: SubmodeEngine, host: MemoryHost, driver: MemoryKeyDriver
) -> None:
    engine.enter("scrollwin", "n", "", "]z", "zz")

    driver.feed("]z")
    host.settle()

    assert engine.active_name() == "scrollwin"
    assert host.command_line == "-- Submode: scrollwin --"


def test_other_key_exits_and_reaches_editor(
    engine: SubmodeEngine, host: MemoryHost, driver: MemoryKeyDriver
) -> None:
    engine.enter("scrollwin", "n", "", "]z", "zz")
    driver.feed("]z")

    driver.feed("x")

    assert engine.session().state is SessionState.IDLE
    assert host.received_keys == [("n", "x")]
    assert host.full_redraws == 1
    assert host.actions() == ["zz"]


def test_other_key_can_start_a_different_submode(
    engine: SubmodeEngine, host: MemoryHost, driver: MemoryKeyDriver
) -> None:
    engine.enter("scrollwin", "n", "", "]z", "zz")
    engine.enter("down", "n", "", "gj", "j")
    driver.feed("]z")

    driver.feed("gj")

    assert engine.active_name() == "down"
    assert host.actions() == ["zz", "j"]


def test_quick_repeat_reenters_after_exit(
    engine: SubmodeEngine, host: MemoryHost, driver: MemoryKeyDriver
) -> None:
    engine.enter("scrollwin", "n", "", "]z", "zz")
    driver.feed("]z")
    host.expanding = False
    driver.settle()
    assert not engine.is_active()

    driver.feed("]]")

    assert engine.active_name() == "scrollwin"
    assert host.actions() == ["zz", "zz"]
    assert engine.session().entered_count == 2


def test_failing_action_exits_on_next_tick(
    engine: SubmodeEngine, host: MemoryHost, driver: MemoryKeyDriver
) -> None:
    engine.enter("scrollwin", "n", "", "]z", "zz")
    host.fail_action("zz")

    driver.feed("]z")
    assert engine.is_active()

    driver.settle()

    session = engine.session()
    assert session.state is SessionState.IDLE
    assert session.exit_count == 1
    assert host.messages == []


def test_pending_prefix_waits_until_flush(
    engine: SubmodeEngine, host: MemoryHost, driver: MemoryKeyDriver
) -> None:
    engine.enter("scrollwin", "n", "", "]z", "zz")

    driver.feed("]")
    assert driver.typeahead == ("]",)
    assert host.received_keys == []

    driver.flush()

    assert driver.typeahead == ()
    assert host.received_keys == [("n", "]")]
    assert not engine.is_active()


def test_non_recursive_binding_executes_rhs(
    host: MemoryHost, driver: MemoryKeyDriver
) -> None:
    host.install_binding(Binding.create("n", "Q", "gq", recursive=False))

    driver.feed("Q")

    assert host.actions() == ["gq"]


def test_recursive_binding_loop_is_capped(
    host: MemoryHost, driver: MemoryKeyDriver
) -> None:
    host.install_binding(Binding.create("n", "a", "a"))

    with pytest.raises(RecursiveMappingError) as excinfo:
        driver.feed("a")

    assert str(MAX_EXPANSION_DEPTH) in str(excinfo.value)
    assert excinfo.value.binding.lhs == "a"

"""Protocols for the editor services the submode engine relies on."""

from __future__ import annotations

from typing import Any, Callable, FrozenSet, Hashable, Protocol, runtime_checkable

from vim_submode.keymaps import Binding, MapFlag

Position = Hashable
INSERT_LIKE_PREFIXES = ("i", "R")


class BindingInstaller(Protocol):
    def install_binding(self, binding: Binding) -> None:
        """Install ``binding``; recursive bindings expand their rhs again."""
        ...

    def remove_binding(self, mode: str, lhs: str) -> None:
        """Drop the global binding on ``(mode, lhs)`` if one is installed."""
        ...


class ActionExecutor(Protocol):
    def execute(self, mode: str, rhs: str, flags: FrozenSet[MapFlag]) -> None:
        """Run ``rhs`` the way the host runs a mapped key sequence."""
        ...


class Scheduler(Protocol):
    def schedule_once_soon(self, callback: Callable[[], None]) -> Any:
        """Run ``callback`` once pending input is consumed; return a handle."""
        ...

    def cancel(self, handle: Any) -> None:
        ...


class LivenessProbe(Protocol):
    def is_mid_expansion(self) -> bool:
        """True while the host is still expanding a mapped key sequence."""
        ...


class Display(Protocol):
    def show_transient_message(self, text: str) -> None:
        ...

    def clear_command_line(self) -> None:
        ...

    def redraw_status_line(self) -> None:
        ...

    def force_full_redraw(self) -> None:
        ...


class CursorTracker(Protocol):
    def get_position(self) -> Position:
        ...

    def set_position(self, snapshot: Position) -> None:
        ...


class ModeQuery(Protocol):
    def get_current_input_mode(self) -> str:
        """Short mode tag: ``"n"``, ``"i"``, ``"R"``, ``"v"``..."""
        ...


@runtime_checkable
class SubmodeHost(
    BindingInstaller,
    ActionExecutor,
    Scheduler,
    LivenessProbe,
    Display,
    CursorTracker,
    ModeQuery,
    Protocol,
):
    """Everything the engine needs from its host, in one object."""


def is_insert_like(mode: str) -> bool:
    return mode.startswith(INSERT_LIKE_PREFIXES)


__all__ = [
    "ActionExecutor",
    "BindingInstaller",
    "CursorTracker",
    "Display",
    "LivenessProbe",
    "ModeQuery",
    "Position",
    "Scheduler",
    "SubmodeHost",
    "INSERT_LIKE_PREFIXES",
    "is_insert_like",
]

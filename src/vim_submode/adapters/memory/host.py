"""In-memory host that records every request the engine makes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Hashable, List, Set

from vim_submode.keymaps import Binding, KeymapRegistry, MapFlag
from vim_submode.runtime.scheduler import DeferredCallback, DeferredScheduler, TimerHandle

LOGGER_NAME = "vim_submode.adapters.memory"

ActionEffect = Callable[["MemoryHost"], None]


@dataclass(frozen=True, slots=True)
class ExecutedAction:
    mode: str
    rhs: str
    flags: FrozenSet[MapFlag]


class MemoryHost:
    """Implements ``SubmodeHost`` with plain attributes instead of an editor.

    ``expanding`` is what the liveness probe reports. The key driver keeps it
    up to date; tests may also set it directly.
    """

    def __init__(
        self,
        *,
        mode: str = "n",
        position: Hashable = (0, 0),
        logger_name: str | None = None,
    ) -> None:
        name = logger_name or LOGGER_NAME
        self.keymaps = KeymapRegistry(logger_name=name)
        self.scheduler = DeferredScheduler(logger_name=name)
        self.mode = mode
        self.position = position
        self.expanding = False
        self.command_line = ""
        self.executed: List[ExecutedAction] = []
        self.messages: List[str] = []
        self.received_keys: List[tuple[str, str]] = []
        self.position_writes: List[Hashable] = []
        self.status_redraws = 0
        self.full_redraws = 0
        self._failing: Set[str] = set()
        self._effects: Dict[str, ActionEffect] = {}

    # scripting helpers for tests and demos

    def fail_action(self, rhs: str) -> None:
        """Make ``rhs`` abort the way a failing host command aborts a mapping."""

        self._failing.add(rhs)

    def on_execute(self, rhs: str, effect: ActionEffect) -> None:
        self._effects[rhs] = effect

    def receive_key(self, mode: str, key: str) -> None:
        """Unmapped key that reached the editor as typed input."""

        self.received_keys.append((mode, key))

    def settle(self) -> int:
        return self.scheduler.run_pending()

    def actions(self) -> list[str]:
        return [action.rhs for action in self.executed]

    # BindingInstaller

    def install_binding(self, binding: Binding) -> None:
        self.keymaps.register_binding(binding)

    def remove_binding(self, mode: str, lhs: str) -> None:
        binding = self.keymaps.find(mode, lhs)
        if binding is not None:
            self.keymaps.unregister_binding(binding.id)

    # ActionExecutor

    def execute(self, mode: str, rhs: str, flags: FrozenSet[MapFlag]) -> None:
        self.executed.append(ExecutedAction(mode=mode, rhs=rhs, flags=frozenset(flags)))
        effect = self._effects.get(rhs)
        if effect is not None:
            effect(self)
        if rhs in self._failing:
            self.expanding = False

    # Scheduler

    def schedule_once_soon(self, callback: DeferredCallback) -> TimerHandle:
        return self.scheduler.schedule_once_soon(callback)

    def cancel(self, handle: TimerHandle) -> None:
        self.scheduler.cancel(handle)

    # LivenessProbe

    def is_mid_expansion(self) -> bool:
        return self.expanding

    # Display

    def show_transient_message(self, text: str) -> None:
        self.messages.append(text)
        self.command_line = text

    def clear_command_line(self) -> None:
        self.command_line = ""

    def redraw_status_line(self) -> None:
        self.status_redraws += 1

    def force_full_redraw(self) -> None:
        self.full_redraws += 1

    # CursorTracker

    def get_position(self) -> Hashable:
        return self.position

    def set_position(self, snapshot: Hashable) -> None:
        self.position = snapshot
        self.position_writes.append(snapshot)

    # ModeQuery

    def get_current_input_mode(self) -> str:
        return self.mode


__all__ = ["ActionEffect", "ExecutedAction", "MemoryHost", "LOGGER_NAME"]

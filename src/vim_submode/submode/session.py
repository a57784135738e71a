"""Per-context runtime state of the active submode."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Optional

from .definitions import Trigger

DEFAULT_CONTEXT = "default"


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


@dataclass(slots=True)
class SubmodeSession:
    """Which submode is active in one input context, plus its pending timers."""

    context: str = DEFAULT_CONTEXT
    active_name: Optional[str] = None
    active_trigger: Optional[Trigger] = None
    position_before_action: Any = None
    pending_liveness: Any = None
    pending_display: Any = None
    entered_count: int = 0
    repeat_count: int = 0
    exit_count: int = 0

    @property
    def state(self) -> SessionState:
        return SessionState.ACTIVE if self.active_name else SessionState.IDLE

    @property
    def is_active(self) -> bool:
        return self.active_name is not None

    def enter(self, trigger: Trigger) -> bool:
        """Record a firing of ``trigger``; ``True`` when it was a repeat."""

        repeat = self.active_name == trigger.name
        if repeat:
            self.repeat_count += 1
        else:
            self.entered_count += 1
        self.active_name = trigger.name
        self.active_trigger = trigger
        return repeat

    def leave(self) -> Optional[str]:
        name = self.active_name
        if name is not None:
            self.exit_count += 1
        self.active_name = None
        self.active_trigger = None
        return name

    def replace_liveness(self, handle: Any, cancel: Callable[[Any], None]) -> None:
        """Store ``handle`` as the only pending check, cancelling the older one."""

        self.clear_liveness(cancel)
        self.pending_liveness = handle

    def clear_liveness(self, cancel: Callable[[Any], None]) -> None:
        if self.pending_liveness is not None:
            cancel(self.pending_liveness)
            self.pending_liveness = None

    def replace_display(self, handle: Any, cancel: Callable[[Any], None]) -> None:
        self.clear_display(cancel)
        self.pending_display = handle

    def clear_display(self, cancel: Callable[[Any], None]) -> None:
        if self.pending_display is not None:
            cancel(self.pending_display)
            self.pending_display = None


class SessionMap:
    """One ``SubmodeSession`` per input context, created on first use."""

    def __init__(self) -> None:
        self._sessions: Dict[str, SubmodeSession] = {}

    def get(self, context: str = DEFAULT_CONTEXT) -> SubmodeSession:
        session = self._sessions.get(context)
        if session is None:
            session = SubmodeSession(context=context)
            self._sessions[context] = session
        return session

    def __iter__(self) -> Iterator[SubmodeSession]:
        return iter(self._sessions.values())

    def __len__(self) -> int:
        return len(self._sessions)

    def active(self) -> Iterator[SubmodeSession]:
        return (session for session in self._sessions.values() if session.is_active)


__all__ = ["DEFAULT_CONTEXT", "SessionMap", "SessionState", "SubmodeSession"]

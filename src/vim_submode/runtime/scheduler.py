"""Zero-delay deferred callbacks with cancel-by-handle semantics."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque

from vim_submode.runtime import telemetry

DeferredCallback = Callable[[], None]


@dataclass(slots=True)
class TimerHandle:
    """Ticket returned by ``schedule_once_soon``."""

    timer_id: int
    callback: DeferredCallback
    label: str = ""
    cancelled: bool = False
    fired: bool = False

    @property
    def live(self) -> bool:
        return not (self.cancelled or self.fired)


class DeferredScheduler:
    """FIFO queue of callbacks that run once the current input batch settles.

    Callbacks queued while ``run_pending`` drains run in the same drain, after
    everything that was already waiting.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._queue: Deque[TimerHandle] = deque()
        self._next_id = 1
        self._logger_name = logger_name

    @property
    def pending_count(self) -> int:
        return sum(1 for handle in self._queue if handle.live)

    def schedule_once_soon(
        self, callback: DeferredCallback, *, label: str = ""
    ) -> TimerHandle:
        handle = TimerHandle(timer_id=self._next_id, callback=callback, label=label)
        self._next_id += 1
        self._queue.append(handle)
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        if handle.live:
            handle.cancelled = True

    def run_pending(self) -> int:
        """Run every live callback in order; return how many ran."""

        executed = 0
        while self._queue:
            handle = self._queue.popleft()
            if not handle.live:
                continue
            handle.fired = True
            with telemetry.span(
                "scheduler::run",
                logger_name=self._logger_name,
                metadata={"timer_id": handle.timer_id, "label": handle.label},
            ):
                handle.callback()
            executed += 1
        return executed

    def clear(self) -> None:
        for handle in self._queue:
            handle.cancelled = True
        self._queue.clear()


__all__ = ["DeferredCallback", "DeferredScheduler", "TimerHandle"]

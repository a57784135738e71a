"""Host boundary: what the engine consumes from the editor."""

from .interfaces import (
    INSERT_LIKE_PREFIXES,
    ActionExecutor,
    BindingInstaller,
    CursorTracker,
    Display,
    LivenessProbe,
    ModeQuery,
    Position,
    Scheduler,
    SubmodeHost,
    is_insert_like,
)

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

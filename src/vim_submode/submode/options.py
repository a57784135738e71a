"""Engine options, optionally read from ``VIM_SUBMODE_*`` variables."""

from __future__ import annotations

from dataclasses import dataclass

from vim_submode.runtime.telemetry import env_flag, env_value

from .session import DEFAULT_CONTEXT

DEFAULT_MESSAGE_TEMPLATE = "-- Submode: {name} --"


@dataclass(frozen=True, slots=True)
class SubmodeOptions:
    show_name: bool = True
    message_template: str = DEFAULT_MESSAGE_TEMPLATE
    quick_repeat: bool = True
    redraw_on_move: bool = True
    default_context: str = DEFAULT_CONTEXT

    def __post_init__(self) -> None:
        if "{name}" not in self.message_template:
            raise ValueError("message_template must contain '{name}'")
        if not self.default_context:
            raise ValueError("default_context cannot be empty")

    def format_message(self, name: str) -> str:
        return self.message_template.format(name=name)

    @classmethod
    def from_env(cls) -> "SubmodeOptions":
        return cls(
            show_name=env_flag("SHOW_NAME", True),
            message_template=env_value("MESSAGE") or DEFAULT_MESSAGE_TEMPLATE,
            quick_repeat=env_flag("QUICK_REPEAT", True),
            redraw_on_move=env_flag("REDRAW_ON_MOVE", True),
        )


__all__ = ["DEFAULT_MESSAGE_TEMPLATE", "SubmodeOptions"]

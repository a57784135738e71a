"""Submode registry, repeat-key rules, sessions and the state machine."""

from .definitions import SubmodeDefinition, Trigger, parse_plug_key, plug_key, trigger_tag
from .engine import SubmodeEngine
from .errors import InvalidRegistrationError, SubmodeError, UnknownTriggerError
from .lastkey import RULES, RepeatKeyRule, last_key
from .options import SubmodeOptions
from .registry import SubmodeRegistry
from .session import DEFAULT_CONTEXT, SessionMap, SessionState, SubmodeSession

__all__ = [
    "DEFAULT_CONTEXT",
    "InvalidRegistrationError",
    "RULES",
    "RepeatKeyRule",
    "SessionMap",
    "SessionState",
    "SubmodeDefinition",
    "SubmodeEngine",
    "SubmodeError",
    "SubmodeOptions",
    "SubmodeRegistry",
    "SubmodeSession",
    "Trigger",
    "UnknownTriggerError",
    "last_key",
    "parse_plug_key",
    "plug_key",
    "trigger_tag",
]

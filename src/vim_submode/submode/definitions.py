"""Submode definitions, triggers and the tags that name their bindings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterator, Optional

from vim_submode.keymaps import MapFlag

from .lastkey import last_key

NORMAL_MODE = "n"
BRACKETS = ("[", "]")
PLUG_PREFIX = "<Plug>(submode-"
TAG_SEPARATOR = ":"


def trigger_tag(name: str, lhs: str) -> str:
    return f"{name}{TAG_SEPARATOR}{lhs}"


def bracket_alias(trigger: "Trigger") -> Optional[str]:
    """``lhs[1:]`` for a normal-mode ``[x``/``]x`` trigger, else ``None``."""

    if trigger.mode != NORMAL_MODE or len(trigger.lhs) < 2:
        return None
    if trigger.lhs[:1] not in BRACKETS:
        return None
    return trigger.lhs[1:]


def plug_key(kind: str, tag: str) -> str:
    """``<Plug>`` key used to chain the scaffolding bindings of a trigger."""

    return f"{PLUG_PREFIX}{kind}:{tag})"


def parse_plug_key(token: str) -> Optional[tuple[str, str]]:
    """Split a ``plug_key`` back into ``(kind, tag)``; ``None`` if foreign."""

    if not token.startswith(PLUG_PREFIX) or not token.endswith(")"):
        return None
    kind, sep, tag = token[len(PLUG_PREFIX) : -1].partition(":")
    if not sep or not kind:
        return None
    return kind, tag


@dataclass(frozen=True, slots=True)
class Trigger:
    """One ``(mode, lhs) -> rhs`` entry of a submode."""

    name: str
    mode: str
    lhs: str
    rhs: str
    flags: FrozenSet[MapFlag] = frozenset()

    @property
    def tag(self) -> str:
        return trigger_tag(self.name, self.lhs)

    @property
    def repeat_key(self) -> str:
        return last_key(self.lhs)

    @property
    def enter_key(self) -> str:
        return plug_key("enter", self.tag)

    @property
    def repeat_lhs(self) -> str:
        return plug_key("active", self.name) + self.repeat_key


@dataclass(slots=True)
class SubmodeDefinition:
    name: str
    triggers: Dict[tuple[str, str], Trigger] = field(default_factory=dict)
    quick_repeat_alias: Optional[str] = None

    def add_trigger(self, trigger: Trigger) -> Optional[Trigger]:
        """Store ``trigger``; return the one it replaced, if any."""

        key = (trigger.mode, trigger.lhs)
        previous = self.triggers.pop(key, None)
        self.triggers[key] = trigger
        self._refresh_alias()
        return previous

    def remove_trigger(self, key: tuple[str, str]) -> Optional[Trigger]:
        removed = self.triggers.pop(key, None)
        self._refresh_alias()
        return removed

    def _refresh_alias(self) -> None:
        # the latest qualifying trigger owns the alias
        self.quick_repeat_alias = None
        for trigger in self.triggers.values():
            alias = bracket_alias(trigger)
            if alias is not None:
                self.quick_repeat_alias = alias

    def iter_triggers(self, mode: Optional[str] = None) -> Iterator[Trigger]:
        for trigger in self.triggers.values():
            if mode is None or trigger.mode == mode:
                yield trigger

    def repeat_trigger(self, mode: str, key: str) -> Optional[Trigger]:
        """Most recently registered trigger in ``mode`` repeating on ``key``."""

        found: Optional[Trigger] = None
        for trigger in self.iter_triggers(mode):
            if trigger.repeat_key == key:
                found = trigger
        return found

    @property
    def modes(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(trigger.mode for trigger in self.triggers.values()))


__all__ = [
    "NORMAL_MODE",
    "BRACKETS",
    "PLUG_PREFIX",
    "TAG_SEPARATOR",
    "SubmodeDefinition",
    "Trigger",
    "parse_plug_key",
    "plug_key",
    "bracket_alias",
    "trigger_tag",
]

"""Process-independent store of submode definitions."""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional

from vim_submode.keymaps import FlagsLike, MapFlag
from vim_submode.runtime.telemetry import span

from .definitions import TAG_SEPARATOR, SubmodeDefinition, Trigger
from .errors import InvalidRegistrationError, UnknownTriggerError

# n normal, i insert, v visual+select, x visual, s select, o operator-pending,
# c command-line, l language-argument, t terminal
KNOWN_MODES = frozenset("nivxsoclt")


class SubmodeRegistry:
    """Owns every ``SubmodeDefinition`` and indexes triggers by tag and keys."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._definitions: Dict[str, SubmodeDefinition] = {}
        self._by_keys: Dict[tuple[str, str], Trigger] = {}
        self._by_tag: Dict[str, Trigger] = {}
        self._logger_name = logger_name

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def names(self) -> tuple[str, ...]:
        return tuple(self._definitions)

    def get(self, name: str) -> SubmodeDefinition:
        try:
            return self._definitions[name]
        except KeyError as exc:
            raise KeyError(f"Submode '{name}' is not registered") from exc

    def register(
        self,
        name: str,
        modes: str,
        flags: FlagsLike,
        lhs: str,
        rhs: str,
    ) -> list[Trigger]:
        with span(
            "submode::register",
            logger_name=self._logger_name,
            component="submode",
            metadata={"name": name, "modes": modes, "lhs": lhs},
        ) as handle:
            parsed_flags = self._validate(name, modes, flags, lhs, rhs)
            definition = self._definitions.get(name)
            if definition is None:
                definition = SubmodeDefinition(name=name)
                self._definitions[name] = definition

            created: list[Trigger] = []
            for mode in dict.fromkeys(modes):
                trigger = Trigger(
                    name=name, mode=mode, lhs=lhs, rhs=rhs, flags=parsed_flags
                )
                self._claim_keys(trigger)
                definition.add_trigger(trigger)
                self._by_tag[trigger.tag] = trigger
                created.append(trigger)

            if definition.quick_repeat_alias is not None:
                handle.add_metadata("quick_repeat_alias", definition.quick_repeat_alias)
            return created

    def lookup(self, mode: str, lhs: str) -> Optional[Trigger]:
        return self._by_keys.get((mode, lhs))

    def lookup_tag(self, tag: str) -> Trigger:
        try:
            return self._by_tag[tag]
        except KeyError as exc:
            raise UnknownTriggerError(tag) from exc

    def iter_triggers(self) -> Iterator[Trigger]:
        yield from self._by_keys.values()

    def aliases(self) -> Mapping[str, str]:
        return {
            name: definition.quick_repeat_alias
            for name, definition in self._definitions.items()
            if definition.quick_repeat_alias is not None
        }

    def _claim_keys(self, trigger: Trigger) -> None:
        """Make ``(mode, lhs)`` point at ``trigger`` only."""

        key = (trigger.mode, trigger.lhs)
        previous = self._by_keys.get(key)
        if previous is not None and previous.name != trigger.name:
            self._definitions[previous.name].remove_trigger(key)
            self._by_tag.pop(previous.tag, None)
        self._by_keys[key] = trigger

    @staticmethod
    def _validate(
        name: str, modes: str, flags: FlagsLike, lhs: str, rhs: str
    ) -> frozenset[MapFlag]:
        if not name:
            raise InvalidRegistrationError("submode name cannot be empty")
        if TAG_SEPARATOR in name:
            # tags are "{name}:{lhs}" and must map back to one trigger
            raise InvalidRegistrationError(
                f"submode name '{name}' cannot contain '{TAG_SEPARATOR}'", name=name
            )
        if not modes:
            raise InvalidRegistrationError(
                f"submode '{name}' needs at least one mode", name=name
            )
        unknown = sorted(set(modes) - KNOWN_MODES)
        if unknown:
            raise InvalidRegistrationError(
                f"submode '{name}' uses unknown modes {unknown}", name=name
            )
        if not lhs:
            raise InvalidRegistrationError(
                f"submode '{name}' needs a non-empty key sequence", name=name
            )
        if not rhs:
            raise InvalidRegistrationError(
                f"submode '{name}' needs a non-empty action", name=name
            )
        try:
            return MapFlag.parse(flags)
        except ValueError as exc:
            raise InvalidRegistrationError(str(exc), name=name) from exc


__all__ = ["KNOWN_MODES", "SubmodeRegistry"]

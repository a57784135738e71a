"""Dataclasses describing host key bindings and their options."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Union

from .notation import tokenize


class MapFlag(str, Enum):
    """Binding options understood by the host's binding installer."""

    BUFFER = "buffer"
    EXPR = "expr"
    NOWAIT = "nowait"
    SILENT = "silent"
    SCRIPT = "script"

    @property
    def notation(self) -> str:
        return f"<{self.value}>"

    @classmethod
    def parse(cls, flags: "FlagsLike") -> FrozenSet["MapFlag"]:
        """Normalize flags given as members, names, ``<name>`` or letter codes.

        ``"bs"`` and ``"<buffer><silent>"`` and ``("buffer", MapFlag.SILENT)``
        all produce the same set.
        """

        if not flags:
            return frozenset()
        if isinstance(flags, MapFlag):
            return frozenset({flags})
        if isinstance(flags, str):
            if "<" in flags:
                items: Iterable[Union[str, MapFlag]] = tokenize(flags)
            elif flags.lower() in _BY_NAME:
                items = (flags,)
            else:
                items = tuple(flags)
        else:
            items = flags
        return frozenset(cls._coerce(item) for item in items)

    @classmethod
    def _coerce(cls, item: Union[str, "MapFlag"]) -> "MapFlag":
        if isinstance(item, MapFlag):
            return item
        raw = str(item).strip()
        if raw in _BY_CODE:
            return _BY_CODE[raw]
        name = raw.strip("<>").lower()
        if name in _BY_NAME:
            return _BY_NAME[name]
        raise ValueError(f"Unknown binding flag '{item}'")


_BY_NAME = {flag.value: flag for flag in MapFlag}
_BY_CODE = {
    "b": MapFlag.BUFFER,
    "e": MapFlag.EXPR,
    "n": MapFlag.NOWAIT,
    "s": MapFlag.SILENT,
    "S": MapFlag.SCRIPT,
}

FlagsLike = Union[str, MapFlag, Iterable[Union[str, MapFlag]], None]


@dataclass(frozen=True, slots=True)
class KeySequence:
    """Immutable, non-empty run of key tokens."""

    tokens: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.tokens:
            raise ValueError("KeySequence requires at least one key")
        if any(not token for token in self.tokens):
            raise ValueError("KeySequence tokens cannot be empty")

    @classmethod
    def from_notation(cls, keys: str) -> "KeySequence":
        return cls(tokenize(keys))

    @property
    def notation(self) -> str:
        return "".join(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def startswith(self, prefix: "KeySequence") -> bool:
        return self.tokens[: len(prefix.tokens)] == prefix.tokens

    def append(self, *tokens: str) -> "KeySequence":
        return KeySequence(self.tokens + tuple(tokens))


@dataclass(frozen=True, slots=True)
class Binding:
    """One ``lhs -> rhs`` mapping in one base mode."""

    mode: str
    sequence: KeySequence
    rhs: str
    flags: FrozenSet[MapFlag] = field(default_factory=frozenset)
    recursive: bool = True
    description: str = ""
    source: str | None = None

    def __post_init__(self) -> None:
        if not self.mode:
            raise ValueError("binding mode cannot be empty")
        if not self.rhs:
            raise ValueError("binding rhs cannot be empty")
        object.__setattr__(self, "flags", MapFlag.parse(self.flags))

    @classmethod
    def create(
        cls,
        mode: str,
        lhs: str,
        rhs: str,
        *,
        flags: FlagsLike = None,
        recursive: bool = True,
        description: str = "",
        source: str | None = None,
    ) -> "Binding":
        return cls(
            mode=mode,
            sequence=KeySequence.from_notation(lhs),
            rhs=rhs,
            flags=MapFlag.parse(flags),
            recursive=recursive,
            description=description,
            source=source,
        )

    @property
    def lhs(self) -> str:
        return self.sequence.notation

    @property
    def buffer_local(self) -> bool:
        return MapFlag.BUFFER in self.flags

    @property
    def key_signature(self) -> str:
        return " ".join(self.sequence.tokens)

    @property
    def id(self) -> str:
        scope = f"{MapFlag.BUFFER.notation}:" if self.buffer_local else ""
        return f"{self.mode}:{scope}{self.lhs}"


__all__ = ["MapFlag", "FlagsLike", "KeySequence", "Binding"]

"""Tokenizer for ``<C-x>``-style key notation."""

from __future__ import annotations

from typing import Iterable

SPECIAL_OPEN = "<"
SPECIAL_CLOSE = ">"


def tokenize(keys: str) -> tuple[str, ...]:
    """Split ``keys`` into single characters and complete ``<...>`` tokens.

    A ``<`` only opens a special token when a matching ``>`` follows with a
    non-empty body and no other ``<`` in between; otherwise it is literal.
    """

    tokens: list[str] = []
    index = 0
    length = len(keys)
    while index < length:
        char = keys[index]
        if char == SPECIAL_OPEN:
            close = keys.find(SPECIAL_CLOSE, index + 1)
            if close > index + 1 and SPECIAL_OPEN not in keys[index + 1 : close]:
                tokens.append(keys[index : close + 1])
                index = close + 1
                continue
        tokens.append(char)
        index += 1
    return tuple(tokens)


def is_special(token: str) -> bool:
    return (
        len(token) > 2
        and token.startswith(SPECIAL_OPEN)
        and token.endswith(SPECIAL_CLOSE)
        and SPECIAL_OPEN not in token[1:-1]
    )


def join(tokens: Iterable[str]) -> str:
    return "".join(tokens)


__all__ = ["tokenize", "is_special", "join", "SPECIAL_OPEN", "SPECIAL_CLOSE"]

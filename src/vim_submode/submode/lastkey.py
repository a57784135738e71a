"""Repeat-key derivation for submode triggers.

While a submode is active, pressing the trigger's repeat key runs its action
again. Bracket-led sequences (``]a``, ``[a``) repeat on the bracket alone so
``]]``/``[[`` style conventions keep working; everything else repeats on the
last key pressed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from vim_submode.keymaps.notation import SPECIAL_OPEN, is_special, tokenize

Tokens = Sequence[str]


@dataclass(frozen=True, slots=True)
class RepeatKeyRule:
    """One prioritized rule: ``derive`` returns a key or ``None`` to pass."""

    name: str
    derive: Callable[[Tokens], Optional[str]]


def _leading(char: str) -> Callable[[Tokens], Optional[str]]:
    def derive(tokens: Tokens) -> Optional[str]:
        return char if tokens[0] == char else None

    return derive


def _unterminated_special(tokens: Tokens) -> Optional[str]:
    # ``<`` only stays a bare token when the tokenizer found no closing ``>``
    if tokens[0] == SPECIAL_OPEN and len(tokens) > 1 and tokens[1].isalpha():
        return SPECIAL_OPEN
    return None


def _trailing(tokens: Tokens) -> Optional[str]:
    last = tokens[-1]
    return last if is_special(last) else last[-1]


RULES: tuple[RepeatKeyRule, ...] = (
    RepeatKeyRule("open-bracket", _leading("[")),
    RepeatKeyRule("close-bracket", _leading("]")),
    RepeatKeyRule("unterminated-special", _unterminated_special),
    RepeatKeyRule("shift-right", _leading(">")),
    RepeatKeyRule("trailing-key", _trailing),
)


def last_key(lhs: str, *, rules: Sequence[RepeatKeyRule] = RULES) -> str:
    """Return the single key that repeats the trigger ``lhs``.

    >>> last_key("]a"), last_key("<C-g>j"), last_key("<C-g><Tab>")
    (']', 'j', '<Tab>')
    """

    tokens = tokenize(lhs)
    if not tokens:
        raise ValueError("lhs cannot be empty")
    for rule in rules:
        key = rule.derive(tokens)
        if key is not None:
            return key
    raise ValueError(f"No repeat-key rule matched '{lhs}'")


__all__ = ["RepeatKeyRule", "RULES", "last_key"]

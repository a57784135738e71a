"""Exceptions raised for caller mistakes at the submode boundary."""

from __future__ import annotations


class SubmodeError(RuntimeError):
    """Base class for submode engine errors."""


class InvalidRegistrationError(SubmodeError, ValueError):
    """Raised when ``enter`` receives a malformed submode definition."""

    def __init__(self, message: str, *, name: str | None = None) -> None:
        super().__init__(message)
        self.name = name


class UnknownTriggerError(SubmodeError, KeyError):
    """Raised when a trigger tag or ``(mode, lhs)`` pair is not registered."""

    def __init__(self, key: str) -> None:
        super().__init__(f"No submode trigger registered for '{key}'")
        self.key = key

    def __str__(self) -> str:
        return str(self.args[0])


__all__ = ["SubmodeError", "InvalidRegistrationError", "UnknownTriggerError"]

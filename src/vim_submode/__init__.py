"""Transient, named, restricted input states ("submodes") for modal editors."""

from .submode import SubmodeEngine, SubmodeOptions, last_key

__all__ = [
    "adapters",
    "host",
    "keymaps",
    "runtime",
    "submode",
    "SubmodeEngine",
    "SubmodeOptions",
    "last_key",
]

__version__ = "0.1.0"

"""In-memory host adapter for tests and headless embedding."""

from .driver import MAX_EXPANSION_DEPTH, MemoryKeyDriver, RecursiveMappingError
from .host import ExecutedAction, MemoryHost

__all__ = [
    "ExecutedAction",
    "MAX_EXPANSION_DEPTH",
    "MemoryHost",
    "MemoryKeyDriver",
    "RecursiveMappingError",
]

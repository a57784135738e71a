"""Key notation, binding models, binding registry and resolver."""

from .models import Binding, FlagsLike, KeySequence, MapFlag
from .notation import is_special, join, tokenize
from .registry import KeymapConflictError, KeymapRegistry, RegistryStats
from .resolver import KeymapResolver, ResolutionResult

__all__ = [
    "Binding",
    "FlagsLike",
    "KeySequence",
    "MapFlag",
    "tokenize",
    "is_special",
    "join",
    "KeymapRegistry",
    "KeymapConflictError",
    "RegistryStats",
    "KeymapResolver",
    "ResolutionResult",
]

"""Binding table mirroring the host's map commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from vim_submode.runtime.telemetry import span

from .models import Binding, KeySequence, MapFlag


@dataclass(slots=True)
class RegistryStats:
    """Lightweight snapshot describing registry state."""

    binding_count: int
    modes: tuple[str, ...]
    sources: tuple[str, ...]


class KeymapConflictError(RuntimeError):
    """Raised when a binding would replace another and replacing is disabled."""

    def __init__(self, binding: Binding, existing: Binding):
        super().__init__(
            f"Binding '{binding.id}' already maps to '{existing.rhs}'"
        )
        self.binding = binding
        self.existing = existing


class KeymapRegistry:
    """Owns bindings keyed by mode, key signature and buffer scope.

    Registering the same ``(mode, lhs)`` twice overwrites, as host map
    commands do; pass ``replace=False`` to refuse instead.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._bindings: Dict[str, Binding] = {}
        self._mode_index: Dict[str, Dict[str, set[str]]] = {}
        self._logger_name = logger_name
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    def __len__(self) -> int:
        return len(self._bindings)

    def get_binding(self, binding_id: str) -> Binding:
        try:
            return self._bindings[binding_id]
        except KeyError as exc:
            raise KeyError(f"Binding '{binding_id}' is not registered") from exc

    def find(
        self, mode: str, lhs: str, *, buffer_local: bool = False
    ) -> Optional[Binding]:
        probe = Binding(
            mode=mode,
            sequence=KeySequence.from_notation(lhs),
            rhs="_",
            flags=frozenset({MapFlag.BUFFER}) if buffer_local else frozenset(),
        )
        return self._bindings.get(probe.id)

    def register_binding(self, binding: Binding, *, replace: bool = True) -> Binding:
        with span(
            "keymaps::register_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding.id, "mode": binding.mode},
        ) as handle:
            existing = self._bindings.get(binding.id)
            if existing is not None:
                if not replace:
                    handle.add_metadata("conflict", existing.rhs)
                    raise KeymapConflictError(binding, existing)
                handle.add_metadata("replaced", existing.rhs)
                self._remove_binding(existing)

            self._bindings[binding.id] = binding
            self._index_binding(binding)
            self._touch_bindings()
            return binding

    def unregister_binding(self, binding_id: str) -> Optional[Binding]:
        with span(
            "keymaps::unregister_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding_id},
        ):
            binding = self._bindings.pop(binding_id, None)
            if not binding:
                return None
            self._remove_binding(binding)
            self._touch_bindings()
            return binding

    def iter_bindings(self, mode: Optional[str] = None) -> Iterator[Binding]:
        if mode is None:
            yield from self._bindings.values()
            return
        for bucket in self._mode_index.get(mode, {}).values():
            for binding_id in sorted(bucket):
                yield self._bindings[binding_id]

    def iter_source(self, source: str) -> Iterator[Binding]:
        for binding in self._bindings.values():
            if binding.source == source:
                yield binding

    def stats(self) -> RegistryStats:
        return RegistryStats(
            binding_count=len(self._bindings),
            modes=tuple(sorted(self._mode_index)),
            sources=tuple(
                sorted({b.source for b in self._bindings.values() if b.source})
            ),
        )

    def _index_binding(self, binding: Binding) -> None:
        by_signature = self._mode_index.setdefault(binding.mode, {})
        by_signature.setdefault(binding.key_signature, set()).add(binding.id)

    def _remove_binding(self, binding: Binding) -> None:
        mode_bucket = self._mode_index.get(binding.mode)
        if not mode_bucket:
            return
        signatures = mode_bucket.get(binding.key_signature)
        if not signatures:
            return
        signatures.discard(binding.id)
        if not signatures:
            mode_bucket.pop(binding.key_signature, None)
        if not mode_bucket:
            self._mode_index.pop(binding.mode, None)

    def _touch_bindings(self) -> None:
        self._revision += 1


__all__ = [
    "KeymapRegistry",
    "KeymapConflictError",
    "RegistryStats",
]

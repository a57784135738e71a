"""Key driver that plays the host's mapping engine over a ``MemoryHost``."""

from __future__ import annotations

from typing import List, Optional, Tuple

from vim_submode.keymaps import Binding, KeymapResolver, tokenize
from vim_submode.runtime import telemetry
from vim_submode.submode import SubmodeEngine, parse_plug_key, plug_key

from .host import LOGGER_NAME, MemoryHost

MAX_EXPANSION_DEPTH = 100


class RecursiveMappingError(RuntimeError):
    """Raised when recursive bindings keep expanding into each other."""

    def __init__(self, binding: Binding) -> None:
        super().__init__(
            f"Binding '{binding.id}' exceeded {MAX_EXPANSION_DEPTH} nested expansions"
        )
        self.binding = binding


class MemoryKeyDriver:
    """Feeds typed keys through the host bindings into a ``SubmodeEngine``.

    Typeahead that is a strict prefix of a longer binding waits for more keys;
    ``flush`` stands in for the host's mapping timeout.
    """

    def __init__(
        self,
        engine: SubmodeEngine,
        host: MemoryHost,
        *,
        context: Optional[str] = None,
        logger_name: str | None = None,
    ) -> None:
        self.engine = engine
        self.host = host
        self.context = context
        self._logger_name = logger_name or LOGGER_NAME
        self.logger = telemetry.get_logger(self._logger_name)
        self.resolver = KeymapResolver(host.keymaps, logger_name=self._logger_name)
        self._typeahead: List[str] = []

    @property
    def typeahead(self) -> tuple[str, ...]:
        return tuple(self._typeahead)

    def feed(self, keys: str) -> None:
        with telemetry.span(
            "driver::feed",
            logger_name=self._logger_name,
            metadata={"keys": keys, "mode": self.host.mode},
        ):
            for token in tokenize(keys):
                self._press(token)

    def flush(self) -> None:
        self._dispatch(self._typeahead, 0, final=True)

    def settle(self) -> int:
        self.flush()
        return self.host.settle()

    def _press(self, token: str) -> None:
        if not self._typeahead and self.engine.is_active(self.context):
            if self._repeat(token):
                return
        self._typeahead.append(token)
        self._dispatch(self._typeahead, 0, final=False)

    def _repeat(self, token: str) -> bool:
        name = self.engine.active_name(self.context)
        assert name is not None
        lhs = plug_key("active", name) + token
        mode = self.host.get_current_input_mode()
        binding = self.host.keymaps.find(
            mode, lhs, buffer_local=True
        ) or self.host.keymaps.find(mode, lhs)
        if binding is None:
            self.engine.leave(self.context, reason="key")
            self.host.expanding = False
            return False
        self._run(binding, 0)
        return True

    def _dispatch(self, queue: List[str], depth: int, *, final: bool) -> None:
        while queue:
            mode = self.host.get_current_input_mode()
            result = self.resolver.resolve(mode, queue)
            if result.status == "match":
                binding, consumed = result.binding, result.consumed
            elif result.status == "pending" and not final:
                return
            else:
                binding, consumed = self._bound_prefix(mode, queue)

            if binding is None:
                self.host.receive_key(mode, queue.pop(0))
                continue
            del queue[:consumed]
            self._run(binding, depth)

    def _bound_prefix(
        self, mode: str, queue: List[str]
    ) -> Tuple[Optional[Binding], int]:
        for size in range(len(queue), 0, -1):
            result = self.resolver.resolve(mode, queue[:size])
            binding = result.binding or result.fallback
            if binding is not None:
                return binding, size
        return None, 0

    def _run(self, binding: Binding, depth: int) -> None:
        if depth >= MAX_EXPANSION_DEPTH:
            raise RecursiveMappingError(binding)

        plug = parse_plug_key(binding.rhs)
        if plug is not None and plug[0] == "enter":
            # the submode now waits on its <Plug>(submode-active:...) prefix
            self.host.expanding = True
            self.engine.fire(plug[1], context=self.context)
            return

        if binding.recursive:
            self._dispatch(list(tokenize(binding.rhs)), depth + 1, final=True)
        else:
            self.host.execute(binding.mode, binding.rhs, binding.flags)


__all__ = ["MAX_EXPANSION_DEPTH", "MemoryKeyDriver", "RecursiveMappingError"]

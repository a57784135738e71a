"""Submode state machine: Idle -> Active(name) -> Idle."""

from __future__ import annotations

from typing import Optional

from vim_submode.host import SubmodeHost, is_insert_like
from vim_submode.keymaps import Binding, FlagsLike, MapFlag
from vim_submode.runtime import telemetry

from .definitions import BRACKETS, NORMAL_MODE, Trigger
from .errors import UnknownTriggerError
from .options import SubmodeOptions
from .registry import SubmodeRegistry
from .session import SessionMap, SubmodeSession

LOGGER_NAME = "vim_submode.submode"

# exits caused by an action that did not complete; the cursor goes back to
# where it was before that action
ABORT_REASONS = frozenset({"liveness", "error"})


class SubmodeEngine:
    """Registers submodes with a host and drives their sessions.

    The engine owns no global state: every registry and session lives on the
    instance, so independent engines can share a process.
    """

    def __init__(
        self,
        host: SubmodeHost,
        *,
        options: SubmodeOptions | None = None,
        registry: SubmodeRegistry | None = None,
        logger_name: str | None = None,
    ) -> None:
        self.host = host
        self.options = options or SubmodeOptions()
        self._logger_name = logger_name or LOGGER_NAME
        self.logger = telemetry.get_logger(self._logger_name)
        self.registry = registry or SubmodeRegistry(logger_name=self._logger_name)
        self.sessions = SessionMap()

    # registration -----------------------------------------------------

    def enter(
        self,
        name: str,
        modes: str,
        flags: FlagsLike,
        lhs: str,
        rhs: str,
    ) -> list[Trigger]:
        """Define (or redefine) a submode trigger in each of ``modes``."""

        displaced = self._owned_elsewhere(name, modes, lhs)
        triggers = self.registry.register(name, modes, flags, lhs, rhs)
        for trigger in triggers:
            self._install_trigger(trigger)
        for lost in displaced:
            self._repoint_repeat(lost)
        return triggers

    def _owned_elsewhere(self, name: str, modes: str, lhs: str) -> list[Trigger]:
        """Triggers of other submodes that registering ``lhs`` takes over."""

        owned: list[Trigger] = []
        for mode in dict.fromkeys(modes):
            current = self.registry.lookup(mode, lhs)
            if current is not None and current.name != name:
                owned.append(current)
        return owned

    def _repoint_repeat(self, lost: Trigger) -> None:
        # the old owner's repeat key must reach a trigger it still has
        definition = self.registry.get(lost.name)
        remaining = definition.repeat_trigger(lost.mode, lost.repeat_key)
        if remaining is None:
            self.host.remove_binding(lost.mode, lost.repeat_lhs)
        else:
            self.host.install_binding(self._binding(remaining, remaining.repeat_lhs))
        telemetry.record_event(
            "submode.trigger_moved",
            data={
                "name": lost.name,
                "mode": lost.mode,
                "lhs": lost.lhs,
                "repeat_target": remaining.lhs if remaining else None,
            },
            logger_name=self._logger_name,
        )

    def _install_trigger(self, trigger: Trigger) -> None:
        self.host.install_binding(self._binding(trigger, trigger.lhs))
        self.host.install_binding(self._binding(trigger, trigger.repeat_lhs))

    @staticmethod
    def _binding(trigger: Trigger, lhs: str) -> Binding:
        verb = "Enter" if lhs == trigger.lhs else "Repeat"
        # the scaffolding rhs is a <Plug> key, never an expression
        return Binding.create(
            trigger.mode,
            lhs,
            trigger.enter_key,
            flags=trigger.flags - {MapFlag.EXPR},
            recursive=True,
            description=f"{verb} submode {trigger.name}",
            source=trigger.tag,
        )

    # queries ----------------------------------------------------------

    def session(self, context: Optional[str] = None) -> SubmodeSession:
        return self.sessions.get(context or self.options.default_context)

    def is_active(self, context: Optional[str] = None) -> bool:
        return self.session(context).is_active

    def active_name(self, context: Optional[str] = None) -> Optional[str]:
        return self.session(context).active_name

    # transitions ------------------------------------------------------

    def trigger(self, mode: str, lhs: str, *, context: Optional[str] = None) -> Trigger:
        """Fire the trigger registered for ``(mode, lhs)``."""

        found = self.registry.lookup(mode, lhs)
        if found is None:
            raise UnknownTriggerError(f"{mode}:{lhs}")
        return self.fire(found.tag, context=context)

    def fire(self, tag: str, *, context: Optional[str] = None) -> Trigger:
        """Enter the trigger's submode, or repeat it when already inside."""

        trigger = self.registry.lookup_tag(tag)
        session = self.session(context)
        if session.is_active and session.active_name != trigger.name:
            self.leave(session.context, reason="switch")

        with telemetry.span(
            "submode::fire",
            logger_name=self._logger_name,
            component="submode",
            metadata={"tag": tag, "context": session.context},
        ) as handle:
            before = self.host.get_position()
            session.position_before_action = before
            repeat = session.enter(trigger)
            handle.add_metadata("repeat", repeat)

            if not self._execute(trigger, session):
                return trigger

            self._schedule_liveness(session)
            self._schedule_display(session, trigger.name)
            self._install_quick_repeat(trigger.name)
            if self.options.redraw_on_move and self.host.get_position() != before:
                self.host.redraw_status_line()

        telemetry.record_event(
            "submode.repeat" if repeat else "submode.enter",
            data={"name": trigger.name, "mode": trigger.mode, "lhs": trigger.lhs},
            logger_name=self._logger_name,
        )
        return trigger

    def press(self, key: str, *, context: Optional[str] = None) -> bool:
        """Offer ``key`` to the active submode.

        Returns ``True`` when the key repeated a trigger. Any other key leaves
        the submode and returns ``False`` so the host can process it normally.
        """

        session = self.session(context)
        current = session.active_trigger
        if current is None:
            return False
        definition = self.registry.get(current.name)
        repeat = definition.repeat_trigger(current.mode, key)
        if repeat is None:
            self.leave(session.context, reason="key")
            return False
        self.fire(repeat.tag, context=session.context)
        return True

    def check_liveness(self, context: Optional[str] = None) -> bool:
        """Deferred probe; returns ``True`` when it forced the submode to exit."""

        session = self.session(context)
        session.clear_liveness(self.host.cancel)
        if not session.is_active:
            return False
        if self.host.is_mid_expansion():
            telemetry.record_event(
                "submode.alive",
                level="debug",
                data={"name": session.active_name, "context": session.context},
                logger_name=self._logger_name,
            )
            return False
        return self.leave(session.context, reason="liveness")

    def leave(self, context: Optional[str] = None, *, reason: str = "explicit") -> bool:
        session = self.session(context)
        if not session.is_active:
            return False

        with telemetry.span(
            "submode::leave",
            logger_name=self._logger_name,
            component="submode",
            metadata={"name": session.active_name, "reason": reason},
        ):
            session.clear_liveness(self.host.cancel)
            session.clear_display(self.host.cancel)
            position = session.position_before_action
            name = session.leave()
            if is_insert_like(self.host.get_current_input_mode()):
                if reason not in ABORT_REASONS:
                    position = self.host.get_position()
                self.host.clear_command_line()
                self.host.set_position(position)
            else:
                self.host.force_full_redraw()

        telemetry.record_event(
            "submode.leave",
            data={"name": name, "reason": reason, "context": session.context},
            logger_name=self._logger_name,
        )
        return True

    # side effects -----------------------------------------------------

    def _execute(self, trigger: Trigger, session: SubmodeSession) -> bool:
        try:
            self.host.execute(trigger.mode, trigger.rhs, trigger.flags)
        except Exception as exc:
            telemetry.record_event(
                "submode.action_error",
                level="error",
                data={"tag": trigger.tag, "error": str(exc)},
                logger_name=self._logger_name,
            )
            self.leave(session.context, reason="error")
            return False
        return True

    def _schedule_liveness(self, session: SubmodeSession) -> None:
        context = session.context
        handle = self.host.schedule_once_soon(lambda: self.check_liveness(context))
        session.replace_liveness(handle, self.host.cancel)

    def _schedule_display(self, session: SubmodeSession, name: str) -> None:
        if not self.options.show_name:
            return
        context = session.context

        def show() -> None:
            session.pending_display = None
            # skipped when the submode already exited before the tick
            if self.active_name(context) == name:
                self.host.show_transient_message(self.options.format_message(name))

        session.replace_display(self.host.schedule_once_soon(show), self.host.cancel)

    def _install_quick_repeat(self, name: str) -> None:
        if not self.options.quick_repeat:
            return
        alias = self.registry.get(name).quick_repeat_alias
        if alias is None:
            return
        for bracket in BRACKETS:
            self.host.install_binding(
                Binding.create(
                    NORMAL_MODE,
                    bracket * 2,
                    bracket + alias,
                    recursive=True,
                    description=f"Quick repeat for submode {name}",
                    source=f"{name}:quick-repeat",
                )
            )


__all__ = ["ABORT_REASONS", "SubmodeEngine", "LOGGER_NAME"]

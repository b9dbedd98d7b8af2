"""FormEngine — binds a data record and a rule configuration into live state.

The engine is the single writer of the form data: values change only
through :meth:`FormEngine.set_value`, which keeps dirty tracking and the
per-field schedulers in step.  Field states are written by their own
scheduler when a run settles, or by the explicit state-mutation calls
(:meth:`clear_validation`, :meth:`set_field_error`, :meth:`reset`).

Form-level state is never stored; :attr:`FormEngine.state` recomputes it
from the field states on every read.
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from wonderform.domain.types import (
    FieldDefinition,
    FieldState,
    FormConfig,
    FormState,
    ValidationResult,
    ViolationKind,
)
from wonderform.engine.aggregate import aggregate, summarize
from wonderform.engine.binding import FieldBinding
from wonderform.engine.observers import EventKind, StateEvent, StateObservers, Subscriber
from wonderform.engine.scheduler import FieldScheduler, RunTask

if TYPE_CHECKING:
    from wonderform.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

SubmitCallback = Callable[[dict[str, Any]], Awaitable[None] | None]


class FormOptions(BaseModel):
    """Form-wide behaviour switches."""

    model_config = {"frozen": True}

    validate_on_change: bool = True
    validate_on_blur: bool = True
    reset_on_submit: bool = False


class FormEngine:
    """Live validation state for one form.

    Parameters:
        data: Initial values.  Deep-copied; :meth:`reset` restores this copy.
        config: Field name -> :class:`FieldDefinition` (or a plain mapping of
            its attributes).  Iteration order is the field declaration order.
        options: Form-wide switches.
        name: Form name reported to plugins.
        plugin_manager: Receives lifecycle notifications when given.
    """

    def __init__(
        self,
        data: Mapping[str, Any],
        config: FormConfig,
        *,
        options: FormOptions | None = None,
        name: str = "form",
        plugin_manager: PluginManager | None = None,
    ) -> None:
        self.name = name
        self.options = options or FormOptions()
        self._plugins = plugin_manager
        self._initial: dict[str, Any] = copy.deepcopy(dict(data))
        self._data: dict[str, Any] = copy.deepcopy(self._initial)
        self._view: Mapping[str, Any] = MappingProxyType(self._data)
        self._observers = StateObservers()
        self._definitions: dict[str, FieldDefinition] = {}
        self._states: dict[str, FieldState] = {}
        self._schedulers: dict[str, FieldScheduler] = {}
        self._validating = 0
        self._submitting = False
        self._submitted = False

        for field, field_config in config.items():
            self._register(field, field_config)

    def _register(self, field: str, field_config: FieldDefinition | Mapping[str, Any]) -> None:
        if isinstance(field_config, FieldDefinition):
            definition = field_config
        else:
            definition = FieldDefinition.model_validate(dict(field_config))
        if not definition.label:
            definition = definition.model_copy(update={"label": field})

        state = FieldState()
        self._definitions[field] = definition
        self._states[field] = state
        self._schedulers[field] = FieldScheduler(
            field,
            definition,
            state,
            read_value=lambda: self._data.get(field),
            data=self._view,
            notify=self._observers.notify,
            on_commit=self._on_field_commit,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def data(self) -> Mapping[str, Any]:
        """Read-only live view of the form data."""
        return self._view

    @property
    def fields(self) -> list[str]:
        """Field names in declaration order."""
        return list(self._definitions)

    @property
    def state(self) -> FormState:
        """Aggregate form state, recomputed on every read."""
        return aggregate(
            self._states,
            validating=self._validating > 0,
            submitting=self._submitting,
            submitted=self._submitted,
        )

    @property
    def submitting(self) -> bool:
        return self._submitting

    @property
    def submitted(self) -> bool:
        return self._submitted

    def snapshot(self) -> dict[str, Any]:
        """Deep copy of the current data."""
        return copy.deepcopy(self._data)

    def value(self, field: str) -> Any:
        return self._data.get(field)

    def definition(self, field: str) -> FieldDefinition:
        return self._definitions[self._require(field)]

    def field_state(self, field: str) -> FieldState:
        """Copy of *field*'s current state."""
        return replace(self._states[self._require(field)])

    def field_states(self) -> dict[str, FieldState]:
        return {name: replace(state) for name, state in self._states.items()}

    def field_props(self, field: str) -> FieldBinding:
        """Binding surface for a UI component rendering *field*."""
        state = self._states[self._require(field)]
        return FieldBinding(
            name=field,
            value=self._data.get(field),
            error=state.message,
            on_input=lambda value: self.set_value(field, value),
            on_blur=lambda: self.touch(field),
        )

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a state-change callback; returns its unsubscribe function."""
        return self._observers.subscribe(callback)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_value(self, field: str, value: Any) -> RunTask | None:
        """Write *value*, update dirty tracking, and apply the change trigger.

        Returns the scheduled run, if the field's trigger fired.

        Raises:
            KeyError: *field* is neither configured nor present in the data.
        """
        if field not in self._definitions and field not in self._data:
            msg = f"Unknown field {field!r}"
            raise KeyError(msg)

        self._data[field] = value
        state = self._states.get(field)
        if state is None:
            self._observers.notify(StateEvent(EventKind.VALUE, field))
            return None

        if not state.dirty and value != self._initial.get(field):
            state.dirty = True
        self._observers.notify(StateEvent(EventKind.VALUE, field))

        if not self.options.validate_on_change:
            return None
        return self._schedulers[field].on_value_change()

    def set_values(self, values: Mapping[str, Any]) -> list[RunTask]:
        """Apply :meth:`set_value` to each item; returns the scheduled runs."""
        tasks: list[RunTask] = []
        for field, value in values.items():
            task = self.set_value(field, value)
            if task is not None:
                tasks.append(task)
        return tasks

    def touch(self, field: str) -> RunTask | None:
        """Mark *field* touched and apply the blur trigger."""
        state = self._states[self._require(field)]
        if not state.touched:
            state.touched = True
            self._observers.notify(StateEvent(EventKind.FIELD, field))
        if not self.options.validate_on_blur:
            return None
        return self._schedulers[field].on_touch()

    def touch_all(self) -> list[RunTask]:
        tasks: list[RunTask] = []
        for field in self._definitions:
            task = self.touch(field)
            if task is not None:
                tasks.append(task)
        return tasks

    def set_field_error(
        self,
        field: str,
        message: str,
        violation: ViolationKind = ViolationKind.CUSTOM,
    ) -> None:
        """Mark *field* invalid with an externally supplied message."""
        self._require(field)
        self._schedulers[field].invalidate()
        state = self._states[field]
        state.message = message
        state.violation = violation
        self._observers.notify(StateEvent(EventKind.FIELD, field))

    def clear_validation(self, field: str | None = None) -> None:
        """Forget validation results for *field* (or every field).

        Dirty and touched flags are left alone; only :meth:`reset` clears them.
        """
        names = [self._require(field)] if field is not None else list(self._definitions)
        for name in names:
            self._schedulers[name].invalidate()
            state = self._states[name]
            state.message = None
            state.violation = None
            self._observers.notify(StateEvent(EventKind.FIELD, name))

    def reset(self) -> None:
        """Restore the initial data and return every field to pristine."""
        for scheduler in self._schedulers.values():
            scheduler.invalidate()
        self._data.clear()
        self._data.update(copy.deepcopy(self._initial))
        for state in self._states.values():
            state.message = None
            state.violation = None
            state.pending = False
            state.touched = False
            state.dirty = False
        self._submitting = False
        self._submitted = False
        self._observers.notify(StateEvent(EventKind.FORM))
        self._dispatch("post_reset", form_name=self.name)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    async def validate_field(self, field: str) -> ValidationResult:
        """Run *field*'s rule chain now, regardless of its trigger.

        An unconfigured field has no rules and is reported valid.
        """
        scheduler = self._schedulers.get(field)
        if scheduler is None:
            logger.debug("validate_field: %s has no rules", field)
            return ValidationResult(valid=True, field=field)
        scheduler.cancel_timer()
        return await scheduler.run()

    async def validate(self) -> ValidationResult:
        """Run every field's chain concurrently and report the aggregate.

        Waiting debounce timers are dropped; the whole-form run covers them.
        Never raises for rule failures.
        """
        self._validating += 1
        self._observers.notify(StateEvent(EventKind.FORM))
        try:
            for scheduler in self._schedulers.values():
                scheduler.cancel_timer()
            await asyncio.gather(*(scheduler.run() for scheduler in self._schedulers.values()))
        finally:
            self._validating -= 1
            self._observers.notify(StateEvent(EventKind.FORM))

        result = summarize(self._states)
        self._dispatch(
            "post_validate", form_name=self.name, valid=result.valid, errors=result.errors
        )
        return result

    async def submit(self, on_submit: SubmitCallback) -> bool:
        """Validate, then hand a copy of the data to *on_submit* if valid.

        Returns whether the form was valid.  An exception from *on_submit*
        propagates, but ``submitting`` is cleared first.
        """
        self._submitting = True
        self._observers.notify(StateEvent(EventKind.FORM))
        try:
            result = await self.validate()
            if result.valid:
                outcome = on_submit(self.snapshot())
                if inspect.isawaitable(outcome):
                    await outcome
                if self.options.reset_on_submit:
                    self.reset()
                self._submitted = True
            else:
                logger.debug("Submit of %s blocked by %s", self.name, result.field)
        finally:
            self._submitting = False
            self._observers.notify(StateEvent(EventKind.FORM))

        self._dispatch(
            "post_submit",
            form_name=self.name,
            valid=result.valid,
            first_error_field=result.field,
        )
        return result.valid

    async def settle(self) -> None:
        """Wait for every debounce timer and scheduled run to finish."""
        await asyncio.gather(*(scheduler.wait() for scheduler in self._schedulers.values()))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _require(self, field: str) -> str:
        if field not in self._definitions:
            msg = f"Unknown field {field!r}"
            raise KeyError(msg)
        return field

    def _on_field_commit(self, field: str, result: ValidationResult) -> None:
        self._dispatch(
            "post_field_validated",
            form_name=self.name,
            field=field,
            valid=result.valid,
            message=result.message,
        )

    def _dispatch(self, hook_name: str, **payload: Any) -> None:
        if self._plugins is None:
            return
        self._plugins.dispatch(hook_name, **payload)

"""Form-level state derived from field states.

Pure functions over the current field states: nothing is cached, every
read recomputes.  Field declaration order (the mapping's insertion order)
fixes the order of ``errors`` and therefore ``first_error``.
"""

from __future__ import annotations

from collections.abc import Mapping

from wonderform.domain.types import FieldState, FormState, ValidationResult


def collect_errors(states: Mapping[str, FieldState]) -> dict[str, str]:
    """Field -> message for every invalid field, in declaration order."""
    return {name: state.message for name, state in states.items() if state.message is not None}


def aggregate(
    states: Mapping[str, FieldState],
    *,
    validating: bool = False,
    submitting: bool = False,
    submitted: bool = False,
) -> FormState:
    """Build a :class:`FormState` snapshot from *states*.

    Args:
        states: Field states in declaration order.
        validating: A whole-form run is in flight.
        submitting: A submit call is in flight.
        submitted: A submit call has completed successfully.
    """
    errors = collect_errors(states)
    dirty = any(state.dirty for state in states.values())
    touched = any(state.touched for state in states.values())
    pending = validating or any(state.pending for state in states.values())
    return FormState(
        valid=not errors,
        invalid=bool(errors),
        dirty=dirty,
        pristine=not dirty,
        touched=touched,
        untouched=not touched,
        pending=pending,
        submitting=submitting,
        submitted=submitted,
        errors=errors,
        first_error=next(iter(errors.items()), None),
    )


def summarize(states: Mapping[str, FieldState]) -> ValidationResult:
    """Whole-form :class:`ValidationResult` reporting the first error."""
    errors = collect_errors(states)
    if not errors:
        return ValidationResult(valid=True)
    field, message = next(iter(errors.items()))
    return ValidationResult(
        valid=False,
        message=message,
        field=field,
        violation=states[field].violation,
        errors=errors,
    )

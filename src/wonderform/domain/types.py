"""Core value types shared by the rule registry, the engine, and services.

FieldState is the only mutable type here; everything a consumer reads
back from the engine (FormState, ValidationResult) is a frozen snapshot.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, TypeAlias

from pydantic import BaseModel, Field, field_validator

RuleOutcome: TypeAlias = bool | str | None
Rule: TypeAlias = Callable[
    [Any, str, Mapping[str, Any]],
    RuleOutcome | Awaitable[RuleOutcome],
]


class Trigger(StrEnum):
    """Event class that makes a field's rule chain run."""

    CHANGE = "change"
    BLUR = "blur"
    SUBMIT = "submit"
    MANUAL = "manual"


class ViolationKind(StrEnum):
    """Failure taxonomy surfaced next to a field's message."""

    REQUIRED = "required"
    LENGTH = "length"
    RANGE = "range"
    PATTERN = "pattern"
    CUSTOM = "custom"
    UNEXPECTED = "unexpected"


class FieldDefinition(BaseModel):
    """Immutable per-field configuration.

    Attributes:
        rules: Rule chain, evaluated in declaration order.
        trigger: When the chain re-runs automatically.
        debounce_ms: Delay collapsing rapid value changes into one run.
        required: Synthesize a required check ahead of ``rules``.
        label: Human name passed to rules; defaults to the field name.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    rules: list[Callable[..., Any]] = Field(default_factory=list)
    trigger: Trigger = Trigger.CHANGE
    debounce_ms: int = 0
    required: bool = False
    label: str = ""

    @field_validator("debounce_ms")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            msg = "debounce_ms must be >= 0"
            raise ValueError(msg)
        return value


FieldConfig: TypeAlias = FieldDefinition | Mapping[str, Any]
FormConfig: TypeAlias = Mapping[str, FieldConfig]


@dataclass
class FieldState:
    """Mutable per-field validation record.

    ``valid`` is derived from ``message`` so it can never disagree with it.
    ``dirty`` and ``touched`` only move from False to True outside of reset.
    """

    message: str | None = None
    violation: ViolationKind | None = None
    pending: bool = False
    touched: bool = False
    dirty: bool = False

    @property
    def valid(self) -> bool:
        return self.message is None

    @property
    def invalid(self) -> bool:
        return self.message is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "message": self.message,
            "violation": str(self.violation) if self.violation else None,
            "pending": self.pending,
            "touched": self.touched,
            "dirty": self.dirty,
        }


class FormState(BaseModel):
    """Aggregate snapshot derived from the current set of field states."""

    model_config = {"frozen": True}

    valid: bool
    invalid: bool
    dirty: bool
    pristine: bool
    touched: bool
    untouched: bool
    pending: bool
    submitting: bool = False
    submitted: bool = False
    errors: dict[str, str] = Field(default_factory=dict)
    first_error: tuple[str, str] | None = None


class ValidationResult(BaseModel):
    """Outcome of one field run or one whole-form run.

    Attributes:
        valid: Whether every validated field passed.
        message: First failure message, if any.
        field: Field that produced ``message``.
        violation: Failure category of ``message``.
        errors: Ordered field -> message map (whole-form runs only).
    """

    model_config = {"frozen": True}

    valid: bool
    message: str | None = None
    field: str | None = None
    violation: ViolationKind | None = None
    errors: dict[str, str] = Field(default_factory=dict)

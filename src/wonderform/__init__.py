"""wonderform — reactive field/form validation engine."""

from __future__ import annotations

from wonderform.domain.types import (
    FieldDefinition,
    FieldState,
    FormState,
    Trigger,
    ValidationResult,
    ViolationKind,
)
from wonderform.engine.form import FormEngine, FormOptions

__version__ = "0.3.0"

__all__ = [
    "FieldDefinition",
    "FieldState",
    "FormEngine",
    "FormOptions",
    "FormState",
    "Trigger",
    "ValidationResult",
    "ViolationKind",
    "__version__",
]

"""Outcome of a validation run or a registry query, as handed to the CLI.

A :class:`ServiceResult` is either a success carrying a payload (the
form's per-field states, or the rule listing) or a failure carrying one
:class:`ServiceError`.  A form that validated but holds invalid fields is
a failure with code ``VALIDATION_FAILED`` whose payload still carries
every field state, so the caller can render both.

INVARIANT: Service methods report problems with the schema, the data file
or the form values through ServiceResult, never by raising.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    """Failure codes a :class:`ServiceResult` may carry."""

    SCHEMA_NOT_FOUND = "SCHEMA_NOT_FOUND"
    INVALID_SCHEMA = "INVALID_SCHEMA"
    DATA_NOT_FOUND = "DATA_NOT_FOUND"
    INVALID_DATA = "INVALID_DATA"
    UNKNOWN_RULE = "UNKNOWN_RULE"
    INVALID_RULE = "INVALID_RULE"
    UNKNOWN_FIELD = "UNKNOWN_FIELD"
    VALIDATION_FAILED = "VALIDATION_FAILED"


class ServiceError(BaseModel):
    """Why an operation failed; *detail* holds code-specific context."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Return type of every :class:`~wonderform.services.validate.ValidateService` method.

    Attributes:
        ok: True when the operation succeeded and, for ``validate``, every
            field passed.
        op: Operation name (``"validate"`` or ``"rules"``).
        data: Operation payload; kept on failure when there is one to show.
        warnings: Non-fatal issues, printed to stderr by the CLI.
        error: Set exactly when ``ok`` is False.
        meta: Timing and similar diagnostics.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def success(
        cls,
        op: str,
        data: dict[str, Any] | None = None,
        *,
        meta: dict[str, Any] | None = None,
    ) -> ServiceResult:
        return cls(ok=True, op=op, data=data or {}, meta=meta)

    @classmethod
    def failure(
        cls,
        op: str,
        code: ErrorCode,
        message: str,
        *,
        data: dict[str, Any] | None = None,
        meta: dict[str, Any] | None = None,
        **detail: Any,
    ) -> ServiceResult:
        """Build a failed result; extra keyword arguments become ``error.detail``."""
        return cls(
            ok=False,
            op=op,
            data=data or {},
            meta=meta,
            error=ServiceError(code=str(code), message=message, detail=detail),
        )

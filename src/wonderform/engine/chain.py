"""Rule chain evaluation for a single field.

Order is fixed: a synthesized required check first (when the field is
declared required), then the declared rules in order.  The first failure
wins.  Blank input on a field that is not required skips every rule that
is not itself a required check.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Any

from wonderform.domain.rules import GENERIC_FAILURE, UNEXPECTED_ERROR, is_empty, required
from wonderform.domain.types import FieldDefinition, Rule, ValidationResult, ViolationKind

logger = logging.getLogger(__name__)


def _rule_name(rule: Rule) -> str:
    return getattr(rule, "name", None) or getattr(rule, "__name__", type(rule).__name__)


def _failure(field: str, rule: Rule, outcome: Any) -> ValidationResult:
    message = outcome if isinstance(outcome, str) and outcome else GENERIC_FAILURE
    violation = getattr(rule, "kind", ViolationKind.CUSTOM)
    return ValidationResult(valid=False, message=message, field=field, violation=violation)


async def run_rule(rule: Rule, value: Any, label: str, data: Mapping[str, Any]) -> Any:
    """Call *rule* and await its outcome if it returned an awaitable."""
    outcome = rule(value, label, data)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return outcome


async def run_chain(
    field: str,
    definition: FieldDefinition,
    value: Any,
    data: Mapping[str, Any],
) -> ValidationResult:
    """Evaluate *definition*'s rule chain against *value*.

    Never raises for rule failures: a rule that raises (or whose awaitable
    raises) resolves to the generic unexpected-error message.
    """
    label = definition.label or field
    chain: list[Rule] = []
    if definition.required:
        chain.append(required(f"{label} is required"))
    chain.extend(definition.rules)

    blank = is_empty(value)
    for rule in chain:
        if blank and not definition.required and not getattr(rule, "checks_required", False):
            continue
        try:
            outcome = await run_rule(rule, value, label, data)
        except Exception:
            logger.warning(
                "Rule %s raised while validating field %s",
                _rule_name(rule),
                field,
                exc_info=True,
            )
            return ValidationResult(
                valid=False,
                message=UNEXPECTED_ERROR,
                field=field,
                violation=ViolationKind.UNEXPECTED,
            )
        if outcome is not True:
            return _failure(field, rule, outcome)
    return ValidationResult(valid=True, field=field)

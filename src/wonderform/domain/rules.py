"""Built-in rule constructors and the named rule registry.

Every constructor closes over its parameters and returns a callable
``rule(value, label, data) -> True | message``.  Built-ins are pure with
respect to what they capture; the only outside input they read is the
``data`` view handed to them for a single chain evaluation.

Shape rules (length, range, pattern, ...) treat an empty value as
vacuously satisfied so that optional fields accept blank input.  Whether a
blank value is acceptable at all is the job of :func:`required`.
"""

from __future__ import annotations

import inspect
import logging
import math
import re
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Any

from wonderform.domain.types import Rule, RuleOutcome, ViolationKind

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Validation failed"
UNEXPECTED_ERROR = "A validation error occurred"

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+\Z"
PHONE_PATTERN = r"^1[3-9]\d{9}\Z"
URL_PATTERN = r"^https?://.+\Z"

_EMPTY_DATA: Mapping[str, Any] = MappingProxyType({})
_NUMBER_TEXT = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def is_empty(value: Any) -> bool:
    """Return True for ``None``, ``""`` and empty collections."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def _length(value: Any) -> int:
    if isinstance(value, (str, list, tuple, set, frozenset, dict)):
        return len(value)
    return len(str(value))


def _as_number(value: Any) -> float | None:
    """Coerce *value* to a finite float, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        num = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if _NUMBER_TEXT.fullmatch(text) is None:
            return None
        num = float(text)
    else:
        return None
    if math.isnan(num) or math.isinf(num):
        return None
    return num


def _ends_with_anchor(compiled: re.Pattern[str]) -> bool:
    source = compiled.pattern
    if compiled.flags & re.MULTILINE:
        return False
    if not isinstance(source, str) or not source.endswith("$"):
        return False
    backslashes = len(source[:-1]) - len(source[:-1].rstrip("\\"))
    return backslashes % 2 == 0


def _search(compiled: re.Pattern[str], text: str) -> bool:
    """``re.search`` where a trailing ``$`` only matches at the very end."""
    found = compiled.search(text)
    if found is None:
        return False
    if text.endswith("\n") and _ends_with_anchor(compiled):
        return found.end() == len(text)
    return True


# ---------------------------------------------------------------------------
# Rule objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BuiltinRule:
    """A parameterised predicate with a fixed failure message.

    Attributes:
        name: Registry name of the constructor that built it.
        kind: Failure category reported when the predicate fails.
        predicate: ``(value, data) -> bool``.
        message: Message returned on failure.
        checks_required: True only for required checks; these keep running
            on blank input.
    """

    name: str
    kind: ViolationKind
    predicate: Callable[[Any, Mapping[str, Any]], bool]
    message: str
    checks_required: bool = False

    def __call__(
        self,
        value: Any,
        label: str = "",
        data: Mapping[str, Any] = _EMPTY_DATA,
    ) -> RuleOutcome:
        if not self.checks_required and is_empty(value):
            return True
        if self.predicate(value, data):
            return True
        return self.message


@dataclass(frozen=True)
class CustomRule:
    """Wrap a user predicate returning ``True``, ``False`` or a message."""

    validator: Callable[[Any], bool | str]
    message: str = GENERIC_FAILURE
    name: str = "custom"
    kind: ViolationKind = ViolationKind.CUSTOM
    checks_required: bool = False

    def __call__(
        self,
        value: Any,
        label: str = "",
        data: Mapping[str, Any] = _EMPTY_DATA,
    ) -> RuleOutcome:
        result = self.validator(value)
        if result is True:
            return True
        return result if isinstance(result, str) else self.message


@dataclass(frozen=True)
class AsyncRule:
    """Wrap an async predicate; a raised error becomes the generic message."""

    validator: Callable[[Any], Awaitable[bool | str]]
    message: str = GENERIC_FAILURE
    name: str = "async"
    kind: ViolationKind = ViolationKind.CUSTOM
    checks_required: bool = False

    async def __call__(
        self,
        value: Any,
        label: str = "",
        data: Mapping[str, Any] = _EMPTY_DATA,
    ) -> RuleOutcome:
        try:
            result = await self.validator(value)
        except Exception:
            logger.warning("Async rule %s raised", self.name, exc_info=True)
            return UNEXPECTED_ERROR
        if result is True:
            return True
        return result if isinstance(result, str) else self.message


@dataclass(frozen=True)
class CombinedRule:
    """Run several rules in order and report the first failure."""

    rules: tuple[Rule, ...]
    name: str = "combine"
    kind: ViolationKind = ViolationKind.CUSTOM
    checks_required: bool = False

    async def __call__(
        self,
        value: Any,
        label: str = "",
        data: Mapping[str, Any] = _EMPTY_DATA,
    ) -> RuleOutcome:
        for rule in self.rules:
            result = rule(value, label, data)
            if inspect.isawaitable(result):
                result = await result
            if result is not True:
                return result
        return True


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------


def required(message: str | None = None) -> BuiltinRule:
    """Fail on ``None``, ``""`` or an empty collection."""
    return BuiltinRule(
        name="required",
        kind=ViolationKind.REQUIRED,
        predicate=lambda value, _data: not is_empty(value),
        message=message or "This field is required",
        checks_required=True,
    )


def min_length(min: int, message: str | None = None) -> BuiltinRule:  # noqa: A002
    return BuiltinRule(
        name="min_length",
        kind=ViolationKind.LENGTH,
        predicate=lambda value, _data: _length(value) >= min,
        message=message or f"Must be at least {min} characters",
    )


def max_length(max: int, message: str | None = None) -> BuiltinRule:  # noqa: A002
    return BuiltinRule(
        name="max_length",
        kind=ViolationKind.LENGTH,
        predicate=lambda value, _data: _length(value) <= max,
        message=message or f"Must be at most {max} characters",
    )


def length(min: int, max: int, message: str | None = None) -> BuiltinRule:  # noqa: A002
    """Length must fall within ``[min, max]``."""
    if min > max:
        msg = f"length(): min ({min}) exceeds max ({max})"
        raise ValueError(msg)
    return BuiltinRule(
        name="length",
        kind=ViolationKind.LENGTH,
        predicate=lambda value, _data: min <= _length(value) <= max,
        message=message or f"Must be between {min} and {max} characters",
    )


def _bounded(bound: Callable[[float], bool]) -> Callable[[Any, Mapping[str, Any]], bool]:
    def predicate(value: Any, _data: Mapping[str, Any]) -> bool:
        num = _as_number(value)
        return num is not None and bound(num)

    return predicate


def min_value(min: float, message: str | None = None) -> BuiltinRule:  # noqa: A002
    return BuiltinRule(
        name="min_value",
        kind=ViolationKind.RANGE,
        predicate=_bounded(lambda num: num >= min),
        message=message or f"Must not be less than {min}",
    )


def max_value(max: float, message: str | None = None) -> BuiltinRule:  # noqa: A002
    return BuiltinRule(
        name="max_value",
        kind=ViolationKind.RANGE,
        predicate=_bounded(lambda num: num <= max),
        message=message or f"Must not be greater than {max}",
    )


def between(min: float, max: float, message: str | None = None) -> BuiltinRule:  # noqa: A002
    if min > max:
        msg = f"between(): min ({min}) exceeds max ({max})"
        raise ValueError(msg)
    return BuiltinRule(
        name="between",
        kind=ViolationKind.RANGE,
        predicate=_bounded(lambda num: min <= num <= max),
        message=message or f"Must be between {min} and {max}",
    )


def pattern(
    regex: str | re.Pattern[str],
    message: str | None = None,
    *,
    name: str = "pattern",
) -> BuiltinRule:
    r"""Match ``str(value)`` against *regex* with ``re.search`` semantics.

    A trailing ``$`` anchors at the end of the text, so ``"123\n"`` does
    not satisfy ``^\d+$`` unless *regex* was compiled with ``re.MULTILINE``.
    """
    compiled = re.compile(regex) if isinstance(regex, str) else regex
    return BuiltinRule(
        name=name,
        kind=ViolationKind.PATTERN,
        predicate=lambda value, _data: _search(compiled, str(value)),
        message=message or "Invalid format",
    )


def email(message: str | None = None) -> BuiltinRule:
    return pattern(EMAIL_PATTERN, message or "Enter a valid email address", name="email")


def phone(message: str | None = None, *, regex: str = PHONE_PATTERN) -> BuiltinRule:
    """Mobile number shape; *regex* overrides the default numbering plan."""
    return pattern(regex, message or "Enter a valid phone number", name="phone")


def url(message: str | None = None) -> BuiltinRule:
    return pattern(URL_PATTERN, message or "Enter a valid URL", name="url")


def numeric(message: str | None = None) -> BuiltinRule:
    return BuiltinRule(
        name="numeric",
        kind=ViolationKind.PATTERN,
        predicate=lambda value, _data: _as_number(value) is not None,
        message=message or "Enter a valid number",
    )


def integer(message: str | None = None) -> BuiltinRule:
    def predicate(value: Any, _data: Mapping[str, Any]) -> bool:
        num = _as_number(value)
        return num is not None and num.is_integer()

    return BuiltinRule(
        name="integer",
        kind=ViolationKind.PATTERN,
        predicate=predicate,
        message=message or "Enter a whole number",
    )


def confirmed(target: str, message: str | None = None) -> BuiltinRule:
    """Value must equal ``data[target]`` (e.g. password confirmation)."""
    return BuiltinRule(
        name="confirmed",
        kind=ViolationKind.CUSTOM,
        predicate=lambda value, data: target in data and value == data[target],
        message=message or "Values do not match",
    )


def custom(validator: Callable[[Any], bool | str], message: str | None = None) -> CustomRule:
    return CustomRule(validator=validator, message=message or GENERIC_FAILURE)


def async_rule(
    validator: Callable[[Any], Awaitable[bool | str]],
    message: str | None = None,
) -> AsyncRule:
    return AsyncRule(validator=validator, message=message or GENERIC_FAILURE)


def combine(*rules: Rule) -> CombinedRule:
    return CombinedRule(rules=tuple(rules))


# ---------------------------------------------------------------------------
# Named registry
# ---------------------------------------------------------------------------

RuleFactory = Callable[..., Rule]

RULE_REGISTRY: dict[str, RuleFactory] = {}


def _builtin_rule_map() -> dict[str, RuleFactory]:
    return {
        "required": required,
        "min_length": min_length,
        "max_length": max_length,
        "length": length,
        "min_value": min_value,
        "max_value": max_value,
        "between": between,
        "pattern": pattern,
        "email": email,
        "phone": phone,
        "url": url,
        "numeric": numeric,
        "integer": integer,
        "confirmed": confirmed,
    }


BUILTIN_RULE_NAMES: frozenset[str] = frozenset(_builtin_rule_map())


def register_rule(name: str, factory: RuleFactory) -> None:
    """Register a named rule constructor for declarative forms.

    Built-in names are reserved; re-registering the same factory is a no-op.

    Raises:
        ValueError: Empty name, reserved name, or a different factory
            already registered under *name*.
        TypeError: *factory* is not callable.
    """
    normalized = name.strip()
    if not normalized:
        msg = "Rule name must not be empty"
        raise ValueError(msg)
    if not callable(factory):
        msg = f"Rule factory for {normalized!r} must be callable"
        raise TypeError(msg)
    existing = RULE_REGISTRY.get(normalized)
    if existing is factory:
        return
    if normalized in BUILTIN_RULE_NAMES:
        msg = f"Rule name {normalized!r} is reserved for a built-in rule"
        raise ValueError(msg)
    if existing is not None:
        msg = f"Rule {normalized!r} is already registered"
        raise ValueError(msg)
    RULE_REGISTRY[normalized] = factory


def get_rule_factory(name: str) -> RuleFactory:
    """Look up a rule constructor by name.

    Raises:
        KeyError: If no rule is registered under *name*.
    """
    try:
        return RULE_REGISTRY[name]
    except KeyError:
        msg = f"No rule registered under {name!r}"
        raise KeyError(msg) from None


def build_rule(name: str, **params: Any) -> Rule:
    """Instantiate the rule registered under *name* with *params*."""
    return get_rule_factory(name)(**params)


def _register_rules() -> None:
    """Populate :data:`RULE_REGISTRY` with the built-in constructors."""
    RULE_REGISTRY.update(_builtin_rule_map())


_register_rules()

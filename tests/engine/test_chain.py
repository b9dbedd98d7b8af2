"""Tests for single-field rule chain evaluation."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

import pytest

from wonderform.domain import rules
from wonderform.domain.rules import GENERIC_FAILURE, UNEXPECTED_ERROR
from wonderform.domain.types import FieldDefinition, ViolationKind
from wonderform.engine.chain import run_chain

EMPTY: Mapping[str, Any] = MappingProxyType({})


def _always(outcome: Any, calls: list[Any] | None = None):
    def rule(value: Any, label: str, data: Mapping[str, Any]) -> Any:
        if calls is not None:
            calls.append(value)
        return outcome

    return rule


class TestRequiredHandling:
    @pytest.mark.parametrize("value", ["", None, []])
    async def test_required_field_blank_fails(self, value: Any) -> None:
        definition = FieldDefinition(required=True, label="Email", rules=[_always(True)])
        result = await run_chain("email", definition, value, EMPTY)
        assert result.valid is False
        assert result.message == "Email is required"
        assert result.violation is ViolationKind.REQUIRED
        assert result.field == "email"

    async def test_required_check_runs_before_declared_rules(self) -> None:
        calls: list[Any] = []
        definition = FieldDefinition(required=True, rules=[_always("first", calls)])
        result = await run_chain("name", definition, "", EMPTY)
        assert result.message == "name is required"
        assert calls == []

    async def test_optional_blank_skips_rules(self) -> None:
        calls: list[Any] = []
        definition = FieldDefinition(rules=[rules.email(), _always("always fails", calls)])
        result = await run_chain("email", definition, "", EMPTY)
        assert result.valid is True
        assert result.message is None
        assert calls == []

    async def test_explicit_required_rule_runs_on_blank(self) -> None:
        definition = FieldDefinition(rules=[rules.required("Say something"), rules.min_length(3)])
        result = await run_chain("bio", definition, "", EMPTY)
        assert result.message == "Say something"
        assert result.violation is ViolationKind.REQUIRED


class TestOrdering:
    async def test_first_failure_wins(self) -> None:
        calls: list[Any] = []
        definition = FieldDefinition(
            rules=[_always(True, calls), _always("second", calls), _always("third", calls)]
        )
        result = await run_chain("f", definition, "v", EMPTY)
        assert result.message == "second"
        assert len(calls) == 2

    async def test_all_pass(self) -> None:
        definition = FieldDefinition(rules=[rules.min_length(2), rules.max_length(5)])
        result = await run_chain("f", definition, "abc", EMPTY)
        assert result.valid is True

    async def test_violation_kind_from_builtin(self) -> None:
        definition = FieldDefinition(rules=[rules.min_length(5)])
        result = await run_chain("f", definition, "ab", EMPTY)
        assert result.violation is ViolationKind.LENGTH

    async def test_plain_callable_is_custom_kind(self) -> None:
        definition = FieldDefinition(rules=[_always("nope")])
        result = await run_chain("f", definition, "x", EMPTY)
        assert result.violation is ViolationKind.CUSTOM


class TestOutcomes:
    async def test_false_uses_generic_message(self) -> None:
        definition = FieldDefinition(rules=[_always(False)])
        result = await run_chain("f", definition, "x", EMPTY)
        assert result.message == GENERIC_FAILURE

    async def test_none_is_failure(self) -> None:
        definition = FieldDefinition(rules=[_always(None)])
        result = await run_chain("f", definition, "x", EMPTY)
        assert result.valid is False

    async def test_async_rule_awaited(self) -> None:
        async def slow_check(value: Any, label: str, data: Mapping[str, Any]) -> str:
            return f"{label} is taken"

        definition = FieldDefinition(label="Username", rules=[slow_check])
        result = await run_chain("username", definition, "bob", EMPTY)
        assert result.message == "Username is taken"

    async def test_raising_rule_becomes_unexpected(self, caplog: pytest.LogCaptureFixture) -> None:
        def broken(value: Any, label: str, data: Mapping[str, Any]) -> bool:
            raise RuntimeError("boom")

        definition = FieldDefinition(rules=[broken, _always("never reached")])
        with caplog.at_level(logging.WARNING, logger="wonderform"):
            result = await run_chain("f", definition, "x", EMPTY)
        assert result.message == UNEXPECTED_ERROR
        assert result.violation is ViolationKind.UNEXPECTED
        assert "broken" in caplog.text

    async def test_rejecting_async_rule_becomes_unexpected(self) -> None:
        async def rejects(value: Any, label: str, data: Mapping[str, Any]) -> bool:
            raise TimeoutError

        definition = FieldDefinition(rules=[rejects])
        result = await run_chain("f", definition, "x", EMPTY)
        assert result.message == UNEXPECTED_ERROR


class TestRuleInputs:
    async def test_rule_receives_label_and_data(self) -> None:
        seen: dict[str, Any] = {}

        def capture(value: Any, label: str, data: Mapping[str, Any]) -> bool:
            seen.update(value=value, label=label, data=dict(data))
            return True

        data = MappingProxyType({"a": 1, "b": 2})
        definition = FieldDefinition(label="Field B", rules=[capture])
        await run_chain("b", definition, 2, data)
        assert seen == {"value": 2, "label": "Field B", "data": {"a": 1, "b": 2}}

    async def test_label_falls_back_to_field_name(self) -> None:
        definition = FieldDefinition(required=True)
        result = await run_chain("city", definition, None, EMPTY)
        assert result.message == "city is required"

    async def test_confirmed_reads_sibling(self) -> None:
        definition = FieldDefinition(rules=[rules.confirmed("password")])
        data = MappingProxyType({"password": "hunter22", "password_confirm": "hunter2"})
        result = await run_chain("password_confirm", definition, "hunter2", data)
        assert result.message == "Values do not match"

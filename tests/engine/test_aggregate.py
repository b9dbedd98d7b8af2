"""Tests for form-level state aggregation."""

from __future__ import annotations

from wonderform.domain.types import FieldState, ViolationKind
from wonderform.engine.aggregate import aggregate, collect_errors, summarize


class TestAggregate:
    def test_all_initial(self) -> None:
        state = aggregate({"a": FieldState(), "b": FieldState()})
        assert state.valid is True
        assert state.invalid is False
        assert state.pristine is True
        assert state.untouched is True
        assert state.pending is False
        assert state.errors == {}
        assert state.first_error is None

    def test_one_invalid_field(self) -> None:
        states = {
            "email": FieldState(message="Enter a valid email address", dirty=True, touched=True),
            "age": FieldState(dirty=True),
        }
        state = aggregate(states)
        assert state.valid is False
        assert state.invalid is True
        assert state.errors == {"email": "Enter a valid email address"}
        assert state.first_error == ("email", "Enter a valid email address")
        assert state.dirty is True
        assert state.touched is True

    def test_errors_follow_declaration_order(self) -> None:
        states = {
            "zeta": FieldState(message="z failed"),
            "alpha": FieldState(),
            "mid": FieldState(message="m failed"),
        }
        assert list(collect_errors(states)) == ["zeta", "mid"]
        assert aggregate(states).first_error == ("zeta", "z failed")

    def test_pending_from_field(self) -> None:
        assert aggregate({"a": FieldState(pending=True)}).pending is True

    def test_pending_from_whole_form_run(self) -> None:
        assert aggregate({"a": FieldState()}, validating=True).pending is True

    def test_submit_flags_pass_through(self) -> None:
        state = aggregate({}, submitting=True, submitted=True)
        assert state.submitting is True
        assert state.submitted is True
        assert state.valid is True

    def test_recomputed_on_every_call(self) -> None:
        field = FieldState()
        states = {"a": field}
        assert aggregate(states).valid is True
        field.message = "broken"
        assert aggregate(states).valid is False


class TestSummarize:
    def test_valid(self) -> None:
        result = summarize({"a": FieldState()})
        assert result.valid is True
        assert result.field is None
        assert result.errors == {}

    def test_reports_first_error(self) -> None:
        states = {
            "a": FieldState(),
            "b": FieldState(message="b bad", violation=ViolationKind.RANGE),
            "c": FieldState(message="c bad"),
        }
        result = summarize(states)
        assert result.valid is False
        assert result.field == "b"
        assert result.message == "b bad"
        assert result.violation is ViolationKind.RANGE
        assert result.errors == {"b": "b bad", "c": "c bad"}

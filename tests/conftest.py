"""Shared pytest fixtures and test helpers for wonderform tests."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from wonderform.domain import rules
from wonderform.domain.rules import RULE_REGISTRY

SIGNUP_SCHEMA = """\
[form]
name = "signup"

[fields.email]
label = "Email"
required = true
trigger = "blur"
rules = [{ rule = "email" }, { rule = "max_length", max = 64 }]

[fields.age]
label = "Age"
rules = [{ rule = "integer" }, { rule = "between", min = 18, max = 120 }]

[fields.password]
label = "Password"
required = true
rules = [{ rule = "min_length", min = 8 }]

[fields.password_confirm]
label = "Confirm password"
rules = [{ rule = "confirmed", target = "password", message = "Passwords do not match" }]
"""


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo handler and level changes made by configure_logging."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    wf = logging.getLogger("wonderform")
    wf_level = wf.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    wf.setLevel(wf_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def restore_rule_registry() -> Generator[None]:
    """Undo rule registrations made by a test."""
    original = RULE_REGISTRY.copy()
    try:
        yield
    finally:
        RULE_REGISTRY.clear()
        RULE_REGISTRY.update(original)


@pytest.fixture
def signup_config() -> dict[str, dict[str, Any]]:
    """Programmatic twin of SIGNUP_SCHEMA."""
    return {
        "email": {
            "label": "Email",
            "required": True,
            "trigger": "blur",
            "rules": [rules.email(), rules.max_length(64)],
        },
        "age": {"label": "Age", "rules": [rules.integer(), rules.between(18, 120)]},
        "password": {"label": "Password", "required": True, "rules": [rules.min_length(8)]},
        "password_confirm": {
            "label": "Confirm password",
            "rules": [rules.confirmed("password", "Passwords do not match")],
        },
    }


@pytest.fixture
def signup_data() -> dict[str, Any]:
    return {"email": "", "age": None, "password": "", "password_confirm": ""}


@pytest.fixture
def schema_file(tmp_path: Path) -> Path:
    path = tmp_path / "signup.toml"
    path.write_text(SIGNUP_SCHEMA, encoding="utf-8")
    return path


def write_json(path: Path, payload: Any) -> Path:
    """Write *payload* as JSON and return *path*."""
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path

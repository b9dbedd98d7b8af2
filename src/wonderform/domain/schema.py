"""Declarative form schemas.

A schema is a TOML document naming each field's trigger, flags and rule
chain.  Rules are referenced by registry name; every other key of a rule
entry is passed to the rule constructor::

    [form]
    name = "signup"

    [fields.email]
    label = "Email"
    required = true
    trigger = "blur"
    rules = [{ rule = "email" }, { rule = "max_length", max = 120 }]

    [fields.password_confirm]
    rules = [{ rule = "confirmed", target = "password", message = "Passwords differ" }]
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from wonderform.domain.rules import build_rule
from wonderform.domain.types import FieldDefinition, Trigger


class RuleSpec(BaseModel):
    """One rule reference: registry name plus constructor parameters."""

    model_config = {"frozen": True, "extra": "allow"}

    rule: str

    @property
    def params(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class FieldSchema(BaseModel):
    """``[fields.<name>]`` table."""

    model_config = {"frozen": True, "extra": "forbid"}

    label: str = ""
    required: bool = False
    trigger: Trigger = Trigger.CHANGE
    debounce_ms: int = Field(default=0, ge=0)
    rules: list[RuleSpec] = Field(default_factory=list)


class FormSection(BaseModel):
    """``[form]`` table."""

    model_config = {"frozen": True}

    name: str = "form"
    validate_on_change: bool | None = None
    validate_on_blur: bool | None = None
    reset_on_submit: bool | None = None


class FormSchema(BaseModel):
    """Root of a form schema document."""

    model_config = {"frozen": True}

    form: FormSection = Field(default_factory=FormSection)
    fields: dict[str, FieldSchema] = Field(default_factory=dict)

    def build_definitions(self) -> dict[str, FieldDefinition]:
        """Compile every field through the rule registry, in declaration order.

        Raises:
            KeyError: A rule name is not registered.
            TypeError: A rule entry carries parameters its constructor rejects.
        """
        definitions: dict[str, FieldDefinition] = {}
        for name, spec in self.fields.items():
            definitions[name] = FieldDefinition(
                rules=[build_rule(ref.rule, **ref.params) for ref in spec.rules],
                trigger=spec.trigger,
                debounce_ms=spec.debounce_ms,
                required=spec.required,
                label=spec.label or name,
            )
        return definitions

    def option_overrides(self) -> dict[str, bool]:
        """Form options explicitly set in the ``[form]`` table."""
        return self.form.model_dump(exclude={"name"}, exclude_none=True)


def load_form_schema(path: Path) -> FormSchema:
    """Parse and validate a TOML form schema.

    Raises:
        tomllib.TOMLDecodeError: The file is not valid TOML.
        pydantic.ValidationError: The document does not match the schema.
    """
    raw = path.read_text(encoding="utf-8")
    data: dict[str, Any] = tomllib.loads(raw)
    return FormSchema.model_validate(data)

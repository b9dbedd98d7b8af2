"""Pluggy hook specifications for wonderform lifecycle events and setup extensions.

Four lifecycle notifications are called synchronously by the engine.
One setup-time hook allows plugins to register named rule constructors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from wonderform.domain.rules import RuleFactory

hookspec = pluggy.HookspecMarker("wonderform")


class WonderformHookSpec:
    """Hook specifications for the wonderform plugin system."""

    @hookspec
    def post_field_validated(
        self,
        form_name: str,
        field: str,
        valid: bool,
        message: str | None,
    ) -> None:
        """Called after a field run commits its result."""

    @hookspec
    def post_validate(
        self,
        form_name: str,
        valid: bool,
        errors: dict[str, str],
    ) -> None:
        """Called after a whole-form validation settles."""

    @hookspec
    def post_submit(
        self,
        form_name: str,
        valid: bool,
        first_error_field: str | None,
    ) -> None:
        """Called after submit resolves; the place to focus the first invalid field."""

    @hookspec
    def post_reset(self, form_name: str) -> None:
        """Called after the form is reset to its initial data."""

    @hookspec
    def register_rules(self) -> dict[str, RuleFactory] | None:
        """Return name -> rule constructor mappings to extend RULE_REGISTRY."""

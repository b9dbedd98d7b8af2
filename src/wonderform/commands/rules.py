"""Command: list registered rule names."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from wonderform.commands._base import WonderformCommand

if TYPE_CHECKING:
    from wonderform.commands._context import AppContext


@click.command(
    cls=WonderformCommand,
    examples="""\
  wonderform rules
  wonderform --json rules""",
)
@click.pass_obj
def rules(app: AppContext) -> None:
    """List rule names usable in form schemas."""
    from wonderform.services.validate import ValidateService

    app.emit(ValidateService(app.settings, app.plugins).list_rules())

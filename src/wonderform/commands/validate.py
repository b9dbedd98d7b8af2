"""Command: validate a JSON data file against a form schema."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from wonderform.commands._base import WonderformCommand

if TYPE_CHECKING:
    from wonderform.commands._context import AppContext


@click.command(
    cls=WonderformCommand,
    examples="""\
  wonderform validate signup.toml signup.json
  wonderform validate signup.toml signup.json --field email --field password
  wonderform --json validate signup.toml signup.json""",
)
@click.argument("schema", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("data", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--field",
    "fields",
    multiple=True,
    help="Validate only this field (repeatable).",
)
@click.pass_obj
def validate(app: AppContext, schema: Path, data: Path, fields: tuple[str, ...]) -> None:
    """Validate DATA (JSON object) against SCHEMA (TOML form schema)."""
    from wonderform.services.validate import ValidateService

    svc = ValidateService(app.settings, app.plugins)
    app.emit(svc.validate_files(schema, data, fields=list(fields) or None))

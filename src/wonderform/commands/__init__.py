"""Subcommand modules for wonderform.

Provides register_commands() which uses deferred imports to keep
``wonderform --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from wonderform.commands.rules import rules
    from wonderform.commands.validate import validate

    cli.add_command(validate)
    cli.add_command(rules)

"""Click command class shared by wonderform subcommands.

Each command carries a block of example invocations.  ``--help`` stays
short and points at them; ``--examples`` prints them and exits.
"""

from __future__ import annotations

import inspect
from typing import Any

import click

EXAMPLES_HINT = "Run with --examples to see sample invocations."


class WonderformCommand(click.Command):
    """A command with an eager ``--examples`` flag.

    *examples* is free text, one invocation per line; common indentation
    is stripped before printing.
    """

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = inspect.cleandoc(examples) if examples else None
        if self.examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._show_examples,
                    help="Show usage examples.",
                )
            )

    def example_lines(self) -> list[str]:
        if not self.examples:
            return []
        return [line for line in self.examples.splitlines() if line.strip()]

    def _show_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        for line in self.example_lines():
            click.echo(f"  {line}")
        ctx.exit(0)

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        super().format_epilog(ctx, formatter)
        if self.examples:
            formatter.write_paragraph()
            formatter.write_text(EXAMPLES_HINT)

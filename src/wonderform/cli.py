"""Entry point of the ``wonderform`` command.

The root group resolves settings once (flags, ``WONDERFORM_*`` variables,
discovered config) and hands them to subcommands through
:class:`~wonderform.commands._context.AppContext`.
"""

from __future__ import annotations

import click

from wonderform import __version__
from wonderform.commands import register_commands
from wonderform.commands._context import AppContext
from wonderform.config.discovery import CONFIG_ENV_VAR, CONFIG_FILENAME
from wonderform.config.settings import WonderformSettings

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(
    invoke_without_command=True,
    context_settings=CONTEXT_SETTINGS,
    epilog=f"Config is read from {CONFIG_FILENAME} or .wonderform/config.toml, searched "
    f"upward from the current directory, or from the path in {CONFIG_ENV_VAR}.",
)
@click.version_option(version=__version__, prog_name="wonderform")
@click.option("--json", "json_output", is_flag=True, help="Print the full result as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print a one-line OK/ERROR verdict.")
@click.option("-v", "--verbose", is_flag=True, help="Show violation kinds and debug logs.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help=f"Use this TOML file instead of searching for {CONFIG_FILENAME}.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """Check form data against declarative rule schemas.

    A schema (TOML) lists each field's rules, trigger and debounce; the data
    file (JSON) holds one object of field values.  The exit status is 0 when
    every field passes and 1 otherwise.
    """
    settings = WonderformSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)

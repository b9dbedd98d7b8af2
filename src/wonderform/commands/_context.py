"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy plugin loading and centralized result
emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from wonderform.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from wonderform.config.settings import WonderformSettings
    from wonderform.plugins.manager import PluginManager
    from wonderform.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The plugin manager is created on first use so ``--help`` and
    ``--version`` never import plugin code.
    """

    def __init__(self, settings: WonderformSettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None

        from wonderform.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def plugins(self) -> PluginManager:
        """Loaded plugin manager (entry points plus the local plugin dir)."""
        if self._plugins is None:
            from wonderform.plugins.manager import PluginManager

            self._plugins = PluginManager()
            if self.settings.plugins.enabled:
                self._plugins.discover_and_load(local_dir=self.settings.plugin_dir)
        return self._plugins

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

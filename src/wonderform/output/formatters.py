"""Rich/JSON output for ServiceResult.

The CLI renders ServiceResult for humans (Rich tables and colors) or
machines (--json).  Renderers are dispatched by ``result.op``; unknown ops
fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from wonderform.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from wonderform.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output mode flags taken from the CLI."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return _format_quiet(result)

    console = create_console()
    renderer = _OP_RENDERERS.get(result.op, _render_generic)
    renderer(result, console, verbose=settings.verbose)
    if not result.ok:
        _render_error(result, console)
    return get_output(console).rstrip("\n")


def _format_quiet(result: ServiceResult) -> str:
    if result.ok:
        return f"OK: {result.op}"
    msg = result.error.message if result.error else "Unknown error"
    return f"ERROR: {result.op} — {msg}"


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="wf.ok") if result.ok else Text("ERROR", style="wf.error")
    console.print(label, Text(f"  {result.op}", style="wf.op"))


def _render_error(result: ServiceResult, console: Console) -> None:
    msg = result.error.message if result.error else "Unknown error"
    console.print(Text(f"ERROR: {result.op} — {msg}", style="wf.error"))


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    if not result.ok:
        return
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            value = _json.dumps(value, separators=(",", ":"))
        console.print(Text(f"  {key}: ", style="wf.key"), str(value), sep="")


def _render_validate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    fields: dict[str, dict[str, Any]] = result.data.get("fields", {})
    if not fields:
        return
    if result.ok:
        _status_line(console, result)

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Field", style="wf.field")
    table.add_column("Status")
    table.add_column("Message")
    if verbose:
        table.add_column("Violation", style="wf.flag")

    for name, state in fields.items():
        if state["valid"]:
            status = Text("valid", style="wf.valid")
        else:
            status = Text("invalid", style="wf.invalid")
        row: list[Any] = [name, status, state.get("message") or ""]
        if verbose:
            row.append(state.get("violation") or "")
        table.add_row(*row)
    console.print(table)


def _render_rules(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for item in result.data.get("items", []):
        suffix = "" if item.get("builtin") else "  (plugin)"
        name = Text(f"  {item['name']}", style="wf.field")
        console.print(name, Text(suffix, style="wf.key"), sep="")


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "validate": _render_validate,
    "rules": _render_rules,
}

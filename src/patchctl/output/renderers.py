"""Rich renderers for the stderr side of a run.

Directives are plain text on stdout (see :mod:`patchctl.output.directives`);
everything meant for a human watching the terminal lives here: the error
line, the verbose override summary, and the telemetry span tree.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from patchctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from patchctl.services.result import ServiceResult


def render_error(result: ServiceResult, *, verbose: bool = False) -> str:
    """``ERROR  <op> — <message>``, plus the error detail when verbose."""
    console = create_console()
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="patch.error"),
        Text(f"  {result.op}", style="patch.op"),
        Text(" — "),
        Text(msg),
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))
    return get_output(console).rstrip("\n")


def render_summary(result: ServiceResult) -> str:
    """Verbose-mode table of every override, followed by the span tree."""
    console = create_console()
    groups: list[dict[str, Any]] = result.data.get("groups", [])

    console.print(
        Text("OK", style="patch.ok"),
        Text(f"  {result.op}", style="patch.op"),
        Text(f"  {result.data.get('count', 0)} override(s) in {len(groups)} section(s)"),
    )
    if groups:
        console.print(_override_table(groups))
    _render_meta(console, result)
    return get_output(console).rstrip("\n")


def _override_table(groups: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Origin", style="patch.origin", no_wrap=True)
    table.add_column("Package", style="patch.name")
    table.add_column("Path", style="patch.path")

    for group in groups:
        entries = group.get("entries", [])
        if not entries:
            table.add_row(Text(group["origin"]), Text("(none)", style="dim"), "")
        for entry in entries:
            table.add_row(Text(group["origin"]), Text(entry["name"]), Text(entry["path"]))
    return table


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    telemetry = result.meta.get("telemetry")
    if telemetry:
        console.print(Text("  telemetry:", style="dim"))
        _render_span(console, telemetry, indent=4)


def _render_span(console: Console, span: dict[str, Any], indent: int) -> None:
    """Render a span and its children, slower spans in louder colors."""
    duration = span.get("duration_ms", 0.0)
    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{' ' * indent}[{style}]{duration:>8.2f}ms[/{style}]  {span.get('name', '?')}"
    annotations = span.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span.get("children", []):
        _render_span(console, child, indent + 4)

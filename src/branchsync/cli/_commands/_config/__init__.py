# pyright: reportUnusedCallResult=false, reportUnusedFunction=false
# pyright: reportExplicitAny=false, reportAny=false
# ruff: noqa: D415
"""Config commands for inspecting branchsync configuration."""

from typing import Annotated, Any

from cyclopts import App, Parameter
from rich.markup import escape
from rich.table import Table

from branchsync.cli._commands._context import CLIContext, OutputFormat
from branchsync.cli._commands._shared import format_json
from branchsync.config import Config

__all__ = ["app", "flatten"]

app = App(name="config", help="Inspect configuration", help_on_error=True)


def flatten(data: dict[str, Any], prefix: str = "") -> list[tuple[str, str]]:
    """Flatten nested config into sorted (dotted key, value) pairs."""
    rows: list[tuple[str, str]] = []
    for key, value in sorted(data.items()):
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            rows.extend(flatten(value, path))
        else:
            rows.append((path, repr(value) if isinstance(value, str) else str(value)))
    return rows


def _sources_table(config: Config) -> Table:
    table = Table(title="Configuration sources")
    table.add_column("Source", style="bold")
    table.add_column("Path")
    table.add_column("Exists")
    for source in config.sources:
        table.add_row(
            source.name.value,
            str(source.path) if source.path else "-",
            "yes" if source.exists else "no",
        )
    return table


@app.command(name="show")
def _show(
    *,
    output_format: Annotated[
        OutputFormat,
        Parameter(name=["--format", "-f"], help="Output format (toml, json or table)"),
    ] = OutputFormat.TOML,
    sources: Annotated[
        bool,
        Parameter(name="--sources", help="List configuration sources instead"),
    ] = False,
) -> None:
    """Show the effective configuration"""
    ctx = CLIContext.get_current()
    config = ctx.config

    if ctx.config_error:
        ctx.error_console.print(
            f"[yellow]Warning:[/yellow] {ctx.config_error}", highlight=False
        )

    if sources:
        ctx.console.print(_sources_table(config))
        return

    match output_format:
        case OutputFormat.JSON:
            ctx.console.out(format_json(config.to_dict()), highlight=False)
        case OutputFormat.TABLE:
            table = Table(title="Effective configuration")
            table.add_column("Key", style="bold")
            table.add_column("Value")
            for key, value in flatten(config.to_dict()):
                table.add_row(escape(key), escape(value))
            ctx.console.print(table)
        case OutputFormat.TOML:
            ctx.console.out(config.to_toml(), highlight=False)

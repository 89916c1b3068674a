"""branchsync CLI commands."""
# pyright: reportUnusedCallResult=false

from typing import TYPE_CHECKING

from ._config import app as config_app
from ._context import CLIContext, OutputFormat
from ._orphan import orphan
from ._shared import ExitCode, exit_with_error, format_json, open_repository
from ._sync import ReportFormat, status, sync

if TYPE_CHECKING:
    from cyclopts import App

__all__ = [
    "CLIContext",
    "ExitCode",
    "OutputFormat",
    "ReportFormat",
    "config_app",
    "exit_with_error",
    "format_json",
    "open_repository",
    "orphan",
    "register_commands",
    "status",
    "sync",
]


def register_commands(app: "App") -> None:
    app.command(sync, name="sync")
    app.command(status, name="status")
    app.command(orphan, name="orphan")
    app.command(config_app)

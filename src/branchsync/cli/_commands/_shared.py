# pyright: reportExplicitAny=false
"""Shared CLI utilities for commands.

- Standardized exit codes
- JSON output formatting
- Repository opening with error mapping
"""

from enum import IntEnum
from typing import TYPE_CHECKING, Any, Never

import orjson
from rich.markup import escape

from branchsync.repository import GitRepository

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

FormattableData = dict[str, Any]

__all__ = [
    "ExitCode",
    "FormattableData",
    "exit_with_error",
    "format_json",
    "open_repository",
]


class ExitCode(IntEnum):
    """Exit codes for branchsync CLI commands."""

    SUCCESS = 0
    FAILURE = 1
    NETWORK_ERROR = 2
    NOT_FOUND = 3
    CONFIG_ERROR = 4
    RESTORE_FAILED = 5
    BRANCH_EXISTS = 6


def format_json(data: FormattableData, *, indent: bool = True) -> str:
    """Format data as JSON.

    Args:
        data: Dictionary to format as JSON.
        indent: Whether to pretty-print with indentation.

    Returns:
        JSON-formatted string representation.
    """
    options = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(data, option=options).decode("utf-8")


def open_repository(path: "Path | None") -> GitRepository:
    """Open the repository containing path (or the working directory).

    Raises:
        RepositoryNotFoundError: If no repository is found.
    """
    return GitRepository(path)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.FAILURE,
    *,
    console: "Console",
) -> Never:
    """Print an error message and exit with the specified code.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
    raise SystemExit(code)

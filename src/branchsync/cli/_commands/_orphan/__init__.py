# pyright: reportUnusedCallResult=false
# ruff: noqa: D415, TC003
"""Orphan branch command."""

from pathlib import Path
from typing import Annotated

from cyclopts import Parameter
from rich.markup import escape

from branchsync.cli._commands._context import CLIContext
from branchsync.cli._commands._shared import ExitCode, exit_with_error, open_repository
from branchsync.exceptions import (
    BranchExistsError,
    RepositoryError,
    RepositoryNotFoundError,
)
from branchsync.orphan import DEFAULT_ORPHAN_MESSAGE, create_orphan_branch, load_files

__all__ = ["orphan"]


def orphan(
    name: str,
    *,
    message: Annotated[
        str,
        Parameter(name=["--message", "-m"], help="Commit message of the root commit"),
    ] = DEFAULT_ORPHAN_MESSAGE,
    files: Annotated[
        list[Path] | None,
        Parameter(name=["--file"], help="File to include (repeatable)"),
    ] = None,
) -> None:
    """Create a branch with no history

    The branch points at a new root commit containing only the given files.
    HEAD and the working tree are not changed.

    Args:
        name: Name of the branch to create.
    """
    ctx = CLIContext.get_current()
    err = ctx.error_console

    try:
        with open_repository(ctx.repo_path) as repo:
            contents = load_files(files or [], root=repo.root)
            sha = create_orphan_branch(
                repo, name, message=message, files=contents, logger=ctx.logger
            )
    except RepositoryNotFoundError as e:
        exit_with_error(str(e), ExitCode.NOT_FOUND, console=err)
    except BranchExistsError as e:
        exit_with_error(str(e), ExitCode.BRANCH_EXISTS, console=err)
    except RepositoryError as e:
        exit_with_error(str(e), ExitCode.FAILURE, console=err)
    except OSError as e:
        exit_with_error(f"Cannot read file: {e}", ExitCode.FAILURE, console=err)

    if ctx.quiet:
        ctx.console.out(sha, highlight=False)
        return
    ctx.console.print(
        f"[green]Created orphan branch[/green] [bold]{escape(name)}[/bold]"
    )
    ctx.console.print(f"[dim]SHA: {sha}[/dim]")

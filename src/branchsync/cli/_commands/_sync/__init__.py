# pyright: reportUnusedCallResult=false
# ruff: noqa: D415, FBT002
"""Sync and status commands."""

import dataclasses
from enum import StrEnum
from typing import Annotated

from cyclopts import Parameter

from branchsync.cli._commands._context import CLIContext
from branchsync.cli._commands._shared import (
    ExitCode,
    exit_with_error,
    format_json,
    open_repository,
)
from branchsync.exceptions import (
    ActiveBranchRestoreError,
    NetworkFailureError,
    RemoteNotConfiguredError,
    RepositoryNotFoundError,
)
from branchsync.reconcile import ReconcileOptions, ReconcileReport, reconcile

from ._render import build_table, render_report, summarize

__all__ = ["ReportFormat", "build_table", "status", "summarize", "sync"]


class ReportFormat(StrEnum):
    """Output formats for branch reports."""

    TABLE = "table"
    JSON = "json"


def _run(options: ReconcileOptions, output_format: ReportFormat) -> ReconcileReport:
    ctx = CLIContext.get_current()
    err = ctx.error_console
    if ctx.config_error and not ctx.quiet:
        err.print("[yellow]Warning:[/yellow] using default configuration")

    try:
        with open_repository(ctx.repo_path) as repo:
            report = reconcile(repo, options, logger=ctx.logger)
    except RepositoryNotFoundError as e:
        exit_with_error(str(e), ExitCode.NOT_FOUND, console=err)
    except RemoteNotConfiguredError as e:
        exit_with_error(str(e), ExitCode.NOT_FOUND, console=err)
    except NetworkFailureError as e:
        hint = " (timed out)" if e.timed_out else ""
        exit_with_error(
            f"{e}{hint}; no branches were changed", ExitCode.NETWORK_ERROR, console=err
        )
    except ActiveBranchRestoreError as e:
        exit_with_error(
            f"{e}. Run 'git checkout {e.branch}' to recover.",
            ExitCode.RESTORE_FAILED,
            console=err,
        )

    if output_format is ReportFormat.JSON:
        ctx.console.out(format_json(report.to_dict()), highlight=False)
    else:
        render_report(report, ctx.console, quiet=ctx.quiet, full_shas=ctx.verbose)
    return report


def sync(
    *,
    remote: Annotated[
        str | None,
        Parameter(name=["--remote", "-r"], help="Remote to reconcile against"),
    ] = None,
    fetch: Annotated[
        bool,
        Parameter(name="--fetch", negative="--no-fetch", help="Fetch before comparing"),
    ] = True,
    dry_run: Annotated[
        bool,
        Parameter(name=["--dry-run", "-n"], help="Show what would change"),
    ] = False,
    output_format: Annotated[
        ReportFormat,
        Parameter(name=["--format", "-f"], help="Output format (table or json)"),
    ] = ReportFormat.TABLE,
) -> None:
    """Reconcile local branches with the remote

    Deletes local branches whose remote branch is gone, fast-forwards
    branches that are behind, and creates branches that only exist on the
    remote. Diverged and locally-ahead branches are reported, never changed.
    """
    ctx = CLIContext.get_current()
    options = ctx.config.to_reconcile_options(dry_run=dry_run)
    options = dataclasses.replace(
        options,
        remote=remote or options.remote,
        fetch=options.fetch and fetch,
    )
    report = _run(options, output_format)
    if report.failures:
        raise SystemExit(ExitCode.FAILURE)


def status(
    *,
    remote: Annotated[
        str | None,
        Parameter(name=["--remote", "-r"], help="Remote to compare against"),
    ] = None,
    fetch: Annotated[
        bool,
        Parameter(name="--fetch", help="Fetch before comparing"),
    ] = False,
    output_format: Annotated[
        ReportFormat,
        Parameter(name=["--format", "-f"], help="Output format (table or json)"),
    ] = ReportFormat.TABLE,
) -> None:
    """Show how local branches compare with the remote

    Nothing is changed. Tracking refs are only refreshed with --fetch.
    """
    ctx = CLIContext.get_current()
    options = dataclasses.replace(
        ctx.config.to_reconcile_options(dry_run=True),
        remote=remote or ctx.config.sync.remote,
        fetch=fetch,
    )
    _ = _run(options, output_format)

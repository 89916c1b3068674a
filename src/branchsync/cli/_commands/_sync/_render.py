"""Report rendering for the sync and status commands."""

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table

from branchsync.reconcile import ActionStatus, BranchOutcome, BranchState, ReconcileReport

if TYPE_CHECKING:
    from rich.console import Console

_STATE_STYLES: dict[BranchState, str] = {
    BranchState.SYNCED: "dim",
    BranchState.FAST_FORWARDABLE: "cyan",
    BranchState.LOCAL_AHEAD: "blue",
    BranchState.DIVERGED: "bold red",
    BranchState.MISSING_LOCAL: "green",
    BranchState.ORPHANED_LOCAL: "yellow",
    BranchState.UNKNOWN: "red",
}

_STATUS_STYLES: dict[ActionStatus, str] = {
    ActionStatus.APPLIED: "green",
    ActionStatus.PLANNED: "cyan",
    ActionStatus.SKIPPED: "yellow",
    ActionStatus.FAILED: "bold red",
    ActionStatus.NOT_REQUIRED: "dim",
}


def _short(sha: str | None, *, full: bool) -> str:
    if sha is None:
        return "-"
    return sha if full else sha[:8]


def _counts(outcome: BranchOutcome) -> str:
    if outcome.divergence is None:
        return "-"
    return f"+{outcome.divergence.ahead}/-{outcome.divergence.behind}"


def build_table(report: ReconcileReport, *, full_shas: bool = False) -> Table:
    """Build a rich table with one row per branch outcome."""
    title = f"Branches vs {report.remote}"
    if report.dry_run:
        title += " (dry run)"
    table = Table(title=title, show_lines=False)
    table.add_column("Branch", style="bold")
    table.add_column("State")
    table.add_column("Action")
    table.add_column("Status")
    table.add_column("Local")
    table.add_column("Remote")
    table.add_column("Ahead/Behind", justify="right")
    table.add_column("Note", overflow="fold")

    for outcome in report.outcomes:
        table.add_row(
            escape(outcome.name),
            f"[{_STATE_STYLES[outcome.state]}]{outcome.state.value}[/]",
            outcome.action.value,
            f"[{_STATUS_STYLES[outcome.status]}]{outcome.status.value}[/]",
            _short(outcome.local_sha, full=full_shas),
            _short(outcome.remote_sha, full=full_shas),
            _counts(outcome),
            escape(outcome.reason or ""),
        )
    return table


def summarize(report: ReconcileReport) -> str:
    """One-line summary of a report."""
    parts = [f"{len(report.outcomes)} branch(es)"]
    if report.dry_run:
        parts.append(f"{len(report.planned)} planned")
    else:
        parts.append(f"{len(report.mutations)} updated")
    if report.skipped:
        parts.append(f"{len(report.skipped)} skipped")
    if report.failures:
        parts.append(f"{len(report.failures)} failed")
    diverged = report.by_state(BranchState.DIVERGED)
    if diverged:
        parts.append(f"{len(diverged)} diverged")
    return ", ".join(parts)


def render_report(
    report: ReconcileReport,
    console: "Console",
    *,
    quiet: bool = False,
    full_shas: bool = False,
) -> None:
    """Print a report as a table followed by a summary line."""
    if report.fetch is not None and not quiet and report.fetch.pruned:
        console.print(
            f"[dim]Pruned {len(report.fetch.pruned)} tracking ref(s) "
            f"from {report.remote}[/dim]"
        )
    if report.outcomes:
        console.print(build_table(report, full_shas=full_shas))
    elif not quiet:
        console.print("[dim]No branches to reconcile[/dim]")
    if not quiet:
        style = "red" if report.failures else "green"
        console.print(f"[{style}]{summarize(report)}[/{style}]")

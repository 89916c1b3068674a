"""Branch reconciliation.

This module compares local branches with the remote-tracking branches of one
remote and brings them in line: stale local branches are deleted, branches
that are strictly behind are fast-forwarded, branches that only exist on the
remote are created, and everything else is reported.

Only two kinds of local mutation ever happen: ref deletion and fast-forward
ref moves (plus creation of missing branches). Nothing is pushed, merged,
rebased or rewritten, so divergence is never resolved silently.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from branchsync.exceptions import (
    RemoteNotConfiguredError,
    RepositoryError,
)
from branchsync.reconcile._guard import ActiveBranchGuard
from branchsync.reconcile._models import (
    ActionStatus,
    ActiveBranchPolicy,
    BranchAction,
    BranchOutcome,
    BranchState,
    ReconcileOptions,
    ReconcileReport,
)
from branchsync.repository import BranchRef, Divergence
from branchsync.utils import create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from branchsync.repository import FetchResult, HeadState, RepositoryProtocol


def classify(divergence: Divergence) -> BranchState:
    """Map ahead/behind counts to a branch state.

    Args:
        divergence: Ahead/behind counts of a local/remote pair.

    Returns:
        SYNCED, FAST_FORWARDABLE, LOCAL_AHEAD or DIVERGED.
    """
    if divergence.is_synced:
        return BranchState.SYNCED
    if divergence.is_fast_forwardable:
        return BranchState.FAST_FORWARDABLE
    if divergence.is_local_ahead:
        return BranchState.LOCAL_AHEAD
    return BranchState.DIVERGED


class Reconciler:
    """Reconcile local branches with one remote's tracking refs.

    The repository handle is injected; the reconciler never consults the
    process working directory. A pass is single-threaded and assumes no
    other process mutates refs while it runs. If one does, the
    compare-and-swap ref updates fail and the affected branch is reported as
    failed rather than overwritten.

    Example:
        >>> with GitRepository(Path("/srv/deployments")) as repo:
        ...     report = Reconciler(repo, ReconcileOptions(remote="origin")).run()
        ...     for outcome in report.outcomes:
        ...         print(outcome.name, outcome.state, outcome.status)
    """

    __slots__ = ("_logger", "_options", "_repo")

    def __init__(
        self,
        repo: RepositoryProtocol,
        options: ReconcileOptions | None = None,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the reconciler.

        Args:
            repo: Repository to reconcile.
            options: Pass options. Defaults to ReconcileOptions().
            logger: Structured logger. Defaults to a logger that discards events.
        """
        self._repo: RepositoryProtocol = repo
        self._options: ReconcileOptions = options or ReconcileOptions()
        self._logger: FilteringBoundLogger = logger or create_null_logger()

    @property
    def options(self) -> ReconcileOptions:
        return self._options

    def run(self) -> ReconcileReport:
        """Run one reconciliation pass.

        Returns:
            ReconcileReport with one outcome per branch in the union of local
            and remote branch names.

        Raises:
            RemoteNotConfiguredError: If the remote is not configured.
            NetworkFailureError: If the fetch fails; no ref has been mutated.
            ActiveBranchRestoreError: If HEAD could not be restored.
        """
        options = self._options
        log = self._logger.bind(remote=options.remote, dry_run=options.dry_run)
        log.info("reconcile_started", fetch=options.fetch)
        if not self._repo.has_remote(options.remote):
            msg = f"Remote '{options.remote}' is not configured"
            log.error("remote_not_configured")
            raise RemoteNotConfiguredError(msg, remote=options.remote)

        with ActiveBranchGuard(self._repo, logger=log) as guard:
            fetch_result = self._refresh(log)
            local = self._repo.local_branches()
            remote = self._repo.remote_branches(options.remote)

            outcomes: list[BranchOutcome] = []
            for name in sorted(set(local) - set(remote)):
                ref = BranchRef(name=name, sha=local[name])
                outcomes.append(self._reconcile_orphaned(ref, guard.head, log))

            for name in sorted(remote):
                remote_ref = BranchRef(name=name, sha=remote[name])
                local_sha = local.get(name)
                if local_sha is None:
                    outcomes.append(self._reconcile_missing(remote_ref, log))
                else:
                    local_ref = BranchRef(name=name, sha=local_sha)
                    outcomes.append(
                        self._reconcile_pair(local_ref, remote_ref, guard.head, log)
                    )

        report = ReconcileReport(
            remote=options.remote,
            head=guard.head,
            fetch=fetch_result,
            outcomes=tuple(outcomes),
            dry_run=options.dry_run,
        )
        log.info(
            "reconcile_completed",
            branches=len(report.outcomes),
            mutations=len(report.mutations),
            failures=len(report.failures),
            skipped=len(report.skipped),
        )
        return report

    # =========================================================================
    # Steps
    # =========================================================================

    def _refresh(self, log: FilteringBoundLogger) -> FetchResult | None:
        options = self._options
        if not options.fetch:
            log.debug("fetch_skipped")
            return None
        try:
            result = self._repo.fetch(
                options.remote, prune=options.prune, timeout=options.fetch_timeout
            )
        except RepositoryError as e:
            log.error("fetch_failed", error=str(e), error_type=type(e).__name__)
            raise
        log.info(
            "fetch_completed",
            updated=sorted(result.updated),
            pruned=sorted(result.pruned),
        )
        return result

    def _reconcile_orphaned(
        self, local: BranchRef, head: HeadState, log: FilteringBoundLogger
    ) -> BranchOutcome:
        log = log.bind(branch=local.name)
        state = BranchState.ORPHANED_LOCAL
        action = BranchAction.DELETE

        if local.name == head.branch:
            log.warning("delete_skipped", reason="active branch")
            return self._outcome(
                local.name, state, action, ActionStatus.SKIPPED, local=local,
                reason="branch is checked out; switch branches to delete it",
            )
        if local.name in self._options.protected_branches:
            log.info("delete_skipped", reason="protected branch")
            return self._outcome(
                local.name, state, action, ActionStatus.SKIPPED, local=local,
                reason="branch is protected",
            )
        if self._options.dry_run:
            log.info("delete_planned")
            return self._outcome(
                local.name, state, action, ActionStatus.PLANNED, local=local
            )

        try:
            self._repo.delete_branch(local.name, expected_sha=local.sha)
        except RepositoryError as e:
            log.warning("delete_failed", error=str(e))
            return self._outcome(
                local.name, state, action, ActionStatus.FAILED, local=local,
                reason=str(e),
            )
        log.info("branch_deleted", sha=local.sha)
        return self._outcome(
            local.name, state, action, ActionStatus.APPLIED, local=local
        )

    def _reconcile_missing(
        self, remote: BranchRef, log: FilteringBoundLogger
    ) -> BranchOutcome:
        log = log.bind(branch=remote.name)
        state = BranchState.MISSING_LOCAL
        action = BranchAction.CREATE

        if self._options.dry_run:
            log.info("create_planned", sha=remote.sha)
            return self._outcome(
                remote.name, state, action, ActionStatus.PLANNED, remote=remote
            )

        try:
            self._repo.create_branch(
                remote.name, remote.sha, upstream=self._options.remote
            )
        except RepositoryError as e:
            log.warning("create_failed", error=str(e))
            return self._outcome(
                remote.name, state, action, ActionStatus.FAILED, remote=remote,
                reason=str(e),
            )
        log.info("branch_created", sha=remote.sha)
        return self._outcome(
            remote.name, state, action, ActionStatus.APPLIED, remote=remote
        )

    def _reconcile_pair(
        self,
        local: BranchRef,
        remote: BranchRef,
        head: HeadState,
        log: FilteringBoundLogger,
    ) -> BranchOutcome:
        log = log.bind(branch=local.name)
        try:
            divergence = self._repo.divergence(local.sha, remote.sha)
        except RepositoryError as e:
            log.warning("divergence_failed", error=str(e))
            return self._outcome(
                local.name, BranchState.UNKNOWN, BranchAction.NONE,
                ActionStatus.FAILED, local=local, remote=remote, reason=str(e),
            )

        state = classify(divergence)
        log.debug(
            "branch_classified",
            state=state.value,
            ahead=divergence.ahead,
            behind=divergence.behind,
        )

        if state is not BranchState.FAST_FORWARDABLE:
            if state is BranchState.DIVERGED:
                log.warning(
                    "branch_diverged",
                    ahead=divergence.ahead,
                    behind=divergence.behind,
                )
            return self._outcome(
                local.name, state, BranchAction.NONE, ActionStatus.NOT_REQUIRED,
                local=local, remote=remote, divergence=divergence,
                reason=(
                    "diverged from remote; resolve manually"
                    if state is BranchState.DIVERGED
                    else None
                ),
            )

        return self._fast_forward(local, remote, divergence, head, log)

    def _fast_forward(
        self,
        local: BranchRef,
        remote: BranchRef,
        divergence: Divergence,
        head: HeadState,
        log: FilteringBoundLogger,
    ) -> BranchOutcome:
        state = BranchState.FAST_FORWARDABLE
        action = BranchAction.FAST_FORWARD
        is_active = local.name == head.branch

        skip_reason: str | None = None
        if is_active and self._options.active_branch is ActiveBranchPolicy.SKIP:
            skip_reason = "branch is checked out; active branch fast-forward disabled"
        elif is_active and not self._repo.is_worktree_clean():
            skip_reason = "branch is checked out and has uncommitted changes"

        if skip_reason is not None:
            log.warning("fast_forward_skipped", reason=skip_reason)
            return self._outcome(
                local.name, state, action, ActionStatus.SKIPPED, local=local,
                remote=remote, divergence=divergence, reason=skip_reason,
            )
        if self._options.dry_run:
            log.info("fast_forward_planned", behind=divergence.behind)
            return self._outcome(
                local.name, state, action, ActionStatus.PLANNED, local=local,
                remote=remote, divergence=divergence,
            )

        try:
            if is_active:
                self._repo.move_active_branch(
                    expected_sha=local.sha, target_sha=remote.sha
                )
            else:
                self._repo.move_branch(
                    local.name, expected_sha=local.sha, target_sha=remote.sha
                )
        except RepositoryError as e:
            log.warning("fast_forward_failed", error=str(e))
            return self._outcome(
                local.name, state, action, ActionStatus.FAILED, local=local,
                remote=remote, divergence=divergence, reason=str(e),
            )
        log.info(
            "branch_fast_forwarded",
            old_sha=local.sha,
            new_sha=remote.sha,
            active=is_active,
        )
        return self._outcome(
            local.name, state, action, ActionStatus.APPLIED, local=local,
            remote=remote, divergence=divergence,
        )

    @staticmethod
    def _outcome(  # noqa: PLR0913
        name: str,
        state: BranchState,
        action: BranchAction,
        status: ActionStatus,
        *,
        local: BranchRef | None = None,
        remote: BranchRef | None = None,
        divergence: Divergence | None = None,
        reason: str | None = None,
    ) -> BranchOutcome:
        return BranchOutcome(
            name=name,
            state=state,
            action=action,
            status=status,
            local_sha=local.sha if local is not None else None,
            remote_sha=remote.sha if remote is not None else None,
            divergence=divergence,
            reason=reason,
        )


def reconcile(
    repo: RepositoryProtocol,
    options: ReconcileOptions | None = None,
    *,
    logger: FilteringBoundLogger | None = None,
) -> ReconcileReport:
    """Run a single reconciliation pass.

    Convenience wrapper around ``Reconciler(repo, options, logger=logger).run()``.
    """
    return Reconciler(repo, options, logger=logger).run()

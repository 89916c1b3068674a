# ruff: noqa: TC001  # models needed at runtime for dataclass fields
"""Reconciliation models.

This module defines the classification, action and outcome types produced
by a reconciliation pass.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from branchsync.repository import Divergence, FetchResult, HeadState


class BranchState(StrEnum):
    """Classification of a branch relative to its remote-tracking ref."""

    SYNCED = "synced"
    FAST_FORWARDABLE = "fast-forwardable"
    LOCAL_AHEAD = "local-ahead"
    DIVERGED = "diverged"
    MISSING_LOCAL = "missing-local"
    ORPHANED_LOCAL = "orphaned-local"
    UNKNOWN = "unknown"


class BranchAction(StrEnum):
    """Action the reconciler takes for a classified branch."""

    NONE = "none"
    CREATE = "create"
    FAST_FORWARD = "fast-forward"
    DELETE = "delete"


class ActionStatus(StrEnum):
    """What happened to a branch's action."""

    APPLIED = "applied"
    PLANNED = "planned"
    SKIPPED = "skipped"
    FAILED = "failed"
    NOT_REQUIRED = "not-required"


class ActiveBranchPolicy(StrEnum):
    """How to treat the checked-out branch when it can be fast-forwarded.

    FAST_FORWARD moves the branch and updates the working tree when the tree
    is clean. SKIP never moves the checked-out branch.
    """

    FAST_FORWARD = "fast-forward"
    SKIP = "skip"


@dataclass(frozen=True, slots=True)
class ReconcileOptions:
    """Options for a reconciliation pass.

    Attributes:
        remote: Remote whose tracking refs are compared with local branches.
        fetch: Refresh tracking refs before comparing.
        prune: Remove tracking refs for branches deleted upstream when fetching.
        fetch_timeout: Seconds before the fetch is abandoned, None for no limit.
        dry_run: Classify and plan without mutating any ref.
        active_branch: Policy for fast-forwarding the checked-out branch.
        protected_branches: Local branches that are never deleted.
    """

    remote: str = "origin"
    fetch: bool = True
    prune: bool = True
    fetch_timeout: float | None = 60.0
    dry_run: bool = False
    active_branch: ActiveBranchPolicy = ActiveBranchPolicy.FAST_FORWARD
    protected_branches: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class BranchOutcome:
    """Classification and action result for one branch.

    Attributes:
        name: Branch name.
        state: Classification of the branch.
        action: Action chosen for the classification.
        status: Whether the action was applied, planned, skipped or failed.
        local_sha: Local commit before the pass, None if there was no local branch.
        remote_sha: Remote-tracking commit, None if there is no remote branch.
        divergence: Ahead/behind counts when both sides exist.
        reason: Why the action was skipped or failed.
    """

    name: str
    state: BranchState
    action: BranchAction
    status: ActionStatus
    local_sha: str | None = None
    remote_sha: str | None = None
    divergence: Divergence | None = None
    reason: str | None = None

    @property
    def mutated(self) -> bool:
        return self.status is ActionStatus.APPLIED

    @property
    def needs_attention(self) -> bool:
        """True for branches a human has to look at."""
        return self.state is BranchState.DIVERGED or self.status in (
            ActionStatus.FAILED,
            ActionStatus.SKIPPED,
        )

    def to_dict(self) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
        return {
            "name": self.name,
            "state": self.state.value,
            "action": self.action.value,
            "status": self.status.value,
            "local_sha": self.local_sha,
            "remote_sha": self.remote_sha,
            "ahead": self.divergence.ahead if self.divergence else None,
            "behind": self.divergence.behind if self.divergence else None,
            "reason": self.reason,
        }


@dataclass(frozen=True, slots=True)
class ReconcileReport:
    """Result of a reconciliation pass.

    Attributes:
        remote: Remote the pass compared against.
        head: HEAD as it was before the pass (and is again after it).
        fetch: Result of the fetch, or None when fetching was disabled.
        outcomes: One outcome per branch, orphaned-local branches first.
        dry_run: True if no ref was mutated by design.
    """

    remote: str
    head: HeadState
    fetch: FetchResult | None
    outcomes: tuple[BranchOutcome, ...]
    dry_run: bool = False

    @property
    def mutations(self) -> tuple[BranchOutcome, ...]:
        return tuple(o for o in self.outcomes if o.mutated)

    @property
    def planned(self) -> tuple[BranchOutcome, ...]:
        return tuple(o for o in self.outcomes if o.status is ActionStatus.PLANNED)

    @property
    def failures(self) -> tuple[BranchOutcome, ...]:
        return tuple(o for o in self.outcomes if o.status is ActionStatus.FAILED)

    @property
    def skipped(self) -> tuple[BranchOutcome, ...]:
        return tuple(o for o in self.outcomes if o.status is ActionStatus.SKIPPED)

    @property
    def ok(self) -> bool:
        return not self.failures

    def by_state(self, state: BranchState) -> tuple[BranchOutcome, ...]:
        return tuple(o for o in self.outcomes if o.state is state)

    def get(self, name: str) -> BranchOutcome | None:
        """Return the outcome for a branch name, if the pass saw it."""
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome
        return None

    def to_dict(self) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
        fetch: dict[str, Any] | None = None  # pyright: ignore[reportExplicitAny]
        if self.fetch is not None:
            fetch = {
                "updated": sorted(self.fetch.updated),
                "pruned": sorted(self.fetch.pruned),
            }
        return {
            "remote": self.remote,
            "head": self.head.describe(),
            "dry_run": self.dry_run,
            "fetch": fetch,
            "branches": [o.to_dict() for o in self.outcomes],
        }

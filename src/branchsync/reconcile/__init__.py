"""Branch reconciliation against a remote.

Classes:
    Reconciler: Runs one reconciliation pass over an injected repository.
    ActiveBranchGuard: Snapshots HEAD and restores it on exit.

Models:
    ReconcileOptions: Options for a pass.
    ReconcileReport: Outcomes of a pass.
    BranchOutcome: Classification and action result for one branch.

Example:
    >>> from branchsync.reconcile import ReconcileOptions, reconcile
    >>> with GitRepository() as repo:
    ...     report = reconcile(repo, ReconcileOptions(dry_run=True))
"""

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
from branchsync.reconcile._reconciler import Reconciler, classify, reconcile

__all__ = [
    "ActionStatus",
    "ActiveBranchGuard",
    "ActiveBranchPolicy",
    "BranchAction",
    "BranchOutcome",
    "BranchState",
    "ReconcileOptions",
    "ReconcileReport",
    "Reconciler",
    "classify",
    "reconcile",
]

"""Keep local Git branches in line with a remote."""

from branchsync.reconcile import ReconcileOptions, ReconcileReport, Reconciler, reconcile
from branchsync.repository import GitRepository

__all__ = [
    "GitRepository",
    "ReconcileOptions",
    "ReconcileReport",
    "Reconciler",
    "reconcile",
]

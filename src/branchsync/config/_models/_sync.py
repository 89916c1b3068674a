"""Sync configuration model."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from branchsync.reconcile import ActiveBranchPolicy


class SyncConfig(BaseModel):
    """Sync configuration section.

    Attributes:
        remote: Remote to reconcile against.
        fetch: Fetch before comparing branches.
        prune: Prune tracking refs deleted upstream when fetching.
        fetch_timeout: Seconds before a fetch is abandoned.
        active_branch: Policy for fast-forwarding the checked-out branch.
        protected_branches: Local branches that are never deleted.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    remote: str = Field(default="origin", min_length=1)
    fetch: bool = True
    prune: bool = True
    fetch_timeout: float = Field(default=60.0, gt=0)
    active_branch: ActiveBranchPolicy = ActiveBranchPolicy.FAST_FORWARD
    protected_branches: tuple[str, ...] = ()

"""Repository models.

This module defines data structures for representing branch and ref state.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class BranchRef:
    """A branch name paired with the commit it points to.

    Attributes:
        name: Short branch name, without ``refs/heads/`` or the remote prefix.
        sha: 40-character hex commit SHA.
    """

    name: str
    sha: str


@dataclass(frozen=True, slots=True)
class Divergence:
    """Commit counts between a local branch and its remote-tracking ref.

    Attributes:
        ahead: Commits reachable from the local ref but not the remote ref.
        behind: Commits reachable from the remote ref but not the local ref.
    """

    ahead: int
    behind: int

    @property
    def is_synced(self) -> bool:
        return self.ahead == 0 and self.behind == 0

    @property
    def is_fast_forwardable(self) -> bool:
        return self.ahead == 0 and self.behind > 0

    @property
    def is_local_ahead(self) -> bool:
        return self.ahead > 0 and self.behind == 0

    @property
    def is_diverged(self) -> bool:
        return self.ahead > 0 and self.behind > 0


@dataclass(frozen=True, slots=True)
class HeadState:
    """Snapshot of what HEAD points at.

    Attributes:
        branch: Branch name when HEAD is symbolic, None when detached.
        sha: Commit SHA HEAD resolves to, None on an unborn branch.
    """

    branch: str | None
    sha: str | None

    @property
    def is_detached(self) -> bool:
        return self.branch is None

    def describe(self) -> str:
        """Return a short human-readable description of HEAD."""
        if self.branch is not None:
            return self.branch
        if self.sha is not None:
            return f"detached at {self.sha[:8]}"
        return "unborn HEAD"


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Result of a fetch with prune.

    Attributes:
        remote: Remote name that was fetched.
        updated: Branches whose tracking refs were created or moved.
        pruned: Branches whose tracking refs were removed.
    """

    remote: str
    updated: frozenset[str] = field(default_factory=frozenset)
    pruned: frozenset[str] = field(default_factory=frozenset)

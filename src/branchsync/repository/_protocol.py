# ruff: noqa: TC003  # Path needed at runtime for Protocol method bodies
"""Repository protocol for type-safe dependency injection.

This module defines a runtime-checkable Protocol that both GitRepository
and FakeRepository satisfy, so the reconciler never depends on the process
working directory or on a concrete Git backend.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from branchsync.repository._models import Divergence, FetchResult, HeadState


@runtime_checkable
class RepositoryProtocol(Protocol):
    """Protocol for the ref operations used by branch reconciliation.

    Every read takes and returns plain branch names (no ``refs/heads/``
    prefix) and hex SHAs. Every write is a compare-and-swap on the expected
    old value, so a concurrent writer is detected rather than overwritten.

    Example:
        >>> def list_stale(repo: RepositoryProtocol, remote: str) -> set[str]:
        ...     return set(repo.local_branches()) - set(repo.remote_branches(remote))
        >>> with GitRepository(Path("/srv/deployments")) as repo:
        ...     list_stale(repo, "origin")
    """

    @property
    def root(self) -> Path:
        """Working tree root of the repository."""
        ...

    def close(self) -> None:
        """Release file handles held by the repository."""
        ...

    def has_remote(self, remote: str) -> bool:
        """Check whether a remote is configured.

        Args:
            remote: Remote name, e.g. ``origin``.

        Returns:
            True if the repository config has a URL for the remote.
        """
        ...

    def fetch(
        self, remote: str, *, prune: bool = True, timeout: float | None = None
    ) -> FetchResult:
        """Refresh remote-tracking refs for a remote.

        Args:
            remote: Remote name to fetch from.
            prune: Remove tracking refs for branches deleted upstream.
            timeout: Seconds to wait before giving up, or None to wait forever.

        Returns:
            FetchResult describing updated and pruned tracking refs.

        Raises:
            RemoteNotConfiguredError: If the remote is not configured.
            NetworkFailureError: If the remote cannot be reached in time.
        """
        ...

    def local_branches(self) -> Mapping[str, str]:
        """Map every local branch name to its commit SHA."""
        ...

    def remote_branches(self, remote: str) -> Mapping[str, str]:
        """Map every remote-tracking branch name of a remote to its commit SHA.

        The symbolic ``HEAD`` tracking entry is not included.
        """
        ...

    def read_head(self) -> HeadState:
        """Snapshot what HEAD currently points at."""
        ...

    def restore_head(self, state: HeadState) -> None:
        """Point HEAD back at a snapshot taken by read_head().

        Raises:
            ActiveBranchRestoreError: If HEAD cannot be restored.
        """
        ...

    def divergence(self, local_sha: str, remote_sha: str) -> Divergence:
        """Count commits unique to each side of a local/remote pair.

        Raises:
            RepositoryError: If either commit is missing from the object store.
        """
        ...

    def is_worktree_clean(self) -> bool:
        """Check that there are no staged or unstaged changes to tracked files."""
        ...

    def create_branch(
        self, name: str, sha: str, *, upstream: str | None = None
    ) -> None:
        """Create a local branch without checking it out.

        Args:
            name: Branch name.
            sha: Commit SHA the branch should point at.
            upstream: Remote to record as the branch's upstream, if any.

        Raises:
            BranchExistsError: If the branch already exists.
        """
        ...

    def delete_branch(self, name: str, *, expected_sha: str) -> None:
        """Delete a local branch if it still points at expected_sha.

        Raises:
            RefLockConflictError: If the ref is locked or has moved.
        """
        ...

    def move_branch(self, name: str, *, expected_sha: str, target_sha: str) -> None:
        """Move a local branch ref from expected_sha to target_sha.

        Only the ref is updated; the working tree is never touched.

        Raises:
            RefLockConflictError: If the ref is locked or has moved.
        """
        ...

    def move_active_branch(self, *, expected_sha: str, target_sha: str) -> None:
        """Move the checked-out branch and update the index and working tree.

        Callers must check is_worktree_clean() first.

        Raises:
            RefLockConflictError: If the ref is locked or has moved.
        """
        ...

    def create_orphan_branch(
        self,
        name: str,
        *,
        message: str,
        files: Mapping[str, bytes] | None = None,
    ) -> str:
        """Create a branch pointing at a new parentless commit.

        The working tree and HEAD are not touched.

        Args:
            name: Branch name.
            message: Commit message of the root commit.
            files: Repository-relative paths mapped to file contents.

        Returns:
            The SHA of the root commit.

        Raises:
            BranchExistsError: If the branch already exists.
        """
        ...

# ruff: noqa: TC003  # Path needed at runtime for dataclass fields
"""Fake repository for testing.

This module provides a FakeRepository class that implements RepositoryProtocol
with an in-memory commit graph, for use in tests without an actual Git
repository.
"""

# Mapping needed at runtime for method signatures
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import Self

from branchsync.exceptions import (
    ActiveBranchConflictError,
    BranchExistsError,
    RefLockConflictError,
    RemoteNotConfiguredError,
    RepositoryError,
)
from branchsync.repository._models import Divergence, FetchResult, HeadState


@dataclass(slots=True)
class FakeRepository:
    """Fake Git repository for testing.

    Implements RepositoryProtocol without requiring an actual Git repository.
    The fake keeps a commit graph (SHA to parent SHAs), the local branch
    namespace, the remote-tracking namespace per remote, and the branches
    that a fetch would see on each remote ("server" state).

    Failure injection:
    - fetch_error: raised by fetch() instead of updating tracking refs
    - locked_refs: branch names whose refs behave as if their lock is held
    - restore_error: raised by restore_head()

    Every successful mutation is appended to ``operations`` so tests can
    assert on exactly what changed.

    Example:
        >>> repo = FakeRepository()
        >>> base = repo.add_commit()
        >>> repo.local["main"] = base
        >>> repo.server["origin"] = {"main": repo.add_commit(base)}
        >>> repo.fetch("origin").updated
        frozenset({'main'})
    """

    root: Path = field(default_factory=lambda: Path("/fake/repo"))
    commits: dict[str, tuple[str, ...]] = field(default_factory=dict)
    local: dict[str, str] = field(default_factory=dict)
    tracking: dict[str, dict[str, str]] = field(default_factory=dict)
    server: dict[str, dict[str, str]] = field(default_factory=dict)
    upstreams: dict[str, str] = field(default_factory=dict)
    head_branch: str | None = "main"
    detached_sha: str | None = None
    worktree_sha: str | None = None
    dirty: bool = False
    fetch_error: Exception | None = None
    restore_error: Exception | None = None
    locked_refs: set[str] = field(default_factory=set)
    trees: dict[str, dict[str, bytes]] = field(default_factory=dict)
    messages: dict[str, str] = field(default_factory=dict)
    operations: list[tuple[str, str]] = field(default_factory=list)
    fetch_calls: list[tuple[str, bool, float | None]] = field(default_factory=list)
    closed: bool = False
    _commit_counter: int = field(default=0)

    # =========================================================================
    # Context Manager Protocol
    # =========================================================================

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self.closed = True

    # =========================================================================
    # Test Setup Helpers
    # =========================================================================

    def add_commit(self, *parents: str) -> str:
        """Add a commit to the graph and return its SHA.

        Args:
            parents: Parent SHAs; none creates a root commit.

        Returns:
            A unique 40-character hex SHA.
        """
        self._commit_counter += 1
        sha = f"{self._commit_counter:040x}"
        self.commits[sha] = tuple(parents)
        return sha

    def add_chain(self, base: str | None, length: int) -> str:
        """Add a linear run of commits on top of base and return the tip."""
        tip = base
        for _ in range(length):
            tip = self.add_commit(tip) if tip is not None else self.add_commit()
        if tip is None:
            msg = "A chain needs a base commit or a positive length"
            raise ValueError(msg)
        return tip

    def set_remote(self, remote: str, branches: Mapping[str, str]) -> None:
        """Set both the server state and the tracking refs for a remote."""
        self.server[remote] = dict(branches)
        self.tracking[remote] = dict(branches)

    # =========================================================================
    # RepositoryProtocol Methods
    # =========================================================================

    def has_remote(self, remote: str) -> bool:
        return remote in self.server or remote in self.tracking

    def fetch(
        self, remote: str, *, prune: bool = True, timeout: float | None = None
    ) -> FetchResult:
        self.fetch_calls.append((remote, prune, timeout))
        if not self.has_remote(remote):
            msg = f"Remote '{remote}' is not configured"
            raise RemoteNotConfiguredError(msg, remote=remote)
        if self.fetch_error is not None:
            raise self.fetch_error

        before = dict(self.tracking.get(remote, {}))
        after = dict(self.server.get(remote, {}))
        if not prune:
            after = {**before, **after}
        self.tracking[remote] = after

        updated = frozenset(n for n, s in after.items() if before.get(n) != s)
        pruned = frozenset(set(before) - set(after))
        return FetchResult(remote=remote, updated=updated, pruned=pruned)

    def local_branches(self) -> Mapping[str, str]:
        return dict(self.local)

    def remote_branches(self, remote: str) -> Mapping[str, str]:
        return dict(self.tracking.get(remote, {}))

    def read_head(self) -> HeadState:
        if self.head_branch is not None:
            return HeadState(
                branch=self.head_branch, sha=self.local.get(self.head_branch)
            )
        return HeadState(branch=None, sha=self.detached_sha)

    def restore_head(self, state: HeadState) -> None:
        if self.restore_error is not None:
            raise self.restore_error
        if state.branch is not None:
            self.head_branch = state.branch
            self.detached_sha = None
        else:
            self.head_branch = None
            self.detached_sha = state.sha
        self.operations.append(("restore-head", state.describe()))

    def divergence(self, local_sha: str, remote_sha: str) -> Divergence:
        local_ancestors = self._ancestors(local_sha)
        remote_ancestors = self._ancestors(remote_sha)
        return Divergence(
            ahead=len(local_ancestors - remote_ancestors),
            behind=len(remote_ancestors - local_ancestors),
        )

    def is_worktree_clean(self) -> bool:
        return not self.dirty

    def create_branch(
        self, name: str, sha: str, *, upstream: str | None = None
    ) -> None:
        self._check_lock(name)
        if name in self.local:
            msg = f"Branch '{name}' already exists"
            raise BranchExistsError(msg, branch=name)
        self.local[name] = sha
        if upstream is not None:
            self.upstreams[name] = upstream
        self.operations.append(("create", name))

    def delete_branch(self, name: str, *, expected_sha: str) -> None:
        if name == self.head_branch:
            msg = f"Refusing to delete the checked-out branch '{name}'"
            raise ActiveBranchConflictError(msg, branch=name)
        self._check_lock(name)
        self._check_expected(name, expected_sha)
        del self.local[name]
        self.operations.append(("delete", name))

    def move_branch(self, name: str, *, expected_sha: str, target_sha: str) -> None:
        self._check_lock(name)
        self._check_expected(name, expected_sha)
        self.local[name] = target_sha
        self.operations.append(("move", name))

    def move_active_branch(self, *, expected_sha: str, target_sha: str) -> None:
        if self.head_branch is None:
            msg = "HEAD is detached; there is no active branch to move"
            raise ActiveBranchConflictError(msg, branch=self.read_head().describe())
        name = self.head_branch
        self._check_lock(name)
        self._check_expected(name, expected_sha)
        self.local[name] = target_sha
        self.worktree_sha = target_sha
        self.operations.append(("move-active", name))

    # =========================================================================
    # Extended Methods
    # =========================================================================

    def create_orphan_branch(
        self,
        name: str,
        *,
        message: str,
        files: Mapping[str, bytes] | None = None,
    ) -> str:
        if name in self.local:
            msg = f"Branch '{name}' already exists"
            raise BranchExistsError(msg, branch=name)
        sha = self.add_commit()
        self.local[name] = sha
        self.trees[sha] = dict(files or {})
        self.messages[sha] = message
        self.operations.append(("orphan", name))
        return sha

    def mutations(self) -> list[tuple[str, str]]:
        """Return recorded ref mutations, excluding HEAD restoration."""
        return [op for op in self.operations if op[0] != "restore-head"]

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    def _ancestors(self, sha: str) -> set[str]:
        seen: set[str] = set()
        stack: list[str] = [sha]
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            if current not in self.commits:
                msg = f"Commit {current[:8]} is missing from the object store"
                raise RepositoryError(msg)
            seen.add(current)
            stack.extend(self.commits[current])
        return seen

    def _check_lock(self, name: str) -> None:
        if name in self.locked_refs:
            ref = f"refs/heads/{name}"
            msg = f"Ref '{ref}' is locked by another git process"
            raise RefLockConflictError(msg, ref=ref)

    def _check_expected(self, name: str, expected_sha: str) -> None:
        if self.local.get(name) != expected_sha:
            ref = f"refs/heads/{name}"
            msg = f"Ref '{ref}' no longer points at {expected_sha[:8]}"
            raise RefLockConflictError(msg, ref=ref)

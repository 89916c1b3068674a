# ruff: noqa: TC003  # Path needed at runtime for method bodies
"""Git repository backed by dulwich.

This module provides the GitRepository class, which implements
RepositoryProtocol against an on-disk repository using dulwich's refs
container, commit walker and porcelain helpers.
"""

from __future__ import annotations

import io
import threading
import time
from pathlib import Path
from typing import TYPE_CHECKING, Final, Self

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

from dulwich import porcelain
from dulwich.client import HTTPUnauthorized
from dulwich.errors import GitProtocolError, MissingCommitError, NotGitRepository
from dulwich.file import FileLocked
from dulwich.index import commit_tree
from dulwich.objects import Blob, Commit
from dulwich.repo import Repo

from branchsync.exceptions import (
    ActiveBranchConflictError,
    ActiveBranchRestoreError,
    BranchExistsError,
    NetworkFailureError,
    RefLockConflictError,
    RemoteNotConfiguredError,
    RepositoryError,
    RepositoryNotFoundError,
)
from branchsync.repository._models import Divergence, FetchResult, HeadState
from branchsync.utils import decode_bytes, get_author_info, get_worktree_dir

# Default identity when git config is not available
_DEFAULT_NAME: Final = "branchsync"
_DEFAULT_EMAIL: Final = "branchsync@localhost"

_HEAD: Final = b"HEAD"
_LOCAL_PREFIX: Final = b"refs/heads/"
_REMOTE_PREFIX: Final = b"refs/remotes/"

# Regular file mode for blobs in orphan branch trees
_GIT_FILE_MODE: Final = 0o100644


class _FetchWorker(threading.Thread):
    """Daemon thread running ``porcelain.fetch`` and keeping its outcome."""

    def __init__(self, repo: Repo, remote: str, *, prune: bool) -> None:
        super().__init__(name=f"branchsync-fetch-{remote}", daemon=True)
        self._repo: Repo = repo
        self._remote: str = remote
        self._prune: bool = prune
        self._error: Exception | None = None

    def run(self) -> None:
        try:
            _ = porcelain.fetch(
                self._repo,
                self._remote,
                errstream=io.BytesIO(),
                prune=self._prune,
            )
        except Exception as e:  # noqa: BLE001  # re-raised by result()
            self._error = e

    def result(self) -> None:
        """Re-raise the exception the fetch ended with, if any."""
        if self._error is not None:
            raise self._error


class GitRepository:
    """Ref-level access to an on-disk Git repository.

    The repository is discovered from the given working directory (searching
    upward like ``git`` does) and every operation goes through the dulwich
    Repo held by this instance, never through the process working directory.

    The class implements the context manager protocol for proper resource
    cleanup. When used as a context manager, the underlying dulwich Repo is
    automatically closed when exiting the context.

    Attributes:
        root: The resolved working tree root.

    Example:
        with GitRepository(Path("/srv/deployments")) as repo:
            for name, sha in repo.local_branches().items():
                print(name, sha[:8])
    """

    __slots__: Final = ("_repo", "_root")
    _root: Path
    _repo: Repo

    def __init__(self, working_dir: Path | None = None) -> None:
        """Open the repository containing working_dir.

        Args:
            working_dir: Directory to start discovery from. If None, uses the
                current working directory.

        Raises:
            RepositoryNotFoundError: If no repository contains working_dir.
        """
        if working_dir is None:
            working_dir = Path.cwd()
        try:
            self._repo = Repo.discover(str(working_dir))
        except NotGitRepository as e:
            msg = f"Not inside a Git repository: {working_dir}"
            raise RepositoryNotFoundError(msg, path=working_dir) from e
        self._root = get_worktree_dir(self._repo).resolve()

    # =========================================================================
    # Context Manager Protocol
    # =========================================================================

    def __enter__(self) -> Self:
        """Enter the context manager.

        Returns:
            The repository instance.
        """
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager and close the repository."""
        self.close()

    def close(self) -> None:
        """Close the underlying git repository.

        Releases file handles held by the dulwich Repo. This method is
        automatically called when using the context manager protocol.
        """
        self._repo.close()

    @property
    def root(self) -> Path:
        """Get the resolved working tree root of the repository."""
        return self._root

    # =========================================================================
    # Remote Operations
    # =========================================================================

    def has_remote(self, remote: str) -> bool:
        config = self._repo.get_config()
        try:
            _ = config.get((b"remote", remote.encode()), b"url")
        except KeyError:
            return False
        return True

    def fetch(
        self, remote: str, *, prune: bool = True, timeout: float | None = None
    ) -> FetchResult:
        """Fetch a configured remote and update its tracking refs.

        The transfer runs on a daemon thread so that an unresponsive remote
        is bounded by ``timeout``. On timeout the thread is abandoned and
        cannot keep the interpreter alive at exit.

        Args:
            remote: Remote name to fetch from.
            prune: Remove tracking refs for branches deleted upstream.
            timeout: Seconds to wait, or None to wait forever.

        Returns:
            FetchResult with updated and pruned branch names.

        Raises:
            RemoteNotConfiguredError: If the remote has no URL configured.
            NetworkFailureError: If the transfer fails or times out.
        """
        if not self.has_remote(remote):
            msg = f"Remote '{remote}' is not configured"
            raise RemoteNotConfiguredError(msg, remote=remote)

        before = dict(self.remote_branches(remote))

        worker = _FetchWorker(self._repo, remote, prune=prune)
        worker.start()
        worker.join(timeout)
        if worker.is_alive():
            msg = f"Fetching '{remote}' timed out after {timeout}s"
            raise NetworkFailureError(msg, remote=remote, timed_out=True)
        try:
            worker.result()
        except (
            GitProtocolError,
            HTTPUnauthorized,
            NotGitRepository,
            OSError,
        ) as e:
            msg = f"Failed to fetch '{remote}': {e}"
            raise NetworkFailureError(msg, remote=remote) from e

        after = self.remote_branches(remote)
        updated = frozenset(
            name for name, sha in after.items() if before.get(name) != sha
        )
        pruned = frozenset(set(before) - set(after))
        return FetchResult(remote=remote, updated=updated, pruned=pruned)

    # =========================================================================
    # Ref Queries
    # =========================================================================

    def local_branches(self) -> Mapping[str, str]:
        refs = self._repo.refs.as_dict(_LOCAL_PREFIX)
        return {decode_bytes(name): decode_bytes(sha) for name, sha in refs.items()}

    def remote_branches(self, remote: str) -> Mapping[str, str]:
        base = _REMOTE_PREFIX + remote.encode() + b"/"
        refs = self._repo.refs.as_dict(base)
        return {
            decode_bytes(name): decode_bytes(sha)
            for name, sha in refs.items()
            if name != _HEAD
        }

    def read_head(self) -> HeadState:
        refnames, sha = self._repo.refs.follow(_HEAD)
        branch: str | None = None
        if len(refnames) > 1 and refnames[-1].startswith(_LOCAL_PREFIX):
            branch = decode_bytes(refnames[-1][len(_LOCAL_PREFIX) :])
        return HeadState(
            branch=branch, sha=decode_bytes(sha) if sha is not None else None
        )

    def restore_head(self, state: HeadState) -> None:
        """Point HEAD back at a snapshot.

        A symbolic snapshot is restored with a symbolic ref; a detached
        snapshot replaces HEAD with the recorded SHA.

        Raises:
            ActiveBranchRestoreError: If the HEAD file cannot be written.
        """
        target = state.describe()
        try:
            if state.branch is not None:
                self._repo.refs.set_symbolic_ref(
                    _HEAD, _LOCAL_PREFIX + state.branch.encode()
                )
            elif state.sha is not None:
                # remove_if_equals does not follow symrefs, so this drops HEAD
                # itself rather than the branch it points at.
                _ = self._repo.refs.remove_if_equals(_HEAD, None)
                if not self._repo.refs.set_if_equals(_HEAD, None, state.sha.encode()):
                    msg = f"HEAD changed while restoring it to {target}"
                    raise ActiveBranchRestoreError(msg, branch=target)
        except (FileLocked, OSError) as e:
            msg = f"Could not restore HEAD to {target}: {e}"
            raise ActiveBranchRestoreError(msg, branch=target) from e

    def divergence(self, local_sha: str, remote_sha: str) -> Divergence:
        if local_sha == remote_sha:
            return Divergence(ahead=0, behind=0)
        local = local_sha.encode()
        remote = remote_sha.encode()
        try:
            ahead = sum(
                1 for _ in self._repo.get_walker(include=[local], exclude=[remote])
            )
            behind = sum(
                1 for _ in self._repo.get_walker(include=[remote], exclude=[local])
            )
        except (KeyError, MissingCommitError) as e:
            msg = f"Cannot compare {local_sha[:8]} with {remote_sha[:8]}: {e}"
            raise RepositoryError(msg) from e
        return Divergence(ahead=ahead, behind=behind)

    def is_worktree_clean(self) -> bool:
        status = porcelain.status(self._repo, untracked_files="no")
        staged: dict[str, list[bytes]] = status.staged  # pyright: ignore[reportUnknownMemberType]
        if any(staged.get(kind) for kind in ("add", "delete", "modify")):
            return False
        return not status.unstaged  # pyright: ignore[reportUnknownMemberType]

    # =========================================================================
    # Ref Mutations
    # =========================================================================

    def create_branch(
        self, name: str, sha: str, *, upstream: str | None = None
    ) -> None:
        ref = _LOCAL_PREFIX + name.encode()
        try:
            created = self._repo.refs.add_if_new(ref, sha.encode())
        except FileLocked as e:
            raise self._lock_error(ref) from e
        except OSError as e:
            raise self._write_error(ref, e) from e
        if not created:
            msg = f"Branch '{name}' already exists"
            raise BranchExistsError(msg, branch=name)

        if upstream is not None:
            config = self._repo.get_config()
            section = (b"branch", name.encode())
            config.set(section, b"remote", upstream.encode())
            config.set(section, b"merge", ref)
            try:
                config.write_to_path()
            except OSError as e:
                msg = f"Created '{name}' but could not record its upstream: {e}"
                raise RepositoryError(msg) from e

    def delete_branch(self, name: str, *, expected_sha: str) -> None:
        """Delete a branch and its ``branch.<name>`` config section.

        Raises:
            ActiveBranchConflictError: If the branch is checked out.
            RefLockConflictError: If the ref is locked or has moved.
            RepositoryError: If the ref or config cannot be written.
        """
        ref = _LOCAL_PREFIX + name.encode()
        if self.read_head().branch == name:
            msg = f"Refusing to delete the checked-out branch '{name}'"
            raise ActiveBranchConflictError(msg, branch=name)
        try:
            removed = self._repo.refs.remove_if_equals(ref, expected_sha.encode())
        except FileLocked as e:
            raise self._lock_error(ref) from e
        except OSError as e:
            raise self._write_error(ref, e) from e
        if not removed:
            raise self._moved_error(ref, expected_sha)

        config = self._repo.get_config()
        section = (b"branch", name.encode())
        if config.has_section(section):
            del config[section]
            try:
                config.write_to_path()
            except OSError as e:
                msg = f"Deleted '{name}' but could not remove its config: {e}"
                raise RepositoryError(msg) from e

    def move_branch(self, name: str, *, expected_sha: str, target_sha: str) -> None:
        ref = _LOCAL_PREFIX + name.encode()
        try:
            moved = self._repo.refs.set_if_equals(
                ref, expected_sha.encode(), target_sha.encode()
            )
        except FileLocked as e:
            raise self._lock_error(ref) from e
        except OSError as e:
            raise self._write_error(ref, e) from e
        if not moved:
            raise self._moved_error(ref, expected_sha)

    def move_active_branch(self, *, expected_sha: str, target_sha: str) -> None:
        """Fast-forward the checked-out branch together with its working tree.

        The hard reset is only safe because callers verify a clean working
        tree and a fast-forward relationship first.

        Raises:
            ActiveBranchConflictError: If HEAD is detached.
            RefLockConflictError: If the ref or index is locked, or the
                branch moved since it was read.
            RepositoryError: If the ref, index or working tree cannot be
                written.
        """
        head = self.read_head()
        if head.branch is None:
            msg = "HEAD is detached; there is no active branch to move"
            raise ActiveBranchConflictError(msg, branch=head.describe())
        ref = _LOCAL_PREFIX + head.branch.encode()
        if head.sha != expected_sha:
            raise self._moved_error(ref, expected_sha)

        try:
            porcelain.reset(self._repo, "hard", target_sha)
            # Older dulwich releases reset the index and tree without moving
            # the branch.
            if decode_bytes(self._repo.refs[ref]) != target_sha:
                moved = self._repo.refs.set_if_equals(
                    ref, expected_sha.encode(), target_sha.encode()
                )
                if not moved:
                    raise self._moved_error(ref, expected_sha)
        except FileLocked as e:
            raise self._lock_error(ref) from e
        except OSError as e:
            raise self._write_error(ref, e) from e

    def create_orphan_branch(
        self,
        name: str,
        *,
        message: str,
        files: Mapping[str, bytes] | None = None,
    ) -> str:
        """Create a parentless branch without touching the working tree.

        Args:
            name: Branch name.
            message: Commit message for the root commit.
            files: Repository-relative paths mapped to file contents. When
                empty, the root commit has an empty tree.

        Returns:
            The SHA of the root commit.

        Raises:
            BranchExistsError: If the branch already exists.
            RepositoryError: If the ref cannot be written.
        """
        ref = _LOCAL_PREFIX + name.encode()
        if ref in self._repo.refs:
            msg = f"Branch '{name}' already exists"
            raise BranchExistsError(msg, branch=name)

        object_store = self._repo.object_store
        entries: list[tuple[bytes, bytes, int]] = []
        for path, content in sorted((files or {}).items()):
            blob = Blob.from_string(content)
            object_store.add_object(blob)
            entries.append((path.encode(), blob.id, _GIT_FILE_MODE))
        tree_id = commit_tree(object_store, entries)

        identity = self._format_author_line()
        now = int(time.time())
        offset = time.localtime(now).tm_gmtoff

        commit = Commit()
        commit.tree = tree_id
        commit.parents = []
        commit.author = commit.committer = identity
        commit.author_time = commit.commit_time = now
        commit.author_timezone = commit.commit_timezone = offset
        commit.encoding = b"UTF-8"
        commit.message = message.encode()
        object_store.add_object(commit)

        try:
            created = self._repo.refs.add_if_new(ref, commit.id)
        except FileLocked as e:
            raise self._lock_error(ref) from e
        except OSError as e:
            raise self._write_error(ref, e) from e
        if not created:
            msg = f"Branch '{name}' already exists"
            raise BranchExistsError(msg, branch=name)
        return decode_bytes(commit.id)

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    def _format_author_line(self) -> bytes:
        """Build author/committer identity from the environment or git config.

        Returns:
            Author identity as bytes in "Name <email>" format.
        """
        author_info = get_author_info(self._root)
        name = author_info.name or _DEFAULT_NAME
        email = author_info.email or _DEFAULT_EMAIL
        return f"{name} <{email}>".encode()

    def _lock_error(self, ref: bytes) -> RefLockConflictError:
        name = decode_bytes(ref)
        msg = f"Ref '{name}' is locked by another git process"
        return RefLockConflictError(msg, ref=name)

    def _moved_error(self, ref: bytes, expected_sha: str) -> RefLockConflictError:
        name = decode_bytes(ref)
        msg = f"Ref '{name}' no longer points at {expected_sha[:8]}"
        return RefLockConflictError(msg, ref=name)

    def _write_error(self, ref: bytes, error: OSError) -> RepositoryError:
        msg = f"Cannot write ref '{decode_bytes(ref)}': {error}"
        return RepositoryError(msg)

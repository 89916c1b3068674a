"""Scoped snapshot and restoration of HEAD."""

from __future__ import annotations

from typing import TYPE_CHECKING, Self

from branchsync.exceptions import ActiveBranchRestoreError

if TYPE_CHECKING:
    from types import TracebackType

    from structlog.typing import FilteringBoundLogger

    from branchsync.repository import HeadState, RepositoryProtocol


def _same_head(before: HeadState, after: HeadState) -> bool:
    # The active branch itself may be fast-forwarded, so only its name counts.
    if before.branch is not None:
        return after.branch == before.branch
    return after.branch is None and after.sha == before.sha


class ActiveBranchGuard:
    """Snapshot HEAD on entry and restore it on every exit path.

    Restoration runs whether the body returned or raised. If HEAD cannot be
    put back, ActiveBranchRestoreError is raised from ``__exit__``; when the
    body also raised, the original exception is kept as its context.

    Example:
        with ActiveBranchGuard(repo, logger=log) as guard:
            active = guard.head.branch
            ...
    """

    __slots__ = ("_head", "_logger", "_repo")

    def __init__(
        self, repo: RepositoryProtocol, *, logger: FilteringBoundLogger
    ) -> None:
        self._repo: RepositoryProtocol = repo
        self._logger: FilteringBoundLogger = logger
        self._head: HeadState | None = None

    @property
    def head(self) -> HeadState:
        """HEAD as it was when the guard was entered."""
        if self._head is None:
            msg = "ActiveBranchGuard has not been entered"
            raise RuntimeError(msg)
        return self._head

    def __enter__(self) -> Self:
        self._head = self._repo.read_head()
        self._logger.debug("head_captured", head=self._head.describe())
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        expected = self.head
        current = self._repo.read_head()
        if _same_head(expected, current):
            return

        self._logger.warning(
            "head_moved",
            expected=expected.describe(),
            actual=current.describe(),
        )
        try:
            self._repo.restore_head(expected)
        except ActiveBranchRestoreError:
            self._logger.error("head_restore_failed", expected=expected.describe())
            raise

        restored = self._repo.read_head()
        if not _same_head(expected, restored):
            self._logger.error(
                "head_restore_failed",
                expected=expected.describe(),
                actual=restored.describe(),
            )
            msg = (
                f"HEAD should point at {expected.describe()} "
                f"but points at {restored.describe()}"
            )
            raise ActiveBranchRestoreError(
                msg, branch=expected.describe(), actual=restored.describe()
            )
        self._logger.info("head_restored", head=expected.describe())

"""branchsync exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path


class BranchSyncError(Exception):
    """Base exception for branchsync errors."""


class ConfigError(BranchSyncError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source


# =============================================================================
# Repository Exceptions
# =============================================================================


class RepositoryError(BranchSyncError):
    """Base exception for repository errors."""


class RepositoryNotFoundError(RepositoryError):
    """Raised when no Git repository can be found.

    Attributes:
        path: The directory that was searched.
    """

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        """Initialize with error message and path context.

        Args:
            message: Human-readable error message.
            path: The directory that was searched.
        """
        super().__init__(message)
        self.path: Path | None = path


class RemoteNotConfiguredError(RepositoryError):
    """Raised when the requested remote has no configuration in the repository.

    Attributes:
        remote: The remote name that was requested.
    """

    def __init__(self, message: str, *, remote: str) -> None:
        """Initialize with error message and remote context.

        Args:
            message: Human-readable error message.
            remote: The remote name that was requested.
        """
        super().__init__(message)
        self.remote: str = remote


class NetworkFailureError(RepositoryError):
    """Raised when fetching from a remote fails or times out.

    Attributes:
        remote: The remote that could not be reached.
        timed_out: True if the fetch exceeded its timeout.
    """

    def __init__(self, message: str, *, remote: str, timed_out: bool = False) -> None:
        """Initialize with error message and remote context.

        Args:
            message: Human-readable error message.
            remote: The remote that could not be reached.
            timed_out: True if the fetch exceeded its timeout.
        """
        super().__init__(message)
        self.remote: str = remote
        self.timed_out: bool = timed_out


class RefLockConflictError(RepositoryError):
    """Raised when a ref cannot be updated because of concurrent access.

    Covers both a held lock file and a compare-and-swap mismatch (the ref
    moved between being read and being updated).

    Attributes:
        ref: The full ref name, e.g. ``refs/heads/main``.
    """

    def __init__(self, message: str, *, ref: str) -> None:
        """Initialize with error message and ref context.

        Args:
            message: Human-readable error message.
            ref: The full ref name.
        """
        super().__init__(message)
        self.ref: str = ref


class BranchExistsError(RepositoryError):
    """Raised when creating a branch that already exists.

    Attributes:
        branch: The branch name.
    """

    def __init__(self, message: str, *, branch: str) -> None:
        """Initialize with error message and branch context."""
        super().__init__(message)
        self.branch: str = branch


class ActiveBranchConflictError(RepositoryError):
    """Raised when an operation would delete or move the checked-out branch.

    Attributes:
        branch: The active branch name.
    """

    def __init__(self, message: str, *, branch: str) -> None:
        """Initialize with error message and branch context."""
        super().__init__(message)
        self.branch: str = branch


class ActiveBranchRestoreError(ActiveBranchConflictError):
    """Raised when HEAD cannot be restored after a reconciliation pass.

    Leaving HEAD on something other than what the user had checked out is a
    correctness violation, so this error is never downgraded to a warning.

    Attributes:
        branch: The branch HEAD should point at, or the detached SHA.
        actual: What HEAD points at now, if it could be read.
    """

    def __init__(
        self, message: str, *, branch: str, actual: str | None = None
    ) -> None:
        """Initialize with error message and HEAD context."""
        super().__init__(message, branch=branch)
        self.actual: str | None = actual


class InvalidBranchNameError(RepositoryError):
    """Raised when a branch name is not a valid Git ref name.

    Attributes:
        branch: The rejected name.
    """

    def __init__(self, message: str, *, branch: str) -> None:
        """Initialize with error message and branch context."""
        super().__init__(message)
        self.branch: str = branch

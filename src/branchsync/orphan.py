"""Orphan branch creation.

An orphan branch starts from a root commit with no parents. It is useful for
deployment, documentation or bookkeeping branches that share no history with
the rest of the repository.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from dulwich.refs import check_ref_format

from branchsync.exceptions import InvalidBranchNameError
from branchsync.utils import create_null_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from structlog.typing import FilteringBoundLogger

    from branchsync.repository import RepositoryProtocol

DEFAULT_ORPHAN_MESSAGE = "Initial commit"


def validate_branch_name(name: str) -> None:
    """Check that name is usable as ``refs/heads/<name>``.

    Raises:
        InvalidBranchNameError: If Git would reject the ref name.
    """
    if not name or not check_ref_format(b"refs/heads/" + name.encode()):
        msg = f"'{name}' is not a valid branch name"
        raise InvalidBranchNameError(msg, branch=name)


def load_files(paths: Iterable[Path], *, root: Path) -> dict[str, bytes]:
    """Read files for an orphan commit.

    Files inside root keep their path relative to root; files outside it
    are stored under their base name.

    Args:
        paths: Files to read.
        root: Repository working tree root.

    Returns:
        Repository-relative POSIX paths mapped to file contents.

    Raises:
        OSError: If a file cannot be read.
    """
    resolved_root = root.resolve()
    files: dict[str, bytes] = {}
    for path in paths:
        resolved = path.resolve()
        if resolved.is_relative_to(resolved_root):
            key = resolved.relative_to(resolved_root).as_posix()
        else:
            key = resolved.name
        files[key] = resolved.read_bytes()
    return files


def create_orphan_branch(
    repo: RepositoryProtocol,
    name: str,
    *,
    message: str = DEFAULT_ORPHAN_MESSAGE,
    files: Mapping[str, bytes] | None = None,
    logger: FilteringBoundLogger | None = None,
) -> str:
    """Create a branch whose only commit has no parents.

    HEAD, the index and the working tree are left alone.

    Args:
        repo: Repository to create the branch in.
        name: Branch name.
        message: Commit message of the root commit.
        files: Repository-relative paths mapped to contents. An empty or
            missing mapping produces an empty tree.
        logger: Structured logger.

    Returns:
        The SHA of the root commit.

    Raises:
        InvalidBranchNameError: If name is not a valid branch name.
        BranchExistsError: If the branch already exists.
    """
    log = (logger or create_null_logger()).bind(branch=name)
    validate_branch_name(name)
    sha = repo.create_orphan_branch(name, message=message, files=files)
    log.info("orphan_branch_created", sha=sha, files=sorted(files or {}))
    return sha

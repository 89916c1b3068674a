"""Common git utility functions.

Shared helpers for byte/string conversion and repository path handling.
"""

from pathlib import Path

from dulwich.repo import Repo


def decode_bytes(value: bytes | str) -> str:
    """Decode bytes to str if needed.

    Args:
        value: A bytes or str value.

    Returns:
        The value as a string.
    """
    if isinstance(value, bytes):
        return value.decode()
    return value


def get_worktree_dir(repo: Repo) -> Path:
    """Get the worktree directory for a repository.

    Args:
        repo: The repository instance.

    Returns:
        Path to the worktree directory.
    """
    repo_path = repo.path
    if isinstance(repo_path, bytes):
        repo_path = repo_path.decode()

    path = Path(repo_path)
    # If path is .git directory, return parent
    if path.name == ".git":
        return path.parent
    return path

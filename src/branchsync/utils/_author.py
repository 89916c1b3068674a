"""Author information resolution utilities."""

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, frozen=True)
class AuthorInfo:
    """Resolved author information.

    Attributes:
        name: Author name, or None if not found.
        email: Author email, or None if not found.
    """

    name: str | None
    email: str | None


def get_author_info(cwd: Path | None = None) -> AuthorInfo:
    """Resolve author info from environment variables or git config.

    Resolution order:
    1. Environment variables (BRANCHSYNC_AUTHOR_NAME, BRANCHSYNC_AUTHOR_EMAIL)
    2. Git config (user.name, user.email)

    Args:
        cwd: Directory to read git config from. Defaults to the current
            working directory.

    Returns:
        AuthorInfo with resolved name and email (either may be None).
    """
    name = os.environ.get("BRANCHSYNC_AUTHOR_NAME") or _git_config("user.name", cwd)
    email = os.environ.get("BRANCHSYNC_AUTHOR_EMAIL") or _git_config(
        "user.email", cwd
    )

    return AuthorInfo(name=name, email=email)


def _git_config(key: str, cwd: Path | None) -> str | None:
    """Read a value from git config.

    Args:
        key: Git config key (e.g., "user.name").
        cwd: Directory to run git in.

    Returns:
        The config value, or None if not set or git is unavailable.
    """
    # Validate key to prevent injection
    if not key.replace(".", "").replace("_", "").isalnum():
        return None

    try:
        result = subprocess.run(  # noqa: S603
            ["git", "config", "--get", key],  # noqa: S607
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip() or None
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None

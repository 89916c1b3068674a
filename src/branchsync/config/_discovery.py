"""Configuration source discovery.

Locates the project config file in the repository root and the
platform-specific user config file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import platformdirs
from dulwich.errors import NotGitRepository
from dulwich.repo import Repo

from branchsync.utils import get_worktree_dir

from ._defaults import DEFAULT_CONFIG
from ._models._common import ConfigSource, ConfigSourceName

PROJECT_CONFIG_FILENAME = ".branchsync.toml"


def find_repository_root(start: Path | None = None) -> Path | None:
    """Find the working tree root of the repository containing start.

    Args:
        start: Directory to start searching from. Defaults to the current
            working directory.

    Returns:
        The working tree root, or None when start is not inside a repository.
    """
    search_path = str((start or Path.cwd()).resolve())
    try:
        repo = Repo.discover(search_path)
    except NotGitRepository:
        return None
    try:
        return get_worktree_dir(repo)
    finally:
        repo.close()


def get_user_config_path() -> Path:
    r"""Get the platform-specific user config file path.

    - Linux: ``~/.config/branchsync/config.toml``
    - macOS: ``~/Library/Application Support/branchsync/config.toml``
    - Windows: ``%APPDATA%\branchsync\config.toml``

    The path is returned whether or not it exists.
    """
    return platformdirs.user_config_path("branchsync") / "config.toml"


def get_project_config_path(repository_root: Path) -> Path:
    return repository_root / PROJECT_CONFIG_FILENAME


def _file_exists(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def discover_sources(
    repository_root: Path | None = None,
    *,
    include_env: bool = True,
    include_cli: bool = False,
    cli_overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> list[ConfigSource]:
    """Discover all configuration sources, highest precedence first.

    File sources are listed even when the file does not exist, with
    exists=False. The project source is omitted outside a repository.

    Args:
        repository_root: Repository working tree root. If None, discovered
            from the current working directory.
        include_env: Include environment variables as a source.
        include_cli: Include CLI overrides as a source.
        cli_overrides: CLI argument overrides, used when include_cli is True.

    Returns:
        List of ConfigSource objects in precedence order (highest first).
    """
    sources: list[ConfigSource] = []
    resolved_root = repository_root or find_repository_root()

    if include_cli:
        sources.append(
            ConfigSource(
                name=ConfigSourceName.CLI,
                path=None,
                exists=bool(cli_overrides),
                values=cli_overrides or {},
            )
        )

    if include_env:
        # Values are parsed during loading.
        sources.append(
            ConfigSource(name=ConfigSourceName.ENV, path=None, exists=True, values={})
        )

    if resolved_root is not None:
        project_path = get_project_config_path(resolved_root)
        sources.append(
            ConfigSource(
                name=ConfigSourceName.PROJECT,
                path=project_path,
                exists=_file_exists(project_path),
                values={},
            )
        )

    user_path = get_user_config_path()
    sources.append(
        ConfigSource(
            name=ConfigSourceName.USER,
            path=user_path,
            exists=_file_exists(user_path),
            values={},
        )
    )

    sources.append(
        ConfigSource(
            name=ConfigSourceName.DEFAULT,
            path=None,
            exists=True,
            values=DEFAULT_CONFIG,
        )
    )

    return sources

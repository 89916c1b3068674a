"""Configuration loading with CLI-friendly error handling."""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

from branchsync.exceptions import ConfigError, ConfigLoadError

from ._models import Config

if TYPE_CHECKING:
    from pathlib import Path


def _is_strict() -> bool:
    return os.environ.get("BRANCHSYNC_STRICT_CONFIG", "0") == "1"


def safe_load_config(
    *,
    config_path: Path | None = None,
    repository_root: Path | None = None,
    cli_overrides: dict[str, object] | None = None,
) -> tuple[Config, str | None]:
    """Load configuration, falling back to defaults on errors.

    Behaviour on a load error depends on BRANCHSYNC_STRICT_CONFIG:
    - unset or "0": warn to stderr and return the default config
    - "1": re-raise the error

    An explicit config_path (``--config``) must exist; a missing file is
    always an error.

    Args:
        config_path: Explicit path to a config file.
        repository_root: Repository root used to find ``.branchsync.toml``.
        cli_overrides: Nested overrides from command-line options.

    Returns:
        Tuple of (Config, error_message). error_message is None on success.

    Raises:
        ConfigError: In strict mode, or when config_path does not exist.
        OSError: In strict mode, when a config file cannot be read.
    """
    if config_path is not None and not config_path.is_file():
        msg = f"Config file not found: {config_path}"
        raise ConfigLoadError(msg, path=config_path)

    try:
        if config_path is not None:
            return Config.from_file(config_path), None
        return (
            Config.load(repository_root=repository_root, cli_overrides=cli_overrides),
            None,
        )
    except (ConfigError, OSError) as e:
        if _is_strict():
            raise
        error_msg = str(e)
        print(  # noqa: T201
            f"Warning: Failed to load config, using defaults: {error_msg}",
            file=sys.stderr,
        )
        return Config.from_dict({}), error_msg

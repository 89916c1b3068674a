"""branchsync configuration.

Configuration is merged from, highest precedence first: command-line
overrides, ``BRANCHSYNC_*`` environment variables, ``.branchsync.toml`` in the
repository root, the user config file and built-in defaults.

Example:
    >>> from branchsync.config import Config
    >>> config = Config.load()
    >>> config.sync.remote
    'origin'
"""

from branchsync.exceptions import ConfigError, ConfigLoadError, ConfigValidationError

from ._defaults import DEFAULT_CONFIG
from ._discovery import (
    PROJECT_CONFIG_FILENAME,
    discover_sources,
    find_repository_root,
    get_project_config_path,
    get_user_config_path,
)
from ._load import safe_load_config
from ._loader import (
    deep_merge,
    parse_env_vars,
    parse_string_value,
    read_toml_file,
    set_nested_key,
)
from ._models import (
    Config,
    ConfigSource,
    ConfigSourceName,
    LogFormat,
    LoggingConfig,
    LogLevel,
    SyncConfig,
)
from ._validation import ConfigSchema, validate_config

__all__ = [
    "DEFAULT_CONFIG",
    "PROJECT_CONFIG_FILENAME",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "ConfigSchema",
    "ConfigSource",
    "ConfigSourceName",
    "ConfigValidationError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "SyncConfig",
    "deep_merge",
    "discover_sources",
    "find_repository_root",
    "get_project_config_path",
    "get_user_config_path",
    "parse_env_vars",
    "parse_string_value",
    "read_toml_file",
    "safe_load_config",
    "set_nested_key",
    "validate_config",
]

"""Configuration models."""

from branchsync.config._models._common import (
    ConfigSource,
    ConfigSourceName,
    LogFormat,
    LogLevel,
)
from branchsync.config._models._config import Config
from branchsync.config._models._logging import LoggingConfig
from branchsync.config._models._sync import SyncConfig

__all__ = [
    "Config",
    "ConfigSource",
    "ConfigSourceName",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "SyncConfig",
]

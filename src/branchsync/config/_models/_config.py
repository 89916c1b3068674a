# pyright: reportExplicitAny=false, reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Configuration container with typed access.

This module provides the Config class, the primary interface for reading
branchsync configuration values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Self, TypeVar, overload

import tomli_w
from pydantic import BaseModel, ConfigDict, PrivateAttr

from branchsync.config._defaults import DEFAULT_CONFIG
from branchsync.config._loader import copy_value, deep_merge, parse_env_vars, read_toml_file
from branchsync.config._models._common import ConfigSource, ConfigSourceName
from branchsync.config._models._logging import LoggingConfig
from branchsync.config._models._sync import SyncConfig
from branchsync.config._validation import validate_config
from branchsync.reconcile import ReconcileOptions

if TYPE_CHECKING:
    from pathlib import Path

T = TypeVar("T")


class Config(BaseModel):
    """Configuration container with typed access.

    Instances are immutable. Use from_dict(), from_file() or load() rather
    than the constructor.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    _data: dict[str, Any] = PrivateAttr(default_factory=dict)
    _sources: tuple[ConfigSource, ...] = PrivateAttr(default=())
    _logging: LoggingConfig = PrivateAttr(default_factory=LoggingConfig)
    _sync: SyncConfig = PrivateAttr(default_factory=SyncConfig)

    def __init__(
        self,
        *,
        _data: dict[str, Any] | None = None,
        _sources: tuple[ConfigSource, ...] = (),
        _logging: LoggingConfig | None = None,
        _sync: SyncConfig | None = None,
    ) -> None:
        super().__init__()
        self._data = _data if _data is not None else copy_value(DEFAULT_CONFIG)
        self._sources = _sources
        self._logging = _logging if _logging is not None else LoggingConfig()
        self._sync = _sync if _sync is not None else SyncConfig()

    @classmethod
    def _from_merged(
        cls,
        merged: dict[str, Any],
        sources: tuple[ConfigSource, ...],
        *,
        source: str | None = None,
    ) -> Self:
        schema = validate_config(merged, source=source)
        return cls(
            _data=merged,
            _sources=sources,
            _logging=schema.logging,
            _sync=schema.sync,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create configuration from a dictionary merged over the defaults.

        Raises:
            ConfigValidationError: If a value is invalid.
        """
        return cls._from_merged(deep_merge(DEFAULT_CONFIG, data), ())

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a single file merged over the defaults.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If a value is invalid.
        """
        data = read_toml_file(path)
        source = ConfigSource(
            name=ConfigSourceName.PROJECT,
            path=path,
            exists=True,
            values=data,
        )
        return cls._from_merged(
            deep_merge(DEFAULT_CONFIG, data), (source,), source=str(path)
        )

    @classmethod
    def load(
        cls,
        *,
        repository_root: Path | None = None,
        include_env: bool = True,
        cli_overrides: dict[str, Any] | None = None,
    ) -> Self:
        """Load merged configuration from all sources.

        Sources are merged in precedence order
        (defaults -> user -> project -> env -> cli).

        Args:
            repository_root: Repository working tree root. If None, discovered
                from the current working directory.
            include_env: Include ``BRANCHSYNC_*`` environment variables.
            cli_overrides: Nested dict of overrides from command-line options.

        Returns:
            Merged configuration object.

        Raises:
            ConfigLoadError: If a config file cannot be parsed.
            ConfigValidationError: If the merged config fails validation.
        """
        from branchsync.config._discovery import discover_sources  # noqa: PLC0415

        sources = discover_sources(
            repository_root,
            include_env=include_env,
            include_cli=cli_overrides is not None,
            cli_overrides=cli_overrides,
        )

        merged: dict[str, Any] = {}
        loaded_sources: list[ConfigSource] = []

        # Discovered highest-to-lowest; merge lowest first.
        for source in reversed(sources):
            values: dict[str, Any] = {}
            if source.name in (ConfigSourceName.DEFAULT, ConfigSourceName.CLI):
                values = source.values
            elif source.name == ConfigSourceName.ENV:
                values = parse_env_vars()
            elif source.path is not None and source.exists:
                values = read_toml_file(source.path)

            loaded_sources.append(
                ConfigSource(
                    name=source.name,
                    path=source.path,
                    exists=source.exists,
                    values=values,
                )
            )
            if values:
                merged = deep_merge(merged, values)

        return cls._from_merged(merged, tuple(reversed(loaded_sources)))

    @property
    def sources(self) -> list[ConfigSource]:
        """Sources that contributed to this configuration, highest first."""
        return list(self._sources)

    @property
    def logging(self) -> LoggingConfig:
        return self._logging

    @property
    def sync(self) -> SyncConfig:
        return self._sync

    @overload
    def get(self, key: str) -> Any: ...

    @overload
    def get(self, key: str, default: T) -> T: ...

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-notation key.

        Examples:
            >>> config.get("sync.remote")
            'origin'
            >>> config.get("nonexistent", "fallback")
            'fallback'
        """
        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the merged configuration."""
        return copy_value(self._data)

    def to_toml(self) -> str:
        """Render the effective configuration as TOML."""
        return tomli_w.dumps(self.to_dict())

    def to_reconcile_options(self, *, dry_run: bool = False) -> ReconcileOptions:
        """Build reconciliation options from the sync section."""
        sync = self._sync
        return ReconcileOptions(
            remote=sync.remote,
            fetch=sync.fetch,
            prune=sync.prune,
            fetch_timeout=sync.fetch_timeout,
            dry_run=dry_run,
            active_branch=sync.active_branch,
            protected_branches=frozenset(sync.protected_branches),
        )

# pyright: reportAny=false, reportExplicitAny=false
"""Configuration validation using Pydantic schemas."""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationError

from branchsync.config._models._logging import LoggingConfig
from branchsync.config._models._sync import SyncConfig
from branchsync.exceptions import ConfigValidationError


class ConfigSchema(BaseModel):
    """Pydantic schema for the root configuration (unknown keys ignored)."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="ignore")

    logging: LoggingConfig = LoggingConfig()
    sync: SyncConfig = SyncConfig()


def validate_config(
    config: dict[str, Any],
    *,
    source: str | None = None,
) -> ConfigSchema:
    """Validate a merged configuration dictionary.

    Args:
        config: The merged configuration dictionary.
        source: Where the values came from, for error reporting.

    Returns:
        The validated schema.

    Raises:
        ConfigValidationError: For the first invalid value.
    """
    try:
        return ConfigSchema.model_validate(config)
    except ValidationError as e:
        error = e.errors()[0]
        key = ".".join(str(part) for part in error.get("loc", ()))
        ctx = error.get("ctx") or {}
        expected = str(ctx.get("expected", error.get("msg", "a valid value")))
        msg = f"Invalid configuration value for '{key}': {error.get('msg')}"
        raise ConfigValidationError(
            msg,
            key=key,
            value=error.get("input"),
            expected=expected,
            source=source,
        ) from e

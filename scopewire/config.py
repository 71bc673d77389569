"""
Configuration management for SCOPEWIRE.

Container options are a frozen Pydantic model. They can be passed directly
or read from environment variables with ``ContainerOptions.from_env()``.
"""

import os

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import (ENV_AUTO_RESOLVE, ENV_DEFAULT_SCOPE, ENV_RECORD_METRICS,
                        FALSY_VALUES, TRUTHY_VALUES)
from .di.scopes import Scope
from .exceptions import ConfigurationError


class ContainerOptions(BaseModel):
    """
    Container configuration, shared by a container and its children.

    Example:
        # Using environment variables
        options = ContainerOptions.from_env()
        container = Container(options)

        # Or directly
        container = Container(ContainerOptions(auto_resolve=False))
    """

    model_config = ConfigDict(frozen=True)

    auto_resolve: bool = Field(
        True,
        description="Bind registered injectable classes on first resolve when unbound",
    )
    default_scope: Scope = Field(
        Scope.SINGLETON,
        description="Scope for auto-registered classes that declare none",
    )
    record_metrics: bool = Field(
        True,
        description="Record top-level resolve durations in the metrics collector",
    )

    @classmethod
    def from_env(cls, **overrides) -> "ContainerOptions":
        """
        Build options from environment variables, then apply ``overrides``.

        Raises:
            ConfigurationError: If an environment value is invalid
        """
        values: dict = {}

        auto_resolve = os.getenv(ENV_AUTO_RESOLVE)
        if auto_resolve is not None:
            values["auto_resolve"] = _parse_bool(ENV_AUTO_RESOLVE, auto_resolve)

        record_metrics = os.getenv(ENV_RECORD_METRICS)
        if record_metrics is not None:
            values["record_metrics"] = _parse_bool(ENV_RECORD_METRICS, record_metrics)

        default_scope = os.getenv(ENV_DEFAULT_SCOPE)
        if default_scope is not None:
            values["default_scope"] = default_scope.strip().lower()

        values.update(overrides)
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid container options: {e.errors()[0]['msg']}",
                config_key=str(e.errors()[0]["loc"][0]) if e.errors()[0]["loc"] else None,
            ) from e


def _parse_bool(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in TRUTHY_VALUES:
        return True
    if value in FALSY_VALUES:
        return False
    raise ConfigurationError(
        f"{key} must be a boolean value, got {raw!r}", config_key=key, config_value=raw
    )

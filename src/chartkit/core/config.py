"""Centralized configuration management for chartkit.

Supports:
- Built-in defaults
- User overrides from chartkit.yaml
- Environment variable overrides (CHARTKIT_*)
- Nested key access with dot notation
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from .errors import ConfigurationError

__all__ = ["DEFAULTS", "Config", "get_config", "load_config", "reset_config"]

DEFAULTS: dict[str, Any] = {
    "core": {
        "timezone": None,
    },
    "aggregation": {
        "timestamp_field": "created_at",
        "date_pattern": "%A %d %b, %Y",
        "month_pattern": "%B, %Y",
        "preaggregated": False,
        "aggregate_field": None,
        "aggregate_op": None,
    },
    "logging": {
        "level": "INFO",
        "path": None,
    },
}

# Environment variable -> config key
ENV_MAPPINGS = {
    "CHARTKIT_TIMEZONE": "core.timezone",
    "CHARTKIT_TIMESTAMP_FIELD": "aggregation.timestamp_field",
    "CHARTKIT_DATE_PATTERN": "aggregation.date_pattern",
    "CHARTKIT_MONTH_PATTERN": "aggregation.month_pattern",
    "CHARTKIT_PREAGGREGATED": "aggregation.preaggregated",
    "CHARTKIT_AGGREGATE_FIELD": "aggregation.aggregate_field",
    "CHARTKIT_AGGREGATE_OP": "aggregation.aggregate_op",
    "CHARTKIT_LOG_LEVEL": "logging.level",
    "CHARTKIT_LOG_PATH": "logging.path",
}

_BOOL_KEYS = {"aggregation.preaggregated"}

# Global config instance
_config_instance: Config | None = None


class Config:
    """Centralized configuration with defaults, overrides, and env vars.

    Configuration priority (highest to lowest):
    1. Environment variables (CHARTKIT_*)
    2. User config (chartkit.yaml)
    3. Built-in defaults

    Example:
        >>> config = Config.load()
        >>> field = config.get("aggregation.timestamp_field", "created_at")
        >>> tz = config.get("core.timezone")
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        """Initialize configuration.

        Parameters
        ----------
        data
            Configuration data dictionary
        """
        self._data = data or {}

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> Config:
        """Load configuration from defaults, file and environment.

        Parameters
        ----------
        config_path
            Path to user config file (default: chartkit.yaml, or $CHARTKIT_CONFIG)

        Returns
        -------
        Config
            Loaded configuration instance

        Raises
        ------
        ConfigurationError
            If the user config file exists but is not valid YAML
        """
        if config_path is None:
            config_path = Path(os.environ.get("CHARTKIT_CONFIG", "chartkit.yaml"))

        user_config = cls._load_yaml_file(config_path) if Path(config_path).exists() else {}

        # Merge configurations (user overrides defaults)
        merged = cls._deep_merge(copy.deepcopy(DEFAULTS), user_config)

        # Apply environment variable overrides
        merged = cls._apply_env_overrides(merged)

        return cls(merged)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Supports dot notation for nested keys:
        - "aggregation.timestamp_field" → config["aggregation"]["timestamp_field"]
        - "core.timezone" → config["core"]["timezone"]

        Parameters
        ----------
        key
            Configuration key (supports dot notation)
        default
            Default value if key not found

        Returns
        -------
        Any
            Configuration value or default
        """
        parts = key.split(".")
        value = self._data

        for part in parts:
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value by key (dot notation)."""
        _set_nested(self._data, key, value)

    def section(self, name: str) -> dict[str, Any]:
        """Get a top-level section as a dictionary (empty if missing)."""
        value = self._data.get(name)
        return dict(value) if isinstance(value, dict) else {}

    def to_dict(self) -> dict[str, Any]:
        """Get full configuration as dictionary."""
        return self._data.copy()

    @staticmethod
    def _load_yaml_file(path: str | Path) -> dict[str, Any]:
        """Load YAML file.

        Parameters
        ----------
        path
            Path to YAML file

        Returns
        -------
        dict
            Loaded data

        Raises
        ------
        ConfigurationError
            If the file cannot be parsed or is not a mapping
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning(f"Failed to load config from {path}: {exc}")
            raise ConfigurationError(f"Failed to load config from {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

        return data

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries.

        Parameters
        ----------
        base
            Base dictionary
        override
            Override dictionary

        Returns
        -------
        dict
            Merged dictionary
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = Config._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    @staticmethod
    def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
        """Apply environment variable overrides.

        Environment variables in format CHARTKIT_KEY override config values.
        Example: CHARTKIT_TIMESTAMP_FIELD overrides config["aggregation"]["timestamp_field"]

        Parameters
        ----------
        config
            Base configuration

        Returns
        -------
        dict
            Configuration with env overrides applied
        """
        result = copy.deepcopy(config)

        for env_var, config_key in ENV_MAPPINGS.items():
            value: Any = os.environ.get(env_var)
            if value is None:
                continue

            if config_key in _BOOL_KEYS:
                value = value.strip().lower() in ("1", "true", "yes", "on")
            elif value == "":
                value = None

            _set_nested(result, config_key, value)

        return result


def _set_nested(data: dict[str, Any], key: str, value: Any) -> None:
    parts = key.split(".")
    for part in parts[:-1]:
        if not isinstance(data.get(part), dict):
            data[part] = {}
        data = data[part]
    data[parts[-1]] = value


def get_config() -> Config:
    """Get global configuration instance (singleton).

    Returns
    -------
    Config
        Global configuration instance
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = Config.load()

    return _config_instance


def reset_config() -> None:
    """Drop the cached global configuration."""
    global _config_instance
    _config_instance = None


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration and return as dictionary.

    Args:
        config_path: Path to config file (default: chartkit.yaml)

    Returns:
        Configuration dictionary
    """
    return Config.load(config_path=config_path).to_dict()

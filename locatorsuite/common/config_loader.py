"""
================================================================================
Configuration Loader
================================================================================

YAML-based suite configuration with environment variable overrides.

Features:
    - Single `config/config.yaml` per checkout
    - Environment variable override (UI_BASE_URL overrides ui.base_url)
    - Dot notation path access with built-in defaults
    - Project-root relative path resolution (locator root, screenshot dir)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger


PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "config.yaml"

# Used when neither the YAML file nor the environment provides a value
DEFAULTS: Dict[str, Any] = {
    "ui": {
        "base_url": "http://localhost:3000",
        "default_timeout": 10000,
        "screenshot_dir": "reports/screenshots",
        "headless": True,
        "browser": "chromium",
    },
    "locators": {
        "root": "config/locators",
        "extension": "yaml",
    },
    "retry": {
        "max_retries": 3,
        "delay_ms": 1000,
    },
    "api": {
        "base_url": "http://localhost:8000",
        "timeout": 30,
    },
    "logging": {
        "level": "INFO",
    },
}


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""
    pass


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (LOCATORS_ROOT)
        2. YAML configuration file
        3. Built-in DEFAULTS

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("locators.root")
        'config/locators'
        >>> config.get("retry.delay_ms", 500)
        1000
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Args:
            config_path: Path to YAML configuration file.
                        Uses DEFAULT_CONFIG_PATH if not specified.
        """
        if getattr(self, "_initialized", False):
            return

        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._load_config()
        self._initialized = True

    @property
    def config_path(self) -> Path:
        return self._config_path

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = {}
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}"
            ) from e

        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {self._config_path}"
            )
        self._config = loaded
        logger.debug(f"Loaded configuration from: {self._config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        Environment variable first, then YAML, then DEFAULTS, then `default`.
        Environment strings are converted to the type of the fallback value.
        """
        fallback = _lookup(DEFAULTS, key)
        if fallback is None:
            fallback = default

        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return self._convert_type(env_value, fallback)

        value = _lookup(self._config, key)
        return fallback if value is None else value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get entire configuration section merged over its defaults."""
        merged = dict(DEFAULTS.get(section, {}))
        merged.update(self._config.get(section, {}) or {})
        return merged

    def get_path(self, key: str, default: Any = None) -> Path:
        """Get a path value; relative paths are anchored at the project root."""
        value = self.get(key, default)
        if value is None:
            raise ConfigurationError(f"No path configured for: {key}")
        path = Path(value)
        return path if path.is_absolute() else PROJECT_ROOT / path

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    def _convert_type(self, value: str, reference: Any) -> Any:
        """Convert an environment string to match the reference type."""
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next instantiation reloads from disk."""
        cls._instance = None
        cls._config = {}


def _lookup(data: Dict[str, Any], key: str) -> Any:
    value: Any = data
    for part in key.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
        if value is None:
            return None
    return value


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "DEFAULTS",
    "PROJECT_ROOT",
]

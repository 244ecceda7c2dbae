#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Central configuration module for marketcompat.

Settings are resolved in three layers, each overriding the previous one:

1. Built-in defaults (``DEFAULT_CONFIG``)
2. An optional YAML or JSON configuration file
3. Environment variables (a ``.env`` file next to the working directory is
   loaded first through python-dotenv)

Every value goes through ``validate_config_value`` so that numeric and boolean
settings arrive typed regardless of where they came from.

Example usage:
    from marketcompat.config import config

    timeout = config.get("HTTP_TIMEOUT")
    config.set("PLUGIN_DELAY", 0)
"""

import os
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional, Union

import yaml
from dotenv import load_dotenv

from marketcompat.utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)

load_dotenv(Path.cwd() / ".env")

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_CONFIG: Dict[str, Any] = {
    # Upstream
    "MARKETPLACE_API_BASE": "https://marketplace.atlassian.com",
    "USER_AGENT": DEFAULT_USER_AGENT,
    # HTTP
    "HTTP_TIMEOUT": 30,
    "HTTP_MAX_REDIRECTS": 10,
    # REST pagination
    "REST_PAGE_SIZE": 50,
    "REST_PAGE_DELAY": 0.4,
    # Batch
    "PLUGIN_DELAY": 2.0,
    "INITIAL_STATE_MAX_DEPTH": 15,
    # Browser
    "BROWSER_HEADLESS": True,
    "BROWSER_NAVIGATION_TIMEOUT": 60,
    "BROWSER_GRID_TIMEOUT": 15,
    "BROWSER_FALLBACK_TIMEOUT": 5,
    "BROWSER_MAX_LOAD_MORE": 25,
    "BROWSER_LOAD_MORE_DELAY": 2.0,
    # Logging
    "LOG_LEVEL": "INFO",
    "LOG_TO_FILE": False,
    "LOG_DIR": "logs",
    "STRUCTURED_LOGGING": False,
}

_INT_KEYS = {
    "HTTP_TIMEOUT", "HTTP_MAX_REDIRECTS", "REST_PAGE_SIZE", "INITIAL_STATE_MAX_DEPTH",
    "BROWSER_NAVIGATION_TIMEOUT", "BROWSER_GRID_TIMEOUT", "BROWSER_FALLBACK_TIMEOUT",
    "BROWSER_MAX_LOAD_MORE",
}
_POSITIVE_INT_KEYS = {"REST_PAGE_SIZE", "INITIAL_STATE_MAX_DEPTH", "HTTP_TIMEOUT"}
_FLOAT_KEYS = {"REST_PAGE_DELAY", "PLUGIN_DELAY", "BROWSER_LOAD_MORE_DELAY"}
_BOOL_KEYS = {"BROWSER_HEADLESS", "LOG_TO_FILE", "STRUCTURED_LOGGING"}


class ConfigValidationError(ConfigurationError):
    """
    Exception raised for configuration validation errors.

    Raised when a value cannot be coerced to the type its key requires or
    falls outside the allowed range.
    """
    pass


def validate_config_value(key: str, value: Any) -> Any:
    """
    Validate configuration values based on their keys.

    Args:
        key: Configuration key to validate
        value: Configuration value to validate

    Returns:
        Validated value (possibly converted to appropriate type)

    Raises:
        ConfigValidationError: If validation fails
    """
    if key in _INT_KEYS:
        try:
            int_value = int(value)
        except (TypeError, ValueError):
            raise ConfigValidationError(f"{key} must be an integer")
        if int_value < 0:
            raise ConfigValidationError(f"{key} must be non-negative")
        if key in _POSITIVE_INT_KEYS and int_value < 1:
            raise ConfigValidationError(f"{key} must be at least 1")
        return int_value

    if key in _FLOAT_KEYS:
        try:
            float_value = float(value)
        except (TypeError, ValueError):
            raise ConfigValidationError(f"{key} must be a number")
        if float_value < 0:
            raise ConfigValidationError(f"{key} must be non-negative")
        return float_value

    if key in _BOOL_KEYS:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            if value.lower() in ["true", "yes", "1", "on"]:
                return True
            if value.lower() in ["false", "no", "0", "off"]:
                return False
        raise ConfigValidationError(f"{key} must be a boolean value")

    if key == "LOG_LEVEL":
        valid_levels = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
        if isinstance(value, str) and value.upper() in valid_levels:
            return value.upper()
        raise ConfigValidationError(f"{key} must be one of {valid_levels}")

    if key == "MARKETPLACE_API_BASE":
        if not isinstance(value, str) or not value.startswith(("http://", "https://")):
            raise ConfigValidationError(f"{key} must be an http(s) URL")
        return value.rstrip("/")

    return value


class Config:
    """
    Configuration manager for marketcompat.

    Attributes:
        DEFAULT_CONFIG: Dictionary of default configuration values
    """

    DEFAULT_CONFIG = DEFAULT_CONFIG

    def __init__(self, config_file: Optional[Union[str, Path]] = None, load_env: bool = True):
        """
        Initialize the configuration manager.

        Args:
            config_file: Optional YAML or JSON file overriding the defaults
            load_env: Whether environment variables override file values
        """
        self._config: Dict[str, Any] = dict(self.DEFAULT_CONFIG)
        if config_file:
            self.load_from_file(config_file)
        if load_env:
            self.load_from_env()

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value after validating it."""
        self._config[key] = validate_config_value(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        return self._config.get(key, default)

    def load_from_env(self) -> None:
        """Override known keys from environment variables."""
        for key in self.DEFAULT_CONFIG:
            if key in os.environ:
                self.set(key, os.environ[key])

    def load_from_file(self, config_file: Union[str, Path]) -> None:
        """
        Load configuration from a YAML or JSON file.

        Args:
            config_file: Path to the configuration file

        Raises:
            ConfigValidationError: If the file is missing, unreadable or invalid
        """
        path = Path(config_file)
        if not path.exists():
            raise ConfigValidationError(f"Configuration file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigValidationError(f"Failed to read configuration file {path}: {e}", cause=e)

        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigValidationError(f"Configuration file {path} must contain a mapping")

        for key, value in data.items():
            self.set(str(key).upper(), value)
        logger.debug(f"Loaded configuration from {path}")

    def as_dict(self) -> Dict[str, Any]:
        """Return a copy of the current configuration."""
        return dict(self._config)


config = Config()

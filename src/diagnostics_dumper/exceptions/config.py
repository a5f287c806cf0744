"""Configuration exceptions: config files, settings values."""

from pathlib import Path
from typing import Any

from .base import DiagnosticsDumperError


class ConfigurationError(DiagnosticsDumperError):
    """Base class for configuration-related errors."""

    # Bad settings are a usage error, like a bad command-line option
    exit_code = 2


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value!r}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class ConfigFileError(ConfigurationError):
    """Raised when a config file is missing or cannot be parsed."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid config file: {path}", details={"path": str(path), "reason": reason})
        self.path = path
        self.reason = reason

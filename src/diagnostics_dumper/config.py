"""Configuration loading and the live configuration store.

Configuration sources are merged in priority order:
    1. Defaults (defined in DumperConfig)
    2. Global config (~/.diagnostics-dumper.toml)
    3. Project config (./diagnostics-dumper.toml)
    4. Explicit config file
    5. Environment variables (DIAGDUMP_* prefix)
    6. Overrides passed as kwargs (CLI flags, in-process edits)

Example:
    >>> config = load_config(exclude_patterns=["*.generated.ts"])
    >>> config.exclude_patterns
    ['*.generated.ts']
    >>> config.debounce_ms
    200
"""

from __future__ import annotations

import logging
import os
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigFileError, ConfigurationError, InvalidConfigError
from .snapshot import SNAPSHOT_FILENAME

logger = logging.getLogger(__name__)

Verbosity = Literal["quiet", "normal", "verbose"]

GLOBAL_CONFIG_NAME = ".diagnostics-dumper.toml"
PROJECT_CONFIG_NAME = "diagnostics-dumper.toml"
ENV_PREFIX = "DIAGDUMP_"


@dataclass(frozen=True)
class DumperConfig:
    """Settings for the diagnostics dumper.

    Attributes:
        exclude_patterns: Glob patterns; a file whose project-relative path or
            bare name matches any of them is left out of the snapshot.
        debounce_ms: Quiet period after the last change notification before
            a snapshot is written.
        output_filename: Snapshot file name inside the output directory.
        verbosity: Logging verbosity level.
    """

    exclude_patterns: list[str] = field(default_factory=list)
    debounce_ms: int = 200
    output_filename: str = SNAPSHOT_FILENAME
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not isinstance(self.exclude_patterns, (list, tuple)) or not all(
            isinstance(p, str) for p in self.exclude_patterns
        ):
            raise InvalidConfigError(
                "exclude_patterns", self.exclude_patterns, "must be a list of strings"
            )
        if self.debounce_ms < 0:
            raise InvalidConfigError("debounce_ms", self.debounce_ms, "must be non-negative")
        if not self.output_filename or any(sep in self.output_filename for sep in ("/", "\\")):
            raise InvalidConfigError(
                "output_filename", self.output_filename, "must be a bare file name"
            )
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "must be one of quiet/normal/verbose"
            )

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0


def config_sources(config_file: Optional[Path] = None) -> list[Path]:
    """Config files consulted by :func:`load_config`, lowest priority first."""
    sources = [Path.home() / GLOBAL_CONFIG_NAME, Path.cwd() / PROJECT_CONFIG_NAME]
    if config_file is not None:
        sources.append(Path(config_file))
    return sources


def load_config(config_file: Optional[Path] = None, **overrides) -> DumperConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated DumperConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing, or a
            value fails validation
    """
    merged: dict[str, Any] = {}

    global_config, project_config = config_sources()
    for path in (global_config, project_config):
        if path.exists():
            merged.update(_load_toml_file(path))

    if config_file is not None:
        config_file = Path(config_file)
        if not config_file.exists():
            raise ConfigFileError(config_file, "file not found")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    # Verbosity boolean flags from the CLI
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update(overrides)

    if "exclude_patterns" in merged and isinstance(merged["exclude_patterns"], tuple):
        merged["exclude_patterns"] = list(merged["exclude_patterns"])

    try:
        return DumperConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")


def _to_snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from DIAGDUMP_* environment variables.

    Supported environment variables:
        DIAGDUMP_DEBOUNCE_MS: int
        DIAGDUMP_OUTPUT_FILENAME: str
        DIAGDUMP_VERBOSITY: quiet/normal/verbose

    List fields (exclude_patterns) are not read from the environment.
    """
    type_hints = get_type_hints(DumperConfig)
    result: dict[str, Any] = {}

    for field_name in DumperConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        origin = getattr(type_hint, "__origin__", None)
        if origin is list or type_hint is list:
            continue

        if type_hint is int:
            try:
                result[field_name] = int(env_value)
            except ValueError:
                raise InvalidConfigError(env_key, env_value, "expected an integer")
        else:
            result[field_name] = env_value

    return result


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML config file, normalizing camelCase keys to snake_case.

    A ``[diagnosticsDumper]`` table, if present, is read instead of the top
    level so the same file can carry other tools' settings.

    Raises:
        ConfigFileError: If the file cannot be read or parsed
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigFileError(path, str(e))

    section = data.get("diagnosticsDumper", data.get("diagnostics_dumper", data))
    if not isinstance(section, dict):
        raise ConfigFileError(path, "[diagnosticsDumper] must be a table")
    return {_to_snake_case(k): v for k, v in section.items()}


class ConfigStore:
    """Live configuration store.

    Every read returns the current configuration: config files are re-read
    as soon as one of them changes on disk, and :meth:`update` applies
    in-process edits immediately. Keys may be given in camelCase
    (``excludePatterns``) or snake_case.
    """

    def __init__(self, config_file: Optional[Path] = None, **overrides) -> None:
        self.config_file = Path(config_file) if config_file is not None else None
        self._overrides = dict(overrides)
        self._lock = threading.RLock()
        self._fingerprint: Optional[tuple] = None
        self._config: Optional[DumperConfig] = None

    def current(self) -> DumperConfig:
        """Return the freshest configuration, reloading if sources changed."""
        with self._lock:
            fingerprint = self._compute_fingerprint()
            if self._config is None or fingerprint != self._fingerprint:
                self._config = load_config(self.config_file, **self._overrides)
                self._fingerprint = fingerprint
                logger.debug("Configuration (re)loaded: %s", self._config)
            return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """Read one setting by name."""
        return getattr(self.current(), _to_snake_case(key), default)

    def update(self, **overrides) -> DumperConfig:
        """Apply in-process overrides; rejected values leave the store unchanged."""
        with self._lock:
            previous = dict(self._overrides)
            self._overrides.update({_to_snake_case(k): v for k, v in overrides.items()})
            self._config = None
            try:
                return self.current()
            except ConfigurationError:
                self._overrides = previous
                self._config = None
                raise

    def _compute_fingerprint(self) -> tuple:
        stamps = []
        for path in config_sources(self.config_file):
            try:
                stat = path.stat()
            except OSError:
                stamps.append((str(path), None))
            else:
                stamps.append((str(path), stat.st_mtime_ns, stat.st_size))
        env = tuple(sorted((k, v) for k, v in os.environ.items() if k.startswith(ENV_PREFIX)))
        return tuple(stamps), env

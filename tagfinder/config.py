"""Configuration management for tag-finder."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from tagfinder.exceptions import (
    ConfigParseError,
    ConfigValidationError,
)
from tagfinder.search.parser import DEFAULT_ALLOWED_KEYS, KNOWN_KEYS


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "tag-finder" / "config.toml"


def get_default_database_path() -> Path:
    """Get the default item database path."""
    return Path.home() / ".local" / "share" / "tag-finder" / "items.db"


def _default_allowed_keys() -> list[str]:
    return sorted(DEFAULT_ALLOWED_KEYS)


@dataclass
class Config:
    """Application configuration.

    Attributes:
        database: Path to the SQLite item database.
        allowed_keys: Keys recognised in ``key:value`` query predicates.
            Must be a non-empty subset of the known keys.
        colored_output: Whether to use colored terminal output.
        config_path: Path where config was loaded from (None if defaults).
    """

    database: Path = field(default_factory=get_default_database_path)
    allowed_keys: list[str] = field(default_factory=_default_allowed_keys)
    colored_output: bool = True
    config_path: Path | None = None

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of warning messages for non-fatal issues.

        Raises:
            ConfigValidationError: If a critical validation fails.
        """
        warnings: list[str] = []

        self.database = self.database.expanduser().resolve()

        if not self.allowed_keys:
            raise ConfigValidationError("search.allowed_keys", self.allowed_keys, "must not be empty")
        unknown = sorted(set(self.allowed_keys) - KNOWN_KEYS)
        if unknown:
            raise ConfigValidationError(
                "search.allowed_keys",
                self.allowed_keys,
                f"unknown keys {', '.join(unknown)} (known: {', '.join(sorted(KNOWN_KEYS))})",
            )

        # Might be created later by a search
        if not self.database.exists():
            warnings.append(f"Item database not found: {self.database}")

        return warnings


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Load configuration from file or use defaults.

    Args:
        config_path: Explicit config file path. If None, uses default location.

    Returns:
        Tuple of (Config object, list of warning messages).

    Raises:
        ConfigParseError: If config file exists but has invalid syntax.
        ConfigValidationError: If config values are invalid.
    """
    warnings: list[str] = []

    if config_path is None:
        config_path = get_default_config_path()

    config_path = config_path.expanduser().resolve()

    if not config_path.exists():
        config = Config()
        warnings.append(
            f"No config file found at {config_path}. Using defaults. "
            f"Create config with: tag-finder init-config"
        )
        config_warnings = config.validate()
        return config, warnings + config_warnings

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    config = _parse_config_dict(data, config_path)
    config_warnings = config.validate()

    return config, warnings + config_warnings


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    """Parse configuration dictionary into Config object."""
    config = Config(config_path=config_path)

    # Parse [paths] section
    paths = data.get("paths", {})
    if "database" in paths:
        value = paths["database"]
        if not isinstance(value, str):
            raise ConfigValidationError("paths.database", value, "must be a string path")
        config.database = Path(value)

    # Parse [search] section
    search = data.get("search", {})
    if "allowed_keys" in search:
        value = search["allowed_keys"]
        if not isinstance(value, list) or not all(isinstance(k, str) for k in value):
            raise ConfigValidationError("search.allowed_keys", value, "must be a list of strings")
        config.allowed_keys = value

    # Parse [display] section
    display = data.get("display", {})
    if "colored_output" in display:
        value = display["colored_output"]
        if not isinstance(value, bool):
            raise ConfigValidationError("display.colored_output", value, "must be a boolean")
        config.colored_output = value

    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Path to save to. If None, uses config.config_path or default.
    """
    if config_path is None:
        config_path = config.config_path or get_default_config_path()

    config_path = config_path.expanduser().resolve()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "paths": {
            "database": str(config.database),
        },
        "search": {
            "allowed_keys": list(config.allowed_keys),
        },
        "display": {
            "colored_output": config.colored_output,
        },
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)

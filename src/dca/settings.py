#!/usr/bin/env python3
"""
Per-user settings (TOML).

Layout:
    [output]
    color = "auto"                  # auto | always | never
    formatter = "docker-color-output"

    [logs]
    tail = 100

    [properties]
    paths = ["/app/resources/git.properties", "/usr/share/nginx/html/git.properties"]
    message_width = 60

A missing file means built-in defaults. Unknown keys are ignored.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config_constants import (
    DEFAULT_FORMATTER,
    DEFAULT_LOG_TAIL,
    DEFAULT_MESSAGE_WIDTH,
    DEFAULT_PROPERTIES_PATHS,
)
from .errors import SettingsError

logger = logging.getLogger(__name__)

COLOR_MODES = ('auto', 'always', 'never')


@dataclass(frozen=True)
class Settings:
    color: str = 'auto'
    formatter: str = DEFAULT_FORMATTER
    log_tail: int = DEFAULT_LOG_TAIL
    properties_paths: tuple[str, ...] = field(default=DEFAULT_PROPERTIES_PATHS)
    message_width: int = DEFAULT_MESSAGE_WIDTH

    def to_toml_dict(self) -> dict:
        return {
            'output': {'color': self.color, 'formatter': self.formatter},
            'logs': {'tail': self.log_tail},
            'properties': {
                'paths': list(self.properties_paths),
                'message_width': self.message_width,
            },
        }


def _section(data: dict, name: str, source: Path) -> dict:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise SettingsError(f"[{name}] must be a table in {source}")
    return section


def _typed(section: dict, key: str, expected: type, default: Any, source: Path) -> Any:
    if key not in section:
        return default
    value = section[key]
    # bool is an int subclass; reject it for integer keys
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise SettingsError(
            f"{key} must be of type {expected.__name__} in {source} (got {value!r})"
        )
    return value


def settings_from_dict(data: dict, source: Path) -> Settings:
    """Build Settings from parsed TOML, validating the types of known keys."""
    output = _section(data, 'output', source)
    logs = _section(data, 'logs', source)
    properties = _section(data, 'properties', source)

    color = _typed(output, 'color', str, 'auto', source)
    if color not in COLOR_MODES:
        raise SettingsError(
            f"output.color must be one of {', '.join(COLOR_MODES)} in {source} (got {color!r})"
        )

    paths = _typed(properties, 'paths', list, list(DEFAULT_PROPERTIES_PATHS), source)
    if not paths or not all(isinstance(p, str) and p for p in paths):
        raise SettingsError(f"properties.paths must be a non-empty list of paths in {source}")

    tail = _typed(logs, 'tail', int, DEFAULT_LOG_TAIL, source)
    width = _typed(properties, 'message_width', int, DEFAULT_MESSAGE_WIDTH, source)
    if tail < 0 or width < 4:
        raise SettingsError(
            f"logs.tail must be >= 0 and properties.message_width >= 4 in {source}"
        )

    return Settings(
        color=color,
        formatter=_typed(output, 'formatter', str, DEFAULT_FORMATTER, source),
        log_tail=tail,
        properties_paths=tuple(paths),
        message_width=width,
    )


def load_settings(path: Path) -> Settings:
    """
    Load per-user settings.

    Args:
        path: Settings file location

    Returns:
        Settings (defaults when the file does not exist)

    Raises:
        SettingsError: When the file is not valid TOML or a key has the wrong type
    """
    if not path.exists():
        logger.debug(f"No settings file at {path}, using defaults")
        return Settings()

    try:
        with open(path, 'rb') as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(f"Failed to parse settings file {path}: {e}") from e

    logger.debug(f"Loaded settings from {path}")
    return settings_from_dict(data, path)


def write_settings(path: Path, settings: Settings) -> None:
    """Write settings to disk using tomli_w."""
    import tomli_w

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'wb') as f:
        tomli_w.dump(settings.to_toml_dict(), f)

#!/usr/bin/env python3
"""
Compose manifest resolution and the project-local default setting.

Resolution order (first hit wins, recomputed on every invocation):
1. -f FILE given on the command line
2. DOCKER_COMPOSE_FILE environment variable
3. docker-compose.yml, docker-compose.yaml in the working directory
4. DOCKER_COMPOSE_FILE=... line in the working directory's .env

An override that points at a missing file fails; it never falls back to
auto-detection. A default that points at a deleted file fails the same way.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .config_constants import (
    COMPOSE_FILE_CANDIDATES,
    COMPOSE_FILE_DISPLAY_CANDIDATES,
    COMPOSE_FILE_GLOBS,
    DEFAULT_FILE_KEY,
    DEFAULT_SETTINGS_FILE,
    ENV_COMPOSE_FILE,
)
from .errors import NoComposeFileError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComposeContext:
    working_directory: Path
    resolved_file: Optional[Path]
    default_file_setting: Optional[str]
    error: Optional[str] = None


def _absolute(cwd: Path, name: str | Path) -> Path:
    path = Path(name).expanduser()
    return path if path.is_absolute() else cwd / path


def display_path(path: Path, cwd: Path) -> str:
    """Show a manifest path relative to cwd when it lives below it."""
    try:
        return str(path.relative_to(cwd))
    except ValueError:
        return str(path)


def _settings_line_prefix() -> str:
    return f"{DEFAULT_FILE_KEY}="


def read_default_setting(cwd: Path) -> Optional[str]:
    """Return the persisted default manifest name, or None when unset."""
    settings_file = cwd / DEFAULT_SETTINGS_FILE
    if not settings_file.is_file():
        return None
    prefix = _settings_line_prefix()
    for line in settings_file.read_text().splitlines():
        if line.startswith(prefix):
            value = line[len(prefix):].strip()
            return value or None
    return None


def _rewrite_without_default(settings_file: Path) -> tuple[list[str], bool]:
    prefix = _settings_line_prefix()
    if not settings_file.is_file():
        return [], False
    lines = settings_file.read_text().splitlines()
    kept = [line for line in lines if not line.startswith(prefix)]
    return kept, len(kept) != len(lines)


def set_default(cwd: Path, name: str) -> str:
    """
    Persist NAME as the default manifest (delete matching line, then append).

    Args:
        cwd: Project directory holding the .env file
        name: Manifest path as the user typed it

    Returns:
        The stored value

    Raises:
        FileNotFoundError: If NAME does not exist
    """
    if not _absolute(cwd, name).is_file():
        raise FileNotFoundError(f"File {name} does not exist")

    settings_file = cwd / DEFAULT_SETTINGS_FILE
    kept, _ = _rewrite_without_default(settings_file)
    kept.append(f"{_settings_line_prefix()}{name}")
    settings_file.write_text('\n'.join(kept) + '\n')
    logger.debug(f"Default compose file set in {settings_file}: {name}")
    return name


def remove_default(cwd: Path) -> bool:
    """Delete the default setting. Returns False (no error) when none was set."""
    settings_file = cwd / DEFAULT_SETTINGS_FILE
    kept, removed = _rewrite_without_default(settings_file)
    if not removed:
        return False
    settings_file.write_text('\n'.join(kept) + '\n' if kept else '')
    logger.debug(f"Default compose file removed from {settings_file}")
    return True


def no_compose_file_message() -> str:
    names = ', '.join(COMPOSE_FILE_CANDIDATES)
    return (
        f"No compose file found. Expected {names}, pass -f FILE, "
        f"or set {ENV_COMPOSE_FILE} environment variable"
    )


def resolve_compose_file(
    cwd: Path,
    override: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Path:
    """
    Resolve the active compose manifest.

    Args:
        cwd: Working directory
        override: Path given with -f (highest priority)
        env: Environment mapping (defaults to os.environ)

    Returns:
        Absolute path to the manifest

    Raises:
        FileNotFoundError: If an override or the persisted default is missing
        NoComposeFileError: If nothing resolves
    """
    env = os.environ if env is None else env

    for source, value in (('-f', override), (ENV_COMPOSE_FILE, env.get(ENV_COMPOSE_FILE))):
        if value:
            path = _absolute(cwd, value)
            if not path.is_file():
                raise FileNotFoundError(f"Custom compose file {value} not found ({source})")
            logger.debug(f"Compose file from {source}: {path}")
            return path

    for name in COMPOSE_FILE_CANDIDATES:
        path = cwd / name
        if path.is_file():
            logger.debug(f"Compose file detected: {path}")
            return path

    default = read_default_setting(cwd)
    if default:
        path = _absolute(cwd, default)
        if not path.is_file():
            raise NoComposeFileError(
                f"Default compose file {default} (from {DEFAULT_SETTINGS_FILE}) no longer exists"
            )
        logger.debug(f"Compose file from default setting: {path}")
        return path

    raise NoComposeFileError(no_compose_file_message())


def compose_context(
    cwd: Path,
    override: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ComposeContext:
    """Snapshot of the resolution state; failures are recorded, not raised."""
    try:
        resolved: Optional[Path] = resolve_compose_file(cwd, override, env)
        error = None
    except (FileNotFoundError, NoComposeFileError) as e:
        resolved = None
        error = str(e)
    return ComposeContext(
        working_directory=cwd,
        resolved_file=resolved,
        default_file_setting=read_default_setting(cwd),
        error=error,
    )


def list_compose_files(cwd: Path) -> list[str]:
    """Conventional manifest names first, then every other YAML file, sorted."""
    found = [name for name in COMPOSE_FILE_DISPLAY_CANDIDATES if (cwd / name).is_file()]
    extra = sorted(
        {p.name for pattern in COMPOSE_FILE_GLOBS for p in cwd.glob(pattern) if p.is_file()}
        - set(found)
    )
    return found + extra

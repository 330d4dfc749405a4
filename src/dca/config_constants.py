#!/usr/bin/env python3
"""
Filename and environment constants for docker-color-aliases.

CRITICAL: This is the SINGLE SOURCE OF TRUTH for manifest names, settings
locations and environment variable names. Modules import from here instead of
hardcoding strings.
"""

from __future__ import annotations

import os
from pathlib import Path

# ============================================================================
# Compose manifest discovery
# ============================================================================

# Probed in this order inside the working directory
COMPOSE_FILE_CANDIDATES = (
    'docker-compose.yml',
    'docker-compose.yaml',
)

# Listed by `dc info` (in this order, before any other *.yml / *.yaml)
COMPOSE_FILE_DISPLAY_CANDIDATES = (
    'docker-compose.yml',
    'docker-compose.yaml',
    'compose.yml',
    'compose.yaml',
)

COMPOSE_FILE_GLOBS = ('*.yml', '*.yaml')

# ============================================================================
# Persisted default (project-local)
# ============================================================================

# Single KEY=value line inside the project-local dotenv file
DEFAULT_SETTINGS_FILE = '.env'
DEFAULT_FILE_KEY = 'DOCKER_COMPOSE_FILE'

# ============================================================================
# Environment variables
# ============================================================================

ENV_COMPOSE_FILE = 'DOCKER_COMPOSE_FILE'
ENV_SETTINGS_PATH = 'DCA_SETTINGS'
ENV_LOG_LEVEL = 'DCA_LOG_LEVEL'
ENV_ASSUME_YES = 'DCA_ASSUME_YES'
ENV_NO_COLOR = 'NO_COLOR'

# ============================================================================
# Per-user settings (TOML)
# ============================================================================

USER_SETTINGS_RELATIVE = Path('.config') / 'dca' / 'settings.toml'

DEFAULT_FORMATTER = 'docker-color-output'
DEFAULT_LOG_TAIL = 100
DEFAULT_PROPERTIES_PATHS = (
    '/app/resources/git.properties',
    '/usr/share/nginx/html/git.properties',
)
DEFAULT_MESSAGE_WIDTH = 60

# ============================================================================
# Confirmation
# ============================================================================

CONFIRM_TOKEN = 'yes'
CONFIRM_PROMPT = 'Continue with operation?'


def user_settings_path(env: dict | None = None) -> Path:
    """
    Return the per-user settings file location.

    Args:
        env: Environment mapping (defaults to os.environ)

    Returns:
        $DCA_SETTINGS when set, otherwise ~/.config/dca/settings.toml
    """
    env = os.environ if env is None else env
    override = env.get(ENV_SETTINGS_PATH)
    if override:
        return Path(override).expanduser()
    return Path.home() / USER_SETTINGS_RELATIVE

#!/usr/bin/env python3
"""
Bash integration snippet.

`dca shell-init` prints shell functions for every verb, the short aliases
and one completion function that calls back into `dca complete`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from jinja2 import Template, TemplateError

from .cli_utils import get_cli_version
from .commands import Registry
from .errors import ShellInitError

logger = logging.getLogger(__name__)

TEMPLATE_PATH = Path(__file__).parent / 'templates' / 'shell-init.bash.j2'


def render_shell_init(registry: Registry, program: str = 'dca', template_path: Optional[Path] = None) -> str:
    """
    Render the bash snippet for REGISTRY.

    Args:
        registry: Verb registry the functions and aliases are generated from
        program: Executable the generated functions call
        template_path: Alternate template (tests)

    Returns:
        Snippet suitable for `eval "$(dca shell-init)"`
    """
    template_file = template_path or TEMPLATE_PATH
    if not template_file.exists():
        raise FileNotFoundError(f"Template file not found: {template_file}")
    template_content = template_file.read_text()

    verbs = registry.names()
    aliases = [(name, ' '.join(expansion)) for name, expansion in registry.shell_aliases.items()]
    context = {
        'program': program,
        'version': get_cli_version(),
        'verbs': verbs,
        'aliases': aliases,
        'completed': [*verbs, *registry.shell_aliases],
    }
    logger.debug(f"Rendering shell snippet from {template_file} ({len(verbs)} verbs, {len(aliases)} aliases)")

    try:
        return Template(template_content).render(**context)
    except TemplateError as e:
        raise ShellInitError(f"Failed to render template {template_file}: {e}") from e

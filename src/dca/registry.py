#!/usr/bin/env python3
"""Assembly of the verb registry, constructed once per process."""

from __future__ import annotations

from .commands import Registry
from .compose_commands import COMPOSE_GROUP, DCLT, DCPR, DCQ, DCUP
from .docker_commands import DCLEANUP, DOCKER_GROUP, DQ, DSTATUS

# Short aliases installed by the shell snippet
SHELL_ALIASES = {
    'dps': ('d', 'ps'),
    'dps1': ('d', 'ps1'),
    'di': ('d', 'images'),
    'dl': ('d', 'logs'),
    'dlt': ('d', 'l100'),
    'dpri': ('d', 'pruneima'),
    'ds': ('d', 'stats'),
    'dx': ('d', 'x'),
    'dcps': ('dc', 'ps'),
    'dcps1': ('dc', 'ps1'),
    'dcl': ('dc', 'logs'),
    'dcdown': ('dc', 'down'),
    'dcs': ('dc', 'stats'),
    'dcx': ('dc', 'x'),
}


def build_registry() -> Registry:
    return Registry(
        groups=[DOCKER_GROUP, COMPOSE_GROUP],
        verbs=[DQ, DCQ, DCUP, DCLT, DCPR, DSTATUS, DCLEANUP],
        shell_aliases=SHELL_ALIASES,
    )

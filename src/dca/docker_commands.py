#!/usr/bin/env python3
"""
`d` verb group (container runtime) plus dq, dstatus and dcleanup.

Listing and stats output goes through the formatter. Lifecycle and prune
subcommands are gated; everything unregistered passes straight to docker.
"""

from __future__ import annotations

import logging
from typing import Optional

from .arguments import Flag, FlagSpec, classify
from .commands import CONTAINERS, Command, CommandGroup, Session
from .compose_file import compose_context
from .confirm import MutatingOperation
from .errors import MissingTargetError
from .targets import dedupe, first_match

logger = logging.getLogger(__name__)

PS1_FORMAT = "table {{.ID}}\\t{{.Names}}\\t{{.RunningFor}}\\t{{.Status}}\\t{{.Image}}"
PSP_FORMAT = "table {{.ID}}\\t{{.Names}}\\t{{.Ports}}"
STATUS_FORMAT = "table {{.Names}}\\t{{.Status}}\\t{{.Ports}}"


def passthrough(*prefix: str, formatted: bool = False):
    """Handler running `docker PREFIX ARGS` verbatim."""

    def handler(session: Session, command: Optional[Command], args: list) -> int:
        runtime = session.runtime
        return runtime.run(runtime.docker_cmd(*prefix, *args), formatted=formatted)

    return handler


def fallback(session: Session, command: Optional[Command], args: list) -> int:
    return session.runtime.run(session.runtime.docker_cmd(*args))


def exec_passthrough(session: Session, command: Command, args: list) -> int:
    if not args:
        raise MissingTargetError('d x CONTAINER [COMMAND...]')
    runtime = session.runtime
    return runtime.run(runtime.docker_cmd('exec', '-it', *args))


def shell_in(shell: str):
    def handler(session: Session, command: Command, args: list) -> int:
        if not args:
            raise MissingTargetError(f"d {shell} CONTAINER")
        runtime = session.runtime
        return runtime.run(runtime.docker_cmd('exec', '-it', args[0], shell))

    return handler


def lifecycle(title: str, action: str, icon: str, danger: bool = False):
    """Gated `docker <verb> [flags] TARGET...`; targets are required."""

    def handler(session: Session, command: Command, args: list) -> int:
        parsed = classify(f"d {command.name}", command.flags, args)
        targets = dedupe(parsed.targets)
        if not targets:
            raise MissingTargetError(f"d {command.name} {command.usage}".rstrip())
        options = command.flags.runtime_args(parsed.flags)
        session.gate(
            MutatingOperation(
                title=title,
                description=action,
                affected_targets=targets,
                options=options,
                icon=icon,
                target_label='Affected targets',
            ),
            danger=danger,
        )
        runtime = session.runtime
        return runtime.run(runtime.docker_cmd(command.name, *options, *targets))

    return handler


def prune(title: str, action: str, scope: str, *prune_args: str):
    """Gated prune over the whole runtime scope; no target resolution."""

    def handler(session: Session, command: Command, args: list) -> int:
        session.gate(
            MutatingOperation(
                title=title,
                description=action,
                affected_targets=[scope],
                options=list(prune_args[-1:]),
                icon='🧹',
                target_label='Scope',
            ),
            danger=True,
        )
        runtime = session.runtime
        return runtime.run(runtime.docker_cmd(*prune_args))

    return handler


def show_help(session: Session, command: Command, args: list) -> int:
    for line in DOCKER_GROUP.help_lines():
        session.console.line(line)
    return 0


RM_FLAGS = FlagSpec(flags=(
    Flag('force', short='f', long='force', runtime_args=('--force',), help='Remove running containers'),
    Flag('volumes', short='v', long='volumes', runtime_args=('--volumes',), help='Remove anonymous volumes'),
))
RMI_FLAGS = FlagSpec(flags=(
    Flag('force', short='f', long='force', runtime_args=('--force',), help='Force removal'),
))


DOCKER_COMMANDS = (
    Command('ps', passthrough('ps', formatted=True), aliases=('p',), section='BASIC', summary='List containers'),
    Command('ps1', passthrough('ps', '--format', PS1_FORMAT, formatted=True), aliases=('p1',),
            section='BASIC', summary='List compact format'),
    Command('psp', passthrough('ps', '--format', PSP_FORMAT, formatted=True), section='BASIC',
            summary='List with ports'),
    Command('images', passthrough('images', formatted=True), aliases=('i',), section='BASIC',
            summary='List images'),
    Command('stats', passthrough('stats', formatted=True), aliases=('s',), section='LOGS & STATS',
            summary='Real-time stats', targets=CONTAINERS),
    Command('s1', passthrough('stats', '--no-stream', formatted=True), section='LOGS & STATS',
            summary='Stats once', targets=CONTAINERS),
    Command('logs', passthrough('logs', '-f'), aliases=('l',), section='LOGS & STATS',
            usage='CONTAINER', summary='Real-time logs', targets=CONTAINERS, single_target=True),
    Command('l100', passthrough('logs', '--tail', '100', '-f'), section='LOGS & STATS',
            usage='CONTAINER', summary='Logs with tail 100', targets=CONTAINERS, single_target=True),
    Command('l300', passthrough('logs', '--tail', '300', '-f'), section='LOGS & STATS',
            usage='CONTAINER', summary='Logs with tail 300', targets=CONTAINERS, single_target=True),
    Command('l500', passthrough('logs', '--tail', '500', '-f'), section='LOGS & STATS',
            usage='CONTAINER', summary='Logs with tail 500', targets=CONTAINERS, single_target=True),
    Command('x', exec_passthrough, section='EXEC', usage='CONTAINER CMD', summary='Execute command',
            targets=CONTAINERS, single_target=True),
    Command('sh', shell_in('sh'), section='EXEC', usage='CONTAINER', summary='Shell sh',
            targets=CONTAINERS, single_target=True),
    Command('bash', shell_in('bash'), section='EXEC', usage='CONTAINER', summary='Shell bash',
            targets=CONTAINERS, single_target=True),
    Command('start', lifecycle('DOCKER START', 'Start containers', '▶️'), section='CONTROL',
            usage='CONTAINER...', summary='Start containers', targets=CONTAINERS, mutating=True),
    Command('stop', lifecycle('DOCKER STOP', 'Stop containers', '🛑', danger=True), section='CONTROL',
            usage='CONTAINER...', summary='Stop containers', targets=CONTAINERS, mutating=True),
    Command('restart', lifecycle('DOCKER RESTART', 'Restart containers', '🔄'), section='CONTROL',
            usage='CONTAINER...', summary='Restart containers', targets=CONTAINERS, mutating=True),
    Command('rm', lifecycle('DOCKER RM', 'Remove containers', '🗑️', danger=True), section='CONTROL',
            usage='[-fv] CONTAINER...', summary='Remove containers', flags=RM_FLAGS,
            targets=CONTAINERS, mutating=True),
    Command('rmi', lifecycle('DOCKER RMI', 'Remove images', '🗑️', danger=True), section='CONTROL',
            usage='[-f] IMAGE...', summary='Remove images', flags=RMI_FLAGS, mutating=True),
    Command('kill', lifecycle('DOCKER KILL', 'Kill containers', '💀', danger=True), section='CONTROL',
            usage='CONTAINER...', summary='Kill containers', targets=CONTAINERS, mutating=True),
    Command('inspect', passthrough('inspect'), section='INFORMATION', usage='CONTAINER',
            summary='Inspect container', targets=CONTAINERS),
    Command('top', passthrough('top'), section='INFORMATION', usage='CONTAINER',
            summary='Container processes', targets=CONTAINERS),
    Command('prune', prune('DOCKER SYSTEM PRUNE', 'Remove unused data', 'system', 'system', 'prune', '-f'),
            aliases=('pr',), section='CLEANUP', summary='Clean system', mutating=True),
    Command('prunea', prune('DOCKER SYSTEM PRUNE -A', 'Remove all unused data, including images',
                            'system', 'system', 'prune', '-af'),
            aliases=('prf',), section='CLEANUP', summary='Clean all (aggressive)', mutating=True),
    Command('pruneima', prune('DOCKER IMAGE PRUNE', 'Remove dangling images', 'images', 'image', 'prune', '-f'),
            aliases=('pri',), section='CLEANUP', summary='Clean dangling images', mutating=True),
    Command('prunevol', prune('DOCKER VOLUME PRUNE', 'Remove unused volumes', 'volumes', 'volume', 'prune', '-f'),
            aliases=('prv',), section='CLEANUP', summary='Clean unused volumes', mutating=True),
    Command('prunenet', prune('DOCKER NETWORK PRUNE', 'Remove unused networks', 'networks',
                              'network', 'prune', '-f'),
            aliases=('prn',), section='CLEANUP', summary='Clean unused networks', mutating=True),
    Command('help', show_help, aliases=('h',), section='HELP', summary='Show this help'),
)

DOCKER_GROUP = CommandGroup(
    'd',
    '🐳 Docker Helper (d)',
    DOCKER_COMMANDS,
    fallback=fallback,
    footer=(
        'QUICK:',
        '  dq PATTERN CMD                     - Execute in first matching container',
        '  dstatus                            - Quick status',
        '  dcleanup                           - Complete cleanup',
        '',
        'Examples:',
        "  d x web bash                       - Bash in 'web' container",
        "  dq nginx ls                        - ls in first container containing 'nginx'",
    ),
)


# ----------------------------------------------------------------------
# Standalone verbs
# ----------------------------------------------------------------------

def quick_exec(session: Session, command: Command, args: list) -> int:
    """dq PATTERN CMD...: exec in the first running container containing PATTERN."""
    if not args:
        raise MissingTargetError('dq PATTERN [COMMAND...]')
    pattern, rest = args[0], args[1:]
    runtime = session.runtime
    container = first_match(pattern, runtime.list_containers(), kind='container')
    session.console.success(f"Executing in: {container}")
    return runtime.run(runtime.docker_cmd('exec', '-it', container, *rest))


def status(session: Session, command: Command, args: list) -> int:
    runtime = session.runtime
    console = session.console
    console.heading('=== CONTAINERS ===')
    runtime.run(runtime.docker_cmd('ps', '--format', STATUS_FORMAT), formatted=True)

    context = compose_context(session.cwd, env=session.env)
    if context.resolved_file is None:
        logger.debug(f"Compose section skipped: {context.error}")
        return 0
    console.line()
    console.heading('=== COMPOSE SERVICES ===')
    runtime.run(
        runtime.compose_cmd(
            context.resolved_file, 'ps', '--format', "table {{.Service}}\\t{{.Status}}\\t{{.Ports}}"
        ),
        formatted=True,
    )
    return 0


def cleanup(session: Session, command: Command, args: list) -> int:
    session.gate(
        MutatingOperation(
            title='DOCKER CLEANUP',
            description='Prune system data and unused networks',
            affected_targets=['system', 'networks'],
            icon='🧹',
            target_label='Scope',
        ),
        danger=True,
    )
    runtime = session.runtime
    session.console.notice('Cleaning Docker...')
    runtime.run(runtime.docker_cmd('system', 'prune', '-f'))
    runtime.run(runtime.docker_cmd('network', 'prune', '-f'))
    session.console.success('Cleanup completed')
    return 0


DQ = Command('dq', quick_exec, usage='PATTERN CMD', summary='Execute in first matching container',
             targets=CONTAINERS, single_target=True)
DSTATUS = Command('dstatus', status, summary='Show containers and services status')
DCLEANUP = Command('dcleanup', cleanup, summary='Prune system and networks', mutating=True)

#!/usr/bin/env python3
"""
`dc` verb group (compose) plus dcq, dcup, dclt and dcpr.

Structured subcommands (up, ul, down, build, start, stop, restart, pull)
run the full pipeline:

    classify args -> resolve manifest -> resolve targets -> gate -> run

Read and exec subcommands pass their arguments through untouched.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from .arguments import Flag, FlagSpec, ParsedInvocation, classify
from .commands import COMPOSE_FILES, SERVICES, Command, CommandGroup, Session
from .compose_file import (
    compose_context,
    list_compose_files,
    read_default_setting,
    remove_default,
    set_default,
)
from .config_constants import DEFAULT_FILE_KEY
from .confirm import MutatingOperation, confirm_targets
from .errors import (
    MissingTargetError,
    NoMatchError,
    OperationCancelledError,
    RuntimeInvocationError,
    UsageError,
)
from .properties import (
    NOT_FOUND_MARKER,
    format_summary,
    parse_properties,
    probe_script,
    row_from_properties,
)
from .targets import TargetSet, dedupe, first_match, resolve, resolve_many

logger = logging.getLogger(__name__)

PS1_FORMAT = "table {{.Name}}\\t{{.Service}}\\t{{.RunningFor}}\\t{{.Status}}\\t{{.Image}}"
PSP_FORMAT = "table {{.Name}}\\t{{.Service}}\\t{{.Ports}}"

UP_FLAGS = FlagSpec(
    flags=(
        Flag('pull', short='p', long='pull', runtime_args=('--pull', 'always'), help='Always pull images'),
        Flag('build', short='b', long='build', runtime_args=('--build',), help='Build before start'),
        Flag('logs', short='l', long='logs', help='Stream logs after up'),
        Flag('force', long='force', runtime_args=('--force-recreate',), help='Force recreate'),
    ),
    accepts_file=True,
)
DOWN_FLAGS = FlagSpec(
    flags=(
        Flag('volumes', short='v', long='volumes', runtime_args=('--volumes',), help='Remove volumes'),
        Flag('orphans', short='o', long='remove-orphans', runtime_args=('--remove-orphans',),
             help='Remove orphan containers'),
    ),
    accepts_file=True,
)
BUILD_FLAGS = FlagSpec(
    flags=(
        Flag('no-cache', short='n', long='no-cache', runtime_args=('--no-cache',), help='Build without cache'),
        Flag('pull', short='p', long='pull', runtime_args=('--pull',), help='Pull newer base images'),
    ),
    accepts_file=True,
)
FILE_ONLY = FlagSpec(accepts_file=True)
DCLT_FLAGS = FlagSpec(flags=(
    Flag('regex', short='r', long='regex', help='Patterns are regular expressions'),
    Flag('wait', short='w', long='wait', help='Confirm before streaming'),
))
DCPR_FLAGS = FlagSpec(flags=(
    Flag('all', short='a', long='all', help='Every compose service'),
    Flag('summary', short='s', long='summary', help='Tabular summary'),
))


def _compose(session: Session, override: Optional[str] = None) -> Path:
    return session.compose_file(override)


def _target_set(session: Session, compose_file: Path, parsed: ParsedInvocation) -> TargetSet:
    targets = resolve(parsed.targets, session.runtime.list_services(compose_file))
    logger.debug(f"Targets requested={targets.requested} resolved={targets.resolved}")
    # Unknown names are reported here but left for the compose tool to reject
    for name in targets.unknown():
        session.console.warn(f"Service '{name}' is not declared in {session.display(compose_file)}")
    return targets


def _target_args(targets: TargetSet) -> list[str]:
    # An empty request is sent as no names: the compose tool then acts on every service
    return [] if targets.is_everything else targets.resolved


# ----------------------------------------------------------------------
# Structured subcommands
# ----------------------------------------------------------------------

def run_up(session: Session, args: list, logs_after: bool = False, verb: str = 'dc up') -> int:
    parsed = classify(verb, UP_FLAGS, args)
    compose_file = _compose(session, parsed.override_file)
    targets = _target_set(session, compose_file, parsed)
    options = UP_FLAGS.runtime_args(parsed.flags)
    show_logs = logs_after or parsed.has('logs')

    session.gate(
        MutatingOperation(
            title='DOCKER COMPOSE UP',
            description='Start Docker Compose services',
            affected_targets=targets.resolved,
            compose_file=session.display(compose_file),
            options=options,
            additional='Show logs after up' if show_logs else None,
            icon='🐳',
        )
    )

    runtime = session.runtime
    service_args = _target_args(targets)
    runtime.run(runtime.compose_cmd(compose_file, 'up', '-d', *options, *service_args))
    if show_logs:
        runtime.run(runtime.compose_cmd(compose_file, 'logs', '-f', *service_args))
    return 0


def up(session: Session, command: Command, args: list) -> int:
    return run_up(session, args)


def up_with_logs(session: Session, command: Command, args: list) -> int:
    return run_up(session, args, logs_after=True, verb='dc ul')


def lifecycle(title: str, action: str, icon: str, gated: bool = True, danger: bool = False):
    """`docker compose -f F <subcommand> [options] [services]` behind the gate."""

    def handler(session: Session, command: Command, args: list) -> int:
        parsed = classify(f"dc {command.name}", command.flags, args)
        compose_file = _compose(session, parsed.override_file)
        options = command.flags.runtime_args(parsed.flags)
        runtime = session.runtime

        if gated:
            targets = _target_set(session, compose_file, parsed)
            service_args = _target_args(targets)
            session.gate(
                MutatingOperation(
                    title=title,
                    description=action,
                    affected_targets=targets.resolved,
                    compose_file=session.display(compose_file),
                    options=options,
                    icon=icon,
                ),
                danger=danger,
            )
        else:
            service_args = dedupe(parsed.targets)

        return runtime.run(runtime.compose_cmd(compose_file, command.name, *options, *service_args))

    return handler


# ----------------------------------------------------------------------
# Pass-through subcommands
# ----------------------------------------------------------------------

def passthrough(*prefix: str, formatted: bool = False):
    def handler(session: Session, command: Optional[Command], args: list) -> int:
        runtime = session.runtime
        return runtime.run(runtime.compose_cmd(_compose(session), *prefix, *args), formatted=formatted)

    return handler


def fallback(session: Session, command: Optional[Command], args: list) -> int:
    runtime = session.runtime
    return runtime.run(runtime.compose_cmd(_compose(session), *args))


def logs(session: Session, command: Command, args: list) -> int:
    runtime = session.runtime
    tail = str(session.settings.log_tail)
    return runtime.run(runtime.compose_cmd(_compose(session), 'logs', '--tail', tail, '-f', *args))


def exec_passthrough(session: Session, command: Command, args: list) -> int:
    if not args:
        raise MissingTargetError('dc x SERVICE [COMMAND...]')
    runtime = session.runtime
    return runtime.run(runtime.compose_cmd(_compose(session), 'exec', *args))


def shell_in(shell: str):
    def handler(session: Session, command: Command, args: list) -> int:
        if not args:
            raise MissingTargetError(f"dc {shell} SERVICE")
        runtime = session.runtime
        return runtime.run(runtime.compose_cmd(_compose(session), 'exec', args[0], shell))

    return handler


# ----------------------------------------------------------------------
# Manifest management
# ----------------------------------------------------------------------

def default(session: Session, command: Command, args: list) -> int:
    console = session.console
    if not args:
        current = read_default_setting(session.cwd)
        if current:
            console.info(f"Current default Docker Compose file: {current}")
        else:
            console.notice('No default Docker Compose file is currently set')
        return 0

    if args[0] in ('remove', 'rm'):
        if remove_default(session.cwd):
            console.success('Default Docker Compose file removed')
        else:
            console.notice('No default Docker Compose file is currently set')
        return 0

    stored = set_default(session.cwd, args[0])
    console.success(f"Default Docker Compose file set to: {stored}")
    return 0


def info(session: Session, command: Command, args: list) -> int:
    console = session.console
    s = console.style
    context = compose_context(session.cwd, env=session.env)

    console.heading('=== DOCKER COMPOSE CONFIGURATION ===')
    console.field('Working directory', str(session.cwd))
    if context.resolved_file is not None:
        console.field('Active compose file', session.display(context.resolved_file), emphasis=True)
    else:
        console.line(f"{s.cyan}Active compose file:{s.reset} {s.red}None found{s.reset}")
    if context.default_file_setting:
        console.field('Default setting', f"{DEFAULT_FILE_KEY}={context.default_file_setting}")
    else:
        console.line(f"{s.cyan}Default setting:{s.reset} {s.yellow}Not configured{s.reset}")

    console.line(f"{s.cyan}Available compose files:{s.reset}")
    files = list_compose_files(session.cwd)
    if files:
        console.bullets(files)
    else:
        console.line(f"  {s.yellow}No compose files found{s.reset}")
    return 0


def show_help(session: Session, command: Command, args: list) -> int:
    for line in COMPOSE_GROUP.help_lines():
        session.console.line(line)
    return 0


COMPOSE_COMMANDS = (
    Command('up', up, aliases=('u',), section='BASIC', usage='[-pbl] [--force] [-f FILE] [SERVICE...]',
            summary='Start services', flags=UP_FLAGS, targets=SERVICES, mutating=True),
    Command('ul', up_with_logs, section='BASIC', usage='[SERVICE...]', summary='Up + automatic logs',
            flags=UP_FLAGS, targets=SERVICES, mutating=True),
    Command('down', lifecycle('DOCKER COMPOSE DOWN', 'Stop and remove Docker Compose services', '🛑',
                              danger=True),
            aliases=('d',), section='BASIC', usage='[-vo] [-f FILE] [SERVICE...]', summary='Stop services',
            flags=DOWN_FLAGS, targets=SERVICES, mutating=True),
    Command('ps', passthrough('ps', formatted=True), aliases=('p',), section='STATUS', summary='List services'),
    Command('ps1', passthrough('ps', '--format', PS1_FORMAT, formatted=True), aliases=('p1',),
            section='STATUS', summary='List compact format'),
    Command('psp', passthrough('ps', '--format', PSP_FORMAT, formatted=True), section='STATUS',
            summary='List with ports'),
    Command('info', info, section='STATUS', summary='Show compose configuration'),
    Command('stats', passthrough('stats', formatted=True), aliases=('s',), section='LOGS & STATS',
            summary='Real-time stats', targets=SERVICES),
    Command('s1', passthrough('stats', '--no-stream', formatted=True), section='LOGS & STATS',
            summary='Stats once', targets=SERVICES),
    Command('logs', logs, aliases=('l',), section='LOGS & STATS', usage='[SERVICE...]',
            summary='Real-time logs', targets=SERVICES),
    Command('l100', passthrough('logs', '--tail', '100', '-f'), section='LOGS & STATS',
            summary='Logs with tail 100', targets=SERVICES),
    Command('l300', passthrough('logs', '--tail', '300', '-f'), section='LOGS & STATS',
            summary='Logs with tail 300', targets=SERVICES),
    Command('l500', passthrough('logs', '--tail', '500', '-f'), section='LOGS & STATS',
            summary='Logs with tail 500', targets=SERVICES),
    Command('x', exec_passthrough, section='EXEC', usage='SERVICE CMD', summary='Execute command',
            targets=SERVICES, single_target=True),
    Command('sh', shell_in('sh'), section='EXEC', usage='SERVICE', summary='Shell sh', targets=SERVICES,
            single_target=True),
    Command('bash', shell_in('bash'), section='EXEC', usage='SERVICE', summary='Shell bash', targets=SERVICES,
            single_target=True),
    Command('start', lifecycle('DOCKER COMPOSE START', 'Start existing service containers', '▶️'),
            section='CONTROL', usage='[SERVICE...]', summary='Start services', flags=FILE_ONLY,
            targets=SERVICES, mutating=True),
    Command('stop', lifecycle('DOCKER COMPOSE STOP', 'Stop service containers', '🛑', danger=True),
            section='CONTROL', usage='[SERVICE...]', summary='Stop services', flags=FILE_ONLY,
            targets=SERVICES, mutating=True),
    Command('restart', lifecycle('DOCKER COMPOSE RESTART', 'Restart service containers', '🔄'),
            section='CONTROL', usage='[SERVICE...]', summary='Restart services', flags=FILE_ONLY,
            targets=SERVICES, mutating=True),
    Command('build', lifecycle('DOCKER COMPOSE BUILD', 'Build Docker Compose services', '🔨'),
            aliases=('b',), section='CONTROL', usage='[-np] [-f FILE] [SERVICE...]', summary='Build services',
            flags=BUILD_FLAGS, targets=SERVICES, mutating=True),
    Command('pull', lifecycle('DOCKER COMPOSE PULL', 'Pull service images', '⬇️', gated=False),
            section='CONTROL', usage='[SERVICE...]', summary='Pull images', flags=FILE_ONLY, targets=SERVICES),
    Command('default', default, section='FILE MANAGEMENT', usage='[FILE|remove]',
            summary='Show, set or remove the default compose file', targets=COMPOSE_FILES,
            keywords=('remove', 'rm')),
    Command('help', show_help, aliases=('h',), section='HELP', summary='Show this help'),
)

COMPOSE_GROUP = CommandGroup(
    'dc',
    '🐙 Docker Compose Helper (dc)',
    COMPOSE_COMMANDS,
    fallback=fallback,
    footer=(
        'QUICK:',
        '  dcq PATTERN CMD                    - Execute in first matching service',
        '  dclt [-rw] [PATTERN...]            - Tail logs of matching services',
        '  dcpr [-as] [SERVICE...]            - Show git.properties of services',
        '',
        'Examples:',
        "  dc x api bash                      - Bash in 'api' service",
        '  dc ul web                          - Up web service + logs',
        '  dc up --force -l                   - Up forcing recreation + logs',
        '  dc up -pl                          - Up with pull + logs',
        '  dc up -f prod.yml                  - Up using prod.yml compose file',
        '  dc default app.yml                 - Set app.yml as default compose file',
        "  dcq data psql                      - psql in first service containing 'data'",
    ),
)


# ----------------------------------------------------------------------
# Standalone verbs
# ----------------------------------------------------------------------

def dcup(session: Session, command: Command, args: list) -> int:
    return run_up(session, args, verb='dcup')


def quick_exec(session: Session, command: Command, args: list) -> int:
    """dcq PATTERN CMD...: exec in the first running service containing PATTERN."""
    if not args:
        raise MissingTargetError('dcq PATTERN [COMMAND...]')
    pattern, rest = args[0], args[1:]
    compose_file = _compose(session)
    runtime = session.runtime
    service = first_match(pattern, runtime.list_services(compose_file, running=True), kind='service')
    session.console.success(f"Executing in service: {service}")
    return runtime.run(runtime.compose_cmd(compose_file, 'exec', service, *rest))


def log_tail(session: Session, command: Command, args: list) -> int:
    """dclt [-r] [-w] [PATTERN...]: follow logs of the services matching any pattern."""
    parsed = classify('dclt', DCLT_FLAGS, args)
    compose_file = _compose(session)
    runtime = session.runtime
    console = session.console

    services = runtime.list_services(compose_file)
    if not services:
        raise NoMatchError('compose services', [])

    regex_mode = parsed.has('regex')
    try:
        matched = resolve_many(parsed.targets, services, regex_mode=regex_mode)
    except re.error as e:
        raise UsageError(f"Invalid regular expression: {e}") from e
    if not matched:
        raise NoMatchError('services', parsed.targets)

    if regex_mode:
        unmatched = [p for p in parsed.targets if not any(re.fullmatch(p, m) for m in matched)]
    else:
        unmatched = [p for p in dedupe(parsed.targets) if p not in matched]
    for pattern in unmatched:
        console.warn(f"No service matching: {pattern}")

    if parsed.has('wait'):
        if not confirm_targets(console, 'Services found', matched, assume_yes=session.assume_yes):
            raise OperationCancelledError()
    else:
        console.info(f"Services found: {' '.join(matched)}")

    tail = str(session.settings.log_tail)
    return runtime.run(runtime.compose_cmd(compose_file, 'logs', '--tail', tail, '-f', *matched))


def properties(session: Session, command: Command, args: list) -> int:
    """dcpr [-a] [-s] [SERVICE...]: git.properties of compose services."""
    parsed = classify('dcpr', DCPR_FLAGS, args)
    compose_file = _compose(session)
    runtime = session.runtime
    console = session.console
    settings = session.settings

    if parsed.has('all'):
        services = runtime.list_services(compose_file)
        if not services:
            raise NoMatchError('compose services', [])
    else:
        services = dedupe(parsed.targets)
        if not services:
            raise MissingTargetError('dcpr <service> | dcpr -a | dcpr -a -s')

    if parsed.has('summary'):
        script = probe_script(settings.properties_paths)
        rows = []
        for service in services:
            console.progress(f"Processing: {service}")
            try:
                output = runtime.capture(runtime.compose_cmd(compose_file, 'exec', '-T', service, 'sh', '-c', script))
            except RuntimeInvocationError as e:
                console.warn(f"{service}: {e.stderr.strip() or e}")
                continue
            if not output.strip():
                logger.debug(f"No git.properties in {service}")
                continue
            rows.append(row_from_properties(service, parse_properties(output)))
        console.progress('')
        for line in format_summary(rows, settings.message_width):
            console.line(line)
        return 0

    script = probe_script(settings.properties_paths, not_found=NOT_FOUND_MARKER)
    failures: list[RuntimeInvocationError] = []
    for service in services:
        if len(services) > 1:
            console.line(f"# {service}")
        try:
            runtime.run(runtime.compose_cmd(compose_file, 'exec', service, 'sh', '-c', script))
        except RuntimeInvocationError as e:
            failures.append(e)
        if len(services) > 1:
            console.line()
    if failures:
        raise failures[0]
    return 0


DCUP = Command('dcup', dcup, usage='[-pbl] [--force] [-f FILE] [SERVICE...]', summary='Alias for dc up',
               flags=UP_FLAGS, targets=SERVICES, mutating=True)
DCQ = Command('dcq', quick_exec, usage='PATTERN CMD', summary='Execute in first matching service',
              targets=SERVICES, single_target=True)
DCLT = Command('dclt', log_tail, usage='[-r] [-w] [PATTERN...]', summary='Tail logs of matching services',
               flags=DCLT_FLAGS, targets=SERVICES)
DCPR = Command('dcpr', properties, usage='[-a] [-s] [SERVICE...]', summary='Show git.properties',
               flags=DCPR_FLAGS, targets=SERVICES)


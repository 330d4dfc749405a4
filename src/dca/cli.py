#!/usr/bin/env python3
"""
docker-color-aliases front-end.

Usage:
    dca [--log-level LEVEL] [--no-color] [-y|--yes] <verb> [args...]

Everything after the verb is handed to the verb unparsed, so
`dca dc up -pl` behaves exactly like the shell function `dc up -pl`.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from .cli_utils import get_cli_version
from .commands import Registry, Session
from .completion import CompletionProvider
from .config_constants import ENV_ASSUME_YES, ENV_LOG_LEVEL, ENV_NO_COLOR, user_settings_path
from .errors import DcaError, OperationCancelledError, RuntimeInvocationError, UsageError
from .registry import build_registry
from .runtime import Runtime
from .settings import Settings, load_settings, write_settings
from .shell_init import render_shell_init
from .styles import Console, select_style

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130

LOG_LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
}


def configure_logging(log_level: Optional[str] = None, env: Optional[dict] = None) -> str:
    """
    Route dispatcher diagnostics to stderr.

    The level comes from --log-level, then $DCA_LOG_LEVEL, then WARNING. An
    unrecognized environment value is reported and ignored.

    Returns:
        The level name in effect
    """
    env = os.environ if env is None else env
    requested = (log_level or env.get(ENV_LOG_LEVEL) or 'WARNING').upper()
    level = LOG_LEVELS.get(requested, logging.WARNING)

    logging.basicConfig(level=level, format='[%(levelname)s] %(message)s', stream=sys.stderr, force=True)
    if requested not in LOG_LEVELS:
        logger.warning(f"Ignoring {ENV_LOG_LEVEL}={requested}, expected one of {', '.join(LOG_LEVELS)}")
        requested = 'WARNING'
    logger.debug(f"Logging configured: {requested}")
    return requested


def parse_arguments(argv: Optional[list] = None) -> argparse.Namespace:
    """
    Parse the front-end options and split off the verb.

    Supports arguments:
    1. --log-level <level> - DEBUG, INFO, WARNING or ERROR (default: $DCA_LOG_LEVEL or WARNING)
    2. --no-color - Disable styled output and the formatter
    3. -y, --yes - Skip confirmation reads (the summary is still shown)
    4. --version - Print the version and exit
    """
    parser = argparse.ArgumentParser(
        prog='dca',
        allow_abbrev=False,
        description='Docker and docker compose shortcuts with target resolution and confirmation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Verbs:
  d, dc, dq, dcq, dcup, dclt, dcpr, dstatus, dcleanup
  shell-init              Print the bash integration snippet
  complete WORDS...       Completion candidates, one per line
  settings [show|init|path]

Examples:
  # Install the shell functions and aliases
  eval "$(%(prog)s shell-init)"

  # Start services with pull and logs, no prompt
  %(prog)s -y dc up -pl web

  # Tail logs of every service matching a regex
  %(prog)s dclt -r 'api-.*'
        '''
    )

    parser.add_argument(
        '--log-level',
        choices=list(LOG_LEVELS),
        type=str.upper,
        help=f'Logging verbosity (default: ${ENV_LOG_LEVEL} or WARNING)'
    )
    parser.add_argument(
        '--no-color',
        action='store_true',
        help='Disable colors and the output formatter'
    )
    parser.add_argument(
        '-y', '--yes',
        action='store_true',
        help='Assume yes at confirmation prompts'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f"%(prog)s {get_cli_version()}"
    )
    parser.add_argument('verb', help='Verb to run')
    parser.add_argument('args', nargs=argparse.REMAINDER, help='Arguments handed to the verb')

    return parser.parse_args(argv)


def build_session(
    args: argparse.Namespace,
    settings: Settings,
    cwd: Path,
    env: dict,
    console: Optional[Console] = None,
) -> Session:
    no_color = args.no_color or bool(env.get(ENV_NO_COLOR))
    if console is None:
        style = select_style('never' if args.no_color else settings.color, sys.stdout, no_color)
        console = Console(style=style)
    formatter = settings.formatter if console.style.enabled and settings.formatter else None
    assume_yes = args.yes or env.get(ENV_ASSUME_YES, '').lower() in ('1', 'true', 'yes')
    return Session(
        cwd=cwd,
        console=console,
        runtime=Runtime(cwd, formatter=formatter),
        settings=settings,
        env=env,
        assume_yes=assume_yes,
    )


def run_settings(session: Session, args: list, env: dict) -> int:
    import tomli_w

    action = args[0] if args else 'show'
    path = user_settings_path(env)
    console = session.console

    if action == 'path':
        console.line(str(path))
        return 0
    if action == 'show':
        console.line(f"# {path}{'' if path.exists() else ' (not present, defaults)'}")
        console.line(tomli_w.dumps(session.settings.to_toml_dict()).rstrip())
        return 0
    if action == 'init':
        if path.exists() and '--force' not in args[1:]:
            console.warn(f"Settings file already exists: {path} (use --force to overwrite)")
            return 1
        write_settings(path, Settings())
        console.success(f"Settings written to {path}")
        return 0
    raise UsageError("Usage: dca settings [show|init [--force]|path]")


def run_complete(registry: Registry, session: Session, words: list) -> int:
    if words and words[0] == '--':
        words = words[1:]
    for candidate in CompletionProvider(registry, session).complete(words):
        session.console.line(candidate)
    return 0


def dispatch(registry: Registry, session: Session, verb: str, args: list, env: dict) -> int:
    if verb == 'shell-init':
        session.console.line(render_shell_init(registry))
        return 0
    if verb == 'complete':
        return run_complete(registry, session, args)
    if verb == 'settings':
        return run_settings(session, args, env)
    return registry.dispatch(session, verb, args)


def main(argv: Optional[list] = None) -> int:
    args = parse_arguments(argv)
    env = dict(os.environ)
    configure_logging(args.log_level, env)
    cwd = Path.cwd()

    try:
        settings = load_settings(user_settings_path(env))
    except DcaError as e:
        Console().error(str(e))
        return e.exit_code

    session = build_session(args, settings, cwd, env)
    console = session.console
    registry = build_registry()

    try:
        return dispatch(registry, session, args.verb, list(args.args), env)
    except OperationCancelledError as e:
        console.notice(str(e))
        return e.exit_code
    except RuntimeInvocationError as e:
        console.error(e.stderr.strip() or str(e))
        return e.exit_code
    except DcaError as e:
        console.error(str(e))
        return e.exit_code
    except FileNotFoundError as e:
        console.error(str(e))
        return 1
    except KeyboardInterrupt:
        console.line()
        console.warn('Interrupted')
        return EXIT_INTERRUPTED


if __name__ == '__main__':
    raise SystemExit(main())

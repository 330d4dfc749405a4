#!/usr/bin/env python3
"""
Command registry: the mapping from verb / subcommand names to handlers.

A CommandGroup (`d`, `dc`) maps every subcommand name and alias to one
Command. The same objects drive dispatch, the help screens and the
completion vocabulary.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

from .arguments import NO_FLAGS, FlagSpec
from .compose_file import display_path, resolve_compose_file
from .confirm import MutatingOperation, gate
from .errors import OperationCancelledError, UsageError
from .runtime import Runtime
from .settings import Settings
from .styles import Console

logger = logging.getLogger(__name__)

# Target kinds, used by completion to pick the candidate universe
CONTAINERS = 'containers'
SERVICES = 'services'
COMPOSE_FILES = 'compose-files'


@dataclass
class Session:
    """Everything one invocation needs; built fresh for every run."""

    cwd: Path
    console: Console
    runtime: Runtime
    settings: Settings = field(default_factory=Settings)
    env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    assume_yes: bool = False

    def compose_file(self, override: Optional[str] = None) -> Path:
        return resolve_compose_file(self.cwd, override, self.env)

    def display(self, path: Path) -> str:
        return display_path(path, self.cwd)

    def gate(self, op: MutatingOperation, danger: bool = False) -> None:
        """Render OP and require confirmation; raise when declined."""
        if not gate(self.console, op, assume_yes=self.assume_yes, danger=danger):
            raise OperationCancelledError()


Handler = Callable[[Session, 'Command', list], int]


@dataclass(frozen=True)
class Command:
    name: str
    handler: Handler
    aliases: tuple[str, ...] = ()
    summary: str = ''
    section: str = ''
    usage: str = ''
    flags: FlagSpec = NO_FLAGS
    targets: Optional[str] = None
    mutating: bool = False
    # Fixed words accepted as the first argument (e.g. `dc default remove`)
    keywords: tuple[str, ...] = ()
    # Only the first positional names a target; the rest is command text
    single_target: bool = False

    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)

    def __call__(self, session: Session, args: Sequence[str]) -> int:
        return self.handler(session, self, list(args))


class CommandGroup:
    """A verb with subcommands, e.g. `d ps` or `dc up`."""

    def __init__(
        self,
        name: str,
        title: str,
        commands: Sequence[Command],
        fallback: Handler,
        footer: Sequence[str] = (),
    ) -> None:
        self.name = name
        self.title = title
        self.commands = list(commands)
        self.fallback = fallback
        self.footer = list(footer)
        self._index: dict[str, Command] = {}
        for command in self.commands:
            for word in command.names():
                if word in self._index:
                    raise ValueError(f"Duplicate subcommand '{word}' in group '{name}'")
                self._index[word] = command

    def lookup(self, word: str) -> Optional[Command]:
        return self._index.get(word)

    def vocabulary(self) -> list[str]:
        return [word for command in self.commands for word in command.names()]

    def dispatch(self, session: Session, args: Sequence[str]) -> int:
        if not args:
            return self.dispatch(session, ['help'])
        command = self.lookup(args[0])
        if command is None:
            logger.debug(f"'{self.name} {args[0]}' not registered, passing through")
            return self.fallback(session, None, list(args))
        logger.debug(f"Dispatching {self.name} {command.name}")
        return command(session, args[1:])

    def help_lines(self) -> list[str]:
        lines = [self.title, '']
        sections: dict[str, list[Command]] = {}
        for command in self.commands:
            sections.setdefault(command.section, []).append(command)
        for section, commands in sections.items():
            lines.append(f"{section}:")
            for command in commands:
                spelled = ', '.join(f"{self.name} {word}" for word in command.names())
                if command.usage:
                    spelled = f"{spelled} {command.usage}"
                lines.append(f"  {spelled:<34} - {command.summary}")
            lines.append('')
        lines.extend(self.footer)
        return lines


class Registry:
    """All verbs reachable from the front-end and the shell snippet."""

    def __init__(
        self,
        groups: Sequence[CommandGroup],
        verbs: Sequence[Command],
        shell_aliases: Mapping[str, tuple[str, ...]],
    ) -> None:
        self.groups = {group.name: group for group in groups}
        self.verbs = {verb.name: verb for verb in verbs}
        self.shell_aliases = dict(shell_aliases)

    def names(self) -> list[str]:
        return [*self.groups, *self.verbs]

    def has(self, verb: str) -> bool:
        return verb in self.groups or verb in self.verbs

    def expand_alias(self, words: Sequence[str]) -> list[str]:
        """Rewrite a shell alias (`dps -a`) into its verb form (`d ps -a`)."""
        words = list(words)
        if words and words[0] in self.shell_aliases:
            return [*self.shell_aliases[words[0]], *words[1:]]
        return words

    def resolve(self, words: Sequence[str]) -> Optional[Command]:
        """Command WORDS would reach, or None when a group passes them through."""
        words = self.expand_alias(words)
        if not words:
            return None
        if words[0] in self.groups:
            return self.groups[words[0]].lookup(words[1]) if len(words) > 1 else None
        return self.verbs.get(words[0])

    def dispatch(self, session: Session, verb: str, args: Sequence[str]) -> int:
        words = self.expand_alias([verb, *args])
        verb, args = words[0], words[1:]
        if verb in self.groups:
            return self.groups[verb].dispatch(session, args)
        if verb in self.verbs:
            return self.verbs[verb](session, args)
        raise UsageError(f"Unknown command: {verb}")

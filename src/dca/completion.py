#!/usr/bin/env python3
"""
Shell completion back-end.

The shell passes the words typed so far; the last word is the partial
token. Candidates come from the registry (subcommand vocabulary and flag
tables) and from the same discovery calls execution uses, so completion
never disagrees with what exists right now.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from .arguments import used_flag_names
from .commands import COMPOSE_FILES, CONTAINERS, SERVICES, Command, Registry, Session
from .compose_file import list_compose_files
from .errors import DcaError

logger = logging.getLogger(__name__)

FILE_FLAGS = ('-f', '--file')


def _filter(candidates: Iterable[str], partial: str) -> list[str]:
    seen: set[str] = set()
    result = []
    for candidate in candidates:
        if candidate.startswith(partial) and candidate not in seen:
            seen.add(candidate)
            result.append(candidate)
    return result


class CompletionProvider:
    def __init__(self, registry: Registry, session: Session) -> None:
        self.registry = registry
        self.session = session

    def complete(self, words: Sequence[str]) -> list[str]:
        """
        Complete the last of WORDS.

        Args:
            words: Verb (or shell alias) first, partial token last

        Returns:
            Matching candidates, in registry / discovery order
        """
        if not words:
            return self.registry.names()
        if len(words) == 1:
            return _filter([*self.registry.names(), *self.registry.shell_aliases], words[0])

        words = self.registry.expand_alias(words)
        verb, previous, partial = words[0], list(words[1:-1]), words[-1]

        group = self.registry.groups.get(verb)
        if group is not None:
            if not previous:
                return _filter(group.vocabulary(), partial)
            command = group.lookup(previous[0])
            if command is None:
                return []
            return self.complete_command(command, previous[1:], partial)

        command = self.registry.verbs.get(verb)
        if command is None:
            return []
        return self.complete_command(command, previous, partial)

    def complete_command(self, command: Command, previous: Sequence[str], partial: str) -> list[str]:
        spec = command.flags
        if spec.accepts_file and previous and previous[-1] in FILE_FLAGS:
            return _filter(list_compose_files(self.session.cwd), partial)

        if partial.startswith('-'):
            used = used_flag_names(spec, previous)
            candidates = [s for flag in spec.flags if flag.name not in used for s in flag.spellings()]
            if spec.accepts_file and not any(word in FILE_FLAGS for word in previous):
                candidates.append('-f')
            return _filter(candidates, partial)

        positionals = [w for i, w in enumerate(previous) if not w.startswith('-')
                       and not (i > 0 and previous[i - 1] in FILE_FLAGS and spec.accepts_file)]

        if command.keywords or command.targets == COMPOSE_FILES:
            if positionals:
                return []
            return _filter([*list_compose_files(self.session.cwd), *command.keywords], partial)

        if command.single_target and positionals:
            return []

        override = None
        if spec.accepts_file:
            override = next((previous[i + 1] for i, word in enumerate(previous[:-1]) if word in FILE_FLAGS), None)
        return _filter(self.universe(command.targets, override), partial)

    def universe(self, kind: Optional[str], override: Optional[str] = None) -> list[str]:
        """Live target universe for KIND; discovery failures yield nothing."""
        runtime = self.session.runtime
        try:
            if kind == CONTAINERS:
                return runtime.list_containers()
            if kind == SERVICES:
                return runtime.list_services(self.session.compose_file(override))
        except (DcaError, FileNotFoundError) as e:
            logger.debug(f"Completion discovery failed: {e}")
        return []

#!/usr/bin/env python3
"""
Argument classification for the structured verbs.

Splits a mixed argument list into flags, an optional -f override and
positional targets:
- "-f FILE" / "--file FILE" / "--file=FILE" sets the override
- "--name" sets a known long flag
- "-xyz" is a cluster: every letter is a separate short flag
- "--" ends flag parsing; everything after it is a target
- anything else (including a lone "-") is a target, in encounter order
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .errors import MissingFlagArgumentError, UnknownFlagError


@dataclass(frozen=True)
class Flag:
    name: str
    short: Optional[str] = None
    long: Optional[str] = None
    # Arguments contributed to the runtime command line when the flag is set
    runtime_args: tuple[str, ...] = ()
    help: str = ''

    def spellings(self) -> list[str]:
        spelled = []
        if self.short:
            spelled.append(f"-{self.short}")
        if self.long:
            spelled.append(f"--{self.long}")
        return spelled


@dataclass(frozen=True)
class FlagSpec:
    flags: tuple[Flag, ...] = ()
    accepts_file: bool = False

    def by_short(self, letter: str) -> Optional[Flag]:
        for flag in self.flags:
            if flag.short == letter:
                return flag
        return None

    def by_long(self, name: str) -> Optional[Flag]:
        for flag in self.flags:
            if flag.long == name:
                return flag
        return None

    def by_name(self, name: str) -> Optional[Flag]:
        for flag in self.flags:
            if flag.name == name:
                return flag
        return None

    def runtime_args(self, enabled: Iterable[str]) -> list[str]:
        """Translate enabled flag names into runtime arguments, in declaration order."""
        enabled = set(enabled)
        args: list[str] = []
        for flag in self.flags:
            if flag.name in enabled:
                args.extend(flag.runtime_args)
        return args

    def candidates(self) -> list[str]:
        spelled = [s for flag in self.flags for s in flag.spellings()]
        if self.accepts_file:
            spelled.append('-f')
        return spelled


NO_FLAGS = FlagSpec()


@dataclass
class ParsedInvocation:
    verb: str
    raw_args: list[str]
    flags: frozenset[str] = frozenset()
    override_file: Optional[str] = None
    targets: list[str] = field(default_factory=list)

    def has(self, name: str) -> bool:
        return name in self.flags


def _looks_like_flag(token: str) -> bool:
    return token.startswith('-') and token != '-'


def classify(verb: str, spec: FlagSpec, args: Sequence[str]) -> ParsedInvocation:
    """
    Classify ARGS for VERB against its flag table.

    Raises:
        UnknownFlagError: For an unrecognized long flag or cluster letter
        MissingFlagArgumentError: When -f has no value or is followed by a flag
    """
    flags: set[str] = set()
    targets: list[str] = []
    override: Optional[str] = None
    tokens = list(args)
    i = 0

    while i < len(tokens):
        token = tokens[i]

        if token == '--':
            targets.extend(tokens[i + 1:])
            break

        if spec.accepts_file and token in ('-f', '--file'):
            if i + 1 >= len(tokens) or _looks_like_flag(tokens[i + 1]):
                raise MissingFlagArgumentError(token)
            override = tokens[i + 1]
            i += 2
            continue

        if spec.accepts_file and token.startswith('--file='):
            value = token[len('--file='):]
            if not value:
                raise MissingFlagArgumentError('--file')
            override = value
        elif token.startswith('--'):
            flag = spec.by_long(token[2:])
            if flag is None:
                raise UnknownFlagError(token, verb)
            flags.add(flag.name)
        elif _looks_like_flag(token):
            for letter in token[1:]:
                flag = spec.by_short(letter)
                if flag is None:
                    raise UnknownFlagError(f"-{letter}", verb)
                flags.add(flag.name)
        else:
            targets.append(token)
        i += 1

    return ParsedInvocation(
        verb=verb,
        raw_args=tokens,
        flags=frozenset(flags),
        override_file=override,
        targets=targets,
    )


def used_flag_names(spec: FlagSpec, words: Iterable[str]) -> set[str]:
    """Flag names already present in WORDS (unknown spellings are ignored)."""
    used: set[str] = set()
    for word in words:
        if word.startswith('--'):
            flag = spec.by_long(word[2:])
            if flag is not None:
                used.add(flag.name)
        elif _looks_like_flag(word):
            for letter in word[1:]:
                flag = spec.by_short(letter)
                if flag is not None:
                    used.add(flag.name)
    return used

#!/usr/bin/env python3
"""Target resolution: bulk expansion, fuzzy single match, pattern sets."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .errors import NoMatchError

logger = logging.getLogger(__name__)


def dedupe(items: Iterable[str]) -> list[str]:
    """Drop repeats, keeping the first occurrence order."""
    seen: set[str] = set()
    unique: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


@dataclass
class TargetSet:
    requested: list[str]
    resolved: list[str]
    universe: list[str] = field(default_factory=list)

    @property
    def is_everything(self) -> bool:
        return not self.requested

    def unknown(self) -> list[str]:
        """Requested names the runtime did not report (left for the runtime to reject)."""
        known = set(self.universe)
        return [name for name in self.resolved if name not in known]


def resolve(requested: Sequence[str], universe: Sequence[str]) -> TargetSet:
    """
    Expand an empty request to the whole universe; otherwise dedupe the request.

    Requested names are not validated against the universe: an unknown name
    fails later, inside the runtime call.
    """
    requested = list(requested)
    universe = list(universe)
    resolved = list(universe) if not requested else dedupe(requested)
    return TargetSet(requested=requested, resolved=resolved, universe=universe)


def first_match(pattern: str, universe: Sequence[str], kind: str = 'container') -> str:
    """
    Case-insensitive substring match; the first hit in universe order wins.

    Raises:
        NoMatchError: When nothing contains PATTERN
    """
    needle = pattern.lower()
    for name in universe:
        if needle in name.lower():
            logger.debug(f"'{pattern}' matched {kind} {name}")
            return name
    raise NoMatchError(kind, [pattern])


def resolve_many(patterns: Sequence[str], universe: Sequence[str], regex_mode: bool = False) -> list[str]:
    """
    Select universe entries matching any pattern, in universe order.

    Exact mode compares verbatim. Regex mode requires the whole name to match.
    No patterns selects the whole universe.

    Raises:
        re.error: For an invalid regular expression
    """
    if not patterns:
        return dedupe(universe)

    if regex_mode:
        compiled = [re.compile(p) for p in patterns]
        matched = (name for name in universe if any(rx.fullmatch(name) for rx in compiled))
    else:
        wanted = set(patterns)
        matched = (name for name in universe if name in wanted)
    return dedupe(matched)

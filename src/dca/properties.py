#!/usr/bin/env python3
"""
git.properties extraction from running compose services.

The probe runs inside the container and prints the first candidate file
that exists. The summary table sizes every column to its widest value and
caps the commit message column, marking truncated messages with an ellipsis.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

NOT_FOUND_MARKER = '❌ git.properties not found'

SUMMARY_HEADERS = ('SERVICE_NAME', 'COMMIT_ID', 'USER_EMAIL', 'BRANCH', 'COMMIT_MESSAGE')
COLUMN_SEPARATOR = ' | '
TRUNCATION_MARK = '…'


def probe_script(paths: Sequence[str], not_found: Optional[str] = None) -> str:
    """Build the `sh -c` script that cats the first existing candidate path."""
    branches = []
    for index, path in enumerate(paths):
        quoted = shlex.quote(path)
        keyword = 'if' if index == 0 else 'elif'
        branches.append(f"{keyword} [ -f {quoted} ]; then cat {quoted};")
    if not_found is not None:
        branches.append(f"else echo {shlex.quote(not_found)};")
    return ' '.join(branches) + ' fi'


def parse_properties(text: str) -> dict[str, str]:
    """Parse key=value lines; comments and blank lines are skipped, first key wins."""
    props: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith(('#', '!')) or '=' not in line:
            continue
        key, value = line.split('=', 1)
        props.setdefault(key.strip(), value.strip())
    return props


@dataclass(frozen=True)
class PropertiesRow:
    service: str
    commit_id: str
    user_email: str
    branch: str
    message: str

    def cells(self) -> tuple[str, ...]:
        return (self.service, self.commit_id, self.user_email, self.branch, self.message)


def row_from_properties(service: str, props: dict[str, str]) -> PropertiesRow:
    message = props.get('git.commit.message.full') or props.get('git.commit.message.short', '')
    return PropertiesRow(
        service=service,
        commit_id=props.get('git.commit.id', ''),
        user_email=props.get('git.commit.user.email', ''),
        branch=props.get('git.branch', ''),
        message=' '.join(message.split()),
    )


def truncate(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    return value[:width - 1] + TRUNCATION_MARK


def column_widths(rows: Iterable[PropertiesRow], message_width: int) -> list[int]:
    widths = [len(h) for h in SUMMARY_HEADERS]
    for row in rows:
        for i, cell in enumerate(row.cells()):
            widths[i] = max(widths[i], len(cell))
    widths[-1] = min(widths[-1], max(message_width, len(SUMMARY_HEADERS[-1])))
    return widths


def format_summary(rows: Sequence[PropertiesRow], message_width: int) -> list[str]:
    """Render the rule / header / rule / rows table."""
    widths = column_widths(rows, message_width)
    total = sum(widths) + len(COLUMN_SEPARATOR) * (len(widths) - 1)

    def render(cells: Sequence[str]) -> str:
        fitted = list(cells[:-1]) + [truncate(cells[-1], widths[-1])]
        return COLUMN_SEPARATOR.join(c.ljust(w) for c, w in zip(fitted, widths)).rstrip()

    rule = '-' * total
    lines = [rule, render(SUMMARY_HEADERS), rule]
    lines.extend(render(row.cells()) for row in rows)
    return lines

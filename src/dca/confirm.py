#!/usr/bin/env python3
"""Confirmation gate for mutating operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .config_constants import CONFIRM_PROMPT, CONFIRM_TOKEN
from .styles import Console

logger = logging.getLogger(__name__)


@dataclass
class MutatingOperation:
    title: str
    description: str
    affected_targets: list[str] = field(default_factory=list)
    compose_file: Optional[str] = None
    options: list[str] = field(default_factory=list)
    additional: Optional[str] = None
    icon: str = '🐳'
    target_label: str = 'Affected services'
    requires_confirmation: bool = True
    confirmed: bool = False


def render_operation(console: Console, op: MutatingOperation, danger: bool = False) -> None:
    s = console.style
    console.heading(f"{op.title}{s.reset} {op.icon}", color=s.red if danger else s.yellow)
    console.field('Action', op.description)
    if op.compose_file:
        console.field('Compose file', op.compose_file)
    if op.options:
        console.field('Options', ' '.join(op.options))
    console.field(op.target_label, ' '.join(op.affected_targets) or '(none)', emphasis=True)
    if op.additional:
        console.field('Additional action', op.additional)
    console.line()


def is_affirmative(answer: str) -> bool:
    """Only the exact token (surrounding whitespace ignored) confirms."""
    return answer.strip() == CONFIRM_TOKEN


def gate(
    console: Console,
    op: MutatingOperation,
    assume_yes: bool = False,
    prompt: str = CONFIRM_PROMPT,
    danger: bool = False,
) -> bool:
    """
    Render OP, then ask for confirmation.

    Returns:
        True when the operation may proceed
    """
    render_operation(console, op, danger=danger)
    if not op.requires_confirmation:
        op.confirmed = True
        return True
    if assume_yes:
        logger.debug(f"Auto-confirmed: {op.title}")
        op.confirmed = True
        return True

    answer = console.ask(f"{prompt} [{CONFIRM_TOKEN}/N]: ")
    op.confirmed = is_affirmative(answer)
    return op.confirmed


def confirm_targets(
    console: Console,
    message: str,
    targets: Sequence[str],
    assume_yes: bool = False,
) -> bool:
    """Lightweight gate for read operations the user asked to confirm."""
    console.info(f"{message}: {' '.join(targets)}")
    if assume_yes:
        return True
    return is_affirmative(console.ask(f"Show logs for these services? [{CONFIRM_TOKEN}/N]: "))

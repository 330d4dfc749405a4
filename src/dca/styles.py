#!/usr/bin/env python3
"""Terminal styling and the console every command writes through."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, TextIO


@dataclass(frozen=True)
class Style:
    """ANSI sequences used for output. The plain variant holds empty strings."""

    reset: str = '\033[0m'
    red: str = '\033[1;31m'
    green: str = '\033[1;32m'
    yellow: str = '\033[1;33m'
    blue: str = '\033[1;34m'
    magenta: str = '\033[1;35m'
    cyan: str = '\033[1;36m'
    bold: str = '\033[1m'

    @property
    def enabled(self) -> bool:
        return bool(self.reset)


COLOR = Style()
PLAIN = Style(reset='', red='', green='', yellow='', blue='', magenta='', cyan='', bold='')


def select_style(mode: str, stream: TextIO, no_color_env: bool = False) -> Style:
    """
    Pick the style for a color mode.

    Args:
        mode: 'always', 'never' or 'auto' (color only when stream is a TTY)
        stream: Stream the output goes to
        no_color_env: True when NO_COLOR is set

    Returns:
        COLOR or PLAIN
    """
    if mode == 'always':
        return COLOR
    if mode == 'never' or no_color_env:
        return PLAIN
    isatty = getattr(stream, 'isatty', None)
    return COLOR if isatty is not None and isatty() else PLAIN


class Console:
    """Styled output plus the single line of input confirmation needs."""

    def __init__(
        self,
        style: Style = PLAIN,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
        input_fn: Callable[[str], str] = input,
    ) -> None:
        self.style = style
        self._out = out
        self._err = err
        self.input_fn = input_fn

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err if self._err is not None else sys.stderr

    def line(self, text: str = '') -> None:
        print(text, file=self.out, flush=True)

    def heading(self, text: str, color: Optional[str] = None) -> None:
        s = self.style
        self.line(f"{s.bold}{color if color is not None else s.cyan}{text}{s.reset}")

    def field(self, label: str, value: str, emphasis: bool = False) -> None:
        s = self.style
        value_style = f"{s.bold}{s.green}" if emphasis else s.bold
        self.line(f"{s.cyan}{label}:{s.reset} {value_style}{value}{s.reset}")

    def bullets(self, items: Iterable[str]) -> None:
        for item in items:
            self.line(f"  - {self.style.bold}{item}{self.style.reset}")

    def success(self, msg: str) -> None:
        s = self.style
        self.line(f"{s.green}{msg}{s.reset} ✅")

    def info(self, msg: str) -> None:
        s = self.style
        self.line(f"{s.green}{msg}{s.reset} 📋")

    def notice(self, msg: str) -> None:
        s = self.style
        self.line(f"{s.bold}{s.yellow}{msg}{s.reset} ⚠️")

    def warn(self, msg: str) -> None:
        s = self.style
        print(f"{s.yellow}⚠️  {msg}{s.reset}", file=self.err, flush=True)

    def error(self, msg: str) -> None:
        s = self.style
        print(f"{s.red}❌ {msg}{s.reset}", file=self.err, flush=True)

    def progress(self, msg: str) -> None:
        print(f"{msg}\r", end='', file=self.err, flush=True)

    def ask(self, prompt: str) -> str:
        """Read one line; end of input reads as an empty answer."""
        s = self.style
        try:
            return self.input_fn(f"{s.bold}{s.red}{prompt}{s.reset}")
        except EOFError:
            self.line()
            return ''

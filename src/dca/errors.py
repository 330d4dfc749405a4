"""Exception hierarchy for the dispatcher."""

from __future__ import annotations

from typing import Sequence


class DcaError(Exception):
    """Base class for every error the dispatcher reports to the user."""

    exit_code = 1


class UsageError(DcaError):
    """Malformed invocation, detected before any process is spawned."""


class UnknownFlagError(UsageError):
    def __init__(self, flag: str, verb: str | None = None) -> None:
        self.flag = flag
        self.verb = verb
        where = f" for '{verb}'" if verb else ""
        super().__init__(f"Unrecognized option{where}: {flag}")


class MissingFlagArgumentError(UsageError):
    def __init__(self, flag: str) -> None:
        self.flag = flag
        super().__init__(f"Option {flag} requires an argument")


class MissingTargetError(UsageError):
    def __init__(self, usage: str) -> None:
        self.usage = usage
        super().__init__(f"Usage: {usage}")


class NoComposeFileError(DcaError):
    """No compose manifest could be resolved for the working directory."""


class NoMatchError(DcaError):
    """Fuzzy or pattern resolution found nothing."""

    def __init__(self, kind: str, patterns: Sequence[str]) -> None:
        self.kind = kind
        self.patterns = list(patterns)
        shown = ' '.join(self.patterns) if self.patterns else '(all)'
        super().__init__(f"No {kind} found matching: '{shown}'")


class RuntimeInvocationError(DcaError):
    """The container runtime or compose tool exited non-zero."""

    def __init__(self, cmd: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr
        self.exit_code = returncode if returncode > 0 else 1
        super().__init__(f"Command failed with exit code {returncode}: {' '.join(self.cmd)}")


class OperationCancelledError(DcaError):
    """The user declined a confirmation. Benign: exits with status 0."""

    exit_code = 0

    def __init__(self, description: str = "Operation cancelled") -> None:
        super().__init__(description)


class SettingsError(DcaError):
    """The per-user settings file is unreadable or holds a wrong type."""


class ShellInitError(DcaError):
    """The shell snippet template failed to parse or render."""

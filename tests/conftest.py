"""
Shared fixtures: a recording runtime and scripted sessions.
"""

import io
from pathlib import Path

import pytest

from dca.commands import Session
from dca.errors import RuntimeInvocationError
from dca.registry import build_registry
from dca.runtime import Runtime
from dca.settings import Settings
from dca.styles import PLAIN, Console


class FakeRuntime(Runtime):
    """Records every command instead of spawning it."""

    def __init__(self, cwd, containers=(), services=(), running=None, fail_on=(), outputs=None,
                 discovery_error=None):
        super().__init__(cwd)
        self.containers = list(containers)
        self.services = list(services)
        self.running = list(services) if running is None else list(running)
        self.fail_on = set(fail_on)
        self.outputs = dict(outputs or {})
        self.discovery_error = discovery_error
        self.calls = []
        self.formatted = []
        self.captured = []
        self.discoveries = []

    def run(self, cmd, formatted=False):
        self.calls.append(list(cmd))
        self.formatted.append(formatted)
        if self.fail_on & set(cmd):
            raise RuntimeInvocationError(cmd, 1)
        return 0

    def capture(self, cmd):
        self.captured.append(list(cmd))
        for name, output in self.outputs.items():
            if name in cmd:
                return output
        raise RuntimeInvocationError(cmd, 1, 'service is not running\n')

    def list_containers(self):
        self.discoveries.append('containers')
        if self.discovery_error is not None:
            raise self.discovery_error
        return list(self.containers)

    def list_services(self, compose_file, running=False):
        self.discoveries.append(('services', Path(compose_file).name, running))
        if self.discovery_error is not None:
            raise self.discovery_error
        return list(self.running if running else self.services)


class ScriptedInput:
    """input() replacement answering from a list; EOF once exhausted."""

    def __init__(self, answers=()):
        self.answers = list(answers)
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


@pytest.fixture
def compose_project(tmp_path):
    (tmp_path / "docker-compose.yml").write_text("services:\n  web:\n    image: nginx\n")
    return tmp_path


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def make_session(tmp_path):
    def factory(answers=(), assume_yes=False, settings=None, env=None, cwd=None, **runtime_kwargs):
        cwd = cwd or tmp_path
        console = Console(style=PLAIN, out=io.StringIO(), err=io.StringIO(), input_fn=ScriptedInput(answers))
        return Session(
            cwd=cwd,
            console=console,
            runtime=FakeRuntime(cwd, **runtime_kwargs),
            settings=settings or Settings(),
            env=env or {},
            assume_yes=assume_yes,
        )

    return factory


def output_of(session):
    return session.console.out.getvalue()


def errors_of(session):
    return session.console.err.getvalue()

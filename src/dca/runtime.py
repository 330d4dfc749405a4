#!/usr/bin/env python3
"""
Child-process access to the container runtime and the compose tool.

Interactive commands inherit stdio so `exec -it` and `logs -f` behave like
they do in a shell. Listing commands can be piped through the formatter
(docker-color-output); when it is disabled or not on PATH the output is
printed unformatted.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .errors import RuntimeInvocationError

logger = logging.getLogger(__name__)

TERMINATE_TIMEOUT = 5


def _stop(proc: subprocess.Popen) -> None:
    """Terminate a child and reap it, escalating to kill."""
    if proc.poll() is not None:
        return
    try:
        proc.terminate()
        proc.wait(timeout=TERMINATE_TIMEOUT)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()


class Runtime:
    """Thin wrapper around `docker` and `docker compose` invocations."""

    def __init__(
        self,
        cwd: Path,
        formatter: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
        docker: str = 'docker',
    ) -> None:
        self.cwd = cwd
        self.formatter = formatter
        self.env = dict(env) if env is not None else None
        self.docker = docker
        self._formatter_path: Optional[str] = None
        self._formatter_checked = False

    # ------------------------------------------------------------------
    # Command builders
    # ------------------------------------------------------------------

    def docker_cmd(self, *args: str) -> list[str]:
        return [self.docker, *args]

    def compose_cmd(self, compose_file: Path | str, *args: str) -> list[str]:
        return [self.docker, 'compose', '-f', str(compose_file), *args]

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def formatter_path(self) -> Optional[str]:
        if not self._formatter_checked:
            self._formatter_checked = True
            if self.formatter:
                self._formatter_path = shutil.which(self.formatter)
                if self._formatter_path is None:
                    logger.debug(f"Formatter '{self.formatter}' not found on PATH, output unformatted")
        return self._formatter_path

    def _spawn(self, cmd: Sequence[str], **kwargs) -> subprocess.Popen:
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            return subprocess.Popen(list(cmd), cwd=self.cwd, env=self.env, **kwargs)
        except FileNotFoundError as e:
            raise RuntimeInvocationError(cmd, 127, f"{cmd[0]}: command not found") from e

    def run(self, cmd: Sequence[str], formatted: bool = False) -> int:
        """
        Run CMD with inherited stdio, blocking until it exits.

        Args:
            cmd: Command line
            formatted: Pipe stdout through the formatter when available

        Returns:
            0

        Raises:
            RuntimeInvocationError: When CMD exits non-zero
            KeyboardInterrupt: After the child has been terminated
        """
        formatter = self.formatter_path() if formatted else None
        if formatter is None:
            proc = self._spawn(cmd)
            try:
                returncode = proc.wait()
            except KeyboardInterrupt:
                _stop(proc)
                raise
        else:
            returncode = self._run_piped(cmd, formatter)

        if returncode != 0:
            raise RuntimeInvocationError(cmd, returncode)
        return 0

    def _run_piped(self, cmd: Sequence[str], formatter: str) -> int:
        producer = self._spawn(cmd, stdout=subprocess.PIPE)
        try:
            consumer = self._spawn([formatter], stdin=producer.stdout)
        except RuntimeInvocationError:
            _stop(producer)
            raise
        # Let the producer see SIGPIPE if the formatter exits first
        if producer.stdout is not None:
            producer.stdout.close()
        try:
            consumer.wait()
            return producer.wait()
        except KeyboardInterrupt:
            _stop(producer)
            _stop(consumer)
            raise

    def capture(self, cmd: Sequence[str]) -> str:
        """
        Run CMD and return its stdout.

        Raises:
            RuntimeInvocationError: With the tool's stderr when CMD exits non-zero
        """
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                list(cmd),
                cwd=self.cwd,
                env=self.env,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise RuntimeInvocationError(cmd, 127, f"{cmd[0]}: command not found") from e
        if result.returncode != 0:
            raise RuntimeInvocationError(cmd, result.returncode, result.stderr or '')
        return result.stdout

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    @staticmethod
    def _names(output: str) -> list[str]:
        return [line.strip() for line in output.splitlines() if line.strip()]

    def list_containers(self) -> list[str]:
        """Running container names, in the order the runtime reports them."""
        return self._names(self.capture(self.docker_cmd('ps', '--format', '{{.Names}}')))

    def list_services(self, compose_file: Path | str, running: bool = False) -> list[str]:
        """Services declared in the manifest, or only the running ones."""
        if running:
            cmd = self.compose_cmd(compose_file, 'ps', '--services')
        else:
            cmd = self.compose_cmd(compose_file, 'config', '--services')
        return self._names(self.capture(cmd))

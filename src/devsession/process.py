from __future__ import annotations

import shlex
import subprocess
from typing import Protocol, Sequence

from .log import Logger, Severity


class ProcessRunner(Protocol):
    def read(self, command: Sequence[str]) -> str: ...

    def call(self, command: Sequence[str]) -> None: ...


class SubprocessRunner:
    """Run external tools, failing the session when one is missing or exits non-zero."""

    def __init__(self, logger: Logger) -> None:
        self.logger = logger

    def read(self, command: Sequence[str]) -> str:
        self.logger.log(Severity.DEBUG, f"Running: {shlex.join(command)}")
        try:
            result = subprocess.run(list(command), capture_output=True, text=True, check=False)
        except FileNotFoundError:
            self.logger.fail(f"Required tool not found: {command[0]}")

        for line in result.stderr.splitlines():
            self.logger.log(Severity.DEBUG, line)
        if result.returncode != 0:
            self.logger.fail(f"{command[0]} exited with code {result.returncode}")
        return result.stdout

    def call(self, command: Sequence[str]) -> None:
        self.logger.log(Severity.DEBUG, f"Running: {shlex.join(command)}")
        try:
            result = subprocess.run(list(command), check=False)
        except FileNotFoundError:
            self.logger.fail(f"Required tool not found: {command[0]}")

        if result.returncode != 0:
            self.logger.fail(f"{command[0]} exited with code {result.returncode}")

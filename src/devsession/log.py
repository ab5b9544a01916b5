# ABOUTME: Logging and failure capability passed through session bootstrap.
# ABOUTME: Renders diagnostics with rich and aborts via click exceptions.

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NoReturn, Protocol

import click
from rich.console import Console
from rich.markup import escape


class Severity(Enum):
    DEBUG = "debug"
    WARNING = "warning"
    ERROR = "error"


_STYLES = {
    Severity.DEBUG: "dim",
    Severity.WARNING: "yellow",
    Severity.ERROR: "bold red",
}


class SessionError(click.ClickException):
    """Fatal condition that aborts the whole session."""


class Logger(Protocol):
    def log(self, severity: Severity, message: str) -> None: ...

    def fail(self, message: str) -> NoReturn: ...


class ConsoleLogger:
    """Print diagnostics to stderr as they occur."""

    def __init__(self, verbose: bool = False, console: Console | None = None) -> None:
        self.verbose = verbose
        self.console = console or Console(stderr=True, highlight=False)

    def log(self, severity: Severity, message: str) -> None:
        if severity is Severity.DEBUG and not self.verbose:
            return
        style = _STYLES[severity]
        self.console.print(f"[{style}]{severity.value}[/{style}]: {escape(message)}")

    def fail(self, message: str) -> NoReturn:
        raise SessionError(message)


@dataclass
class BufferedLogger:
    """Collect diagnostics so they can be flushed as one contiguous block."""

    records: list[tuple[Severity, str]] = field(default_factory=list)

    def log(self, severity: Severity, message: str) -> None:
        self.records.append((severity, message))

    def fail(self, message: str) -> NoReturn:
        raise SessionError(message)

    def messages(self, severity: Severity | None = None) -> list[str]:
        return [msg for sev, msg in self.records if severity is None or sev is severity]

    def flush_to(self, logger: Logger) -> None:
        for severity, message in self.records:
            logger.log(severity, message)
        self.records.clear()

# ABOUTME: Session entry points shared by run, watch, repl and ide-args.
# ABOUTME: Builds the ghci script in a temp dir and hands off to ghcid or ghci.

from __future__ import annotations

import json
import shlex
from pathlib import Path
from typing import Callable, Sequence

import click

from .assets import resolve_static_assets
from .config import GHCID_OUTPUT_FILE, SessionConfig
from .log import Logger, Severity
from .process import ProcessRunner
from .resources import get_free_port, temporary_directory
from .script import build_session_script, write_init_script
from .settings import SessionSettings, resolve_session_settings

GhciAction = Callable[[list[str], Path], None]

# TODO: let users opt out of -fwarn-redundant-constraints
GHCI_WATCH_FLAGS = ["-Wall", "-ignore-dot-ghci", "-fwarn-redundant-constraints", "-no-user-package-db"]


def ghcid_command(
    args: Sequence[str],
    script_path: Path,
    test_command: str | None = None,
    output_file: str = GHCID_OUTPUT_FILE,
) -> list[str]:
    ghci = shlex.join(["ghci", *GHCI_WATCH_FLAGS, "-ghci-script", str(script_path), *args])
    command = [
        "ghcid",
        "-W",
        f"--command={ghci}",
        "--reload=config",
        f"--outputfile={output_file}",
    ]
    if test_command is not None:
        command.append(f"--test={test_command}")
    return command


def repl_command(args: Sequence[str], script_path: Path) -> list[str]:
    return ["ghci", "-ghci-script", str(script_path), *args]


def in_project_shell(root: Path, shell: str, command: Sequence[str]) -> list[str]:
    return ["nix-shell", str(root), "-A", f"shells.{shell}", "--run", shlex.join(command)]


def run_expression(port: int, assets: str) -> str:
    # json string literals match Haskell's `show` for the paths nix produces
    return " ".join(
        [
            "run",
            str(port),
            f"(runServeAsset {json.dumps(assets)})",
            "Backend.backend",
            "Frontend.frontend",
        ]
    )


class SessionLauncher:
    def __init__(self, config: SessionConfig, logger: Logger, runner: ProcessRunner) -> None:
        self.config = config
        self.logger = logger
        self.runner = runner

    def settings(self) -> SessionSettings:
        return resolve_session_settings(self.config.package_dirs, self.logger, jobs=self.config.jobs)

    def with_ghci_script(self, action: GhciAction) -> None:
        """Resolve packages, write the init script to a temp dir, and run action inside it."""
        script = build_session_script(self.settings())
        with temporary_directory() as directory:
            script_path = write_init_script(directory, script.init_script_text)
            action(script.interpreter_args, script_path)

    def run(self) -> None:
        def action(args: list[str], script_path: Path) -> None:
            port = get_free_port()
            assets = resolve_static_assets(str(self.config.root), self.runner)
            self.logger.log(Severity.DEBUG, f"Assets impurely loaded from: {assets}")
            self._ghcid(args, script_path, run_expression(port, assets))

        self.with_ghci_script(action)

    def watch(self) -> None:
        self.with_ghci_script(lambda args, script_path: self._ghcid(args, script_path, None))

    def repl(self) -> None:
        def action(args: list[str], script_path: Path) -> None:
            command = repl_command(args, script_path)
            if self.config.project_shell:
                command = in_project_shell(self.config.root, self.config.project_shell, command)
            self.runner.call(command)

        self.with_ghci_script(action)

    def ide_args(self) -> None:
        self.with_ghci_script(lambda args, _: click.echo(" ".join(args)))

    def _ghcid(self, args: list[str], script_path: Path, test_command: str | None) -> None:
        self.runner.call(ghcid_command(args, script_path, test_command, self.config.ghcid_output))

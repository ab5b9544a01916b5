from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import click
from click_default_group import DefaultGroup

from .config import load_config
from .formatters import render_packages_table
from .launcher import SessionLauncher
from .log import ConsoleLogger
from .process import SubprocessRunner


def session_options(command: Callable[..., Any]) -> Callable[..., Any]:
    command = click.option("--verbose", "-v", is_flag=True, help="Show debug output")(command)
    command = click.option(
        "--jobs",
        "-j",
        type=click.IntRange(min=1),
        default=None,
        help="Packages to resolve in parallel [env: DEVSESSION_JOBS]",
    )(command)
    command = click.option(
        "--package",
        "packages",
        multiple=True,
        help="Local package directory, relative to the root [env: DEVSESSION_PACKAGES]",
    )(command)
    command = click.option(
        "--root",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        default=Path("."),
        show_default=True,
        help="Project root",
    )(command)
    return command


def _launcher(
    root: Path,
    packages: tuple[str, ...],
    jobs: int | None,
    verbose: bool,
    use_project_shell: bool = True,
) -> SessionLauncher:
    config = load_config(root=root, packages=packages, jobs=jobs, use_project_shell=use_project_shell)
    logger = ConsoleLogger(verbose=verbose)
    return SessionLauncher(config, logger, SubprocessRunner(logger))


@click.group(cls=DefaultGroup, default="run", default_if_no_args=True)
def cli() -> None:
    """Start interactive development sessions for a multi-package project."""


@cli.command()
@session_options
def run(root: Path, packages: tuple[str, ...], jobs: int | None, verbose: bool) -> None:
    """Serve the app under ghcid, reloading on change."""
    _launcher(root, packages, jobs, verbose).run()


@cli.command()
@session_options
def watch(root: Path, packages: tuple[str, ...], jobs: int | None, verbose: bool) -> None:
    """Typecheck the project under ghcid without running it."""
    _launcher(root, packages, jobs, verbose).watch()


@cli.command()
@session_options
@click.option("--no-project-shell", is_flag=True, help="Run ghci directly instead of in nix-shell")
def repl(
    root: Path,
    packages: tuple[str, ...],
    jobs: int | None,
    verbose: bool,
    no_project_shell: bool,
) -> None:
    """Open a ghci repl with all local packages loaded."""
    _launcher(root, packages, jobs, verbose, use_project_shell=not no_project_shell).repl()


@cli.command(name="ide-args")
@session_options
def ide_args(root: Path, packages: tuple[str, ...], jobs: int | None, verbose: bool) -> None:
    """Print the ghci arguments used by run, for editor integrations."""
    _launcher(root, packages, jobs, verbose).ide_args()


@cli.command()
@session_options
def packages(root: Path, packages: tuple[str, ...], jobs: int | None, verbose: bool) -> None:
    """Show the metadata resolved for each local package."""
    launcher = _launcher(root, packages, jobs, verbose)
    render_packages_table(launcher.settings())

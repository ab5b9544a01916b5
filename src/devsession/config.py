from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .log import SessionError

DEFAULT_PACKAGES = ("backend", "common", "frontend")
DEFAULT_PROJECT_SHELL = "ghc"
GHCID_OUTPUT_FILE = "ghcid-output.txt"
ENV_PACKAGES = "DEVSESSION_PACKAGES"
ENV_JOBS = "DEVSESSION_JOBS"
ENV_PROJECT_SHELL = "DEVSESSION_PROJECT_SHELL"


@dataclass(frozen=True)
class SessionConfig:
    root: Path
    packages: tuple[str, ...] = DEFAULT_PACKAGES
    jobs: int = 1
    project_shell: str | None = DEFAULT_PROJECT_SHELL
    ghcid_output: str = GHCID_OUTPUT_FILE

    @property
    def package_dirs(self) -> list[Path]:
        return [self.root / package for package in self.packages]


def load_config(
    root: Path | None = None,
    packages: Sequence[str] = (),
    jobs: int | None = None,
    use_project_shell: bool = True,
) -> SessionConfig:
    return SessionConfig(
        root=root or Path("."),
        packages=resolve_packages(packages),
        jobs=resolve_jobs(jobs),
        project_shell=resolve_project_shell() if use_project_shell else None,
    )


def resolve_packages(packages: Sequence[str] = ()) -> tuple[str, ...]:
    if packages:
        return tuple(packages)
    env_value = os.environ.get(ENV_PACKAGES)
    if env_value:
        parsed = tuple(item.strip() for item in env_value.split(",") if item.strip())
        if parsed:
            return parsed
    return DEFAULT_PACKAGES


def resolve_jobs(jobs: int | None = None) -> int:
    if jobs is not None:
        value = jobs
    else:
        env_value = os.environ.get(ENV_JOBS)
        if not env_value:
            return 1
        try:
            value = int(env_value)
        except ValueError:
            raise SessionError(f"Invalid {ENV_JOBS} value: {env_value!r}") from None
    if value < 1:
        raise SessionError(f"Job count must be positive, got {value}")
    return value


def resolve_project_shell() -> str | None:
    env_value = os.environ.get(ENV_PROJECT_SHELL)
    if env_value is None:
        return DEFAULT_PROJECT_SHELL
    return env_value.strip() or None

# ABOUTME: Pytest configuration and shared fixtures.
# ABOUTME: Provides a sample project tree, package factories and fake process runners.

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable, Sequence

import pytest

from devsession.log import BufferedLogger

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FakeRunner:
    """Records commands and answers `read` calls from a canned table."""

    def __init__(self, outputs: dict[str, str] | None = None) -> None:
        self.outputs = outputs or {}
        self.reads: list[list[str]] = []
        self.calls: list[list[str]] = []

    def read(self, command: Sequence[str]) -> str:
        self.reads.append(list(command))
        return self.outputs.get(command[0], "")

    def call(self, command: Sequence[str]) -> None:
        self.calls.append(list(command))


@pytest.fixture
def logger() -> BufferedLogger:
    return BufferedLogger()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """Copy the backend/common/frontend sample project into a temp dir."""
    root = tmp_path / "project"
    shutil.copytree(FIXTURES_DIR / "project", root)
    return root


@pytest.fixture
def make_package(tmp_path: Path) -> Callable[..., Path]:
    """Create a package directory holding a .cabal or package.yaml file."""

    def _make(name: str, cabal: str | None = None, hpack: str | None = None) -> Path:
        directory = tmp_path / name
        directory.mkdir(parents=True, exist_ok=True)
        if cabal is not None:
            (directory / f"{name}.cabal").write_text(cabal)
        if hpack is not None:
            (directory / "package.yaml").write_text(hpack)
        return directory

    return _make

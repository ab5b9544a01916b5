# ABOUTME: Aggregates per-package metadata into session-wide settings.
# ABOUTME: Resolves packages concurrently and partitions successes from failures.

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .descriptions import PackageInfo, parse_package_info
from .log import BufferedLogger, Logger, Severity


@dataclass
class SessionSettings:
    resolved_packages: list[PackageInfo] = field(default_factory=list)
    unresolved_packages: list[Path] = field(default_factory=list)

    def include_dirs(self) -> list[str]:
        return [path for info in self.resolved_packages for path in info.rooted_source_dirs()]

    def extensions(self) -> list[str]:
        # ordered union, first occurrence wins
        merged: dict[str, None] = {}
        for info in self.resolved_packages:
            merged.update(dict.fromkeys(info.default_extensions))
        return list(merged)


def resolve_session_settings(
    package_dirs: Sequence[Path], logger: Logger, jobs: int = 1
) -> SessionSettings:
    """Resolve every package directory and merge the results.

    Diagnostics of each package are buffered and flushed as one block, in
    input order, so concurrent resolution never interleaves them. Fails the
    session when no package resolves.
    """
    settings = SessionSettings()
    if package_dirs:
        workers = max(1, min(jobs, len(package_dirs)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            pending = []
            for directory in package_dirs:
                buffer = BufferedLogger()
                pending.append((directory, buffer, executor.submit(parse_package_info, directory, buffer)))

            for directory, buffer, future in pending:
                info = future.result()
                buffer.flush_to(logger)
                if info is None:
                    settings.unresolved_packages.append(directory)
                else:
                    settings.resolved_packages.append(info)

    if not settings.resolved_packages:
        logger.fail(f"No valid pkgs found in {_join(package_dirs)}")
    if settings.unresolved_packages:
        logger.log(Severity.WARNING, f"Failed to find pkgs in {_join(settings.unresolved_packages)}")
    return settings


def _join(paths: Sequence[Path]) -> str:
    return ", ".join(str(path) for path in paths)

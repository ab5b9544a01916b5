# ABOUTME: Types shared by the package description backends.
# ABOUTME: Defines PackageInfo and the DescriptionSource tagged union.

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .hpack import HpackPackage

NATIVE_SUFFIX = ".cabal"
FALLBACK_FILENAME = "package.yaml"


@dataclass(frozen=True)
class PackageInfo:
    """Library component settings of one local package."""

    package_root: Path
    source_dirs: tuple[str, ...]  # never empty, defaults to (".",)
    default_extensions: tuple[str, ...] = ()

    def rooted_source_dirs(self) -> list[str]:
        return [os.path.join(self.package_root, source_dir) for source_dir in self.source_dirs]


@dataclass(frozen=True)
class NativeSource:
    path: Path
    text: str


@dataclass(frozen=True)
class FallbackSource:
    path: Path
    package: HpackPackage


@dataclass(frozen=True)
class AbsentSource:
    directory: Path


DescriptionSource = Union[NativeSource, FallbackSource, AbsentSource]


def native_description_path(directory: Path) -> Path:
    stem = directory.stem or directory.resolve().stem
    return directory / f"{stem}{NATIVE_SUFFIX}"


def fallback_description_path(directory: Path) -> Path:
    return directory / FALLBACK_FILENAME

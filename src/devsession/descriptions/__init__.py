from __future__ import annotations

from pathlib import Path

from ..log import Logger, Severity
from ..parsers import build_info, parse_package_description, simplify_cond_tree
from .base import (
    AbsentSource,
    DescriptionSource,
    FallbackSource,
    NativeSource,
    PackageInfo,
    fallback_description_path,
    native_description_path,
)
from .hpack import HpackDecodeError, decode_hpack, render_cabal

__all__ = [
    "AbsentSource",
    "DescriptionSource",
    "FallbackSource",
    "NativeSource",
    "PackageInfo",
    "description_text",
    "find_description",
    "parse_package_info",
]


def find_description(directory: Path, logger: Logger) -> DescriptionSource:
    """Find the description file of a package directory, preferring the native format."""
    native_path = native_description_path(directory)
    fallback_path = fallback_description_path(directory)

    if native_path.is_file():
        try:
            text = native_path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.log(Severity.ERROR, f"Failed to read {native_path}: {exc}")
            return AbsentSource(directory=directory)
        return NativeSource(path=native_path, text=text)

    if fallback_path.is_file():
        try:
            package = decode_hpack(fallback_path)
        except HpackDecodeError as exc:
            logger.log(Severity.ERROR, f"Failed to parse {fallback_path}: {exc}")
            return AbsentSource(directory=directory)
        return FallbackSource(path=fallback_path, package=package)

    return AbsentSource(directory=directory)


def description_text(source: DescriptionSource) -> tuple[Path, str] | None:
    if isinstance(source, NativeSource):
        return source.path, source.text
    if isinstance(source, FallbackSource):
        return source.path, render_cabal(source.package)
    return None


def parse_package_info(directory: Path, logger: Logger) -> PackageInfo | None:
    """Resolve one package directory into its library settings.

    Returns None when no description exists, the fallback file cannot be
    decoded, the native text fails to parse, or the package has no library.
    Conditionals are simplified by always taking the `then` branch; flags
    are never resolved.
    """
    found = description_text(find_description(directory, logger))
    if found is None:
        return None
    path, text = found

    result = parse_package_description(text)
    for warning in result.warnings:
        logger.log(Severity.WARNING, f"{path}:{warning}")

    if not result.ok:
        logger.log(Severity.ERROR, f"Failed to parse {path}:")
        for error in result.errors:
            logger.log(Severity.ERROR, f"{path}:{error}")
        return None

    library = result.description.library
    if library is None:
        return None

    info = build_info(simplify_cond_tree(library))
    return PackageInfo(
        package_root=path.parent,
        source_dirs=tuple(info.hs_source_dirs) or (".",),
        default_extensions=tuple(info.default_extensions),
    )

# ABOUTME: Decoder for hpack package.yaml files and renderer to .cabal text.
# ABOUTME: Validates the YAML document with pydantic models.

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

CABAL_VERSION = "1.12"
INDENT = "  "


class HpackDecodeError(Exception):
    """Raised when a package.yaml file cannot be decoded."""


def _scalar(value: Any) -> str:
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f"expected a string, got {type(value).__name__}")


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [_scalar(item) for item in value]
    return [_scalar(value)]


def _dependency_list(value: Any) -> list[str]:
    if isinstance(value, dict):
        return [f"{name} {constraint}".strip() if constraint else name for name, constraint in value.items()]
    return _as_list(value)


class HpackSection(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    source_dirs: list[str] = Field(default_factory=list, alias="source-dirs")
    default_extensions: list[str] = Field(default_factory=list, alias="default-extensions")
    dependencies: list[str] = Field(default_factory=list)
    exposed_modules: list[str] = Field(default_factory=list, alias="exposed-modules")
    ghc_options: list[str] = Field(default_factory=list, alias="ghc-options")
    when: list[HpackConditional] = Field(default_factory=list)

    @field_validator("source_dirs", "default_extensions", "exposed_modules", "ghc_options", mode="before")
    @classmethod
    def _listify(cls, value: Any) -> list[str]:
        return _as_list(value)

    @field_validator("dependencies", mode="before")
    @classmethod
    def _dependencies(cls, value: Any) -> list[str]:
        return _dependency_list(value)

    @field_validator("when", mode="before")
    @classmethod
    def _conditionals(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, dict):
            return [value]
        return value

    def merged_with(self, common: HpackSection) -> HpackSection:
        """Return this section with the common fields placed in front of its own."""
        return HpackSection(
            source_dirs=common.source_dirs + self.source_dirs,
            default_extensions=common.default_extensions + self.default_extensions,
            dependencies=common.dependencies + self.dependencies,
            exposed_modules=self.exposed_modules,
            ghc_options=common.ghc_options + self.ghc_options,
            when=common.when + self.when,
        )


class HpackConditional(HpackSection):
    condition: str
    then: HpackSection | None = None
    else_: HpackSection | None = Field(default=None, alias="else")

    @field_validator("condition", mode="before")
    @classmethod
    def _condition_text(cls, value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)


class HpackPackage(HpackSection):
    name: str | None = None
    version: str = "0.0.0"
    library: HpackSection | None = None
    executables: dict[str, HpackSection] = Field(default_factory=dict)

    @field_validator("version", mode="before")
    @classmethod
    def _version_text(cls, value: Any) -> str:
        return "0.0.0" if value is None else str(value)

    @field_validator("library", mode="before")
    @classmethod
    def _empty_library(cls, value: Any) -> Any:
        # `library:` with no body still declares a library
        return {} if value is None else value


HpackSection.model_rebuild()
HpackConditional.model_rebuild()
HpackPackage.model_rebuild()


def decode_hpack(path: Path) -> HpackPackage:
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, UnicodeDecodeError, OSError) as exc:
        raise HpackDecodeError(str(exc)) from exc

    if not isinstance(document, dict):
        raise HpackDecodeError("expected a mapping at the top level")

    try:
        package = HpackPackage.model_validate(document)
    except ValidationError as exc:
        raise HpackDecodeError(str(exc)) from exc

    if package.name is None:
        package = package.model_copy(update={"name": path.parent.resolve().name})
    return package


def render_cabal(package: HpackPackage) -> str:
    """Render a decoded package as native .cabal text."""
    lines = [
        f"cabal-version: {CABAL_VERSION}",
        f"name: {package.name}",
        f"version: {package.version}",
        "build-type: Simple",
    ]

    if package.library is not None:
        lines.append("")
        lines.append("library")
        lines.extend(_render_section(package.library.merged_with(package), 1))

    for name, executable in package.executables.items():
        lines.append("")
        lines.append(f"executable {name}")
        lines.extend(_render_section(executable.merged_with(package), 1))

    return "\n".join(lines) + "\n"


def _render_section(section: HpackSection, depth: int) -> list[str]:
    pad = INDENT * depth
    lines: list[str] = []
    for name, values in (
        ("exposed-modules", section.exposed_modules),
        ("hs-source-dirs", section.source_dirs),
        ("default-extensions", section.default_extensions),
        ("ghc-options", section.ghc_options),
        ("build-depends", section.dependencies),
    ):
        if not values:
            continue
        separator = "," if name == "build-depends" else ""
        lines.append(f"{pad}{name}:")
        for index, value in enumerate(values):
            suffix = separator if index < len(values) - 1 else ""
            lines.append(f"{pad}{INDENT}  {_quote(value) if name == 'hs-source-dirs' else value}{suffix}")

    for conditional in section.when:
        lines.append(f"{pad}if {conditional.condition}")
        then_section = conditional.then if conditional.then is not None else conditional
        lines.extend(_render_section(then_section, depth + 1))
        if conditional.else_ is not None:
            lines.append(f"{pad}else")
            lines.extend(_render_section(conditional.else_, depth + 1))
    return lines


def _quote(value: str) -> str:
    if any(char.isspace() for char in value) or "," in value:
        return f'"{value}"'
    return value

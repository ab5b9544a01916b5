# ABOUTME: Layout-sensitive parser for .cabal package descriptions.
# ABOUTME: Produces conditional build trees plus warnings and structured errors.

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable

FIELD_RE = re.compile(r"^([A-Za-z0-9][A-Za-z0-9_-]*)\s*:(.*)$")
LIST_ITEM_RE = re.compile(r'"([^"]*)"|([^\s,]+)')

COMPONENT_SECTIONS = {"library", "executable", "test-suite", "benchmark", "foreign-library"}
OTHER_SECTIONS = {"flag", "source-repository", "custom-setup"}
DEPRECATED_FIELDS = {
    "extensions": "default-extensions or other-extensions",
    "hs-source-dir": "hs-source-dirs",
}
REQUIRED_FIELDS = ("name", "version")
BOM = "\ufeff"


@dataclass(frozen=True)
class ParseWarning:
    line: int
    message: str

    def __str__(self) -> str:
        return f"{self.line}: {self.message}"


@dataclass(frozen=True)
class ParseError:
    line: int
    message: str

    def __str__(self) -> str:
        return f"{self.line}: {self.message}"


@dataclass
class CondTree:
    """Fields of one block plus the conditional branches nested inside it."""

    fields: dict[str, list[str]] = field(default_factory=dict)
    branches: list[CondBranch] = field(default_factory=list)

    def add_field(self, name: str, value: str) -> None:
        self.fields.setdefault(name, []).append(value)

    def extend(self, other: CondTree) -> None:
        for name, values in other.fields.items():
            self.fields.setdefault(name, []).extend(values)
        self.branches.extend(other.branches)


@dataclass
class CondBranch:
    condition: str
    then_tree: CondTree
    else_tree: CondTree | None = None


@dataclass
class Component:
    kind: str
    name: str
    tree: CondTree


@dataclass
class GenericPackageDescription:
    fields: dict[str, str]
    library: CondTree | None
    components: list[Component] = field(default_factory=list)


@dataclass
class ParseResult:
    warnings: list[ParseWarning]
    description: GenericPackageDescription | None
    errors: list[ParseError]

    @property
    def ok(self) -> bool:
        return self.description is not None


@dataclass
class BuildInfo:
    hs_source_dirs: list[str]
    default_extensions: list[str]


@dataclass
class _Line:
    number: int
    indent: int
    text: str


@dataclass
class _Field:
    line: int
    name: str
    value: str


@dataclass
class _Section:
    line: int
    name: str
    args: str
    items: list[_Field | _Section]


def parse_package_description(text: str) -> ParseResult:
    """Parse native description text into a generic package description."""
    warnings: list[ParseWarning] = []
    errors: list[ParseError] = []

    if text.startswith(BOM):
        text = text[len(BOM):]
        warnings.append(ParseWarning(1, "Byte-order mark found at the beginning of the file"))

    lines = _tokenize(text, warnings)
    items, _ = _parse_items(lines, 0, -1, errors)
    description = _interpret(items, warnings, errors)

    if errors:
        return ParseResult(warnings=warnings, description=None, errors=errors)
    return ParseResult(warnings=warnings, description=description, errors=[])


def simplify_cond_tree(
    tree: CondTree, predicate: Callable[[str], bool] = lambda condition: True
) -> dict[str, list[str]]:
    """Flatten a conditional tree, taking `then` where predicate holds and `else` otherwise."""
    merged: dict[str, list[str]] = {name: list(values) for name, values in tree.fields.items()}
    for branch in tree.branches:
        chosen = branch.then_tree if predicate(branch.condition) else branch.else_tree
        if chosen is None:
            continue
        for name, values in simplify_cond_tree(chosen, predicate).items():
            merged.setdefault(name, []).extend(values)
    return merged


def build_info(fields: dict[str, list[str]]) -> BuildInfo:
    source_dirs: list[str] = []
    for name in ("hs-source-dirs", "hs-source-dir"):
        for value in fields.get(name, []):
            source_dirs.extend(split_list_field(value))

    extensions: list[str] = []
    for value in fields.get("default-extensions", []):
        extensions.extend(split_list_field(value))

    return BuildInfo(hs_source_dirs=source_dirs, default_extensions=extensions)


def split_list_field(value: str) -> list[str]:
    """Split a comma or whitespace separated field value, honouring double quotes."""
    items: list[str] = []
    for match in LIST_ITEM_RE.finditer(value):
        quoted, bare = match.groups()
        items.append(quoted if quoted is not None else bare)
    return items


def _tokenize(text: str, warnings: list[ParseWarning]) -> list[_Line]:
    lines: list[_Line] = []
    warned_tabs = False
    for number, raw in enumerate(text.splitlines(), start=1):
        stripped = raw.strip()
        if not stripped or stripped.startswith("--"):
            continue

        leading = raw[: len(raw) - len(raw.lstrip())]
        if "\t" in leading:
            if not warned_tabs:
                warnings.append(ParseWarning(number, "Tabs used as indentation"))
                warned_tabs = True
            leading = leading.expandtabs(8)

        lines.append(_Line(number=number, indent=len(leading), text=stripped))
    return lines


def _parse_items(
    lines: list[_Line], pos: int, floor: int, errors: list[ParseError]
) -> tuple[list[_Field | _Section], int]:
    items: list[_Field | _Section] = []
    block_indent: int | None = None

    while pos < len(lines):
        line = lines[pos]
        if line.indent <= floor:
            break
        if block_indent is None:
            block_indent = line.indent
        elif line.indent != block_indent:
            errors.append(ParseError(line.number, "Inconsistent indentation"))
            pos += 1
            continue

        match = FIELD_RE.match(line.text)
        if match:
            value_lines = [match.group(2).strip()]
            pos += 1
            while pos < len(lines) and lines[pos].indent > line.indent:
                value_lines.append(lines[pos].text)
                pos += 1
            value = "\n".join(part for part in value_lines if part)
            items.append(_Field(line=line.number, name=match.group(1).lower(), value=value))
            continue

        if line.text in ("{", "}") or line.text.endswith("{"):
            errors.append(ParseError(line.number, "Brace layout is not supported"))
            pos += 1
            continue

        name, _, args = line.text.partition(" ")
        if not re.fullmatch(r"[A-Za-z][A-Za-z0-9_-]*", name):
            errors.append(ParseError(line.number, f"Unexpected line: {line.text!r}"))
            pos += 1
            continue
        children, pos = _parse_items(lines, pos + 1, line.indent, errors)
        items.append(_Section(line=line.number, name=name.lower(), args=args.strip(), items=children))

    return items, pos


def _interpret(
    items: list[_Field | _Section],
    warnings: list[ParseWarning],
    errors: list[ParseError],
) -> GenericPackageDescription:
    fields: dict[str, str] = {}
    commons: dict[str, CondTree] = {}
    library: CondTree | None = None
    components: list[Component] = []

    for item in items:
        if isinstance(item, _Field):
            if item.name in fields:
                warnings.append(ParseWarning(item.line, f"The field {item.name!r} is specified more than once"))
            fields[item.name] = item.value
            continue

        if item.name == "common":
            commons[item.args] = _cond_tree(item.items, commons, warnings, errors)
        elif item.name in COMPONENT_SECTIONS:
            tree = _cond_tree(item.items, commons, warnings, errors)
            if item.name == "library" and not item.args:
                library = tree
            else:
                components.append(Component(kind=item.name, name=item.args, tree=tree))
        elif item.name not in OTHER_SECTIONS:
            warnings.append(ParseWarning(item.line, f"Ignoring unknown section type: {item.name}"))

    for required in REQUIRED_FIELDS:
        if required not in fields:
            errors.append(ParseError(1, f"No {required!r} field."))

    return GenericPackageDescription(fields=fields, library=library, components=components)


def _cond_tree(
    items: list[_Field | _Section],
    commons: dict[str, CondTree],
    warnings: list[ParseWarning],
    errors: list[ParseError],
) -> CondTree:
    tree = CondTree()
    seen: set[str] = set()
    last_branch: CondBranch | None = None

    for item in items:
        if isinstance(item, _Field):
            last_branch = None
            if item.name == "import":
                for common in split_list_field(item.value):
                    if common not in commons:
                        errors.append(ParseError(item.line, f"Undefined common stanza imported: {common}"))
                    else:
                        tree.extend(commons[common])
                continue
            if item.name in DEPRECATED_FIELDS:
                warnings.append(
                    ParseWarning(
                        item.line,
                        f"The field {item.name!r} is deprecated, use {DEPRECATED_FIELDS[item.name]}",
                    )
                )
            if item.name in seen:
                warnings.append(ParseWarning(item.line, f"The field {item.name!r} is specified more than once"))
            seen.add(item.name)
            tree.add_field(item.name, item.value)
        elif item.name == "if":
            last_branch = CondBranch(
                condition=item.args,
                then_tree=_cond_tree(item.items, commons, warnings, errors),
            )
            tree.branches.append(last_branch)
        elif item.name == "else":
            if last_branch is None or last_branch.else_tree is not None:
                errors.append(ParseError(item.line, "'else' without preceding 'if'"))
            else:
                last_branch.else_tree = _cond_tree(item.items, commons, warnings, errors)
            last_branch = None
        else:
            last_branch = None
            warnings.append(ParseWarning(item.line, f"Ignoring unsupported section {item.name!r}"))

    return tree

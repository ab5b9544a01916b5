# ABOUTME: Resolves the project's impure static asset path through nix.
# ABOUTME: Introspects first, then either builds the target or reads it raw.

from __future__ import annotations

from enum import Enum

from .process import ProcessRunner

STATIC_ATTR = "passthru.staticFilesImpure"


class AssetStep(Enum):
    NEED_INTROSPECT = "need-introspect"
    BUILD_THEN_READ = "build-then-read"
    READ_RAW = "read-raw"


def importable_root(root: str) -> str:
    return root if "/" in root else f"./{root}"


def introspect_command(root: str) -> list[str]:
    expression = (
        f"(let a = import {importable_root(root)} {{}}; "
        f"in toString (a.reflex.nixpkgs.lib.isDerivation a.{STATIC_ATTR}))"
    )
    # --raw drops the quotes and trailing newline
    return ["nix", "eval", "-f", root, expression, "--raw"]


def build_command(root: str) -> list[str]:
    return ["nix-build", "-E", f"(import {importable_root(root)}{{}}).{STATIC_ATTR}"]


def read_raw_command(root: str) -> list[str]:
    return ["nix", "eval", "-f", root, STATIC_ATTR, "--raw"]


def next_step(introspection: str) -> AssetStep:
    return AssetStep.BUILD_THEN_READ if introspection == "1" else AssetStep.READ_RAW


def resolve_static_assets(root: str, runner: ProcessRunner) -> str:
    step = AssetStep.NEED_INTROSPECT
    while True:
        if step is AssetStep.NEED_INTROSPECT:
            step = next_step(runner.read(introspect_command(root)))
        elif step is AssetStep.BUILD_THEN_READ:
            # nix-build has no --raw, so strip its trailing newline
            return runner.read(build_command(root)).strip()
        else:
            return runner.read(read_raw_command(root))

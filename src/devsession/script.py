from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .settings import SessionSettings

NO_USER_PACKAGE_DB = "-no-user-package-db"
INIT_SCRIPT_NAME = ".ghci"
INIT_SCRIPT = "\n".join(
    [
        ":load Backend Frontend",
        "import Obelisk.Run",
        "import qualified Frontend",
        "import qualified Backend",
    ]
) + "\n"


@dataclass(frozen=True)
class SessionScript:
    interpreter_args: list[str]
    init_script_text: str


def build_session_script(settings: SessionSettings) -> SessionScript:
    """Build ghci arguments and init script text for the resolved packages."""
    include_arg = "-i" + os.pathsep.join(settings.include_dirs())
    extension_args = [f"-X{extension}" for extension in settings.extensions()]
    return SessionScript(
        interpreter_args=[NO_USER_PACKAGE_DB, include_arg, *extension_args],
        init_script_text=INIT_SCRIPT,
    )


def write_init_script(directory: Path, text: str) -> Path:
    script_path = directory / INIT_SCRIPT_NAME
    script_path.write_text(text, encoding="utf-8")
    return script_path

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from .settings import SessionSettings


def render_packages_table(settings: SessionSettings, console: Console | None = None) -> None:
    console = console or Console()
    table = Table(title="Local Packages")
    table.add_column("Package", style="cyan")
    table.add_column("Source dirs", style="magenta")
    table.add_column("Extensions", style="green")

    for info in settings.resolved_packages:
        table.add_row(
            str(info.package_root),
            ", ".join(info.source_dirs),
            ", ".join(info.default_extensions) or "-",
        )
    for directory in settings.unresolved_packages:
        table.add_row(str(directory), "[red]unresolved[/red]", "")
    console.print(table)

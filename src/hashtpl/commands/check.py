"""Check command - parse templates without rendering them"""

from __future__ import annotations

from pathlib import Path

from hashtpl.engine import Engine
from hashtpl.errors import ParseError
from hashtpl.loader import DirectoryLoader

from .utils import console, fail


def check_command(templates: list[str], root: Path) -> None:
    """Parse each template and report unterminated blocks."""
    if not templates:
        raise fail("No templates given")

    engine = Engine(DirectoryLoader(root))
    failed = 0
    for name in templates:
        try:
            engine.parse_file(name)
        except (ParseError, OSError, UnicodeDecodeError) as exc:
            console.print(f"[red]✗[/red] {name}: {exc}")
            failed += 1
        else:
            console.print(f"[green]✓[/green] {name}")

    if failed:
        raise fail(f"{failed} of {len(templates)} templates failed to parse")

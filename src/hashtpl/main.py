"""hashtpl CLI Main Entry Point

Renders line-directive templates (#if / #for / #include, ${ expr }) into
configuration files and manifests.

Usage:
    hashtpl render deploy.tpl -c values.yaml          # print to stdout
    hashtpl render deploy.tpl -s replicas=3 -o out.yaml
    hashtpl render                                    # use hashtpl.yaml
    hashtpl check a.tpl b.tpl                         # parse only
    hashtpl --version
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from ._version import __version__
from .commands import check_command, render_command
from .commands.utils import setup_logging

typer_app = typer.Typer(add_completion=False, no_args_is_help=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"hashtpl {__version__}")
        raise typer.Exit()


@typer_app.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show info logs."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Render line-directive templates."""
    setup_logging(verbose)


@typer_app.command()
def render(
    template: Optional[str] = typer.Argument(
        None, help="Template path, relative to --root. Defaults to hashtpl.yaml's 'template'."
    ),
    context_files: Optional[List[Path]] = typer.Option(
        None, "-c", "--context", help="JSON/YAML context file (repeatable)."
    ),
    assignments: Optional[List[str]] = typer.Option(
        None, "-s", "--set", help="KEY=VALUE override, dotted keys nest (repeatable)."
    ),
    root: Optional[Path] = typer.Option(
        None, "-r", "--root", help="Directory templates and includes are read from."
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write to file instead of stdout."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "-f", "--file", help="Path to hashtpl.yaml."
    ),
) -> None:
    """Render a template.

    \b
    Examples:
        hashtpl render deploy.tpl -c values.yaml
        hashtpl render deploy.tpl -s app.name=web -s replicas=3 -o deploy.yaml
    """
    render_command(
        template,
        list(context_files or []),
        list(assignments or []),
        root=root,
        output=output,
        config_path=config_path,
    )


@typer_app.command()
def check(
    templates: Optional[List[str]] = typer.Argument(None, help="Templates to parse."),
    root: Path = typer.Option(
        Path("."), "-r", "--root", help="Directory templates are read from."
    ),
) -> None:
    """Parse templates and report unterminated #if/#for blocks."""
    check_command(list(templates or []), root)


def app() -> None:
    """Entry point for the CLI."""
    typer_app()


if __name__ == "__main__":
    app()

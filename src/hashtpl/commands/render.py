"""Render command - render one template to stdout or a file"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from hashtpl.config import ConfigError, RenderConfig, find_config_file, load_config
from hashtpl.context import build_context
from hashtpl.engine import Engine
from hashtpl.errors import ParseError, RenderError
from hashtpl.loader import DirectoryLoader

from .utils import fail

log = logging.getLogger(__name__)


def resolve_config(config_path: Optional[Path]) -> Optional[RenderConfig]:
    """Load an explicit config file, or hashtpl.yaml from cwd/parents if any."""
    if config_path is None:
        config_path = find_config_file()
        if config_path is None:
            return None
    log.info("Using config %s", config_path)
    return load_config(config_path)


def render_command(
    template: Optional[str],
    context_files: list[Path],
    assignments: list[str],
    root: Optional[Path] = None,
    output: Optional[Path] = None,
    config_path: Optional[Path] = None,
) -> None:
    """Render a template with the merged context."""
    try:
        config = resolve_config(config_path)
    except ConfigError as exc:
        raise fail(exc.message, exc.exit_code) from exc

    template = template or (config.template if config else None)
    if template is None:
        raise fail("No template given and no 'template' set in hashtpl.yaml")

    root = root or (config.root if config else Path("."))
    output = output or (config.output if config else None)
    encoding = config.encoding if config else "utf-8"

    try:
        context = build_context(config, context_files, assignments)
        engine = Engine(DirectoryLoader(root), encoding=encoding)
        rendered = engine.parse_file(template).render(context)
    except ConfigError as exc:
        raise fail(exc.message, exc.exit_code) from exc
    except ParseError as exc:
        raise fail(f"Cannot parse {template}: {exc}") from exc
    except RenderError as exc:
        raise fail(f"Cannot render {template}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise fail(f"Cannot decode {template}: {exc}") from exc
    except OSError as exc:
        raise fail(exc) from exc

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered, encoding=encoding)
        log.info("Wrote %s", output)
    else:
        typer.echo(rendered, nl=False)

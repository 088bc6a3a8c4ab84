"""Building a render context from config, files and KEY=VALUE overrides."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

import msgspec
import yaml

from hashtpl.config import ConfigError, RenderConfig

log = logging.getLogger(__name__)


def load_context_file(path: Path) -> dict[str, Any]:
    """Decode a JSON or YAML file whose top level is a mapping."""
    suffix = path.suffix.lower()
    if suffix == ".json":
        decode = msgspec.json.decode
    elif suffix in (".yaml", ".yml"):
        decode = msgspec.yaml.decode
    else:
        raise ConfigError(f"Unsupported context file type: {path}")

    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ConfigError(f"Could not read context file: {path}") from exc

    try:
        return decode(data, type=dict[str, Any])
    except msgspec.DecodeError as exc:
        raise ConfigError(f"Invalid context file {path}: {exc}") from exc


def parse_assignment(assignment: str) -> tuple[list[str], Any]:
    """Split ``a.b.c=value`` into its key path and a YAML-typed value.

    Example:
        >>> parse_assignment("app.replicas=3")
        (['app', 'replicas'], 3)
    """
    key, sep, raw = assignment.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ConfigError(f"Expected KEY=VALUE, got: {assignment!r}")
    keys = key.split(".")
    if any(not k for k in keys):
        raise ConfigError(f"Invalid key in assignment: {assignment!r}")
    if raw == "":
        return keys, ""
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        value = raw
    return keys, value


def set_path(context: dict[str, Any], keys: list[str], value: Any) -> None:
    """Assign ``value`` at a nested key path, creating mappings on the way."""
    current = context
    for key in keys[:-1]:
        child = current.get(key)
        if not isinstance(child, dict):
            child = {}
            current[key] = child
        current = child
    current[keys[-1]] = value


def merge_context(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge ``overlay`` into a copy of ``base``; mappings merge, the rest replaces."""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict):
            existing = merged.get(key)
            merged[key] = merge_context(existing if isinstance(existing, dict) else {}, value)
        else:
            merged[key] = value
    return merged


def build_context(
    config: RenderConfig | None = None,
    files: Iterable[Path] = (),
    assignments: Iterable[str] = (),
) -> dict[str, Any]:
    """Merge config context, config context files, extra files, then assignments."""
    context: dict[str, Any] = {}
    sources: list[Path] = []
    if config is not None:
        context = merge_context(context, config.context)
        sources.extend(config.context_files)
    sources.extend(files)

    for path in sources:
        log.info("Loading context from %s", path)
        context = merge_context(context, load_context_file(path))

    for assignment in assignments:
        keys, value = parse_assignment(assignment)
        set_path(context, keys, value)

    return context

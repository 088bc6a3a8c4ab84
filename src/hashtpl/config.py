"""Configuration for the hashtpl command line.

A project may carry a ``hashtpl.yaml`` next to its templates:

    root: templates             # directory templates and includes are read from
    template: deployment.tpl    # default template to render
    output: out/deployment.yaml
    encoding: utf-8
    context:                    # inline variables
      replicas: 2
    context_files:              # merged in order, after `context`
      - values.yaml

Relative paths are resolved against the directory holding the config file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

CONFIG_FILENAME = "hashtpl.yaml"


class ConfigError(Exception):
    """Raised when a config or context file cannot be used."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        self.message = message
        self.exit_code = exit_code
        super().__init__(message)


class RenderConfig(BaseModel):
    """Main hashtpl.yaml configuration."""

    root: Path = Field(
        default=Path("."), description="Directory templates and includes are read from"
    )
    template: str | None = Field(default=None, description="Template to render")
    output: Path | None = Field(default=None, description="Where to write the result")
    encoding: str = Field(default="utf-8", description="Encoding of template files")
    context: dict[str, Any] = Field(
        default_factory=dict, description="Inline context variables"
    )
    context_files: list[Path] = Field(
        default_factory=list, description="JSON/YAML files merged into the context"
    )

    def resolve_paths(self, base_dir: Path) -> "RenderConfig":
        """Return a copy with relative paths anchored at ``base_dir``."""

        def anchor(path: Path) -> Path:
            return path if path.is_absolute() else base_dir / path

        return self.model_copy(
            update={
                "root": anchor(self.root),
                "output": anchor(self.output) if self.output is not None else None,
                "context_files": [anchor(p) for p in self.context_files],
            }
        )


def find_config_file(start: Path | None = None) -> Path | None:
    """Find hashtpl.yaml in ``start`` (default: cwd) or its parents."""
    cwd = start or Path.cwd()
    for parent in [cwd] + list(cwd.parents):
        candidate = parent / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    return None


def load_config(path: Path) -> RenderConfig:
    """Load and validate a config file."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    try:
        config = RenderConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {path}: {exc}") from exc

    return config.resolve_paths(path.parent)

"""File loaders used by ``Engine.parse_file`` and ``#include``.

A loader is any callable ``(path) -> bytes`` raising an ``OSError``
(normally ``FileNotFoundError``) when the path cannot be read.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Callable, Mapping
from pathlib import Path

log = logging.getLogger(__name__)

Loader = Callable[[str], bytes]


class DirectoryLoader:
    """Reads templates relative to a root directory.

    Paths are slash-separated and must stay inside the root.
    """

    def __init__(self, root: str | Path = "."):
        self.root = Path(root)

    def __call__(self, path: str) -> bytes:
        cleaned = posixpath.normpath(path)
        if cleaned.startswith("/") or cleaned == ".." or cleaned.startswith("../"):
            raise FileNotFoundError(f"Template path escapes loader root: {path}")
        target = self.root / cleaned
        log.debug("Reading template %s", target)
        try:
            return target.read_bytes()
        except OSError as exc:
            raise FileNotFoundError(f"Could not read file: {path}") from exc

    def __repr__(self) -> str:
        return f"DirectoryLoader({str(self.root)!r})"


class DictLoader:
    """Serves templates from an in-memory mapping of path to text."""

    def __init__(self, files: Mapping[str, str | bytes]):
        self.files = dict(files)

    def __call__(self, path: str) -> bytes:
        try:
            content = self.files[posixpath.normpath(path)]
        except KeyError:
            raise FileNotFoundError(f"Could not read file: {path}") from None
        return content.encode("utf-8") if isinstance(content, str) else content

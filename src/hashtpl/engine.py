"""Engine and Template - the public entry points."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from hashtpl.evaluator import Evaluator
from hashtpl.loader import DirectoryLoader, Loader
from hashtpl.nodes import Document
from hashtpl.parser import Parser
from hashtpl.renderer import Renderer

log = logging.getLogger(__name__)


class Engine:
    """Parses templates and renders them.

    The engine holds the file loader used by ``parse_file`` and ``#include``
    and the expression evaluator. It keeps no per-render state, so one engine
    can be shared freely.

    Example:
        >>> engine = Engine()
        >>> engine.render_string("Hello ${name}!", {"name": "World"})
        'Hello World!\\n'
    """

    def __init__(
        self,
        loader: Loader | None = None,
        evaluator: Evaluator | None = None,
        encoding: str = "utf-8",
    ):
        self._loader = loader or DirectoryLoader(".")
        self._evaluator = evaluator or Evaluator()
        self._encoding = encoding

    @property
    def loader(self) -> Loader:
        return self._loader

    @property
    def evaluator(self) -> Evaluator:
        return self._evaluator

    @property
    def encoding(self) -> str:
        return self._encoding

    def parse_string(self, source: str) -> Template:
        """Parse template text.

        Raises:
            ParseError: If an #if or #for block is not closed.
        """
        return Template(self, Parser(source).parse())

    def parse_file(self, path: str) -> Template:
        """Load a template through the loader and parse it.

        Loader errors (``FileNotFoundError``) propagate unchanged.

        Raises:
            ParseError: If an #if or #for block is not closed.
        """
        log.debug("Loading template %s", path)
        raw = self._loader(path)
        source = raw.decode(self._encoding) if isinstance(raw, bytes) else raw
        return self.parse_string(source)

    def render(self, template: Template, context: Mapping[str, Any] | None = None) -> str:
        """Render a parsed template.

        Raises:
            RenderError: EvaluationError, IterationError or IncludeError.
        """
        return Renderer(self).render(template.document, context)

    def render_string(self, source: str, context: Mapping[str, Any] | None = None) -> str:
        return self.render(self.parse_string(source), context)


class Template:
    """A parsed template bound to the engine that produced it."""

    def __init__(self, engine: Engine, document: Document):
        self._engine = engine
        self._document = document

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def document(self) -> Document:
        return self._document

    def render(self, context: Mapping[str, Any] | None = None) -> str:
        return self._engine.render(self, context)

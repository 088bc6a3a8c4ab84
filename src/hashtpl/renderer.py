"""Render engine - walks a parsed template against a variable scope.

The scope is a ``ChainMap`` whose root is the caller's context. Each ``#for``
pushes one child frame for its bindings and drops it when the loop ends, so
shadowed names come back (or disappear) afterwards, even when the loop body
fails. The caller's mapping is never written to.
"""

from __future__ import annotations

import logging
import posixpath
from collections import ChainMap
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Sequence

from hashtpl.errors import EvaluationError, IncludeError, IterationError, TemplateError
from hashtpl.nodes import Conditional, Document, Expression, Include, Loop, Node, Text
from hashtpl.preprocess import preprocess
from hashtpl.values import ValueKind, kind_of, stringify, truthy

if TYPE_CHECKING:
    from hashtpl.engine import Engine

log = logging.getLogger(__name__)

Scope = ChainMap


class Renderer:
    """Renders Documents produced by one Engine."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def render(self, document: Document, context: Mapping[str, Any] | None = None) -> str:
        """Render a document to text.

        Args:
            document: Parsed template.
            context: Variable bindings. Left untouched by rendering.

        Returns:
            The rendered output.

        Raises:
            RenderError: On the first failing expression, loop or include.
        """
        scope: Scope = ChainMap(context if context is not None else {})
        out: list[str] = []
        self.render_nodes(document.body, scope, out)
        return "".join(out)

    def render_nodes(self, nodes: Sequence[Node], scope: Scope, out: list[str]) -> None:
        for node in nodes:
            self.render_node(node, scope, out)

    def render_node(self, node: Node, scope: Scope, out: list[str]) -> None:
        if isinstance(node, Text):
            out.append(node.text)
        elif isinstance(node, Expression):
            out.append(stringify(self.evaluate(node.code, scope, node.line)))
        elif isinstance(node, Conditional):
            taken = truthy(self.evaluate(node.condition, scope, node.line))
            self.render_nodes(node.then_body if taken else node.else_body, scope, out)
        elif isinstance(node, Loop):
            self._render_loop(node, scope, out)
        elif isinstance(node, Include):
            self._render_include(node, scope, out)
        else:
            raise TypeError(f"Unknown node type: {type(node).__name__}")

    def evaluate(self, code: str, scope: Scope, line: int | None = None) -> Any:
        """Preprocess and evaluate one expression."""
        try:
            return self.engine.evaluator.evaluate(preprocess(code), scope)
        except EvaluationError as exc:
            raise EvaluationError(code, exc.reason, line) from exc

    def _render_loop(self, node: Loop, scope: Scope, out: list[str]) -> None:
        value = self.evaluate(node.iterable, scope, node.line)
        frame = scope.new_child()
        count = 0
        for bound in self._bindings(node, value):
            for name, item in zip(node.names, bound):
                frame[name] = item
            self.render_nodes(node.body, frame, out)
            count += 1
        log.debug("#for over `%s` ran %d iterations", node.iterable, count)

    def _bindings(self, node: Loop, value: Any) -> Iterable[tuple[Any, ...]]:
        """Per-iteration values for the loop names.

        One name gets the element, character or key; two names get
        (index, element), (index, character) or (key, value).
        """
        pairs = node.second is not None
        kind = kind_of(value)
        if kind in (ValueKind.SEQUENCE, ValueKind.STRING):
            return enumerate(value) if pairs else ((item,) for item in value)
        if kind is ValueKind.MAPPING:
            return value.items() if pairs else ((key,) for key in value)
        type_name = type(value).__name__ if kind is ValueKind.OPAQUE else kind.value
        raise IterationError(node.iterable, type_name, node.line)

    def _render_include(self, node: Include, scope: Scope, out: list[str]) -> None:
        path = posixpath.normpath(node.path)
        log.debug("Including %s", path)
        try:
            raw = self.engine.loader(path)
            source = raw.decode(self.engine.encoding) if isinstance(raw, bytes) else raw
        except (OSError, UnicodeDecodeError) as exc:
            raise IncludeError(path, str(exc)) from exc

        try:
            document = self.engine.parse_string(source).document
            self.render_nodes(document.body, scope, out)
        except TemplateError as exc:
            exc.include_chain.insert(0, path)
            raise

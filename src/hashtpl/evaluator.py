"""Expression evaluator backed by Jinja2's sandboxed expression language.

Expressions use Jinja syntax (``a and b``, ``x if c else y``, ``name ~ '!'``,
filters). Undefined names evaluate to None instead of failing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from jinja2 import Undefined, nodes
from jinja2.environment import TemplateExpression
from jinja2.exceptions import TemplateSyntaxError
from jinja2.parser import Parser
from jinja2.sandbox import SandboxedEnvironment
from jinja2.visitor import NodeTransformer

from hashtpl.errors import EvaluationError
from hashtpl.guards import GUARD_GLOBALS
from hashtpl.values import ValueKind, kind_of

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Program:
    """A compiled expression and the text it was compiled from."""

    source: str
    expression: TemplateExpression


def length(value: Any) -> int:
    """``len`` that treats null and scalars as empty."""
    if kind_of(value) in (ValueKind.STRING, ValueKind.SEQUENCE, ValueKind.MAPPING):
        return len(value)
    return 0


class CoalesceLowering(NodeTransformer):
    """Turn ``coalesce(a, b)`` into ``coalesce_pick(coalesce_probe(a) or b)``.

    Jinja's ``or`` short-circuits, so ``b`` is only evaluated when ``a`` is
    absent. Calls with keywords or star-args keep the eager function.
    """

    def visit_Call(self, node: nodes.Call) -> nodes.Node:
        node = self.generic_visit(node)
        if not (
            isinstance(node.node, nodes.Name)
            and node.node.name == "coalesce"
            and len(node.args) == 2
            and not node.kwargs
            and node.dyn_args is None
            and node.dyn_kwargs is None
        ):
            return node
        left, right = node.args
        probe = nodes.Call(nodes.Name("coalesce_probe", "load"), [left], [], None, None)
        picked = nodes.Call(
            nodes.Name("coalesce_pick", "load"),
            [nodes.Or(probe, right)],
            [],
            None,
            None,
        )
        return picked.set_lineno(node.lineno)


class Evaluator:
    """Compiles and runs expressions against a variable scope."""

    def __init__(self, globals: Mapping[str, Any] | None = None):
        self.env = SandboxedEnvironment(undefined=Undefined)
        # Jinja's default globals (range, namespace, dict, ...) would shadow context names
        self.env.globals.clear()
        self.env.globals.update(GUARD_GLOBALS)
        self.env.globals["len"] = length
        if globals:
            self.env.globals.update(globals)

    def compile(self, code: str) -> Program:
        """Compile expression text into a reusable program.

        Raises:
            EvaluationError: If the text is not a valid expression.
        """
        try:
            parser = Parser(self.env, code, state="variable")
            expr = parser.parse_expression()
            if not parser.stream.eos:
                raise TemplateSyntaxError(
                    "chunk after expression", parser.stream.current.lineno, None, None
                )
        except TemplateSyntaxError as exc:
            raise EvaluationError(code, f"syntax error: {exc.message}") from exc

        log.debug("Compiling expression: %s", code)
        expr = CoalesceLowering().visit(expr)
        expr.set_environment(self.env)
        body = [nodes.Assign(nodes.Name("result", "store"), expr, lineno=1)]
        template = self.env.from_string(nodes.Template(body, lineno=1))
        return Program(code, TemplateExpression(template, undefined_to_none=True))

    def run(self, program: Program, scope: Mapping[str, Any]) -> Any:
        """Run a compiled program.

        Raises:
            EvaluationError: On any runtime failure (division by zero,
                operations on undefined values, bad calls, ...).
        """
        try:
            result = program.expression(scope)
            if isinstance(result, Iterator):
                # reverse, select, map and friends return lazy iterators
                result = list(result)
            return result
        except Exception as exc:
            raise EvaluationError(program.source, str(exc) or type(exc).__name__) from exc

    def evaluate(self, code: str, scope: Mapping[str, Any]) -> Any:
        return self.run(self.compile(code), scope)

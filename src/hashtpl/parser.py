"""Directive matcher and block parser.

A directive must fill the whole (trimmed) line. ``#if``/``#for`` appearing in
the middle of a line, for example inside a YAML comment or a quoted value, is
ordinary content.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import NamedTuple

from hashtpl.errors import ParseError
from hashtpl.nodes import Conditional, Document, Include, Loop, Node, Text
from hashtpl.splitter import split_line

log = logging.getLogger(__name__)

_NAME = r"[A-Za-z_][A-Za-z0-9_]*"

IF_RE = re.compile(r"#if\s+(.+)")
ELSE_RE = re.compile(r"#else")
END_RE = re.compile(r"#end")
FOR_RE = re.compile(rf"#for\s+({_NAME})(?:\s*,\s*({_NAME}))?\s+in\s+(.+)")
INCLUDE_RE = re.compile(r'#include\s+"([^"]+)"')


class DirectiveKind(str, Enum):
    IF = "#if"
    ELSE = "#else"
    END = "#end"
    FOR = "#for"
    INCLUDE = "#include"
    TEXT = "text"


class Directive(NamedTuple):
    kind: DirectiveKind
    args: tuple[str | None, ...] = ()


def match_directive(line: str) -> Directive:
    """Classify one source line."""
    stripped = line.strip()
    if not stripped.startswith("#"):
        return Directive(DirectiveKind.TEXT)
    if m := IF_RE.fullmatch(stripped):
        return Directive(DirectiveKind.IF, (m.group(1).strip(),))
    if ELSE_RE.fullmatch(stripped):
        return Directive(DirectiveKind.ELSE)
    if END_RE.fullmatch(stripped):
        return Directive(DirectiveKind.END)
    if m := FOR_RE.fullmatch(stripped):
        return Directive(DirectiveKind.FOR, (m.group(1), m.group(2), m.group(3).strip()))
    if m := INCLUDE_RE.fullmatch(stripped):
        return Directive(DirectiveKind.INCLUDE, (m.group(1),))
    return Directive(DirectiveKind.TEXT)


def split_lines(source: str) -> list[str]:
    """Normalize line endings and split.

    A trailing newline does not produce an extra empty line, but an empty
    source is still one (empty) line.
    """
    lines = source.replace("\r\n", "\n").split("\n")
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()
    return lines


class Parser:
    """Recursive-descent parser over a line cursor."""

    def __init__(self, source: str):
        self.lines = split_lines(source)
        self.cursor = 0

    def parse(self) -> Document:
        """Parse the whole source.

        Raises:
            ParseError: If an #if or #for block is never closed.
        """
        body, _ = self._parse_body(())
        log.debug("Parsed %d lines into %d top-level nodes", len(self.lines), len(body))
        return Document(tuple(body))

    def _parse_body(
        self, terminators: tuple[DirectiveKind, ...]
    ) -> tuple[list[Node], DirectiveKind | None]:
        """Parse lines until one of ``terminators`` (consumed) or end of input.

        Returns the nodes and the terminator that ended the body, or None when
        input ran out. Terminator-like lines not listed in ``terminators`` are
        content.
        """
        nodes: list[Node] = []
        while self.cursor < len(self.lines):
            line = self.lines[self.cursor]
            lineno = self.cursor + 1
            directive = match_directive(line)
            self.cursor += 1

            if directive.kind in terminators:
                return nodes, directive.kind
            if directive.kind is DirectiveKind.IF:
                nodes.append(self._parse_if(directive.args[0], lineno))
            elif directive.kind is DirectiveKind.FOR:
                nodes.append(self._parse_for(directive.args, lineno))
            elif directive.kind is DirectiveKind.INCLUDE:
                nodes.append(Include(directive.args[0], lineno))
            else:
                nodes.extend(split_line(line, lineno))
                nodes.append(Text("\n", lineno))
        return nodes, None

    def _parse_if(self, condition: str, lineno: int) -> Conditional:
        then_body, terminator = self._parse_body((DirectiveKind.ELSE, DirectiveKind.END))
        else_body: list[Node] = []
        if terminator is DirectiveKind.ELSE:
            else_body, terminator = self._parse_body((DirectiveKind.END,))
        if terminator is None:
            raise ParseError("#if", lineno)
        return Conditional(condition, tuple(then_body), tuple(else_body), lineno)

    def _parse_for(self, args: tuple[str | None, ...], lineno: int) -> Loop:
        name, second, iterable = args
        body, terminator = self._parse_body((DirectiveKind.END,))
        if terminator is None:
            raise ParseError("#for", lineno)
        return Loop(name, iterable, tuple(body), second, lineno)


def parse(source: str) -> Document:
    return Parser(source).parse()

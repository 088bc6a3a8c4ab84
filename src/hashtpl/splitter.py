"""Inline splitter: cuts one content line into text and expression fragments."""

from __future__ import annotations

import re

from hashtpl.nodes import Expression, Node, Text

# Both forms are non-greedy; an unterminated marker stays literal text
HASH_EXPR = re.compile(r"#\((.*?)\)")
DOLLAR_EXPR = re.compile(r"\$\{(.*?)\}")


def split_line(line: str, lineno: int = 0) -> list[Node]:
    """Split a content line into alternating Text/Expression nodes.

    ``#( ... )`` spans are extracted first; ``${ ... }`` is then searched only
    inside the remaining text, so an expression body is never split again.

    Example:
        >>> split_line("Hello ${name}!")
        [Text(text='Hello ', line=0), Expression(code='name', line=0), Text(text='!', line=0)]
    """
    out: list[Node] = []
    for fragment in _split(line, HASH_EXPR, lineno):
        if isinstance(fragment, Text):
            out.extend(_split(fragment.text, DOLLAR_EXPR, lineno))
        else:
            out.append(fragment)
    return out


def _split(text: str, pattern: re.Pattern[str], lineno: int) -> list[Node]:
    nodes: list[Node] = []
    prev_end = 0
    for match in pattern.finditer(text):
        if match.start() > prev_end:
            nodes.append(Text(text[prev_end : match.start()], lineno))
        nodes.append(Expression(match.group(1).strip(), lineno))
        prev_end = match.end()
    if prev_end < len(text):
        nodes.append(Text(text[prev_end:], lineno))
    return nodes

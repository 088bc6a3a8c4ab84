"""Null-safety preprocessor.

Rewrites expression text before it reaches the evaluator:

    user.profile.address        ->  guard_member(user, "profile.address")
    items[0]                    ->  guard_index(items, 0)
    a ?? b ?? 'x'               ->  coalesce(a, coalesce(b, 'x'))

The text is tokenized first (string literals, names, numbers, ``??`` and
bracket groups) so nothing inside a string literal is ever rewritten.
Malformed input is passed through as faithfully as possible; the evaluator
reports it when compiling.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import NamedTuple, Union

_TOKEN = re.compile(
    r"""
    (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<number>\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?\d+)?)
  | (?P<coalesce>\?\?)
  | (?P<space>\s+)
  | (?P<open>[(\[{])
  | (?P<close>[)\]}])
  | (?P<op>[=!<>]=|.)
    """,
    re.VERBOSE | re.DOTALL,
)

_PAIRS = {"(": ")", "[": "]", "{": "}"}

# `=` only appears in keyword arguments; comparisons tokenize as `==`, `<=`, ...
_SEPARATORS = frozenset({",", ":", "="})

# Names that are operators in the expression language, never chain roots
KEYWORDS = frozenset({"and", "or", "not", "in", "is", "if", "else"})


class Token(NamedTuple):
    kind: str
    text: str


@dataclass
class Group:
    """A bracketed region; ``close`` is empty when the input never closed it."""

    open: str
    items: list[Item] = field(default_factory=list)
    close: str = ""


Item = Union[Token, Group]


def tokenize(code: str) -> list[Token]:
    return [Token(m.lastgroup or "op", m.group()) for m in _TOKEN.finditer(code)]


def group_tokens(tokens: list[Token]) -> list[Item]:
    """Nest tokens into bracket groups. Stray closers stay plain tokens."""
    root: list[Item] = []
    stack: list[Group] = []
    for token in tokens:
        current = stack[-1].items if stack else root
        if token.kind == "open":
            group = Group(open=token.text)
            current.append(group)
            stack.append(group)
        elif token.kind == "close" and stack and _PAIRS[stack[-1].open] == token.text:
            stack.pop().close = token.text
        else:
            current.append(token)
    return root


def preprocess(code: str) -> str:
    """Rewrite ``??`` and member/index access into guard primitive calls."""
    if "." not in code and "[" not in code and "??" not in code:
        return code
    return _rewrite_region(group_tokens(tokenize(code)))


def _rewrite_region(items: list[Item]) -> str:
    """Rewrite a region split on ``,``, ``:`` and keyword ``=``, handling ``??`` per part."""
    parts: list[str] = []
    start = 0
    for i, item in enumerate(items):
        if isinstance(item, Token) and item.kind == "op" and item.text in _SEPARATORS:
            parts.append(_rewrite_coalesce(items[start:i]))
            parts.append(item.text)
            start = i + 1
    parts.append(_rewrite_coalesce(items[start:]))
    return "".join(parts)


def _rewrite_coalesce(items: list[Item]) -> str:
    for i, item in enumerate(items):
        if isinstance(item, Token) and item.kind == "coalesce":
            left = _rewrite_access(items[:i]).strip()
            right = _rewrite_coalesce(items[i + 1 :]).strip()
            return f"coalesce({left}, {right})"
    return _rewrite_access(items)


def _rewrite_access(items: list[Item]) -> str:
    out: list[str] = []
    i = 0
    previous: Item | None = None
    while i < len(items):
        item = items[i]
        if isinstance(item, Group):
            out.append(_render_group(item))
        elif item.kind == "name" and item.text not in KEYWORDS and not _is_dot(previous):
            text, i = _rewrite_chain(items, i)
            out.append(text)
            previous = items[i - 1]
            continue
        else:
            out.append(item.text)
        if not (isinstance(item, Token) and item.kind == "space"):
            previous = item
        i += 1
    return "".join(out)


def _rewrite_chain(items: list[Item], start: int) -> tuple[str, int]:
    """Consume a name and its postfix ``.name`` / ``[...]`` / ``(...)`` ops.

    Returns the rewritten text and the index just past the chain.
    """
    base = items[start].text
    members: list[str] = []
    i = start + 1

    def flush() -> str:
        if members:
            path = ".".join(members)
            members.clear()
            return f'guard_member({base}, "{path}")'
        return base

    while True:
        j = _skip_space(items, i)
        if j >= len(items):
            break
        item = items[j]
        if _is_dot(item):
            k = _skip_space(items, j + 1)
            if k >= len(items) or not _is_name(items[k]):
                break
            name = items[k].text
            call = _skip_space(items, k + 1)
            if call < len(items) and _is_group(items[call], "("):
                # method call: the attribute is looked up raw
                base = f"{flush()}.{name}{_render_group(items[call])}"
                i = call + 1
            else:
                members.append(name)
                i = k + 1
        elif _is_group(item, "["):
            base = flush()
            if _is_plain_index(item):
                base = f"guard_index({base}, {_rewrite_region(item.items).strip()})"
            else:
                base = f"{base}{_render_group(item)}"
            i = j + 1
        elif _is_group(item, "(") and not members:
            base = f"{base}{_render_group(item)}"
            i = j + 1
        else:
            break
    return flush(), i


def _render_group(group: Group) -> str:
    return f"{group.open}{_rewrite_region(group.items)}{group.close}"


def _is_plain_index(group: Group) -> bool:
    """A closed, non-empty subscript that is not a slice."""
    if not group.close:
        return False
    significant = [
        item for item in group.items if not (isinstance(item, Token) and item.kind == "space")
    ]
    if not significant:
        return False
    return not any(isinstance(item, Token) and item.text in ":," for item in significant)


def _skip_space(items: list[Item], i: int) -> int:
    while i < len(items) and isinstance(items[i], Token) and items[i].kind == "space":
        i += 1
    return i


def _is_dot(item: Item | None) -> bool:
    return isinstance(item, Token) and item.kind == "op" and item.text == "."


def _is_name(item: Item) -> bool:
    return isinstance(item, Token) and item.kind == "name"


def _is_group(item: Item, opener: str) -> bool:
    return isinstance(item, Group) and item.open == opener

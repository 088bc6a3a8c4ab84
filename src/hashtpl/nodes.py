"""Template AST. Nodes are immutable once the parser has built them."""

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Text:
    """Literal text, copied to the output as is."""

    text: str
    line: int = 0


@dataclass(frozen=True)
class Expression:
    """An interpolation; ``code`` is the raw text between the markers."""

    code: str
    line: int = 0


@dataclass(frozen=True)
class Conditional:
    """``#if cond`` ... ``#else`` ... ``#end``."""

    condition: str
    then_body: Tuple["Node", ...] = ()
    else_body: Tuple["Node", ...] = ()
    line: int = 0


@dataclass(frozen=True)
class Loop:
    """``#for name[, second] in iterable`` ... ``#end``."""

    name: str
    iterable: str
    body: Tuple["Node", ...] = ()
    second: Optional[str] = None
    line: int = 0

    @property
    def names(self) -> Tuple[str, ...]:
        return (self.name,) if self.second is None else (self.name, self.second)


@dataclass(frozen=True)
class Include:
    """``#include "path"``, resolved when rendering."""

    path: str
    line: int = 0


Node = Union[Text, Expression, Conditional, Loop, Include]


@dataclass(frozen=True)
class Document:
    """Root of a parsed template."""

    body: Tuple[Node, ...] = ()

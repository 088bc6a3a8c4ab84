"""hashtpl Exceptions

Parse failures and render failures are separate branches so callers can tell
"this template is malformed" apart from "this context cannot render it".
"""

from __future__ import annotations


class TemplateError(Exception):
    """Base exception for all hashtpl errors."""

    def __init__(self, message: str):
        self.message = message
        # Include paths from outermost to innermost, filled in while unwinding
        self.include_chain: list[str] = []
        super().__init__(message)

    def __str__(self) -> str:
        if not self.include_chain:
            return self.message
        return f"{self.message} (included from {' -> '.join(self.include_chain)})"


class ParseError(TemplateError):
    """Raised when a block directive is never closed by #end."""

    def __init__(self, construct: str, line: int):
        self.construct = construct
        self.line = line
        super().__init__(f"unterminated {construct} opened at line {line}: missing #end")


class RenderError(TemplateError):
    """Base exception for failures while rendering a parsed template."""

    pass


class EvaluationError(RenderError):
    """Raised when an expression fails to compile or to evaluate."""

    def __init__(self, expression: str, reason: str, line: int | None = None):
        self.expression = expression
        self.reason = reason
        self.line = line
        where = f" at line {line}" if line is not None else ""
        super().__init__(f"cannot evaluate `{expression}`{where}: {reason}")


class IterationError(RenderError):
    """Raised when #for is given a value it cannot iterate."""

    def __init__(self, expression: str, type_name: str, line: int | None = None):
        self.expression = expression
        self.type_name = type_name
        self.line = line
        where = f" at line {line}" if line is not None else ""
        super().__init__(f"#for cannot iterate {type_name} from `{expression}`{where}")


class IncludeError(RenderError):
    """Raised when an #include target cannot be loaded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot include {path!r}: {reason}")

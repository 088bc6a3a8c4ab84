"""hashtpl - line-directive templates for configuration and manifests"""

from hashtpl._version import __version__
from hashtpl.engine import Engine, Template
from hashtpl.errors import (
    EvaluationError,
    IncludeError,
    IterationError,
    ParseError,
    RenderError,
    TemplateError,
)
from hashtpl.evaluator import Evaluator
from hashtpl.loader import DictLoader, DirectoryLoader, Loader

__all__ = [
    "__version__",
    # engine
    "Engine",
    "Template",
    "Evaluator",
    # loaders
    "DictLoader",
    "DirectoryLoader",
    "Loader",
    # errors
    "TemplateError",
    "ParseError",
    "RenderError",
    "EvaluationError",
    "IterationError",
    "IncludeError",
]

"""Per-language analysis strategies."""

from .cfamily import CFamilyStrategy
from .javascript import JavaScriptStrategy
from .python import PythonStrategy

__all__ = ["CFamilyStrategy", "JavaScriptStrategy", "PythonStrategy"]

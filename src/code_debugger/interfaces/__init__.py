"""Protocol definitions for pluggable components."""

from .llm import ExplanationProvider
from .ocr import TextExtractor
from .strategy import AnalysisStrategy

__all__ = ["AnalysisStrategy", "ExplanationProvider", "TextExtractor"]

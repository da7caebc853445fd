"""Data models and transfer objects."""

from .analysis import (
    NO_EXPLANATION,
    SOURCE_PLACEHOLDER,
    AnalysisResult,
    ExplanationRequest,
    ExplanationResponse,
)
from .diagnostic import Diagnostic, DiagnosticGroup, Severity

__all__ = [
    # Diagnostic models
    "Severity",
    "Diagnostic",
    "DiagnosticGroup",
    # Analysis models
    "SOURCE_PLACEHOLDER",
    "AnalysisResult",
    "ExplanationRequest",
    "ExplanationResponse",
    "NO_EXPLANATION",
]

"""Data models for analysis results and explanation requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .diagnostic import Diagnostic, DiagnosticGroup

# Nominal identifier for in-memory submissions
SOURCE_PLACEHOLDER = "<text>"


@dataclass(frozen=True)
class ExplanationRequest:
    """Input for the explanation service."""

    code: str
    language: str
    diagnostics: tuple[Diagnostic, ...]


@dataclass(frozen=True)
class ExplanationResponse:
    """Output of the explanation service; every field may be missing."""

    explanation: str | None = None
    suggestion: str | None = None
    fixed_code: str | None = None

    @property
    def is_empty(self) -> bool:
        """True when the service contributed nothing."""
        return self.explanation is None and self.suggestion is None and self.fixed_code is None


NO_EXPLANATION = ExplanationResponse()


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of one analysis request.

    A successful result means the tool ran to completion, not that the code
    is correct; callers inspect ``diagnostics`` for that.
    """

    success: bool
    groups: tuple[DiagnosticGroup, ...] = ()
    fixed_code: str | None = None
    ai: ExplanationResponse = field(default=NO_EXPLANATION)
    error: str | None = None
    details: str | None = None

    @classmethod
    def completed(
        cls,
        code: str,
        diagnostics: tuple[Diagnostic, ...] | list[Diagnostic],
        fixed_code: str | None = None,
        ai: ExplanationResponse = NO_EXPLANATION,
        details: str | None = None,
    ) -> AnalysisResult:
        """Build a successful result for a single in-memory source unit."""
        return cls(
            success=True,
            groups=(DiagnosticGroup(SOURCE_PLACEHOLDER, tuple(diagnostics)),),
            fixed_code=code if fixed_code is None else fixed_code,
            ai=ai,
            details=details,
        )

    @classmethod
    def failure(cls, error: str, details: str | None = None) -> AnalysisResult:
        """Build a failed result."""
        return cls(success=False, error=error, details=details)

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        """All diagnostics across groups."""
        return tuple(d for group in self.groups for d in group.messages)

    @property
    def has_errors(self) -> bool:
        """True if any diagnostic has error severity."""
        return any(d.severity == "error" for d in self.diagnostics)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire format used by the HTTP API."""
        if not self.success:
            data: dict[str, Any] = {"success": False, "error": self.error}
            if self.details is not None:
                data["details"] = self.details
            return data

        data = {
            "success": True,
            "analysis": [group.to_dict() for group in self.groups],
            "fixedCode": self.fixed_code,
            "aiExplanation": self.ai.explanation,
            "aiSuggestion": self.ai.suggestion,
            "aiFixedCode": self.ai.fixed_code,
        }
        if self.details is not None:
            data["details"] = self.details
        return data

"""Data models for normalized tool diagnostics."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Severity(StrEnum):
    """Normalized diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """One issue reported by a linter or compiler.

    Line and column are 0 when the tool gave no usable location.
    """

    severity: Severity
    message: str
    explanation: str
    suggestion: str
    rule_id: str | None = None
    line: int = 0
    column: int = 0
    end_line: int | None = None
    end_column: int | None = None
    category: str | None = None  # Tool-specific class, e.g. pylint "convention"
    message_id: str | None = None  # e.g. pylint "C0114"

    def __post_init__(self) -> None:
        if not self.explanation or not self.suggestion:
            raise ValueError("Diagnostic explanation and suggestion must not be empty")

    @property
    def is_located(self) -> bool:
        """Whether the tool supplied a source location."""
        return self.line > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire format used by the HTTP API."""
        data = {
            "ruleId": self.rule_id,
            "severity": self.severity.value,
            "message": self.message,
            "line": self.line,
            "column": self.column,
            "endLine": self.end_line,
            "endColumn": self.end_column,
            "category": self.category,
            "errorExplanation": self.explanation,
            "errorSuggestion": self.suggestion,
        }
        if self.message_id is not None:
            data["messageId"] = self.message_id
        return data


@dataclass(frozen=True)
class DiagnosticGroup:
    """Diagnostics for one source unit."""

    file_path: str
    messages: tuple[Diagnostic, ...]

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire format used by the HTTP API."""
        return {
            "filePath": self.file_path,
            "messages": [m.to_dict() for m in self.messages],
        }

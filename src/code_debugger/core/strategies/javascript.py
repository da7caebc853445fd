"""JavaScript analysis with the in-process linter."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from code_debugger.core.explainer import ExplanationAugmenter
from code_debugger.core.explanations import lookup_explanation
from code_debugger.core.js_linter import SEVERITY_ERROR, JavaScriptLinter, LintMessage
from code_debugger.models.analysis import NO_EXPLANATION, AnalysisResult
from code_debugger.models.diagnostic import Diagnostic, Severity
from code_debugger.utils.async_helpers import LinterConfigError
from code_debugger.utils.logging import LogEventNames

log = structlog.get_logger()

LINTER_FAILED_ERROR = "Failed to run the JavaScript linter. Check server logs for details."


def to_diagnostic(message: LintMessage) -> Diagnostic:
    """Normalize a linter message, attaching its table explanation."""
    entry = lookup_explanation(message.rule_id, message.message)
    return Diagnostic(
        severity=Severity.ERROR if message.severity == SEVERITY_ERROR else Severity.WARNING,
        message=message.message,
        explanation=entry.explanation,
        suggestion=entry.suggestion,
        rule_id=message.rule_id,
        line=message.line,
        column=message.column,
        end_line=message.end_line,
        end_column=message.end_column,
    )


class JavaScriptStrategy:
    """Lints JavaScript in memory and returns the auto-fixed code.

    The rule set is fixed for the lifetime of the process. An invalid rule
    set does not stop the service; every JavaScript request then fails with
    the configuration error in its details.
    """

    name = "javascript"
    aliases = ("js",)

    def __init__(self, rules: Mapping[str, Any], augmenter: ExplanationAugmenter) -> None:
        """Initialize the strategy.

        Args:
            rules: ESLint-style rule settings.
            augmenter: Explanation augmenter for non-empty results.
        """
        self._augmenter = augmenter
        self._linter: JavaScriptLinter | None = None
        self._config_error: str | None = None
        try:
            self._linter = JavaScriptLinter(rules)
        except LinterConfigError as e:
            log.error("javascript_linter_config_invalid", error=str(e))
            self._config_error = str(e)

    async def analyze(self, code: str) -> AnalysisResult:
        """Lint the code and explain any findings."""
        if self._linter is None:
            return AnalysisResult.failure(LINTER_FAILED_ERROR, details=self._config_error)

        try:
            report = self._linter.lint_text(code)
        except Exception as e:
            log.exception(LogEventNames.ANALYSIS_FAILED, language=self.name, error=str(e))
            return AnalysisResult.failure(LINTER_FAILED_ERROR, details=str(e))

        diagnostics = [to_diagnostic(m) for m in report.messages]
        ai = NO_EXPLANATION
        if diagnostics:
            ai = await self._augmenter.augment(code, self.name, diagnostics)
        return AnalysisResult.completed(code, diagnostics, fixed_code=report.output, ai=ai)

"""Python analysis with pylint run as a subprocess."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog

from code_debugger.config.schema import PythonLintConfig
from code_debugger.core.explainer import ExplanationAugmenter
from code_debugger.models.analysis import NO_EXPLANATION, AnalysisResult
from code_debugger.models.diagnostic import Diagnostic, Severity
from code_debugger.utils.async_helpers import CommandTimeoutError, ToolSpawnError
from code_debugger.utils.logging import LogEventNames
from code_debugger.utils.safe_subprocess import ToolRunner, is_tool_missing
from code_debugger.utils.security import sanitize_for_logging
from code_debugger.utils.tempfiles import temporary_artifact

log = structlog.get_logger()

TEMP_PREFIX = "temp_python_code"

NOT_INSTALLED_ERROR = (
    "Pylint is not installed or not in your system's PATH. "
    "Please install it (e.g., 'pip install pylint')."
)
SETUP_FAILED_ERROR = "Failed to prepare Python code for analysis."
PARSE_FAILED_ERROR = "Failed to parse Pylint output."
TIMEOUT_ERROR = "Pylint did not finish within the configured timeout."

# Pylint message types that count as errors
ERROR_TYPES = frozenset({"fatal", "error"})


def to_diagnostic(record: dict[str, Any]) -> Diagnostic:
    """Normalize one pylint JSON record.

    Pylint symbols are not in the shared explanation table, so the
    explanation and suggestion are built from the record itself.
    """
    message_type = str(record.get("type") or "warning")
    message = str(record.get("message") or "")
    symbol = record.get("symbol")
    line = int(record.get("line") or 0)
    column = int(record.get("column") or 0)
    return Diagnostic(
        severity=Severity.ERROR if message_type in ERROR_TYPES else Severity.WARNING,
        message=message,
        explanation=f"Pylint found a '{message_type}' type issue: {message}.",
        suggestion=(
            f"Review the Python code at line {line}, column {column}. "
            f"Consult Pylint documentation for rule '{symbol}'."
        ),
        rule_id=symbol,
        line=line,
        column=column,
        end_line=record.get("endLine"),
        end_column=record.get("endColumn"),
        category=message_type,
        message_id=record.get("message-id"),
    )


class PythonStrategy:
    """Runs pylint on a temporary copy of the code.

    Example:
        strategy = PythonStrategy(config.python, augmenter, timeout=60)
        result = await strategy.analyze("import os\\n")
    """

    name = "python"
    aliases = ("py",)

    def __init__(
        self,
        config: PythonLintConfig,
        augmenter: ExplanationAugmenter,
        timeout: float | None = ToolRunner.DEFAULT_TIMEOUT,
        temp_dir: Path | None = None,
    ) -> None:
        """Initialize the strategy.

        Args:
            config: Pylint binary and rcfile settings.
            augmenter: Explanation augmenter for non-empty results.
            timeout: Per-run timeout in seconds, or None for no limit.
            temp_dir: Directory for temporary source files (system default if None).
        """
        self._config = config
        self._augmenter = augmenter
        self._temp_dir = temp_dir
        self._runner = ToolRunner(config.pylint_path, timeout=timeout, cwd=config.rcfile.parent)

    @property
    def runner(self) -> ToolRunner:
        """The pylint runner."""
        return self._runner

    async def analyze(self, code: str) -> AnalysisResult:
        """Lint the code with pylint.

        Raises:
            ToolSpawnError: If the pylint process could not be started.
        """
        with temporary_artifact(TEMP_PREFIX, ".py", self._temp_dir) as source:
            try:
                source.write_text(code, encoding="utf-8")
            except (OSError, UnicodeError) as e:
                log.error(LogEventNames.TEMP_ARTIFACT_SETUP_FAILED, path=str(source), error=str(e))
                return AnalysisResult.failure(SETUP_FAILED_ERROR, details=str(e))

            args = [str(source), "--output-format=json", f"--rcfile={self._config.rcfile}"]
            try:
                result = await self._runner.run(args)
            except ToolSpawnError as e:
                cause = e.__cause__ or e
                raise ToolSpawnError(
                    f"Failed to run Pylint: {cause}. Is Pylint installed and in your PATH?"
                ) from e
            except CommandTimeoutError as e:
                return AnalysisResult.failure(TIMEOUT_ERROR, details=str(e))

        stdout = result.stdout
        stderr = result.stderr
        if stderr.strip():
            log.warning(
                LogEventNames.TOOL_STDERR, tool="pylint", stderr=sanitize_for_logging(stderr)[:500]
            )
            if is_tool_missing(stderr, "pylint"):
                log.error(LogEventNames.TOOL_NOT_INSTALLED, tool="pylint")
                return AnalysisResult.failure(NOT_INSTALLED_ERROR)
            if not stdout:
                return AnalysisResult.failure(f"Pylint encountered an error: {stderr.strip()}")

        try:
            records = result.json() if stdout.strip() else []
            if not isinstance(records, list):
                raise ValueError(f"Expected a JSON array, got {type(records).__name__}")
            diagnostics = [to_diagnostic(record) for record in records]
        except (ValueError, TypeError, AttributeError) as e:
            log.error(LogEventNames.TOOL_OUTPUT_PARSE_ERROR, tool="pylint", error=str(e))
            return AnalysisResult.failure(PARSE_FAILED_ERROR, details=stdout or stderr or str(e))

        ai = NO_EXPLANATION
        if diagnostics:
            ai = await self._augmenter.augment(code, self.name, diagnostics)
        return AnalysisResult.completed(code, diagnostics, ai=ai)

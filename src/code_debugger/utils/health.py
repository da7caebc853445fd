"""Dependency health checks.

Each check inspects one thing the analysis pipeline relies on: the loaded
configuration, the bundled JavaScript grammar, the pylint and compiler
binaries, and the explanation provider's credentials. A missing tool or API
key only degrades the service, since the remaining languages keep working;
a broken configuration or grammar makes it unhealthy.
"""

from __future__ import annotations

import asyncio
import time
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import structlog

from code_debugger.utils.logging import LogEventNames
from code_debugger.utils.safe_subprocess import ToolRunner

if TYPE_CHECKING:
    from code_debugger.config.schema import DebuggerConfig

log = structlog.get_logger()

GRAMMAR_PROBE = "const ok = 1;\n"


class HealthStatus(StrEnum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class CheckResult:
    """Outcome of one dependency check."""

    name: str
    status: HealthStatus
    message: str
    latency_ms: float | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class HealthReport:
    """Aggregate of all check results.

    The service counts as healthy while no check is UNHEALTHY; degraded
    checks are reported but do not flip ``healthy``.
    """

    healthy: bool
    status: HealthStatus
    timestamp: datetime
    checks: list[CheckResult]
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_checks(cls, checks: list[CheckResult], timestamp: datetime) -> HealthReport:
        counts = Counter(check.status for check in checks)
        if counts[HealthStatus.UNHEALTHY]:
            status = HealthStatus.UNHEALTHY
        elif counts[HealthStatus.DEGRADED]:
            status = HealthStatus.DEGRADED
        else:
            status = HealthStatus.HEALTHY
        return cls(
            healthy=status != HealthStatus.UNHEALTHY,
            status=status,
            timestamp=timestamp,
            checks=checks,
            details={
                "total_checks": len(checks),
                **{f"{s.value}_checks": counts[s] for s in HealthStatus},
            },
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


def _healthy(name: str, message: str, **details: Any) -> CheckResult:
    return CheckResult(name=name, status=HealthStatus.HEALTHY, message=message, details=details)


def _degraded(name: str, message: str, **details: Any) -> CheckResult:
    return CheckResult(name=name, status=HealthStatus.DEGRADED, message=message, details=details)


def _unhealthy(name: str, message: str) -> CheckResult:
    return CheckResult(name=name, status=HealthStatus.UNHEALTHY, message=message)


class HealthChecker:
    """Runs every dependency check for a configuration.

    Example:
        report = await HealthChecker(config).run_all_checks()
        report.status  # HealthStatus.DEGRADED when g++ is missing
    """

    def __init__(self, config: DebuggerConfig) -> None:
        self._config = config

    async def run_all_checks(self) -> HealthReport:
        """Run the checks concurrently and aggregate them.

        A check that raises is recorded as an UNHEALTHY result named
        ``unknown`` instead of aborting the report.
        """
        log.info(LogEventNames.HEALTH_CHECK_START)
        started = datetime.now(UTC)

        outcomes = await asyncio.gather(
            self._check_config(),
            self._check_javascript_grammar(),
            self._check_tool("pylint", self._config.python.pylint_path),
            self._check_tool("compiler", self._config.cfamily.compiler_path),
            self._check_llm_provider(),
            return_exceptions=True,
        )
        checks = [
            outcome
            if isinstance(outcome, CheckResult)
            else _unhealthy("unknown", f"Check failed with exception: {outcome}")
            for outcome in outcomes
        ]

        report = HealthReport.from_checks(checks, started)
        log.info(
            LogEventNames.HEALTH_CHECK_COMPLETE,
            healthy=report.healthy,
            status=report.status.value,
            checks_run=len(checks),
        )
        return report

    async def _check_config(self) -> CheckResult:
        # Rule severities are only validated when a linter is built from them
        from code_debugger.core.js_linter import JavaScriptLinter

        try:
            JavaScriptLinter(self._config.javascript.rules)
        except Exception as e:
            return _unhealthy("config", f"Configuration error: {e}")
        return _healthy(
            "config",
            "Configuration valid",
            llm_provider=self._config.llm.provider,
            javascript_rules=sorted(self._config.javascript.rules),
            tool_timeout=self._config.tools.timeout,
        )

    async def _check_javascript_grammar(self) -> CheckResult:
        from code_debugger.core.js_linter import JavaScriptLinter

        start = time.monotonic()
        try:
            report = JavaScriptLinter({}).lint_text(GRAMMAR_PROBE)
        except Exception as e:
            return _unhealthy("javascript_grammar", f"JavaScript grammar unavailable: {e}")

        if report.messages:
            result = _unhealthy(
                "javascript_grammar",
                f"JavaScript grammar rejected valid code: {report.messages[0].message}",
            )
        else:
            result = _healthy("javascript_grammar", "JavaScript grammar loaded")
        result.latency_ms = (time.monotonic() - start) * 1000
        return result

    async def _check_tool(self, name: str, executable: str) -> CheckResult:
        if ToolRunner(executable).is_available():
            return _healthy(name, f"{executable} found", executable=executable)
        return _degraded(name, f"{executable} not found in PATH", executable=executable)

    async def _check_llm_provider(self) -> CheckResult:
        llm = self._config.llm
        if llm.provider == "none":
            return _degraded("llm_provider", "AI explanations disabled")

        section = llm.anthropic if llm.provider == "anthropic" else llm.gemini
        if section is None:
            return _unhealthy("llm_provider", f"{llm.provider} configuration not found")

        api_key = section.api_key
        if not api_key or api_key.startswith("${"):
            return _degraded(
                "llm_provider",
                f"{llm.provider} API key not configured; AI explanations disabled",
            )
        return _healthy(
            "llm_provider",
            f"{llm.provider} configured",
            provider=llm.provider,
            model=section.model,
        )

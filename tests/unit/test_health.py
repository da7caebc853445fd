"""Tests for the health check module."""

from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from code_debugger.config.schema import DebuggerConfig, LLMConfig
from code_debugger.utils.health import (
    CheckResult,
    HealthChecker,
    HealthReport,
    HealthStatus,
)


class TestHealthStatus:
    """Tests for HealthStatus enum."""

    def test_health_status_values(self) -> None:
        """Test that all expected status values exist."""
        assert HealthStatus.HEALTHY.value == "healthy"
        assert HealthStatus.DEGRADED.value == "degraded"
        assert HealthStatus.UNHEALTHY.value == "unhealthy"


class TestCheckResult:
    """Tests for CheckResult dataclass."""

    def test_check_result_defaults(self) -> None:
        """Test CheckResult default values."""
        result = CheckResult(name="test", status=HealthStatus.HEALTHY, message="OK")
        assert result.latency_ms is None
        assert result.details == {}


class TestHealthReport:
    """Tests for HealthReport dataclass."""

    def test_health_report_to_dict(self) -> None:
        """Test converting HealthReport to dictionary."""
        timestamp = datetime(2026, 2, 4, 12, 0, 0, tzinfo=UTC)
        checks = [
            CheckResult(
                name="config",
                status=HealthStatus.HEALTHY,
                message="Valid",
                latency_ms=10.0,
            ),
        ]
        report = HealthReport(
            healthy=True,
            status=HealthStatus.HEALTHY,
            timestamp=timestamp,
            checks=checks,
            details={"total": 1},
        )

        result = report.to_dict()

        assert result["healthy"] is True
        assert result["status"] == "healthy"
        assert result["timestamp"] == "2026-02-04T12:00:00+00:00"
        assert result["checks"][0] == {
            "name": "config",
            "status": "healthy",
            "message": "Valid",
            "latency_ms": 10.0,
            "details": {},
        }
        assert result["details"] == {"total": 1}

    def test_from_checks_degraded_is_still_healthy(self) -> None:
        checks = [
            CheckResult(name="config", status=HealthStatus.HEALTHY, message="ok"),
            CheckResult(name="pylint", status=HealthStatus.DEGRADED, message="missing"),
        ]
        report = HealthReport.from_checks(checks, datetime.now(UTC))

        assert report.healthy is True
        assert report.status == HealthStatus.DEGRADED
        assert report.details == {
            "total_checks": 2,
            "healthy_checks": 1,
            "degraded_checks": 1,
            "unhealthy_checks": 0,
        }

    def test_from_checks_any_unhealthy(self) -> None:
        checks = [
            CheckResult(name="pylint", status=HealthStatus.DEGRADED, message="missing"),
            CheckResult(name="config", status=HealthStatus.UNHEALTHY, message="bad"),
        ]
        report = HealthReport.from_checks(checks, datetime.now(UTC))

        assert report.healthy is False
        assert report.status == HealthStatus.UNHEALTHY


class TestHealthChecker:
    """Tests for HealthChecker class."""

    @pytest.fixture
    def anthropic_config(self) -> DebuggerConfig:
        return DebuggerConfig(
            llm=LLMConfig(provider="anthropic", anthropic={"api_key": "sk-ant-valid-key"})
        )

    async def test_check_config_valid(self, config: DebuggerConfig) -> None:
        """Test config check with valid configuration."""
        result = await HealthChecker(config)._check_config()

        assert result.name == "config"
        assert result.status == HealthStatus.HEALTHY
        assert result.details["llm_provider"] == "none"
        assert "semi" in result.details["javascript_rules"]

    async def test_check_config_bad_rules(self, config: DebuggerConfig) -> None:
        """Test that an invalid rule severity is unhealthy."""
        config.javascript.rules = {"semi": "loud"}
        result = await HealthChecker(config)._check_config()

        assert result.status == HealthStatus.UNHEALTHY
        assert "Configuration error" in result.message

    async def test_check_javascript_grammar(self, config: DebuggerConfig) -> None:
        """Test that the bundled grammar parses valid code."""
        result = await HealthChecker(config)._check_javascript_grammar()

        assert result.status == HealthStatus.HEALTHY
        assert result.latency_ms is not None

    async def test_check_tool_found(self, config: DebuggerConfig) -> None:
        with patch("code_debugger.utils.safe_subprocess.shutil.which", return_value="/bin/g++"):
            result = await HealthChecker(config)._check_tool("compiler", "g++")

        assert result.status == HealthStatus.HEALTHY
        assert result.details == {"executable": "g++"}

    async def test_check_tool_missing_is_degraded(self, config: DebuggerConfig) -> None:
        with patch("code_debugger.utils.safe_subprocess.shutil.which", return_value=None):
            result = await HealthChecker(config)._check_tool("pylint", "pylint")

        assert result.status == HealthStatus.DEGRADED
        assert result.message == "pylint not found in PATH"

    async def test_check_llm_provider_disabled(self, config: DebuggerConfig) -> None:
        result = await HealthChecker(config)._check_llm_provider()
        assert result.status == HealthStatus.DEGRADED

    async def test_check_llm_provider_anthropic(self, anthropic_config: DebuggerConfig) -> None:
        result = await HealthChecker(anthropic_config)._check_llm_provider()

        assert result.status == HealthStatus.HEALTHY
        assert result.details["provider"] == "anthropic"

    async def test_check_llm_provider_missing_key(self, monkeypatch) -> None:
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        config = DebuggerConfig(llm=LLMConfig(provider="gemini"))
        result = await HealthChecker(config)._check_llm_provider()

        assert result.status == HealthStatus.DEGRADED
        assert "API key not configured" in result.message

    async def test_run_all_checks_healthy(self, anthropic_config: DebuggerConfig) -> None:
        """Test that everything present reports healthy."""
        with patch("code_debugger.utils.safe_subprocess.shutil.which", return_value="/bin/x"):
            report = await HealthChecker(anthropic_config).run_all_checks()

        assert report.healthy is True
        assert report.status == HealthStatus.HEALTHY
        assert report.details["total_checks"] == 5

    async def test_run_all_checks_degraded(self, config: DebuggerConfig) -> None:
        """Test that missing tools degrade without failing."""
        with patch("code_debugger.utils.safe_subprocess.shutil.which", return_value=None):
            report = await HealthChecker(config).run_all_checks()

        assert report.healthy is True
        assert report.status == HealthStatus.DEGRADED
        assert report.details["degraded_checks"] == 3

    async def test_run_all_checks_with_failure(self, config: DebuggerConfig) -> None:
        """Test that a check raising makes the report unhealthy."""
        checker = HealthChecker(config)
        with patch.object(checker, "_check_config", side_effect=RuntimeError("boom")):
            report = await checker.run_all_checks()

        assert report.healthy is False
        assert report.status == HealthStatus.UNHEALTHY
        assert any("boom" in c.message for c in report.checks)

"""Tests for the command line entry point."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from code_debugger.__main__ import describe_config, main, parse_args, run_service
from code_debugger.config.schema import DebuggerConfig, LLMConfig


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        "llm:\n"
        "  provider: none\n"
        "javascript:\n"
        "  rules:\n"
        "    semi: [error, always]\n"
        "logging:\n"
        "  format: console\n"
    )
    return path


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self) -> None:
        args = parse_args([])
        assert args.config is None
        assert args.debug is False
        assert args.format == "console"
        assert args.analyze is None

    def test_analyze(self) -> None:
        args = parse_args(["--analyze", "main.cpp", "--language", "c++", "--port", "8000"])
        assert args.analyze == Path("main.cpp")
        assert args.language == "c++"
        assert args.port == 8000


class TestDescribeConfig:
    """Tests for the startup configuration summary."""

    def test_masks_api_key(self) -> None:
        config = DebuggerConfig(
            llm=LLMConfig(provider="anthropic", anthropic={"api_key": "sk-ant-abcdefgh12345678"})
        )
        summary = describe_config(config)

        assert summary["llm.anthropic.api_key"] == "sk-a...5678"
        assert summary["server.port"] == 5000
        assert not any(key.startswith("javascript") for key in summary)


class TestRunService:
    """Tests for run_service modes."""

    async def test_dry_run(self, config_file: Path) -> None:
        assert await run_service(config_file, dry_run=True) == 0

    async def test_missing_config(self, tmp_path: Path) -> None:
        assert await run_service(tmp_path / "missing.yaml", dry_run=True) == 1

    async def test_invalid_config(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("cfamily:\n  standard: c99\n")
        assert await run_service(path, dry_run=True) == 1

    async def test_overrides_reach_server(self, config_file: Path) -> None:
        with patch("code_debugger.__main__.serve", new_callable=AsyncMock) as serve:
            assert await run_service(config_file, host="0.0.0.0", port=8123) == 0

        config = serve.await_args.args[0]
        assert config.server.host == "0.0.0.0"
        assert config.server.port == 8123

    async def test_analyze_file(
        self, config_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test one-shot analysis of a local JavaScript file."""
        source = tmp_path / "app.js"
        source.write_text("let x = 5\n")

        assert await run_service(config_file, analyze=source) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["success"] is True
        assert data["fixedCode"] == "let x = 5;\n"
        assert data["analysis"][0]["messages"][0]["ruleId"] == "semi"

    async def test_analyze_unsupported_language(
        self, config_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        source = tmp_path / "main.rb"
        source.write_text("puts 1\n")

        assert await run_service(config_file, analyze=source, language="ruby") == 1
        assert json.loads(capsys.readouterr().out)["success"] is False


class TestMain:
    """Tests for main."""

    def test_dry_run(self, config_file: Path) -> None:
        assert main(["-c", str(config_file), "--dry-run"]) == 0

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert capsys.readouterr().out.startswith("code-debugger ")

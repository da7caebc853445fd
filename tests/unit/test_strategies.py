"""Tests for the per-language analysis strategies."""

from __future__ import annotations

import shutil
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from code_debugger.config.schema import CFamilyConfig, PythonLintConfig
from code_debugger.core.explainer import ExplanationAugmenter
from code_debugger.core.explanations import ERROR_EXPLANATIONS
from code_debugger.core.strategies import CFamilyStrategy, JavaScriptStrategy, PythonStrategy
from code_debugger.core.strategies.cfamily import SETUP_FAILED_ERROR as CPP_SETUP_FAILED_ERROR
from code_debugger.core.strategies.javascript import LINTER_FAILED_ERROR
from code_debugger.core.strategies.python import (
    NOT_INSTALLED_ERROR,
    PARSE_FAILED_ERROR,
    SETUP_FAILED_ERROR,
    TIMEOUT_ERROR,
)
from code_debugger.models.diagnostic import Severity
from code_debugger.utils.async_helpers import CommandTimeoutError, ToolSpawnError
from code_debugger.utils.safe_subprocess import CommandResult


def completed(stdout: str = "", stderr: str = "", return_code: int = 0) -> CommandResult:
    return CommandResult(stdout=stdout, stderr=stderr, return_code=return_code, command=["tool"])


@pytest.fixture
def explaining_augmenter(mock_provider: AsyncMock) -> ExplanationAugmenter:
    return ExplanationAugmenter(mock_provider, timeout=5)


class TestJavaScriptStrategy:
    """Tests for JavaScriptStrategy."""

    async def test_missing_semicolon_end_to_end(
        self, disabled_augmenter: ExplanationAugmenter
    ) -> None:
        """Test the missing semicolon request from code to fixed code."""
        strategy = JavaScriptStrategy({"semi": ["error", "always"]}, disabled_augmenter)
        result = await strategy.analyze("let x = 5")

        assert result.success is True
        assert len(result.diagnostics) == 1
        diagnostic = result.diagnostics[0]
        assert diagnostic.rule_id == "semi"
        assert diagnostic.severity == Severity.ERROR
        assert diagnostic.explanation == ERROR_EXPLANATIONS["semi"].explanation
        assert result.fixed_code == "let x = 5;"
        assert result.ai.is_empty

    async def test_clean_code_skips_augmenter(
        self, explaining_augmenter: ExplanationAugmenter, mock_provider: AsyncMock
    ) -> None:
        """Test that clean code is not sent for explanation."""
        strategy = JavaScriptStrategy({"semi": ["error", "always"]}, explaining_augmenter)
        result = await strategy.analyze("let x = 5;\n")

        assert result.success is True
        assert result.diagnostics == ()
        assert result.fixed_code == "let x = 5;\n"
        mock_provider.complete.assert_not_awaited()

    async def test_findings_are_explained(
        self, explaining_augmenter: ExplanationAugmenter, mock_provider: AsyncMock
    ) -> None:
        """Test that findings are passed to the augmenter."""
        strategy = JavaScriptStrategy({"no-undef": "error"}, explaining_augmenter)
        result = await strategy.analyze("foo();\n")

        mock_provider.complete.assert_awaited_once()
        assert result.ai.explanation == "x is undefined"
        assert result.ai.fixed_code == "let x = 1;"

    async def test_parse_error_explained_from_table(
        self, disabled_augmenter: ExplanationAugmenter
    ) -> None:
        """Test that parser messages get their table explanation."""
        strategy = JavaScriptStrategy({}, disabled_augmenter)
        result = await strategy.analyze("let s = 'abc;\n")

        diagnostic = result.diagnostics[0]
        assert diagnostic.rule_id is None
        expected = ERROR_EXPLANATIONS["Unterminated string constant"]
        assert diagnostic.explanation == expected.explanation
        assert result.fixed_code == "let s = 'abc;\n"

    async def test_invalid_rules_fail_each_request(
        self, disabled_augmenter: ExplanationAugmenter
    ) -> None:
        """Test that a bad rule set fails requests instead of startup."""
        strategy = JavaScriptStrategy({"bogus-rule": "error"}, disabled_augmenter)
        result = await strategy.analyze("let x = 5;")

        assert result.success is False
        assert result.error == LINTER_FAILED_ERROR
        assert "bogus-rule" in (result.details or "")

    async def test_wire_format(self, disabled_augmenter: ExplanationAugmenter) -> None:
        """Test the serialized result shape."""
        strategy = JavaScriptStrategy({"semi": ["error", "always"]}, disabled_augmenter)
        data = (await strategy.analyze("let x = 5")).to_dict()

        assert data["success"] is True
        assert data["fixedCode"] == "let x = 5;"
        assert data["aiExplanation"] is None
        message = data["analysis"][0]["messages"][0]
        assert message["ruleId"] == "semi"
        assert message["line"] == 1
        assert message["errorExplanation"]
        assert message["errorSuggestion"]


class TestPythonStrategy:
    """Tests for PythonStrategy."""

    @pytest.fixture
    def strategy(
        self, disabled_augmenter: ExplanationAugmenter, tmp_path: Path
    ) -> PythonStrategy:
        return PythonStrategy(PythonLintConfig(), disabled_augmenter, temp_dir=tmp_path)

    async def test_maps_pylint_records(
        self, strategy: PythonStrategy, pylint_output: str, tmp_path: Path
    ) -> None:
        """Test that pylint JSON records become diagnostics."""
        seen: dict[str, str] = {}

        async def fake_run(args: list[str]) -> CommandResult:
            seen["source"] = Path(args[0]).read_text()
            seen["args"] = " ".join(args)
            return completed(stdout=pylint_output, return_code=18)

        with patch.object(strategy.runner, "run", side_effect=fake_run):
            result = await strategy.analyze("print(x)\n")

        assert seen["source"] == "print(x)\n"
        assert "--output-format=json" in seen["args"]
        assert "--rcfile=" in seen["args"]

        assert result.success is True
        first, second = result.diagnostics
        assert first.rule_id == "missing-module-docstring"
        assert first.severity == Severity.WARNING
        assert first.category == "convention"
        assert first.message_id == "C0114"
        assert first.to_dict()["messageId"] == "C0114"
        assert (first.line, first.column) == (1, 0)
        assert second.rule_id == "undefined-variable"
        assert second.severity == Severity.ERROR
        assert (second.end_line, second.end_column) == (2, 7)
        assert "undefined-variable" in second.suggestion
        assert result.fixed_code == "print(x)\n"
        assert list(tmp_path.iterdir()) == []

    async def test_no_findings(self, strategy: PythonStrategy) -> None:
        """Test an empty pylint report."""
        with patch.object(strategy.runner, "run", AsyncMock(return_value=completed("[]"))):
            result = await strategy.analyze('"""Doc."""\n')

        assert result.success is True
        assert result.diagnostics == ()

    async def test_not_installed(self, strategy: PythonStrategy) -> None:
        """Test the missing pylint signature on stderr."""
        run = AsyncMock(return_value=completed(stderr="/bin/sh: pylint: command not found"))
        with patch.object(strategy.runner, "run", run):
            result = await strategy.analyze("x = 1\n")

        assert result.success is False
        assert result.error == NOT_INSTALLED_ERROR

    async def test_stderr_without_output(self, strategy: PythonStrategy) -> None:
        """Test that pylint crashing before output is reported."""
        run = AsyncMock(return_value=completed(stderr="Traceback: boom\n", return_code=32))
        with patch.object(strategy.runner, "run", run):
            result = await strategy.analyze("x = 1\n")

        assert result.success is False
        assert result.error == "Pylint encountered an error: Traceback: boom"

    @pytest.mark.parametrize("stdout", ["not json", '{"type": "error"}'])
    async def test_unparseable_output(self, strategy: PythonStrategy, stdout: str) -> None:
        """Test output that is not a JSON array of records."""
        with patch.object(strategy.runner, "run", AsyncMock(return_value=completed(stdout))):
            result = await strategy.analyze("x = 1\n")

        assert result.success is False
        assert result.error == PARSE_FAILED_ERROR
        assert result.details == stdout

    async def test_timeout(self, strategy: PythonStrategy, tmp_path: Path) -> None:
        """Test that a timed out run is a failed analysis."""
        run = AsyncMock(side_effect=CommandTimeoutError("Command timed out after 1s: pylint x"))
        with patch.object(strategy.runner, "run", run):
            result = await strategy.analyze("x = 1\n")

        assert result.success is False
        assert result.error == TIMEOUT_ERROR
        assert "pylint" in (result.details or "")
        assert list(tmp_path.iterdir()) == []

    async def test_spawn_failure_propagates(
        self, disabled_augmenter: ExplanationAugmenter, tmp_path: Path
    ) -> None:
        """Test that a missing binary raises and still cleans up."""
        config = PythonLintConfig(pylint_path=str(tmp_path / "missing" / "pylint"))
        strategy = PythonStrategy(config, disabled_augmenter, temp_dir=tmp_path)

        with pytest.raises(ToolSpawnError, match="Is Pylint installed and in your PATH"):
            await strategy.analyze("x = 1\n")

        assert [p for p in tmp_path.iterdir() if p.is_file()] == []

    async def test_setup_failure(
        self, disabled_augmenter: ExplanationAugmenter, tmp_path: Path
    ) -> None:
        """Test that an unwritable temp directory is a failed analysis."""
        strategy = PythonStrategy(
            PythonLintConfig(), disabled_augmenter, temp_dir=tmp_path / "does-not-exist"
        )
        result = await strategy.analyze("x = 1\n")

        assert result.success is False
        assert result.error == SETUP_FAILED_ERROR

    async def test_unencodable_code_is_setup_failure(
        self, strategy: PythonStrategy, tmp_path: Path
    ) -> None:
        """Test that code with a lone surrogate cannot be written and is reported."""
        run = AsyncMock()
        with patch.object(strategy.runner, "run", run):
            result = await strategy.analyze("x = '\ud800'\n")

        assert result.success is False
        assert result.error == SETUP_FAILED_ERROR
        assert "surrogate" in (result.details or "")
        run.assert_not_awaited()
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.skipif(shutil.which("pylint") is None, reason="pylint not installed")
    async def test_bundled_rcfile_with_real_pylint(
        self, strategy: PythonStrategy, tmp_path: Path
    ) -> None:
        """Test that clean code yields no diagnostics under the bundled rcfile."""
        result = await strategy.analyze("import os\n\nprint(os.sep)\n")

        assert result.success is True
        assert result.diagnostics == ()
        assert list(tmp_path.iterdir()) == []

    async def test_augmenter_failure_is_transparent(
        self, tmp_path: Path, mock_provider: AsyncMock, pylint_output: str
    ) -> None:
        """Test that a failing explanation call leaves the analysis intact."""
        mock_provider.complete.side_effect = RuntimeError("service down")
        strategy = PythonStrategy(
            PythonLintConfig(), ExplanationAugmenter(mock_provider), temp_dir=tmp_path
        )
        run = AsyncMock(return_value=completed(pylint_output, return_code=18))
        with patch.object(strategy.runner, "run", run):
            result = await strategy.analyze("print(x)\n")

        assert result.success is True
        assert len(result.diagnostics) == 2
        assert result.ai.is_empty
        data = result.to_dict()
        assert data["aiExplanation"] is None
        assert data["aiSuggestion"] is None
        assert data["aiFixedCode"] is None


class TestCFamilyStrategy:
    """Tests for CFamilyStrategy."""

    @pytest.fixture
    def strategy(
        self, disabled_augmenter: ExplanationAugmenter, tmp_path: Path
    ) -> CFamilyStrategy:
        return CFamilyStrategy(CFamilyConfig(), disabled_augmenter, temp_dir=tmp_path)

    def test_build_args(self, strategy: CFamilyStrategy) -> None:
        """Test the compiler command line."""
        args = strategy.build_args(Path("/tmp/a.cpp"), Path("/tmp/a"))
        assert args == ["/tmp/a.cpp", "-o", "/tmp/a", "-std=c++11", "-Wall", "-Wextra"]
        assert strategy.tool_name == "g++"

    async def test_parses_compiler_stderr(
        self, strategy: CFamilyStrategy, gpp_stderr: str, tmp_path: Path
    ) -> None:
        """Test that compiler diagnostics are parsed and artifacts removed."""

        async def fake_run(args: list[str]) -> CommandResult:
            Path(args[2]).write_bytes(b"\x7fELF")
            stderr = gpp_stderr.replace("/tmp/temp_cpp_code_1712.cpp", args[0])
            return completed(stderr=stderr, return_code=1)

        code = "int main() {\n    int x = 5;\n    y = 10\n}\n"
        with patch.object(strategy.runner, "run", side_effect=fake_run):
            result = await strategy.analyze(code)

        assert result.success is True
        assert [d.line for d in result.diagnostics] == [4, 3, 6]
        assert result.fixed_code == code
        assert result.details is None
        assert list(tmp_path.iterdir()) == []

    async def test_clean_compile(
        self,
        tmp_path: Path,
        mock_provider: AsyncMock,
    ) -> None:
        """Test that a clean compile is not explained."""
        strategy = CFamilyStrategy(
            CFamilyConfig(), ExplanationAugmenter(mock_provider), temp_dir=tmp_path
        )
        with patch.object(strategy.runner, "run", AsyncMock(return_value=completed())):
            result = await strategy.analyze("int main() { return 0; }\n")

        assert result.success is True
        assert result.diagnostics == ()
        mock_provider.complete.assert_not_awaited()

    async def test_nonzero_exit_without_diagnostics(
        self, tmp_path: Path, mock_provider: AsyncMock
    ) -> None:
        """Test that an unexplained failed compile keeps the raw stderr."""
        strategy = CFamilyStrategy(
            CFamilyConfig(), ExplanationAugmenter(mock_provider), temp_dir=tmp_path
        )
        run = AsyncMock(return_value=completed(stderr="ld: cannot find -lfoo\n", return_code=1))
        with patch.object(strategy.runner, "run", run):
            result = await strategy.analyze("int main() {}\n")

        assert result.success is True
        assert result.diagnostics == ()
        assert result.details == "ld: cannot find -lfoo"
        mock_provider.complete.assert_awaited_once()

    async def test_nonzero_exit_silent(self, strategy: CFamilyStrategy) -> None:
        """Test a failed compile with no stderr at all."""
        run = AsyncMock(return_value=completed(return_code=4))
        with patch.object(strategy.runner, "run", run):
            result = await strategy.analyze("int main() {}\n")

        assert result.details == "g++ exited with code 4"

    async def test_not_installed(self, strategy: CFamilyStrategy) -> None:
        """Test the missing compiler signature on stderr."""
        stderr = "bash: g++: command not found"
        run = AsyncMock(return_value=completed(stderr=stderr, return_code=127))
        with patch.object(strategy.runner, "run", run):
            result = await strategy.analyze("int main() {}\n")

        assert result.success is False
        assert "g++ compiler is not installed" in (result.error or "")

    async def test_spawn_failure_propagates(
        self, disabled_augmenter: ExplanationAugmenter, tmp_path: Path
    ) -> None:
        """Test that a missing compiler raises and leaves no artifacts."""
        config = CFamilyConfig(compiler_path=str(tmp_path / "bin" / "gxx-missing"))
        strategy = CFamilyStrategy(config, disabled_augmenter, temp_dir=tmp_path)

        with pytest.raises(ToolSpawnError, match="Is gxx-missing installed and in your PATH"):
            await strategy.analyze("int main() {}\n")

        assert list(tmp_path.iterdir()) == []

    async def test_timeout(self, strategy: CFamilyStrategy) -> None:
        """Test that a timed out compile is a failed analysis."""
        run = AsyncMock(side_effect=CommandTimeoutError("Command timed out after 1s: g++ a.cpp"))
        with patch.object(strategy.runner, "run", run):
            result = await strategy.analyze("int main() {}\n")

        assert result.success is False
        assert "g++ a.cpp" in (result.details or "")

    async def test_unencodable_code_is_setup_failure(
        self, strategy: CFamilyStrategy, tmp_path: Path
    ) -> None:
        """Test that code with a lone surrogate is reported, not raised."""
        run = AsyncMock()
        with patch.object(strategy.runner, "run", run):
            result = await strategy.analyze('const char *s = "\ud800";\n')

        assert result.success is False
        assert result.error == CPP_SETUP_FAILED_ERROR
        run.assert_not_awaited()
        assert list(tmp_path.iterdir()) == []

"""C++ analysis by compiling with g++ and scraping its diagnostics."""

from __future__ import annotations

from pathlib import Path

import structlog

from code_debugger.config.schema import CFamilyConfig
from code_debugger.core.compiler_output import parse_compiler_output
from code_debugger.core.explainer import ExplanationAugmenter
from code_debugger.models.analysis import NO_EXPLANATION, SOURCE_PLACEHOLDER, AnalysisResult
from code_debugger.utils.async_helpers import CommandTimeoutError, ToolSpawnError
from code_debugger.utils.logging import LogEventNames
from code_debugger.utils.safe_subprocess import ToolRunner, is_tool_missing
from code_debugger.utils.security import sanitize_for_logging
from code_debugger.utils.tempfiles import temporary_artifact

log = structlog.get_logger()

SOURCE_PREFIX = "temp_cpp_code"
EXECUTABLE_PREFIX = "temp_cpp_executable"

SETUP_FAILED_ERROR = "Failed to prepare C++ code for analysis."
TIMEOUT_ERROR = "The C++ compiler did not finish within the configured timeout."


class CFamilyStrategy:
    """Compiles the code and reports the compiler's errors and warnings.

    The compiled binary is never executed. A finished compile is a
    successful analysis even when every diagnostic is an error.
    """

    name = "c++"
    aliases = ("cpp",)

    def __init__(
        self,
        config: CFamilyConfig,
        augmenter: ExplanationAugmenter,
        timeout: float | None = ToolRunner.DEFAULT_TIMEOUT,
        temp_dir: Path | None = None,
    ) -> None:
        """Initialize the strategy.

        Args:
            config: Compiler binary, language standard and warning flags.
            augmenter: Explanation augmenter for failed or noisy compiles.
            timeout: Per-run timeout in seconds, or None for no limit.
            temp_dir: Directory for temporary artifacts (system default if None).
        """
        self._config = config
        self._augmenter = augmenter
        self._temp_dir = temp_dir
        self._runner = ToolRunner(config.compiler_path, timeout=timeout)

    @property
    def runner(self) -> ToolRunner:
        """The compiler runner."""
        return self._runner

    @property
    def tool_name(self) -> str:
        """Compiler name as it appears in shell error messages."""
        return Path(self._config.compiler_path).name

    def build_args(self, source: Path, executable: Path) -> list[str]:
        """Compiler arguments for one source file."""
        return [
            str(source),
            "-o",
            str(executable),
            f"-std={self._config.standard}",
            *self._config.extra_flags,
        ]

    async def analyze(self, code: str) -> AnalysisResult:
        """Compile the code and collect diagnostics.

        Raises:
            ToolSpawnError: If the compiler process could not be started.
        """
        tool = self.tool_name
        with (
            temporary_artifact(SOURCE_PREFIX, ".cpp", self._temp_dir) as source,
            temporary_artifact(EXECUTABLE_PREFIX, "", self._temp_dir) as executable,
        ):
            try:
                source.write_text(code, encoding="utf-8")
            except (OSError, UnicodeError) as e:
                log.error(LogEventNames.TEMP_ARTIFACT_SETUP_FAILED, path=str(source), error=str(e))
                return AnalysisResult.failure(SETUP_FAILED_ERROR, details=str(e))

            try:
                result = await self._runner.run(self.build_args(source, executable))
            except ToolSpawnError as e:
                cause = e.__cause__ or e
                raise ToolSpawnError(
                    f"Failed to run {tool}: {cause}. Is {tool} installed and in your PATH?"
                ) from e
            except CommandTimeoutError as e:
                return AnalysisResult.failure(TIMEOUT_ERROR, details=str(e))

        stderr = result.stderr
        if stderr.strip():
            log.debug(
                LogEventNames.TOOL_STDERR, tool=tool, stderr=sanitize_for_logging(stderr)[:500]
            )
            if is_tool_missing(stderr, tool):
                log.error(LogEventNames.TOOL_NOT_INSTALLED, tool=tool)
                return AnalysisResult.failure(
                    f"{tool} compiler is not installed or not in your system's PATH. "
                    "Please install it."
                )

        diagnostics = parse_compiler_output(stderr, str(source), SOURCE_PLACEHOLDER)

        details = None
        if not result.success and not diagnostics:
            details = stderr.strip() or f"{tool} exited with code {result.return_code}"

        ai = NO_EXPLANATION
        if diagnostics or not result.success:
            ai = await self._augmenter.augment(code, self.name, diagnostics)
        return AnalysisResult.completed(code, diagnostics, fixed_code=code, ai=ai, details=details)

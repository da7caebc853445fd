"""Safe subprocess wrapper for external analysis tools.

This module runs linters and compilers (pylint, g++) the same way every time:
- Never uses shell=True
- Runs the blocking call in a worker thread so the event loop stays free
- Captures stdout and stderr fully before returning
- Distinguishes "the process never started" from "the process failed"
"""

from __future__ import annotations

import asyncio
import json
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from code_debugger.utils.async_helpers import CommandTimeoutError, ToolSpawnError

log = structlog.get_logger()


# Substrings a shell or launcher prints when the tool binary is missing.
# "{tool}" is replaced with the tool name.
NOT_INSTALLED_SIGNATURES = (
    "'{tool}' is not recognized",
    "command not found: {tool}",
    "{tool}: command not found",
    "No module named {tool}",
)


def is_tool_missing(stderr: str, tool: str) -> bool:
    """Return True if stderr carries a "tool not installed" signature."""
    return any(signature.format(tool=tool) in stderr for signature in NOT_INSTALLED_SIGNATURES)


@dataclass
class CommandResult:
    """Result of a tool command execution."""

    stdout: str
    stderr: str
    return_code: int
    command: list[str]

    @property
    def success(self) -> bool:
        """Return True if the command succeeded."""
        return self.return_code == 0

    def json(self) -> Any:
        """Parse stdout as JSON.

        Raises:
            ValueError: If stdout is not valid JSON.
        """
        return json.loads(self.stdout)


class ToolRunner:
    """Runs one external tool binary.

    Example:
        runner = ToolRunner("pylint", timeout=60)
        result = await runner.run([str(path), "--output-format=json"])
        records = result.json()
    """

    # Default timeout for tool runs (seconds)
    DEFAULT_TIMEOUT = 60.0

    def __init__(
        self,
        executable: str,
        timeout: float | None = DEFAULT_TIMEOUT,
        cwd: Path | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            executable: Tool name (resolved through PATH) or absolute path.
            timeout: Timeout in seconds. None lets the tool run to completion.
            cwd: Working directory for the tool process.
        """
        self._executable = executable
        self._timeout = timeout
        self._cwd = cwd

    @property
    def executable(self) -> str:
        """Return the configured tool executable."""
        return self._executable

    @property
    def timeout(self) -> float | None:
        """Return the configured timeout in seconds."""
        return self._timeout

    def is_available(self) -> bool:
        """Return True if the executable can be found."""
        return shutil.which(self._executable) is not None

    async def run(self, args: list[str]) -> CommandResult:
        """Run the tool and wait for it to exit.

        Args:
            args: Command arguments (without the executable).

        Returns:
            CommandResult with stdout, stderr, and return code. A nonzero
            return code is not an error here; linters and compilers use it
            to signal findings.

        Raises:
            ToolSpawnError: If the process could not be started.
            CommandTimeoutError: If the process outlived the timeout.
        """
        cmd = [self._executable, *args]

        log.debug("executing_tool_command", command=cmd, timeout=self._timeout)

        def run_sync() -> subprocess.CompletedProcess[str]:
            return subprocess.run(  # noqa: S603
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._timeout,
                cwd=self._cwd,
                shell=False,
            )

        try:
            proc = await asyncio.to_thread(run_sync)
        except subprocess.TimeoutExpired as e:
            log.error("command_timeout", command=cmd, timeout=self._timeout)
            raise CommandTimeoutError(
                f"Command timed out after {self._timeout}s: {' '.join(cmd)}"
            ) from e
        except OSError as e:
            log.error("tool_spawn_failed", command=cmd, error=str(e))
            raise ToolSpawnError(f"Failed to start {self._executable}: {e}") from e

        return CommandResult(
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            return_code=proc.returncode,
            command=cmd,
        )

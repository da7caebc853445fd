"""Async utilities and the shared exception hierarchy.

This module provides:
- Custom exceptions used across the analysis pipeline
- A timeout wrapper for awaitables

Nothing in the pipeline retries: a failed tool run or explanation call is a
terminal outcome for that request.
"""

from __future__ import annotations

import asyncio
import builtins
from collections.abc import Awaitable
from typing import TypeVar

import structlog

log = structlog.get_logger()

T = TypeVar("T")


# =============================================================================
# Custom Exceptions
# =============================================================================


class DebuggerError(Exception):
    """Base exception for all code debugger errors."""


class InputError(DebuggerError):
    """The submitted request carries no usable code."""


class ToolError(DebuggerError):
    """An external analysis tool could not be run."""


class ToolSpawnError(ToolError):
    """The tool process never started (binary missing or not executable)."""


class CommandTimeoutError(ToolError):
    """The tool process did not finish within its timeout."""


class LinterConfigError(DebuggerError):
    """The in-process linter rule configuration is invalid."""


class LLMAnalysisError(DebuggerError):
    """The explanation service call failed."""


class RateLimitError(LLMAnalysisError):
    """Rate limit exceeded.

    Attributes:
        retry_after: Number of seconds the provider asked to wait, if known.
    """

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class TimeoutError(LLMAnalysisError):
    """Operation timed out."""


class OCRError(DebuggerError):
    """Text could not be extracted from an image."""


# =============================================================================
# Timeout Utilities
# =============================================================================


async def with_timeout(
    coro: Awaitable[T],
    timeout: float | None,
    error_message: str | None = None,
) -> T:
    """Execute an awaitable with a timeout.

    Args:
        coro: The coroutine to execute.
        timeout: Timeout in seconds. None waits indefinitely.
        error_message: Custom error message for timeout.

    Returns:
        The result of the coroutine.

    Raises:
        TimeoutError: If the operation times out.
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except builtins.TimeoutError as e:
        msg = error_message or f"Operation timed out after {timeout}s"
        log.warning("operation_timeout", timeout=timeout)
        raise TimeoutError(msg) from e

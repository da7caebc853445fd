"""Structured logging for the code debugger.

All output goes through structlog on top of the stdlib logging module. Every
event dictionary passes through :func:`secret_sanitizer` before rendering, so
a secret that ends up in submitted code, tool stderr or an exception message
never reaches a log sink. Request-scoped fields (request id, language) live in
contextvars and are merged into each event.
"""

from __future__ import annotations

import contextlib
import logging
import sys
from collections.abc import Iterator, MutableMapping
from enum import StrEnum
from pathlib import Path
from typing import Any, cast

import structlog
from structlog.typing import Processor, WrappedLogger

from code_debugger.utils.security import SecretRedactor

SERVICE_NAME = "code-debugger"


class LogFormat(StrEnum):
    """Renderer used for log lines."""

    JSON = "json"
    CONSOLE = "console"


class LogLevel(StrEnum):
    """Stdlib level names accepted in configuration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


_redactor: SecretRedactor | None = None


def _get_redactor() -> SecretRedactor:
    global _redactor
    if _redactor is None:
        _redactor = SecretRedactor()
    return _redactor


def sanitize_log_value(value: Any) -> Any:
    """Redact secrets in strings, recursing into dicts, lists and tuples."""
    if isinstance(value, str):
        return _get_redactor().redact(value)
    if isinstance(value, dict):
        return {key: sanitize_log_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(sanitize_log_value(item) for item in value)
    return value


def secret_sanitizer(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Structlog processor that redacts secrets from every field."""
    return cast(MutableMapping[str, Any], sanitize_log_value(event_dict))


def add_context_processor(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Stamp the service name and package version on each event."""
    event_dict["service"] = SERVICE_NAME
    try:
        from code_debugger._version import __version__
    except (ImportError, RuntimeError):
        return event_dict
    event_dict["version"] = __version__
    return event_dict


def build_processors(log_format: LogFormat) -> list[Processor]:
    """Return the processor chain ending in the renderer for ``log_format``.

    The sanitizer runs after stack and exception info are attached and
    before rendering, so tracebacks are redacted too.
    """
    renderer: Processor
    if log_format == LogFormat.JSON:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True, exception_formatter=structlog.dev.plain_traceback
        )

    return [
        structlog.contextvars.merge_contextvars,
        add_context_processor,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        secret_sanitizer,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


def _build_handlers(numeric_level: int, file_path: Path | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if file_path is not None:
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(file_path))
        except OSError as e:
            # Console-only logging is still usable
            logging.getLogger(__name__).warning(f"Could not open log file {file_path}: {e}")
    for handler in handlers:
        handler.setLevel(numeric_level)
    return handlers


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    log_format: LogFormat | str = LogFormat.JSON,
    file_path: Path | str | None = None,
    file_enabled: bool = False,
) -> None:
    """Configure structlog and the stdlib root logger.

    Safe to call more than once; the CLI configures console logging first
    and reconfigures from the loaded settings.

    Args:
        level: Minimum level, as a LogLevel or its name in any case.
        log_format: ``json`` for aggregation, ``console`` for development.
        file_path: Extra log file, used only when ``file_enabled`` is true.
        file_enabled: Whether to also write to ``file_path``.
    """
    level = LogLevel(level.upper()) if isinstance(level, str) else level
    log_format = LogFormat(log_format.lower()) if isinstance(log_format, str) else log_format
    numeric_level: int = getattr(logging, level.value)

    structlog.configure(
        processors=build_processors(log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    target = Path(file_path) if file_enabled and file_path else None
    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        handlers=_build_handlers(numeric_level, target),
        force=True,
    )


def get_logger(name: str | None = None) -> WrappedLogger:
    return cast(WrappedLogger, structlog.get_logger(name))


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every subsequent event in the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextlib.contextmanager
def request_context(**kwargs: Any) -> Iterator[None]:
    """Bind fields for the duration of one request, starting from a clean slate.

    Example:
        with request_context(request_id="3f2a", path="/api/debug"):
            log.info("analysis_started")  # carries request_id and path
    """
    clear_context()
    bind_context(**kwargs)
    try:
        yield
    finally:
        clear_context()


class LogEventNames:
    """Event names shared across modules."""

    # Service lifecycle
    SERVICE_STARTING = "service_starting"
    SERVICE_STOPPED = "service_stopped"

    # Analysis
    ANALYSIS_STARTED = "analysis_started"
    ANALYSIS_COMPLETE = "analysis_complete"
    ANALYSIS_FAILED = "analysis_failed"
    UNSUPPORTED_LANGUAGE = "unsupported_language"

    # External tools
    TOOL_NOT_INSTALLED = "tool_not_installed"
    TOOL_STDERR = "tool_stderr"
    TOOL_OUTPUT_PARSE_ERROR = "tool_output_parse_error"
    TEMP_ARTIFACT_SETUP_FAILED = "temp_artifact_setup_failed"

    # Explanation service
    AI_EXPLANATIONS_DISABLED = "ai_explanations_disabled"
    AI_EXPLANATION_REQUESTED = "ai_explanation_requested"
    AI_EXPLANATION_FAILED = "ai_explanation_failed"
    AI_RESPONSE_NOT_JSON = "ai_response_not_json"

    # Ingress
    UNKNOWN_FILE_EXTENSION = "unknown_file_extension"
    INPUT_REJECTED = "input_rejected"
    UPLOAD_TOO_LARGE = "upload_too_large"

    # HTTP surface
    REQUEST_FAILED = "request_failed"
    OCR_FAILED = "ocr_failed"

    # Health checks
    HEALTH_CHECK_START = "health_check_start"
    HEALTH_CHECK_COMPLETE = "health_check_complete"

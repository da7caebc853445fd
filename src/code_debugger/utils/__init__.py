"""Utility functions and helpers.

This module provides various utilities for the code debugger:
- security: Secret redaction, log hygiene
- safe_subprocess: Safe subprocess execution for external tools
- tempfiles: Temporary artifact lifecycle
- async_helpers: Exception hierarchy, timeouts
- logging: Structured logging with secret sanitization
- health: Health check utilities
"""

from code_debugger.utils.health import (
    HealthChecker,
    HealthReport,
    HealthStatus,
)
from code_debugger.utils.logging import (
    LogFormat,
    LogLevel,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    request_context,
    unbind_context,
)
from code_debugger.utils.security import (
    RedactionError,
    SecretRedactor,
    SecurityError,
)

__all__ = [
    # Health
    "HealthChecker",
    "HealthReport",
    "HealthStatus",
    # Logging
    "LogFormat",
    "LogLevel",
    # Security
    "RedactionError",
    "SecretRedactor",
    "SecurityError",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "request_context",
    "unbind_context",
]

"""Temporary artifact management for subprocess-based strategies.

Every path handed to an external tool is created through
:func:`temporary_artifact` and removed through :func:`discard`, which is the
single place the "cleanup never fails a request" policy lives.
"""

from __future__ import annotations

import contextlib
import tempfile
import time
from collections.abc import Iterator
from pathlib import Path

import structlog

log = structlog.get_logger()


def unique_temp_path(prefix: str, suffix: str = "", directory: Path | None = None) -> Path:
    """Build a unique path in the temp directory without creating it.

    Uniqueness comes from a nanosecond timestamp.
    """
    base = directory if directory is not None else Path(tempfile.gettempdir())
    return base / f"{prefix}_{time.time_ns()}{suffix}"


def discard(path: Path) -> bool:
    """Delete a temporary artifact, logging instead of raising on failure.

    A missing file is not a failure; compiled outputs only exist when the
    compiler got far enough to write them.

    Returns:
        True if the file is gone afterwards.
    """
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        log.warning("temp_artifact_cleanup_failed", path=str(path), error=str(e))
        return False
    return True


@contextlib.contextmanager
def temporary_artifact(
    prefix: str,
    suffix: str = "",
    directory: Path | None = None,
) -> Iterator[Path]:
    """Reserve a temporary path and delete it when the block exits.

    The file itself is created by whoever uses the path (the caller writing
    source code, or a compiler writing its output). Deletion runs on every
    exit path, including exceptions.

    Example:
        with temporary_artifact("temp_python_code", ".py") as path:
            path.write_text(code)
            result = await runner.run([str(path)])
    """
    path = unique_temp_path(prefix, suffix, directory)
    try:
        yield path
    finally:
        discard(path)

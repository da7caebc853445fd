"""Resolve submitted code and its language tag.

Uploaded files are tagged by extension; pasted code carries the tag the
caller supplied. Both fall back to JavaScript, and uploads report that they
did so.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath

import structlog

from code_debugger.utils.async_helpers import InputError
from code_debugger.utils.logging import LogEventNames

log = structlog.get_logger()

DEFAULT_LANGUAGE = "javascript"

EXTENSION_LANGUAGES: dict[str, str] = {
    ".js": "javascript",
    ".py": "python",
    ".cpp": "c++",
    ".cxx": "c++",
    ".cc": "c++",
}

NO_CODE_ERROR = "No code provided for debugging."


@dataclass(frozen=True)
class CodeSubmission:
    """Code and language tag handed to the dispatcher."""

    code: str
    language: str
    source: str  # "upload" or "paste"
    filename: str | None = None
    language_fallback: bool = False


def language_for_filename(filename: str) -> tuple[str, bool]:
    """Map a filename to a language tag.

    Returns:
        The tag and whether it is the default fallback.
    """
    suffix = PurePath(filename).suffix.lower()
    language = EXTENSION_LANGUAGES.get(suffix)
    if language is None:
        return DEFAULT_LANGUAGE, True
    return language, False


def _require_code(code: str) -> str:
    if not code or not code.strip():
        log.info(LogEventNames.INPUT_REJECTED, reason="empty_code")
        raise InputError(NO_CODE_ERROR)
    return code


def resolve_upload(filename: str, data: bytes) -> CodeSubmission:
    """Resolve an uploaded file.

    Args:
        filename: Client-supplied file name; only its extension is used.
        data: File content, decoded as UTF-8 with replacement characters.

    Raises:
        InputError: If the file holds no code.
    """
    code = _require_code(data.decode("utf-8", errors="replace"))
    language, fallback = language_for_filename(filename)
    if fallback:
        log.warning(
            LogEventNames.UNKNOWN_FILE_EXTENSION,
            filename=filename,
            language=language,
        )
    return CodeSubmission(
        code=code,
        language=language,
        source="upload",
        filename=filename,
        language_fallback=fallback,
    )


def resolve_pasted(code: str | None, language: str | None = None) -> CodeSubmission:
    """Resolve pasted code and its declared language.

    Raises:
        InputError: If no code was supplied.
    """
    code = _require_code(code or "")
    declared = (language or "").strip()
    return CodeSubmission(code=code, language=declared or DEFAULT_LANGUAGE, source="paste")

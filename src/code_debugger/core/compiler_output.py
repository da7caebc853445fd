"""Parser for free-text C/C++ compiler diagnostics.

g++ and clang++ print diagnostics to stderr as human-readable lines:

    /tmp/temp_cpp_code_1712.cpp:4:5: error: 'y' was not declared in this scope
    /tmp/temp_cpp_code_1712.cpp: In function 'int main()':
    /tmp/temp_cpp_code_1712.cpp:3:9: warning: unused variable 'x' [-Wunused-variable]

Lines matching the ``path:line:col: severity: message`` shape become located
diagnostics. Lines that mention ``error:`` or ``warning:`` without that shape
become unlocated diagnostics (line 0, column 0) so no tool output is lost.
Everything else (context lines, carets, notes) is ignored.
"""

from __future__ import annotations

import re

from code_debugger.core.explanations import lookup_explanation
from code_debugger.models.analysis import SOURCE_PLACEHOLDER
from code_debugger.models.diagnostic import Diagnostic, Severity
from code_debugger.utils.security import sanitize_for_logging

COMPILER_RULE_ID = "g++-compilation"

LOCATED_PATTERN = re.compile(
    r"^(?P<path>.*?):(?P<line>\d+):(?P<column>\d+):\s*"
    r"(?P<severity>(?:fatal )?error|warning):\s*(?P<message>.*)$"
)

# Trailing "[-Wunused-variable]" style option tags
WARNING_OPTION_PATTERN = re.compile(r"\s*\[(-W[\w=+-]+)\]\s*$")


def _make_diagnostic(
    severity: Severity,
    message: str,
    line: int = 0,
    column: int = 0,
    category: str | None = None,
) -> Diagnostic:
    entry = lookup_explanation(COMPILER_RULE_ID, message)
    return Diagnostic(
        severity=severity,
        message=message,
        explanation=entry.explanation,
        suggestion=entry.suggestion,
        rule_id=COMPILER_RULE_ID,
        line=line,
        column=column,
        category=category,
    )


def parse_compiler_line(
    line: str,
    source_path: str | None = None,
    source_name: str = SOURCE_PLACEHOLDER,
) -> Diagnostic | None:
    """Classify one stderr line.

    Args:
        line: A single line of compiler stderr.
        source_path: Temporary path the compiler was given; replaced by
            ``source_name`` inside unlocated messages.
        source_name: Name shown to the user in place of the temporary path.

    Returns:
        A located or unlocated Diagnostic, or None for non-diagnostic lines.
    """
    line = sanitize_for_logging(line)

    match = LOCATED_PATTERN.match(line)
    if match:
        message = match.group("message").strip()
        option = WARNING_OPTION_PATTERN.search(message)
        severity = Severity.WARNING if match.group("severity") == "warning" else Severity.ERROR
        return _make_diagnostic(
            severity=severity,
            message=message,
            line=int(match.group("line")),
            column=int(match.group("column")),
            category=option.group(1) if option else None,
        )

    text = line.strip()
    if source_path:
        text = text.replace(source_path, source_name)

    if "error:" in line:
        return _make_diagnostic(Severity.ERROR, text)
    if "warning:" in line:
        return _make_diagnostic(Severity.WARNING, text)
    return None


def parse_compiler_output(
    stderr: str,
    source_path: str | None = None,
    source_name: str = SOURCE_PLACEHOLDER,
) -> list[Diagnostic]:
    """Parse full compiler stderr into diagnostics, in output order.

    Args:
        stderr: Everything the compiler wrote to standard error.
        source_path: Temporary source path passed to the compiler.
        source_name: Display name for the source unit.

    Returns:
        One Diagnostic per error/warning line.
    """
    diagnostics: list[Diagnostic] = []
    for line in stderr.splitlines():
        diagnostic = parse_compiler_line(line, source_path, source_name)
        if diagnostic is not None:
            diagnostics.append(diagnostic)
    return diagnostics

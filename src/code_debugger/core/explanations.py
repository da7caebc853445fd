"""Human-readable explanations for well-known diagnostics.

Lookup is by exact rule identifier first, then by substring of the tool's
message. Entries are mutually distinct substrings, so at most one matches in
practice; the first match in table order wins.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Explanation:
    """Explanation and suggestion attached to a diagnostic."""

    explanation: str
    suggestion: str


GENERIC_EXPLANATION = Explanation(
    explanation="No specific explanation available for this error.",
    suggestion=(
        "Review the code at the reported line and column for syntax errors or logical "
        "inconsistencies. Search for the error message or rule ID online."
    ),
)


ERROR_EXPLANATIONS: dict[str, Explanation] = {
    # Parser messages (no rule id)
    "Unterminated string constant": Explanation(
        explanation=(
            "A string literal was opened but never closed with its matching quote, "
            'for example `"Hello` without the closing `"`.'
        ),
        suggestion="Make sure every string starts and ends with the same quote character.",
    ),
    "Unexpected token": Explanation(
        explanation=(
            "The parser found a character or symbol where it did not expect one, "
            "usually because of a syntax error or a typo."
        ),
        suggestion=(
            "Look for missing or extra punctuation (parentheses, brackets, braces, "
            "semicolons), misspelled keywords, or misplaced operators around the "
            "reported location."
        ),
    ),
    "Missing semicolon": Explanation(
        explanation="A statement ends without the semicolon (`;`) that terminates it.",
        suggestion="Add a semicolon at the end of the reported line.",
    ),
    "Unexpected end of input": Explanation(
        explanation=(
            "The code ended while a block, call or literal was still open, usually "
            "a function, loop or `if` missing its closing `}`."
        ),
        suggestion="Check for unclosed `{}`, `()` or `[]` and close every block you open.",
    ),
    # Linter rules
    "no-undef": Explanation(
        explanation=(
            "A variable or function is used but never declared or imported in the "
            "current scope, so the linter cannot find its definition."
        ),
        suggestion=(
            "Declare it with `const`, `let` or `var` before use, import it, or fix a "
            "typo in the name. Environment globals such as `window` need the right "
            "environment settings."
        ),
    ),
    "no-unused-vars": Explanation(
        explanation=(
            "A variable or import is declared but never used. Dead declarations can "
            "hide bugs and make code harder to read."
        ),
        suggestion="Remove the declaration or use it where it was meant to be used.",
    ),
    "semi": Explanation(
        explanation=(
            "Statements must end with a semicolon so the code does not depend on "
            "automatic semicolon insertion."
        ),
        suggestion="Add a semicolon (`;`) at the end of the reported statement.",
    ),
    "indent": Explanation(
        explanation=(
            "The line is not indented with the configured style. Inconsistent "
            "indentation makes the structure of the code hard to follow."
        ),
        suggestion=(
            "Re-indent the line to the expected width; most editors can do this automatically."
        ),
    ),
    "quotes": Explanation(
        explanation="String literals must consistently use the configured quote character.",
        suggestion="Switch the string to the configured quotes (single quotes by default).",
    ),
    "no-console": Explanation(
        explanation="`console` calls are debugging output and are usually not meant to ship.",
        suggestion="Remove the call or route the message through a proper logger.",
    ),
    "no-trailing-spaces": Explanation(
        explanation="The line ends with whitespace that serves no purpose.",
        suggestion="Remove the spaces or tabs at the end of the line.",
    ),
    "eol-last": Explanation(
        explanation="The file must end with a newline character.",
        suggestion="Add an empty line at the very end of the file.",
    ),
    # Compiler messages
    "was not declared in this scope": Explanation(
        explanation=(
            "The compiler found a name that has no declaration visible at this point, "
            "often a missing `#include`, a typo, or a missing `std::` prefix."
        ),
        suggestion=(
            "Declare the name, include the header that declares it, "
            "or qualify it with its namespace."
        ),
    ),
    "expected ';'": Explanation(
        explanation=(
            "The compiler expected a semicolon to end the previous statement or declaration."
        ),
        suggestion="Add the missing `;` at the end of the statement before the reported location.",
    ),
}


def lookup_explanation(rule_id: str | None, message: str) -> Explanation:
    """Find the explanation for a diagnostic.

    Args:
        rule_id: Tool-specific rule identifier, if any.
        message: The tool's message text.

    Returns:
        The matching table entry, or the generic fallback.
    """
    if rule_id and rule_id in ERROR_EXPLANATIONS:
        return ERROR_EXPLANATIONS[rule_id]

    for key, entry in ERROR_EXPLANATIONS.items():
        if key in message:
            return entry

    return GENERIC_EXPLANATION

"""Tests for the explanation lookup table."""

from code_debugger.core.explanations import (
    ERROR_EXPLANATIONS,
    GENERIC_EXPLANATION,
    lookup_explanation,
)


class TestLookupExplanation:
    """Tests for lookup_explanation."""

    def test_exact_rule_id(self) -> None:
        """Test that a known rule id wins."""
        assert lookup_explanation("no-undef", "'x' is not defined.") is ERROR_EXPLANATIONS[
            "no-undef"
        ]

    def test_rule_id_beats_message(self) -> None:
        """Test that the rule id is tried before message substrings."""
        entry = lookup_explanation("semi", "Parsing error: Unexpected token )")
        assert entry is ERROR_EXPLANATIONS["semi"]

    def test_message_substring_without_rule(self) -> None:
        """Test substring matching for parser messages without a rule id."""
        entry = lookup_explanation(None, "Parsing error: Unterminated string constant")
        assert entry is ERROR_EXPLANATIONS["Unterminated string constant"]

    def test_message_substring_with_unknown_rule(self) -> None:
        """Test substring matching when the rule id is not in the table."""
        entry = lookup_explanation("g++-compilation", "expected ';' before 'return'")
        assert entry is ERROR_EXPLANATIONS["expected ';'"]

    def test_generic_fallback(self) -> None:
        """Test the fallback for unknown diagnostics."""
        assert lookup_explanation("unused-import", "Unused import os") is GENERIC_EXPLANATION
        assert lookup_explanation(None, "") is GENERIC_EXPLANATION

    def test_entries_are_complete(self) -> None:
        """Test that every table entry has explanation and suggestion text."""
        for entry in (*ERROR_EXPLANATIONS.values(), GENERIC_EXPLANATION):
            assert entry.explanation
            assert entry.suggestion

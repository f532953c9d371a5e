"""Tests for AmountParser component."""

import pytest
from decimal import Decimal
from receipt_scan.parsers.amount_parser import AmountParser
from receipt_scan.parsers.base import ReceiptContext


class TestAmountParser:
    """Test suite for AmountParser."""

    def setup_method(self):
        """Set up test fixtures."""
        self.parser = AmountParser()

    def _parse(self, lines):
        return self.parser.parse(ReceiptContext(lines=lines))

    def test_total_beats_ignored_lines(self):
        """Subtotal and tax lines never contribute candidates."""
        result = self._parse(["Subtotal $40.00", "Tax $5.00", "Total $45.00"])

        assert result is not None
        assert result.value == Decimal("45.00")
        assert result.metadata['type'] == 'keyword'
        assert result.metadata['priority'] == 102

    def test_ignore_set_takes_precedence_over_total_keywords(self):
        """A 'Sub Total' line is excluded even though it contains 'total'."""
        result = self._parse(["Sub Total $40.00", "Grand Total $44.00"])

        assert result is not None
        assert result.value == Decimal("44.00")
        assert result.metadata['priority'] == 120

    def test_ignored_line_with_larger_amount(self):
        """Ignored lines are dropped before any amount is considered."""
        result = self._parse(["Cash $100.00", "Total $12.50", "Change $87.50"])

        assert result.value == Decimal("12.50")

    def test_later_total_line_wins(self):
        """Bare 'total' lines get 100 + line index, so the later one wins."""
        result = self._parse(["Total $10.00", "Item $3.00", "Total $20.00"])

        assert result.value == Decimal("20.00")
        assert result.metadata['priority'] == 102
        assert result.metadata['line_idx'] == 2

    def test_later_smaller_total_still_wins(self):
        """The line index tie-break is applied before the amount tie-break."""
        result = self._parse(["Total $50.00", "Total $20.00"])

        assert result.value == Decimal("20.00")

    def test_fallback_to_largest_amount(self):
        """Without any keyword the largest amount is chosen."""
        result = self._parse(["Coffee $4.50", "Muffin $3.25"])

        assert result.value == Decimal("4.50")
        assert result.metadata['type'] == 'fallback'
        assert result.metadata['priority'] == 0

    def test_total_amount_highest_priority(self):
        """'Total amount' outranks 'grand total' and bare 'total'."""
        result = self._parse([
            "Grand Total $30.00",
            "Total Amount $25.00",
            "Total $99.00",
        ])

        assert result.value == Decimal("25.00")
        assert result.metadata['priority'] == 150

    def test_amount_due_priority(self):
        """'Amount due' lines rank below bare 'total' but above unclassified lines."""
        result = self._parse(["Steak $80.00", "Balance Due $42.00"])

        assert result.value == Decimal("42.00")
        assert result.metadata['priority'] == 80

    def test_bare_total_beats_amount_due(self):
        result = self._parse(["Amount Due $42.00", "Total $40.00"])

        assert result.value == Decimal("40.00")

    def test_total_due_matches_bare_total_first(self):
        """'Total due' contains the whole word 'total', which is checked earlier."""
        result = self._parse(["Total Due $15.00"])

        assert result.metadata['priority'] == 100

    def test_total_word_boundary(self):
        """'Totals' does not count as the word 'total'."""
        parser = self.parser
        rule, priority = parser.classify_line("Totals $5.00", 3)

        assert rule is None
        assert priority == 0

    def test_tie_on_priority_prefers_larger_amount(self):
        result = self._parse(["Grand Total $10.00 $12.00"])

        assert result.value == Decimal("12.00")

    def test_amount_without_dollar_sign(self):
        result = self._parse(["TOTAL 18.99"])

        assert result.value == Decimal("18.99")

    def test_dollar_sign_with_space(self):
        result = self._parse(["Total $ 7.05"])

        assert result.value == Decimal("7.05")

    def test_amount_requires_two_decimals(self):
        """Whole numbers and single decimals are not amounts."""
        assert self._parse(["Total $45", "Table 12", "Weight 1.5"]) is None

    def test_zero_amount_is_not_a_candidate(self):
        result = self._parse(["Total $0.00", "Coffee $3.00"])

        assert result.value == Decimal("3.00")
        assert result.value > 0

    def test_no_amount_found(self):
        """Test handling when no amount is found."""
        assert self._parse(["Joe's Diner", "Thank you!"]) is None

    def test_empty_input(self):
        assert self._parse([]) is None

    def test_only_ignored_lines(self):
        """Amounts only on ignored lines mean no amount at all."""
        assert self._parse(["Subtotal $40.00", "Tax $3.20", "Visa Card $43.20"]) is None

    @pytest.mark.parametrize("line", [
        "SUBTOTAL $1.00",
        "sub-total $1.00",
        "Sales Tax $1.00",
        "Tip $1.00",
        "Discount $1.00",
        "Debit $1.00",
        "Amount Tendered $1.00",
        "Paid with VISA $1.00",
        "Payment $1.00",
    ])
    def test_ignore_keywords(self, line):
        rule, _ = self.parser.classify_line(line, 0)

        assert rule is not None
        assert rule.ignore

    def test_ignore_matches_substrings(self):
        """Ignore keywords are plain substrings: 'Stipend' contains 'tip'."""
        assert self._parse(["Stipend $10.00"]) is None

    def test_input_is_not_mutated(self):
        lines = ["Subtotal $40.00", "Total $45.00"]
        context = ReceiptContext(lines=lines)

        self.parser.parse(context)

        assert lines == ["Subtotal $40.00", "Total $45.00"]

"""Total amount parsing with keyword-priority classification."""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, List, Tuple
from .base import BaseParser, ParseResult, ReceiptContext
from ..config import AmountRule

logger = logging.getLogger(__name__)

FALLBACK_PRIORITY = 0


@dataclass
class AmountCandidate:
    """A dollar amount found on a line, tagged with its priority."""
    amount: Decimal
    priority: int
    line: str
    line_idx: int
    reason: str


class AmountParser(BaseParser):
    """
    Specialized parser for extracting the transaction total.

    Every line is classified by the first matching rule of the amount rule
    table. Ignored lines (subtotal, tax, tender, ...) contribute nothing even
    when they also mention a total. All other amounts become candidates with
    the rule's priority, or priority 0 when no rule matched.
    """

    def parse(self, context: ReceiptContext) -> Optional[ParseResult]:
        """
        Extract the total amount from receipt lines.

        Args:
            context: Receipt context with recognized lines

        Returns:
            ParseResult with a positive Decimal amount, or None
        """
        candidates = self._find_candidates(context)

        if not candidates:
            self.logger.warning("No amount found in receipt")
            return None

        for candidate in candidates:
            self.logger.debug(f"Candidate ${candidate.amount} (priority: {candidate.priority}) - "
                              f"{candidate.reason} - '{candidate.line}'")

        best = self._select_best_amount(candidates)

        result = ParseResult(
            value=best.amount,
            source_text=best.line,
            metadata={
                'type': 'fallback' if best.priority == FALLBACK_PRIORITY else 'keyword',
                'priority': best.priority,
                'reason': best.reason,
                'line_idx': best.line_idx,
                'candidates': len(candidates),
            }
        )

        self._log_result(result, context)
        return result

    def classify_line(self, line: str, line_idx: int) -> Tuple[Optional[AmountRule], int]:
        """
        Classify a line against the rule table.

        Returns:
            (matched rule or None, priority). An ignore rule is returned with
            priority 0 and the caller is expected to skip the line.
        """
        line_lower = line.lower()
        for rule in self.rules.amount.rules:
            if rule.matches(line_lower):
                if rule.ignore:
                    return rule, FALLBACK_PRIORITY
                return rule, rule.priority_for(line_idx)
        return None, FALLBACK_PRIORITY

    def _find_candidates(self, context: ReceiptContext) -> List[AmountCandidate]:
        """Collect amounts from every non-ignored line."""
        candidates = []

        for line_idx, line in enumerate(context.lines):
            rule, priority = self.classify_line(line, line_idx)
            if rule is not None and rule.ignore:
                self.logger.debug(f"Ignoring line (excluded keyword): '{line}'")
                continue

            if rule is None:
                reason = "no keyword match"
            elif rule.add_line_index:
                reason = f"matched '{rule.name}' at line {line_idx}"
            else:
                reason = f"matched '{rule.name}'"

            for amount in self._extract_amounts_from_line(line):
                candidates.append(AmountCandidate(
                    amount=amount,
                    priority=priority,
                    line=line,
                    line_idx=line_idx,
                    reason=reason,
                ))

        return candidates

    def _extract_amounts_from_line(self, line: str) -> List[Decimal]:
        """Extract positive dollar amounts from a line."""
        amounts = []
        for match in self.rules.amount.pattern.finditer(line):
            try:
                amount = Decimal(match.group(1))
            except InvalidOperation:
                continue
            if amount > 0:
                amounts.append(amount)
        return amounts

    def _select_best_amount(self, candidates: List[AmountCandidate]) -> AmountCandidate:
        """Pick highest priority, then larger amount; fall back to the largest amount."""
        best = max(candidates, key=lambda c: (c.priority, c.amount))

        if best.priority > FALLBACK_PRIORITY:
            self.logger.info(f"Selected amount: ${best.amount} because {best.reason}")
            return best

        largest = max(candidates, key=lambda c: c.amount)
        self.logger.info(f"Selected amount: ${largest.amount} - largest amount fallback")
        return largest

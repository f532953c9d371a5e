"""Merchant/location name extraction from the top of the receipt."""

import logging
from typing import Optional
from .base import BaseParser, ParseResult, ReceiptContext

logger = logging.getLogger(__name__)


class LocationParser(BaseParser):
    """Specialized parser for extracting the merchant name."""

    def parse(self, context: ReceiptContext) -> Optional[ParseResult]:
        """
        Return the first qualifying line among the leading lines.

        Args:
            context: Receipt context with recognized lines

        Returns:
            ParseResult with the stripped merchant name, or None
        """
        for line_idx, line in enumerate(context.lines[:self.rules.location.max_lines]):
            if not self.is_candidate(line):
                continue

            result = ParseResult(
                value=line.strip(),
                source_text=line,
                metadata={'line_idx': line_idx}
            )
            self._log_result(result, context)
            return result

        self.logger.warning("No location found in receipt")
        return None

    def is_candidate(self, line: str) -> bool:
        """Long enough, no price marker, not a 'receipt' heading."""
        rules = self.rules.location
        if len(line.strip()) <= rules.min_length:
            return False
        if any(marker in line for marker in rules.exclude_substrings):
            return False
        line_lower = line.lower()
        return not any(keyword in line_lower for keyword in rules.exclude_keywords)

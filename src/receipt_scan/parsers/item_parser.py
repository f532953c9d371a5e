"""Line-item collection."""

import logging
from typing import Optional
from .base import BaseParser, ParseResult, ReceiptContext

logger = logging.getLogger(__name__)


class ItemParser(BaseParser):
    """Collects priced lines that are not totals."""

    def parse(self, context: ReceiptContext) -> Optional[ParseResult]:
        rules = self.rules.items
        items = [
            line for line in context.lines
            if rules.required_marker in line
            and not any(keyword in line.lower() for keyword in rules.exclude_keywords)
        ]

        if not items:
            self.logger.debug("No line items found")
            return None

        self.logger.info(f"Found {len(items)} line items")
        return ParseResult(value=items, source_text=items[0], metadata={'count': len(items)})

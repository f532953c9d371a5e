"""Review queue for receipts whose extraction needs manual completion."""

import logging
from typing import List, Optional
from dataclasses import dataclass, field
from pathlib import Path

from .parse import ReceiptExtraction

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 80


@dataclass
class ReviewItem:
    """Represents a receipt that needs manual review."""
    file_path: str
    reason: str
    missing_fields: List[str] = field(default_factory=list)
    raw_snippet: str = ""


class ReviewQueue:
    """Manages receipts that need manual review."""

    def __init__(self, required_fields: Optional[List[str]] = None):
        """
        Initialize review queue.

        Args:
            required_fields: Fields an expense cannot be saved without
        """
        self.items: List[ReviewItem] = []
        self.required_fields = required_fields or ['amount', 'date']

    def should_review(self, extraction: ReceiptExtraction) -> bool:
        """True when a required field is missing."""
        missing = set(extraction.missing_fields())
        return any(name in missing for name in self.required_fields)

    def add_item(self,
                 file_path: str,
                 reason: str,
                 missing_fields: Optional[List[str]] = None,
                 raw_snippet: str = ""):
        """Add an item to the review queue."""
        item = ReviewItem(
            file_path=file_path,
            reason=reason,
            missing_fields=missing_fields or [],
            raw_snippet=raw_snippet[:SNIPPET_LENGTH],
        )

        self.items.append(item)
        logger.debug(f"Added to review queue: {Path(file_path).name} - {reason}")

    def add_from_extraction(self, file_path: str, extraction: ReceiptExtraction) -> bool:
        """
        Add a receipt to review if a required field is missing.

        Returns:
            True if the receipt was queued
        """
        if not self.should_review(extraction):
            return False

        missing = extraction.missing_fields()
        reason = "; ".join(f"missing {name}" for name in missing if name in self.required_fields)
        if extraction.is_empty:
            reason = "no fields could be extracted"

        logger.info(f"Sending {Path(file_path).name} to review: {reason}")
        self.add_item(
            file_path=file_path,
            reason=reason,
            missing_fields=missing,
            raw_snippet=extraction.raw_text,
        )
        return True

"""Receipt extraction: composes the field parsers into one record."""

import logging
from dataclasses import dataclass
import datetime
from decimal import Decimal
from typing import Optional, Dict, Any, List, Sequence
from .config import ExtractionRules
from .parsers import AmountParser, DateParser, LocationParser, ItemParser
from .parsers.base import ReceiptContext

logger = logging.getLogger(__name__)

EXTRACTED_FIELDS = ('amount', 'location', 'date', 'line_items')


@dataclass
class ReceiptExtraction:
    """
    Structured fields inferred from one receipt.

    Every extracted field is None when it could not be found; an extraction
    with all fields missing is a valid outcome, not an error.
    """
    amount: Optional[Decimal] = None
    location: Optional[str] = None
    date: Optional[datetime.date] = None
    line_items: Optional[List[str]] = None
    raw_text: str = ""

    @property
    def is_empty(self) -> bool:
        """True when none of the four fields was found."""
        return not any(getattr(self, name) is not None for name in EXTRACTED_FIELDS)

    def missing_fields(self) -> List[str]:
        """Names of the extracted fields that were not found."""
        return [name for name in EXTRACTED_FIELDS if getattr(self, name) is None]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation; missing fields map to None."""
        return {
            'amount': f"{self.amount:.2f}" if self.amount is not None else None,
            'location': self.location,
            'date': self.date.isoformat() if self.date is not None else None,
            'line_items': list(self.line_items) if self.line_items is not None else None,
            'raw_text': self.raw_text,
        }

    def to_form_fields(self) -> Dict[str, str]:
        """
        Values for an editable expense form.

        Missing fields become empty strings so the form shows a blank,
        editable field instead of failing.
        """
        return {
            'amount': f"{self.amount:.2f}" if self.amount is not None else "",
            'location': self.location or "",
            'date': self.date.isoformat() if self.date is not None else "",
            'notes': "\n".join(self.line_items) if self.line_items else "",
        }


class ReceiptParser:
    """
    Receipt parser composed of independent field parsers.

    The parsers are stateless apart from their read-only rules, so one
    instance can be shared between threads.
    """

    def __init__(self, rules: Optional[ExtractionRules] = None):
        """Initialize the field parsers with a shared rule set."""
        self.rules = rules or ExtractionRules.default()
        self.amount_parser = AmountParser(self.rules)
        self.location_parser = LocationParser(self.rules)
        self.date_parser = DateParser(self.rules)
        self.item_parser = ItemParser(self.rules)

        logger.debug(f"Initialized receipt parser with rules from {self.rules.source}")

    def parse_receipt(self, lines: Sequence[str], now: Optional[datetime.datetime] = None) -> ReceiptExtraction:
        """
        Extract structured fields from recognized receipt lines.

        Args:
            lines: Recognized text regions in top-to-bottom order
            now: Reference instant for the date sanity window, current time when omitted

        Returns:
            ReceiptExtraction; fields that could not be found are None
        """
        context = ReceiptContext(lines=list(lines), now=now)

        amount_result = self.amount_parser.parse(context)
        location_result = self.location_parser.parse(context)
        date_result = self.date_parser.parse(context)
        item_result = self.item_parser.parse(context)

        extraction = ReceiptExtraction(
            amount=amount_result.value if amount_result else None,
            location=location_result.value if location_result else None,
            date=date_result.value if date_result else None,
            line_items=item_result.value if item_result else None,
            raw_text=context.raw_text,
        )

        logger.info(f"Parsed receipt: amount={extraction.amount}, location={extraction.location}, "
                    f"date={extraction.date}, items={len(extraction.line_items or [])}")
        return extraction

    def parse_text(self, text: str, now: Optional[datetime.datetime] = None) -> ReceiptExtraction:
        """Parse a newline-separated OCR dump."""
        return self.parse_receipt(text.splitlines() if text else [], now=now)

"""Base classes for receipt field parsers."""

from abc import ABC, abstractmethod
from typing import Optional, Any, Dict, List
from dataclasses import dataclass, field
from datetime import datetime
import logging

from ..config import ExtractionRules

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """Result of a parsing operation with its source line and metadata."""
    value: Any
    source_text: str = ""
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}


@dataclass
class ReceiptContext:
    """
    Recognized lines of one receipt plus the clock instant of the extraction.

    The lines are copied so that parsers never alias the caller's list.
    """
    lines: List[str] = field(default_factory=list)
    now: Optional[datetime] = None

    def __post_init__(self):
        self.lines = [line if line is not None else "" for line in self.lines]
        if self.now is None:
            self.now = datetime.now()

    @property
    def raw_text(self) -> str:
        """All lines joined with single spaces, in original order."""
        return " ".join(self.lines)


class BaseParser(ABC):
    """Base class for all receipt field parsers."""

    def __init__(self, rules: Optional[ExtractionRules] = None):
        self.rules = rules or ExtractionRules.default()
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def parse(self, context: ReceiptContext) -> Optional[ParseResult]:
        """
        Parse the specific field from receipt context.

        Args:
            context: Receipt context with recognized lines

        Returns:
            ParseResult with the field value, or None if nothing was found
        """
        pass

    def _log_result(self, result: Optional[ParseResult], context: ReceiptContext):
        """Log parsing result for debugging."""
        if result:
            self.logger.info(f"Parsed: {result.value} from '{result.source_text}'")
        else:
            self.logger.warning(f"Parsing failed - no result in {len(context.lines)} lines")

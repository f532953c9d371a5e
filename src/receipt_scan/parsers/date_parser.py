"""Transaction date parsing against a fixed list of formats."""

import logging
import re
import unicodedata
from datetime import date, datetime
from typing import Optional, List, Tuple
from dateutil.relativedelta import relativedelta
from .base import BaseParser, ParseResult, ReceiptContext
from ..config import DateFormat

logger = logging.getLogger(__name__)

# English month names, independent of the process LC_TIME
MONTH_NAMES = (
    'january', 'february', 'march', 'april', 'may', 'june',
    'july', 'august', 'september', 'october', 'november', 'december',
)
MONTH_ABBREVIATIONS = tuple(name[:3] for name in MONTH_NAMES)

_MONTH_PATTERNS = {
    '%B': (re.compile(r'\b(' + '|'.join(MONTH_NAMES) + r')\b', re.IGNORECASE), MONTH_NAMES),
    '%b': (re.compile(r'\b(' + '|'.join(MONTH_ABBREVIATIONS) + r')\b', re.IGNORECASE), MONTH_ABBREVIATIONS),
}


def numeric_month(text: str, fmt: str) -> Tuple[str, str]:
    """
    Rewrite a %B or %b format and its text to use a month number.

    strptime reads month names from the current locale; matching them
    against a fixed English table keeps "June 02, 2025" parseable after a
    host application calls setlocale.

    Returns:
        (text, format) ready for strptime; unchanged when the format has no
        month name directive or the text has no month name
    """
    for directive, (pattern, names) in _MONTH_PATTERNS.items():
        if directive not in fmt:
            continue
        match = pattern.search(text)
        if not match:
            return text, fmt
        month = names.index(match.group(1).lower()) + 1
        text = text[:match.start()] + str(month) + text[match.end():]
        return text, fmt.replace(directive, '%m', 1)
    return text, fmt


def strip_punctuation(token: str) -> str:
    """Strip leading and trailing Unicode punctuation (categories P*)."""
    start, end = 0, len(token)
    while start < end and unicodedata.category(token[start]).startswith('P'):
        start += 1
    while end > start and unicodedata.category(token[end - 1]).startswith('P'):
        end -= 1
    return token[start:end]


class DateParser(BaseParser):
    """Specialized parser for extracting the transaction date."""

    def parse(self, context: ReceiptContext) -> Optional[ParseResult]:
        """
        Extract the transaction date from the leading lines.

        A token-level pass runs first; the whole-line pass is only reached
        when no token produced a plausible date.

        Args:
            context: Receipt context with recognized lines

        Returns:
            ParseResult with a datetime.date, or None
        """
        lines = context.lines[:self.rules.date.max_lines]
        window = self.sanity_window(context.now)

        found = self._scan_tokens(lines, window) or self._scan_lines(lines, window)
        if not found:
            self.logger.warning("No date found in receipt")
            return None

        parsed, fmt, line, pass_name = found
        result = ParseResult(
            value=parsed,
            source_text=line,
            metadata={'format': fmt.name, 'pass': pass_name}
        )

        self._log_result(result, context)
        return result

    def sanity_window(self, now: datetime) -> Tuple[datetime, datetime]:
        """Half-open window (now - N years, now] of plausible receipt dates."""
        return now - relativedelta(years=self.rules.date.window_years), now

    def parse_with_format(self, text: str, fmt: DateFormat,
                          window: Tuple[datetime, datetime]) -> Optional[date]:
        """Parse text with one format; dates outside the window count as no match."""
        value, directives = numeric_month(text, fmt.format)
        try:
            parsed = datetime.strptime(value, directives)
        except ValueError:
            return None

        earliest, latest = window
        if latest.tzinfo is not None:
            parsed = parsed.replace(tzinfo=latest.tzinfo)
        if not (earliest < parsed <= latest):
            self.logger.debug(f"Rejected implausible date {parsed.date()} from '{text}'")
            return None
        return parsed.date()

    def _scan_tokens(self, lines: List[str],
                     window: Tuple[datetime, datetime]) -> Optional[Tuple[date, DateFormat, str, str]]:
        for line in lines:
            tokens = [strip_punctuation(word) for word in line.split()]
            for fmt in self.rules.date.formats:
                for token in tokens:
                    if not token:
                        continue
                    parsed = self.parse_with_format(token, fmt, window)
                    if parsed:
                        return parsed, fmt, line, 'token'
        return None

    def _scan_lines(self, lines: List[str],
                    window: Tuple[datetime, datetime]) -> Optional[Tuple[date, DateFormat, str, str]]:
        for line in lines:
            text = line.strip()
            if not text:
                continue
            for fmt in self.rules.date.formats:
                parsed = self.parse_with_format(text, fmt, window)
                if parsed:
                    return parsed, fmt, line, 'line'
        return None

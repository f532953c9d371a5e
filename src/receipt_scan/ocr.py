"""Text recognition seam: recognizer interface, OCR dump replay and scanning."""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .exceptions import (
    NoTextDetectedError,
    ReceiptScanError,
    RecognitionError,
    UnreadableImageError,
)
from .parse import ReceiptExtraction, ReceiptParser

logger = logging.getLogger(__name__)


class TextRecognizer(ABC):
    """An engine that turns a receipt source into recognized text regions."""

    @abstractmethod
    def recognize(self, source: Path) -> List[str]:
        """
        Recognize text regions in a source.

        Args:
            source: Path to the receipt source

        Returns:
            One string per detected text region, top-to-bottom
        """
        pass


class OCRDumpRecognizer(TextRecognizer):
    """
    Replays saved recognition output instead of running an engine.

    Supported files:
        *.json - a list of strings, or an object with a "lines" list or a
                 "full_text" string
        *.txt  - one recognized region per line
    """

    SUFFIXES = ('.json', '.txt')

    def __init__(self, encoding: str = 'utf-8'):
        self.encoding = encoding

    def recognize(self, source: Path) -> List[str]:
        source = Path(source)
        if source.suffix.lower() not in self.SUFFIXES:
            raise UnreadableImageError(f"Unsupported OCR dump type: {source.name}")

        try:
            content = source.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise UnreadableImageError(f"Cannot read {source.name}: {e}") from e

        if source.suffix.lower() == '.txt':
            lines = content.splitlines()
        else:
            lines = self._lines_from_json(content, source)

        logger.debug(f"Loaded {len(lines)} lines from {source.name}")
        return lines

    def _lines_from_json(self, content: str, source: Path) -> List[str]:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise UnreadableImageError(f"Invalid JSON in {source.name}: {e}") from e

        if isinstance(data, dict):
            if 'lines' in data:
                data = data['lines']
            elif 'full_text' in data:
                data = (data['full_text'] or '').splitlines()

        if not isinstance(data, list) or not all(isinstance(line, str) for line in data):
            raise UnreadableImageError(f"{source.name} does not contain a list of text lines")
        return data


class ReceiptScanner:
    """Runs a recognizer and extracts receipt fields from its output."""

    def __init__(self, recognizer: TextRecognizer, parser: Optional[ReceiptParser] = None):
        self.recognizer = recognizer
        self.parser = parser or ReceiptParser()

    def scan(self, source: Path, now: Optional[datetime] = None) -> ReceiptExtraction:
        """
        Recognize and parse one receipt.

        Args:
            source: Path to the receipt source
            now: Reference instant for the date sanity window

        Returns:
            ReceiptExtraction for the source

        Raises:
            RecognitionError: The engine failed
            UnreadableImageError: The source could not be read
            NoTextDetectedError: The engine found no text
        """
        source = Path(source)
        logger.info(f"Starting text recognition for {source.name}")

        try:
            lines = self.recognizer.recognize(source)
        except ReceiptScanError:
            raise
        except Exception as e:
            logger.error(f"Recognition failed for {source.name}: {e}")
            raise RecognitionError(f"Recognition failed for {source.name}: {e}") from e

        if not lines:
            logger.warning(f"No text observations found in {source.name}")
            raise NoTextDetectedError(source.name)

        logger.info(f"Recognition extracted {len(lines)} lines of text")
        return self.parser.parse_receipt(lines, now=now)

"""Tests for the text recognition seam."""

import json
import pytest
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import List
from receipt_scan.exceptions import (
    NoTextDetectedError,
    RecognitionError,
    UnreadableImageError,
)
from receipt_scan.ocr import OCRDumpRecognizer, ReceiptScanner, TextRecognizer

NOW = datetime(2025, 6, 15, 12, 0, 0)

LINES = ["Corner Cafe", "06/01/2025", "Latte $4.75", "Total $4.75"]


class StaticRecognizer(TextRecognizer):
    def __init__(self, lines: List[str]):
        self.lines = lines

    def recognize(self, source: Path) -> List[str]:
        return list(self.lines)


class FailingRecognizer(TextRecognizer):
    def recognize(self, source: Path) -> List[str]:
        raise RuntimeError("engine crashed")


class TestOCRDumpRecognizer:
    """Test suite for OCRDumpRecognizer."""

    def setup_method(self):
        """Set up test fixtures."""
        self.recognizer = OCRDumpRecognizer()

    def test_json_list(self, tmp_path):
        dump = tmp_path / "receipt.json"
        dump.write_text(json.dumps(LINES), encoding='utf-8')

        assert self.recognizer.recognize(dump) == LINES

    def test_json_lines_object(self, tmp_path):
        dump = tmp_path / "receipt.json"
        dump.write_text(json.dumps({'lines': LINES, 'engine': 'vision'}), encoding='utf-8')

        assert self.recognizer.recognize(dump) == LINES

    def test_json_full_text_object(self, tmp_path):
        dump = tmp_path / "receipt.json"
        dump.write_text(json.dumps({'full_text': "\n".join(LINES)}), encoding='utf-8')

        assert self.recognizer.recognize(dump) == LINES

    def test_text_file(self, tmp_path):
        dump = tmp_path / "receipt.txt"
        dump.write_text("\n".join(LINES) + "\n", encoding='utf-8')

        assert self.recognizer.recognize(dump) == LINES

    def test_invalid_json(self, tmp_path):
        dump = tmp_path / "receipt.json"
        dump.write_text("{not json", encoding='utf-8')

        with pytest.raises(UnreadableImageError):
            self.recognizer.recognize(dump)

    def test_json_with_wrong_shape(self, tmp_path):
        dump = tmp_path / "receipt.json"
        dump.write_text(json.dumps({'lines': [1, 2, 3]}), encoding='utf-8')

        with pytest.raises(UnreadableImageError):
            self.recognizer.recognize(dump)

    def test_unsupported_suffix(self, tmp_path):
        image = tmp_path / "receipt.png"
        image.write_bytes(b"\x89PNG")

        with pytest.raises(UnreadableImageError):
            self.recognizer.recognize(image)

    def test_missing_file(self, tmp_path):
        with pytest.raises(UnreadableImageError):
            self.recognizer.recognize(tmp_path / "missing.txt")


class TestReceiptScanner:
    """Test suite for ReceiptScanner."""

    def test_scan(self):
        scanner = ReceiptScanner(StaticRecognizer(LINES))

        result = scanner.scan(Path("receipt.jpg"), now=NOW)

        assert result.location == "Corner Cafe"
        assert result.date == date(2025, 6, 1)
        assert result.amount == Decimal("4.75")
        assert result.line_items == ["Latte $4.75"]

    def test_scan_dump_file(self, tmp_path):
        dump = tmp_path / "receipt.json"
        dump.write_text(json.dumps(LINES), encoding='utf-8')

        result = ReceiptScanner(OCRDumpRecognizer()).scan(dump, now=NOW)

        assert result.raw_text == " ".join(LINES)

    def test_no_text_detected(self):
        scanner = ReceiptScanner(StaticRecognizer([]))

        with pytest.raises(NoTextDetectedError, match="receipt.jpg"):
            scanner.scan(Path("receipt.jpg"))

    def test_engine_failure_is_wrapped(self):
        scanner = ReceiptScanner(FailingRecognizer())

        with pytest.raises(RecognitionError) as exc_info:
            scanner.scan(Path("receipt.jpg"))

        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_scan_errors_pass_through(self, tmp_path):
        scanner = ReceiptScanner(OCRDumpRecognizer())

        with pytest.raises(UnreadableImageError):
            scanner.scan(tmp_path / "missing.json")

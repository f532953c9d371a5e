"""Receipt Scan - Extract transaction data from recognized receipt text."""

__version__ = "1.0.0"
__author__ = "Receipt Scan Team"
__email__ = ""

from .config import ExtractionRules
from .parse import ReceiptParser, ReceiptExtraction
from .ocr import TextRecognizer, OCRDumpRecognizer, ReceiptScanner
from .review import ReviewQueue, ReviewItem
from .validation import is_valid_amount, is_valid_location

__all__ = [
    'ExtractionRules',
    'ReceiptParser',
    'ReceiptExtraction',
    'TextRecognizer',
    'OCRDumpRecognizer',
    'ReceiptScanner',
    'ReviewQueue',
    'ReviewItem',
    'is_valid_amount',
    'is_valid_location',
]

"""Error taxonomy for the code surrounding receipt extraction.

The extraction core itself never raises; these exceptions belong to the
recognition seam, rule loading and the command-line interface.
"""


class ReceiptScanError(Exception):
    """Base class for all receipt scanning errors."""


class RecognitionError(ReceiptScanError):
    """The text recognition engine failed to process a source."""


class UnreadableImageError(ReceiptScanError):
    """The source could not be read or decoded."""


class NoTextDetectedError(ReceiptScanError):
    """The recognition engine returned no text regions."""

    def __init__(self, source: str = ""):
        self.source = source
        message = "No text detected"
        if source:
            message += f" in {source}"
        super().__init__(message)


class RulesConfigError(ReceiptScanError):
    """The extraction rule file is missing or malformed."""

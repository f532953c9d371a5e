"""Validation for amount and location text a caller edits after a scan."""

from decimal import Decimal, InvalidOperation


def is_valid_amount(amount: str) -> bool:
    """True when the text is a decimal number greater than zero."""
    try:
        value = Decimal(amount.strip())
    except (InvalidOperation, AttributeError):
        return False
    return value.is_finite() and value > 0


def is_valid_location(location: str) -> bool:
    """True when the text is not blank."""
    return bool(location and location.strip())

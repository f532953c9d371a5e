"""Receipt parsing components - one parser per extracted field."""

from .amount_parser import AmountParser
from .date_parser import DateParser
from .location_parser import LocationParser
from .item_parser import ItemParser

__all__ = ['AmountParser', 'DateParser', 'LocationParser', 'ItemParser']

"""Runtime helpers for the Coinbase client"""

from .errors import CoinbaseError
from .query import QueryParameters, with_query
from .units import BitcoinAmount, BitcoinUnit, FixedPrecisionUnit, convert

__all__ = [
    "CoinbaseError",
    "QueryParameters",
    "with_query",
    "BitcoinAmount",
    "BitcoinUnit",
    "FixedPrecisionUnit",
    "convert",
]

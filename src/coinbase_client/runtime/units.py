"""
Fixed-precision Bitcoin amounts.

Amounts are stored as Decimals truncated to one satoshi in the unit they are
expressed in. BitcoinAmount is also a Pydantic custom type that reads and
writes the Coinbase wire form {"amount": "<decimal string>", "currency": "BTC"}.
"""

from __future__ import annotations
import functools
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from enum import Enum
from typing import Any, Dict, Mapping, Union

from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema

from .errors import CurrencyMismatchError, DecodingError

Number = Union[Decimal, int, float, str]


class BitcoinUnit(Enum):
    """Bitcoin denominations, valued in satoshis per unit."""

    BTC = 100_000_000
    MBTC = 100_000
    UBTC = 100
    SATOSHI = 1

    @property
    def base(self) -> Decimal:
        """Satoshis per one unit."""
        return Decimal(self.value)


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Amounts cannot be booleans")
    if isinstance(value, float):
        return Decimal(repr(value))
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise DecodingError(f"Invalid decimal amount: {value!r}", cause=e) from e


@functools.total_ordering
class FixedPrecisionUnit:
    """
    An immutable amount of Bitcoin in a given unit.

    The value is truncated toward zero so that it never carries more
    precision than one satoshi.
    """

    __slots__ = ("_value", "_unit")

    def __init__(self, value: Number, unit: BitcoinUnit = BitcoinUnit.BTC):
        base = unit.base
        scaled = (_to_decimal(value) * base).to_integral_value(rounding=ROUND_DOWN)
        self._value = scaled / base
        self._unit = unit

    @property
    def value(self) -> Decimal:
        return self._value

    @property
    def unit(self) -> BitcoinUnit:
        return self._unit

    @property
    def satoshis(self) -> int:
        """The amount in satoshis."""
        return int(self._value * self._unit.base)

    def _check_unit(self, other: FixedPrecisionUnit) -> None:
        if other.unit is not self.unit:
            raise TypeError(
                f"Cannot combine {self.unit.name} with {other.unit.name}; convert first"
            )

    def _new(self, value: Decimal) -> FixedPrecisionUnit:
        return type(self)(value, self._unit)

    def __add__(self, other: Any) -> FixedPrecisionUnit:
        if not isinstance(other, FixedPrecisionUnit):
            return NotImplemented
        self._check_unit(other)
        return self._new(self._value + other.value)

    def __sub__(self, other: Any) -> FixedPrecisionUnit:
        if not isinstance(other, FixedPrecisionUnit):
            return NotImplemented
        self._check_unit(other)
        return self._new(self._value - other.value)

    def __mul__(self, scalar: Any) -> FixedPrecisionUnit:
        if isinstance(scalar, FixedPrecisionUnit):
            return NotImplemented
        return self._new(self._value * _to_decimal(scalar))

    __rmul__ = __mul__

    def __truediv__(self, scalar: Any) -> FixedPrecisionUnit:
        if isinstance(scalar, FixedPrecisionUnit):
            return NotImplemented
        return self._new(self._value / _to_decimal(scalar))

    def __neg__(self) -> FixedPrecisionUnit:
        return self._new(-self._value)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FixedPrecisionUnit):
            return self.satoshis == other.satoshis
        return NotImplemented

    def __lt__(self, other: Any) -> bool:
        if isinstance(other, FixedPrecisionUnit):
            return self.satoshis < other.satoshis
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.satoshis)

    def __str__(self) -> str:
        return f"{self._value} {self._unit.name}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self._value}', {self._unit.name})"


def convert(amount: FixedPrecisionUnit, unit: BitcoinUnit) -> FixedPrecisionUnit:
    """
    Convert an amount to another Bitcoin unit.

    Args:
        amount: Amount to convert
        unit: Target unit

    Returns:
        The same amount expressed in the target unit
    """
    scale = amount.unit.base / unit.base
    if unit is BitcoinUnit.BTC:
        return BitcoinAmount(amount.value * scale)
    return FixedPrecisionUnit(amount.value * scale, unit)


class BitcoinAmount(FixedPrecisionUnit):
    """A BTC-denominated amount as exchanged with the Coinbase API."""

    CURRENCY = "BTC"

    __slots__ = ()

    def __init__(self, value: Number, unit: BitcoinUnit = BitcoinUnit.BTC):
        if unit is not BitcoinUnit.BTC:
            raise ValueError("BitcoinAmount is always denominated in BTC")
        super().__init__(value, unit)

    @property
    def currency(self) -> str:
        return self.CURRENCY

    @classmethod
    def from_wire(cls, obj: Mapping[str, Any]) -> BitcoinAmount:
        """
        Decode a {"amount", "currency"} object.

        Raises:
            CurrencyMismatchError: If the currency is not BTC
            DecodingError: If the amount is missing or not a decimal
        """
        currency = obj.get("currency")
        if currency != cls.CURRENCY:
            raise CurrencyMismatchError(cls.CURRENCY, currency)
        if "amount" not in obj or obj["amount"] is None:
            raise DecodingError("Currency amount is missing its 'amount' field")
        return cls(str(obj["amount"]))

    def to_wire(self) -> Dict[str, str]:
        """Encode as a {"amount", "currency"} object with 8 decimal places."""
        return {
            "amount": f"{self.value.quantize(Decimal('0.00000001')):f}",
            "currency": self.CURRENCY,
        }

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> CoreSchema:
        """Return a Pydantic CoreSchema that validates and serializes BitcoinAmount."""
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda amount: amount.to_wire()
            ),
        )

    @classmethod
    def _validate(cls, value: Any) -> BitcoinAmount:
        """Validate and convert the input to a BitcoinAmount."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls.from_wire(value)
        if isinstance(value, (str, int, Decimal)) and not isinstance(value, bool):
            return cls(value)
        raise ValueError(f"Invalid BitcoinAmount: {value!r}")


__all__ = [
    "BitcoinUnit",
    "FixedPrecisionUnit",
    "BitcoinAmount",
    "convert",
]

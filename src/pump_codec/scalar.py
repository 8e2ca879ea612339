"""Conversión de enteros escalados (insulina, voltaje) a números decimales."""

from __future__ import annotations

import re
from decimal import ROUND_FLOOR, Decimal

from pump_codec.errors import MalformedTextError
from pump_codec.model import Insulin, Voltage

INSULIN_DIVISOR = 1000
VOLTAGE_DIVISOR = 1000

_HALF = Decimal("0.5")
_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")


def to_decimal(text: object) -> Decimal:
    """Read a JSON-number-like value as an exact Decimal.

    Args:
        text: Decimal, int, float or base-10 number text.

    Returns:
        The exact decimal value.

    Raises:
        MalformedTextError: If the value is not a finite decimal number.
    """
    if isinstance(text, bool):
        raise MalformedTextError(f"invalid number {text!r}")
    if isinstance(text, Decimal):
        value = text
    elif isinstance(text, int):
        value = Decimal(text)
    elif isinstance(text, float):
        # repr gives the shortest text that reads back as the same float.
        value = Decimal(repr(text))
    elif isinstance(text, str) and _NUMBER_RE.fullmatch(text):
        value = Decimal(text)
    else:
        raise MalformedTextError(f"invalid number {text!r}")
    if not value.is_finite():
        raise MalformedTextError(f"invalid number {text!r}")
    return value


def _check_divisor(divisor: int) -> None:
    if isinstance(divisor, bool) or not isinstance(divisor, int) or divisor <= 0:
        raise ValueError(f"divisor must be a positive integer, got {divisor!r}")


def encode_scaled(value: int, divisor: int) -> Decimal:
    """Return ``value / divisor`` as an exact decimal number."""
    _check_divisor(divisor)
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"scaled value must be an integer, got {value!r}")
    return Decimal(int(value)) / Decimal(divisor)


def decode_scaled(text: object, divisor: int) -> int:
    """Rebuild a scaled integer with round-half-up.

    ``floor(text * divisor + 0.5)`` exactly inverts the division done by
    :func:`encode_scaled`.

    Raises:
        MalformedTextError: If ``text`` is not a valid decimal number.
    """
    _check_divisor(divisor)
    scaled = to_decimal(text) * divisor + _HALF
    return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


def encode_insulin(value: int) -> Decimal:
    return encode_scaled(value, INSULIN_DIVISOR)


def decode_insulin(text: object) -> Insulin:
    return Insulin(decode_scaled(text, INSULIN_DIVISOR))


def encode_voltage(value: int) -> Decimal:
    return encode_scaled(value, VOLTAGE_DIVISOR)


def decode_voltage(text: object) -> Voltage:
    return Voltage(decode_scaled(text, VOLTAGE_DIVISOR))

"""Ratio de carbohidratos: la escala depende de las unidades (gramos/intercambios)."""

from __future__ import annotations

from decimal import Decimal
from typing import NoReturn

from pump_codec.errors import MissingUnitsError, UnknownUnitsError
from pump_codec.model import CarbUnitsType, Ratio
from pump_codec.scalar import decode_scaled, encode_scaled

_DIVISORS: dict[CarbUnitsType, int] = {
    CarbUnitsType.GRAMS: 10,
    CarbUnitsType.EXCHANGES: 1000,
}


def divisor_for(units: object) -> int:
    """Return the scaling divisor for a carb unit.

    An unset unit field (None) is an unknown unit like any other value.

    Raises:
        UnknownUnitsError: If ``units`` is not Grams or Exchanges.
    """
    if not isinstance(units, CarbUnitsType):
        raise UnknownUnitsError(f"unknown carb unit {units!r}")
    return _DIVISORS[units]


def encode_ratio(ratio: int, units: object) -> Decimal:
    """Render a carb ratio as a decimal in the given units.

    Grams 125 gives ``12.5``; Exchanges 125 gives ``0.125``.
    """
    return encode_scaled(ratio, divisor_for(units))


def decode_ratio(text: object, units: object) -> Ratio:
    """Rebuild a carb ratio from its decimal form; units never come from the text."""
    return Ratio(decode_scaled(text, divisor_for(units)))


def reject_bare_ratio(action: str) -> NoReturn:
    """Fail for a ratio that reached the codec outside of any record."""
    raise MissingUnitsError(f"cannot {action} carb ratio without units")

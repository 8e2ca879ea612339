"""Superficie JSON del codec: texto <-> registros de la bomba."""

from __future__ import annotations

import json
from collections.abc import Callable
from decimal import Decimal
from typing import Any, TypeVar

from pump_codec.errors import MalformedTextError
from pump_codec.records import decode_record, encode_value

R = TypeVar("R")


class _DecimalEncoder(json.JSONEncoder):
    """Writes Decimals as JSON numbers (integral ones without fraction).

    Fractional values go through float, so the text is exact only up to 15
    significant digits (scaled integers below 10**15).
    """

    def default(self, o: Any) -> Any:
        if isinstance(o, Decimal):
            if o == o.to_integral_value():
                return int(o)
            return float(o)
        return super().default(o)


def dumps(value: Any, indent: int | None = None) -> str:
    """Encode a pump record (or list of records) as JSON text.

    Args:
        value: Record, list of records or scalar pump value.
        indent: Optional pretty-print indent.

    Returns:
        JSON text; non-ASCII symbols such as ``μmol/L`` are kept as is.
    """
    return json.dumps(
        encode_value(value), cls=_DecimalEncoder, ensure_ascii=False, indent=indent
    )


def parse_json(text: str) -> Any:
    """Parse JSON keeping every fractional number as an exact Decimal."""
    try:
        return json.loads(text, parse_float=Decimal)
    except ValueError as exc:
        # JSONDecodeError, or an integer literal past the int conversion limit.
        raise MalformedTextError(f"invalid JSON: {exc}") from exc


def loads(text: str, into: R) -> R:
    """Decode a JSON object into the caller's record and return it."""
    data = parse_json(text)
    if not isinstance(data, dict):
        raise MalformedTextError("expected a JSON object")
    return decode_record(data, into)


def load_list(text: str, factory: Callable[[], R]) -> list[R]:
    """Decode a JSON array into fresh records built by ``factory``."""
    data = parse_json(text)
    if not isinstance(data, list):
        raise MalformedTextError("expected a JSON array")
    out: list[R] = []
    for item in data:
        if not isinstance(item, dict):
            raise MalformedTextError("expected a JSON object in array")
        out.append(decode_record(item, factory()))
    return out

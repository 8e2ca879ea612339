"""Errores tipados del codec de telemetría."""

from __future__ import annotations


class CodecError(ValueError):
    """Base class for every encode/decode failure."""


class MalformedTextError(CodecError):
    """Decimal, duration, time-of-day or timestamp text has the wrong grammar."""


class UnknownEnumError(CodecError):
    """A closed-set symbol is outside its declared set."""


class MissingUnitsError(CodecError):
    """A carb ratio was encoded or decoded without any unit context."""


class UnknownUnitsError(CodecError):
    """The unit context of a carb ratio is not Grams or Exchanges."""

"""Codificación de registros compuestos con tabla explícita de campos especiales.

Each record type has a :class:`RecordCodec` listing the fields whose text
form differs from the generic one (time of day, durations, timestamps,
unit-dependent ratios) and the derived fields written only on encode.
Every other dataclass field passes through the generic value codec.

Decoding is two-phase: all pass-through fields present in the input are
written into the destination record first, then the override fields in
table order. A ratio therefore reads the unit field that phase one just
populated. Decoding stops at the first error; fields handled before it
stay mutated, so the destination must be discarded on failure.
"""

from __future__ import annotations

import base64
import binascii
import dataclasses
import types
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, TypeVar, Union, get_args, get_origin, get_type_hints

from pump_codec.carb_ratio import decode_ratio, encode_ratio, reject_bare_ratio
from pump_codec.errors import MalformedTextError, UnknownEnumError
from pump_codec.model import (
    BasalRate,
    BatteryInfo,
    BolusRecord,
    BolusWizardConfig,
    BolusWizardRecord,
    CarbRatio,
    GlucoseTarget,
    HistoryRecord,
    Insulin,
    InsulinSensitivity,
    Ratio,
    SettingsInfo,
    Symbol,
    TempBasalInfo,
    UnabsorbedBolus,
    Voltage,
)
from pump_codec.scalar import (
    decode_insulin,
    decode_voltage,
    encode_insulin,
    encode_voltage,
)
from pump_codec.timefmt import (
    format_duration,
    format_time_of_day,
    format_timestamp,
    parse_duration,
    parse_time_of_day,
    parse_timestamp,
)

R = TypeVar("R")


def wire_name(attr: str) -> str:
    """PascalCase key used in the text form (``carb_units`` -> ``CarbUnits``)."""
    return "".join(part[:1].upper() + part[1:] for part in attr.split("_"))


def _field_wire_name(f: dataclasses.Field[Any]) -> str:
    return str(f.metadata.get("wire", wire_name(f.name)))


class FieldOverride(ABC):
    """A record field rendered with its own text form.

    Args:
        attr: Attribute name on the record.
        optional: Whether the field may be absent from the text form.
    """

    def __init__(self, attr: str, *, optional: bool = False) -> None:
        self.attr = attr
        self.wire = wire_name(attr)
        self.optional = optional

    def encode(self, record: object) -> object | None:
        """Text form of the field, or None to leave it out."""
        value = getattr(record, self.attr)
        if value is None:
            return None
        return self.render(value, record)

    def decode(self, record: object, mapping: Mapping[str, Any]) -> None:
        """Parse the field from ``mapping`` into ``record``."""
        raw = mapping.get(self.wire)
        if raw is None or raw == "":
            if self.optional:
                return
            raise MalformedTextError(f"missing {self.wire}")
        setattr(record, self.attr, self.parse(raw, record))

    @abstractmethod
    def render(self, value: Any, record: object) -> object:
        """Convert the in-memory value to its text form."""

    @abstractmethod
    def parse(self, raw: Any, record: object) -> object:
        """Convert the text form back to the in-memory value."""


class TimeOfDayField(FieldOverride):
    def render(self, value: Any, record: object) -> object:
        return format_time_of_day(value)

    def parse(self, raw: Any, record: object) -> object:
        return parse_time_of_day(raw)


class DurationField(FieldOverride):
    def render(self, value: Any, record: object) -> object:
        return format_duration(value)

    def parse(self, raw: Any, record: object) -> object:
        return parse_duration(raw)


class TimestampField(FieldOverride):
    def render(self, value: Any, record: object) -> object:
        return format_timestamp(value)

    def parse(self, raw: Any, record: object) -> object:
        return parse_timestamp(raw)


class UnitRatioField(FieldOverride):
    """Carb ratio scaled by the sibling unit field ``units_attr``."""

    def __init__(self, attr: str, units_attr: str) -> None:
        super().__init__(attr)
        self.units_attr = units_attr

    def render(self, value: Any, record: object) -> object:
        return encode_ratio(value, getattr(record, self.units_attr))

    def parse(self, raw: Any, record: object) -> object:
        return decode_ratio(raw, getattr(record, self.units_attr))


@dataclass(frozen=True)
class DerivedField:
    """Field computed from the record on encode and ignored on decode."""

    wire: str
    compute: Callable[[Any], object]


@dataclass(frozen=True)
class RecordCodec:
    """Override table for one record type."""

    record_type: type
    overrides: tuple[FieldOverride, ...] = ()
    derived: tuple[DerivedField, ...] = ()

    def override_for(self, attr: str) -> FieldOverride | None:
        for override in self.overrides:
            if override.attr == attr:
                return override
        return None


_CODECS: dict[type, RecordCodec] = {
    codec.record_type: codec
    for codec in (
        RecordCodec(
            HistoryRecord,
            overrides=(
                TimestampField("time", optional=True),
                DurationField("duration", optional=True),
            ),
            derived=(DerivedField("Type", HistoryRecord.type_label),),
        ),
        RecordCodec(BasalRate, overrides=(TimeOfDayField("start"),)),
        RecordCodec(
            CarbRatio,
            overrides=(TimeOfDayField("start"), UnitRatioField("ratio", "units")),
        ),
        RecordCodec(GlucoseTarget, overrides=(TimeOfDayField("start"),)),
        RecordCodec(InsulinSensitivity, overrides=(TimeOfDayField("start"),)),
        RecordCodec(BolusRecord, overrides=(DurationField("duration", optional=True),)),
        RecordCodec(BolusWizardConfig, overrides=(DurationField("insulin_action"),)),
        RecordCodec(
            BolusWizardRecord,
            overrides=(UnitRatioField("carb_ratio", "carb_units"),),
        ),
        RecordCodec(UnabsorbedBolus, overrides=(DurationField("age"),)),
        RecordCodec(
            SettingsInfo,
            overrides=(DurationField("auto_off"), DurationField("insulin_action")),
        ),
        RecordCodec(TempBasalInfo, overrides=(DurationField("duration"),)),
        RecordCodec(BatteryInfo),
    )
}


def codec_for(record_type: type) -> RecordCodec:
    """Return the override table for a record type.

    Raises:
        TypeError: If the type is not a known record.
    """
    try:
        return _CODECS[record_type]
    except KeyError:
        raise TypeError(f"{record_type.__name__} is not a pump record") from None


@lru_cache(maxsize=None)
def _field_types(record_type: type) -> dict[str, Any]:
    return get_type_hints(record_type)


def _unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Devuelve (tipo interno, admite None) para ``X | None``."""
    if get_origin(tp) in (Union, types.UnionType):
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
    return tp, False


def _encode_typed(tp: Any, value: Any) -> object:
    tp, _ = _unwrap_optional(tp)
    if get_origin(tp) is list:
        (item_type,) = get_args(tp)
        return [_encode_typed(item_type, item) for item in value]
    if isinstance(tp, type):
        if issubclass(tp, Ratio):
            reject_bare_ratio("encode")
        if issubclass(tp, Insulin):
            return encode_insulin(value)
        if issubclass(tp, Voltage):
            return encode_voltage(value)
        if issubclass(tp, Symbol):
            if isinstance(value, tp):
                return value.label
            # Out-of-set values are rendered as an opaque display string.
            return f"{tp.__name__}({value})"
        if tp in _CODECS:
            return encode_record(value)
        if tp is bytes:
            return base64.b64encode(value).decode("ascii")
        if tp is bool or tp is str:
            return value
        if issubclass(tp, int):
            return int(value)
    raise TypeError(f"no text form for {tp!r}")


def _decode_typed(tp: Any, raw: Any, name: str) -> Any:
    tp, optional = _unwrap_optional(tp)
    if raw is None:
        if optional:
            return None
        raise MalformedTextError(f"{name} must not be null")
    if get_origin(tp) is list:
        if not isinstance(raw, list):
            raise MalformedTextError(f"{name} must be a list")
        (item_type,) = get_args(tp)
        return [_decode_typed(item_type, item, name) for item in raw]
    if isinstance(tp, type):
        if issubclass(tp, Ratio):
            reject_bare_ratio("decode")
        if issubclass(tp, Insulin):
            return decode_insulin(raw)
        if issubclass(tp, Voltage):
            return decode_voltage(raw)
        if issubclass(tp, Symbol):
            if not isinstance(raw, str):
                raise UnknownEnumError(f"unknown {tp.__name__} ({raw!r})")
            return tp.from_label(raw)
        if tp in _CODECS:
            if not isinstance(raw, Mapping):
                raise MalformedTextError(f"{name} must be an object")
            return decode_record(raw, tp())
        if tp is bytes:
            if not isinstance(raw, str):
                raise MalformedTextError(f"{name} must be base64 text")
            try:
                return base64.b64decode(raw, validate=True)
            except binascii.Error as exc:
                raise MalformedTextError(f"invalid base64 in {name}") from exc
        if tp is bool:
            if not isinstance(raw, bool):
                raise MalformedTextError(f"{name} must be a boolean")
            return raw
        if tp is str:
            if not isinstance(raw, str):
                raise MalformedTextError(f"{name} must be a string")
            return raw
        if issubclass(tp, int):
            if isinstance(raw, bool) or not isinstance(raw, int):
                raise MalformedTextError(f"{name} must be an integer, got {raw!r}")
            return tp(raw)
    raise TypeError(f"no text form for {tp!r}")


def encode_record(record: object) -> dict[str, object]:
    """Encode a record into a JSON-ready mapping.

    Derived fields come first, then every field in declaration order.
    Override fields use their own text form; absent (None) values are
    left out rather than written as null.

    Args:
        record: Any pump record instance.

    Returns:
        Mapping of wire names to JSON-ready values.

    Raises:
        CodecError: If a field cannot be encoded (e.g. unknown carb units).
    """
    codec = codec_for(type(record))
    hints = _field_types(codec.record_type)
    out: dict[str, object] = {}
    for derived in codec.derived:
        out[derived.wire] = derived.compute(record)
    for f in dataclasses.fields(codec.record_type):
        override = codec.override_for(f.name)
        if override is not None:
            value = override.encode(record)
            key = override.wire
        else:
            raw = getattr(record, f.name)
            value = None if raw is None else _encode_typed(hints[f.name], raw)
            key = _field_wire_name(f)
        if value is not None:
            out[key] = value
    return out


def decode_record(mapping: Mapping[str, Any], into: R) -> R:
    """Populate ``into`` from its text form and return it.

    Keys not belonging to the record (including the ``Type``
    discriminator) are ignored; pass-through keys that are absent leave
    the field as it was.

    Raises:
        CodecError: At the first field that fails; ``into`` may be
            partially updated.
    """
    codec = codec_for(type(into))
    hints = _field_types(codec.record_type)
    for f in dataclasses.fields(codec.record_type):
        if codec.override_for(f.name) is not None:
            continue
        key = _field_wire_name(f)
        if key in mapping:
            setattr(into, f.name, _decode_typed(hints[f.name], mapping[key], key))
    for override in codec.overrides:
        override.decode(into, mapping)
    return into


def encode_value(value: Any) -> object:
    """Encode any pump value (record, list, scaled integer or symbol)."""
    if isinstance(value, list):
        return [encode_value(item) for item in value]
    return _encode_typed(type(value), value)


def decode_value(tp: Any, raw: Any) -> Any:
    """Decode ``raw`` as a value of type ``tp`` (e.g. ``Insulin``, ``list[BasalRate]``)."""
    return _decode_typed(tp, raw, getattr(tp, "__name__", str(tp)))

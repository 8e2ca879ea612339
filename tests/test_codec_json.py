from __future__ import annotations

import json
from datetime import datetime, time

import pytest

from pump_codec.codec import dumps, load_list, loads, parse_json
from pump_codec.errors import MalformedTextError, MissingUnitsError
from pump_codec.model import (
    BasalRate,
    BolusRecord,
    CarbRatio,
    CarbUnitsType,
    GlucoseTarget,
    GlucoseUnitsType,
    HistoryRecord,
    Insulin,
    Ratio,
)


def test_dumps_carb_ratio() -> None:
    rec = CarbRatio(start=time(6, 0), ratio=Ratio(125), units=CarbUnitsType.GRAMS)
    assert dumps(rec) == '{"Start": "06:00", "Ratio": 12.5, "Units": "Grams"}'


def test_dumps_integral_values_without_fraction() -> None:
    rec = BasalRate(start=time(0, 0), rate=Insulin(2000))
    assert dumps(rec) == '{"Start": "00:00", "Rate": 2}'


def test_dumps_keeps_micro_sign() -> None:
    text = dumps(GlucoseTarget(units=GlucoseUnitsType.MMOL_PER_LITER))
    assert '"μmol/L"' in text


def test_loads_rounds_half_up() -> None:
    assert loads('{"Start": "00:00", "Rate": 2.4999}', BasalRate()).rate == 2500
    assert loads('{"Start": "00:00", "Rate": 0.025}', BasalRate()).rate == 25


def test_repeated_round_trips_do_not_drift() -> None:
    text = '{"Start": "05:30", "Rate": 0.675}'
    for _ in range(20):
        text = dumps(loads(text, BasalRate()))
    assert text == '{"Start": "05:30", "Rate": 0.675}'


def test_history_text_starts_with_type() -> None:
    rec = HistoryRecord(
        data=bytes([0x01, 0x00]),
        time=datetime(2024, 3, 1, 8, 15, 0),
        bolus=BolusRecord(programmed=Insulin(1500), amount=Insulin(1500)),
    )
    text = dumps(rec)
    assert text.startswith('{"Type": "Bolus", "Data": ')
    parsed = json.loads(text)
    assert parsed["Time"] == "2024-03-01 08:15:00"
    assert parsed["Bolus"] == {"Programmed": 1.5, "Amount": 1.5, "Unabsorbed": 0}
    assert loads(text, HistoryRecord()) == rec


def test_loads_rejects_bad_json_and_shapes() -> None:
    with pytest.raises(MalformedTextError, match="invalid JSON"):
        loads("{not json", BasalRate())
    with pytest.raises(MalformedTextError, match="object"):
        loads("[]", BasalRate())
    with pytest.raises(MalformedTextError, match="array"):
        load_list("{}", BasalRate)
    with pytest.raises(MalformedTextError, match="object in array"):
        load_list("[1]", BasalRate)


def test_parse_json_huge_integer_is_malformed() -> None:
    with pytest.raises(MalformedTextError, match="invalid JSON"):
        parse_json("[" + "1" * 5000 + "]")


def test_large_scaled_value_is_exact_within_float_range() -> None:
    rate = BasalRate(time(0, 0), Insulin(9_007_199_254_740))
    text = dumps(rate)
    assert text == '{"Start": "00:00", "Rate": 9007199254.74}'
    assert loads(text, BasalRate()) == rate


def test_load_list_builds_fresh_records() -> None:
    rates = load_list(
        '[{"Start": "00:00", "Rate": 0.8}, {"Start": "06:00", "Rate": 1.05}]',
        BasalRate,
    )
    assert rates == [
        BasalRate(time(0, 0), Insulin(800)),
        BasalRate(time(6, 0), Insulin(1050)),
    ]
    assert dumps(rates) == (
        '[{"Start": "00:00", "Rate": 0.8}, {"Start": "06:00", "Rate": 1.05}]'
    )


def test_dumps_bare_ratio_fails() -> None:
    with pytest.raises(MissingUnitsError):
        dumps(Ratio(10))

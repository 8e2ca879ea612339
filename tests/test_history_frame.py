from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest
from dateutil import tz

from pump_codec.history_frame import (
    FRAME_COLUMNS,
    daily_insulin_summary,
    records_to_frame,
)
from pump_codec.model import (
    BolusRecord,
    BolusWizardRecord,
    Glucose,
    HistoryRecord,
    Insulin,
)

_TZ = tz.gettz("America/Argentina/Buenos_Aires")


def _bolus(when: datetime, milli: int) -> HistoryRecord:
    return HistoryRecord(
        data=bytes([0x01]),
        time=when,
        bolus=BolusRecord(programmed=Insulin(milli), amount=Insulin(milli)),
    )


def test_records_to_frame_empty() -> None:
    df = records_to_frame([], _TZ)
    assert df.empty
    assert list(df.columns) == FRAME_COLUMNS


def test_records_to_frame_rows_and_order() -> None:
    records = [
        _bolus(datetime(2024, 3, 2, 9, 0), 3500),
        HistoryRecord(
            data=bytes([0x16]),
            time=datetime(2024, 3, 1, 7, 30),
            duration=timedelta(minutes=30),
        ),
        HistoryRecord(
            data=bytes([0x5B]),
            time=datetime(2024, 3, 1, 8, 0),
            bolus_wizard=BolusWizardRecord(
                glucose_input=Glucose(150), bolus=Insulin(4000)
            ),
        ),
        HistoryRecord(data=bytes([0x21])),
    ]
    df = records_to_frame(records, _TZ)

    assert list(df["kind"]) == ["TempBasalDuration", "BolusWizard", "Bolus", "Rewind"]
    assert df.loc[0, "duration_min"] == 30.0
    assert df.loc[1, "insulin_u"] == 4.0
    assert df.loc[1, "glucose"] == 150
    assert df.loc[2, "insulin_u"] == 3.5
    assert df.loc[2, "date"] == date(2024, 3, 2)
    assert df.loc[0, "datetime"].tzinfo is not None
    assert df.loc[3, "date"] is None


def test_daily_insulin_summary_counts_boluses_only() -> None:
    records = [
        _bolus(datetime(2024, 3, 1, 8, 0), 2500),
        _bolus(datetime(2024, 3, 1, 13, 0), 4125),
        _bolus(datetime(2024, 3, 2, 8, 0), 1000),
        HistoryRecord(data=bytes([0x33]), time=datetime(2024, 3, 1, 9), insulin=Insulin(800)),
    ]
    out = daily_insulin_summary(records_to_frame(records, _TZ))

    assert list(out["date"]) == [date(2024, 3, 1), date(2024, 3, 2)]
    assert list(out["bolus_count"]) == [2, 1]
    assert out.loc[0, "insulin_total"] == pytest.approx(6.625)
    assert out.loc[0, "insulin_max"] == pytest.approx(4.125)


def test_daily_insulin_summary_empty() -> None:
    out = daily_insulin_summary(records_to_frame([], _TZ))
    assert out.empty
    assert list(out.columns) == ["date", "bolus_count", "insulin_total", "insulin_max"]

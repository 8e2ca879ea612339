"""Tablas (pandas) a partir del historial decodificado de la bomba."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import tzinfo

import pandas as pd

from pump_codec.model import HistoryRecord, HistoryRecordType
from pump_codec.scalar import encode_insulin

FRAME_COLUMNS = [
    "datetime",
    "date",
    "kind",
    "insulin_u",
    "duration_min",
    "glucose",
]


def _insulin_units(record: HistoryRecord) -> float | None:
    """Insulina del evento en unidades (bolo entregado, tasa temporal o asistente)."""
    if record.bolus is not None:
        milli = record.bolus.amount
    elif record.insulin is not None:
        milli = record.insulin
    elif record.bolus_wizard is not None:
        milli = record.bolus_wizard.bolus
    else:
        return None
    return float(encode_insulin(milli))


def _glucose(record: HistoryRecord) -> int | None:
    if record.glucose is not None:
        return int(record.glucose)
    if record.bolus_wizard is not None and record.bolus_wizard.glucose_input:
        return int(record.bolus_wizard.glucose_input)
    return None


def records_to_frame(
    records: Sequence[HistoryRecord], local_tz: tzinfo
) -> pd.DataFrame:
    """Convert history records to a DataFrame, one row per record.

    Pump timestamps are wall-clock times; they are tagged with
    ``local_tz``. Untimed records keep an empty datetime and date.
    """
    rows = []
    for r in records:
        when = r.time.replace(tzinfo=local_tz) if r.time is not None else None
        rows.append(
            {
                "datetime": when,
                "date": when.date() if when is not None else None,
                "kind": r.type_label(),
                "insulin_u": _insulin_units(r),
                "duration_min": (
                    r.duration.total_seconds() / 60 if r.duration is not None else None
                ),
                "glucose": _glucose(r),
            }
        )
    if not rows:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    return df.sort_values("datetime", na_position="last").reset_index(drop=True)


def daily_insulin_summary(frame: pd.DataFrame) -> pd.DataFrame:
    """Aggregate delivered boluses by day (count/total/max, in units)."""
    columns = ["date", "bolus_count", "insulin_total", "insulin_max"]
    if frame.empty:
        return pd.DataFrame(columns=columns)
    boluses = frame[
        (frame["kind"] == HistoryRecordType.BOLUS.label) & frame["date"].notna()
    ]
    if boluses.empty:
        return pd.DataFrame(columns=columns)
    g = boluses.groupby("date", as_index=False).agg(
        bolus_count=("insulin_u", "count"),
        insulin_total=("insulin_u", "sum"),
        insulin_max=("insulin_u", "max"),
    )
    g["insulin_total"] = g["insulin_total"].round(3)
    return g[columns].sort_values("date").reset_index(drop=True)

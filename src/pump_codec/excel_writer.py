"""Excel formateado del historial de la bomba."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, Side

logger = logging.getLogger(__name__)

_HEADER_MAP: dict[str, str] = {
    "datetime": "Fecha / Hora",
    "kind": "Evento",
    "insulin_u": "Insulina (U)",
    "duration_min": "Duración\n(min)",
    "glucose": "Glucosa",
}

_WIDTHS: dict[str, int] = {
    "Fecha / Hora": 18,
    "Evento": 22,
    "Insulina (U)": 12,
    "Duración\n(min)": 10,
    "Glucosa": 10,
}

_NUMBER_FORMATS: dict[str, str] = {
    "Fecha / Hora": "dd/mm/yyyy hh:mm",
    "Insulina (U)": "0.000",
    "Duración\n(min)": "0",
    "Glucosa": "0",
}


@dataclass(frozen=True)
class ExcelLayout:
    """Layout of the history sheet."""

    sheet_name: str = "Historial"


def _prepare(df: pd.DataFrame) -> pd.DataFrame:
    """Quita la zona horaria (Excel no la admite) y la columna date."""
    export_df = df.copy()
    if "datetime" in export_df.columns:
        export_df["datetime"] = pd.to_datetime(
            export_df["datetime"], errors="coerce"
        )
        if getattr(export_df["datetime"].dt, "tz", None) is not None:
            export_df["datetime"] = export_df["datetime"].dt.tz_localize(None)
    if "date" in export_df.columns:
        export_df = export_df.drop(columns=["date"])
    return export_df.rename(columns=_HEADER_MAP)


def write_history_xlsx(df: pd.DataFrame, out_path: Path, layout: ExcelLayout) -> None:
    """Write the history frame as a formatted Excel sheet.

    Args:
        df: Frame from :func:`pump_codec.history_frame.records_to_frame`.
        out_path: Output path for the XLSX file.
        layout: Excel layout parameters.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)
    export_df = _prepare(df)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        export_df.to_excel(writer, index=False, sheet_name=layout.sheet_name)
        format_sheet(writer.book[layout.sheet_name])
    logger.info("wrote %d rows to %s", len(export_df), out_path)


def format_sheet(ws: Any) -> None:
    """Apply header style, borders, widths and number formats.

    Args:
        ws: openpyxl worksheet.
    """
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)

    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.alignment = center
        cell.border = border

    col_index = {str(cell.value): idx + 1 for idx, cell in enumerate(ws[1])}
    for header, width in _WIDTHS.items():
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width

    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border
        for header, fmt in _NUMBER_FORMATS.items():
            idx = col_index.get(header)
            if idx is not None:
                row[idx - 1].number_format = fmt

"""CLI: normaliza JSON de la bomba y genera el Excel del historial."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from pump_codec.codec import dumps, parse_json
from pump_codec.config import LOG_FORMAT, CodecConfig, load_config
from pump_codec.errors import CodecError
from pump_codec.excel_writer import ExcelLayout, write_history_xlsx
from pump_codec.history_frame import daily_insulin_summary, records_to_frame
from pump_codec.model import (
    BasalRate,
    BatteryInfo,
    BolusWizardConfig,
    CarbRatio,
    GlucoseTarget,
    HistoryRecord,
    InsulinSensitivity,
    SettingsInfo,
    TempBasalInfo,
)
from pump_codec.records import decode_record
from pump_codec.sources.pump_export import HistoryExportSource, history_paths

logger = logging.getLogger(__name__)

RECORD_KINDS: dict[str, type] = {
    "history": HistoryRecord,
    "settings": SettingsInfo,
    "basal": BasalRate,
    "carb-ratio": CarbRatio,
    "glucose-target": GlucoseTarget,
    "sensitivity": InsulinSensitivity,
    "wizard-config": BolusWizardConfig,
    "temp-basal": TempBasalInfo,
    "battery": BatteryInfo,
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Codec JSON de telemetría de bomba de insulina."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    norm = sub.add_parser("normalize", help="Decodifica y re-codifica un JSON.")
    norm.add_argument("file", help="Archivo JSON (objeto o arreglo).")
    norm.add_argument(
        "--kind",
        choices=sorted(RECORD_KINDS),
        default="history",
        help="Tipo de registro (default: history).",
    )
    norm.add_argument("--indent", type=int, default=2)

    report = sub.add_parser("report", help="Excel del historial más reciente.")
    report.add_argument(
        "--base-dir",
        default=None,
        help="Directorio base (default: $PUMP_CODEC_BASE_DIR o ~/proyectos/bomba).",
    )
    return parser.parse_args(argv)


def normalize(path: Path, kind: str, indent: int | None) -> str:
    """Decode a JSON file as ``kind`` records and return the canonical JSON."""
    record_type = RECORD_KINDS[kind]
    data = parse_json(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        if not all(isinstance(item, dict) for item in data):
            raise CodecError("expected a JSON array of objects")
        value: object = [decode_record(item, record_type()) for item in data]
    elif isinstance(data, dict):
        value = decode_record(data, record_type())
    else:
        raise CodecError("expected a JSON object or array")
    return dumps(value, indent=indent)


def report(config: CodecConfig) -> Path:
    """Write the Excel report for the newest history export.

    Returns:
        Path of the written workbook.
    """
    src = HistoryExportSource(history_paths(config.base_dir / "historial"))
    src.validate()
    export = src.newest_json()
    records = src.load(export)

    frame = records_to_frame(records, config.local_tz())
    summary = daily_insulin_summary(frame)
    for row in summary.itertuples(index=False):
        logger.info(
            "%s: %d boluses, %.3f U", row.date, row.bolus_count, row.insulin_total
        )

    ts = datetime.now(tz=config.local_tz()).strftime("%Y-%m-%d_%H-%M-%S")
    out_path = config.base_dir / "salidas" / f"historial_bomba_{ts}.xlsx"
    write_history_xlsx(frame, out_path, ExcelLayout(sheet_name=config.sheet_name))
    print(f"OK: history file: {export}")
    print(f"OK: records: {len(records)}")
    print(f"OK: Output: {out_path}")
    return out_path


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Exit code: 0 on success, 2 on a decode error.
    """
    ns = parse_args(argv)
    config = load_config(os.environ)
    if getattr(ns, "base_dir", None):
        config = replace(config, base_dir=Path(ns.base_dir).expanduser().resolve())
    logging.basicConfig(level=config.logging_level(), format=LOG_FORMAT)

    try:
        if ns.command == "normalize":
            print(normalize(Path(ns.file), ns.kind, ns.indent))
        else:
            report(config)
    except CodecError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0

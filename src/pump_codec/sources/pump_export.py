"""Lectura de exportaciones JSON del historial de la bomba."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from pump_codec.codec import parse_json
from pump_codec.model import HistoryRecord
from pump_codec.records import decode_record
from pump_codec.sources.base import ExportPaths, ExportSource

logger = logging.getLogger(__name__)


def history_paths(root: Path) -> ExportPaths:
    """Paths for ``history_*.json`` exports written by a device session."""
    return ExportPaths(root=root, prefix="history")


class HistoryExportSource(ExportSource[HistoryRecord]):
    """Pump history JSON export source."""

    def load(self, path: Path) -> list[HistoryRecord]:
        """Parse a history export into typed records.

        Args:
            path: Path to the JSON file.

        Returns:
            Records ordered by timestamp; untimed records go last.

        Raises:
            ValueError: If the JSON is not a list.
            CodecError: If a record cannot be decoded.
        """
        text = path.read_text(encoding="utf-8")
        raw = parse_json(_strip_preamble(text))
        if not isinstance(raw, list):
            raise ValueError("History export JSON must be a list")

        out: list[HistoryRecord] = []
        for index, item in enumerate(raw):
            if not isinstance(item, dict):
                logger.warning("%s: skipping item %d (not an object)", path.name, index)
                continue
            out.append(decode_record(item, HistoryRecord()))
        out.sort(key=_sort_key)
        logger.info("%s: %d history records", path.name, len(out))
        return out


def _strip_preamble(text: str) -> str:
    """Quita líneas de log previas al arreglo JSON, si las hay."""
    stripped = text.lstrip()
    if stripped.startswith(("[", "{")):
        return stripped
    start = stripped.find("[")
    return stripped[start:] if start > 0 else stripped


def _sort_key(record: HistoryRecord) -> tuple[bool, Any]:
    return (record.time is None, record.time or datetime.min)

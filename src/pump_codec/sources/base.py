"""Base común para carpetas de exportaciones JSON de la bomba."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportPaths:
    """Folder holding exports named ``<prefix>_*.json``."""

    root: Path
    prefix: str


class ExportSource(ABC, Generic[T]):
    """Reads the newest export of one kind from a folder."""

    def __init__(self, paths: ExportPaths) -> None:
        self._paths = paths

    def validate(self) -> None:
        """Check that the export folder exists.

        Raises:
            FileNotFoundError: If the folder is missing.
        """
        if not self._paths.root.exists():
            raise FileNotFoundError(str(self._paths.root))

    def newest_json(self) -> Path:
        """Return the newest ``<prefix>_*.json`` by mtime."""
        files = sorted(
            self._paths.root.glob(f"{self._paths.prefix}_*.json"),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        if not files:
            raise FileNotFoundError(
                f"No {self._paths.prefix}_*.json in {self._paths.root}"
            )
        logger.debug("newest export: %s", files[0])
        return files[0]

    @abstractmethod
    def load(self, path: Path) -> list[T]:
        """Decode every record of one export file."""

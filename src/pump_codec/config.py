"""Configuración de la herramienta (variables de entorno + defaults)."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path

from dateutil import tz

BASE_DIR_ENV = "PUMP_CODEC_BASE_DIR"
TZ_ENV = "PUMP_CODEC_TZ"
LOG_LEVEL_ENV = "PUMP_CODEC_LOG_LEVEL"

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class CodecConfig:
    """Settings for the CLI and the history report."""

    base_dir: Path
    timezone: str = "UTC"
    log_level: str = "INFO"
    sheet_name: str = "Historial"

    def local_tz(self) -> tzinfo:
        """Resolve the pump's wall-clock timezone.

        Raises:
            ValueError: If the zone name is unknown.
        """
        zone = tz.gettz(self.timezone)
        if zone is None:
            raise ValueError(f"{TZ_ENV} value ({self.timezone}) is not a known timezone")
        return zone

    def logging_level(self) -> int:
        return int(getattr(logging, self.log_level))


def load_config(environ: Mapping[str, str]) -> CodecConfig:
    """Build the configuration from environment variables.

    Args:
        environ: Usually ``os.environ``.

    Returns:
        Validated configuration.

    Raises:
        ValueError: If the timezone or log level is not valid.
    """
    base = environ.get(BASE_DIR_ENV) or str(Path.home() / "proyectos" / "bomba")
    level = (environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    if level not in _LEVELS:
        raise ValueError(f"{LOG_LEVEL_ENV} value ({level}) should be one of {_LEVELS}")
    config = CodecConfig(
        base_dir=Path(base).expanduser(),
        timezone=environ.get(TZ_ENV) or "UTC",
        log_level=level,
    )
    config.local_tz()
    return config

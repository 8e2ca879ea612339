from __future__ import annotations

import logging
from pathlib import Path

import pytest

from pump_codec.config import CodecConfig, load_config


def test_load_config_defaults() -> None:
    config = load_config({})
    assert config.base_dir == Path.home() / "proyectos" / "bomba"
    assert config.timezone == "UTC"
    assert config.logging_level() == logging.INFO
    assert config.local_tz() is not None


def test_load_config_from_environment(tmp_path: Path) -> None:
    config = load_config(
        {
            "PUMP_CODEC_BASE_DIR": str(tmp_path),
            "PUMP_CODEC_TZ": "America/Argentina/Buenos_Aires",
            "PUMP_CODEC_LOG_LEVEL": "debug",
        }
    )
    assert config.base_dir == tmp_path
    assert config.log_level == "DEBUG"
    assert config.logging_level() == logging.DEBUG


def test_load_config_rejects_unknown_values() -> None:
    with pytest.raises(ValueError, match="PUMP_CODEC_LOG_LEVEL"):
        load_config({"PUMP_CODEC_LOG_LEVEL": "chatty"})
    with pytest.raises(ValueError, match="not a known timezone"):
        load_config({"PUMP_CODEC_TZ": "Mars/Olympus_Mons"})


def test_local_tz_unknown_zone() -> None:
    with pytest.raises(ValueError):
        CodecConfig(base_dir=Path("."), timezone="Nowhere/Land").local_tz()

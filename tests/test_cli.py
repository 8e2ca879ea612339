"""Tests for CLI entrypoints."""

from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest

from pump_codec import cli


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PUMP_CODEC_BASE_DIR", "PUMP_CODEC_TZ", "PUMP_CODEC_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_parse_args_normalize_defaults() -> None:
    ns = cli.parse_args(["normalize", "in.json"])
    assert ns.command == "normalize"
    assert ns.file == "in.json"
    assert ns.kind == "history"
    assert ns.indent == 2


def test_parse_args_report_base_dir() -> None:
    ns = cli.parse_args(["report", "--base-dir", "/tmp/base"])
    assert ns.command == "report"
    assert ns.base_dir == "/tmp/base"


def test_normalize_rewrites_canonical_json(tmp_path: Path) -> None:
    p = tmp_path / "ratios.json"
    p.write_text(
        '[{"Units": "Grams", "Ratio": 12.50, "Start": "6:00", "Extra": true}]',
        encoding="utf-8",
    )
    out = cli.normalize(p, "carb-ratio", None)
    assert out == '[{"Start": "06:00", "Ratio": 12.5, "Units": "Grams"}]'


def test_main_normalize_prints(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = tmp_path / "settings.json"
    p.write_text(
        json.dumps(
            {
                "AutoOff": "0s",
                "InsulinAction": "4h0m0s",
                "MaxBolus": 10,
                "MaxBasal": 2.35,
                "RfEnabled": False,
                "SelectedPattern": 0,
                "TempBasalType": "Absolute",
            }
        ),
        encoding="utf-8",
    )
    assert cli.main(["normalize", str(p), "--kind", "settings"]) == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["InsulinAction"] == "4h0m0s"
    assert printed["MaxBasal"] == 2.35


def test_main_normalize_codec_error_exit_code(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    p = tmp_path / "bad.json"
    p.write_text('{"Start": "00:00", "Ratio": 12.5}', encoding="utf-8")
    assert cli.main(["normalize", str(p), "--kind", "carb-ratio"]) == 2
    assert "unknown carb unit None" in capsys.readouterr().err
    p.write_text('{"Start": "00:00", "Ratio": 12.5, "Units": "grams"}', encoding="utf-8")
    assert cli.main(["normalize", str(p), "--kind", "carb-ratio"]) == 2
    assert "CarbUnitsType" in capsys.readouterr().err


def test_main_normalize_huge_number_exit_code(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    p = tmp_path / "huge.json"
    p.write_text('{"Carbs": ' + "9" * 5000 + "}", encoding="utf-8")
    assert cli.main(["normalize", str(p), "--kind", "history"]) == 2
    assert "invalid JSON" in capsys.readouterr().err


def test_main_report_writes_excel(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    hist = tmp_path / "historial"
    hist.mkdir()
    data = base64.b64encode(bytes([0x01, 0x00])).decode("ascii")
    (hist / "history_2024-03-01.json").write_text(
        json.dumps(
            [
                {
                    "Type": "Bolus",
                    "Data": data,
                    "Time": "2024-03-01 08:00:00",
                    "Bolus": {"Programmed": 2.5, "Amount": 2.5, "Unabsorbed": 0},
                }
            ]
        ),
        encoding="utf-8",
    )

    assert cli.main(["report", "--base-dir", str(tmp_path)]) == 0

    outputs = list((tmp_path / "salidas").glob("historial_bomba_*.xlsx"))
    assert len(outputs) == 1
    printed = capsys.readouterr().out
    assert "OK: records: 1" in printed
    assert outputs[0].name in printed


def test_main_report_missing_folder_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        cli.main(["report", "--base-dir", str(tmp_path / "nada")])

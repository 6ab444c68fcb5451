# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, Callable

import pandas as pd
import pytest

from masterdata_import.logging.init import reset_logging
from masterdata_import.models.field_definition import FIELD_DEFINITIONS

CANONICAL_HEADERS = [fd.canonical_name for fd in FIELD_DEFINITIONS]

# 1 行分の既定値 (列順は FIELD_DEFINITIONS と同じ)
DEFAULT_ROW: dict[str, Any] = {
    "srNo": 1,
    "model": "BLDC-24V-100W",
    "phase": "3",
    "minInsulationRes": 100,
    "maxInsulationRes": 500,
    "testTime": 60,
    "minVoltage": 210,
    "maxVoltage": 240,
    "minCurrent": 0.5,
    "maxCurrent": 1.5,
    "minPower": 100,
    "maxPower": 250,
    "minFrequency": 50,
    "maxFrequency": 60,
    "minRPM": 1400,
    "maxRPM": 1500,
    "direction": "CW",
}


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """table_name: MasterData
max_file_size_mb: 10
logs_directory: ./logs
sync:
  chunk_size: 2
  concurrency: 2
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def headers() -> list[str]:
    return list(CANONICAL_HEADERS)


@pytest.fixture()
def data_row() -> Callable[..., list[Any]]:
    """Build one data row in canonical column order: data_row(3, maxCurrent="n/a")."""

    def build(sr_no: Any = 1, **overrides: Any) -> list[Any]:
        values = {**DEFAULT_ROW, "srNo": sr_no, **overrides}
        return [values[fd.key] for fd in FIELD_DEFINITIONS]

    return build


@pytest.fixture()
def master_grid(headers, data_row) -> list[list[Any]]:
    """Title row, header on row 2, five valid rows and one row without Sr. No."""
    return [
        ["MASTER DATA"],
        headers,
        data_row(1),
        data_row(2, model="BLDC-48V-250W"),
        data_row(3, phase="Single"),
        data_row(4, direction="CCW"),
        data_row(5, minRPM=""),
        data_row("", model="Notes: checked by QA"),
    ]


@pytest.fixture()
def make_workbook(tmp_path: Path) -> Callable[..., Path]:
    """Write grids to a real .xlsx: make_workbook("m.xlsx", {"Sheet1": grid})."""

    def make(name: str, sheets: dict[str, list[list[Any]]]) -> Path:
        path = tmp_path / name
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for sheet_name, rows in sheets.items():
                pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
        return path

    return make

#!/usr/bin/env python3
"""Sample master-data workbook generator.

Writes a spreadsheet shaped like the ones the lab uploads, for manual runs and
sync load checks:
- Row 1: title ("MASTER DATA")
- Row 2: group row (Megger Test / No Load Test), optional
- Row 3: header row, canonical names or alias spellings
- Row 4+: data rows, with a configurable share of rows that fail validation

    python scripts/gen_sample_master_data.py --rows 500 --aliases --invalid-ratio 0.05 \
        --output data/sample_master.xlsx
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from masterdata_import.excel.writer import TITLE
from masterdata_import.models.field_definition import FIELD_DEFINITIONS

MODELS = ["BLDC-24V-100W", "BLDC-48V-250W", "PMSM-310V-1KW", "IM-415V-2HP", "DC-12V-50W"]
PHASES = ["1", "3", "Single", "Three phase"]
DIRECTIONS = ["CW", "CCW", "Clockwise", "Anti-clockwise"]


def _alias_header(index: int) -> str:
    # 別名表記 (各フィールドの最初の非標準エイリアス)
    fd = FIELD_DEFINITIONS[index]
    return fd.aliases[1] if len(fd.aliases) > 1 else fd.canonical_name


def generate_rows(rows: int, invalid_ratio: float = 0.0, seed: int = 42) -> list[dict[str, Any]]:
    """Generate data rows keyed by canonical field key.

    Invalid rows get a non-numeric value in one numeric column.
    """
    rng = np.random.default_rng(seed)
    out: list[dict[str, Any]] = []
    for i in range(rows):
        min_v = int(rng.choice([12, 24, 48, 230, 415]))
        min_rpm = int(rng.integers(500, 3000))
        row: dict[str, Any] = {
            "srNo": i + 1,
            "model": str(rng.choice(MODELS)),
            "phase": str(rng.choice(PHASES)),
            "minInsulationRes": round(float(rng.uniform(50, 500)), 1),
            "maxInsulationRes": round(float(rng.uniform(500, 2000)), 1),
            "testTime": 60,
            "minVoltage": min_v,
            "maxVoltage": round(min_v * 1.1, 1),
            "minCurrent": round(float(rng.uniform(0.1, 2.0)), 2),
            "maxCurrent": round(float(rng.uniform(2.0, 8.0)), 2),
            "minPower": int(rng.integers(10, 200)),
            "maxPower": int(rng.integers(200, 2000)),
            "minFrequency": 50,
            "maxFrequency": 60,
            "minRPM": min_rpm,
            "maxRPM": min_rpm + int(rng.integers(100, 1500)),
            "direction": str(rng.choice(DIRECTIONS)),
        }
        if invalid_ratio > 0 and rng.random() < invalid_ratio:
            row["maxCurrent"] = "n/a"
        out.append(row)
    return out


def build_grid(data: list[dict[str, Any]], *, aliases: bool = False, group_row: bool = True) -> list[list[Any]]:
    grid: list[list[Any]] = [[TITLE]]
    if group_row:
        grid.append([fd.group or "" for fd in FIELD_DEFINITIONS])
    if aliases:
        grid.append([_alias_header(i) for i in range(len(FIELD_DEFINITIONS))])
    else:
        grid.append([fd.canonical_name for fd in FIELD_DEFINITIONS])
    for row in data:
        grid.append([row.get(fd.key, "") for fd in FIELD_DEFINITIONS])
    return grid


def write_workbook(grid: list[list[Any]], output: Path, sheet_name: str = "Master Data") -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        pd.DataFrame(grid).to_excel(writer, sheet_name=sheet_name, header=False, index=False)


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Generate a sample master-data workbook")
    p.add_argument("--rows", type=int, default=100)
    p.add_argument("--invalid-ratio", type=float, default=0.0)
    p.add_argument("--aliases", action="store_true", help="Use alias header spellings")
    p.add_argument("--no-group-row", action="store_true")
    p.add_argument("--seed", type=int, default=42)
    p.add_argument("--output", type=Path, default=Path("data/sample_master.xlsx"))
    args = p.parse_args(argv)

    if args.rows < 1:
        print("--rows must be >= 1", file=sys.stderr)
        return 1
    if not 0.0 <= args.invalid_ratio <= 1.0:
        print("--invalid-ratio must be between 0 and 1", file=sys.stderr)
        return 1

    data = generate_rows(args.rows, args.invalid_ratio, args.seed)
    grid = build_grid(data, aliases=args.aliases, group_row=not args.no_group_row)
    write_workbook(grid, args.output)
    print(f"wrote {args.output} rows={args.rows}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

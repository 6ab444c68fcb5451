from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

"""Import outcome models.

ExtractedRecord is one spreadsheet row after header mapping (raw text per field).
ParseResult is the successful pipeline output; ImportSuccess / ImportFailure wrap it
for callers that want a value instead of an exception. An outcome is always exactly
one of the two.
"""

__all__ = [
    "ExtractedRecord",
    "ParseResult",
    "ImportSuccess",
    "ImportFailure",
    "ImportOutcome",
]


@dataclass(frozen=True)
class ExtractedRecord:
    """A data row pulled out of the sheet, before type coercion.

    row_index is the 0-based index of the row in the raw sheet grid.
    values holds the trimmed cell text for every canonical field ("" when the
    cell was blank).
    """
    row_index: int
    sr_no: int
    values: dict[str, str]

    @property
    def record_id(self) -> str:
        return f"record-{self.sr_no}-{self.row_index}"

    def get(self, key: str) -> str:
        return self.values.get(key, "")


@dataclass(frozen=True)
class ParseResult:
    records: list[ExtractedRecord]
    total_rows: int  # ヘッダ行より下の行数 (スキップ行を含む)
    skipped_rows: int
    header_row_index: int = 0
    sheet_name: str | None = None


@dataclass(frozen=True)
class ImportSuccess:
    result: ParseResult
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class ImportFailure:
    """User-facing failure: short message plus optional multi-line details."""
    message: str
    details: str | None = None
    error_type: str = "IMPORT_ERROR"
    ok: bool = field(default=False, init=False)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\n{self.details}"
        return self.message


ImportOutcome = Union[ImportSuccess, ImportFailure]

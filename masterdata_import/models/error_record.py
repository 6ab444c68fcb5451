from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

Structured error records written as JSON Lines by logging.error_log. row is the
1-based spreadsheet row number, or -1 for file-level errors (unreadable file,
missing headers) where no single row is at fault. field is the canonical field
key for per-field validation errors and None otherwise.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: spreadsheet filename being imported
        row: 1-based row number, -1 for file-level errors
        field: canonical field key, or None
        error_type: classification in UPPER_SNAKE_CASE
        message: human-readable description
    """
    timestamp: str  # ISO8601 UTC
    file: str
    row: int
    field: str | None
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(
        file: str, row: int, error_type: str, message: str, field: str | None = None
    ) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            field=field,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # dataclass -> dict のみ。追加キーは出さない
        return json.dumps(asdict(self), ensure_ascii=False)

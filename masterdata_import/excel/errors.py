from __future__ import annotations

from collections.abc import Sequence

from ..models.import_outcome import ImportFailure

"""Import error hierarchy.

Every terminal failure of the spreadsheet pipeline is a SpreadsheetImportError
carrying a short user-facing ``message`` and optional multi-line ``details``.
``error_type`` is the UPPER_SNAKE classification written to the error log.

Structural errors (wrong file, unreadable, no sheets, empty) need a different
file; header errors can be fixed by editing the spreadsheet and re-uploading.
"""

__all__ = [
    "SpreadsheetImportError",
    "UnsupportedFileError",
    "FileTooLargeError",
    "SpreadsheetReadError",
    "NoSheetsError",
    "EmptySpreadsheetError",
    "HeaderRowNotFoundError",
    "MissingColumnsError",
    "NoDataRowsError",
]


class SpreadsheetImportError(Exception):
    error_type = "IMPORT_ERROR"
    structural = False

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_failure(self) -> ImportFailure:
        return ImportFailure(message=self.message, details=self.details, error_type=self.error_type)


class UnsupportedFileError(SpreadsheetImportError):
    error_type = "UNSUPPORTED_FILE"
    structural = True


class FileTooLargeError(SpreadsheetImportError):
    error_type = "FILE_TOO_LARGE"
    structural = True


class SpreadsheetReadError(SpreadsheetImportError):
    error_type = "READ_ERROR"
    structural = True


class NoSheetsError(SpreadsheetImportError):
    error_type = "NO_SHEETS"
    structural = True


class EmptySpreadsheetError(SpreadsheetImportError):
    error_type = "EMPTY_SPREADSHEET"
    structural = True


class HeaderRowNotFoundError(SpreadsheetImportError):
    error_type = "HEADER_NOT_FOUND"


class MissingColumnsError(SpreadsheetImportError):
    """Raised when the located header row lacks one or more required fields.

    ``missing`` lists canonical names of *all* unmatched fields, in field order.
    """
    error_type = "MISSING_COLUMNS"

    def __init__(self, missing: Sequence[str], header_row_index: int) -> None:
        self.missing = list(missing)
        self.header_row_index = header_row_index
        bullets = "\n".join(f"• {name}" for name in self.missing)
        details = (
            "The following columns were not found in the identified header row "
            f"(Row {header_row_index + 1}):\n\n{bullets}\n\n"
            "Please ensure the headers match exactly."
        )
        super().__init__("Validation Failed: Missing or incorrect column headers.", details)


class NoDataRowsError(SpreadsheetImportError):
    error_type = "NO_DATA_ROWS"

"""Domain models for the master-data spreadsheet importer.

Field definitions and the alias index, extraction/import outcomes, the review-step
row model, the validation schema and the sync round-trip types.
"""

from .error_record import ErrorRecord
from .field_definition import DEFAULT_ALIAS_INDEX, FIELD_DEFINITIONS, AliasIndex, FieldDefinition
from .import_outcome import ExtractedRecord, ImportFailure, ImportOutcome, ImportSuccess, ParseResult
from .master_record import MasterDataRecord
from .parsed_row import ParsedRow, RowStatus
from .processing_result import SyncItem, SyncReport, SyncResult

__all__ = [
    # Field definitions
    "FieldDefinition",
    "FIELD_DEFINITIONS",
    "AliasIndex",
    "DEFAULT_ALIAS_INDEX",
    # Import outcome
    "ExtractedRecord",
    "ParseResult",
    "ImportSuccess",
    "ImportFailure",
    "ImportOutcome",
    # Review / sync
    "MasterDataRecord",
    "ParsedRow",
    "RowStatus",
    "SyncItem",
    "SyncResult",
    "SyncReport",
    "ErrorRecord",
]

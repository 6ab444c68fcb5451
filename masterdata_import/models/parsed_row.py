from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from .master_record import MasterDataRecord

"""ParsedRow model and RowStatus enum for the review step.

A ParsedRow is one coerced, validated record awaiting sync. Instances are frozen;
the review session replaces them through the transition helpers below instead of
mutating fields in place.

State transitions: idle → pending → (success | error), error → idle on retry.
"""

__all__ = [
    "RowStatus",
    "ParsedRow",
]


class RowStatus(Enum):
    """Sync lifecycle of a reviewed row.

    - IDLE: parsed, not yet sent
    - PENDING: included in an in-flight batch
    - SUCCESS: stored by the batch-create call, never sent again
    - ERROR: rejected remotely or lost to a transport failure
    """
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class ParsedRow:
    index: int  # 元シートの行インデックス (0 始まり)
    data: MasterDataRecord
    is_valid: bool
    errors: dict[str, str] = field(default_factory=dict)
    status: RowStatus = RowStatus.IDLE
    message: str | None = None

    @property
    def is_syncable(self) -> bool:
        return self.is_valid and self.status is not RowStatus.SUCCESS

    def with_status(self, status: RowStatus, message: str | None = None) -> ParsedRow:
        return replace(self, status=status, message=message)

    def with_data(self, data: MasterDataRecord, errors: dict[str, str]) -> ParsedRow:
        return replace(self, data=data, errors=errors, is_valid=not errors)

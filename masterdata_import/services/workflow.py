from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..models.import_outcome import ImportFailure, ParseResult

"""Upload → review → testing wizard state.

ImportWorkflow is passed explicitly to whoever drives the wizard (the CLI
import command here). Steps only change through the methods below.
"""

__all__ = [
    "WorkflowStep",
    "ImportWorkflow",
]


class WorkflowStep(Enum):
    UPLOAD = "upload"
    REVIEW = "review"
    TESTING = "testing"


@dataclass
class ImportWorkflow:
    current_step: WorkflowStep = WorkflowStep.UPLOAD
    completed_steps: set[WorkflowStep] = field(default_factory=set)
    file_name: str | None = None
    file_size: int | None = None
    total_rows: int = 0
    skipped_rows: int = 0
    parse_error: str | None = None

    def select_file(self, name: str, size: int) -> None:
        self.file_name = name
        self.file_size = size
        self.parse_error = None

    def parse_succeeded(self, result: ParseResult) -> None:
        """Upload is complete; move on to review. Earlier completed steps are kept."""
        self.total_rows = result.total_rows
        self.skipped_rows = result.skipped_rows
        self.parse_error = None
        self.completed_steps.add(WorkflowStep.UPLOAD)
        self.current_step = WorkflowStep.REVIEW

    def parse_failed(self, failure: ImportFailure) -> None:
        self.parse_error = failure.message
        self.total_rows = 0
        self.skipped_rows = 0

    def complete_step(self, step: WorkflowStep) -> None:
        self.completed_steps.add(step)

    def go_to(self, step: WorkflowStep) -> bool:
        """Move to ``step``; testing is refused until review is complete."""
        if step is WorkflowStep.TESTING and WorkflowStep.REVIEW not in self.completed_steps:
            return False
        self.current_step = step
        return True

    def reset(self) -> None:
        self.current_step = WorkflowStep.UPLOAD
        self.completed_steps = set()
        self.file_name = None
        self.file_size = None
        self.total_rows = 0
        self.skipped_rows = 0
        self.parse_error = None

from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Sync progress display with tqdm (TTY only).

One bar per sync run counting completed batches. In non-TTY environments (CI,
redirected output) no bar is created so log output stays free of control
sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Batch progress bar for a sync run."""

    def __init__(self, total_batches: int, *, description: str = "Syncing rows") -> None:
        self.total_batches = total_batches
        self.description = description
        self.completed = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_batches,
                desc=description,
                unit="batch",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def finish_batch(self, success: bool = True) -> None:
        self.completed += 1
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

from __future__ import annotations

import masterdata_import.services.progress as progress_mod
from masterdata_import.services.progress import ProgressTracker


def test_disabled_when_not_tty(monkeypatch):
    monkeypatch.setattr(progress_mod, "is_tty_enabled", lambda: False)
    with ProgressTracker(3) as p:
        assert p.pbar is None
        p.finish_batch()
        p.finish_batch(success=False)
        p.set_postfix(synced=1)
    assert p.completed == 2


def test_enabled_on_tty(monkeypatch):
    monkeypatch.setattr(progress_mod, "is_tty_enabled", lambda: True)
    p = ProgressTracker(2, description="Syncing rows")
    assert p.pbar is not None
    p.finish_batch()
    assert p.pbar.n == 1
    p.set_postfix(synced=5, failed=0)
    p.close()
    assert p.pbar is None

"""
Run ledger: one append-only record per sync run.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime

from docmirror.core.catalog import CatalogStore, utcnow
from docmirror.sync.types import RunRecord, SyncSummary
from docmirror.utils.logging import get_logger

logger = get_logger("docmirror.sync.ledger")


@contextmanager
def best_effort(action: str) -> Iterator[None]:
    """Attempt ``action`` once; log and swallow any failure."""
    try:
        yield
    except Exception as e:
        logger.error(f"{action} failed (ignored): {e}")


class RunLedger:
    """Tracks the current run and writes its record when it ends."""

    def __init__(self, catalog: CatalogStore, *, clock: Callable[[], datetime] = utcnow):
        self.catalog = catalog
        self.clock = clock
        self.run_id: str | None = None
        self.started_at: datetime | None = None

    def begin(self) -> str:
        self.run_id = str(uuid.uuid4())
        self.started_at = self.clock()
        return self.run_id

    def finalize(self, summary: SyncSummary) -> RunRecord:
        """
        Write the success record.

        Raises:
            RunLedgerError: If the record cannot be written
        """
        record = self._record(summary, summary.note)
        self.catalog.append_run(record)
        return record

    def record_failure(self, error: BaseException, summary: SyncSummary | None = None) -> RunRecord | None:
        """
        Best-effort failure record with ``notes = "error: <message>"``.

        Never raises, so the primary error stays the one reported.
        """
        record = self._record(summary or SyncSummary(), f"error: {error}")
        with best_effort("Writing failure run record"):
            self.catalog.append_run(record)
            return record
        return None

    def _record(self, summary: SyncSummary, notes: str) -> RunRecord:
        if self.run_id is None:
            self.begin()
        return RunRecord(
            run_id=self.run_id,
            started_at=self.started_at,
            finished_at=self.clock(),
            files_scanned=summary.files_scanned,
            files_changed=summary.files_changed,
            files_skipped=summary.files_skipped,
            files_failed=summary.files_failed,
            notes=notes,
        )

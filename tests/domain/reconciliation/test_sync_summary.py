from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from chainsync.domain.model import EntityType, SyncDirection, SyncLog, SyncStatus
from chainsync.domain.reconciliation import (
    BatchOutcome,
    LedgerEntry,
    SyncLogSnapshot,
    SyncSummary,
)

STARTED = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _snapshot(**overrides: object) -> SyncLogSnapshot:
    values: dict[str, object] = {
        "id": uuid4(),
        "entity_type": EntityType.PRODUCTS,
        "direction": SyncDirection.IMPORT,
        "status": SyncStatus.IN_PROGRESS,
        "records_total": 4,
        "records_processed": 0,
        "records_failed": 0,
        "error_message": None,
        "started_at": STARTED,
        "completed_at": None,
    }
    values.update(overrides)
    return SyncLogSnapshot(**values)  # pyright: ignore[reportArgumentType]


@pytest.mark.parametrize(
    ("summary", "expected"),
    [
        (SyncSummary(days=30), "healthy"),
        (SyncSummary(days=30, failed_last_24h=2, completed_last_24h=2), "healthy"),
        (SyncSummary(days=30, failed_last_24h=3, completed_last_24h=2), "error"),
        (SyncSummary(days=30, failed_last_24h=3, stale_in_progress=1), "warning"),
    ],
)
def test_system_status(summary: SyncSummary, expected: str) -> None:
    assert summary.system_status == expected


def test_completion_percentage_counts_processed_and_failed() -> None:
    assert _snapshot(records_processed=1, records_failed=1).completion_percentage == 50.0
    assert _snapshot(records_total=3, records_processed=1).completion_percentage == 33.33


def test_empty_run_is_complete_only_once_finished() -> None:
    assert _snapshot(records_total=0).completion_percentage == 0.0
    finished = _snapshot(records_total=0, status=SyncStatus.COMPLETED)
    assert finished.completion_percentage == 100.0


def test_duration_is_known_after_completion() -> None:
    assert _snapshot().duration_seconds is None
    done = _snapshot(completed_at=STARTED + timedelta(seconds=90))
    assert done.duration_seconds == 90.0
    assert done.to_dict()["completed_at"] == "2024-05-01T12:01:30+00:00"


def test_sync_log_finish_sets_counts_and_completion_time() -> None:
    sync_log = SyncLog(
        entity_type=EntityType.CUSTOMERS,
        direction=SyncDirection.IMPORT,
        records_total=3,
        started_at=STARTED,
    )

    sync_log.finish(
        status=SyncStatus.COMPLETED,
        processed=2,
        failed=1,
        error=None,
        now=STARTED + timedelta(minutes=1),
    )

    assert sync_log.is_finished
    assert (sync_log.records_processed, sync_log.records_failed) == (2, 1)
    assert sync_log.completed_at == STARTED + timedelta(minutes=1)


def test_batch_outcome_success_rule() -> None:
    log_entry = _snapshot(status=SyncStatus.COMPLETED)
    ok = LedgerEntry(index=0, identifiers={}, success=True)
    bad = LedgerEntry(index=1, identifiers={}, success=False, error="x", error_code="c")

    assert BatchOutcome(sync_log=log_entry).success
    assert BatchOutcome(sync_log=log_entry, ledger=(ok, bad)).success
    assert not BatchOutcome(sync_log=log_entry, ledger=(bad,)).success
    assert BatchOutcome(sync_log=log_entry, ledger=(ok, bad)).to_dict()["imported"] == 1

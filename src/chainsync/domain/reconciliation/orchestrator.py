"""Batch orchestration: resolve and upsert every record, then distribute.

Flow of :func:`run_batch`:
1) check the declared total against the actual record count
2) open a sync log entry
3) per record, inside a nested scope: validate, bind, resolve, apply, plan delivery
4) commit the batch scope
5) push delivery plans to branches in input order
6) close the sync log entry with the final counts

A failing record only rolls back its own nested scope and becomes a failed
ledger entry. Anything that breaks the batch scope itself aborts the batch and
closes the sync log as failed.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from chainsync.domain.model import SyncDirection, SyncStatus

from .apply import apply_record
from .contracts import BatchOutcome, LedgerEntry
from .distribute import distribute
from .errors import BatchAbortedError, ProvenanceError, ReconciliationError, RecordValidationError
from .profiles import profile_for
from .provenance import SyncLogRecorder
from .resolve import resolve

if TYPE_CHECKING:
    from uuid import UUID

    from chainsync.domain.model import EntityType, LedgerAction
    from chainsync.domain.ports import BranchPusher, ReconciliationUnitOfWork

    from .contracts import DeliveryPlan, SyncLogSnapshot
    from .profiles import EntityProfile

log = getLogger(__name__)

type UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]


@dataclass(frozen=True, slots=True, kw_only=True)
class _RecordResult:
    index: int
    identifiers: dict[str, object]
    entity_id: UUID | None = None
    action: LedgerAction | None = None
    plan: DeliveryPlan | None = None
    error: str | None = None
    error_code: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


def run_batch(
    entity_type: EntityType | str,
    records: Sequence[object],
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    direction: SyncDirection = SyncDirection.IMPORT,
    pusher: BranchPusher | None = None,
    declared_total: int | None = None,
    recorder: SyncLogRecorder | None = None,
) -> BatchOutcome:
    """Reconcile ``records`` of one entity type and return the per-record ledger."""

    profile = profile_for(entity_type)
    if declared_total is not None and declared_total != len(records):
        raise RecordValidationError(
            f"declared total {declared_total} does not match {len(records)} submitted records"
        )

    effective_recorder = recorder or SyncLogRecorder(unit_of_work_factory)
    try:
        handle = effective_recorder.begin(profile.entity_type, direction, len(records))
    except ProvenanceError as exc:
        raise BatchAbortedError(str(exc)) from exc

    log.info(
        "Starting %s batch %s: direction=%s, records=%s",
        profile.entity_type,
        handle.id,
        direction,
        len(records),
    )

    try:
        results = _reconcile(profile, records, unit_of_work_factory)
    except Exception as exc:
        log.exception("Batch %s aborted", handle.id)
        _close_failed(effective_recorder, handle, str(exc))
        raise BatchAbortedError(f"batch aborted: {exc}", sync_id=handle.id) from exc

    try:
        ledger = tuple(_ledger_entry(result, pusher) for result in results)
    except Exception as exc:
        # upserts are committed at this point; only the sync log can still be closed
        log.exception("Distribution for batch %s failed", handle.id)
        _close_failed(effective_recorder, handle, str(exc) or type(exc).__name__)
        raise BatchAbortedError(
            f"batch aborted after commit: {exc}", sync_id=handle.id
        ) from exc

    imported = sum(1 for entry in ledger if entry.success)
    failed = len(ledger) - imported

    try:
        closed = effective_recorder.complete(
            handle, SyncStatus.COMPLETED, imported, failed=failed
        )
    except ProvenanceError as exc:
        _close_failed(effective_recorder, handle, str(exc))
        raise BatchAbortedError(str(exc), sync_id=handle.id) from exc

    log.info(
        "Finished %s batch %s: imported=%s, failed=%s, undelivered=%s",
        profile.entity_type,
        handle.id,
        imported,
        failed,
        sum(1 for entry in ledger if entry.distribution_failed),
    )
    return BatchOutcome(sync_log=closed, ledger=ledger)


def _reconcile(
    profile: EntityProfile[Any],
    records: Sequence[object],
    unit_of_work_factory: UnitOfWorkFactory,
) -> list[_RecordResult]:
    results: list[_RecordResult] = []
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        for index, raw in enumerate(records):
            identifiers = profile.echo(raw)
            try:
                fields = profile.parse(raw)
                with uow.record_scope():
                    bound = profile.bind(fields, repositories)
                    existing = resolve(bound, profile.identifiers, profile.finder(repositories))
                    applied = apply_record(existing, bound, profile, repositories)
                    plan = profile.plan_delivery(applied.entity, bound, repositories)
            except ReconciliationError as exc:
                log.warning("Record %s of %s batch rejected: %s", index, profile.entity_type, exc)
                results.append(
                    _RecordResult(
                        index=index, identifiers=identifiers, error=str(exc), error_code=exc.code
                    )
                )
                continue
            except Exception as exc:
                log.exception("Unexpected error on record %s of %s batch", index, profile.entity_type)
                results.append(
                    _RecordResult(
                        index=index,
                        identifiers=identifiers,
                        error=str(exc) or type(exc).__name__,
                        error_code="internal_error",
                    )
                )
                continue
            results.append(
                _RecordResult(
                    index=index,
                    identifiers=identifiers,
                    entity_id=applied.entity.id,
                    action=applied.action,
                    plan=plan,
                )
            )
        uow.commit()
    return results


def _ledger_entry(result: _RecordResult, pusher: BranchPusher | None) -> LedgerEntry:
    if not result.success:
        return LedgerEntry(
            index=result.index,
            identifiers=result.identifiers,
            success=False,
            error=result.error,
            error_code=result.error_code,
        )
    return LedgerEntry(
        index=result.index,
        identifiers=result.identifiers,
        success=True,
        action=result.action,
        entity_id=result.entity_id,
        distribution=distribute(result.plan, pusher),
    )


def _close_failed(recorder: SyncLogRecorder, handle: SyncLogSnapshot, message: str) -> None:
    try:
        recorder.complete(handle, SyncStatus.FAILED, 0, error=message)
    except ProvenanceError:
        log.exception("Could not mark sync log %s as failed", handle.id)

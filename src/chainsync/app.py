"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING, cast

from chainsync.adapters.branch_push import HttpBranchPusher
from chainsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    ensure_started,
)
from chainsync.config import get_sync_config
from chainsync.domain.model import Branch, SyncDirection
from chainsync.domain.ports.unit_of_work import ReconciliationUnitOfWork
from chainsync.domain.reconciliation import (
    BatchOutcome,
    EntityChange,
    RecordValidationError,
    SyncLogFilter,
    SyncLogSnapshot,
    SyncSummary,
    run_batch,
)
from chainsync.domain.reconciliation import cleanup_sync_logs as _cleanup_sync_logs
from chainsync.domain.reconciliation import deactivate_entity as _deactivate_entity
from chainsync.domain.reconciliation import get_entity as _get_entity
from chainsync.domain.reconciliation import get_sync_log as _get_sync_log
from chainsync.domain.reconciliation import list_sync_logs as _list_sync_logs
from chainsync.domain.reconciliation import summarize_sync_logs as _summarize_sync_logs
from chainsync.domain.reconciliation import update_entity as _update_entity

if TYPE_CHECKING:
    from uuid import UUID

    from chainsync.domain.model import EntityType
    from chainsync.domain.ports import BranchPusher

UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]


log = getLogger(__name__)


def resolve_unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    ensure_started()
    return SqlAlchemyReconciliationUnitOfWork


def resolve_pusher(pusher: BranchPusher | None) -> BranchPusher:
    return pusher if pusher is not None else HttpBranchPusher()


ENVELOPE_KEYS = ("records", "updates")


def records_from_payload(payload: object) -> Sequence[object]:
    """Accept a bare array or an object holding it under ``records``/``updates``."""

    if isinstance(payload, list):
        return cast(list[object], payload)
    if isinstance(payload, Mapping):
        envelope = cast(Mapping[str, object], payload)
        for key in ENVELOPE_KEYS:
            records = envelope.get(key)
            if isinstance(records, list):
                return cast(list[object], records)
    raise RecordValidationError("request body must be an array of records")


def import_records(
    entity_type: EntityType | str,
    records: Sequence[object],
    *,
    declared_total: int | None = None,
    direction: SyncDirection = SyncDirection.IMPORT,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    pusher: BranchPusher | None = None,
) -> BatchOutcome:
    """Reconcile one ERP batch and push confirmed state to the branches."""

    outcome = run_batch(
        entity_type,
        records,
        unit_of_work_factory=resolve_unit_of_work_factory(unit_of_work_factory),
        direction=direction,
        pusher=resolve_pusher(pusher),
        declared_total=declared_total,
    )
    log.info(
        "Imported %s: imported=%s, failed=%s, sync_id=%s",
        entity_type,
        outcome.imported,
        outcome.failed,
        outcome.sync_log.id,
    )
    return outcome


def get_entity(
    entity_type: EntityType | str,
    identifier: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> dict[str, object]:
    return _get_entity(
        entity_type,
        identifier,
        unit_of_work_factory=resolve_unit_of_work_factory(unit_of_work_factory),
    )


def update_entity(
    entity_type: EntityType | str,
    identifier: str,
    fields: object,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    pusher: BranchPusher | None = None,
) -> EntityChange:
    return _update_entity(
        entity_type,
        identifier,
        fields,
        unit_of_work_factory=resolve_unit_of_work_factory(unit_of_work_factory),
        pusher=resolve_pusher(pusher),
    )


def deactivate_entity(
    entity_type: EntityType | str,
    identifier: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> EntityChange:
    return _deactivate_entity(
        entity_type,
        identifier,
        unit_of_work_factory=resolve_unit_of_work_factory(unit_of_work_factory),
    )


def _describe_branch(branch: Branch) -> dict[str, object]:
    return {
        "id": str(branch.id),
        "code": branch.code,
        "name": branch.name,
        "api_endpoint": branch.api_endpoint,
        "has_api_key": bool(branch.api_key),
        "is_active": branch.is_active,
    }


def register_branch(
    code: str,
    name: str,
    *,
    api_endpoint: str | None = None,
    api_key: str | None = None,
    is_active: bool = True,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> dict[str, object]:
    """Create a branch, or update the one already registered under ``code``."""

    code, name = code.strip(), name.strip()
    if not code or not name:
        raise RecordValidationError("branch code and name are required")

    with resolve_unit_of_work_factory(unit_of_work_factory)() as uow:
        branches = uow.repositories.branches
        branch = branches.get_by_code(code)
        if branch is None:
            branch = Branch(code=code, name=name)
            branches.add(branch)
        branch.name = name
        if api_endpoint is not None:
            branch.api_endpoint = api_endpoint.strip() or None
        if api_key is not None:
            branch.api_key = api_key or None
        branch.is_active = is_active
        branch.touch()
        description = _describe_branch(branch)
        uow.commit()

    log.info("Registered branch %s (%s)", code, "active" if is_active else "inactive")
    return description


def list_branches(
    *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> list[dict[str, object]]:
    with resolve_unit_of_work_factory(unit_of_work_factory)() as uow:
        return [_describe_branch(branch) for branch in uow.repositories.branches.list_all()]


def list_sync_logs(
    query: SyncLogFilter | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[SyncLogSnapshot]:
    return _list_sync_logs(resolve_unit_of_work_factory(unit_of_work_factory), query)


def get_sync_log(
    sync_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> SyncLogSnapshot | None:
    return _get_sync_log(resolve_unit_of_work_factory(unit_of_work_factory), sync_id)


def summarize_sync_logs(
    *,
    days: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> SyncSummary:
    config = get_sync_config()
    return _summarize_sync_logs(
        resolve_unit_of_work_factory(unit_of_work_factory),
        days=days or config.summary_days,
        stale_after=timedelta(hours=config.stale_after_hours),
    )


def cleanup_sync_logs(
    *,
    older_than_days: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> int:
    return _cleanup_sync_logs(
        resolve_unit_of_work_factory(unit_of_work_factory),
        older_than_days=older_than_days or get_sync_config().retention_days,
    )

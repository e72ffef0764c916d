from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from chainsync.domain.model import (
    Branch,
    EntityType,
    Product,
    SyncDirection,
    SyncLog,
    SyncStatus,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from chainsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyReconciliationUnitOfWork

    UowFactory = Callable[[], SqlAlchemyReconciliationUnitOfWork]

pytestmark = pytest.mark.integration

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def _sync_log(
    entity_type: EntityType,
    status: SyncStatus,
    started_at: datetime,
    *,
    processed: int = 0,
    failed: int = 0,
) -> SyncLog:
    sync_log = SyncLog(
        entity_type=entity_type,
        direction=SyncDirection.IMPORT,
        records_total=processed + failed,
        started_at=started_at,
    )
    if status is not SyncStatus.IN_PROGRESS:
        sync_log.finish(
            status=status, processed=processed, failed=failed, error=None, now=started_at
        )
    sync_log.touch(started_at)
    return sync_log


@pytest.fixture
def seeded_logs(sqlite_unit_of_work: UowFactory) -> UowFactory:
    with sqlite_unit_of_work() as uow:
        for sync_log in (
            _sync_log(
                EntityType.PRODUCTS, SyncStatus.COMPLETED, NOW - timedelta(hours=1), processed=5
            ),
            _sync_log(EntityType.PRODUCTS, SyncStatus.FAILED, NOW - timedelta(hours=2), failed=2),
            _sync_log(
                EntityType.CUSTOMERS, SyncStatus.COMPLETED, NOW - timedelta(days=3), processed=1
            ),
            _sync_log(EntityType.CUSTOMERS, SyncStatus.IN_PROGRESS, NOW - timedelta(days=200)),
            _sync_log(
                EntityType.PRICES, SyncStatus.COMPLETED, NOW - timedelta(days=120), processed=4
            ),
        ):
            uow.repositories.sync_logs.add(sync_log)
        uow.commit()
    return sqlite_unit_of_work


def test_search_filters_and_orders_newest_first(seeded_logs: UowFactory) -> None:
    with seeded_logs() as uow:
        repository = uow.repositories.sync_logs
        products = repository.search(entity_type=EntityType.PRODUCTS)
        recent = repository.search(started_from=NOW - timedelta(days=7))
        limited = repository.search(limit=2)

    assert [item.status for item in products] == [SyncStatus.COMPLETED, SyncStatus.FAILED]
    assert len(recent) == 3
    assert [item.started_at for item in limited] == [
        NOW - timedelta(hours=1),
        NOW - timedelta(hours=2),
    ]


def test_count_by_status_and_window(seeded_logs: UowFactory) -> None:
    with seeded_logs() as uow:
        repository = uow.repositories.sync_logs
        assert repository.count(status=SyncStatus.COMPLETED) == 3
        day_ago = NOW - timedelta(days=1)
        assert repository.count(status=SyncStatus.COMPLETED, started_from=day_ago) == 1
        stale_cutoff = NOW - timedelta(hours=2)
        assert repository.count(status=SyncStatus.IN_PROGRESS, started_to=stale_cutoff) == 1


def test_group_counts_sum_records(seeded_logs: UowFactory) -> None:
    with seeded_logs() as uow:
        groups = uow.repositories.sync_logs.group_counts(started_from=NOW - timedelta(days=30))

    assert groups == [
        (EntityType.CUSTOMERS, SyncDirection.IMPORT, SyncStatus.COMPLETED, 1, 1, 0),
        (EntityType.PRODUCTS, SyncDirection.IMPORT, SyncStatus.COMPLETED, 1, 5, 0),
        (EntityType.PRODUCTS, SyncDirection.IMPORT, SyncStatus.FAILED, 1, 0, 2),
    ]


def test_delete_finished_before_keeps_running_entries(seeded_logs: UowFactory) -> None:
    with seeded_logs() as uow:
        deleted = uow.repositories.sync_logs.delete_finished_before(NOW - timedelta(days=90))
        uow.commit()

    with seeded_logs() as uow:
        remaining = uow.repositories.sync_logs.search()

    assert deleted == 1
    assert len(remaining) == 4
    assert any(item.status is SyncStatus.IN_PROGRESS for item in remaining)


def test_find_by_composite_key_and_active_branches(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        for code, active in (("B2", True), ("B1", True), ("B0", False)):
            branch = Branch(code=code, name=code, is_active=active)
            branch.touch()
            uow.repositories.branches.add(branch)
        product = Product(onec_id="P-1", sku="S-1", name="Tea", base_price=2.0, cost=1.0)
        product.touch()
        uow.repositories.products.add(product)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        branches = uow.repositories.branches
        assert [item.code for item in branches.list_active()] == ["B1", "B2"]
        assert [item.code for item in branches.list_all()] == ["B0", "B1", "B2"]
        assert branches.get_by_code("B9") is None
        found = uow.repositories.products.find_by(("onec_id", "sku"), ("P-1", "S-1"))
        assert [item.name for item in found] == ["Tea"]
        assert uow.repositories.products.find_by(("onec_id", "sku"), ("P-1", "S-2")) == ()
        with pytest.raises(ValueError, match="same length"):
            uow.repositories.products.find_by(("onec_id",), ("P-1", "S-1"))

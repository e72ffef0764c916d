from __future__ import annotations

from typing import TYPE_CHECKING

from chainsync.domain.model import Branch
from chainsync.domain.reconciliation import (
    BranchRoute,
    BranchTarget,
    DeliveryPlan,
    DistributionReport,
    LedgerEntry,
    distribute,
)
from chainsync.domain.reconciliation.profiles import branch_targets
from tests.support.branches import RecordingPusher

if TYPE_CHECKING:
    from collections.abc import Mapping

ROUTE = BranchRoute(sub_path="products", envelope_key="products")


def _plan(*codes: str) -> DeliveryPlan:
    return DeliveryPlan(
        route=ROUTE,
        payload={"sku": "S-1"},
        targets=tuple(BranchTarget(code, f"http://{code}.local", "key") for code in codes),
    )


def test_distribute_pushes_to_every_target_in_order() -> None:
    pusher = RecordingPusher()

    reports = distribute(_plan("B1", "B2"), pusher)

    assert reports == (DistributionReport("B1", True), DistributionReport("B2", True))
    assert [push.branch_code for push in pusher.pushes] == ["B1", "B2"]
    assert pusher.pushes[0].payload == {"sku": "S-1"}


def test_failed_branch_does_not_stop_the_others() -> None:
    pusher = RecordingPusher(failing={"B1"})

    reports = distribute(_plan("B1", "B2"), pusher)

    assert [report.delivered for report in reports] == [False, True]
    assert reports[0].error == "branch B1 responded with HTTP 503"
    assert [push.branch_code for push in pusher.pushes] == ["B2"]


class ExplodingPusher(RecordingPusher):
    def push(
        self, target: BranchTarget, route: BranchRoute, payload: Mapping[str, object]
    ) -> None:
        if target.code == "B1":
            raise RuntimeError("event loop is closed")
        super().push(target, route, payload)


def test_unexpected_pusher_error_is_reported_not_raised() -> None:
    pusher = ExplodingPusher()

    reports = distribute(_plan("B1", "B2"), pusher)

    assert reports == (
        DistributionReport("B1", False, "event loop is closed"),
        DistributionReport("B2", True),
    )
    assert [push.branch_code for push in pusher.pushes] == ["B2"]


def test_nothing_to_distribute() -> None:
    assert distribute(None, RecordingPusher()) == ()
    assert distribute(_plan("B1"), None) == ()


def test_branch_targets_skip_unreachable_branches() -> None:
    branches = (
        Branch(code="B1", name="One", api_endpoint="http://b1"),
        Branch(code="B2", name="Two", api_endpoint=None),
        Branch(code="B3", name="Three", api_endpoint="http://b3", is_active=False),
    )

    assert [target.code for target in branch_targets(branches)] == ["B1"]


def test_ledger_entry_reports_distribution_failure_separately() -> None:
    entry = LedgerEntry(
        index=0,
        identifiers={"sku": "S-1"},
        success=True,
        distribution=(DistributionReport("B1", True), DistributionReport("B2", False, "down")),
    )

    assert entry.success
    assert entry.distribution_failed
    assert entry.to_dict()["distribution"] == [
        {"branch_code": "B1", "delivered": True},
        {"branch_code": "B2", "delivered": False, "error": "down"},
    ]

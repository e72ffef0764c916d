"""Best-effort propagation of confirmed entity state to branch servers."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .contracts import DistributionReport
from .errors import DistributionError

if TYPE_CHECKING:
    from chainsync.domain.ports import BranchPusher

    from .contracts import DeliveryPlan

log = getLogger(__name__)


def distribute(
    plan: DeliveryPlan | None, pusher: BranchPusher | None
) -> tuple[DistributionReport, ...]:
    """Push ``plan`` to each of its targets in order and report per branch.

    A failed push is recorded in its report and never raised, whatever the
    pusher raised; the upsert that produced the plan is already committed.
    """

    if plan is None or pusher is None:
        return ()

    reports: list[DistributionReport] = []
    for target in plan.targets:
        try:
            pusher.push(target, plan.route, plan.payload)
        except DistributionError as exc:
            log.warning("Push of %s to branch %s failed: %s", plan.route.sub_path, target.code, exc)
            reports.append(DistributionReport(target.code, delivered=False, error=str(exc)))
        except Exception as exc:
            log.warning(
                "Push of %s to branch %s raised unexpectedly",
                plan.route.sub_path,
                target.code,
                exc_info=True,
            )
            message = str(exc) or type(exc).__name__
            reports.append(DistributionReport(target.code, delivered=False, error=message))
        else:
            reports.append(DistributionReport(target.code, delivered=True))
    return tuple(reports)

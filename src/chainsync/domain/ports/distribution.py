"""Port for pushing confirmed entity state to branch servers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from chainsync.domain.reconciliation.contracts import BranchRoute, BranchTarget


@runtime_checkable
class BranchPusher(Protocol):
    def push(
        self, target: BranchTarget, route: BranchRoute, payload: Mapping[str, object]
    ) -> None:
        """Deliver one entity payload or raise ``DistributionError``."""
        ...

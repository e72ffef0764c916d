from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chainsync.domain.model import Branch, Customer, Product
from chainsync.domain.reconciliation import DistributionError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from uuid import UUID

    from chainsync.domain.ports import ReconciliationUnitOfWork
    from chainsync.domain.reconciliation import BranchRoute, BranchTarget

    UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]


@dataclass(frozen=True, slots=True)
class Push:
    branch_code: str
    sub_path: str
    envelope_key: str
    payload: dict[str, object]
    api_key: str | None


@dataclass(slots=True)
class RecordingPusher:
    """Branch pusher double; branches listed in ``failing`` reject every push."""

    pushes: list[Push] = field(default_factory=list)
    failing: set[str] = field(default_factory=set)

    def push(
        self, target: BranchTarget, route: BranchRoute, payload: Mapping[str, object]
    ) -> None:
        if target.code in self.failing:
            raise DistributionError(
                f"branch {target.code} responded with HTTP 503",
                branch_code=target.code,
                status_code=503,
            )
        self.pushes.append(
            Push(
                branch_code=target.code,
                sub_path=route.sub_path,
                envelope_key=route.envelope_key,
                payload=dict(payload),
                api_key=target.api_key,
            )
        )

    def to(self, branch_code: str) -> list[Push]:
        return [push for push in self.pushes if push.branch_code == branch_code]


def seed_branch(
    unit_of_work_factory: UnitOfWorkFactory,
    code: str,
    *,
    endpoint: str | None = "default",
    api_key: str | None = "secret",
    is_active: bool = True,
) -> UUID:
    with unit_of_work_factory() as uow:
        branch = Branch(
            code=code,
            name=f"Branch {code}",
            api_endpoint=f"http://{code.lower()}.branch.local" if endpoint == "default" else endpoint,
            api_key=api_key,
            is_active=is_active,
        )
        branch.touch()
        uow.repositories.branches.add(branch)
        uow.commit()
        return branch.id


def seed_product(
    unit_of_work_factory: UnitOfWorkFactory,
    *,
    onec_id: str = "P-1",
    sku: str = "SKU-1",
    barcode: str | None = "4600000000011",
    base_price: float = 10.0,
    cost: float = 6.0,
    is_active: bool = True,
) -> UUID:
    with unit_of_work_factory() as uow:
        product = Product(
            onec_id=onec_id,
            sku=sku,
            barcode=barcode,
            name=f"Product {sku}",
            base_price=base_price,
            cost=cost,
            is_active=is_active,
        )
        product.touch()
        uow.repositories.products.add(product)
        uow.commit()
        return product.id


def seed_customer(unit_of_work_factory: UnitOfWorkFactory, **fields: object) -> UUID:
    with unit_of_work_factory() as uow:
        customer = Customer(**fields)  # pyright: ignore[reportArgumentType]
        customer.touch()
        uow.repositories.customers.add(customer)
        uow.commit()
        return customer.id

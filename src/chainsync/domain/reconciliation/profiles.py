"""Per-entity-type reconciliation profiles.

A profile bundles what varies between ERP feeds: the record schema, the
identifier precedence, create defaults, reference binding (branch codes,
product references, category keys), and how confirmed state is pushed to branches. The
resolver, executor and orchestrator stay generic over profiles.
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar
from uuid import UUID

from chainsync.domain.model import (
    Category,
    Customer,
    Employee,
    EmployeeStatus,
    EntityType,
    InventoryLine,
    PriceLine,
    Product,
    utcnow,
)

from .contracts import (
    BranchRoute,
    BranchTarget,
    DeliveryPlan,
    IdentifierField,
    IdentifierSet,
    is_blank,
)
from .errors import EntityNotFoundError, RecordValidationError
from .records import (
    CategoryPatch,
    CategoryRecord,
    CustomerPatch,
    CustomerRecord,
    EmployeePatch,
    EmployeeRecord,
    InventoryRecord,
    PriceRecord,
    ProductPatch,
    ProductRecord,
    RecordModel,
    echo_identifiers,
    parse_record,
)
from .resolve import resolve_reference

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from chainsync.domain.model import Branch, Entity
    from chainsync.domain.ports import ReconcilableRepository, ReconciliationRepositories

type Finder[TEntity] = Callable[[IdentifierField, tuple[object, ...]], Sequence[TEntity]]

_AUDIT_FIELDS = frozenset({"id", "created_at", "updated_at"})

PRODUCT_REFERENCE = IdentifierSet(
    label="product",
    fields=(
        IdentifierField("barcode", ("barcode",)),
        IdentifierField("onec_id", ("onec_id",)),
        IdentifierField("sku", ("sku",)),
    ),
)


def serialize_value(value: object) -> object:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def serialize_entity(entity: Entity) -> dict[str, object]:
    return {
        item.name: serialize_value(getattr(entity, item.name))
        for item in dataclasses.fields(entity)
    }


def finder[TEntity](repository: ReconcilableRepository[TEntity]) -> Finder[TEntity]:
    def find(identifier: IdentifierField, key: tuple[object, ...]) -> Sequence[TEntity]:
        return repository.find_by(identifier.columns, key)

    return find


def require_branch(repositories: ReconciliationRepositories, code: str) -> Branch:
    branch = repositories.branches.get_by_code(code)
    if branch is None:
        raise EntityNotFoundError(f'branch with code "{code}" not found')
    return branch


def category_for_key(repositories: ReconciliationRepositories, key: str) -> Category:
    """Return the category with ``key``, creating a bare one named after it when missing."""

    found = repositories.categories.find_by(("key",), (key,))
    if found:
        return found[0]
    category = Category(key=key, name=key)
    category.touch()
    repositories.categories.add(category)
    return category


def branch_targets(branches: Iterable[Branch]) -> tuple[BranchTarget, ...]:
    """Snapshot the reachable branches; inactive or endpoint-less ones are skipped."""

    return tuple(
        BranchTarget(code=branch.code, base_url=branch.api_endpoint, api_key=branch.api_key)
        for branch in branches
        if branch.is_active and branch.api_endpoint
    )


class EntityProfile[TEntity: Entity](ABC):
    entity_type: ClassVar[EntityType]
    entity_cls: ClassVar[type[Any]]
    record_schema: ClassVar[type[RecordModel]]
    patch_schema: ClassVar[type[RecordModel] | None] = None
    identifiers: ClassVar[IdentifierSet]
    echo_keys: ClassVar[tuple[str, ...]]
    defaults: ClassVar[Mapping[str, object]] = MappingProxyType({})
    allow_create: ClassVar[bool] = True
    route: ClassVar[BranchRoute | None] = None

    @abstractmethod
    def repository(self, repositories: ReconciliationRepositories) -> ReconcilableRepository[TEntity]:
        ...

    @property
    def label(self) -> str:
        return self.identifiers.label

    @property
    def attribute_names(self) -> frozenset[str]:
        """Entity attributes a record may write."""

        return frozenset(item.name for item in dataclasses.fields(self.entity_cls)) - _AUDIT_FIELDS

    @property
    def identifier_columns(self) -> frozenset[str]:
        return frozenset(column for item in self.identifiers.fields for column in item.columns)

    @property
    def lookup_identifiers(self) -> IdentifierSet:
        """Identifiers a bare path value may stand for."""

        return IdentifierSet(self.label, self.identifiers.single_column_fields())

    def parse(self, raw: object, *, partial: bool = False) -> dict[str, Any]:
        schema = self.record_schema
        if partial:
            if self.patch_schema is None:
                raise RecordValidationError(f"{self.entity_type} cannot be updated individually")
            schema = self.patch_schema
        return parse_record(schema, raw).present_fields()

    def echo(self, raw: object) -> dict[str, object]:
        return echo_identifiers(raw, self.echo_keys)

    def bind(
        self, fields: Mapping[str, Any], repositories: ReconciliationRepositories
    ) -> dict[str, Any]:
        """Turn record fields into attribute values, resolving references."""

        _ = repositories
        return dict(fields)

    def finder(self, repositories: ReconciliationRepositories) -> Finder[TEntity]:
        return finder(self.repository(repositories))

    def create(self, attributes: Mapping[str, Any]) -> TEntity:
        return self.entity_cls(**{**self.defaults, **attributes})

    def after_apply(
        self,
        entity: TEntity,
        bound: Mapping[str, Any],
        repositories: ReconciliationRepositories,
    ) -> None:
        """Hook for dependent writes once the entity itself is applied."""

    def deactivate(self, entity: TEntity) -> None:
        raise RecordValidationError(f"{self.entity_type} cannot be deactivated individually")

    def is_distributable(self, entity: TEntity, bound: Mapping[str, Any]) -> bool:
        _ = (entity, bound)
        return False

    def targets(
        self,
        entity: TEntity,
        bound: Mapping[str, Any],
        repositories: ReconciliationRepositories,
    ) -> Iterable[Branch]:
        _ = (entity, bound, repositories)
        return ()

    def describe(
        self, entity: TEntity, repositories: ReconciliationRepositories
    ) -> dict[str, object]:
        _ = repositories
        return serialize_entity(entity)

    def payload(
        self,
        entity: TEntity,
        bound: Mapping[str, Any],
        repositories: ReconciliationRepositories,
    ) -> dict[str, object]:
        _ = bound
        return self.describe(entity, repositories)

    def plan_delivery(
        self,
        entity: TEntity,
        bound: Mapping[str, Any],
        repositories: ReconciliationRepositories,
    ) -> DeliveryPlan | None:
        """Capture what to push, and where, while the session is still open."""

        if self.route is None or not self.is_distributable(entity, bound):
            return None
        targets = branch_targets(self.targets(entity, bound, repositories))
        if not targets:
            return None
        return DeliveryPlan(
            route=self.route,
            payload=self.payload(entity, bound, repositories),
            targets=targets,
        )


class CustomerProfile(EntityProfile[Customer]):
    entity_type = EntityType.CUSTOMERS
    entity_cls = Customer
    record_schema = CustomerRecord
    patch_schema = CustomerPatch
    identifiers = IdentifierSet(
        label="customer",
        fields=(
            IdentifierField("onec_id", ("onec_id",)),
            IdentifierField("customer_code", ("customer_code",)),
            IdentifierField("loyalty_card_number", ("loyalty_card_number",)),
            IdentifierField("phone", ("phone",), unique=False),
        ),
    )
    echo_keys = ("onec_id", "customer_code", "name")
    defaults = MappingProxyType(
        {"loyalty_points": 0, "discount_percentage": 0.0, "is_vip": False, "is_active": True}
    )

    def repository(self, repositories: ReconciliationRepositories) -> ReconcilableRepository[Customer]:
        return repositories.customers

    def deactivate(self, entity: Customer) -> None:
        entity.is_active = False


class EmployeeProfile(EntityProfile[Employee]):
    entity_type = EntityType.EMPLOYEES
    entity_cls = Employee
    record_schema = EmployeeRecord
    patch_schema = EmployeePatch
    identifiers = IdentifierSet(
        label="employee",
        fields=(
            IdentifierField("onec_id", ("onec_id",)),
            IdentifierField("employee_code", ("employee_code", "branch_id")),
        ),
    )
    echo_keys = ("onec_id", "employee_code", "branch_code", "name")
    defaults = MappingProxyType({"status": EmployeeStatus.ACTIVE})
    route = BranchRoute(sub_path="employees", envelope_key="employees")

    @property
    def lookup_identifiers(self) -> IdentifierSet:
        # employee codes are only unique per branch
        return IdentifierSet(
            self.label,
            (
                IdentifierField("onec_id", ("onec_id",)),
                IdentifierField("employee_code", ("employee_code",), unique=False),
            ),
        )

    def repository(self, repositories: ReconciliationRepositories) -> ReconcilableRepository[Employee]:
        return repositories.employees

    def bind(
        self, fields: Mapping[str, Any], repositories: ReconciliationRepositories
    ) -> dict[str, Any]:
        bound = dict(fields)
        code = bound.pop("branch_code", None)
        if code is not None:
            bound["branch_id"] = require_branch(repositories, code).id
        return bound

    def deactivate(self, entity: Employee) -> None:
        entity.status = EmployeeStatus.INACTIVE

    def is_distributable(self, entity: Employee, bound: Mapping[str, Any]) -> bool:
        return entity.is_active

    def targets(
        self,
        entity: Employee,
        bound: Mapping[str, Any],
        repositories: ReconciliationRepositories,
    ) -> Iterable[Branch]:
        branch = repositories.branches.get(entity.branch_id)
        return (branch,) if branch is not None else ()

    def describe(
        self, entity: Employee, repositories: ReconciliationRepositories
    ) -> dict[str, object]:
        data = serialize_entity(entity)
        branch = repositories.branches.get(entity.branch_id)
        data["branch_code"] = branch.code if branch is not None else None
        return data


class CategoryProfile(EntityProfile[Category]):
    entity_type = EntityType.CATEGORIES
    entity_cls = Category
    record_schema = CategoryRecord
    patch_schema = CategoryPatch
    identifiers = IdentifierSet(
        label="category",
        fields=(
            IdentifierField("key", ("key",)),
            IdentifierField("onec_id", ("onec_id",)),
        ),
    )
    echo_keys = ("key", "onec_id", "name")
    defaults = MappingProxyType({"sort_order": 0, "is_active": True})

    def repository(self, repositories: ReconciliationRepositories) -> ReconcilableRepository[Category]:
        return repositories.categories

    def bind(
        self, fields: Mapping[str, Any], repositories: ReconciliationRepositories
    ) -> dict[str, Any]:
        bound = dict(fields)
        if "parent_key" not in bound:
            return bound
        parent_key = bound.pop("parent_key")
        if is_blank(parent_key):
            bound["parent_id"] = None
            return bound
        parents = repositories.categories.find_by(("key",), (parent_key,))
        if not parents:
            raise EntityNotFoundError(f'parent category with key "{parent_key}" not found')
        bound["parent_id"] = parents[0].id
        return bound

    def after_apply(
        self,
        entity: Category,
        bound: Mapping[str, Any],
        repositories: ReconciliationRepositories,
    ) -> None:
        seen: set[UUID] = set()
        parent_id = entity.parent_id
        while parent_id is not None and parent_id not in seen:
            if parent_id == entity.id:
                raise RecordValidationError(
                    f"category {entity.key} cannot be its own ancestor"
                )
            seen.add(parent_id)
            parent = repositories.categories.get(parent_id)
            parent_id = parent.parent_id if parent is not None else None

    def deactivate(self, entity: Category) -> None:
        entity.is_active = False

    def describe(
        self, entity: Category, repositories: ReconciliationRepositories
    ) -> dict[str, object]:
        data = serialize_entity(entity)
        parent = repositories.categories.get(entity.parent_id) if entity.parent_id else None
        data["parent_key"] = parent.key if parent is not None else None
        return data


class ProductProfile(EntityProfile[Product]):
    entity_type = EntityType.PRODUCTS
    entity_cls = Product
    record_schema = ProductRecord
    patch_schema = ProductPatch
    identifiers = IdentifierSet(
        label="product",
        fields=(
            IdentifierField("onec_id", ("onec_id",)),
            IdentifierField("sku", ("sku",)),
            IdentifierField("barcode", ("barcode",)),
        ),
    )
    echo_keys = ("onec_id", "sku", "barcode", "name")
    defaults = MappingProxyType({"unit_of_measure": "pcs", "tax_rate": 0.0, "is_active": True})
    route = BranchRoute(sub_path="products", envelope_key="products")

    def repository(self, repositories: ReconciliationRepositories) -> ReconcilableRepository[Product]:
        return repositories.products

    def bind(
        self, fields: Mapping[str, Any], repositories: ReconciliationRepositories
    ) -> dict[str, Any]:
        bound = dict(fields)
        if "category_key" in bound:
            key = bound.pop("category_key")
            bound["category_id"] = None if is_blank(key) else category_for_key(repositories, key).id
        return bound

    def deactivate(self, entity: Product) -> None:
        entity.is_active = False

    def describe(
        self, entity: Product, repositories: ReconciliationRepositories
    ) -> dict[str, object]:
        data = serialize_entity(entity)
        category = repositories.categories.get(entity.category_id) if entity.category_id else None
        data["category_key"] = category.key if category is not None else None
        return data

    def is_distributable(self, entity: Product, bound: Mapping[str, Any]) -> bool:
        return entity.is_active

    def targets(
        self,
        entity: Product,
        bound: Mapping[str, Any],
        repositories: ReconciliationRepositories,
    ) -> Iterable[Branch]:
        return repositories.branches.list_active()


def _product_reference(product: Product) -> dict[str, object]:
    return {
        "product_id": str(product.id),
        "onec_id": product.onec_id,
        "sku": product.sku,
        "barcode": product.barcode,
    }


class InventoryProfile(EntityProfile[InventoryLine]):
    entity_type = EntityType.INVENTORY
    entity_cls = InventoryLine
    record_schema = InventoryRecord
    identifiers = IdentifierSet(
        label="inventory line",
        fields=(IdentifierField("branch_product", ("branch_id", "product_id")),),
    )
    echo_keys = ("barcode", "onec_id", "sku", "branch_code")
    route = BranchRoute(sub_path="inventory", envelope_key="updates")

    def repository(
        self, repositories: ReconciliationRepositories
    ) -> ReconcilableRepository[InventoryLine]:
        return repositories.inventory

    def bind(
        self, fields: Mapping[str, Any], repositories: ReconciliationRepositories
    ) -> dict[str, Any]:
        bound = dict(fields)
        branch = require_branch(repositories, bound.pop("branch_code"))
        product = resolve_reference(bound, PRODUCT_REFERENCE, finder(repositories.products))
        bound.update(branch_id=branch.id, product_id=product.id, branch=branch, product=product)
        return bound

    def is_distributable(self, entity: InventoryLine, bound: Mapping[str, Any]) -> bool:
        return bound["product"].is_active

    def targets(
        self,
        entity: InventoryLine,
        bound: Mapping[str, Any],
        repositories: ReconciliationRepositories,
    ) -> Iterable[Branch]:
        return (bound["branch"],)

    def payload(
        self,
        entity: InventoryLine,
        bound: Mapping[str, Any],
        repositories: ReconciliationRepositories,
    ) -> dict[str, object]:
        return {
            **_product_reference(bound["product"]),
            "branch_code": bound["branch"].code,
            "quantity_in_stock": entity.quantity_in_stock,
            "min_stock_level": entity.min_stock_level,
            "max_stock_level": entity.max_stock_level,
        }


class PriceProfile(EntityProfile[Product]):
    """Price updates target existing products and fan out into branch price lines."""

    entity_type = EntityType.PRICES
    entity_cls = Product
    record_schema = PriceRecord
    identifiers = PRODUCT_REFERENCE
    echo_keys = ("barcode", "onec_id", "sku")
    allow_create = False
    route = BranchRoute(sub_path="prices", envelope_key="updates")

    @property
    def attribute_names(self) -> frozenset[str]:
        return frozenset({"base_price", "cost"})

    def repository(self, repositories: ReconciliationRepositories) -> ReconcilableRepository[Product]:
        return repositories.products

    def bind(
        self, fields: Mapping[str, Any], repositories: ReconciliationRepositories
    ) -> dict[str, Any]:
        bound = dict(fields)
        codes = bound.pop("branch_codes", None) or []
        if codes:
            branches = tuple(require_branch(repositories, code) for code in dict.fromkeys(codes))
        else:
            branches = tuple(repositories.branches.list_active())
        bound["branches"] = branches
        return bound

    def after_apply(
        self,
        entity: Product,
        bound: Mapping[str, Any],
        repositories: ReconciliationRepositories,
    ) -> None:
        effective_from = bound.get("effective_date")
        for branch in bound["branches"]:
            existing = repositories.prices.find_by(("branch_id", "product_id"), (branch.id, entity.id))
            if existing:
                # availability is branch-managed and survives price updates
                line = existing[0]
                line.price = entity.base_price
                line.cost = entity.cost
                if effective_from is not None:
                    line.effective_from = effective_from
            else:
                line = PriceLine(
                    branch_id=branch.id,
                    product_id=entity.id,
                    price=entity.base_price,
                    cost=entity.cost,
                    effective_from=effective_from or utcnow(),
                )
                repositories.prices.add(line)
            line.touch()

    def is_distributable(self, entity: Product, bound: Mapping[str, Any]) -> bool:
        return bool(bound["branches"])

    def targets(
        self,
        entity: Product,
        bound: Mapping[str, Any],
        repositories: ReconciliationRepositories,
    ) -> Iterable[Branch]:
        """Branches whose price line for the product is available."""

        for branch in bound["branches"]:
            lines = repositories.prices.find_by(("branch_id", "product_id"), (branch.id, entity.id))
            if lines and lines[0].is_available:
                yield branch

    def payload(
        self,
        entity: Product,
        bound: Mapping[str, Any],
        repositories: ReconciliationRepositories,
    ) -> dict[str, object]:
        effective_from = bound.get("effective_date")
        return {
            **_product_reference(entity),
            "price": entity.base_price,
            "cost": entity.cost,
            "effective_date": serialize_value(effective_from) if effective_from else None,
        }


PROFILES: Mapping[EntityType, EntityProfile[Any]] = MappingProxyType(
    {
        profile.entity_type: profile
        for profile in (
            CustomerProfile(),
            EmployeeProfile(),
            CategoryProfile(),
            ProductProfile(),
            InventoryProfile(),
            PriceProfile(),
        )
    }
)


def profile_for(entity_type: EntityType | str) -> EntityProfile[Any]:
    try:
        return PROFILES[EntityType(entity_type)]
    except ValueError as exc:
        raise RecordValidationError(f"unknown entity type: {entity_type}") from exc

"""Pydantic schemas for inbound ERP records.

Field presence matters: a field left out of the payload is *absent* and must
not touch the stored value, while an explicit ``null`` clears it. Schemas
therefore keep defaults out of the models (defaults belong to the create
path) and expose :meth:`RecordModel.present_fields`.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, ClassVar, Self, cast

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)

from chainsync.domain.model import EmployeeRole, EmployeeStatus, Gender

from .errors import RecordValidationError

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

ONEC_ID_ALIASES = AliasChoices("onec_id", "oneC_id")
EMPLOYEE_CODE_ALIASES = AliasChoices("employee_code", "employee_id")
METADATA_ALIASES = AliasChoices("metadata", "extra_data")

# raw payload keys that name the same identifier
RAW_KEY_ALIASES: dict[str, str] = {"oneC_id": "onec_id", "employee_id": "employee_code"}


class RecordModel(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, populate_by_name=True)

    # fields that may be omitted but never explicitly nulled
    NOT_NULL: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_explicit_nulls(self) -> Self:
        for name in sorted(self.NOT_NULL & self.model_fields_set):
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def present_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class CustomerRecord(RecordModel):
    NOT_NULL: ClassVar[frozenset[str]] = frozenset(
        {"loyalty_points", "discount_percentage", "is_vip", "is_active"}
    )

    onec_id: str | None = Field(default=None, validation_alias=ONEC_ID_ALIASES)
    customer_code: str | None = None
    loyalty_card_number: str | None = None
    phone: str | None = None
    name: str = Field(min_length=1)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    address: str | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None
    loyalty_points: int | None = Field(default=None, ge=0)
    discount_percentage: float | None = Field(default=None, ge=0, le=100)
    is_vip: bool | None = None
    is_active: bool | None = None
    notes: str | None = None
    extra_data: dict[str, Any] | None = Field(default=None, validation_alias=METADATA_ALIASES)


class CustomerPatch(CustomerRecord):
    NOT_NULL: ClassVar[frozenset[str]] = CustomerRecord.NOT_NULL | {"name"}

    name: str | None = Field(default=None, min_length=1)  # pyright: ignore[reportIncompatibleVariableOverride]


class EmployeeRecord(RecordModel):
    NOT_NULL: ClassVar[frozenset[str]] = frozenset({"status"})

    onec_id: str = Field(min_length=1, validation_alias=ONEC_ID_ALIASES)
    employee_code: str = Field(min_length=1, validation_alias=EMPLOYEE_CODE_ALIASES)
    branch_code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    role: EmployeeRole
    phone: str | None = None
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    hire_date: date | None = None
    salary: float | None = Field(default=None, gt=0)
    status: EmployeeStatus | None = None


class EmployeePatch(RecordModel):
    NOT_NULL: ClassVar[frozenset[str]] = frozenset({"branch_code", "name", "role", "status"})

    onec_id: str | None = Field(default=None, validation_alias=ONEC_ID_ALIASES)
    employee_code: str | None = Field(default=None, validation_alias=EMPLOYEE_CODE_ALIASES)
    branch_code: str | None = Field(default=None, min_length=1)
    name: str | None = Field(default=None, min_length=1)
    role: EmployeeRole | None = None
    phone: str | None = None
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    hire_date: date | None = None
    salary: float | None = Field(default=None, gt=0)
    status: EmployeeStatus | None = None


class CategoryRecord(RecordModel):
    NOT_NULL: ClassVar[frozenset[str]] = frozenset({"sort_order", "is_active"})

    key: str = Field(min_length=1)
    name: str = Field(min_length=1)
    onec_id: str | None = Field(default=None, validation_alias=ONEC_ID_ALIASES)
    description: str | None = None
    parent_key: str | None = None
    sort_order: int | None = None
    is_active: bool | None = None


class CategoryPatch(CategoryRecord):
    NOT_NULL: ClassVar[frozenset[str]] = CategoryRecord.NOT_NULL | {"key", "name"}

    key: str | None = Field(default=None, min_length=1)  # pyright: ignore[reportIncompatibleVariableOverride]
    name: str | None = Field(default=None, min_length=1)  # pyright: ignore[reportIncompatibleVariableOverride]


class ProductRecord(RecordModel):
    NOT_NULL: ClassVar[frozenset[str]] = frozenset({"unit_of_measure", "tax_rate", "is_active"})

    onec_id: str = Field(min_length=1, validation_alias=ONEC_ID_ALIASES)
    sku: str = Field(min_length=1)
    barcode: str | None = None
    name: str = Field(min_length=1)
    description: str | None = None
    category_key: str | None = None
    brand: str | None = None
    unit_of_measure: str | None = Field(default=None, min_length=1)
    base_price: float = Field(gt=0)
    cost: float = Field(gt=0)
    tax_rate: float | None = Field(default=None, ge=0, le=1)
    image_url: str | None = None
    is_active: bool | None = None


class ProductPatch(RecordModel):
    NOT_NULL: ClassVar[frozenset[str]] = ProductRecord.NOT_NULL | {"name", "base_price", "cost"}

    onec_id: str | None = Field(default=None, validation_alias=ONEC_ID_ALIASES)
    sku: str | None = None
    barcode: str | None = None
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    category_key: str | None = None
    brand: str | None = None
    unit_of_measure: str | None = Field(default=None, min_length=1)
    base_price: float | None = Field(default=None, gt=0)
    cost: float | None = Field(default=None, gt=0)
    tax_rate: float | None = Field(default=None, ge=0, le=1)
    image_url: str | None = None
    is_active: bool | None = None


class InventoryRecord(RecordModel):
    barcode: str | None = None
    onec_id: str | None = Field(default=None, validation_alias=ONEC_ID_ALIASES)
    sku: str | None = None
    branch_code: str = Field(min_length=1)
    quantity_in_stock: float = Field(ge=0)
    min_stock_level: float | None = Field(default=None, ge=0)
    max_stock_level: float | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_stock_bounds(self) -> Self:
        low, high = self.min_stock_level, self.max_stock_level
        if low is not None and high is not None and low > high:
            raise ValueError("min_stock_level must not exceed max_stock_level")
        return self


class PriceRecord(RecordModel):
    NOT_NULL: ClassVar[frozenset[str]] = frozenset({"cost"})

    barcode: str | None = None
    onec_id: str | None = Field(default=None, validation_alias=ONEC_ID_ALIASES)
    sku: str | None = None
    base_price: float = Field(gt=0)
    cost: float | None = Field(default=None, gt=0)
    branch_codes: list[str] | None = None
    effective_date: datetime | None = None


def parse_record[TRecord: RecordModel](schema: type[TRecord], raw: object) -> TRecord:
    """Validate one raw record, translating pydantic errors into ``RecordValidationError``."""

    if not isinstance(raw, Mapping):
        raise RecordValidationError("record must be a JSON object")
    try:
        return schema.model_validate(raw)
    except ValidationError as exc:
        raise RecordValidationError(format_validation_error(exc)) from exc


def format_validation_error(exc: ValidationError) -> str:
    messages: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        missing = error["type"] in {"missing", "string_too_short"}
        if location and (missing or error.get("input", ...) is None):
            messages.append(f"{location} is required")
            continue
        message = error["msg"].removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(dict.fromkeys(messages))


def echo_identifiers(raw: object, keys: tuple[str, ...]) -> dict[str, object]:
    """Copy the identifying keys of a raw record for the result ledger."""

    if not isinstance(raw, Mapping):
        return {}
    echoed: dict[str, object] = {}
    for raw_key, value in cast(Mapping[str, object], raw).items():
        key = RAW_KEY_ALIASES.get(raw_key, raw_key)
        if key in keys and key not in echoed:
            echoed[key] = value
    return echoed

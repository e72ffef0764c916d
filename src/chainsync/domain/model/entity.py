"""Base building block: durable internal identity and audit timestamps."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, ClassVar
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from chainsync.domain.model.enums import EntityType


def new_id() -> UUID:
    return uuid4()


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain and is never reused."""

    id: UUID = field(default_factory=new_id)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # class-level discriminator; reconcilable subclasses override
    ENTITY_TYPE: ClassVar[EntityType | None] = None

    def touch(self, now: datetime | None = None) -> None:
        moment = now or utcnow()
        if self.created_at is None:
            self.created_at = moment
        self.updated_at = moment

"""Upsert execution: create-or-update one entity with field-level coalesce."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from chainsync.domain.model import LedgerAction

from .contracts import AppliedRecord, is_blank
from .errors import EntityNotFoundError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from chainsync.domain.model import Entity
    from chainsync.domain.ports import ReconciliationRepositories

    from .profiles import EntityProfile


def apply_record[TEntity: Entity](
    existing: TEntity | None,
    bound: Mapping[str, Any],
    profile: EntityProfile[TEntity],
    repositories: ReconciliationRepositories,
    *,
    now: datetime | None = None,
) -> AppliedRecord:
    """Create a new entity or coalesce ``bound`` onto ``existing``."""

    attributes = {name: value for name, value in bound.items() if name in profile.attribute_names}
    if existing is None:
        if not profile.allow_create:
            raise EntityNotFoundError(f"{profile.label} not found")
        entity = profile.create(attributes)
        entity.touch(now)
        profile.repository(repositories).add(entity)
        action = LedgerAction.CREATED
    else:
        entity = existing
        coalesce(entity, attributes, identifier_columns=profile.identifier_columns)
        entity.touch(now)
        action = LedgerAction.UPDATED

    profile.after_apply(entity, bound, repositories)
    return AppliedRecord(entity=entity, action=action)


def coalesce(
    entity: Entity,
    attributes: Mapping[str, Any],
    *,
    identifier_columns: frozenset[str] = frozenset(),
) -> list[str]:
    """Overwrite the attributes that are present; return the names that changed.

    Absent attributes are never touched. Identifier columns are only replaced
    by non-blank values so a partial record cannot erase a stored identifier.
    """

    changed: list[str] = []
    for name, value in attributes.items():
        if name in identifier_columns and is_blank(value):
            continue
        if getattr(entity, name) != value:
            setattr(entity, name, value)
            changed.append(name)
    return changed

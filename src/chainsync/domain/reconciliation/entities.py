"""Single-entity read, update and deactivate operations.

The path identifier may be the internal id or any alternate identifier of the
entity type; it is resolved with the same precedence as batch records.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from .apply import coalesce
from .distribute import distribute
from .errors import RecordValidationError
from .profiles import profile_for
from .resolve import resolve_identifier_value

if TYPE_CHECKING:
    from chainsync.domain.model import Entity, EntityType
    from chainsync.domain.ports import (
        BranchPusher,
        ReconciliationRepositories,
        ReconciliationUnitOfWork,
    )

    from .contracts import DistributionReport
    from .profiles import EntityProfile

log = getLogger(__name__)

type UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]


@dataclass(frozen=True, slots=True)
class EntityChange:
    entity: Mapping[str, object]
    changed: tuple[str, ...] = ()
    distribution: tuple[DistributionReport, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, object]:
        return {
            "entity": dict(self.entity),
            "changed": list(self.changed),
            "distribution": [report.to_dict() for report in self.distribution],
        }


def _addressable(entity_type: EntityType | str) -> EntityProfile[Any]:
    profile = profile_for(entity_type)
    if profile.patch_schema is None:
        raise RecordValidationError(f"{profile.entity_type} cannot be addressed individually")
    return profile


def _lookup(
    profile: EntityProfile[Any], identifier: str, repositories: ReconciliationRepositories
) -> Entity:
    repository = profile.repository(repositories)
    return resolve_identifier_value(
        identifier.strip(),
        profile.lookup_identifiers,
        profile.finder(repositories),
        repository.get,
    )


def get_entity(
    entity_type: EntityType | str,
    identifier: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> dict[str, object]:
    profile = _addressable(entity_type)
    with unit_of_work_factory() as uow:
        entity = _lookup(profile, identifier, uow.repositories)
        return profile.describe(entity, uow.repositories)


def update_entity(
    entity_type: EntityType | str,
    identifier: str,
    raw: object,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    pusher: BranchPusher | None = None,
) -> EntityChange:
    """Apply a partial update; absent fields keep their stored values."""

    profile = _addressable(entity_type)
    fields = profile.parse(raw, partial=True)
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        entity = _lookup(profile, identifier, repositories)
        with uow.record_scope():
            bound = profile.bind(fields, repositories)
            attributes = {
                name: value for name, value in bound.items() if name in profile.attribute_names
            }
            changed = coalesce(entity, attributes, identifier_columns=profile.identifier_columns)
            if changed:
                entity.touch()
            profile.after_apply(entity, bound, repositories)
            plan = profile.plan_delivery(entity, bound, repositories)
            description = profile.describe(entity, repositories)
        uow.commit()

    log.info("Updated %s %s: %s", profile.label, identifier, ", ".join(changed) or "no changes")
    return EntityChange(
        entity=description, changed=tuple(changed), distribution=distribute(plan, pusher)
    )


def deactivate_entity(
    entity_type: EntityType | str,
    identifier: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> EntityChange:
    profile = _addressable(entity_type)
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        entity = _lookup(profile, identifier, repositories)
        profile.deactivate(entity)
        entity.touch()
        description = profile.describe(entity, repositories)
        uow.commit()
    log.info("Deactivated %s %s", profile.label, identifier)
    return EntityChange(entity=description)

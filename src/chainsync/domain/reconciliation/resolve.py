"""Identifier resolution.

Responsibilities of this stage:
- walk an entity type's alternate identifiers in their fixed precedence
- run one equality lookup per present identifier and stop at the first hit
- surface duplicate matches as ``ResolutionConflictError``

Out of scope for this stage:
- domain mutation
- flush/commit
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import UUID

from .errors import EntityNotFoundError, RecordValidationError, ResolutionConflictError

if TYPE_CHECKING:
    from chainsync.domain.model import Entity

    from .contracts import IdentifierField, IdentifierSet

log = getLogger(__name__)

type FindByIdentifier = Callable[[IdentifierField, tuple[object, ...]], Sequence[Entity]]


def resolve[TEntity: Entity](
    candidates: Mapping[str, object],
    identifiers: IdentifierSet,
    find: Callable[[IdentifierField, tuple[object, ...]], Sequence[TEntity]],
) -> TEntity | None:
    """Return the single entity matched by the highest-precedence present identifier.

    ``None`` means no identifier matched and the caller should create.
    """

    present = False
    for identifier in identifiers.fields:
        key = identifier.value_from(candidates)
        if key is None:
            continue
        present = True
        matches = find(identifier, key)
        if len(matches) > 1:
            raise ResolutionConflictError(
                f"{identifiers.label} {identifier.name}={_format_key(key)} "
                f"matches {len(matches)} records",
                field=identifier.name,
                matches=len(matches),
            )
        if matches:
            log.debug(
                "Resolved %s via %s=%s", identifiers.label, identifier.name, _format_key(key)
            )
            return matches[0]

    if not present:
        accepted = ", ".join(identifiers.names)
        raise RecordValidationError(f"one of {accepted} is required")
    return None


def resolve_reference[TEntity: Entity](
    candidates: Mapping[str, object],
    identifiers: IdentifierSet,
    find: Callable[[IdentifierField, tuple[object, ...]], Sequence[TEntity]],
) -> TEntity:
    """Like :func:`resolve` but a missing entity is an error."""

    entity = resolve(candidates, identifiers, find)
    if entity is None:
        raise EntityNotFoundError(f"{identifiers.label} not found")
    return entity


def resolve_identifier_value[TEntity: Entity](
    value: str,
    identifiers: IdentifierSet,
    find: Callable[[IdentifierField, tuple[object, ...]], Sequence[TEntity]],
    get_by_id: Callable[[UUID], TEntity | None],
) -> TEntity:
    """Resolve a bare path value against the internal id and every single-column identifier.

    The internal id is tried first, then each identifier in precedence order,
    so a value is interpreted as the first kind of identifier it matches.
    """

    internal_id = _parse_uuid(value)
    if internal_id is not None:
        entity = get_by_id(internal_id)
        if entity is not None:
            return entity

    for identifier in identifiers.single_column_fields():
        matches = find(identifier, (value,))
        if len(matches) > 1:
            raise ResolutionConflictError(
                f"{identifiers.label} {identifier.name}={value} matches {len(matches)} records",
                field=identifier.name,
                matches=len(matches),
            )
        if matches:
            return matches[0]
    raise EntityNotFoundError(f"{identifiers.label} {value!r} not found")


def _parse_uuid(value: str) -> UUID | None:
    try:
        return UUID(value)
    except ValueError:
        return None


def _format_key(key: tuple[object, ...]) -> str:
    if len(key) == 1:
        return str(key[0])
    return "/".join(str(part) for part in key)

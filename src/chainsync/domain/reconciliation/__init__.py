"""Reconciliation engine for ERP batches.

Layered flow per batch:
1) validate each record against its entity type's schema
2) bind references (branch codes, product identifiers)
3) resolve the record to zero or one stored entity by identifier precedence
4) create or coalesce-update the entity inside a per-record nested scope
5) record provenance and push confirmed state to branch servers
"""

from __future__ import annotations

from .apply import apply_record, coalesce
from .contracts import (
    AppliedRecord,
    BatchOutcome,
    BranchRoute,
    BranchTarget,
    DeliveryPlan,
    DistributionReport,
    IdentifierField,
    IdentifierSet,
    LedgerEntry,
    SyncLogSnapshot,
)
from .distribute import distribute
from .entities import EntityChange, deactivate_entity, get_entity, update_entity
from .errors import (
    BatchAbortedError,
    DistributionError,
    EntityNotFoundError,
    PersistenceConflictError,
    ProvenanceError,
    ReconciliationError,
    RecordValidationError,
    ResolutionConflictError,
)
from .orchestrator import run_batch
from .profiles import PROFILES, EntityProfile, profile_for
from .provenance import (
    SyncLogFilter,
    SyncLogRecorder,
    SyncSummary,
    cleanup_sync_logs,
    get_sync_log,
    list_sync_logs,
    summarize_sync_logs,
)
from .resolve import resolve, resolve_identifier_value, resolve_reference

__all__ = [
    "PROFILES",
    "AppliedRecord",
    "BatchAbortedError",
    "BatchOutcome",
    "BranchRoute",
    "BranchTarget",
    "DeliveryPlan",
    "DistributionError",
    "DistributionReport",
    "EntityChange",
    "EntityNotFoundError",
    "EntityProfile",
    "IdentifierField",
    "IdentifierSet",
    "LedgerEntry",
    "PersistenceConflictError",
    "ProvenanceError",
    "ReconciliationError",
    "RecordValidationError",
    "ResolutionConflictError",
    "SyncLogFilter",
    "SyncLogRecorder",
    "SyncLogSnapshot",
    "SyncSummary",
    "apply_record",
    "cleanup_sync_logs",
    "coalesce",
    "deactivate_entity",
    "distribute",
    "get_entity",
    "get_sync_log",
    "list_sync_logs",
    "profile_for",
    "resolve",
    "resolve_identifier_value",
    "resolve_reference",
    "run_batch",
    "summarize_sync_logs",
    "update_entity",
]

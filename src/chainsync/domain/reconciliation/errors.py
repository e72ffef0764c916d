"""Error taxonomy of the reconciliation engine.

Every error carries a machine-readable ``code`` that the HTTP surface and the
result ledger expose to ERP operators.
"""

from __future__ import annotations


class ReconciliationError(RuntimeError):
    """Base class for failures raised while reconciling ERP records."""

    code: str = "reconciliation_error"


class RecordValidationError(ReconciliationError):
    """Malformed record or request, rejected before resolution."""

    code = "validation_error"


class ResolutionConflictError(ReconciliationError):
    """More than one stored entity matches a single identifier value."""

    code = "resolution_conflict"

    def __init__(self, message: str, *, field: str, matches: int) -> None:
        super().__init__(message)
        self.field = field
        self.matches = matches


class EntityNotFoundError(ReconciliationError):
    """No stored entity matches an identifier on a lookup or update-only path."""

    code = "not_found"


class PersistenceConflictError(ReconciliationError):
    """Uniqueness violation detected by the database at write time."""

    code = "persistence_conflict"


class DistributionError(ReconciliationError):
    """A branch endpoint was unreachable, rejected the push, or timed out."""

    code = "distribution_failed"

    def __init__(self, message: str, *, branch_code: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.branch_code = branch_code
        self.status_code = status_code


class ProvenanceError(ReconciliationError):
    """The sync log entry could not be opened or closed as required."""

    code = "provenance_error"


class BatchAbortedError(ReconciliationError):
    """The batch could not finish; provenance is marked failed."""

    code = "batch_aborted"

    def __init__(self, message: str, *, sync_id: object | None = None) -> None:
        super().__init__(message)
        self.sync_id = sync_id

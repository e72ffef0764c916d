"""FastAPI server for the ERP integration surface.

Main entry point for the HTTP API; the CLI ``serve`` command runs it with
uvicorn.
"""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chainsync import __version__
from chainsync.api.routes import batches, entities, sync_logs
from chainsync.config import get_sync_config
from chainsync.domain.ports.unit_of_work import ReconciliationUnitOfWork
from chainsync.domain.reconciliation import ReconciliationError

if TYPE_CHECKING:
    from chainsync.config import SyncConfig
    from chainsync.domain.ports import BranchPusher

UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]

API_PREFIX = "/api/erp"

STATUS_BY_CODE: dict[str, int] = {
    "validation_error": 400,
    "not_found": 404,
    "resolution_conflict": 409,
    "persistence_conflict": 409,
    "distribution_failed": 502,
    "provenance_error": 500,
    "batch_aborted": 500,
}

log = getLogger(__name__)


def error_body(message: str, code: str) -> dict[str, object]:
    return {"success": False, "error": message, "code": code}


async def _reconciliation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    _ = request
    code = getattr(exc, "code", "internal_error")
    status = STATUS_BY_CODE.get(code, 500)
    if status >= 500:
        log.error("Request failed with %s: %s", code, exc)
    return JSONResponse(status_code=status, content=error_body(str(exc), code))


async def _request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    _ = request
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    messages = [
        f"{'.'.join(str(part) for part in error['loc'][1:])}: {error['msg']}" for error in errors
    ]
    return JSONResponse(
        status_code=400,
        content=error_body("; ".join(messages) or "invalid request", "validation_error"),
    )


def create_app(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    pusher: BranchPusher | None = None,
    sync_config: SyncConfig | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Without an injected ``unit_of_work_factory`` the SQLAlchemy adapter is
    started lazily on the first request, and pushes go over HTTP.
    """

    app = FastAPI(
        title="chainsync ERP API",
        description="Reconciles ERP batches into the central store and pushes them to branches",
        version=__version__,
    )
    app.state.unit_of_work_factory = unit_of_work_factory
    app.state.pusher = pusher
    app.state.sync_config = sync_config or get_sync_config()

    app.add_exception_handler(ReconciliationError, _reconciliation_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

    # sync-logs first so its fixed paths win over /{entity_type}/{identifier}
    app.include_router(sync_logs.router, prefix=f"{API_PREFIX}/sync-logs", tags=["Sync logs"])
    app.include_router(batches.router, prefix=API_PREFIX, tags=["Batches"])
    app.include_router(entities.router, prefix=API_PREFIX, tags=["Entities"])

    return app

"""Request-scoped access to the collaborators configured on the app."""

from __future__ import annotations

from fastapi import Request

from chainsync import app as application
from chainsync.app import UnitOfWorkFactory
from chainsync.config import SyncConfig
from chainsync.domain.ports import BranchPusher


def unit_of_work_factory(request: Request) -> UnitOfWorkFactory:
    configured: UnitOfWorkFactory | None = request.app.state.unit_of_work_factory
    return application.resolve_unit_of_work_factory(configured)


def branch_pusher(request: Request) -> BranchPusher:
    return application.resolve_pusher(request.app.state.pusher)


def sync_config(request: Request) -> SyncConfig:
    return request.app.state.sync_config

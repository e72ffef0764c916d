"""Sync log retention and monitoring defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .env import float_from_env, int_from_env

DEFAULT_RETENTION_DAYS = 90
DEFAULT_STALE_HOURS = 2.0
DEFAULT_SUMMARY_DAYS = 30


@dataclass(frozen=True, slots=True)
class SyncConfig:
    retention_days: int = DEFAULT_RETENTION_DAYS
    stale_after_hours: float = DEFAULT_STALE_HOURS
    summary_days: int = DEFAULT_SUMMARY_DAYS


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        retention_days=int_from_env("SYNC_LOG_RETENTION_DAYS", DEFAULT_RETENTION_DAYS, minimum=1),
        stale_after_hours=float_from_env("SYNC_LOG_STALE_HOURS", DEFAULT_STALE_HOURS, minimum=0),
        summary_days=int_from_env("SYNC_SUMMARY_DAYS", DEFAULT_SUMMARY_DAYS, minimum=1),
    )

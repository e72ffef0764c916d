"""HTTP API server settings."""

from __future__ import annotations

from dataclasses import dataclass

from .env import int_from_env, str_from_env

DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 8000


@dataclass(frozen=True, slots=True)
class ApiConfig:
    host: str = DEFAULT_API_HOST
    port: int = DEFAULT_API_PORT


def get_api_config() -> ApiConfig:
    return ApiConfig(
        host=str_from_env("CHAINSYNC_API_HOST", DEFAULT_API_HOST),
        port=int_from_env("CHAINSYNC_API_PORT", DEFAULT_API_PORT, minimum=1),
    )

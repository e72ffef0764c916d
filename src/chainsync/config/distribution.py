"""Branch distribution settings."""

from __future__ import annotations

from dataclasses import dataclass

from .env import float_from_env, str_from_env
from .http_resilience import DEFAULT_TIMEOUT_SECONDS

DEFAULT_PATH_PREFIX = "/api/chain-core"


@dataclass(frozen=True, slots=True)
class DistributionConfig:
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    path_prefix: str = DEFAULT_PATH_PREFIX


def get_distribution_config() -> DistributionConfig:
    return DistributionConfig(
        timeout_seconds=float_from_env(
            "BRANCH_PUSH_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS, minimum=0.1
        ),
        path_prefix=str_from_env("BRANCH_PUSH_PATH_PREFIX", DEFAULT_PATH_PREFIX),
    )

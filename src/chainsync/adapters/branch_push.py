"""HTTP delivery of entity payloads to branch servers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from chainsync.adapters.http_resilience import ResilienceConfig, ResilientClient
from chainsync.config import DistributionConfig, get_distribution_config
from chainsync.domain.ports import BranchPusher
from chainsync.domain.reconciliation.errors import DistributionError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from chainsync.domain.reconciliation.contracts import BranchRoute, BranchTarget

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def push_url(target: BranchTarget, route: BranchRoute, path_prefix: str) -> str:
    base = target.base_url.rstrip("/")
    prefix = "/" + path_prefix.strip("/") if path_prefix.strip("/") else ""
    return f"{base}{prefix}/{route.sub_path.strip('/')}"


@dataclass(slots=True)
class HttpBranchPusher:
    """Posts ``{envelope_key: [payload]}`` to one branch per call.

    Each push is attempted once. Non-2xx responses, timeouts and transport
    errors surface as :class:`DistributionError`.
    """

    config: DistributionConfig = field(default_factory=get_distribution_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def push(
        self, target: BranchTarget, route: BranchRoute, payload: Mapping[str, object]
    ) -> None:
        asyncio.run(self._push_async(target, route, payload))

    def resilience_for(self, target: BranchTarget) -> ResilienceConfig:
        headers = {"Accept": "application/json"}
        if target.api_key:
            headers["Authorization"] = f"Bearer {target.api_key}"
        return ResilienceConfig(
            name=f"branch:{target.code}",
            timeout_seconds=self.config.timeout_seconds,
            default_headers=headers,
        )

    async def _push_async(
        self, target: BranchTarget, route: BranchRoute, payload: Mapping[str, object]
    ) -> None:
        resilience = self.resilience_for(target)
        url = push_url(target, route, self.config.path_prefix)
        body = {route.envelope_key: [dict(payload)]}

        async with self.client_factory(resilience) as client:
            try:
                response = await client.post(
                    url, json=body, headers=dict(resilience.default_headers or {})
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                raise DistributionError(
                    f"branch {target.code} responded with HTTP {status}",
                    branch_code=target.code,
                    status_code=status,
                ) from exc
            except httpx.TimeoutException as exc:
                raise DistributionError(
                    f"branch {target.code} timed out after {self.config.timeout_seconds}s",
                    branch_code=target.code,
                ) from exc
            except httpx.HTTPError as exc:
                raise DistributionError(
                    f"branch {target.code} unreachable: {exc}", branch_code=target.code
                ) from exc
            except httpx.InvalidURL as exc:
                raise DistributionError(
                    f"branch {target.code} has an invalid endpoint: {exc}",
                    branch_code=target.code,
                ) from exc

        log.debug("Pushed %s to branch %s (%s)", route.sub_path, target.code, url)


if TYPE_CHECKING:
    _pusher_check: BranchPusher = HttpBranchPusher()

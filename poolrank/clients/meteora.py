"""Meteora DLMM API client — free, no-auth pool listing.

Endpoints (all return pool records, but the envelope and per-record field
names differ between deployments):
- /pair/all: bare list of pairs
- /pair/all_with_pagination: ``{"pairs": [...], "total": n}``
- /pairs: ``{"data": [...]}`` on newer deployments

The client only fetches and decodes. Locating records inside the envelope
and normalizing them is the fetcher's job.
"""

from __future__ import annotations

from typing import Any

import httpx

from poolrank.clients.base import BaseClient


class MeteoraClient:
    """Plain GET + JSON decode against any DLMM listing URL."""

    def __init__(
        self,
        timeout: float = 12.0,
        max_retries: int = 0,
        backoff_base: float = 1.0,
        user_agent: str = "poolrank/0.1",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = BaseClient(
            headers={
                "Accept": "application/json",
                "User-Agent": user_agent,
            },
            timeout=timeout,
            max_retries=max_retries,
            backoff_base=backoff_base,
            provider_name="meteora",
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        http_config: dict[str, Any],
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> MeteoraClient:
        return cls(
            timeout=float(http_config.get("timeout_seconds", 12.0)),
            max_retries=int(http_config.get("max_retries", 0)),
            backoff_base=float(http_config.get("backoff_base", 1.0)),
            user_agent=str(http_config.get("user_agent", "poolrank/0.1")),
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.close()

    async def fetch_payload(self, url: str) -> Any:
        """GET ``url`` → decoded JSON (any shape). Raises APIError/PayloadError."""
        return await self._client.get_json(url)

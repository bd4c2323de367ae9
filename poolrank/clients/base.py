"""Base HTTP client for the poolrank acquisition layer.

Provides:
- Timeout handling
- Optional retry with exponential backoff (off by default; endpoint
  failover is the primary recovery path)
- Structured errors: every failure surfaces as ``APIError`` so callers
  branch on one type

All API clients build on this base.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx


class APIError(Exception):
    """Structured API error (transport failure or non-2xx status)."""

    def __init__(self, message: str, status_code: int = 0, provider: str = "", retryable: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.provider = provider
        self.retryable = retryable


class PayloadError(APIError):
    """Response arrived but the body is not decodable JSON."""


class BaseClient:
    """Async JSON-over-HTTP client with retry and typed errors.

    Usage:
        client = BaseClient(
            headers={"Accept": "application/json"},
            timeout=10.0,
            provider_name="meteora",
        )
        data = await client.get_json("https://api.example.com/pairs")
    """

    def __init__(
        self,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        timeout: float = 10.0,
        max_retries: int = 0,
        backoff_base: float = 1.0,
        backoff_max: float = 30.0,
        backoff_multiplier: float = 2.0,
        provider_name: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.provider_name = provider_name
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.backoff_multiplier = backoff_multiplier
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers or {},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> BaseClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``url`` and decode the JSON body."""
        return await self._request("GET", url, params=params)

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Execute request with retry and backoff."""
        last_error: APIError | None = None
        delay = self.backoff_base

        for attempt in range(self.max_retries + 1):
            try:
                response = await self._client.request(method, url, params=params)

                if response.status_code == 429:
                    raise APIError(
                        f"Rate limited by {self.provider_name}",
                        status_code=429,
                        provider=self.provider_name,
                        retryable=True,
                    )

                if response.status_code >= 500:
                    raise APIError(
                        f"Server error from {self.provider_name}: {response.status_code}",
                        status_code=response.status_code,
                        provider=self.provider_name,
                        retryable=True,
                    )

                if response.status_code >= 400:
                    raise APIError(
                        f"Client error from {self.provider_name}: {response.status_code} - {response.text[:200]}",
                        status_code=response.status_code,
                        provider=self.provider_name,
                        retryable=False,
                    )

                try:
                    return response.json()
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    raise PayloadError(
                        f"Malformed JSON from {self.provider_name}: {e}",
                        status_code=response.status_code,
                        provider=self.provider_name,
                        retryable=False,
                    ) from e

            except httpx.DecodingError as e:
                # Content-Encoding body that doesn't decompress
                raise PayloadError(
                    f"Undecodable response body from {self.provider_name}: {e!r}",
                    provider=self.provider_name,
                    retryable=False,
                ) from e
            except httpx.TransportError as e:
                last_error = APIError(
                    f"Connection error to {self.provider_name}: {e!r}",
                    provider=self.provider_name,
                    retryable=True,
                )
            except httpx.RequestError as e:
                # TooManyRedirects and other non-transport request failures
                raise APIError(
                    f"Request to {self.provider_name} failed: {e!r}",
                    provider=self.provider_name,
                    retryable=False,
                ) from e
            except APIError as e:
                last_error = e
                if not e.retryable:
                    raise

            if attempt < self.max_retries:
                await asyncio.sleep(min(delay, self.backoff_max))
                delay *= self.backoff_multiplier

        raise last_error or APIError(f"Request failed after {self.max_retries} retries")

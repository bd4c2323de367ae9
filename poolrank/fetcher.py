"""Fetch orchestrator — multi-endpoint failover with a bundled fallback.

Flow per endpoint (strictly sequential, priority order):
1. GET the endpoint (transport error / non-2xx → SoftFail "transport")
2. Decode body + JSON (bad encoding or malformed JSON → SoftFail "parse")
3. Locate the record array (none → SoftFail "shape")
4. Normalize every record, dropping unidentifiable ones (none left, or a
   record that breaks the normalizer → "shape")
5. Admission filter (none left → "shape")
6. Ok → return immediately; later endpoints are never contacted

If every endpoint soft-fails the bundled dataset goes through steps 4-5 and
is returned instead. Callers never see an exception for upstream trouble;
soft failures are reported through the log sink and kept on the report.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Sequence, Union

from poolrank.clients.base import APIError, PayloadError
from poolrank.clients.meteora import MeteoraClient
from poolrank.config import load_ranker_config
from poolrank.fallback import fallback_records
from poolrank.locate import locate_records
from poolrank.logsink import LoggerSink, LogSink
from poolrank.models import NormalizedPool
from poolrank.normalize import admit, normalize_many


class FailureKind(str, Enum):
    TRANSPORT = "transport"
    PARSE = "parse"
    SHAPE = "shape"


@dataclass(frozen=True)
class Ok:
    endpoint: str
    pools: list[NormalizedPool]


@dataclass(frozen=True)
class SoftFail:
    endpoint: str
    kind: FailureKind
    reason: str


EndpointResult = Union[Ok, SoftFail]


@dataclass
class FetchReport:
    """What a fetch produced and how it got there."""

    pools: list[NormalizedPool]
    source: str                      # "live" or "fallback"
    endpoint: str | None = None      # endpoint that produced ``pools`` (live only)
    failures: list[SoftFail] = field(default_factory=list)

    @property
    def used_fallback(self) -> bool:
        return self.source == "fallback"


def _normalize_kwargs(config: dict[str, Any], now: datetime | None, rng: random.Random | None) -> dict[str, Any]:
    return {
        "now": now,
        "rng": rng,
        "major_tokens": config.get("major_tokens", ("SOL", "USDC", "USDT")),
        "recency": timedelta(days=float(config.get("recency_days", 7))),
        "bin_count": int(config.get("bins", {}).get("count", 20)),
    }


async def fetch_endpoint(
    client: MeteoraClient,
    endpoint: str,
    admission: dict[str, Any],
    normalize_kwargs: dict[str, Any],
) -> EndpointResult:
    """Run one endpoint through fetch → locate → normalize → admit."""
    try:
        payload = await client.fetch_payload(endpoint)
    except PayloadError as e:
        return SoftFail(endpoint, FailureKind.PARSE, str(e))
    except APIError as e:
        return SoftFail(endpoint, FailureKind.TRANSPORT, str(e))

    records = locate_records(payload)
    if not records:
        return SoftFail(endpoint, FailureKind.SHAPE, "no record collection in payload")

    try:
        pools = normalize_many(records, **normalize_kwargs)
    except (ValueError, TypeError, ArithmeticError) as e:
        return SoftFail(endpoint, FailureKind.SHAPE, f"normalization failed: {e!r}")
    if not pools:
        return SoftFail(endpoint, FailureKind.SHAPE, f"0 of {len(records)} records normalized")

    admitted = admit(pools, admission)
    if not admitted:
        return SoftFail(endpoint, FailureKind.SHAPE, f"0 of {len(pools)} pools passed admission")

    return Ok(endpoint, admitted)


def load_fallback(
    admission: dict[str, Any],
    normalize_kwargs: dict[str, Any],
) -> list[NormalizedPool]:
    """Normalized, admitted bundled dataset."""
    now = normalize_kwargs.get("now")
    return admit(normalize_many(fallback_records(now), **normalize_kwargs), admission)


async def fetch_pools_report(
    endpoints: Sequence[str] | None = None,
    *,
    config: dict[str, Any] | None = None,
    client: MeteoraClient | None = None,
    sink: LogSink | None = None,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> FetchReport:
    """Try each endpoint in order; fall back to the bundled dataset."""
    config = config if config is not None else load_ranker_config()
    endpoints = list(endpoints if endpoints is not None else config.get("endpoints", []))
    if sink is None:
        sink = LoggerSink("poolrank.fetcher")
    admission = config.get("admission", {})
    normalize_kwargs = _normalize_kwargs(config, now, rng)

    owns_client = client is None
    if client is None:
        client = MeteoraClient.from_config(config.get("http", {}))

    failures: list[SoftFail] = []
    try:
        for endpoint in endpoints:
            sink.emit("info", "Fetching pools", endpoint=endpoint)
            result = await fetch_endpoint(client, endpoint, admission, normalize_kwargs)

            if isinstance(result, SoftFail):
                failures.append(result)
                sink.emit("warning", "Endpoint soft-failed", endpoint=endpoint,
                          kind=result.kind.value, reason=result.reason)
                continue

            sink.emit("info", "Endpoint accepted", endpoint=endpoint, pools=len(result.pools))
            return FetchReport(pools=result.pools, source="live", endpoint=endpoint, failures=failures)
    finally:
        if owns_client:
            await client.close()

    pools = load_fallback(admission, normalize_kwargs)
    sink.emit("error", "All endpoints failed, using bundled fallback dataset",
              failures=len(failures), pools=len(pools))
    return FetchReport(pools=pools, source="fallback", failures=failures)


async def fetch_all(
    endpoints: Sequence[str] | None = None,
    **kwargs: Any,
) -> list[NormalizedPool]:
    """Normalized, admitted pools from the first healthy endpoint (or fallback)."""
    report = await fetch_pools_report(endpoints, **kwargs)
    return report.pools

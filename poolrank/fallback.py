"""Bundled pool records used when every live endpoint soft-fails.

A small set of representative pools in the upstream raw shape, so they go
through the same normalizer and admission filter as live data. Every entry
clears the admission filter. ``created_at`` is relative to call time so the
"New" category stays populated.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

FALLBACK_ADDRESSES: tuple[str, ...] = (
    "8HuU7VxckbncPmjJWszg7SiZnnJ3CZvJ5EEcweavRG7e",
    "93DYAVvaLBznwnUZq8jT3uNchxpzs9fsyv9RPrfJ5YLT",
    "6w9RR8BEWMRo2seD1J2x8Y5YeKMi4g5bdnNGNfo5PsK2",
    "5rCf1DM8LjKTw4YqhnoLcngyZYeNnQqztScTogYHAS6",
)


def fallback_records(now: datetime | None = None) -> list[dict[str, Any]]:
    """Fresh copies of the bundled raw records."""
    now = now or datetime.now(timezone.utc)

    def days_ago(days: int) -> str:
        return (now - timedelta(days=days)).isoformat()

    return [
        {
            "address": FALLBACK_ADDRESSES[0],
            "name": "SOL / USDC",
            "token_x_symbol": "SOL",
            "token_y_symbol": "USDC",
            "liquidity": 3_250_000,
            "volume_24h": 410_000,
            "volume_7d": 2_150_000,
            "fee_apr_24h": 38.0,
            "bin_step": 10,
            "current_bin_id": 120,
            "created_at": days_ago(3),
        },
        {
            "address": FALLBACK_ADDRESSES[1],
            "name": "JUP / USDC",
            "token_x_symbol": "JUP",
            "token_y_symbol": "USDC",
            "liquidity": 1_850_000,
            "volume_24h": 230_000,
            "volume_7d": 1_020_000,
            "fee_apr_24h": 27.0,
            "bin_step": 15,
            "current_bin_id": 98,
            "created_at": days_ago(12),
        },
        {
            "address": FALLBACK_ADDRESSES[2],
            "name": "USDT / USDC Stable",
            "token_x_symbol": "USDT",
            "token_y_symbol": "USDC",
            "liquidity": 4_650_000,
            "volume_24h": 150_000,
            "volume_7d": 910_000,
            "fee_apr_24h": 12.0,
            "bin_step": 1,
            "current_bin_id": 64,
            "created_at": days_ago(40),
        },
        {
            "address": FALLBACK_ADDRESSES[3],
            "name": "JUP / BONK",
            "token_x_symbol": "JUP",
            "token_y_symbol": "BONK",
            "liquidity": 240_000,
            "volume_24h": 96_000,
            "volume_7d": 505_000,
            "fee_apr_24h": 85.0,
            "bin_step": 80,
            "current_bin_id": 12,
            "created_at": days_ago(90),
        },
    ]

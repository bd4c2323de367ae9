"""Record normalizer — raw upstream pool records to ``NormalizedPool``.

Mandatory fields: pool address and both token symbols. A record missing any
of them is dropped (``None``); a pool that can't be identified or labelled
is useless downstream. Every other field has its own candidate chain and a
default, so one bad field never sinks the record.

Candidate lists are ordered: nested paths that would otherwise be shadowed
by a same-named container (``liquidity.usd`` vs ``liquidity``) come first.
Supporting a new upstream variant means appending a candidate here.
"""

from __future__ import annotations

import math
import random
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from poolrank.bins import DEFAULT_BIN_COUNT, synthesize_bins
from poolrank.extract import (
    Accessor,
    first_present,
    pick_date,
    pick_number,
    pick_str,
    resolve,
    to_datetime,
    to_number,
)
from poolrank.models import NormalizedPool

ADDRESS_FIELDS: tuple[Accessor, ...] = (
    "address",
    "pair_address",
    "pairAddress",
    "pool_address",
    "poolAddress",
    "lb_pair",
    "pubkey",
    ("pool", "address"),
    "id",
)

TOKEN_X_SYMBOL_FIELDS: tuple[Accessor, ...] = (
    "token_x_symbol",
    "tokenXSymbol",
    "symbol_x",
    "base_symbol",
    ("token_x", "symbol"),
    ("tokenX", "symbol"),
    ("mint_x", "symbol"),
    ("baseToken", "symbol"),
    ("base_token", "symbol"),
    ("tokens", 0, "symbol"),
)

TOKEN_Y_SYMBOL_FIELDS: tuple[Accessor, ...] = (
    "token_y_symbol",
    "tokenYSymbol",
    "symbol_y",
    "quote_symbol",
    ("token_y", "symbol"),
    ("tokenY", "symbol"),
    ("mint_y", "symbol"),
    ("quoteToken", "symbol"),
    ("quote_token", "symbol"),
    ("tokens", 1, "symbol"),
)

NAME_FIELDS: tuple[Accessor, ...] = ("name", "pair_name", "pairName", ("pool", "name"))

TVL_FIELDS: tuple[Accessor, ...] = (
    ("liquidity", "usd"),
    "liquidity",
    "tvl",
    "tvl_usd",
    "tvlUsd",
    "liquidityUsd",
    "liquidity_usd",
    "total_liquidity",
    ("stats", "tvl"),
    ("stats", "liquidity"),
    ("metrics", "tvl"),
    ("metrics", "liquidity"),
)

VOLUME_24H_FIELDS: tuple[Accessor, ...] = (
    ("volume", "h24"),
    ("volume", "24h"),
    "volume_24h",
    "trade_volume_24h",
    "volume24h",
    "volume24H",
    "volume_usd_24h",
    ("stats", "volume_24h"),
    ("stats", "volume24h"),
    ("metrics", "volume_24h"),
    ("metrics", "volume24h"),
    ("volume", "hour_24"),
)

VOLUME_7D_FIELDS: tuple[Accessor, ...] = (
    ("volume", "d7"),
    ("volume", "7d"),
    "volume_7d",
    "trade_volume_7d",
    "volume7d",
    ("stats", "volume_7d"),
    ("metrics", "volume_7d"),
    ("metrics", "volume7d"),
)

# Upstream APR is a percentage (38.0 == 38%).
FEE_APR_FIELDS: tuple[Accessor, ...] = (
    "fee_apr_24h",
    "feeApr24h",
    "fee_apr",
    "feeApr",
    "apr",
    ("fees", "apr_24h"),
    ("stats", "fee_apr_24h"),
    ("stats", "apr"),
    ("metrics", "fee_apr"),
    ("metrics", "apr"),
)

BIN_STEP_FIELDS: tuple[Accessor, ...] = (
    "bin_step",
    "binStep",
    ("pool_config", "bin_step"),
    ("parameters", "bin_step"),
    ("config", "binStep"),
)

ACTIVE_BIN_FIELDS: tuple[Accessor, ...] = (
    "current_bin_id",
    "currentBinId",
    "active_bin_id",
    "activeBinId",
    "active_id",
    "activeId",
    ("active_bin", "bin_id"),
    ("activeBin", "binId"),
)

DISTRIBUTION_FIELDS: tuple[Accessor, ...] = (
    "liquidity_distribution",
    "liquidityDistribution",
    "bin_liquidity",
    "binLiquidity",
    ("distribution", "bins"),
    "distribution",
    "bins",
)

CREATED_AT_FIELDS: tuple[Accessor, ...] = (
    "created_at",
    "createdAt",
    "pair_created_at",
    "pairCreatedAt",
    "creation_time",
    ("stats", "created_at"),
)

_BIN_ID_FIELDS: tuple[Accessor, ...] = ("bin_id", "binId", "id")
_AMOUNT_X_FIELDS: tuple[Accessor, ...] = ("amount_x", "amountX", "x")
_AMOUNT_Y_FIELDS: tuple[Accessor, ...] = ("amount_y", "amountY", "y")
_BIN_TOTAL_FIELDS: tuple[Accessor, ...] = ("liquidity", "total", "amount")

DEFAULT_MAJOR_TOKENS = frozenset({"SOL", "USDC", "USDT"})
DEFAULT_RECENCY = timedelta(days=7)


def normalize_pool(
    raw: Any,
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
    major_tokens: Iterable[str] = DEFAULT_MAJOR_TOKENS,
    recency: timedelta = DEFAULT_RECENCY,
    bin_count: int = DEFAULT_BIN_COUNT,
) -> NormalizedPool | None:
    """Map one raw record to a ``NormalizedPool``, or None if unidentifiable."""
    if not isinstance(raw, Mapping):
        return None

    address = pick_str(raw, ADDRESS_FIELDS)
    symbol_x = pick_str(raw, TOKEN_X_SYMBOL_FIELDS)
    symbol_y = pick_str(raw, TOKEN_Y_SYMBOL_FIELDS)
    if not (address and symbol_x and symbol_y):
        return None

    pair_label = f"{symbol_x} / {symbol_y}"
    name = pick_str(raw, NAME_FIELDS) or pair_label
    majors = {t.upper() for t in major_tokens}

    tvl = max(0.0, pick_number(raw, TVL_FIELDS))
    fee_apr_pct = max(0.0, pick_number(raw, FEE_APR_FIELDS))
    bin_step = max(1, int(pick_number(raw, BIN_STEP_FIELDS, default=1)))

    created_at = pick_date(raw, CREATED_AT_FIELDS)
    now = now or datetime.now(timezone.utc)
    created = to_datetime(created_at)
    is_new = created is not None and now - created < recency

    distribution = _pick_distribution(raw)
    if distribution:
        bin_ids = [bin_id for bin_id, _ in distribution]
        bins = [amount for _, amount in distribution]
        active = first_present(raw, ACTIVE_BIN_FIELDS)
        active_id = to_number(active, default=math.nan) if active is not None else math.nan
        if active_id in bin_ids:
            current_index = bin_ids.index(active_id)
        else:
            current_index = len(bins) // 2
        has_real_bins = True
    else:
        current_index = bin_count // 2
        bins = synthesize_bins(bin_count, center=current_index, rng=rng)
        has_real_bins = False

    return NormalizedPool(
        id=address,
        pair_label=pair_label,
        name=name,
        is_stable="stable" in name.lower(),
        is_major=symbol_x.upper() in majors or symbol_y.upper() in majors,
        is_new=is_new,
        tvl=tvl,
        volume_24h=max(0.0, pick_number(raw, VOLUME_24H_FIELDS)),
        volume_7d=max(0.0, pick_number(raw, VOLUME_7D_FIELDS)),
        fee_apr_estimate=fee_apr_pct / 100,
        depth_score=math.log(tvl + 1),
        bin_step=bin_step,
        current_price_bin_index=current_index,
        bins=tuple(bins),
        has_real_bins=has_real_bins,
        created_at=created_at,
    )


def normalize_many(records: Iterable[Any], **kwargs: Any) -> list[NormalizedPool]:
    """Normalize a batch, dropping unrepresentable records. Order is kept."""
    pools = []
    for raw in records:
        pool = normalize_pool(raw, **kwargs)
        if pool is not None:
            pools.append(pool)
    return pools


def is_admissible(pool: NormalizedPool, admission: Mapping[str, Any] | None = None) -> bool:
    """Admission filter: tvl > min_tvl, volume_24h > min_volume_24h, bin_step >= min_bin_step."""
    admission = admission or {}
    return (
        pool.tvl > float(admission.get("min_tvl", 1000))
        and pool.volume_24h > float(admission.get("min_volume_24h", 100))
        and pool.bin_step >= int(admission.get("min_bin_step", 1))
    )


def admit(pools: Iterable[NormalizedPool], admission: Mapping[str, Any] | None = None) -> list[NormalizedPool]:
    return [p for p in pools if is_admissible(p, admission)]


def parse_distribution(value: Any) -> list[tuple[float, float]]:
    """Turn a per-bin liquidity structure into ``[(bin_id, amount), ...]``.

    Accepts a mapping keyed by bin id or a sequence of bin entries. Entries
    hold ``amount_x``/``amount_y`` (summed) or a single total. Result is
    sorted by bin id; empty when nothing usable was found.
    """
    entries: list[tuple[float, float]] = []
    if isinstance(value, Mapping):
        for key, entry in value.items():
            bin_id = to_number(key, default=math.nan)
            if math.isnan(bin_id):
                continue
            entries.append((bin_id, _bin_amount(entry)))
    elif isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        for position, entry in enumerate(value):
            bin_id = to_number(first_present(entry, _BIN_ID_FIELDS), default=float(position))
            entries.append((bin_id, _bin_amount(entry)))
    entries.sort(key=lambda e: e[0])
    return entries


def _bin_amount(entry: Any) -> float:
    if not isinstance(entry, Mapping):
        return max(0.0, to_number(entry))
    amount_x = first_present(entry, _AMOUNT_X_FIELDS)
    amount_y = first_present(entry, _AMOUNT_Y_FIELDS)
    if amount_x is None and amount_y is None:
        return max(0.0, pick_number(entry, _BIN_TOTAL_FIELDS))
    return max(0.0, to_number(amount_x) + to_number(amount_y))


def _pick_distribution(raw: Mapping[str, Any]) -> list[tuple[float, float]]:
    # An empty ``liquidity_distribution: {}`` must not hide a later ``bins``.
    for accessor in DISTRIBUTION_FIELDS:
        value = resolve(raw, accessor)
        if value is None:
            continue
        distribution = parse_distribution(value)
        if distribution:
            return distribution
    return []

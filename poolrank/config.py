"""Configuration loader for poolrank.

Loads config/ranker.yaml and deep-merges it over built-in defaults, so a
missing or partial file still yields a complete config.

Environment overrides:
- POOLRANK_CONFIG: alternate YAML path
- POOLRANK_ENDPOINTS: comma-separated endpoint list (priority order)
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml

WORKSPACE = Path(__file__).resolve().parent.parent
CONFIG_DIR = WORKSPACE / "config"
RANKER_CONFIG_PATH = CONFIG_DIR / "ranker.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "endpoints": [
        "https://dlmm-api.meteora.ag/pair/all",
        "https://dlmm-api.meteora.ag/pair/all_with_pagination?limit=500",
        "https://dlmm-api.meteora.ag/pairs",
    ],
    "http": {
        "timeout_seconds": 12.0,
        "max_retries": 0,
        "backoff_base": 1.0,
        "user_agent": "poolrank/0.1",
    },
    "admission": {
        "min_tvl": 1000.0,
        "min_volume_24h": 100.0,
        "min_bin_step": 1,
    },
    "scoring": {
        "fee_apr_cap": 2.0,
        "depth_normalizer": 20.0,
    },
    "weights": {
        "fee_apr": 0.6,
        "depth": 0.4,
        "in_range": 0.0,
        "volatility_fit": 0.0,
        "rug_risk": 0.0,
    },
    "bins": {
        "count": 20,
    },
    "recency_days": 7,
    "major_tokens": ["SOL", "USDC", "USDT"],
}


def load_ranker_config(path: Path | str | None = None) -> dict[str, Any]:
    """Load ranker config (defaults <- YAML <- env)."""
    if path is None:
        path = os.environ.get("POOLRANK_CONFIG") or RANKER_CONFIG_PATH
    path = Path(path)

    config = copy.deepcopy(DEFAULT_CONFIG)
    if path.exists():
        loaded = yaml.safe_load(path.read_text()) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{path}: top-level YAML must be a mapping")
        config = _deep_merge(config, loaded)

    endpoints_env = os.environ.get("POOLRANK_ENDPOINTS", "")
    if endpoints_env.strip():
        config["endpoints"] = [e.strip() for e in endpoints_env.split(",") if e.strip()]

    return config


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged

"""
Pool Scoring System
Weighted term aggregation for ranking normalized pools.

Terms:
- fee_apr:        min(fee_apr_estimate, cap) / cap * w.fee_apr
- depth:          depth_score / normalizer * w.depth
- in_range:       in_range_ratio_7d * w.in_range
- volatility_fit: volatility_fit * w.volatility_fit
- rug_risk:       -rug_risk_penalty * w.rug_risk

The last three read placeholder constants today (no upstream data source),
so any weight on them shifts every pool equally. They stay wired in so real
inputs can drop in later without touching the weight contract.

Scores are only comparable within one batch under one weight vector.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from poolrank.models import Category, NormalizedPool, WeightVector

FEE_APR_CAP = 2.0
DEPTH_NORMALIZER = 20.0


@dataclass(frozen=True)
class RankedPool:
    """A pool with its score under one weight vector."""
    pool: NormalizedPool
    score: float


class PoolScorer:
    """Score and rank pools from a weight vector."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Read caps from the ``scoring`` config section (defaults if absent)."""
        scoring = (config or {}).get("scoring", {})
        self.fee_apr_cap = float(scoring.get("fee_apr_cap", FEE_APR_CAP))
        self.depth_normalizer = float(scoring.get("depth_normalizer", DEPTH_NORMALIZER))
        if self.fee_apr_cap <= 0 or self.depth_normalizer <= 0:
            raise ValueError("fee_apr_cap and depth_normalizer must be positive")

    def breakdown(self, pool: NormalizedPool, weights: WeightVector) -> Dict[str, float]:
        """Per-term contributions."""
        fee = min(pool.fee_apr_estimate, self.fee_apr_cap) / self.fee_apr_cap
        return {
            "fee_apr": fee * weights.fee_apr,
            "depth": pool.depth_score / self.depth_normalizer * weights.depth,
            "in_range": pool.in_range_ratio_7d * weights.in_range,
            "volatility_fit": pool.volatility_fit * weights.volatility_fit,
            "rug_risk": -pool.rug_risk_penalty * weights.rug_risk,
        }

    def score(self, pool: NormalizedPool, weights: WeightVector) -> float:
        return sum(self.breakdown(pool, weights).values())

    def rank(
        self,
        pools: Iterable[NormalizedPool],
        weights: WeightVector,
        category: Category | str = Category.TOP,
        search: str = "",
    ) -> List[RankedPool]:
        """Category filter → search filter → stable descending sort by score."""
        category = Category(category)
        term = search.strip().lower()

        ranked = []
        for pool in pools:
            if not matches_category(pool, category):
                continue
            if term and term not in pool.pair_label.lower() and term not in pool.id.lower():
                continue
            ranked.append(RankedPool(pool=pool, score=self.score(pool, weights)))

        # sorted() is stable, reverse=True keeps equal scores in input order
        return sorted(ranked, key=lambda r: r.score, reverse=True)


def matches_category(pool: NormalizedPool, category: Category) -> bool:
    if category is Category.STABLE:
        return pool.is_stable
    if category is Category.MAJORS:
        return pool.is_major
    if category is Category.NEW:
        return pool.is_new
    return True


_DEFAULT_SCORER = PoolScorer()


def score(pool: NormalizedPool, weights: WeightVector) -> float:
    """Score with the default cap (2.0) and depth normalizer (20)."""
    return _DEFAULT_SCORER.score(pool, weights)


def rank_pools(
    pools: Iterable[NormalizedPool],
    weights: WeightVector,
    category: Category | str = Category.TOP,
    search: str = "",
) -> List[RankedPool]:
    return _DEFAULT_SCORER.rank(pools, weights, category, search)

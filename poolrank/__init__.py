"""poolrank — resilient DLMM pool acquisition, normalization and ranking.

Fetch:   poolrank/fetcher.py   (endpoint failover + bundled fallback)
Shape:   poolrank/normalize.py (schema-tolerant record normalizer)
Rank:    poolrank/scoring.py   (weighted score, category/search, stable sort)
Session: poolrank/session.py   (owned weights + pool set)
"""

from poolrank.fetcher import FetchReport, FailureKind, Ok, SoftFail, fetch_all, fetch_pools_report
from poolrank.models import Category, NormalizedPool, WeightVector
from poolrank.normalize import is_admissible, normalize_pool
from poolrank.scoring import PoolScorer, RankedPool, rank_pools, score
from poolrank.session import PoolSession, SessionStatus

__all__ = [
    # Models
    "Category",
    "NormalizedPool",
    "WeightVector",
    # Pipeline
    "normalize_pool",
    "is_admissible",
    "fetch_all",
    "fetch_pools_report",
    "FetchReport",
    "FailureKind",
    "Ok",
    "SoftFail",
    # Ranking
    "PoolScorer",
    "RankedPool",
    "rank_pools",
    "score",
    # Session
    "PoolSession",
    "SessionStatus",
]

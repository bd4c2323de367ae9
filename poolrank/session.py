"""Pool session — the owned state a front end works against.

Holds the weight vector, the loaded pool set, the active category and search
term, plus load status. Weight changes and scoring passes share one lock, so
a ranking never mixes two weight vectors.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping

from poolrank.config import load_ranker_config
from poolrank.fetcher import FetchReport, fetch_pools_report
from poolrank.logsink import BufferedLogSink, LoggerSink, LogSink
from poolrank.models import Category, NormalizedPool, WeightVector
from poolrank.scoring import PoolScorer, RankedPool

Fetcher = Callable[..., Awaitable[FetchReport]]


class SessionStatus(str, Enum):
    INITIALIZING = "INITIALIZING"
    READY = "READY"
    ERROR = "ERROR"


class PoolSession:
    """Weights + pools + view filters for one user/front end."""

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        weights: WeightVector | None = None,
        sink: LogSink | None = None,
        fetcher: Fetcher = fetch_pools_report,
    ):
        self.config = config if config is not None else load_ranker_config()
        self.scorer = PoolScorer(self.config)
        self.sink = sink if sink is not None else BufferedLogSink(forward=LoggerSink("poolrank.session"))
        self._fetcher = fetcher
        self._lock = threading.Lock()
        self._weights = weights if weights is not None else WeightVector(**self.config.get("weights", {}))
        self._pools: list[NormalizedPool] = []

        self.status = SessionStatus.INITIALIZING
        self.error: str | None = None
        self.report: FetchReport | None = None
        self.category = Category.TOP
        self.search = ""

    # ── Loading ──────────────────────────────────────────────────────

    async def load(self, **fetch_kwargs: Any) -> FetchReport | None:
        """Fetch the pool set once. Status ends READY or ERROR."""
        self.status = SessionStatus.INITIALIZING
        self.error = None
        try:
            report = await self._fetcher(config=self.config, sink=self.sink, **fetch_kwargs)
        except Exception as e:
            self.status = SessionStatus.ERROR
            self.error = f"Failed to fetch pool data: {e}"
            self.sink.emit("error", self.error)
            return None

        with self._lock:
            self._pools = list(report.pools)
        self.report = report
        self.status = SessionStatus.READY
        return report

    @property
    def pools(self) -> list[NormalizedPool]:
        with self._lock:
            return list(self._pools)

    # ── Weights ──────────────────────────────────────────────────────

    @property
    def weights(self) -> WeightVector:
        with self._lock:
            return self._weights

    def set_weight(self, name: str, value: float) -> WeightVector:
        """Replace one weight. Raises KeyError / ValidationError on bad input."""
        with self._lock:
            self._weights = self._weights.with_weight(name, value)
            return self._weights

    def set_weights(self, updates: Mapping[str, float]) -> WeightVector:
        with self._lock:
            weights = self._weights
            for name, value in updates.items():
                weights = weights.with_weight(name, value)
            self._weights = weights
            return self._weights

    # ── View ─────────────────────────────────────────────────────────

    def set_filter(self, category: Category | str | None = None, search: str | None = None) -> None:
        if category is not None:
            self.category = Category(category)
        if search is not None:
            self.search = search

    def ranked(self) -> list[RankedPool]:
        """Current view: category + search filtered, sorted by score."""
        if self.status is not SessionStatus.READY:
            return []
        with self._lock:
            return self.scorer.rank(self._pools, self._weights, self.category, self.search)

    def pool_detail(self, pool_id: str) -> RankedPool | None:
        with self._lock:
            for pool in self._pools:
                if pool.id == pool_id:
                    return RankedPool(pool=pool, score=self.scorer.score(pool, self._weights))
        return None

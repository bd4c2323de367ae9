"""Tests for pool scoring and ranking.

Covers:
- Fee APR term: monotonic up to the cap, flat above it
- Depth term and the default 0.6 / 0.4 weights
- Placeholder terms shift every pool by the same amount
- Category + search filtering, stable ordering on ties
"""

from __future__ import annotations

import math

import pytest

from poolrank.models import Category, NormalizedPool, WeightVector
from poolrank.scoring import PoolScorer, rank_pools, score


def _pool(pool_id: str = "POOL", pair: str = "AAA / BBB", **overrides) -> NormalizedPool:
    data = {"id": pool_id, "pair_label": pair, "name": pair}
    data.update(overrides)
    return NormalizedPool(**data)


@pytest.fixture
def scorer():
    return PoolScorer()


class TestFeeTerm:
    """fee contribution = min(apr, 2.0) / 2.0 * w.fee_apr."""

    def test_monotonic_below_cap(self, scorer):
        weights = WeightVector(fee_apr=1.0, depth=0.0)
        scores = [scorer.score(_pool(fee_apr_estimate=apr), weights) for apr in (0.0, 0.5, 1.0, 1.99)]
        assert scores == sorted(scores)
        assert scores[-1] < 1.0

    def test_flat_above_cap(self, scorer):
        weights = WeightVector(fee_apr=1.0, depth=0.0)
        at_cap = scorer.score(_pool(fee_apr_estimate=2.0), weights)
        assert at_cap == pytest.approx(1.0)
        assert scorer.score(_pool(fee_apr_estimate=3.1), weights) == at_cap
        assert scorer.score(_pool(fee_apr_estimate=50.0), weights) == at_cap

    def test_custom_cap_from_config(self):
        scorer = PoolScorer({"scoring": {"fee_apr_cap": 1.0}})
        weights = WeightVector(fee_apr=1.0, depth=0.0)
        assert scorer.score(_pool(fee_apr_estimate=0.5), weights) == pytest.approx(0.5)
        assert scorer.score(_pool(fee_apr_estimate=1.5), weights) == pytest.approx(1.0)


class TestDepthTerm:

    def test_depth_normalized_by_20(self, scorer):
        weights = WeightVector(fee_apr=0.0, depth=1.0)
        pool = _pool(tvl=2_500_000, depth_score=math.log(2_500_001))
        assert scorer.score(pool, weights) == pytest.approx(math.log(2_500_001) / 20)

    def test_default_weights(self, scorer):
        pool = _pool(fee_apr_estimate=0.45, depth_score=10.0)
        expected = 0.45 / 2.0 * 0.6 + 10.0 / 20.0 * 0.4
        assert scorer.score(pool, WeightVector()) == pytest.approx(expected)

    def test_module_level_score_uses_defaults(self):
        pool = _pool(fee_apr_estimate=1.0, depth_score=5.0)
        assert score(pool, WeightVector()) == pytest.approx(0.3 + 0.1)


class TestPlaceholderTerms:
    """in_range / volatility_fit / rug_risk read constants, so they never reorder."""

    def test_breakdown_terms(self, scorer):
        weights = WeightVector(fee_apr=0, depth=0, in_range=1, volatility_fit=1, rug_risk=1)
        terms = scorer.breakdown(_pool(rug_risk_penalty=0.25), weights)
        assert terms["in_range"] == pytest.approx(0.85)
        assert terms["volatility_fit"] == pytest.approx(0.5)
        assert terms["rug_risk"] == pytest.approx(-0.25)

    def test_constant_shift_preserves_order(self, scorer):
        pools = [
            _pool("A", fee_apr_estimate=0.2, depth_score=12.0),
            _pool("B", fee_apr_estimate=1.4, depth_score=9.0),
            _pool("C", fee_apr_estimate=0.9, depth_score=14.5),
        ]
        base = WeightVector()
        shifted = WeightVector(in_range=0.7, volatility_fit=0.3)

        before = [r.pool.id for r in scorer.rank(pools, base)]
        after = scorer.rank(pools, shifted)
        assert [r.pool.id for r in after] == before

        delta = 0.85 * 0.7 + 0.5 * 0.3
        for ranked in after:
            assert ranked.score == pytest.approx(scorer.score(ranked.pool, base) + delta)


class TestRanking:

    def test_descending_by_score(self, scorer):
        pools = [
            _pool("LOW", fee_apr_estimate=0.1),
            _pool("HIGH", fee_apr_estimate=1.8),
            _pool("MID", fee_apr_estimate=0.9),
        ]
        assert [r.pool.id for r in scorer.rank(pools, WeightVector())] == ["HIGH", "MID", "LOW"]

    def test_ties_keep_input_order(self, scorer):
        pools = [_pool(f"P{i}", fee_apr_estimate=0.5, depth_score=8.0) for i in range(5)]
        assert [r.pool.id for r in scorer.rank(pools, WeightVector())] == ["P0", "P1", "P2", "P3", "P4"]

    def test_zero_weights_keep_input_order(self, scorer):
        pools = [_pool("B", fee_apr_estimate=1.0), _pool("A", fee_apr_estimate=0.1)]
        zero = WeightVector(fee_apr=0, depth=0)
        ranked = scorer.rank(pools, zero)
        assert [r.pool.id for r in ranked] == ["B", "A"]
        assert all(r.score == 0 for r in ranked)

    def test_empty_input(self, scorer):
        assert scorer.rank([], WeightVector()) == []


class TestFilters:

    @pytest.fixture
    def pools(self):
        return [
            _pool("SOLUSDC1", "SOL / USDC", is_major=True, is_new=True, fee_apr_estimate=0.4),
            _pool("USDTUSDC1", "USDT / USDC", is_major=True, is_stable=True, fee_apr_estimate=0.1),
            _pool("BONKJUP1", "BONK / JUP", fee_apr_estimate=1.9),
        ]

    @pytest.mark.parametrize("category,expected", [
        (Category.TOP, {"SOLUSDC1", "USDTUSDC1", "BONKJUP1"}),
        (Category.STABLE, {"USDTUSDC1"}),
        (Category.MAJORS, {"SOLUSDC1", "USDTUSDC1"}),
        (Category.NEW, {"SOLUSDC1"}),
    ])
    def test_category(self, pools, category, expected):
        assert {r.pool.id for r in rank_pools(pools, WeightVector(), category)} == expected

    def test_category_by_value(self, pools):
        assert [r.pool.id for r in rank_pools(pools, WeightVector(), "stable")] == ["USDTUSDC1"]

    def test_search_matches_pair_label_case_insensitive(self, pools):
        assert [r.pool.id for r in rank_pools(pools, WeightVector(), search="usdc")] == [
            "SOLUSDC1",
            "USDTUSDC1",
        ]

    def test_search_matches_id(self, pools):
        assert [r.pool.id for r in rank_pools(pools, WeightVector(), search="jup1")] == ["BONKJUP1"]

    def test_search_and_category_combine(self, pools):
        ranked = rank_pools(pools, WeightVector(), Category.STABLE, search="sol")
        assert ranked == []


def test_non_positive_cap_rejected():
    with pytest.raises(ValueError):
        PoolScorer({"scoring": {"fee_apr_cap": 0}})
    with pytest.raises(ValueError):
        PoolScorer({"scoring": {"depth_normalizer": -1}})

"""Tests for field extraction and tolerant coercion."""

from __future__ import annotations

import math
from decimal import Decimal

import pytest

from poolrank.extract import (
    first_present,
    pick_number,
    pick_str,
    resolve,
    to_iso_date,
    to_number,
    to_str,
)


class TestResolve:
    """Accessor paths walk mappings and sequences, stop on dead ends."""

    def test_flat_key(self):
        assert resolve({"tvl": 5}, "tvl") == 5

    def test_nested_path(self):
        assert resolve({"stats": {"volume": {"h24": 7}}}, ("stats", "volume", "h24")) == 7

    def test_index_into_list(self):
        record = {"tokens": [{"symbol": "SOL"}, {"symbol": "USDC"}]}
        assert resolve(record, ("tokens", 1, "symbol")) == "USDC"

    def test_index_out_of_range(self):
        assert resolve({"tokens": [{"symbol": "SOL"}]}, ("tokens", 3, "symbol")) is None

    def test_short_circuits_on_scalar(self):
        """Walking into a number/string yields None instead of raising."""
        assert resolve({"liquidity": 100}, ("liquidity", "usd")) is None
        assert resolve({"name": "SOL-USDC"}, ("name", 0)) is None

    def test_missing_key(self):
        assert resolve({}, ("a", "b")) is None


class TestFirstPresent:

    def test_first_non_none_wins(self):
        record = {"volume_24h": None, "trade_volume_24h": 0, "volume24h": 99}
        assert first_present(record, ["volume_24h", "trade_volume_24h", "volume24h"]) == 0

    def test_nothing_found(self):
        assert first_present({"x": 1}, ["a", ("b", "c")]) is None

    def test_pick_str_skips_blank(self):
        record = {"address": "   ", "pairAddress": " ABC "}
        assert pick_str(record, ["address", "pairAddress"]) == "ABC"


class TestToNumber:

    def test_currency_string(self):
        assert to_number("$1,234.50") == 1234.5

    def test_percent_string(self):
        assert to_number("12.5%") == 12.5

    def test_exponent_and_sign(self):
        assert to_number("-1.5e3") == -1500.0

    def test_native_numbers(self):
        assert to_number(42) == 42.0
        assert to_number(0.25) == 0.25
        assert to_number(Decimal("3.5")) == 3.5

    def test_big_int(self):
        assert to_number(10**20) == 1e20

    def test_huge_int_falls_back(self):
        assert to_number(10**400, default=-1.0) == -1.0

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf, "1e999"])
    def test_non_finite_falls_back(self, value):
        assert to_number(value, default=7.0) == 7.0

    @pytest.mark.parametrize("value", ["", "n/a", "--", "1.2.3", None, True, {"usd": 1}, [1]])
    def test_unparsable_falls_back(self, value):
        assert to_number(value, default=3.0) == 3.0


class TestToStr:

    def test_trims(self):
        assert to_str("  SOL ") == "SOL"

    def test_empty_is_absent(self):
        assert to_str("   ") is None
        assert to_str(None) is None

    def test_number_stringifies(self):
        assert to_str(42) == "42"

    def test_non_string_is_absent(self):
        assert to_str({"symbol": "SOL"}) is None


class TestToIsoDate:

    def test_iso_with_z(self):
        assert to_iso_date("2024-01-10T00:00:00Z") == "2024-01-10T00:00:00+00:00"

    def test_naive_is_utc(self):
        assert to_iso_date("2024-01-10T12:30:00") == "2024-01-10T12:30:00+00:00"

    def test_offset_converted_to_utc(self):
        assert to_iso_date("2024-01-10T02:00:00+02:00") == "2024-01-10T00:00:00+00:00"

    def test_epoch_seconds_and_millis(self):
        assert to_iso_date(1704067200) == "2024-01-01T00:00:00+00:00"
        assert to_iso_date(1704067200000) == "2024-01-01T00:00:00+00:00"
        assert to_iso_date("1704067200000") == "2024-01-01T00:00:00+00:00"

    @pytest.mark.parametrize("value", ["yesterday", "", "2024-13-45", None, {"ts": 1}, "nan"])
    def test_unparsable_is_absent(self, value):
        assert to_iso_date(value) is None


def test_pick_number_defaults_when_missing():
    assert pick_number({"stats": {}}, [("stats", "tvl"), "tvl"], default=0.0) == 0.0


def test_pick_number_skips_containers():
    record = {"liquidity": {"x": 10, "y": 20}, "tvl": "15000"}
    assert pick_number(record, ["liquidity", "tvl"]) == 15000.0


def test_pick_number_stops_at_unparsable_scalar():
    assert pick_number({"liquidity": "n/a", "tvl": 5}, ["liquidity", "tvl"], default=-1.0) == -1.0


@pytest.mark.parametrize("value", ["0001-01-01T00:00:00+01:00", "9999-12-31T23:59:59-01:00"])
def test_offset_past_datetime_range_is_absent(value):
    """Converting to UTC would leave the datetime range; treated as unparsable."""
    assert to_iso_date(value) is None

"""Canonical pool and weight models.

Everything downstream of the normalizer works on these, never on raw
upstream records.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Placeholder inputs for score terms that have no upstream data source yet.
DEFAULT_IN_RANGE_RATIO = 0.85
DEFAULT_VOLATILITY_FIT = 0.5
DEFAULT_RUG_RISK_PENALTY = 0.0


class NormalizedPool(BaseModel):
    """One pool in the stable internal shape. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    pair_label: str = Field(min_length=1)
    name: str = ""

    is_stable: bool = False
    is_major: bool = False
    is_new: bool = False

    tvl: float = Field(default=0.0, ge=0)
    volume_24h: float = Field(default=0.0, ge=0)
    volume_7d: float = Field(default=0.0, ge=0)
    fee_apr_estimate: float = Field(default=0.0, ge=0)  # fraction, 0.38 == 38%
    depth_score: float = Field(default=0.0, ge=0)       # ln(tvl + 1)

    bin_step: int = Field(default=1, ge=1)
    current_price_bin_index: int = 0
    bins: tuple[float, ...] = ()
    has_real_bins: bool = False

    in_range_ratio_7d: float = DEFAULT_IN_RANGE_RATIO
    volatility_fit: float = DEFAULT_VOLATILITY_FIT
    rug_risk_penalty: float = DEFAULT_RUG_RISK_PENALTY

    created_at: str | None = None


class WeightVector(BaseModel):
    """User-tunable score weights. No sum-to-one invariant."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    fee_apr: float = Field(default=0.6, ge=0)
    depth: float = Field(default=0.4, ge=0)
    in_range: float = Field(default=0.0, ge=0)
    volatility_fit: float = Field(default=0.0, ge=0)
    rug_risk: float = Field(default=0.0, ge=0)

    def with_weight(self, name: str, value: float) -> WeightVector:
        """Copy with one weight replaced (validated)."""
        if name not in type(self).model_fields:
            raise KeyError(f"unknown weight: {name}")
        data = self.model_dump()
        data[name] = value
        return WeightVector(**data)


WEIGHT_LABELS: dict[str, str] = {
    "fee_apr": "Fee APR (Est.)",
    "depth": "Depth (TVL)",
    "in_range": "In-Range Ratio",
    "volatility_fit": "Volatility Fit",
    "rug_risk": "Rug Risk",
}


class Category(str, Enum):
    TOP = "top"
    STABLE = "stable"
    MAJORS = "majors"
    NEW = "new"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    Category.TOP: "Top today",
    Category.STABLE: "Stable-ish",
    Category.MAJORS: "Majors",
    Category.NEW: "New",
}

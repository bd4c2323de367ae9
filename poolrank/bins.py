"""Synthetic liquidity-bin histograms.

Used when an upstream record carries no per-bin distribution so the detail
view still has something shaped like a liquidity curve to draw. The output is
display-only; scoring never reads ``bins``.
"""

from __future__ import annotations

import math
import random

DEFAULT_BIN_COUNT = 20
MIN_BIN_LIQUIDITY = 5.0
PEAK_LIQUIDITY = 100.0
SPREAD = 0.2
NOISE_RANGE = (0.8, 1.2)


def synthesize_bins(
    count: int = DEFAULT_BIN_COUNT,
    center: int | None = None,
    rng: random.Random | None = None,
) -> list[float]:
    """Gaussian bump around ``center`` with per-bin amplitude jitter.

    bin[i] = max(5, 100 * exp(-0.2 * (i - center)^2) * noise),
    noise uniform in [0.8, 1.2).
    """
    if count < 1:
        raise ValueError(f"bin count must be positive, got {count}")
    if center is None:
        center = count // 2
    rng = rng or random.Random()
    low, high = NOISE_RANGE

    bins: list[float] = []
    for i in range(count):
        noise = low + (high - low) * rng.random()
        height = PEAK_LIQUIDITY * math.exp(-SPREAD * (i - center) ** 2) * noise
        bins.append(max(MIN_BIN_LIQUIDITY, height))
    return bins

from __future__ import annotations

"""
File: curbspace/sim/stats.py
Purpose: Order statistics over sorted Monte Carlo samples.
Key responsibilities:
- Inclusive linear-interpolation percentile (spreadsheet PERCENTILE.INC).
- Max-over-periods sizing and the service-level curve.
"""

import math
from typing import Iterable, Sequence


CURVE_START_PERCENT = 50
CURVE_END_PERCENT = 100


def percentile_inc(sorted_values: Sequence[float], service_level: float) -> float:
    """Percentile of an ascending sample at rank service_level * (n - 1).

    Empty samples give 0 and a single sample gives itself for every level.
    """
    n = len(sorted_values)
    if n == 0:
        return 0.0
    if n == 1:
        return float(sorted_values[0])
    rank = service_level * (n - 1)
    lo = math.floor(rank)
    hi = min(lo + 1, n - 1)
    frac = rank - lo
    low_value = float(sorted_values[lo])
    return low_value + frac * (float(sorted_values[hi]) - low_value)


def service_level_key(service_level: float) -> int:
    """Integer percent label of a service level, rounding halves up."""
    return int(math.floor(service_level * 100 + 0.5))


def max_over_periods(period_samples: Iterable[Sequence[float]], service_level: float) -> float:
    """Worst-period percentile: sizing follows the single busiest period."""
    best = 0.0
    for samples in period_samples:
        value = percentile_inc(samples, service_level)
        if value > best:
            best = value
    return best


def service_level_curve(
    cluster_period_samples: Iterable[Sequence[Sequence[float]]],
    start_percent: int = CURVE_START_PERCENT,
    end_percent: int = CURVE_END_PERCENT,
) -> list[tuple[float, float]]:
    """Total space per integer service level, summing each cluster's period maximum."""
    clusters = list(cluster_period_samples)
    curve: list[tuple[float, float]] = []
    for pct in range(start_percent, end_percent + 1):
        level = pct / 100
        curve.append((level, sum(max_over_periods(periods, level) for periods in clusters)))
    return curve


def round_half_up(value: float, digits: int = 2) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor

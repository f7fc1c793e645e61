from __future__ import annotations

"""
File: curbspace/sim/compiler.py
Purpose: Turn unit counts and delivery profiles into per-vehicle arrival specs.
Key responsibilities:
- Compute single-interval arrival probabilities per period.
- Compute deterministic expected arrivals per day per vehicle.
- Treat missing catalog entries as zero contribution.
"""

import math
from typing import Mapping

from curbspace.sim.entities import ArrivalPlan, ArrivalSpec
from curbspace.sim.scenario import Scenario
from curbspace.sim.catalog import profile_key


# Weekly stops are spread over a fixed six-day week, whatever the distribution's
# own delivery days are. The reference workbook divides by an absolute cell here.
REFERENCE_DELIVERY_DAYS = 6


def stay_intervals(duration_minutes: float, interval_minutes: float) -> int:
    """Intervals occupied by one stop; a zero-length stop still takes one."""
    if duration_minutes <= 0:
        return 1
    return max(1, math.ceil(duration_minutes / interval_minutes))


def unit_count(function_counts: Mapping[str, float], function_id: str) -> float:
    """Unit count for a function, with missing/NaN/negative values read as zero."""
    raw = function_counts.get(function_id, 0) or 0
    value = float(raw)
    if math.isnan(value) or value < 0:
        return 0.0
    return value


def compile_arrivals(scenario: Scenario, function_counts: Mapping[str, float]) -> ArrivalPlan:
    """Build the arrival specs of every vehicle type for one run."""
    num_vehicles = len(scenario.vehicles)
    num_periods = len(scenario.periods)
    specs: list[list[ArrivalSpec]] = [[] for _ in range(num_vehicles)]
    expected = [0.0] * num_vehicles

    for func in scenario.functions:
        units = unit_count(function_counts, func.id)
        if units == 0:
            continue

        for dist in scenario.distributions:
            profile = scenario.profiles.get(profile_key(func.id, dist.id))
            if profile is None:
                continue

            for v in range(num_vehicles):
                stops = profile.stops_for(v)
                if stops == 0:
                    continue
                fractions = profile.fractions_for(v, num_periods)
                if not any(f > 0 for f in fractions):
                    continue

                arrivals_per_day = stops * units / REFERENCE_DELIVERY_DAYS
                probabilities = tuple(
                    arrivals_per_day * fractions[p] / scenario.intervals_per_period[p]
                    for p in range(num_periods)
                )
                expected[v] += sum(arrivals_per_day * f for f in fractions)
                specs[v].append(
                    ArrivalSpec(
                        probabilities=probabilities,
                        stay_intervals=stay_intervals(profile.duration_for(v), scenario.interval_minutes),
                    )
                )

    return ArrivalPlan(
        specs=tuple(tuple(vehicle_specs) for vehicle_specs in specs),
        expected_arrivals_per_day=tuple(expected),
    )

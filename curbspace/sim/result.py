from __future__ import annotations

"""
File: curbspace/sim/result.py
Purpose: Package engine samples into the immutable simulation result.
Key responsibilities:
- Per-vehicle and per-cluster percentile tables.
- System total, peak space per period and the service-level curve.
"""

from dataclasses import dataclass, field
from typing import Iterable

from curbspace.sim.engine import TrialSamples
from curbspace.sim.entities import ArrivalPlan
from curbspace.sim.scenario import Scenario
from curbspace.sim.stats import (
    max_over_periods,
    percentile_inc,
    round_half_up,
    service_level_curve,
    service_level_key,
)


@dataclass(frozen=True)
class VehicleResult:
    vehicle_id: str
    vehicle_name: str
    vehicle_length: float
    total_arrivals_per_day: float
    max_vehicles_per_service_level: dict[int, float]
    required_space: float
    cluster_id: int


@dataclass(frozen=True)
class ClusterResult:
    cluster_id: int
    service_level: float
    total_space: float
    vehicle_ids: tuple[str, ...]
    max_vehicles_per_service_level: dict[int, float]


@dataclass(frozen=True)
class PeriodPeak:
    period: str
    space: float


@dataclass(frozen=True)
class CurvePoint:
    service_level: float
    space: float


@dataclass(frozen=True)
class SimulationResult:
    """Everything one run reports; created once and never mutated."""
    vehicle_results: tuple[VehicleResult, ...]
    cluster_results: tuple[ClusterResult, ...]
    total_space: float
    total_arrivals_per_day: float
    peak_by_period: tuple[PeriodPeak, ...]
    service_level_curve: tuple[CurvePoint, ...]
    num_simulations: int
    interval_minutes: float
    warnings: tuple[dict[str, object], ...] = field(default_factory=tuple)


def reporting_levels(scenario: Scenario, base_levels: Iterable[float], extra_levels: Iterable[float] = ()) -> list[float]:
    """Sorted union of the reporting levels and every cluster's own level."""
    levels = set(base_levels)
    levels.update(extra_levels)
    levels.update(c.service_level for c in scenario.clusters)
    return sorted(levels)


def assemble_result(
    scenario: Scenario,
    plan: ArrivalPlan,
    samples: TrialSamples,
    levels: list[float],
    peak_report_level: float,
    warnings: Iterable[dict[str, object]] = (),
) -> SimulationResult:
    """Build the result value from compiled specs and sorted samples."""
    vehicle_results: list[VehicleResult] = []
    for idx, vehicle in enumerate(scenario.vehicles):
        cluster_id = scenario.vehicle_clusters[idx]
        cluster_level = scenario.cluster_service_level(cluster_id)
        peaks = samples.peaks[idx]
        vehicle_results.append(
            VehicleResult(
                vehicle_id=vehicle.id,
                vehicle_name=vehicle.name,
                vehicle_length=vehicle.length,
                total_arrivals_per_day=round_half_up(plan.expected_arrivals_per_day[idx]),
                max_vehicles_per_service_level={service_level_key(sl): percentile_inc(peaks, sl) for sl in levels},
                required_space=percentile_inc(peaks, cluster_level) * vehicle.length,
                cluster_id=cluster_id,
            )
        )

    cluster_results: list[ClusterResult] = []
    for cluster in scenario.clusters:
        cluster_results.append(
            ClusterResult(
                cluster_id=cluster.id,
                service_level=cluster.service_level,
                total_space=max_over_periods(samples.cluster_space[cluster.id], cluster.service_level),
                vehicle_ids=cluster.vehicle_ids,
                max_vehicles_per_service_level={
                    service_level_key(sl): max_over_periods(samples.cluster_vehicles[cluster.id], sl) for sl in levels
                },
            )
        )

    peak_by_period = tuple(
        PeriodPeak(period=period.name, space=percentile_inc(samples.fleet_space[p], peak_report_level))
        for p, period in enumerate(scenario.periods)
    )
    curve = service_level_curve(samples.cluster_space[c.id] for c in scenario.clusters)

    return SimulationResult(
        vehicle_results=tuple(vehicle_results),
        cluster_results=tuple(cluster_results),
        total_space=sum(c.total_space for c in cluster_results),
        total_arrivals_per_day=round_half_up(sum(v.total_arrivals_per_day for v in vehicle_results)),
        peak_by_period=peak_by_period,
        service_level_curve=tuple(CurvePoint(service_level=sl, space=space) for sl, space in curve),
        num_simulations=samples.num_simulations,
        interval_minutes=scenario.interval_minutes,
        warnings=tuple(warnings),
    )

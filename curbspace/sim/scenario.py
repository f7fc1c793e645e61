from __future__ import annotations

"""
File: curbspace/sim/scenario.py
Purpose: Simulation input and per-run catalog resolution.
Key responsibilities:
- Describe one run request with optional overrides.
- Merge overrides over the built-in catalogs.
- Derive the interval grid and cluster membership.
"""

from dataclasses import dataclass, field
import math
from typing import Mapping, Sequence

from curbspace.settings import settings
from curbspace.sim.catalog import (
    DELIVERY_PROFILES,
    DISTRIBUTIONS,
    FUNCTIONS,
    MINUTES_PER_HOUR,
    PERIODS,
    VEHICLES,
)
from curbspace.sim.entities import (
    Cluster,
    DeliveryProfile,
    DistributionType,
    FunctionType,
    Period,
    VehicleType,
)


DEFAULT_CLUSTER_ID = 1


@dataclass(frozen=True)
class SimulationInput:
    """One simulation request.

    Override fallbacks:
    - vehicles / functions / distributions: replace the built-in catalog when given.
    - vehicle_lengths: length = override if present else catalog length.
    - delivery_days: days = override if present else catalog days.
    - delivery_profiles: merged key-by-key over the built-in profiles.
    - interval_minutes: falls back to the configured interval.
    - num_simulations: falls back to the configured trial count.
    """
    function_counts: Mapping[str, float] = field(default_factory=dict)
    cluster_assignments: Mapping[str, int] = field(default_factory=dict)
    cluster_service_levels: Mapping[int, float] = field(default_factory=dict)
    num_simulations: int | None = None
    vehicles: Sequence[VehicleType] | None = None
    functions: Sequence[FunctionType] | None = None
    distributions: Sequence[DistributionType] | None = None
    vehicle_lengths: Mapping[str, float] = field(default_factory=dict)
    delivery_days: Mapping[str, float] = field(default_factory=dict)
    delivery_profiles: Mapping[str, DeliveryProfile] = field(default_factory=dict)
    interval_minutes: float | None = None
    seed: int | None = None


@dataclass(frozen=True)
class Scenario:
    """Catalogs and interval grid resolved for a single run."""
    vehicles: tuple[VehicleType, ...]
    functions: tuple[FunctionType, ...]
    distributions: tuple[DistributionType, ...]
    profiles: Mapping[str, DeliveryProfile]
    periods: tuple[Period, ...]
    interval_minutes: float
    intervals_per_period: tuple[float, ...]
    interval_to_period: tuple[int, ...]
    vehicle_clusters: tuple[int, ...]
    clusters: tuple[Cluster, ...]

    @property
    def total_intervals(self) -> int:
        return len(self.interval_to_period)

    def cluster_service_level(self, cluster_id: int) -> float:
        for cluster in self.clusters:
            if cluster.id == cluster_id:
                return cluster.service_level
        return settings.default_service_level


def _interval_grid(periods: Sequence[Period], interval_minutes: float) -> tuple[tuple[float, ...], tuple[int, ...]]:
    """Return the per-period interval count and the period index of every interval.

    The count is used as the probability divisor as-is; when the interval does not
    divide the period evenly the last, partial interval still gets its own slot.
    Every period gets its ceil() slots, so a 7-minute grid has 4 x 52 = 208
    intervals rather than stopping at 24 h / 7 min and dropping the tail of the
    last period.
    """
    intervals_per_period = tuple(p.hours * MINUTES_PER_HOUR / interval_minutes for p in periods)
    interval_to_period: list[int] = []
    for period_idx, count in enumerate(intervals_per_period):
        interval_to_period.extend([period_idx] * math.ceil(count))
    return intervals_per_period, tuple(interval_to_period)


def _build_clusters(
    vehicles: Sequence[VehicleType],
    assignments: Mapping[str, int],
    service_levels: Mapping[int, float],
) -> tuple[tuple[int, ...], tuple[Cluster, ...]]:
    vehicle_clusters = tuple(int(assignments.get(v.id, DEFAULT_CLUSTER_ID)) for v in vehicles)
    members: dict[int, list[int]] = {}
    for idx, cluster_id in enumerate(vehicle_clusters):
        members.setdefault(cluster_id, []).append(idx)

    clusters = tuple(
        Cluster(
            id=cluster_id,
            service_level=float(service_levels.get(cluster_id, settings.default_service_level)),
            vehicle_ids=tuple(vehicles[idx].id for idx in indices),
            vehicle_indices=tuple(indices),
        )
        for cluster_id, indices in sorted(members.items())
    )
    return vehicle_clusters, clusters


def resolve_scenario(sim_input: SimulationInput) -> Scenario:
    """Merge per-run overrides over the built-in catalogs."""
    vehicles = tuple(
        VehicleType(id=v.id, name=v.name, length=float(sim_input.vehicle_lengths.get(v.id, v.length)))
        for v in (sim_input.vehicles if sim_input.vehicles is not None else VEHICLES)
    )
    functions = tuple(sim_input.functions if sim_input.functions is not None else FUNCTIONS)
    distributions = tuple(
        DistributionType(id=d.id, name=d.name, delivery_days=sim_input.delivery_days.get(d.id, d.delivery_days))
        for d in (sim_input.distributions if sim_input.distributions is not None else DISTRIBUTIONS)
    )
    profiles = {**DELIVERY_PROFILES, **sim_input.delivery_profiles}

    interval_minutes = sim_input.interval_minutes or settings.interval_minutes
    intervals_per_period, interval_to_period = _interval_grid(PERIODS, interval_minutes)
    vehicle_clusters, clusters = _build_clusters(
        vehicles, sim_input.cluster_assignments, sim_input.cluster_service_levels
    )

    return Scenario(
        vehicles=vehicles,
        functions=functions,
        distributions=distributions,
        profiles=profiles,
        periods=PERIODS,
        interval_minutes=float(interval_minutes),
        intervals_per_period=intervals_per_period,
        interval_to_period=interval_to_period,
        vehicle_clusters=vehicle_clusters,
        clusters=clusters,
    )

from __future__ import annotations

"""
File: curbspace/sim/entities.py
Purpose: Core dataclasses for catalog data and derived simulation inputs.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class VehicleType:
    """Delivery vehicle category and the curb length it occupies."""
    id: str
    name: str
    length: float


@dataclass(frozen=True)
class FunctionType:
    """Land use (housing, supermarket, office, ...) counted in units."""
    id: str
    name: str
    unit: str = ""
    description: str = ""


@dataclass(frozen=True)
class DistributionType:
    """Logistics segment (parcels, waste, facility service, ...)."""
    id: str
    name: str
    delivery_days: float


@dataclass(frozen=True)
class Period:
    """Fixed block of the day."""
    id: str
    name: str
    hours: int


@dataclass(frozen=True)
class DeliveryProfile:
    """Arrival-generating parameters per vehicle index for one function x distribution pair.

    Lists are indexed by vehicle position in the catalog. Entries beyond the end of a
    list count as zero, so a profile written for six vehicles stays valid when the
    catalog grows.
    """
    stops_per_week_per_unit: tuple[float, ...]
    duration: tuple[float, ...]
    period_distribution: tuple[tuple[float, ...], ...]

    def stops_for(self, vehicle_idx: int) -> float:
        if vehicle_idx < len(self.stops_per_week_per_unit):
            return self.stops_per_week_per_unit[vehicle_idx]
        return 0.0

    def duration_for(self, vehicle_idx: int) -> float:
        if vehicle_idx < len(self.duration):
            return self.duration[vehicle_idx]
        return 0.0

    def fractions_for(self, vehicle_idx: int, num_periods: int) -> tuple[float, ...]:
        if vehicle_idx < len(self.period_distribution):
            fractions = tuple(self.period_distribution[vehicle_idx])
        else:
            fractions = ()
        return fractions[:num_periods] + (0.0,) * max(0, num_periods - len(fractions))


@dataclass(frozen=True)
class ArrivalSpec:
    """Per-period single-interval arrival probability and occupancy length."""
    probabilities: tuple[float, ...]
    stay_intervals: int


@dataclass(frozen=True)
class ArrivalPlan:
    """Compiled arrival specs and expected arrivals per day, both indexed by vehicle."""
    specs: tuple[tuple[ArrivalSpec, ...], ...]
    expected_arrivals_per_day: tuple[float, ...]


@dataclass(frozen=True)
class Cluster:
    """Vehicle types sharing one loading space."""
    id: int
    service_level: float
    vehicle_ids: tuple[str, ...]
    vehicle_indices: tuple[int, ...]

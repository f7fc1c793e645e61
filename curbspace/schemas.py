from __future__ import annotations

"""
File: curbspace/schemas.py
Purpose: Pydantic models for the simulation request/response contracts.
Key responsibilities:
- Validate incoming /simulate payloads.
- Clamp or default malformed numeric overrides before they reach the engine.
- Mirror the simulation result for JSON output.
Key entrypoints:
- SimulateRequest, SimulateResponse, ErrorResponse
"""

from dataclasses import asdict
import math
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from curbspace.settings import (
    MAX_DISTRIBUTIONS,
    MAX_FUNCTIONS,
    MAX_INTERVAL_MINUTES,
    MAX_VEHICLES,
    MIN_INTERVAL_MINUTES,
    settings,
)
from curbspace.sim.entities import DeliveryProfile, DistributionType, FunctionType, VehicleType
from curbspace.sim.result import SimulationResult
from curbspace.sim.scenario import SimulationInput


def _finite(value: Any) -> float | None:
    """Return value as a finite float, or None when it is not usable."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _non_negative(value: Any) -> float:
    number = _finite(value)
    if number is None or number < 0:
        return 0.0
    return number


class VehicleDef(BaseModel):
    """Vehicle catalog entry supplied by the caller."""
    id: str
    name: str
    length: float = Field(gt=0)


class FunctionDef(BaseModel):
    """Function catalog entry supplied by the caller."""
    id: str
    name: str
    unit: str = ""
    description: str = ""


class DistributionDef(BaseModel):
    """Distribution catalog entry supplied by the caller."""
    id: str
    name: str
    delivery_days: float = Field(ge=0)


class DeliveryProfileModel(BaseModel):
    """Delivery profile override; negative or NaN numbers are read as zero."""
    stops_per_week_per_unit: list[float]
    duration: list[float]
    period_distribution: list[list[float]]

    @field_validator("stops_per_week_per_unit", "duration", mode="before")
    @classmethod
    def _clamp_values(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [_non_negative(v) for v in value]

    @field_validator("period_distribution", mode="before")
    @classmethod
    def _clamp_fractions(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [[_non_negative(v) for v in row] if isinstance(row, list) else row for row in value]

    def to_profile(self) -> DeliveryProfile:
        return DeliveryProfile(
            stops_per_week_per_unit=tuple(self.stops_per_week_per_unit),
            duration=tuple(self.duration),
            period_distribution=tuple(tuple(row) for row in self.period_distribution),
        )


class SimulateRequest(BaseModel):
    """Request body for /simulate and simulation.requested events."""
    session_id: Optional[str] = None
    seed: Optional[int] = None
    function_counts: dict[str, int] = Field(default_factory=dict)
    cluster_assignments: dict[str, int] = Field(default_factory=dict)
    cluster_service_levels: dict[int, float] = Field(default_factory=dict)
    num_simulations: int = settings.num_simulations
    vehicles: Optional[list[VehicleDef]] = Field(default=None, max_length=MAX_VEHICLES)
    functions: Optional[list[FunctionDef]] = Field(default=None, max_length=MAX_FUNCTIONS)
    distributions: Optional[list[DistributionDef]] = Field(default=None, max_length=MAX_DISTRIBUTIONS)
    vehicle_lengths: dict[str, float] = Field(default_factory=dict)
    delivery_days: dict[str, float] = Field(default_factory=dict)
    delivery_profiles: dict[str, DeliveryProfileModel] = Field(default_factory=dict)
    interval_minutes: Optional[float] = None

    @field_validator("function_counts", mode="before")
    @classmethod
    def _clamp_counts(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {key: int(math.floor(_non_negative(count))) for key, count in value.items()}

    @field_validator("cluster_assignments", mode="before")
    @classmethod
    def _drop_invalid_clusters(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        cleaned: dict[str, int] = {}
        for vehicle_id, cluster_id in value.items():
            number = _finite(cluster_id)
            if number is not None and number >= 1:
                cleaned[vehicle_id] = int(number)
        return cleaned

    @field_validator("cluster_service_levels", mode="before")
    @classmethod
    def _drop_invalid_levels(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        cleaned: dict[Any, float] = {}
        for cluster_id, level in value.items():
            number = _finite(level)
            if number is not None and 0 < number <= 1:
                cleaned[cluster_id] = number
        return cleaned

    @field_validator("num_simulations", mode="before")
    @classmethod
    def _clamp_simulations(cls, value: Any) -> Any:
        number = _finite(value)
        if number is None:
            return settings.num_simulations
        return int(min(max(number, settings.min_simulations), settings.max_simulations))

    @field_validator("vehicle_lengths", mode="before")
    @classmethod
    def _drop_invalid_lengths(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {k: n for k, v in value.items() if (n := _finite(v)) is not None and n > 0}

    @field_validator("delivery_days", mode="before")
    @classmethod
    def _drop_invalid_days(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {k: n for k, v in value.items() if (n := _finite(v)) is not None and n >= 0}

    @field_validator("interval_minutes", mode="before")
    @classmethod
    def _clamp_interval(cls, value: Any) -> Any:
        if value is None:
            return None
        number = _finite(value)
        if number is None:
            return None
        return min(max(number, MIN_INTERVAL_MINUTES), MAX_INTERVAL_MINUTES)

    def to_input(self) -> SimulationInput:
        """Convert the validated payload into the engine's input value."""
        return SimulationInput(
            function_counts=dict(self.function_counts),
            cluster_assignments=dict(self.cluster_assignments),
            cluster_service_levels=dict(self.cluster_service_levels),
            num_simulations=self.num_simulations,
            vehicles=[VehicleType(id=v.id, name=v.name, length=v.length) for v in self.vehicles]
            if self.vehicles is not None
            else None,
            functions=[
                FunctionType(id=f.id, name=f.name, unit=f.unit, description=f.description) for f in self.functions
            ]
            if self.functions is not None
            else None,
            distributions=[
                DistributionType(id=d.id, name=d.name, delivery_days=d.delivery_days) for d in self.distributions
            ]
            if self.distributions is not None
            else None,
            vehicle_lengths=dict(self.vehicle_lengths),
            delivery_days=dict(self.delivery_days),
            delivery_profiles={key: p.to_profile() for key, p in self.delivery_profiles.items()},
            interval_minutes=self.interval_minutes,
            seed=self.seed,
        )


class VehicleResultModel(BaseModel):
    vehicle_id: str
    vehicle_name: str
    vehicle_length: float
    total_arrivals_per_day: float
    max_vehicles_per_service_level: dict[int, float]
    required_space: float
    cluster_id: int


class ClusterResultModel(BaseModel):
    cluster_id: int
    service_level: float
    total_space: float
    vehicle_ids: list[str]
    max_vehicles_per_service_level: dict[int, float]


class PeriodPeakModel(BaseModel):
    period: str
    space: float


class CurvePointModel(BaseModel):
    service_level: float
    space: float


class ProfileWarning(BaseModel):
    """Active vehicle entry whose period fractions do not add up to 100%."""
    profile: str
    vehicle_id: str
    fraction_sum: float


class SimulateResponse(BaseModel):
    """Response payload from /simulate."""
    vehicle_results: list[VehicleResultModel]
    cluster_results: list[ClusterResultModel]
    total_space: float
    total_arrivals_per_day: float
    peak_by_period: list[PeriodPeakModel]
    service_level_curve: list[CurvePointModel]
    num_simulations: int
    interval_minutes: float
    warnings: list[ProfileWarning] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: SimulationResult) -> "SimulateResponse":
        return cls.model_validate(asdict(result))


class ErrorResponse(BaseModel):
    """Single opaque failure message."""
    error: str


class ProfilesValidateRequest(BaseModel):
    """Request body for /profiles/validate."""
    vehicles: Optional[list[VehicleDef]] = Field(default=None, max_length=MAX_VEHICLES)
    delivery_profiles: dict[str, DeliveryProfileModel] = Field(default_factory=dict)


class ProfilesValidateResponse(BaseModel):
    warnings: list[ProfileWarning]

import math

import pytest
from pydantic import ValidationError

from curbspace.schemas import SimulateRequest
from curbspace.settings import settings


def test_malformed_counts_are_clamped():
    req = SimulateRequest.model_validate(
        {"function_counts": {"F1": -3, "F2": float("nan"), "F3": "abc", "F4": 12.7, "F5": 9}}
    )
    assert req.function_counts == {"F1": 0, "F2": 0, "F3": 0, "F4": 12, "F5": 9}


def test_trial_count_and_interval_are_clamped():
    low = SimulateRequest.model_validate({"num_simulations": 3, "interval_minutes": 0})
    high = SimulateRequest.model_validate({"num_simulations": 10_000_000, "interval_minutes": 600})
    missing = SimulateRequest.model_validate({"num_simulations": None, "interval_minutes": float("nan")})

    assert low.num_simulations == settings.min_simulations
    assert low.interval_minutes == 1
    assert high.num_simulations == settings.max_simulations
    assert high.interval_minutes == 60
    assert missing.num_simulations == settings.num_simulations
    assert missing.interval_minutes is None


def test_invalid_levels_clusters_and_lengths_are_dropped():
    req = SimulateRequest.model_validate(
        {
            "cluster_assignments": {"V1": 2, "V2": 0, "V3": "x"},
            "cluster_service_levels": {"1": 0.9, "2": 1.5, "3": 0, "4": float("nan")},
            "vehicle_lengths": {"V1": 3, "V2": -1, "V3": 0},
            "delivery_days": {"D1": 4, "D2": -2},
        }
    )
    assert req.cluster_assignments == {"V1": 2}
    assert req.cluster_service_levels == {1: 0.9}
    assert req.vehicle_lengths == {"V1": 3.0}
    assert req.delivery_days == {"D1": 4.0}


def test_profile_override_values_are_clamped():
    req = SimulateRequest.model_validate(
        {
            "delivery_profiles": {
                "F1_D7": {
                    "stops_per_week_per_unit": [0, 0, -1, 2],
                    "duration": [0, 0, float("nan"), 5],
                    "period_distribution": [[0, 0, 0, 0], [0, -0.5, 0.5, 0]],
                }
            }
        }
    )
    profile = req.to_input().delivery_profiles["F1_D7"]
    assert profile.stops_per_week_per_unit == (0, 0, 0, 2)
    assert profile.duration == (0, 0, 0, 5)
    assert profile.period_distribution[1] == (0, 0, 0.5, 0)


def test_catalog_overrides_are_limited_and_validated():
    too_many = [{"id": f"V{i}", "name": "x", "length": 5} for i in range(8)]
    with pytest.raises(ValidationError):
        SimulateRequest.model_validate({"vehicles": too_many})
    with pytest.raises(ValidationError):
        SimulateRequest.model_validate({"vehicles": [{"id": "V1", "name": "x", "length": 0}]})


def test_to_input_carries_overrides():
    req = SimulateRequest.model_validate(
        {
            "seed": 4,
            "function_counts": {"F1": 10},
            "vehicles": [{"id": "VX", "name": "Van", "length": 7.5}],
            "distributions": [{"id": "D7", "name": "Pakket", "delivery_days": 6}],
            "interval_minutes": 15,
        }
    )
    sim_input = req.to_input()
    assert sim_input.seed == 4
    assert sim_input.vehicles[0].length == 7.5
    assert sim_input.distributions[0].delivery_days == 6
    assert sim_input.functions is None
    assert math.isclose(sim_input.interval_minutes, 15)

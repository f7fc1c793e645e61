import pytest

from curbspace.sim.catalog import DISTRIBUTIONS, FUNCTIONS
from curbspace.sim.compiler import REFERENCE_DELIVERY_DAYS, compile_arrivals, stay_intervals
from curbspace.sim.entities import DeliveryProfile, DistributionType
from curbspace.sim.scenario import SimulationInput, resolve_scenario

PARCEL = [DistributionType("D7", "Pakket", 6)]


def _housing_plan(**overrides):
    sim_input = SimulationInput(function_counts={"F1": 362}, distributions=PARCEL, **overrides)
    scenario = resolve_scenario(sim_input)
    return scenario, compile_arrivals(scenario, sim_input.function_counts)


def test_housing_parcel_probabilities_and_expected_arrivals():
    scenario, plan = _housing_plan()
    daily = 1.426282 * 362 / 6

    assert plan.expected_arrivals_per_day[2] == pytest.approx(daily)
    assert round(plan.expected_arrivals_per_day[2], 1) == 86.1
    assert len(plan.specs[2]) == 1

    spec = plan.specs[2][0]
    assert spec.probabilities[0] == 0.0
    assert spec.probabilities[1] == pytest.approx(daily * 0.4 / 36)
    assert spec.probabilities[2] == pytest.approx(daily * 0.4 / 36)
    assert spec.probabilities[3] == pytest.approx(daily * 0.2 / 36)
    assert spec.stay_intervals == 1

    for v, specs in enumerate(plan.specs):
        if v != 2:
            assert specs == ()
            assert plan.expected_arrivals_per_day[v] == 0.0


def test_reference_days_ignore_distribution_delivery_days():
    assert REFERENCE_DELIVERY_DAYS == 6
    _, baseline = _housing_plan()
    _, overridden = _housing_plan(delivery_days={"D7": 2})

    assert overridden.specs == baseline.specs
    assert overridden.expected_arrivals_per_day == baseline.expected_arrivals_per_day


def test_stay_intervals_rounds_up_and_keeps_pass_through():
    assert stay_intervals(0, 10) == 1
    assert stay_intervals(2, 10) == 1
    assert stay_intervals(45, 10) == 5
    assert stay_intervals(60, 10) == 6
    assert stay_intervals(60, 7) == 9


def test_zero_negative_and_missing_counts_contribute_nothing():
    for counts in ({}, {"F1": 0}, {"F1": -5}, {"F1": float("nan")}):
        scenario = resolve_scenario(SimulationInput(function_counts=counts))
        plan = compile_arrivals(scenario, counts)
        assert all(specs == () for specs in plan.specs)
        assert sum(plan.expected_arrivals_per_day) == 0.0


def test_missing_profile_and_inactive_entries_are_skipped():
    # F8_D11 is registered but has no active vehicles; F2 has no D7 profile.
    scenario = resolve_scenario(
        SimulationInput(distributions=[DistributionType("D11", "Specialisten", 6), PARCEL[0]])
    )
    plan = compile_arrivals(scenario, {"F8": 10, "F2": 3})
    assert all(specs == () for specs in plan.specs)


def test_stops_without_period_placement_are_inactive():
    profile = DeliveryProfile(
        stops_per_week_per_unit=(0, 0, 5, 0, 0, 0),
        duration=(0, 0, 10, 0, 0, 0),
        period_distribution=((0, 0, 0, 0),) * 6,
    )
    scenario = resolve_scenario(SimulationInput(distributions=PARCEL, delivery_profiles={"F1_D7": profile}))
    plan = compile_arrivals(scenario, {"F1": 100})
    assert plan.specs[2] == ()


def test_unnormalized_fractions_are_used_as_given():
    profile = DeliveryProfile(
        stops_per_week_per_unit=(0, 0, 6, 0, 0, 0),
        duration=(0, 0, 0, 0, 0, 0),
        period_distribution=((), (), (0, 0.5, 0.5, 0.5)),
    )
    scenario = resolve_scenario(SimulationInput(distributions=PARCEL, delivery_profiles={"F1_D7": profile}))
    plan = compile_arrivals(scenario, {"F1": 1})
    assert plan.expected_arrivals_per_day[2] == pytest.approx(1.5)
    assert plan.specs[2][0].stay_intervals == 1


def test_default_catalog_compiles_for_every_function():
    counts = {f.id: 1 for f in FUNCTIONS}
    scenario = resolve_scenario(SimulationInput(function_counts=counts))
    plan = compile_arrivals(scenario, counts)
    assert len(plan.specs) == 6
    # No built-in profile sends bicycles (V1).
    assert plan.specs[0] == ()
    assert all(len(specs) > 0 for specs in plan.specs[1:])
    assert len(scenario.distributions) == len(DISTRIBUTIONS)

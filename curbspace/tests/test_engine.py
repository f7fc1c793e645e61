import numpy as np

from curbspace.sim.compiler import compile_arrivals
from curbspace.sim.engine import TrialEngine, make_rng
from curbspace.sim.entities import DeliveryProfile, DistributionType, FunctionType, VehicleType
from curbspace.sim.scenario import SimulationInput, resolve_scenario
from curbspace.sim.stats import percentile_inc

VANS = [VehicleType("VA", "Van", 5), VehicleType("VB", "Truck", 10)]
SHOPS = [FunctionType("FX", "Shop")]
ROUNDS = [DistributionType("DX", "Round", 6)]


def _certain_arrival_input(duration: float, **overrides) -> SimulationInput:
    # 216 stops/week over 6 days = 36 per day spread over 36 intervals per period -> p = 1.
    profile = DeliveryProfile(
        stops_per_week_per_unit=(216, 0),
        duration=(duration, 0),
        period_distribution=((1, 1, 1, 1), (0, 0, 0, 0)),
    )
    return SimulationInput(
        function_counts={"FX": 1},
        cluster_assignments={"VA": 1, "VB": 2},
        vehicles=VANS,
        functions=SHOPS,
        distributions=ROUNDS,
        delivery_profiles={"FX_DX": profile},
        **overrides,
    )


def _run(sim_input: SimulationInput, num_simulations: int, seed: int = 1, batch_size: int = 5000):
    scenario = resolve_scenario(sim_input)
    plan = compile_arrivals(scenario, sim_input.function_counts)
    engine = TrialEngine(scenario=scenario, plan=plan, rng=make_rng(seed), batch_size=batch_size)
    return scenario, plan, engine.run(num_simulations)


def test_certain_arrivals_fill_up_to_stay_length():
    scenario, plan, samples = _run(_certain_arrival_input(duration=30), num_simulations=20)

    assert plan.specs[0][0].probabilities == (1.0, 1.0, 1.0, 1.0)
    assert plan.specs[0][0].stay_intervals == 3
    assert scenario.total_intervals == 144

    # Departures are applied before arrivals, so presence settles at the stay length.
    assert samples.peaks[0].tolist() == [3] * 20
    first_period = samples.cluster_space[1][0]
    assert len(first_period) == 20 * 36
    assert first_period[:40].tolist() == [5.0] * 20 + [10.0] * 20
    assert first_period[-1] == 15.0
    assert samples.mean_present[0] > 2.9


def test_vehicle_without_specs_never_occupies_space():
    _, _, samples = _run(_certain_arrival_input(duration=10), num_simulations=15)

    assert samples.peaks[1].tolist() == [0] * 15
    for period in samples.cluster_space[2]:
        assert not period.any()
    for period in samples.cluster_vehicles[2]:
        assert not period.any()
    assert samples.mean_present[1] == 0.0


def test_fleet_space_covers_every_vehicle():
    _, _, samples = _run(_certain_arrival_input(duration=0), num_simulations=10)

    for p in range(4):
        assert np.array_equal(samples.fleet_space[p], samples.cluster_space[1][p])
        assert samples.cluster_vehicles[1][p].max() == 1


def test_batching_does_not_change_sample_shapes():
    sim_input = SimulationInput(function_counts={"F1": 362, "F3": 9})
    _, _, small = _run(sim_input, num_simulations=53, batch_size=7)
    _, _, large = _run(sim_input, num_simulations=53, batch_size=1000)

    for v in range(6):
        assert len(small.peaks[v]) == len(large.peaks[v]) == 53
    assert list(small.cluster_space) == [1]
    for cluster_id in small.cluster_space:
        for p in range(4):
            assert len(small.cluster_space[cluster_id][p]) == 53 * 36


def test_same_seed_gives_same_samples():
    sim_input = SimulationInput(function_counts={"F1": 362, "F5": 27})
    _, _, first = _run(sim_input, num_simulations=40, seed=11)
    _, _, second = _run(sim_input, num_simulations=40, seed=11)

    for a, b in zip(first.peaks, second.peaks):
        assert np.array_equal(a, b)
    for p in range(4):
        assert np.array_equal(first.fleet_space[p], second.fleet_space[p])


def test_housing_parcel_peak_bounds():
    sim_input = SimulationInput(
        function_counts={"F1": 362},
        distributions=[DistributionType("D7", "Pakket", 6)],
    )
    scenario, _, samples = _run(sim_input, num_simulations=1000, seed=5)
    peaks = samples.peaks[2]

    p95 = percentile_inc(peaks, 0.95)
    assert np.isfinite(p95)
    assert p95 >= samples.mean_present[2]
    assert p95 <= scenario.total_intervals
    # Vans only arrive from 6:00 on.
    assert not samples.cluster_space[1][0].any()
    assert samples.cluster_space[1][1].any()


def test_samples_are_sorted():
    _, _, samples = _run(SimulationInput(function_counts={"F1": 362, "F7": 8}), num_simulations=30)
    for peaks in samples.peaks:
        assert np.all(np.diff(peaks) >= 0)
    for periods in samples.cluster_space.values():
        for period in periods:
            assert np.all(np.diff(period) >= 0)

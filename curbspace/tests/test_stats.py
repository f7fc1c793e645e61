import pytest

from curbspace.sim.stats import (
    max_over_periods,
    percentile_inc,
    round_half_up,
    service_level_curve,
    service_level_key,
)


def test_percentile_empty_and_single_sample():
    assert percentile_inc([], 0.95) == 0.0
    for level in (0.01, 0.5, 0.95, 1.0):
        assert percentile_inc([7], level) == 7.0


def test_percentile_linear_interpolation_matches_inclusive_rank():
    values = [1, 2, 3, 4]
    assert percentile_inc(values, 0.5) == pytest.approx(2.5)
    # rank = 0.95 * 3 = 2.85 -> 3 + 0.85 * (4 - 3)
    assert percentile_inc(values, 0.95) == pytest.approx(3.85)
    assert percentile_inc(values, 1.0) == 4.0


def test_percentile_is_monotonic_in_service_level():
    values = sorted([0, 0, 1, 1, 1, 2, 3, 3, 5, 8, 13])
    previous = -1.0
    for pct in range(0, 101):
        current = percentile_inc(values, pct / 100)
        assert current >= previous
        previous = current


def test_service_level_key_rounds_to_percent():
    assert service_level_key(0.95) == 95
    assert service_level_key(0.9) == 90
    assert service_level_key(1.0) == 100


def test_max_over_periods_takes_worst_period():
    periods = [[0, 0, 10], [5, 5, 5], [1, 2, 3], []]
    assert max_over_periods(periods, 1.0) == 10.0
    assert max_over_periods(periods, 0.0) == 5.0
    assert max_over_periods([[], [], [], []], 0.95) == 0.0


def test_service_level_curve_sums_cluster_maxima():
    cluster_a = [[0, 4], [0, 8], [], []]
    cluster_b = [[2, 2], [0, 0], [], []]
    curve = service_level_curve([cluster_a, cluster_b])

    assert len(curve) == 51
    assert curve[0][0] == 0.5
    assert curve[-1] == (1.0, 10.0)
    assert curve[0][1] == pytest.approx(4.0 + 2.0)


def test_round_half_up():
    assert round_half_up(86.052347) == 86.05
    assert round_half_up(0.125) == 0.13
    assert round_half_up(0.0) == 0.0

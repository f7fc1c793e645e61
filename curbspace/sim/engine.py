from __future__ import annotations

"""
File: curbspace/sim/engine.py
Purpose: Monte Carlo trial engine for vehicle arrivals at the curb.
Key responsibilities:
- Walk the interval grid, draw Bernoulli arrivals per spec and schedule departures.
- Record the peak concurrency of every vehicle type per trial.
- Collect per-interval occupied space per cluster and for the whole fleet, by period.
"""

from dataclasses import dataclass
import threading

import numpy as np

from curbspace.sim.entities import ArrivalPlan, ArrivalSpec
from curbspace.sim.scenario import Scenario


@dataclass
class TrialSamples:
    """Sorted sample populations produced by one engine run."""
    num_simulations: int
    peaks: list[np.ndarray]
    mean_present: list[float]
    cluster_space: dict[int, list[np.ndarray]]
    cluster_vehicles: dict[int, list[np.ndarray]]
    fleet_space: list[np.ndarray]


class RunCancelled(Exception):
    """The caller abandoned the run; the remaining work was skipped."""


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Fresh generator per run; no seed means an independent stream."""
    return np.random.default_rng(seed)


class TrialEngine:
    """Runs independent trials in vectorized batches.

    Each row of a batch is one trial. Trials never share state; batching only
    changes how many of them advance through the interval grid together.
    Setting cancel_event stops the run before the next vehicle type or batch.
    """
    def __init__(
        self,
        scenario: Scenario,
        plan: ArrivalPlan,
        rng: np.random.Generator,
        batch_size: int = 5000,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.scenario = scenario
        self.plan = plan
        self.rng = rng
        self.batch_size = max(1, batch_size)
        self.cancel_event = cancel_event
        self.lengths = np.array([v.length for v in scenario.vehicles], dtype=np.float64)
        self.period_bounds = self._period_bounds()

    def run(self, num_simulations: int) -> TrialSamples:
        """Run all trials and return sorted per-vehicle, per-cluster and fleet samples."""
        num_vehicles = len(self.scenario.vehicles)
        num_periods = len(self.scenario.periods)

        peak_chunks: list[list[np.ndarray]] = [[] for _ in range(num_vehicles)]
        present_totals = [0.0] * num_vehicles
        cluster_space: dict[int, list[list[np.ndarray]]] = {
            c.id: [[] for _ in range(num_periods)] for c in self.scenario.clusters
        }
        cluster_vehicles: dict[int, list[list[np.ndarray]]] = {
            c.id: [[] for _ in range(num_periods)] for c in self.scenario.clusters
        }
        fleet_space: list[list[np.ndarray]] = [[] for _ in range(num_periods)]

        remaining = num_simulations
        while remaining > 0:
            size = min(self.batch_size, remaining)
            remaining -= size

            occupancy = []
            for v in range(num_vehicles):
                self._check_cancelled()
                occupancy.append(self._simulate_vehicle(self.plan.specs[v], size))
            for v, present in enumerate(occupancy):
                peak_chunks[v].append(self._peaks(present))
                present_totals[v] += float(present.sum())

            for cluster in self.scenario.clusters:
                space, vehicles = self._aggregate(occupancy, cluster.vehicle_indices, size)
                for p, (start, end) in enumerate(self.period_bounds):
                    cluster_space[cluster.id][p].append(space[:, start:end].ravel())
                    cluster_vehicles[cluster.id][p].append(vehicles[:, start:end].ravel())

            space, _ = self._aggregate(occupancy, range(num_vehicles), size)
            for p, (start, end) in enumerate(self.period_bounds):
                fleet_space[p].append(space[:, start:end].ravel())

        cells = num_simulations * self.scenario.total_intervals
        return TrialSamples(
            num_simulations=num_simulations,
            peaks=[_sorted_concat(chunks, np.int64) for chunks in peak_chunks],
            mean_present=[total / cells if cells else 0.0 for total in present_totals],
            cluster_space={cid: [_sorted_concat(c, np.float64) for c in periods] for cid, periods in cluster_space.items()},
            cluster_vehicles={
                cid: [_sorted_concat(c, np.int64) for c in periods] for cid, periods in cluster_vehicles.items()
            },
            fleet_space=[_sorted_concat(c, np.float64) for c in fleet_space],
        )

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise RunCancelled("run cancelled")

    def _simulate_vehicle(self, specs: tuple[ArrivalSpec, ...], size: int) -> np.ndarray:
        """Return the present count of one vehicle type per trial and interval."""
        total = self.scenario.total_intervals
        occupancy = np.zeros((size, total), dtype=np.int32)
        if not specs:
            return occupancy

        max_stay = max(spec.stay_intervals for spec in specs)
        departures = np.zeros((size, total + max_stay), dtype=np.int32)
        present = np.zeros(size, dtype=np.int32)
        active = [
            [(spec.probabilities[p], spec.stay_intervals) for spec in specs if spec.probabilities[p] > 0]
            for p in range(len(self.scenario.periods))
        ]

        for t, period in enumerate(self.scenario.interval_to_period):
            present -= departures[:, t]
            for probability, stay in active[period]:
                arrived = self.rng.random(size) < probability
                present += arrived
                departures[:, t + stay] += arrived
            occupancy[:, t] = present
        return occupancy

    def _aggregate(self, occupancy: list[np.ndarray], indices, size: int) -> tuple[np.ndarray, np.ndarray]:
        """Occupied space and vehicle count per trial and interval over a set of vehicles."""
        total = self.scenario.total_intervals
        space = np.zeros((size, total), dtype=np.float64)
        vehicles = np.zeros((size, total), dtype=np.int64)
        for v in indices:
            space += occupancy[v] * self.lengths[v]
            vehicles += occupancy[v]
        return space, vehicles

    @staticmethod
    def _peaks(present: np.ndarray) -> np.ndarray:
        if present.shape[1] == 0:
            return np.zeros(present.shape[0], dtype=np.int64)
        return present.max(axis=1).astype(np.int64)

    def _period_bounds(self) -> list[tuple[int, int]]:
        """Column range of every period in the interval grid."""
        bounds: list[tuple[int, int]] = []
        start = 0
        for p in range(len(self.scenario.periods)):
            count = self.scenario.interval_to_period.count(p)
            bounds.append((start, start + count))
            start += count
        return bounds


def _sorted_concat(chunks: list[np.ndarray], dtype) -> np.ndarray:
    if not chunks:
        return np.zeros(0, dtype=dtype)
    return np.sort(np.concatenate(chunks).astype(dtype, copy=False))

from __future__ import annotations

"""
File: curbspace/sim/simulation.py
Purpose: End-to-end loading-space simulation for one request.
Key responsibilities:
- Resolve catalogs, compile arrival specs, run trials, aggregate percentiles.
Key entrypoints:
- run_simulation()
"""

import logging
import threading
import time

from curbspace.settings import REPORTING_SERVICE_LEVELS, settings
from curbspace.sim.catalog import period_distribution_warnings
from curbspace.sim.compiler import compile_arrivals
from curbspace.sim.engine import TrialEngine, make_rng
from curbspace.sim.result import SimulationResult, assemble_result, reporting_levels
from curbspace.sim.scenario import SimulationInput, resolve_scenario

logger = logging.getLogger("curbspace-sim")


def run_simulation(
    sim_input: SimulationInput,
    cancel_event: threading.Event | None = None,
    batch_size: int | None = None,
) -> SimulationResult:
    """Run the Monte Carlo model and return the sized loading space.

    Raises RunCancelled once cancel_event is set.
    """
    started = time.perf_counter()
    num_simulations = sim_input.num_simulations or settings.num_simulations

    scenario = resolve_scenario(sim_input)
    plan = compile_arrivals(scenario, sim_input.function_counts)
    engine = TrialEngine(
        scenario=scenario,
        plan=plan,
        rng=make_rng(sim_input.seed),
        batch_size=batch_size or settings.batch_size,
        cancel_event=cancel_event,
    )
    samples = engine.run(num_simulations)

    levels = reporting_levels(scenario, REPORTING_SERVICE_LEVELS, sim_input.cluster_service_levels.values())
    result = assemble_result(
        scenario=scenario,
        plan=plan,
        samples=samples,
        levels=levels,
        peak_report_level=settings.peak_report_level,
        warnings=period_distribution_warnings(scenario.profiles, scenario.vehicles, len(scenario.periods)),
    )
    logger.info(
        "simulation done trials=%s intervals=%s clusters=%s total_space=%.2f elapsed_s=%.3f",
        num_simulations,
        scenario.total_intervals,
        len(scenario.clusters),
        result.total_space,
        time.perf_counter() - started,
    )
    return result

from __future__ import annotations

"""
File: curbspace/main.py
Purpose: FastAPI entrypoint for the loading-space simulator.
Key responsibilities:
- Expose /health, /config, /simulate and /profiles/validate endpoints.
- Delegate runs to the session-aware simulation runner.
Key entrypoints:
- health()
- simulate()
Config/env vars:
- CURBSPACE_HOST, CURBSPACE_PORT
- SIM_NUM_SIMULATIONS, SIM_MIN_SIMULATIONS, SIM_MAX_SIMULATIONS
- SIM_INTERVAL_MINUTES, SIM_BATCH_SIZE, SIM_WORKERS
"""

import logging
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from curbspace.runner import SimulationFailed, SimulationRunner, SimulationSuperseded
from curbspace.schemas import (
    ErrorResponse,
    ProfilesValidateRequest,
    ProfilesValidateResponse,
    SimulateRequest,
    SimulateResponse,
)
from curbspace.settings import (
    MAX_DISTRIBUTIONS,
    MAX_FUNCTIONS,
    MAX_INTERVAL_MINUTES,
    MAX_VEHICLES,
    MIN_INTERVAL_MINUTES,
    REPORTING_SERVICE_LEVELS,
    settings,
)
from curbspace.sim.catalog import (
    DEFAULT_CLUSTER_SERVICE_LEVELS,
    DEFAULT_CLUSTERS,
    DEFAULT_FUNCTION_COUNTS,
    DELIVERY_PROFILES,
    DISTRIBUTIONS,
    FUNCTIONS,
    PERIODS,
    PROFILE_METADATA,
    VEHICLES,
    period_distribution_warnings,
)
from curbspace.sim.entities import VehicleType

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s curbspace-api %(message)s")
logger = logging.getLogger("curbspace-api")

app = FastAPI(title="curbspace", version="1.0.0")
runner = SimulationRunner()


@app.on_event("shutdown")
def shutdown_event() -> None:
    """Drop in-flight runs and stop the executor."""
    runner.shutdown()


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness/readiness check for the simulator."""
    return {"status": "ok"}


@app.get("/config")
def config() -> dict[str, Any]:
    """Return built-in catalogs, defaults and limits for callers."""
    return {
        "vehicles": [asdict(v) for v in VEHICLES],
        "functions": [asdict(f) for f in FUNCTIONS],
        "distributions": [asdict(d) for d in DISTRIBUTIONS],
        "periods": [asdict(p) for p in PERIODS],
        "delivery_profiles": {key: asdict(p) for key, p in DELIVERY_PROFILES.items()},
        "profile_metadata": PROFILE_METADATA,
        "defaults": {
            "function_counts": DEFAULT_FUNCTION_COUNTS,
            "cluster_assignments": DEFAULT_CLUSTERS,
            "cluster_service_levels": DEFAULT_CLUSTER_SERVICE_LEVELS,
            "num_simulations": settings.num_simulations,
            "interval_minutes": settings.interval_minutes,
        },
        "reporting_service_levels": list(REPORTING_SERVICE_LEVELS),
        "limits": {
            "min_simulations": settings.min_simulations,
            "max_simulations": settings.max_simulations,
            "min_interval_minutes": MIN_INTERVAL_MINUTES,
            "max_interval_minutes": MAX_INTERVAL_MINUTES,
            "max_functions": MAX_FUNCTIONS,
            "max_vehicles": MAX_VEHICLES,
            "max_distributions": MAX_DISTRIBUTIONS,
        },
    }


@app.post(
    "/simulate",
    response_model=SimulateResponse,
    responses={409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def simulate(req: SimulateRequest) -> Any:
    """Run the Monte Carlo model off the event loop and return the sized space."""
    try:
        result = await runner.submit(req.to_input(), session_id=req.session_id)
    except SimulationSuperseded:
        return JSONResponse(status_code=409, content={"error": "superseded by a newer run"})
    except SimulationFailed as exc:
        return JSONResponse(status_code=500, content={"error": str(exc)})
    return SimulateResponse.from_result(result)


@app.post("/profiles/validate", response_model=ProfilesValidateResponse)
def validate_profiles(req: ProfilesValidateRequest) -> ProfilesValidateResponse:
    """Report active vehicle entries whose period fractions do not sum to 100%."""
    vehicles = (
        [VehicleType(id=v.id, name=v.name, length=v.length) for v in req.vehicles]
        if req.vehicles is not None
        else list(VEHICLES)
    )
    profiles = {**DELIVERY_PROFILES, **{key: p.to_profile() for key, p in req.delivery_profiles.items()}}
    warnings = period_distribution_warnings(profiles, vehicles, len(PERIODS))
    return ProfilesValidateResponse.model_validate({"warnings": warnings})

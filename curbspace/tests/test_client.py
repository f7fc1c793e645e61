import asyncio

import httpx
import pytest

from curbspace.client import SimulationClientError, request_simulation
from curbspace.schemas import SimulateResponse
from curbspace.sim.scenario import SimulationInput
from curbspace.sim.simulation import run_simulation


def _zero_result_payload() -> dict:
    result = run_simulation(SimulationInput(num_simulations=5, seed=1))
    return SimulateResponse.from_result(result).model_dump(mode="json")


def test_request_simulation_parses_result():
    payload = _zero_result_payload()
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append({"path": request.url.path, "body": request.content})
        return httpx.Response(200, json=payload)

    response = asyncio.run(
        request_simulation(
            "http://curbspace",
            {"function_counts": {}},
            transport=httpx.MockTransport(handler),
        )
    )

    assert seen[0]["path"] == "/simulate"
    assert isinstance(response, SimulateResponse)
    assert response.total_space == 0.0
    assert len(response.service_level_curve) == 51


def test_request_simulation_raises_with_server_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "simulation failed: bad profile"})

    with pytest.raises(SimulationClientError) as excinfo:
        asyncio.run(request_simulation("http://curbspace", {}, transport=httpx.MockTransport(handler)))
    assert str(excinfo.value) == "simulation failed: bad profile"

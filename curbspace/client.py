from __future__ import annotations

"""
File: curbspace/client.py
Purpose: HTTP client for the curbspace /simulate endpoint.
Key responsibilities:
- Post a simulation request and return the parsed response.
- Surface the server's single error message on failure.
"""

from typing import Any

import httpx

from curbspace.schemas import SimulateResponse


class SimulationClientError(Exception):
    """The service answered with an error message instead of a result."""


async def request_simulation(
    base_url: str,
    payload: dict[str, Any],
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SimulateResponse:
    """Call /simulate and return the validated response.

    No timeout by default; large trial counts can take a while.
    """
    async with httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport) as client:
        resp = await client.post("/simulate", json=payload)
    if resp.status_code != 200:
        try:
            data = resp.json()
        except ValueError:
            data = None
        message = str(data.get("error") or resp.text) if isinstance(data, dict) else resp.text
        raise SimulationClientError(message or f"simulation failed status={resp.status_code}")
    return SimulateResponse.model_validate(resp.json())

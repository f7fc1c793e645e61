from __future__ import annotations

"""
File: curbspace/worker.py
Purpose: RabbitMQ worker that runs simulations requested over the message bus.
Key responsibilities:
- Consume simulation.requested and run each request off the event loop.
- Publish exactly one simulation.completed (result or error) per surviving request.
- Discard a session's older request when a newer one arrives.
Key entrypoints:
- SimulationWorker.run()
Config/env vars:
- RABBITMQ_*, SIM_* (see settings)
"""

import asyncio
from datetime import datetime, timezone
import json
import logging
from typing import Any

import aio_pika
from pydantic import ValidationError

from curbspace.mq import COMPLETED_ROUTING_KEY, connect, publish_event, setup_topology
from curbspace.runner import SimulationFailed, SimulationRunner, SimulationSuperseded
from curbspace.schemas import SimulateRequest, SimulateResponse
from curbspace.settings import rabbit_url, settings

logger = logging.getLogger("curbspace-worker")


class SimulationWorker:
    """RabbitMQ consumer for simulation requests."""
    def __init__(self, runner: SimulationRunner | None = None) -> None:
        self.runner = runner or SimulationRunner()
        self.exchange: aio_pika.abc.AbstractExchange | None = None
        self.pending: set[asyncio.Task] = set()

    async def run(self) -> None:
        """Connect to RabbitMQ, declare the request queue, and begin consuming."""
        connection = await connect(rabbit_url())
        channel = await connection.channel()
        await channel.set_qos(prefetch_count=20)

        exchange, q_requested = await setup_topology(channel, settings.exchange_name)
        self.exchange = exchange

        await q_requested.consume(self._on_request)

        logger.info("simulation worker started")
        await asyncio.Future()

    async def _on_request(self, message: aio_pika.IncomingMessage) -> None:
        """Validate a simulation.requested event and schedule its run."""
        try:
            event = json.loads(message.body.decode("utf-8"))
        except json.JSONDecodeError:
            logger.warning("dropping invalid JSON routing_key=%s", message.routing_key)
            await message.ack()
            return

        try:
            request_id = str(event.get("request_id", ""))
            if not request_id:
                logger.warning("simulation.requested missing request_id")
                return
            try:
                req = SimulateRequest.model_validate(event.get("input", {}))
            except ValidationError as exc:
                await self._publish_completed(request_id, None, error=f"simulation failed: {exc}")
                return

            session_id = str(event.get("session_id") or req.session_id or request_id)
            task = asyncio.create_task(self._simulate_request(request_id, session_id, req))
            self.pending.add(task)
            task.add_done_callback(self.pending.discard)
        except Exception as exc:  # noqa: BLE001
            logger.exception("simulation.requested handler error: %s", exc)
        finally:
            await message.ack()

    async def _simulate_request(self, request_id: str, session_id: str, req: SimulateRequest) -> None:
        """Run one request and publish its outcome."""
        try:
            try:
                result = await self.runner.submit(req.to_input(), session_id=session_id)
            except SimulationSuperseded:
                logger.info("request superseded request_id=%s session_id=%s", request_id, session_id)
                return
            except SimulationFailed as exc:
                await self._publish_completed(request_id, session_id, error=str(exc))
                return

            payload = SimulateResponse.from_result(result).model_dump(mode="json")
            await self._publish_completed(request_id, session_id, result=payload)
            logger.info(
                "request completed request_id=%s session_id=%s total_space=%.2f",
                request_id,
                session_id,
                result.total_space,
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("simulation request error request_id=%s: %s", request_id, exc)

    async def _publish_completed(
        self,
        request_id: str,
        session_id: str | None,
        result: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> None:
        """Publish simulation.completed carrying a result or one error message."""
        if self.exchange is None:
            return
        payload: dict[str, Any] = {
            "event_type": COMPLETED_ROUTING_KEY,
            "request_id": request_id,
            "session_id": session_id,
            "status": "failed" if error is not None else "completed",
            "ts_utc": datetime.now(timezone.utc).isoformat(),
        }
        if error is not None:
            payload["error"] = error
        else:
            payload["result"] = result
        await publish_event(self.exchange, COMPLETED_ROUTING_KEY, payload)


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s curbspace-worker %(message)s")
    worker = SimulationWorker()
    await worker.run()


if __name__ == "__main__":
    asyncio.run(main())

from __future__ import annotations

"""
File: curbspace/mq.py
Purpose: RabbitMQ connectivity and queue topology for the simulation worker.
Key responsibilities:
- Declare exchange and the simulation request queue.
- Publish simulation.completed events.
"""

import json
from typing import Any

import aio_pika
from aio_pika import ExchangeType


REQUEST_ROUTING_KEY = "simulation.requested"
COMPLETED_ROUTING_KEY = "simulation.completed"


async def connect(rabbit_url: str) -> aio_pika.RobustConnection:
    """Open the worker's connection; reconnects survive broker restarts."""
    return await aio_pika.connect_robust(rabbit_url)


async def setup_topology(channel: aio_pika.abc.AbstractRobustChannel, exchange_name: str):
    """Declare exchange/queue and bind the request routing key."""
    exchange = await channel.declare_exchange(exchange_name, ExchangeType.TOPIC, durable=True)

    queue_requested = await channel.declare_queue("curbspace.simulation_requested", durable=True)
    await queue_requested.bind(exchange, routing_key=REQUEST_ROUTING_KEY)

    return exchange, queue_requested


async def publish_event(exchange: aio_pika.abc.AbstractExchange, routing_key: str, payload: dict[str, Any]) -> None:
    """Publish a simulation event (completed or failed) as persistent JSON."""
    body = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
    msg = aio_pika.Message(
        body=body,
        content_type="application/json",
        delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
    )
    await exchange.publish(msg, routing_key=routing_key)

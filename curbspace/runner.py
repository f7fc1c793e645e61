from __future__ import annotations

"""
File: curbspace/runner.py
Purpose: Run simulations off the event loop, at most one per caller session.
Key responsibilities:
- Offload the CPU-bound engine to an executor.
- Replace (stop and discard) a session's in-flight run when a new one arrives.
- Collapse engine failures into a single message.
Key entrypoints:
- SimulationRunner.submit()
"""

import asyncio
from concurrent.futures import Executor, ThreadPoolExecutor
import logging
import threading
from typing import Callable

from curbspace.settings import settings
from curbspace.sim.engine import RunCancelled
from curbspace.sim.result import SimulationResult
from curbspace.sim.scenario import SimulationInput
from curbspace.sim.simulation import run_simulation

logger = logging.getLogger("curbspace-runner")


class SimulationFailed(Exception):
    """The run raised; carries the one message shown to the caller."""


class SimulationSuperseded(Exception):
    """The run was discarded because the same session started a newer one."""


class SimulationRunner:
    """Executor-backed simulation runner keyed by caller session.

    Replacing a run sets its cancel event, so the executor thread stops at the
    next engine checkpoint, and cancels the task awaiting it, so its result is
    never delivered. A run still queued in the executor never starts.
    """
    def __init__(
        self,
        executor: Executor | None = None,
        simulate: Callable[[SimulationInput, threading.Event], SimulationResult] = run_simulation,
    ) -> None:
        self.executor = executor or ThreadPoolExecutor(max_workers=settings.workers, thread_name_prefix="curbspace-sim")
        self.simulate = simulate
        self.run_tasks: dict[str, asyncio.Task] = {}
        self.cancel_events: dict[asyncio.Task, threading.Event] = {}
        self._superseded: set[asyncio.Task] = set()

    async def submit(self, sim_input: SimulationInput, session_id: str | None = None) -> SimulationResult:
        """Run one simulation and return its result, replacing the session's previous run."""
        if session_id is not None:
            previous = self.run_tasks.get(session_id)
            if previous is not None and not previous.done():
                logger.info("replacing in-flight run session_id=%s", session_id)
                self._superseded.add(previous)
                self._stop(previous)

        cancel_event = threading.Event()
        task = asyncio.create_task(self._execute(sim_input, session_id, cancel_event))
        self.cancel_events[task] = cancel_event
        task.add_done_callback(lambda done: self.cancel_events.pop(done, None))
        if session_id is not None:
            self.run_tasks[session_id] = task
            task.add_done_callback(lambda done, sid=session_id: self._cleanup_run(sid, done))

        try:
            return await task
        except asyncio.CancelledError:
            if task in self._superseded:
                self._superseded.discard(task)
                raise SimulationSuperseded(f"run superseded session_id={session_id}") from None
            raise

    def active_sessions(self) -> list[str]:
        return sorted(sid for sid, task in self.run_tasks.items() if not task.done())

    def shutdown(self) -> None:
        for task in list(self.cancel_events):
            self._stop(task)
        self.run_tasks.clear()
        self.executor.shutdown(wait=False, cancel_futures=True)

    def _stop(self, task: asyncio.Task) -> None:
        cancel_event = self.cancel_events.get(task)
        if cancel_event is not None:
            cancel_event.set()
        task.cancel()

    async def _execute(
        self,
        sim_input: SimulationInput,
        session_id: str | None,
        cancel_event: threading.Event,
    ) -> SimulationResult:
        """Run the engine in the executor and translate failures."""
        loop = asyncio.get_running_loop()
        logger.info(
            "run started session_id=%s trials=%s interval_minutes=%s",
            session_id,
            sim_input.num_simulations,
            sim_input.interval_minutes,
        )
        try:
            return await loop.run_in_executor(self.executor, self.simulate, sim_input, cancel_event)
        except asyncio.CancelledError:
            raise
        except RunCancelled:
            logger.info("run stopped session_id=%s", session_id)
            raise SimulationSuperseded(f"run superseded session_id={session_id}") from None
        except Exception as exc:  # noqa: BLE001
            logger.exception("run failed session_id=%s err=%s", session_id, exc)
            raise SimulationFailed(f"simulation failed: {exc}") from exc

    def _cleanup_run(self, session_id: str, task: asyncio.Task) -> None:
        """Forget a finished run unless a newer one already took its place."""
        if self.run_tasks.get(session_id) is task:
            self.run_tasks.pop(session_id, None)

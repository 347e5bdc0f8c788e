"""
Fixed-Rate Tick Scheduling.

Runs the physics tick and the autopilot decision tick as two periodic
asyncio tasks on one event loop. Ticks are synchronous, so the two never
interleave and each sees a fully updated session. A task stops on its own
once the run leaves the running phase; stop() cancels whatever is left.
"""

import asyncio
import logging
from typing import Callable, List, Optional

from flapsim.session import SessionController
from flapsim.state import PHASE_RUNNING

logger = logging.getLogger(__name__)


class TickScheduler:
    """
    Drive a SessionController in real time.

    Usage:
        async with TickScheduler(controller) as scheduler:
            await scheduler.run_until_over()
    """

    def __init__(
        self,
        controller: SessionController,
        tick_rate: float = None,
        pilot_rate: float = None
    ):
        self.controller = controller
        self.tick_rate = controller.config.tick_rate if tick_rate is None else tick_rate
        self.pilot_rate = controller.config.pilot_rate if pilot_rate is None else pilot_rate
        if self.tick_rate <= 0 or self.pilot_rate <= 0:
            raise ValueError("tick_rate and pilot_rate must be positive")

        self.physics_task: Optional[asyncio.Task] = None
        self.pilot_task: Optional[asyncio.Task] = None
        self.ticks_run = 0
        self.decisions_run = 0

    @property
    def running(self) -> bool:
        return any(t is not None and not t.done() for t in self.tasks)

    @property
    def tasks(self) -> List[Optional[asyncio.Task]]:
        return [self.physics_task, self.pilot_task]

    def start(self) -> None:
        """Start both loops. Safe to call again after a run ends."""
        if self.running:
            return
        self.ticks_run = 0
        self.decisions_run = 0
        self.physics_task = asyncio.create_task(
            self._periodic(self._physics_tick, self.tick_rate), name="physics-tick"
        )
        self.pilot_task = asyncio.create_task(
            self._periodic(self._pilot_tick, self.pilot_rate), name="pilot-tick"
        )
        logger.debug("Scheduler started at %s/%s Hz", self.tick_rate, self.pilot_rate)

    async def stop(self) -> None:
        """Cancel both loops and wait for them to finish."""
        pending = [t for t in self.tasks if t is not None and not t.done()]
        for task in pending:
            task.cancel()
        for task in pending:
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.debug(
            "Scheduler stopped after %d ticks, %d decisions",
            self.ticks_run, self.decisions_run,
        )

    async def run_until_over(self, timeout: float = None) -> None:
        """
        Wait until the physics loop exits, then stop the autopilot loop.

        Starts fresh loops if none are running, so it can drive one run after
        another on the same scheduler.
        """
        if not self.running:
            self.start()
        try:
            await asyncio.wait_for(asyncio.shield(self.physics_task), timeout)
        finally:
            await self.stop()

    async def __aenter__(self) -> "TickScheduler":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    def _physics_tick(self) -> None:
        self.controller.tick()
        self.ticks_run += 1

    def _pilot_tick(self) -> None:
        self.controller.autopilot_tick()
        self.decisions_run += 1

    async def _periodic(self, fn: Callable[[], None], rate: float) -> None:
        """Call fn at a fixed rate while the session is running."""
        loop = asyncio.get_running_loop()
        period = 1.0 / rate
        next_deadline = loop.time()

        while self.controller.phase == PHASE_RUNNING:
            fn()
            next_deadline += period
            delay = next_deadline - loop.time()
            if delay < 0:
                # Fell behind; don't try to catch up with a burst of ticks
                next_deadline = loop.time()
                delay = 0
            await asyncio.sleep(delay)

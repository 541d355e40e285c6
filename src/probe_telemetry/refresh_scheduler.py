"""
Periodic refresh driver owned by a consuming view.

``start`` runs the task immediately and then once per interval until ``stop``.
Cycles are launched as independent asyncio tasks: a slow cycle does not delay
the next tick, so two cycles may run concurrently. ``stop`` cancels the tick
loop and every in-flight cycle, so a fetch pending at teardown never reaches
the code that would apply its result.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

import aiohttp

from .constants import REFRESH_INTERVAL_SECONDS
from .exceptions import ApplicationError

logger = logging.getLogger(__name__)

RefreshTask = Callable[[], Awaitable[None]]
SleepFunction = Callable[[float], Awaitable[None]]

# Failures logged at the scheduler boundary; the loop keeps ticking.
CYCLE_ERRORS = (
    ApplicationError,
    aiohttp.ClientError,
    asyncio.TimeoutError,
    OSError,
    ValueError,
    KeyError,
    TypeError,
    RuntimeError,
)


class RefreshScheduler:
    """Runs a refresh task now and every ``interval_seconds`` after that."""

    def __init__(
        self,
        name: str = "refresh",
        interval_seconds: float = REFRESH_INTERVAL_SECONDS,
        *,
        sleep: Optional[SleepFunction] = None,
    ):
        """
        Initialize scheduler.

        Args:
            name: Label used in log messages and task names
            interval_seconds: Default delay between cycle launches
            sleep: Awaitable delay function; tests inject a manual clock here
        """
        self.name = name
        self.interval_seconds = interval_seconds
        self._sleep: SleepFunction = sleep or asyncio.sleep
        self._ticker_task: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()
        self._cycle_count = 0
        self._failed_cycles = 0

    @property
    def is_running(self) -> bool:
        return self._ticker_task is not None

    @property
    def cycle_count(self) -> int:
        """Number of cycles launched since construction."""
        return self._cycle_count

    @property
    def failed_cycles(self) -> int:
        return self._failed_cycles

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def start(self, task: RefreshTask, interval_seconds: Optional[float] = None) -> None:
        """
        Launch ``task`` immediately, then re-launch it every interval.

        Must be called from a running event loop. Calling ``start`` on a running
        scheduler is a no-op.
        """
        if self._ticker_task is not None:
            logger.warning("Refresh scheduler %s already started", self.name)
            return

        interval = self.interval_seconds if interval_seconds is None else interval_seconds
        if interval <= 0:
            raise ValueError(f"Refresh interval must be positive (got {interval})")

        logger.info("Starting refresh scheduler %s (interval: %ss)", self.name, interval)
        self._launch_cycle(task)
        self._ticker_task = asyncio.create_task(self._tick_loop(task, interval), name=f"{self.name}-ticker")

    def stop(self) -> None:
        """
        Cancel the ticker and all in-flight cycles. Idempotent.

        After this returns no further cycle starts, and any cycle still awaiting
        a fetch is cancelled at that await.
        """
        ticker = self._ticker_task
        if ticker is None and not self._in_flight:
            return

        logger.info("Stopping refresh scheduler %s", self.name)
        self._ticker_task = None
        if ticker is not None and not ticker.done():
            ticker.cancel()
        for cycle in list(self._in_flight):
            if not cycle.done():
                cycle.cancel()
        self._in_flight.clear()

    async def stop_and_wait(self) -> None:
        """Stop, then wait for cancelled tasks to unwind."""
        pending = [task for task in (self._ticker_task, *self._in_flight) if task is not None]
        self.stop()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _tick_loop(self, task: RefreshTask, interval: float) -> None:
        try:
            while True:
                await self._sleep(interval)
                self._launch_cycle(task)
        except asyncio.CancelledError:
            logger.debug("Refresh scheduler %s ticker cancelled", self.name)
            raise

    def _launch_cycle(self, task: RefreshTask) -> None:
        self._cycle_count += 1
        cycle = asyncio.create_task(
            self._run_cycle(task, self._cycle_count), name=f"{self.name}-cycle-{self._cycle_count}"
        )
        self._in_flight.add(cycle)
        cycle.add_done_callback(self._on_cycle_done)

    def _on_cycle_done(self, cycle: asyncio.Task) -> None:
        self._in_flight.discard(cycle)
        if cycle.cancelled():
            return
        exc = cycle.exception()
        if exc is not None:
            self._failed_cycles += 1
            logger.error("Unexpected error in %s of %s", cycle.get_name(), self.name, exc_info=exc)

    async def _run_cycle(self, task: RefreshTask, cycle_number: int) -> None:
        try:
            await task()
        except asyncio.CancelledError:
            logger.debug("Refresh cycle %d of %s cancelled", cycle_number, self.name)
            raise
        except CYCLE_ERRORS:
            self._failed_cycles += 1
            logger.exception("Refresh cycle %d of %s failed", cycle_number, self.name)

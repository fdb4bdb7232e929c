"""Scheduler driving catalog refreshes on a fixed interval."""
import asyncio
import enum
import logging
import math
import time
from typing import Awaitable, Callable, Optional
from registry_lister.application.refresh_service import CatalogRefresher


logger = logging.getLogger(__name__)


class SchedulerState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class RefreshScheduler:
    """Runs the refresher once at start, then once per interval.

    Ticks are anchored to the start time. A tick that passes while a
    cycle is running fires as soon as that cycle ends; any further
    missed ticks are dropped rather than queued, so cycles never overlap.
    A stop request is honoured only between cycles or while waiting.
    """

    def __init__(
        self,
        refresher: CatalogRefresher,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """Initialize scheduler.

        Args:
            refresher: Service that performs one refresh cycle
            interval: Seconds between ticks
            clock: Monotonic time source in seconds
            sleep: Coroutine function used to wait for the next tick
        """
        if not math.isfinite(interval) or interval <= 0:
            raise ValueError("interval must be a positive finite number")
        self._refresher = refresher
        self._interval = interval
        self._clock = clock
        self._sleep = sleep
        self._state = SchedulerState.IDLE
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._next_tick = 0.0
        self.cycles_completed = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    async def _run_cycle(self) -> None:
        try:
            await self._refresher.refresh()
        except Exception as e:
            logger.error(f"Refresh cycle failed unexpectedly: {e}", exc_info=True)
        self.cycles_completed += 1

    async def _wait(self, delay: float) -> None:
        """Sleep for `delay` seconds or until stop is requested."""
        sleeper = asyncio.ensure_future(self._sleep(delay))
        stopper = asyncio.ensure_future(self._stop_event.wait())
        try:
            await asyncio.wait({sleeper, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in (sleeper, stopper):
                if not waiter.done():
                    waiter.cancel()

    async def _wait_for_next_tick(self) -> None:
        delay = self._next_tick - self._clock()
        if delay > 0:
            await self._wait(delay)
        # Collapse ticks that elapsed while the last cycle was running
        missed = int((self._clock() - self._next_tick) // self._interval)
        self._next_tick += self._interval * (max(missed, 0) + 1)

    async def run(self) -> None:
        """Run refresh cycles until `stop` is requested."""
        if self._state is not SchedulerState.IDLE:
            raise RuntimeError(f"scheduler cannot run while {self._state.value}")
        self._state = SchedulerState.RUNNING
        logger.info(f"Starting refresh scheduler with a {self._interval:g} second interval")

        try:
            self._next_tick = self._clock() + self._interval
            await self._run_cycle()
            while not self._stop_event.is_set():
                await self._wait_for_next_tick()
                if self._stop_event.is_set():
                    break
                await self._run_cycle()
        finally:
            self._state = SchedulerState.STOPPED
            logger.info(f"Refresh scheduler stopped after {self.cycles_completed} cycles")

    def start(self) -> asyncio.Task:
        """Start the refresh loop as a background task."""
        if self._task is not None and not self._task.done():
            raise RuntimeError("scheduler is already running")
        self._task = asyncio.ensure_future(self.run())
        return self._task

    def request_stop(self) -> None:
        """Ask the loop to exit at its next suspension point."""
        self._stop_event.set()

    async def stop(self) -> None:
        """Request a stop and wait for the current cycle to finish."""
        self.request_stop()
        if self._task is not None:
            await self._task
            self._task = None
        self._state = SchedulerState.STOPPED

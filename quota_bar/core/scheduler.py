#!/usr/bin/env python3
"""
Refresh Scheduler Module

Recurring asyncio timer that triggers refresh cycles at a configurable
interval, replaceable at runtime.

Each tick spawns the cycle as its own task without awaiting it, so a slow
fetch can overlap the next tick. Whichever cycle finishes last determines
what the indicators show.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)

CycleFactory = Callable[[bool], Awaitable[object]]


class RefreshScheduler:
    """
    Single recurring timer driving fetch+aggregate cycles.
    """

    def __init__(self, cycle: CycleFactory):
        """
        Initialize refresh scheduler.

        Args:
            cycle: Coroutine function run for every cycle, called with bypass_cache
        """
        self._cycle = cycle
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._handle: Optional[asyncio.TimerHandle] = None
        self._interval: Optional[float] = None
        self._inflight: Set[asyncio.Task] = set()

        logger.debug("RefreshScheduler initialized (stopped)")

    @property
    def interval(self) -> Optional[float]:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._handle is not None

    @property
    def next_tick_at(self) -> Optional[float]:
        """Event loop time of the next scheduled tick, None when stopped."""
        if self._handle is None:
            return None
        return self._handle.when()

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)

    def start(self, interval_seconds: float) -> None:
        """
        Start ticking every interval_seconds. Must be called from the event loop.

        Calling start() on a running scheduler behaves like reschedule().
        """
        _validate_interval(interval_seconds)
        self._loop = asyncio.get_running_loop()
        self._arm(interval_seconds)
        logger.info(f"Refresh scheduler started. Interval: {interval_seconds:g} seconds.")

    def reschedule(self, interval_seconds: float) -> None:
        """
        Replace the timer; the new interval counts from now.
        """
        _validate_interval(interval_seconds)
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        previous = self._interval
        self._arm(interval_seconds)
        logger.info(f"Refresh scheduler rescheduled: {previous} -> {interval_seconds:g} seconds")

    def stop(self) -> None:
        """Cancel the timer. Idempotent; in-flight cycles are left to finish."""
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        logger.info("Refresh scheduler stopped.")

    def trigger_now(self, bypass_cache: bool = True) -> asyncio.Task:
        """
        Run one cycle immediately, outside the timer cadence.

        Manual refreshes bypass the fetcher cache by default.
        """
        return self._spawn(bypass_cache)

    async def wait_idle(self) -> None:
        """Wait until every in-flight cycle has finished."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    def _arm(self, interval_seconds: float) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._interval = interval_seconds
        self._handle = self._loop.call_later(interval_seconds, self._on_tick)

    def _on_tick(self) -> None:
        # Re-arm first so the cadence does not depend on cycle duration
        self._handle = self._loop.call_later(self._interval, self._on_tick)
        if self._inflight:
            logger.debug(f"Tick fired with {len(self._inflight)} cycle(s) still in flight")
        self._spawn(False)

    def _spawn(self, bypass_cache: bool) -> asyncio.Task:
        loop = self._loop or asyncio.get_running_loop()
        task = loop.create_task(self._run_cycle(bypass_cache))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _run_cycle(self, bypass_cache: bool) -> object:
        try:
            return await self._cycle(bypass_cache)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Cycles handle their own failures; anything reaching here is a bug
            logger.exception(f"Refresh cycle raised unexpectedly: {e}")
            return None


def _validate_interval(interval_seconds: float) -> None:
    if interval_seconds is None or interval_seconds <= 0:
        raise ValueError(f"Refresh interval must be positive, got {interval_seconds}")

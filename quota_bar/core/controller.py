#!/usr/bin/env python3
"""
Status Controller Module

Manual trigger surface of the status bar: start/stop, manual refresh,
the raw-output detail view and reacting to settings changes.
"""

import asyncio
import logging
from typing import Any, Optional

from ..config.store import SettingsStore
from ..models.snapshot import AggregateSnapshot
from .pipeline import RefreshPipeline
from .render import RenderSink
from .scheduler import RefreshScheduler

logger = logging.getLogger(__name__)


class StatusController:
    """
    Wires the settings store, refresh pipeline and scheduler together.

    Overlapping cycles are not cancelled: a manual refresh fired while a
    timer cycle is still fetching lets both finish, and the later one wins.
    """

    def __init__(self, settings: SettingsStore, pipeline: RefreshPipeline, log_output: bool = False):
        self.settings = settings
        self.pipeline = pipeline
        self.log_output = log_output
        self.scheduler = RefreshScheduler(self._timer_cycle)

    @property
    def sink(self) -> RenderSink:
        return self.pipeline.sink

    async def _timer_cycle(self, bypass_cache: bool) -> AggregateSnapshot:
        trigger = "manual" if bypass_cache else "timer"
        return await self.pipeline.run_cycle(
            bypass_cache=bypass_cache, trigger=trigger, log_output=self.log_output
        )

    def start(self) -> asyncio.Task:
        """
        Start periodic refreshes and run the first cycle right away.

        Returns:
            Task of the initial cycle
        """
        config = self.settings.read()
        self.scheduler.start(config.refresh_interval_seconds)
        return self.scheduler.trigger_now(bypass_cache=False)

    def stop(self) -> None:
        self.scheduler.stop()

    def refresh(self) -> asyncio.Task:
        """User-initiated refresh; always bypasses the fetcher cache."""
        return self.scheduler.trigger_now(bypass_cache=True)

    async def show_details(self) -> Optional[str]:
        """
        Refresh and log the raw fetcher output.

        Returns:
            The latest raw fetcher output (None if no fetch has succeeded yet)
        """
        await self.pipeline.run_cycle(bypass_cache=True, trigger="details", log_output=True)
        return self.pipeline.last_raw_output

    def apply_settings(self, **changes: Any) -> asyncio.Task:
        """
        Apply settings edits, reschedule if the interval changed and refresh.

        Raises:
            ConfigError: If the edits do not validate (nothing is changed)
        """
        config = self.settings.update(**changes)

        if self.scheduler.is_running and self.scheduler.interval != config.refresh_interval_seconds:
            self.scheduler.reschedule(config.refresh_interval_seconds)

        self.sink.set_mode(config.render_mode)
        return self.scheduler.trigger_now(bypass_cache=True)

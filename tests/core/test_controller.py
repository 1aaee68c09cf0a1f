#!/usr/bin/env python3
"""
Tests for the status controller: start/stop, manual refresh, details view
and settings changes.
"""

import asyncio
import os
import sys
import unittest
from unittest.mock import patch

# Add parent directory to path to import helpers
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from helpers.fetchers import FakeFetcher

from quota_bar.config import ConfigError, SettingsStore
from quota_bar.core.controller import StatusController
from quota_bar.core.pipeline import RefreshPipeline
from quota_bar.core.render import RenderSink
from quota_bar.models import ProviderId, RenderMode, SnapshotState


class TestStatusController(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        env_patcher = patch.dict(os.environ, {}, clear=True)
        env_patcher.start()
        self.addCleanup(env_patcher.stop)

        self.settings = SettingsStore()
        self.fetcher = FakeFetcher()
        self.sink = RenderSink()
        self.pipeline = RefreshPipeline(self.settings, self.sink, fetcher=self.fetcher)
        self.controller = StatusController(self.settings, self.pipeline)

    async def asyncTearDown(self):
        self.controller.stop()
        await self.controller.scheduler.wait_idle()

    async def test_start_runs_initial_cycle_and_schedules(self):
        loop = asyncio.get_running_loop()
        t0 = loop.time()
        snapshot = await self.controller.start()

        self.assertEqual(snapshot.state, SnapshotState.OK)
        self.assertTrue(self.controller.scheduler.is_running)
        self.assertEqual(self.controller.scheduler.interval, 120)
        self.assertGreaterEqual(self.controller.scheduler.next_tick_at, t0 + 120)
        # The initial cycle may use cached data
        self.assertTrue(self.fetcher.requests[0].use_cache)

    async def test_refresh_bypasses_cache(self):
        await self.controller.refresh()
        self.assertFalse(self.fetcher.requests[0].use_cache)

    async def test_stop_is_idempotent(self):
        await self.controller.start()
        self.controller.stop()
        self.controller.stop()
        self.assertFalse(self.controller.scheduler.is_running)

    async def test_show_details_returns_raw_output(self):
        with patch("quota_bar.core.pipeline.logger") as mock_logger:
            raw = await self.controller.show_details()
        self.assertIn('"claude"', raw)
        self.assertFalse(self.fetcher.requests[0].use_cache)
        logged = [call[0][0] for call in mock_logger.info.call_args_list]
        self.assertTrue(any('"trigger": "details"' in line for line in logged))

    async def test_apply_settings_reschedules(self):
        await self.controller.start()
        loop = asyncio.get_running_loop()
        t0 = loop.time()

        await self.controller.apply_settings(refresh_interval_minutes=5)

        self.assertEqual(self.controller.scheduler.interval, 300)
        self.assertGreaterEqual(self.controller.scheduler.next_tick_at, t0 + 300)
        self.assertFalse(self.fetcher.requests[-1].use_cache)

    async def test_apply_settings_keeps_timer_when_interval_unchanged(self):
        await self.controller.start()
        tick = self.controller.scheduler.next_tick_at

        await self.controller.apply_settings(enabled_providers=[ProviderId.GEMINI, ProviderId.CLAUDE])

        self.assertEqual(self.controller.scheduler.next_tick_at, tick)
        self.assertEqual(
            self.fetcher.requests[-1].enabled_providers,
            (ProviderId.CLAUDE, ProviderId.GEMINI),
        )

    async def test_apply_settings_switches_mode(self):
        await self.controller.start()
        snapshot = await self.controller.apply_settings(render_mode=RenderMode.PER_PROVIDER)

        self.assertEqual(snapshot.mode, RenderMode.PER_PROVIDER)
        self.assertFalse(self.sink.main.visible)
        self.assertTrue(self.sink.indicator_for(ProviderId.CLAUDE).visible)

    async def test_mode_change_during_slow_cycle(self):
        self.fetcher.delay = 0.2
        slow = self.controller.apply_settings(render_mode=RenderMode.PER_PROVIDER)
        await asyncio.sleep(0.05)

        self.fetcher.delay = 0.0
        await self.controller.apply_settings(render_mode=RenderMode.SINGLE)
        self.assertEqual(self.sink.main.text, "42%|10%")

        snapshot = await slow

        self.assertEqual(snapshot.mode, RenderMode.SINGLE)
        self.assertEqual(snapshot.prioritized_provider_id, ProviderId.CLAUDE)
        self.assertEqual(self.sink.main.text, "42%|10%")
        self.assertEqual(self.sink.visible_indicators(), [self.sink.main])

    async def test_disable_all_providers(self):
        await self.controller.start()
        snapshot = await self.controller.apply_settings(enabled_providers=[])

        self.assertEqual(snapshot.state, SnapshotState.DISABLED)
        self.assertEqual(self.sink.main.text, "Off")
        self.assertEqual(len(self.fetcher.requests), 1)

    async def test_invalid_settings_rejected(self):
        await self.controller.start()
        with self.assertRaises(ConfigError):
            self.controller.apply_settings(refresh_interval_minutes=0)

        self.assertEqual(self.settings.read().refresh_interval_seconds, 120)
        self.assertEqual(self.controller.scheduler.interval, 120)

    async def test_log_output_on_timer_cycles(self):
        controller = StatusController(self.settings, self.pipeline, log_output=True)
        with patch("quota_bar.core.pipeline.logger") as mock_logger:
            await controller.refresh()
        logged = [call[0][0] for call in mock_logger.info.call_args_list]
        self.assertTrue(any("Quota fetcher output" in line for line in logged))


if __name__ == "__main__":
    unittest.main()

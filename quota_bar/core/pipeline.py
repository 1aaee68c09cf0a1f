"""
Refresh cycle pipeline.

This module runs one fetch+aggregate+render cycle. All failures are caught at
the cycle boundary and turned into a visible error indicator plus a log line;
nothing raised here reaches the scheduler or the host.
"""

import logging
import time
from typing import Callable, Optional

from ..api.client import create_quota_fetcher
from ..api.fetcher import FetchError, FetchRequest, MalformedResponseError, QuotaFetcher
from ..config.store import ConfigError, SettingsStore
from ..models.refresh import RefreshConfig
from ..models.snapshot import AggregateSnapshot, SnapshotState
from ..utils.logging import log_cycle_failure, log_cycle_summary, log_usage_alert
from .aggregator import aggregate
from .render import RenderSink

logger = logging.getLogger(__name__)

FetcherFactory = Callable[[RefreshConfig], QuotaFetcher]


class RefreshPipeline:
    """
    Coordinates one refresh cycle: read settings, fetch, aggregate, render.
    """

    def __init__(
        self,
        settings: SettingsStore,
        sink: RenderSink,
        fetcher: Optional[QuotaFetcher] = None,
        fetcher_factory: Optional[FetcherFactory] = None,
    ):
        """
        Initialize refresh pipeline.

        Args:
            settings: Store read at the start of every cycle
            sink: Render sink receiving every cycle's snapshot
            fetcher: Fixed fetcher; when None one is created per cycle from the config
            fetcher_factory: Creates a fetcher from the cycle's config (defaults to create_quota_fetcher)
        """
        self.settings = settings
        self.sink = sink
        self._fetcher = fetcher
        self._fetcher_factory = fetcher_factory
        self.last_raw_output: Optional[str] = None
        self.last_snapshot: Optional[AggregateSnapshot] = None

    async def run_cycle(self, bypass_cache: bool = False, trigger: str = "timer",
                        log_output: bool = False) -> AggregateSnapshot:
        """
        Run one refresh cycle.

        Args:
            bypass_cache: Force fresh data regardless of the cache setting
            trigger: What started the cycle, for logging
            log_output: Log the raw fetcher output (detail view)

        Returns:
            The snapshot that was rendered
        """
        start_time = time.time()

        try:
            config = self.settings.read()
        except ConfigError as e:
            return self._fail(f"Configuration error: {e}", start_time, trigger, "config")

        self.sink.set_mode(config.render_mode)

        if not config.has_enabled_providers:
            logger.debug("All providers disabled; skipping fetch")
            return self._finish(AggregateSnapshot.disabled(config.render_mode), start_time, trigger)

        request = FetchRequest(
            enabled_providers=config.enabled_providers,
            use_cache=config.use_cache and not bypass_cache,
            credentials=config.credentials,
        )

        try:
            fetcher = self._fetcher or (self._fetcher_factory or create_quota_fetcher)(config)
            result = await fetcher.fetch(request)
        except MalformedResponseError as e:
            return self._fail(str(e), start_time, trigger, "malformed", config)
        except FetchError as e:
            return self._fail(str(e), start_time, trigger, "transport", config)
        except Exception as e:
            logger.exception(f"Unexpected error during fetch: {e}")
            return self._fail(f"Unexpected error: {e}", start_time, trigger, "unexpected", config)

        self.last_raw_output = result.raw_output
        if log_output:
            logger.info(f"Quota fetcher output:\n{result.raw_output}")

        try:
            snapshot = aggregate(config.enabled_providers, result.results, config.render_mode)
        except Exception as e:
            logger.exception(f"Unexpected error while aggregating results: {e}")
            return self._fail(f"Unexpected error: {e}", start_time, trigger, "unexpected", config)

        return self._finish(snapshot, start_time, trigger)

    def _finish(self, snapshot: AggregateSnapshot, start_time: float, trigger: str) -> AggregateSnapshot:
        snapshot = self.sink.render(snapshot)
        self.last_snapshot = snapshot
        log_cycle_summary(snapshot, time.time() - start_time, trigger, logger=logger)
        if snapshot.state == SnapshotState.OK:
            for provider_id, metric in snapshot.metrics.items():
                log_usage_alert(provider_id, metric.peak_percent, snapshot.color_tiers[provider_id], logger=logger)
        return snapshot

    def _fail(self, message: str, start_time: float, trigger: str, error_type: str,
              config: Optional[RefreshConfig] = None) -> AggregateSnapshot:
        log_cycle_failure(message, time.time() - start_time, trigger, error_type=error_type, logger=logger)
        if config is not None:
            snapshot = AggregateSnapshot.failed(message, config.enabled_providers, config.render_mode)
        else:
            snapshot = AggregateSnapshot.failed(message, mode=self.sink.mode)
        self.last_snapshot = self.sink.render(snapshot)
        return self.last_snapshot

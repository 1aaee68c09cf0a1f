#!/usr/bin/env python3
"""
Core package for the quota status bar.

This package provides the usage aggregation and status-rendering pipeline:
provider result parsing, aggregation, rendering, refresh scheduling and
cycle coordination.
"""

from .parser import (
    parse_percent,
    parse_provider_result,
    format_percent,
    format_usd,
)

from .aggregator import (
    aggregate,
    color_tier,
    select_prioritized_provider,
    snapshot_for_mode,
)

from .render import (
    Indicator,
    IndicatorIcon,
    RenderSink,
)

from .scheduler import (
    RefreshScheduler,
)

from .pipeline import (
    RefreshPipeline,
)

from .controller import (
    StatusController,
)

__all__ = [
    # Metric parsing
    "parse_percent",
    "parse_provider_result",
    "format_percent",
    "format_usd",
    # Aggregation
    "aggregate",
    "color_tier",
    "select_prioritized_provider",
    "snapshot_for_mode",
    # Rendering
    "Indicator",
    "IndicatorIcon",
    "RenderSink",
    # Scheduling and coordination
    "RefreshScheduler",
    "RefreshPipeline",
    "StatusController",
]

#!/usr/bin/env python3
"""
Quota Bar Package

A Python package that polls AI-provider usage quotas through an external
quota fetcher, normalizes the per-provider payloads and renders them as
compact, color-coded status indicators with detailed tooltips.

This package provides both a command-line interface and a programmatic API
for embedding the indicators in another host.
"""

__version__ = "1.0.0"
__author__ = "Quota Bar"
__description__ = "Aggregate AI provider usage quotas into compact status indicators"
__license__ = "MIT"
__maintainer__ = "Quota Bar"
__email__ = "support@example.com"
__url__ = "https://github.com/example/quota-bar"
__status__ = "Production"

# Import models for public API
from .models import (
    ProviderId,
    PROVIDER_PRIORITY,
    ColorTier,
    NormalizedMetric,
    AggregateSnapshot,
    SnapshotState,
    RenderMode,
    RefreshConfig,
)

# Import constants for public API
from .constants import (
    EXIT_SUCCESS,
    EXIT_CONFIG_ERROR,
    EXIT_FETCH_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_UNEXPECTED_ERROR,
)

# Import core functionality for public API
from .core import (
    parse_provider_result,
    aggregate,
    color_tier,
    RenderSink,
    RefreshScheduler,
    RefreshPipeline,
    StatusController,
)

# Import API functions for public API
from .api import (
    FetchRequest,
    FetchError,
    SubprocessQuotaFetcher,
    HttpQuotaFetcher,
    create_quota_fetcher,
)

# Import configuration for public API
from .config import (
    SettingsStore,
    ConfigError,
)

# Import CLI functionality for public API
from .cli import (
    main,
    create_argument_parser,
)

# Import utilities for public API
from .utils import (
    setup_logging,
)

# Public API exports
__all__ = [
    # Package metadata
    "__version__",
    "__author__",
    "__description__",
    # Data models
    "ProviderId",
    "PROVIDER_PRIORITY",
    "ColorTier",
    "NormalizedMetric",
    "AggregateSnapshot",
    "SnapshotState",
    "RenderMode",
    "RefreshConfig",
    # Constants
    "EXIT_SUCCESS",
    "EXIT_CONFIG_ERROR",
    "EXIT_FETCH_FAILURE",
    "EXIT_INTERRUPTED",
    "EXIT_UNEXPECTED_ERROR",
    # Core functionality
    "parse_provider_result",
    "aggregate",
    "color_tier",
    "RenderSink",
    "RefreshScheduler",
    "RefreshPipeline",
    "StatusController",
    # Fetchers
    "FetchRequest",
    "FetchError",
    "SubprocessQuotaFetcher",
    "HttpQuotaFetcher",
    "create_quota_fetcher",
    # Configuration
    "SettingsStore",
    "ConfigError",
    # CLI functions
    "main",
    "create_argument_parser",
    # Utilities
    "setup_logging",
]

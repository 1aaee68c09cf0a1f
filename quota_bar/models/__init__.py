#!/usr/bin/env python3
"""
Data Models Module

This module contains all data structures and type definitions used
throughout the quota status bar.
"""

from .provider import ProviderId, PayloadKind, PROVIDER_PRIORITY, order_by_priority, parse_provider_id
from .metrics import ColorTier, NormalizedMetric
from .snapshot import AggregateSnapshot, SnapshotState, RenderMode
from .refresh import RefreshConfig

__all__ = [
    "ProviderId",
    "PayloadKind",
    "PROVIDER_PRIORITY",
    "order_by_priority",
    "parse_provider_id",
    "ColorTier",
    "NormalizedMetric",
    "AggregateSnapshot",
    "SnapshotState",
    "RenderMode",
    "RefreshConfig",
]

#!/usr/bin/env python3
"""
Provider Aggregation

This module runs the metric parser over all enabled providers, selects the
provider that drives the combined indicator and classifies peak usage into
color tiers.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..constants import CRITICAL_THRESHOLD, TOOLTIP_HEADER, WARNING_THRESHOLD
from ..models.metrics import ColorTier, NormalizedMetric
from ..models.provider import ProviderId, order_by_priority, parse_provider_id
from ..models.snapshot import AggregateSnapshot, RenderMode, SnapshotState
from .parser import parse_provider_result

logger = logging.getLogger(__name__)


def color_tier(peak_percent: Optional[float]) -> ColorTier:
    """
    Classify a peak usage percentage.

    Below 70 is normal, 70 up to 90 is warning, 90 and above is critical.
    A missing peak (balance-only provider) is always normal.
    """
    if peak_percent is None:
        return ColorTier.NORMAL
    if peak_percent >= CRITICAL_THRESHOLD:
        return ColorTier.CRITICAL
    if peak_percent >= WARNING_THRESHOLD:
        return ColorTier.WARNING
    return ColorTier.NORMAL


def metric_color_tier(metric: NormalizedMetric) -> ColorTier:
    """Tier of a provider's own indicator."""
    if metric.is_balance_only:
        return ColorTier.NORMAL
    return color_tier(metric.peak_percent)


def select_prioritized_provider(metrics: Mapping[ProviderId, NormalizedMetric]) -> Optional[ProviderId]:
    """Return the first available provider in the fixed priority order."""
    ordered = order_by_priority(metrics.keys())
    return ordered[0] if ordered else None


def _normalize_enabled(enabled: Iterable[Any]) -> Tuple[ProviderId, ...]:
    providers: List[ProviderId] = []
    for value in enabled:
        if isinstance(value, ProviderId):
            providers.append(value)
            continue
        try:
            providers.append(parse_provider_id(value))
        except ValueError as e:
            logger.warning(f"Ignoring enabled provider: {e}")
    return order_by_priority(providers)


def aggregate(
    enabled_providers: Iterable[Any],
    results: Optional[Mapping[str, Any]],
    mode: RenderMode = RenderMode.SINGLE,
) -> AggregateSnapshot:
    """
    Aggregate one cycle's raw fetch results into a snapshot.

    Args:
        enabled_providers: Enabled providers (any order; sorted by priority here)
        results: Fetcher document keyed by provider id
        mode: Render mode; prioritization only applies to single-indicator mode

    Returns:
        AggregateSnapshot for this cycle
    """
    enabled = _normalize_enabled(enabled_providers)
    if not enabled:
        return AggregateSnapshot.disabled(mode)

    results = results or {}
    metrics: Dict[ProviderId, NormalizedMetric] = {}
    tooltip_lines: List[str] = [TOOLTIP_HEADER]

    for provider_id in enabled:
        metric = parse_provider_result(provider_id, results.get(provider_id.value))
        if metric is None:
            continue
        metrics[provider_id] = metric
        tooltip_lines.extend(metric.tooltip_lines)

    color_tiers = {p: metric_color_tier(m) for p, m in metrics.items()}

    if not metrics:
        logger.info(f"No provider data available for: {', '.join(p.value for p in enabled)}")
        return AggregateSnapshot(
            state=SnapshotState.NO_DATA,
            mode=mode,
            enabled_providers=enabled,
            tooltip_lines=tuple(tooltip_lines),
        )

    return AggregateSnapshot(
        state=SnapshotState.OK,
        mode=mode,
        enabled_providers=enabled,
        metrics=metrics,
        color_tiers=color_tiers,
        tooltip_lines=tuple(tooltip_lines),
        **_combined_indicator_fields(metrics, color_tiers, mode),
    )


def _combined_indicator_fields(
    metrics: Mapping[ProviderId, NormalizedMetric],
    color_tiers: Mapping[ProviderId, ColorTier],
    mode: RenderMode,
) -> Dict[str, Any]:
    prioritized = select_prioritized_provider(metrics) if mode == RenderMode.SINGLE else None
    if prioritized is None:
        return {
            "prioritized_provider_id": None,
            "peak_primary": 0.0,
            "peak_secondary": 0.0,
            "color_tier": ColorTier.NORMAL,
        }

    metric = metrics[prioritized]
    return {
        "prioritized_provider_id": prioritized,
        "peak_primary": metric.primary_percent or 0.0,
        "peak_secondary": metric.secondary_percent or 0.0,
        "color_tier": color_tiers[prioritized],
    }


def snapshot_for_mode(snapshot: AggregateSnapshot, mode: RenderMode) -> AggregateSnapshot:
    """
    Re-derive a snapshot for another render mode.

    A cycle that started before a mode change still finishes with a snapshot
    computed for the old mode; the metrics are reused and only the combined
    indicator fields are recomputed.
    """
    if snapshot.mode == mode:
        return snapshot
    if snapshot.state != SnapshotState.OK:
        return replace(snapshot, mode=mode)
    return replace(
        snapshot,
        mode=mode,
        **_combined_indicator_fields(snapshot.metrics, snapshot.color_tiers, mode),
    )

#!/usr/bin/env python3
"""
Aggregate Snapshot Models

This module contains the per-cycle aggregation result handed from the
Provider Aggregator to the Render Sink.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Any

from .metrics import ColorTier, NormalizedMetric
from .provider import ProviderId


class SnapshotState(str, Enum):
    """Overall outcome of a refresh cycle."""

    OK = "ok"
    NO_DATA = "no_data"
    DISABLED = "disabled"
    ERROR = "error"


class RenderMode(str, Enum):
    """How indicators are laid out in the host."""

    SINGLE = "single"
    PER_PROVIDER = "per-provider"


@dataclass(frozen=True)
class AggregateSnapshot:
    """
    Result of one refresh cycle. Superseded by the next cycle's snapshot.

    Attributes:
        state: Overall outcome (ok, no_data, disabled, error)
        mode: Render mode the snapshot was computed for
        enabled_providers: Enabled providers in priority order
        metrics: Metrics of available providers, in priority order
        prioritized_provider_id: Provider driving the combined indicator (single mode)
        peak_primary: Primary percentage of the prioritized provider
        peak_secondary: Secondary percentage of the prioritized provider
        color_tier: Tier of the combined indicator
        color_tiers: Tier of each available provider's own indicator
        tooltip_lines: Combined tooltip, in priority order
        error_message: Failure description when state is ERROR
    """
    state: SnapshotState
    mode: RenderMode = RenderMode.SINGLE
    enabled_providers: Tuple[ProviderId, ...] = ()
    metrics: Dict[ProviderId, NormalizedMetric] = field(default_factory=dict)
    prioritized_provider_id: Optional[ProviderId] = None
    peak_primary: float = 0.0
    peak_secondary: float = 0.0
    color_tier: ColorTier = ColorTier.NORMAL
    color_tiers: Dict[ProviderId, ColorTier] = field(default_factory=dict)
    tooltip_lines: Tuple[str, ...] = ()
    error_message: Optional[str] = None

    @classmethod
    def disabled(cls, mode: RenderMode = RenderMode.SINGLE) -> "AggregateSnapshot":
        """Snapshot for a configuration with zero enabled providers."""
        return cls(state=SnapshotState.DISABLED, mode=mode)

    @classmethod
    def failed(cls, message: str, enabled_providers: Tuple[ProviderId, ...] = (),
               mode: RenderMode = RenderMode.SINGLE) -> "AggregateSnapshot":
        """Snapshot for a cycle that could not fetch or decode results."""
        return cls(
            state=SnapshotState.ERROR,
            mode=mode,
            enabled_providers=enabled_providers,
            error_message=message,
        )

    @property
    def prioritized_metric(self) -> Optional[NormalizedMetric]:
        if self.prioritized_provider_id is None:
            return None
        return self.metrics.get(self.prioritized_provider_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "state": self.state.value,
            "mode": self.mode.value,
            "enabled_providers": [p.value for p in self.enabled_providers],
            "metrics": {p.value: m.to_dict() for p, m in self.metrics.items()},
            "prioritized_provider_id": (
                self.prioritized_provider_id.value if self.prioritized_provider_id else None
            ),
            "peak_primary": self.peak_primary,
            "peak_secondary": self.peak_secondary,
            "color_tier": self.color_tier.value,
            "color_tiers": {p.value: t.value for p, t in self.color_tiers.items()},
            "tooltip_lines": list(self.tooltip_lines),
            "error_message": self.error_message,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

#!/usr/bin/env python3
"""
Indicator rendering.

This module maps an AggregateSnapshot onto indicator state (text, tooltip,
color tier, icon and visibility) for a single combined indicator or one
indicator per provider. Indicators are owned by the RenderSink and are only
mutated by it.
"""

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional

from ..models.metrics import ColorTier
from ..models.provider import ProviderId
from ..models.snapshot import AggregateSnapshot, RenderMode, SnapshotState
from .aggregator import snapshot_for_mode

logger = logging.getLogger(__name__)

INDICATOR_LABEL = "AI"
FALLBACK_KEY = "fallback"
DISABLED_TOOLTIP = "All providers disabled."
NO_DATA_TOOLTIP = "No provider data available."


class IndicatorIcon(str, Enum):
    """Icon shown in front of the indicator text."""

    PULSE = "pulse"
    UNAVAILABLE = "circle-slash"
    ERROR = "error"


class Indicator:
    """
    Host-facing status indicator.

    Holds the text, tooltip, color tier, icon and visibility that the host
    UI shell displays.
    """

    def __init__(self, key: str, label: str):
        self.key = key
        self.label = label
        self.text = ""
        self.tooltip = ""
        self.color_tier = ColorTier.NORMAL
        self.icon = IndicatorIcon.PULSE
        self.visible = False

    def update(self, text: str, tooltip: str, color_tier: ColorTier = ColorTier.NORMAL,
               icon: IndicatorIcon = IndicatorIcon.PULSE) -> None:
        self.text = text
        self.tooltip = tooltip
        self.color_tier = color_tier
        self.icon = icon

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    @property
    def display_text(self) -> str:
        """Text as shown in a status bar, e.g. "$(pulse) AI: 42%|10%"."""
        return f"$({self.icon.value}) {self.label}: {self.text}"

    def __repr__(self) -> str:
        state = "visible" if self.visible else "hidden"
        return f"Indicator({self.key!r}, {self.display_text!r}, {self.color_tier.value}, {state})"


def _status_text(snapshot: AggregateSnapshot):
    """Text, tooltip and icon for the non-data states."""
    if snapshot.state == SnapshotState.DISABLED:
        return "Off", DISABLED_TOOLTIP, IndicatorIcon.UNAVAILABLE
    if snapshot.state == SnapshotState.ERROR:
        tooltip = f"Quota fetch failed: {snapshot.error_message}" if snapshot.error_message else "Quota fetch failed."
        return "Err", tooltip, IndicatorIcon.ERROR
    tooltip = "\n".join(snapshot.tooltip_lines + (NO_DATA_TOOLTIP,))
    return "N/A", tooltip, IndicatorIcon.UNAVAILABLE


class RenderSink:
    """
    Applies snapshots to indicators.

    In single mode one indicator is always visible. In per-provider mode each
    available provider has its own indicator, and a fallback indicator is
    visible exactly when no provider indicator is.
    """

    def __init__(self, mode: RenderMode = RenderMode.SINGLE):
        self.mode = mode
        self.main = Indicator(key="main", label=INDICATOR_LABEL)
        self.fallback = Indicator(key=FALLBACK_KEY, label=INDICATOR_LABEL)
        self._indicators: Dict[ProviderId, Indicator] = {}
        self._listeners: List[Callable[["RenderSink"], None]] = []
        self.last_snapshot: Optional[AggregateSnapshot] = None

    def add_listener(self, callback: Callable[["RenderSink"], None]) -> None:
        """Register a callback invoked with the sink after every render."""
        self._listeners.append(callback)

    def set_mode(self, mode: RenderMode) -> None:
        """Switch render mode; all indicators are hidden until the next render."""
        if mode == self.mode:
            return
        logger.info(f"Render mode changed: {self.mode.value} -> {mode.value}")
        self.mode = mode
        self.main.hide()
        self.fallback.hide()
        for indicator in self._indicators.values():
            indicator.hide()

    def indicator_for(self, provider_id: ProviderId) -> Indicator:
        """Return the provider's indicator, creating it on first use."""
        indicator = self._indicators.get(provider_id)
        if indicator is None:
            indicator = Indicator(key=provider_id.value, label=provider_id.display_name)
            self._indicators[provider_id] = indicator
        return indicator

    @property
    def provider_indicators(self) -> Dict[ProviderId, Indicator]:
        return dict(self._indicators)

    def visible_indicators(self) -> List[Indicator]:
        """Visible indicators in display order."""
        providers = [self._indicators[p] for p in sorted(self._indicators, key=lambda p: p.priority)]
        return [i for i in (self.main, *providers, self.fallback) if i.visible]

    def render(self, snapshot: AggregateSnapshot) -> AggregateSnapshot:
        """
        Apply a snapshot to the indicators and notify listeners.

        A snapshot computed for another render mode is re-derived for the
        current one first. Returns the snapshot that was drawn.
        """
        if snapshot.mode != self.mode:
            logger.debug(f"Re-deriving {snapshot.mode.value} snapshot for {self.mode.value} mode")
            snapshot = snapshot_for_mode(snapshot, self.mode)

        if self.mode == RenderMode.SINGLE:
            self._render_single(snapshot)
        else:
            self._render_per_provider(snapshot)

        self.last_snapshot = snapshot
        for callback in self._listeners:
            callback(self)
        return snapshot

    def _render_single(self, snapshot: AggregateSnapshot) -> None:
        metric = snapshot.prioritized_metric
        if snapshot.state == SnapshotState.OK and metric is not None:
            self.main.update(
                metric.summary_text,
                "\n".join(snapshot.tooltip_lines),
                snapshot.color_tier,
                IndicatorIcon.PULSE,
            )
        else:
            text, tooltip, icon = _status_text(snapshot)
            self.main.update(text, tooltip, ColorTier.NORMAL, icon)
        self.main.show()

    def _render_per_provider(self, snapshot: AggregateSnapshot) -> None:
        self.main.hide()
        for provider_id, indicator in self._indicators.items():
            if provider_id not in snapshot.metrics:
                indicator.hide()

        for provider_id, metric in snapshot.metrics.items():
            indicator = self.indicator_for(provider_id)
            indicator.update(
                metric.summary_text,
                "\n".join(metric.tooltip_lines),
                snapshot.color_tiers.get(provider_id, ColorTier.NORMAL),
                IndicatorIcon.PULSE,
            )
            indicator.show()

        if any(i.visible for i in self._indicators.values()):
            self.fallback.hide()
        else:
            text, tooltip, icon = _status_text(snapshot)
            self.fallback.update(text, tooltip, ColorTier.NORMAL, icon)
            self.fallback.show()


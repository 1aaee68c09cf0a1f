#!/usr/bin/env python3
"""
Usage Metric Models

This module contains the normalized per-provider usage metric and the
severity tiers used to tint indicators.
"""

from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Optional, Tuple, Dict, Any

from .provider import ProviderId


class ColorTier(str, Enum):
    """Severity classification of a peak usage percentage."""

    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class NormalizedMetric:
    """
    Usage numbers for one provider, derived from its raw fetch result.

    Attributes:
        provider_id: Provider the metric belongs to
        primary_percent: Primary window usage (0-100), None for balance-only providers
        secondary_percent: Secondary window usage (0-100), None when not tracked
        balance_usd: Remaining credit for balance-only providers
        summary_text: Compact indicator text (e.g. "42%|10%" or "$12.50")
        tooltip_lines: Human-readable detail lines, in display order
    """
    provider_id: ProviderId
    primary_percent: Optional[float] = None
    secondary_percent: Optional[float] = None
    balance_usd: Optional[float] = None
    summary_text: str = ""
    tooltip_lines: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Validate percentage ranges."""
        for name in ("primary_percent", "secondary_percent"):
            value = getattr(self, name)
            if value is not None and not 0.0 <= value <= 100.0:
                raise ValueError(f"{name} must be between 0-100, got {value}")

    @property
    def is_balance_only(self) -> bool:
        return self.primary_percent is None and self.balance_usd is not None

    @property
    def peak_percent(self) -> Optional[float]:
        """Highest of the primary and secondary percentages, None if neither is set."""
        values = [v for v in (self.primary_percent, self.secondary_percent) if v is not None]
        return max(values) if values else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data["provider_id"] = self.provider_id.value
        data["tooltip_lines"] = list(self.tooltip_lines)
        return data

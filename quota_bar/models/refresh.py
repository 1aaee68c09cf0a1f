#!/usr/bin/env python3
"""
Refresh Configuration Model

Immutable per-cycle view of the user's settings. A fresh instance is read at
the start of every refresh cycle.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from .provider import ProviderId, order_by_priority
from .snapshot import RenderMode


@dataclass(frozen=True)
class RefreshConfig:
    """
    Read-only configuration snapshot for one refresh cycle.

    Attributes:
        enabled_providers: Enabled providers in priority order
        use_cache: Whether the fetcher may serve cached data
        refresh_interval_seconds: Seconds between scheduled refreshes (>= 60)
        render_mode: Single combined indicator or one indicator per provider
        credentials: Optional secrets keyed by provider
        fetcher_command: Command line of the external quota fetcher
        fetcher_url: Quota fetcher service URL (used instead of the command when set)
        fetch_timeout_seconds: Maximum time to wait for one fetch
    """
    enabled_providers: Tuple[ProviderId, ...] = ()
    use_cache: bool = True
    refresh_interval_seconds: int = 120
    render_mode: RenderMode = RenderMode.SINGLE
    credentials: Mapping[ProviderId, str] = field(default_factory=dict)
    fetcher_command: str = "cclimits"
    fetcher_url: Optional[str] = None
    fetch_timeout_seconds: float = 60.0

    def __post_init__(self):
        """Normalize provider order and validate the interval."""
        object.__setattr__(self, "enabled_providers", order_by_priority(self.enabled_providers))
        if self.refresh_interval_seconds < 60:
            raise ValueError("refresh_interval_seconds must be at least 60")

    @property
    def has_enabled_providers(self) -> bool:
        return bool(self.enabled_providers)

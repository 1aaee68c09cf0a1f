"""
Logging utilities for the quota status bar.

This module provides centralized logging configuration and structured
event logging to ensure consistent logging behavior across the application.
"""

import json
import logging
import threading
import time
from typing import Dict, Optional

from ..models.metrics import ColorTier
from ..models.provider import ProviderId


def setup_logging(verbose: bool = False):
    """Setup logging configuration with appropriate level and format."""
    level = logging.DEBUG if verbose else logging.INFO
    format_string = "%(asctime)s - %(levelname)s - %(message)s"

    logging.basicConfig(level=level, format=format_string, datefmt="%Y-%m-%d %H:%M:%S")

    # Set specific logger levels
    logging.getLogger("httpx").setLevel(logging.WARNING)  # Reduce HTTP client noise
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def log_cycle_summary(
    snapshot,
    duration: float,
    trigger: str,
    timestamp: Optional[float] = None,
    logger: Optional[logging.Logger] = None
):
    """
    Log a structured record for a completed refresh cycle.

    Args:
        snapshot: AggregateSnapshot produced by the cycle
        duration: Cycle duration in seconds (fetch included)
        trigger: What started the cycle (timer, manual, settings, details)
        timestamp: Record timestamp (defaults to current time)
        logger: Logger instance to use (defaults to current module logger)
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    if timestamp is None:
        timestamp = time.time()

    summary_record = {
        "event_type": "refresh_cycle",
        "timestamp": timestamp,
        "trigger": trigger,
        "state": snapshot.state.value,
        "duration_seconds": round(duration, 3),
        "enabled_providers": [p.value for p in snapshot.enabled_providers],
        "available_providers": [p.value for p in snapshot.metrics],
        "prioritized_provider": (
            snapshot.prioritized_provider_id.value if snapshot.prioritized_provider_id else None
        ),
        "peak_primary": snapshot.peak_primary,
        "peak_secondary": snapshot.peak_secondary,
        "color_tier": snapshot.color_tier.value,
    }

    logger.info(f"CYCLE_SUMMARY: {json.dumps(summary_record, ensure_ascii=False)}")


def log_cycle_failure(
    error_message: str,
    duration: float,
    trigger: str,
    error_type: str = "transport",
    timestamp: Optional[float] = None,
    logger: Optional[logging.Logger] = None
):
    """
    Log a structured record for a refresh cycle that failed before parsing.

    Args:
        error_message: Description of the failure
        duration: Time spent before the failure (seconds)
        trigger: What started the cycle
        error_type: Failure class (transport, malformed, config, unexpected)
        timestamp: Failure timestamp (defaults to current time)
        logger: Logger instance to use (defaults to current module logger)
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    if timestamp is None:
        timestamp = time.time()

    failure_record = {
        "event_type": "cycle_failure",
        "timestamp": timestamp,
        "trigger": trigger,
        "error_type": error_type,
        "duration_seconds": round(duration, 3),
        "error_message": error_message,
        "success": False
    }

    # Log as WARNING level; failures are visible in the indicator, never fatal
    logger.warning(f"CYCLE_FAILURE: {json.dumps(failure_record, ensure_ascii=False)}")


# Last logged tier per provider, used to log only on tier changes
_last_alert_tiers: Dict[ProviderId, ColorTier] = {}
_alert_state_lock = threading.Lock()


def log_usage_alert(provider_id: ProviderId, peak_percent: Optional[float], tier: ColorTier,
                    logger: Optional[logging.Logger] = None):
    """
    Log a usage alert when a provider's color tier changes.

    Args:
        provider_id: Provider whose tier is reported
        peak_percent: Peak percentage that produced the tier
        tier: Current color tier
        logger: Logger instance to use (defaults to current module logger)
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    with _alert_state_lock:
        previous = _last_alert_tiers.get(provider_id, ColorTier.NORMAL)
        should_log = tier != previous
        _last_alert_tiers[provider_id] = tier

    if not should_log:
        return

    alert_record = {
        "event_type": "usage_alert",
        "timestamp": time.time(),
        "provider": provider_id.value,
        "peak_percent": peak_percent,
        "tier": tier.value,
        "previous_tier": previous.value,
    }

    if tier == ColorTier.CRITICAL:
        logger.error(f"USAGE_CRITICAL: {json.dumps(alert_record, ensure_ascii=False)}")
    elif tier == ColorTier.WARNING:
        logger.warning(f"USAGE_WARNING: {json.dumps(alert_record, ensure_ascii=False)}")
    else:
        logger.info(f"USAGE_NORMAL: {json.dumps(alert_record, ensure_ascii=False)}")


def reset_usage_alerts():
    """Forget previously logged tiers (next alert for each provider is logged again)."""
    with _alert_state_lock:
        _last_alert_tiers.clear()

#!/usr/bin/env python3
"""
Provider Result Parsing Utilities

This module converts one provider's raw quota fetcher payload into a
NormalizedMetric. Malformed or missing sub-fields are treated as zero;
an error marker or absent result yields None (provider unavailable).
"""

import logging
import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..models.metrics import NormalizedMetric
from ..models.provider import PayloadKind, ProviderId, PROVIDER_PRIORITY

logger = logging.getLogger(__name__)

# Window field names per windowed provider: (primary, secondary)
WINDOW_FIELDS: Dict[ProviderId, Tuple[str, str]] = {
    ProviderId.CLAUDE: ("five_hour", "seven_day"),
    ProviderId.CODEX: ("primary_window", "secondary_window"),
}


def parse_percent(value: Any) -> float:
    """
    Parse a percentage such as "42%" into a number clamped to 0-100.

    Bare numbers and numeric strings are accepted too. Missing, boolean or
    unparsable values yield 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            logger.debug(f"Percentage value out of range: {value!r}")
            return 0.0
    else:
        text = str(value).strip()
        if text.endswith("%"):
            text = text[:-1].strip()
        try:
            number = float(text)
        except ValueError:
            logger.debug(f"Unparsable percentage value: {value!r}")
            return 0.0
    if number != number:  # NaN
        return 0.0
    return min(100.0, max(0.0, number))


def _parse_amount(value: Any) -> float:
    """Parse a numeric currency amount, falling back to 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError, OverflowError):
        logger.debug(f"Unparsable amount value: {value!r}")
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def format_percent(value: float) -> str:
    """Format a percentage without trailing zeros (42.0 -> "42%", 42.5 -> "42.5%")."""
    return f"{round(value, 1):g}%"


def format_usd(amount: float) -> str:
    """Format a currency amount with two decimals."""
    return f"${amount:.2f}"


def format_usage_text(primary: float, secondary: Optional[float] = None) -> str:
    """Compact indicator text; the secondary segment is omitted when zero or absent."""
    text = format_percent(primary)
    if secondary:
        text += f"|{format_percent(secondary)}"
    return text


def is_error_marker(raw: Any) -> bool:
    """
    Return True if a raw result means the provider is unavailable.

    Absent results, non-mapping markers (strings, flags) and mappings with a
    truthy "error" key all count as unavailable.
    """
    if raw is None:
        return True
    if not isinstance(raw, Mapping):
        return True
    return bool(raw.get("error"))


def _section(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, Mapping) else {}


def _reset_suffix(section: Mapping[str, Any]) -> str:
    resets_in = section.get("resets_in")
    if resets_in:
        return f", resets in {resets_in}"
    return ""


def _parse_windowed(provider_id: ProviderId, payload: Mapping[str, Any]) -> NormalizedMetric:
    primary_key, secondary_key = WINDOW_FIELDS[provider_id]
    primary_section = _section(payload, primary_key)
    secondary_section = _section(payload, secondary_key)

    primary = parse_percent(primary_section.get("used"))
    secondary = parse_percent(secondary_section.get("used"))

    line = (
        f"- {provider_id.display_name}: "
        f"{format_percent(primary)} (5h{_reset_suffix(primary_section)}) | "
        f"{format_percent(secondary)} (7d{_reset_suffix(secondary_section)})"
    )
    return NormalizedMetric(
        provider_id=provider_id,
        primary_percent=primary,
        secondary_percent=secondary,
        summary_text=format_usage_text(primary, secondary),
        tooltip_lines=(line,),
    )


def _parse_multi_model(provider_id: ProviderId, payload: Mapping[str, Any]) -> NormalizedMetric:
    models = payload.get("models")
    lines: List[str] = []
    peak = 0.0

    if isinstance(models, Mapping):
        for model_name, usage in models.items():
            usage = usage if isinstance(usage, Mapping) else {}
            percent = parse_percent(usage.get("used"))
            peak = max(peak, percent)
            reset = f" (resets in {usage['resets_in']})" if usage.get("resets_in") else ""
            lines.append(f"  * {model_name}: {format_percent(percent)}{reset}")
    else:
        logger.debug(f"{provider_id.value}: payload has no models mapping")

    lines.append(f"- {provider_id.display_name}: {format_percent(peak)} (max across models)")
    return NormalizedMetric(
        provider_id=provider_id,
        primary_percent=peak,
        summary_text=format_usage_text(peak),
        tooltip_lines=tuple(lines),
    )


def _parse_quota_share(provider_id: ProviderId, payload: Mapping[str, Any]) -> NormalizedMetric:
    quota = _section(payload, "token_quota")
    percent = parse_percent(quota.get("percentage"))
    reset = f" (resets in {quota['resets_in']})" if quota.get("resets_in") else ""
    return NormalizedMetric(
        provider_id=provider_id,
        primary_percent=percent,
        summary_text=format_usage_text(percent),
        tooltip_lines=(f"- {provider_id.display_name}: {format_percent(percent)}{reset}",),
    )


def _parse_balance(provider_id: ProviderId, payload: Mapping[str, Any]) -> NormalizedMetric:
    balance = round(_parse_amount(payload.get("balance_usd")), 2)
    return NormalizedMetric(
        provider_id=provider_id,
        balance_usd=balance,
        summary_text=format_usd(balance),
        tooltip_lines=(f"- {provider_id.display_name}: {format_usd(balance)}",),
    )


_PARSERS: Dict[PayloadKind, Callable[[ProviderId, Mapping[str, Any]], NormalizedMetric]] = {
    PayloadKind.WINDOWED: _parse_windowed,
    PayloadKind.MULTI_MODEL: _parse_multi_model,
    PayloadKind.QUOTA_SHARE: _parse_quota_share,
    PayloadKind.BALANCE: _parse_balance,
}

# Every provider must have a parser for its payload kind
_missing = [p.value for p in PROVIDER_PRIORITY if p.payload_kind not in _PARSERS]
if _missing:
    raise RuntimeError(f"No payload parser registered for providers: {', '.join(_missing)}")


def parse_provider_result(provider_id: ProviderId, raw: Any) -> Optional[NormalizedMetric]:
    """
    Parse one provider's raw fetch result into a normalized metric.

    Args:
        provider_id: Provider the result belongs to
        raw: Raw value from the fetcher document (may be None)

    Returns:
        NormalizedMetric, or None if the provider is unavailable this cycle
    """
    if is_error_marker(raw):
        if raw is not None:
            error = raw.get("error") if isinstance(raw, Mapping) else raw
            logger.debug(f"{provider_id.value} unavailable: {error}")
        return None

    metric = _PARSERS[provider_id.payload_kind](provider_id, raw)
    logger.debug(f"Parsed {provider_id.value}: {metric.summary_text}")
    return metric

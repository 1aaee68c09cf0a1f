#!/usr/bin/env python3
"""
Provider Models

This module defines the fixed set of quota providers. Declaration order of
ProviderId is the priority order used when a single combined indicator is
shown for all providers.
"""

from enum import Enum
from typing import Iterable, Tuple


class PayloadKind(str, Enum):
    """Shape of the usage payload a provider returns."""

    WINDOWED = "windowed"
    MULTI_MODEL = "multi_model"
    QUOTA_SHARE = "quota_share"
    BALANCE = "balance"


class ProviderId(str, Enum):
    """
    Identifier of an AI usage provider.

    Members are declared in priority order.
    """

    CLAUDE = "claude"
    CODEX = "codex"
    GEMINI = "gemini"
    ZAI = "zai"
    OPENROUTER = "openrouter"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def payload_kind(self) -> PayloadKind:
        return _PAYLOAD_KINDS[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def priority(self) -> int:
        """Position in the fixed priority order (0 is highest)."""
        return PROVIDER_PRIORITY.index(self)


_DISPLAY_NAMES = {
    ProviderId.CLAUDE: "Claude",
    ProviderId.CODEX: "Codex",
    ProviderId.GEMINI: "Gemini",
    ProviderId.ZAI: "Z.AI",
    ProviderId.OPENROUTER: "OpenRouter",
}

_PAYLOAD_KINDS = {
    ProviderId.CLAUDE: PayloadKind.WINDOWED,
    ProviderId.CODEX: PayloadKind.WINDOWED,
    ProviderId.GEMINI: PayloadKind.MULTI_MODEL,
    ProviderId.ZAI: PayloadKind.QUOTA_SHARE,
    ProviderId.OPENROUTER: PayloadKind.BALANCE,
}

_DESCRIPTIONS = {
    ProviderId.CLAUDE: "Claude Code usage (5h/7d window)",
    ProviderId.CODEX: "ChatGPT/Codex usage (5h/7d window)",
    ProviderId.GEMINI: "Google Gemini usage (GCP-based)",
    ProviderId.ZAI: "Z.AI shared token quota",
    ProviderId.OPENROUTER: "OpenRouter API credit balance",
}

PROVIDER_PRIORITY: Tuple[ProviderId, ...] = tuple(ProviderId)


def order_by_priority(providers: Iterable[ProviderId]) -> Tuple[ProviderId, ...]:
    """
    Return providers deduplicated and sorted by the fixed priority order.

    Args:
        providers: Any iterable of ProviderId values

    Returns:
        Tuple of providers in priority order
    """
    wanted = set(providers)
    return tuple(p for p in PROVIDER_PRIORITY if p in wanted)


def parse_provider_id(value: str) -> ProviderId:
    """
    Parse a provider id string (case-insensitive).

    Raises:
        ValueError: If the value is not a known provider id
    """
    if isinstance(value, ProviderId):
        return value
    try:
        return ProviderId(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(p.value for p in PROVIDER_PRIORITY)
        raise ValueError(f"Unknown provider '{value}' (expected one of: {valid})") from None

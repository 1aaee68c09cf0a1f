"""
General helper utilities for the quota status bar.

This module provides common utility functions that are used
across multiple modules in the application.
"""

from typing import Optional


def create_progress_bar(percent: Optional[float], width: int = 20) -> str:
    """
    Create a text-based usage bar.

    Args:
        percent: Usage percentage (0-100); None renders an empty bar
        width: Width of the bar

    Returns:
        Bar string
    """
    if percent is None:
        return "[" + "░" * width + "]"

    ratio = min(100.0, max(0.0, percent)) / 100.0
    filled = int(width * ratio)
    bar = "█" * filled + "░" * (width - filled)
    return f"[{bar}]"


def mask_secret(value: Optional[str]) -> Optional[str]:
    """Mask a secret for safe logging."""
    return "***" if value else None

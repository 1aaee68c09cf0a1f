"""
Utilities module for the quota status bar.

This module provides shared utility functions organized by concern:
- Logging utilities for consistent logging setup and structured events
- General helper functions for common operations
"""

# Logging utilities
from .logging import (
    setup_logging,
    log_cycle_summary,
    log_cycle_failure,
    log_usage_alert,
)

# General helper utilities
from .helpers import create_progress_bar, mask_secret

__all__ = [
    "setup_logging",
    "log_cycle_summary",
    "log_cycle_failure",
    "log_usage_alert",
    "create_progress_bar",
    "mask_secret",
]

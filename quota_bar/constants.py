#!/usr/bin/env python3
"""
Application Constants

This module contains exit codes, color thresholds and refresh defaults used
throughout the quota status bar.
"""

# Exit codes for different failure modes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 3
EXIT_FETCH_FAILURE = 4
EXIT_INTERRUPTED = 130  # Conventional exit code for Ctrl+C
EXIT_UNEXPECTED_ERROR = 10

# Color tier thresholds (percent)
WARNING_THRESHOLD = 70.0
CRITICAL_THRESHOLD = 90.0

# Refresh interval bounds
MIN_REFRESH_INTERVAL_MINUTES = 1
MAX_REFRESH_INTERVAL_MINUTES = 60
DEFAULT_REFRESH_INTERVAL_MINUTES = 2
DEFAULT_FETCH_TIMEOUT = 60  # seconds

# Default external fetcher command (emits JSON with --json)
DEFAULT_FETCHER_COMMAND = "cclimits"

# Environment variables that carry provider credentials (keyed by provider id)
CREDENTIAL_ENV_VARS = {
    "claude": "CLAUDE_CREDENTIAL",
    "codex": "CODEX_CREDENTIAL",
    "gemini": "GEMINI_CREDENTIAL",
    "zai": "ZAI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}

# Tooltip header for the combined indicator
TOOLTIP_HEADER = "AI Usage Details"

"""
Configuration management for the quota status bar.

This module provides centralized configuration handling with support for
environment variables, .env.local files, CLI overrides and session edits.

Uses a schema-driven approach with Pydantic for validation.
"""

from .store import SettingsStore, ConfigError
from .schema import ConfigSchema
from .loader import ConfigLoader

__all__ = ["SettingsStore", "ConfigError", "ConfigSchema", "ConfigLoader"]

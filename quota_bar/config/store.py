"""
Settings store module.

This module provides the SettingsStore, which serves a fresh, validated
RefreshConfig on every read so that configuration edits take effect on the
next refresh cycle without a restart.
"""

from __future__ import annotations

import logging
from argparse import Namespace
from typing import Any, Dict, Iterable, Optional

from ..models.provider import ProviderId
from ..models.refresh import RefreshConfig
from ..models.snapshot import RenderMode
from ..utils.helpers import mask_secret
from .loader import ConfigLoader
from .schema import ConfigSchema

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


# Keyword accepted by SettingsStore.update() -> env var name of the field
_UPDATE_KEYS = {
    "enabled_providers": "QUOTA_ENABLED_PROVIDERS",
    "use_cache": "QUOTA_USE_CACHED",
    "refresh_interval_minutes": "QUOTA_REFRESH_INTERVAL_MINUTES",
    "render_mode": "QUOTA_RENDER_MODE",
    "fetcher_command": "QUOTA_FETCHER_COMMAND",
    "fetcher_url": "QUOTA_FETCHER_URL",
}


def _override_value(value: Any) -> Any:
    if isinstance(value, ProviderId):
        return value.value
    if isinstance(value, RenderMode):
        return value.value
    if isinstance(value, (list, tuple, set, frozenset)):
        return [v.value if isinstance(v, ProviderId) else v for v in value]
    return value


class SettingsStore:
    """
    Read-mostly access to the user's settings.

    Every read() reloads from .env.local, the environment and CLI arguments,
    with in-memory session overrides applied on top.
    """

    def __init__(self, cli_args: Optional[Namespace] = None,
                 overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize settings store.

        Args:
            cli_args: Parsed CLI arguments (if available)
            overrides: Initial overrides keyed by env var name
        """
        self._cli_args = cli_args
        self._overrides: Dict[str, Any] = dict(overrides or {})

    def load_schema(self) -> ConfigSchema:
        """
        Load and validate the full configuration.

        Raises:
            ConfigError: If configuration validation fails
        """
        try:
            return ConfigLoader.load(
                schema=ConfigSchema,
                cli_args=self._cli_args,
                overrides=self._overrides,
            )
        except ValueError as e:
            raise ConfigError(str(e)) from e

    def read(self) -> RefreshConfig:
        """Return a fresh configuration snapshot for one refresh cycle."""
        return self.load_schema().to_refresh_config()

    def update(self, **changes: Any) -> RefreshConfig:
        """
        Apply session edits (e.g. from a provider selection surface).

        Accepted keywords: enabled_providers, use_cache, refresh_interval_minutes,
        render_mode, fetcher_command, fetcher_url.

        Returns:
            The configuration after the change

        Raises:
            ConfigError: If a keyword is unknown or the result does not validate
        """
        unknown = sorted(set(changes) - set(_UPDATE_KEYS))
        if unknown:
            raise ConfigError(f"Unknown setting(s): {', '.join(unknown)}")

        previous = dict(self._overrides)
        for key, value in changes.items():
            value = _override_value(value)
            # An empty provider selection must stay empty rather than fall back to defaults
            if key == "enabled_providers" and not value:
                value = "none"
            self._overrides[_UPDATE_KEYS[key]] = value

        try:
            config = self.read()
        except ConfigError:
            self._overrides = previous
            raise

        logger.info(f"Settings updated: {', '.join(sorted(changes))}")
        return config

    def set_enabled_providers(self, providers: Iterable[ProviderId]) -> RefreshConfig:
        return self.update(enabled_providers=list(providers))

    def masked(self) -> Dict[str, Any]:
        """
        Return configuration for safe logging (hides credential values).

        Returns:
            Dictionary with sensitive values masked
        """
        schema = self.load_schema()
        data = schema.model_dump(mode="json")
        for field_name, field_info in ConfigSchema.model_fields.items():
            extra = field_info.json_schema_extra if isinstance(field_info.json_schema_extra, dict) else {}
            if extra.get("sensitive"):
                data[field_name] = mask_secret(data.get(field_name))
        return data

"""
Configuration schema definition using Pydantic.

This module defines the declarative configuration schema that serves as
the single source of truth for all configuration in the application.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..constants import (
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_FETCHER_COMMAND,
    DEFAULT_REFRESH_INTERVAL_MINUTES,
    MAX_REFRESH_INTERVAL_MINUTES,
    MIN_REFRESH_INTERVAL_MINUTES,
)
from ..models.provider import PROVIDER_PRIORITY, ProviderId, order_by_priority, parse_provider_id
from ..models.refresh import RefreshConfig
from ..models.snapshot import RenderMode


class ConfigSchema(BaseModel):
    """
    Declarative configuration schema.

    This is the single source of truth for all application configuration.
    Each field can be set via environment variables or CLI arguments.
    """

    # Provider selection
    enabled_providers: List[str] = Field(
        default_factory=lambda: [p.value for p in PROVIDER_PRIORITY],
        description="Comma-separated providers to poll (claude, codex, gemini, zai, openrouter)",
        json_schema_extra={
            "env_var": "QUOTA_ENABLED_PROVIDERS",
            "cli_arg": "providers",
        }
    )

    use_cached: bool = Field(
        True,
        description="Let the fetcher serve cached data if fresh (<60s)",
        json_schema_extra={
            "env_var": "QUOTA_USE_CACHED",
            "cli_arg": "use_cached",
            "cli_choices": ["true", "false"],
        }
    )

    refresh_interval_minutes: int = Field(
        DEFAULT_REFRESH_INTERVAL_MINUTES,
        ge=MIN_REFRESH_INTERVAL_MINUTES,
        le=MAX_REFRESH_INTERVAL_MINUTES,
        description="Minutes between scheduled refreshes (1-60)",
        json_schema_extra={
            "env_var": "QUOTA_REFRESH_INTERVAL_MINUTES",
            "cli_arg": "interval",
        }
    )

    render_mode: RenderMode = Field(
        RenderMode.SINGLE,
        description="Indicator layout: single or per-provider",
        json_schema_extra={
            "env_var": "QUOTA_RENDER_MODE",
            "cli_arg": "mode",
            "cli_choices": [m.value for m in RenderMode],
        }
    )

    # Fetcher configuration
    fetcher_command: str = Field(
        DEFAULT_FETCHER_COMMAND,
        min_length=1,
        description="Command line of the quota fetcher (invoked with --json)",
        json_schema_extra={
            "env_var": "QUOTA_FETCHER_COMMAND",
            "cli_arg": "fetcher",
        }
    )

    fetcher_url: Optional[str] = Field(
        None,
        description="Quota fetcher service URL (overrides the fetcher command)",
        json_schema_extra={
            "env_var": "QUOTA_FETCHER_URL",
            "cli_arg": "fetcher_url",
        }
    )

    fetch_timeout_seconds: float = Field(
        DEFAULT_FETCH_TIMEOUT,
        ge=1,
        le=600,
        description="Seconds to wait for one fetch (1-600)",
        json_schema_extra={
            "env_var": "QUOTA_FETCH_TIMEOUT",
            "cli_arg": "fetch_timeout",
        }
    )

    # Provider credentials (optional, never logged)
    claude_credential: Optional[str] = Field(
        None,
        description="Claude credential passed to the fetcher",
        json_schema_extra={"env_var": "CLAUDE_CREDENTIAL", "sensitive": True, "provider": "claude"}
    )

    codex_credential: Optional[str] = Field(
        None,
        description="Codex credential passed to the fetcher",
        json_schema_extra={"env_var": "CODEX_CREDENTIAL", "sensitive": True, "provider": "codex"}
    )

    gemini_credential: Optional[str] = Field(
        None,
        description="Gemini credential passed to the fetcher",
        json_schema_extra={"env_var": "GEMINI_CREDENTIAL", "sensitive": True, "provider": "gemini"}
    )

    zai_credential: Optional[str] = Field(
        None,
        description="Z.AI API key passed to the fetcher",
        json_schema_extra={"env_var": "ZAI_API_KEY", "sensitive": True, "provider": "zai"}
    )

    openrouter_credential: Optional[str] = Field(
        None,
        description="OpenRouter API key passed to the fetcher",
        json_schema_extra={"env_var": "OPENROUTER_API_KEY", "sensitive": True, "provider": "openrouter"}
    )

    @field_validator('enabled_providers', mode='before')
    @classmethod
    def parse_providers(cls, v: Any) -> List[str]:
        """Parse providers from a comma-separated string or list, in priority order."""
        if v is None:
            return []
        if isinstance(v, str):
            if v.strip().lower() == "none":
                return []
            items = [item for item in v.replace(" ", ",").split(",") if item.strip()]
        else:
            items = list(v)
        providers = [parse_provider_id(item) for item in items]
        return [p.value for p in order_by_priority(providers)]

    @field_validator('use_cached', mode='before')
    @classmethod
    def parse_bool(cls, v: Any) -> bool:
        """Parse boolean from string values."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            v_lower = v.strip().lower()
            if v_lower in ('1', 'true', 'yes', 'on'):
                return True
            elif v_lower in ('0', 'false', 'no', 'off'):
                return False
            else:
                raise ValueError(f"Invalid boolean value: {v}")
        return bool(v)

    def to_refresh_config(self) -> RefreshConfig:
        """Build the immutable per-cycle view of this configuration."""
        credentials = {}
        for provider_id in PROVIDER_PRIORITY:
            secret = getattr(self, f"{provider_id.value}_credential")
            if secret:
                credentials[provider_id] = secret

        return RefreshConfig(
            enabled_providers=tuple(ProviderId(p) for p in self.enabled_providers),
            use_cache=self.use_cached,
            refresh_interval_seconds=self.refresh_interval_minutes * 60,
            render_mode=self.render_mode,
            credentials=credentials,
            fetcher_command=self.fetcher_command,
            fetcher_url=self.fetcher_url,
            fetch_timeout_seconds=self.fetch_timeout_seconds,
        )

    model_config = {
        "validate_assignment": True,
        "extra": "forbid"
    }

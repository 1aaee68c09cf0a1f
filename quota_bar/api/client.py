"""
Quota fetcher client management module.

This module creates the quota fetcher for a refresh configuration and
provides the HTTP variant for fetchers exposed as a local service.
"""

import logging
from typing import Dict, Mapping, Optional

import httpx

from ..models.provider import ProviderId
from ..models.refresh import RefreshConfig
from .fetcher import (
    FetchRequest,
    FetchResult,
    FetchTransportError,
    QuotaFetcher,
    SubprocessQuotaFetcher,
    decode_fetch_output,
)

logger = logging.getLogger(__name__)


def credential_headers(credentials: Mapping[ProviderId, str]) -> Dict[str, str]:
    """Map provider credentials to request headers (e.g. X-Openrouter-Credential)."""
    return {
        f"X-{ProviderId(provider_id).value.capitalize()}-Credential": secret
        for provider_id, secret in credentials.items()
        if secret
    }


class HttpQuotaFetcher:
    """
    Fetches the provider result document from a quota fetcher service.
    """

    def __init__(self, url: str, timeout: float = 60.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize HTTP fetcher.

        Args:
            url: Service endpoint returning the JSON result document
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def fetch(self, request: FetchRequest) -> FetchResult:
        params = {
            "providers": ",".join(p.value for p in request.enabled_providers),
            "cached": "1" if request.use_cache else "0",
        }
        headers = credential_headers(request.credentials)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.url, params=params, headers=headers)
        except httpx.TimeoutException as e:
            raise FetchTransportError(f"Quota service timed out: {e}") from e
        except httpx.HTTPError as e:
            raise FetchTransportError(f"Quota service request failed: {e}") from e

        if response.status_code != 200:
            raise FetchTransportError(
                f"Quota service returned HTTP {response.status_code}: {response.text[:100]}"
            )

        text = response.text
        return FetchResult(results=decode_fetch_output(text), raw_output=text)


def create_quota_fetcher(config: RefreshConfig) -> QuotaFetcher:
    """Create the quota fetcher described by the configuration."""
    if config.fetcher_url:
        logger.debug(f"Using quota service at {config.fetcher_url}")
        return HttpQuotaFetcher(config.fetcher_url, timeout=config.fetch_timeout_seconds)

    logger.debug(f"Using quota fetcher command: {config.fetcher_command}")
    return SubprocessQuotaFetcher(config.fetcher_command, timeout=config.fetch_timeout_seconds)

#!/usr/bin/env python3
"""
API package for the quota status bar.

This package provides the fetch contract with the external quota fetcher,
the subprocess and HTTP fetcher implementations, and fetcher creation.
"""

from .fetcher import (
    FetchError,
    FetchTransportError,
    MalformedResponseError,
    FetchRequest,
    FetchResult,
    QuotaFetcher,
    SubprocessQuotaFetcher,
    build_fetch_command,
    decode_fetch_output,
)

from .client import (
    HttpQuotaFetcher,
    create_quota_fetcher,
)

__all__ = [
    # Errors
    "FetchError",
    "FetchTransportError",
    "MalformedResponseError",
    # Fetch contract
    "FetchRequest",
    "FetchResult",
    "QuotaFetcher",
    "build_fetch_command",
    "decode_fetch_output",
    # Fetchers
    "SubprocessQuotaFetcher",
    "HttpQuotaFetcher",
    "create_quota_fetcher",
]

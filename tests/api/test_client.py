#!/usr/bin/env python3
"""
Tests for the HTTP quota fetcher and fetcher selection.
"""

import json
import unittest

import httpx

from quota_bar.api.client import HttpQuotaFetcher, create_quota_fetcher, credential_headers
from quota_bar.api.fetcher import (
    FetchRequest,
    FetchTransportError,
    MalformedResponseError,
    SubprocessQuotaFetcher,
)
from quota_bar.models import ProviderId, RefreshConfig


class TestCredentialHeaders(unittest.TestCase):
    def test_headers(self):
        headers = credential_headers({ProviderId.OPENROUTER: "or-secret", ProviderId.GEMINI: None})
        self.assertEqual(headers, {"X-Openrouter-Credential": "or-secret"})


class TestHttpQuotaFetcher(unittest.IsolatedAsyncioTestCase):
    async def test_successful_fetch(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"claude": {"five_hour": {"used": "42%"}}})

        fetcher = HttpQuotaFetcher("http://quota.local/limits", transport=httpx.MockTransport(handler))
        request = FetchRequest(
            enabled_providers=(ProviderId.GEMINI, ProviderId.CLAUDE),
            use_cache=True,
            credentials={ProviderId.CLAUDE: "claude-secret"},
        )
        result = await fetcher.fetch(request)

        self.assertEqual(result.results, {"claude": {"five_hour": {"used": "42%"}}})
        self.assertEqual(json.loads(result.raw_output), result.results)
        sent = seen[0]
        self.assertEqual(sent.url.params["providers"], "claude,gemini")
        self.assertEqual(sent.url.params["cached"], "1")
        self.assertEqual(sent.headers["X-Claude-Credential"], "claude-secret")

    async def test_http_error_status(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(503, text="maintenance"))
        fetcher = HttpQuotaFetcher("http://quota.local/limits", transport=transport)
        with self.assertRaises(FetchTransportError) as ctx:
            await fetcher.fetch(FetchRequest(enabled_providers=(ProviderId.CLAUDE,)))
        self.assertIn("HTTP 503", str(ctx.exception))

    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        fetcher = HttpQuotaFetcher("http://quota.local/limits", transport=httpx.MockTransport(handler))
        with self.assertRaises(FetchTransportError):
            await fetcher.fetch(FetchRequest(enabled_providers=(ProviderId.CLAUDE,)))

    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        fetcher = HttpQuotaFetcher("http://quota.local/limits", transport=httpx.MockTransport(handler))
        with self.assertRaises(FetchTransportError) as ctx:
            await fetcher.fetch(FetchRequest(enabled_providers=(ProviderId.CLAUDE,)))
        self.assertIn("timed out", str(ctx.exception))

    async def test_malformed_body(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        fetcher = HttpQuotaFetcher("http://quota.local/limits", transport=transport)
        with self.assertRaises(MalformedResponseError):
            await fetcher.fetch(FetchRequest(enabled_providers=(ProviderId.CLAUDE,)))


class TestCreateQuotaFetcher(unittest.TestCase):
    def test_command_by_default(self):
        fetcher = create_quota_fetcher(RefreshConfig(fetcher_command="cclimits", fetch_timeout_seconds=15))
        self.assertIsInstance(fetcher, SubprocessQuotaFetcher)
        self.assertEqual(fetcher.command, "cclimits")
        self.assertEqual(fetcher.timeout, 15)

    def test_url_selects_http(self):
        fetcher = create_quota_fetcher(RefreshConfig(fetcher_url="http://quota.local/limits"))
        self.assertIsInstance(fetcher, HttpQuotaFetcher)
        self.assertEqual(fetcher.url, "http://quota.local/limits")


if __name__ == "__main__":
    unittest.main()

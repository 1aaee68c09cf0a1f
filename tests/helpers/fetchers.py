#!/usr/bin/env python3
"""
Helper fetchers for refresh cycle tests.

FakeFetcher stands in for the external quota fetcher so pipeline and
controller tests never spawn a process or open a socket.
"""

import asyncio
import json

from quota_bar.api.fetcher import FetchResult


SAMPLE_RESULTS = {
    "claude": {"five_hour": {"used": "42%"}, "seven_day": {"used": "10%"}},
    "gemini": {"models": {"pro": {"used": "95%"}}},
    "openrouter": {"balance_usd": 12.5},
}


class FakeFetcher:
    """Records requests and returns canned results or raises."""

    def __init__(self, results=None, error=None, delay=0.0):
        self.results = results if results is not None else SAMPLE_RESULTS
        self.error = error
        self.delay = delay
        self.requests = []

    async def fetch(self, request):
        self.requests.append(request)
        # Delay is read at call time so a test can slow down one cycle only
        delay = self.delay
        if delay:
            await asyncio.sleep(delay)
        if self.error is not None:
            raise self.error
        return FetchResult(results=self.results, raw_output=json.dumps(self.results))

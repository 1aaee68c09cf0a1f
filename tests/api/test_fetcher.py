#!/usr/bin/env python3
"""
Tests for the quota fetcher contract and the subprocess fetcher.

Subprocess tests run small inline scripts with the current interpreter in
place of the real fetcher.
"""

import asyncio
import json
import shlex
import sys
import unittest
from unittest.mock import patch

from quota_bar.api.fetcher import (
    FetchRequest,
    FetchTransportError,
    MalformedResponseError,
    SubprocessQuotaFetcher,
    build_fetch_command,
    credential_environment,
    decode_fetch_output,
)
from quota_bar.models import PROVIDER_PRIORITY, ProviderId


def python_command(script: str) -> str:
    """Command line running an inline script with this interpreter."""
    return f"{shlex.quote(sys.executable)} -c {shlex.quote(script)}"


ECHO_SCRIPT = (
    "import json, os, sys; "
    "print(json.dumps({'argv': sys.argv[1:], 'key': os.environ.get('ZAI_API_KEY'), "
    "'zai': {'token_quota': {'percentage': 5}}}))"
)


class TestBuildFetchCommand(unittest.TestCase):
    def test_all_providers_no_flags(self):
        request = FetchRequest(enabled_providers=PROVIDER_PRIORITY, use_cache=True)
        self.assertEqual(build_fetch_command("cclimits", request), ["cclimits", "--json", "--cached"])

    def test_subset_adds_provider_flags_in_priority_order(self):
        request = FetchRequest(enabled_providers=(ProviderId.OPENROUTER, ProviderId.CLAUDE))
        self.assertEqual(
            build_fetch_command("python cclimits.py", request),
            ["python", "cclimits.py", "--json", "--claude", "--openrouter"],
        )

    def test_quoted_command(self):
        request = FetchRequest(enabled_providers=PROVIDER_PRIORITY)
        argv = build_fetch_command("'/opt/my tools/cclimits' --verbose", request)
        self.assertEqual(argv, ["/opt/my tools/cclimits", "--verbose", "--json"])

    def test_empty_command(self):
        request = FetchRequest(enabled_providers=PROVIDER_PRIORITY)
        with self.assertRaises(FetchTransportError):
            build_fetch_command("   ", request)


class TestDecodeFetchOutput(unittest.TestCase):
    def test_object(self):
        self.assertEqual(decode_fetch_output('{"claude": {"error": "x"}}'), {"claude": {"error": "x"}})

    def test_invalid_json(self):
        with self.assertRaises(MalformedResponseError):
            decode_fetch_output("Traceback (most recent call last):")

    def test_non_object(self):
        for text in ("[]", '"claude"', "42", "null"):
            with self.subTest(text=text):
                with self.assertRaises(MalformedResponseError):
                    decode_fetch_output(text)


class TestCredentialEnvironment(unittest.TestCase):
    def test_maps_to_fetcher_variables(self):
        env = credential_environment({
            ProviderId.ZAI: "zai-secret",
            ProviderId.OPENROUTER: "or-secret",
            ProviderId.CLAUDE: "",
        })
        self.assertEqual(env, {"ZAI_API_KEY": "zai-secret", "OPENROUTER_API_KEY": "or-secret"})


class TestSubprocessQuotaFetcher(unittest.IsolatedAsyncioTestCase):
    async def test_successful_fetch(self):
        fetcher = SubprocessQuotaFetcher(python_command(ECHO_SCRIPT), timeout=30)
        request = FetchRequest(
            enabled_providers=(ProviderId.ZAI,),
            use_cache=True,
            credentials={ProviderId.ZAI: "zai-secret"},
        )
        result = await fetcher.fetch(request)

        self.assertEqual(result.results["argv"], ["--json", "--cached", "--zai"])
        self.assertEqual(result.results["key"], "zai-secret")
        self.assertEqual(result.results["zai"], {"token_quota": {"percentage": 5}})
        self.assertEqual(json.loads(result.raw_output), result.results)

    async def test_nonzero_exit(self):
        script = "import sys; sys.stderr.write('token expired'); sys.exit(2)"
        fetcher = SubprocessQuotaFetcher(python_command(script), timeout=30)
        with self.assertRaises(FetchTransportError) as ctx:
            await fetcher.fetch(FetchRequest(enabled_providers=PROVIDER_PRIORITY))
        self.assertIn("status 2", str(ctx.exception))
        self.assertIn("token expired", str(ctx.exception))

    async def test_timeout(self):
        fetcher = SubprocessQuotaFetcher(python_command("import time; time.sleep(10)"), timeout=0.3)
        with self.assertRaises(FetchTransportError) as ctx:
            await fetcher.fetch(FetchRequest(enabled_providers=PROVIDER_PRIORITY))
        self.assertIn("timed out", str(ctx.exception))

    async def test_missing_executable(self):
        fetcher = SubprocessQuotaFetcher("/nonexistent/quota-fetcher-binary")
        with self.assertRaises(FetchTransportError):
            await fetcher.fetch(FetchRequest(enabled_providers=PROVIDER_PRIORITY))

    async def test_malformed_output(self):
        fetcher = SubprocessQuotaFetcher(python_command("print('not json')"), timeout=30)
        with self.assertRaises(MalformedResponseError):
            await fetcher.fetch(FetchRequest(enabled_providers=PROVIDER_PRIORITY))

    async def test_invalid_utf8_output_is_malformed(self):
        script = "import sys; sys.stdout.buffer.write(b'{\"zai\": \"\\xff\"}')"
        fetcher = SubprocessQuotaFetcher(python_command(script), timeout=30)
        with self.assertRaises(MalformedResponseError) as ctx:
            await fetcher.fetch(FetchRequest(enabled_providers=PROVIDER_PRIORITY))
        self.assertIn("UTF-8", str(ctx.exception))

    async def test_cancelled_fetch_kills_process(self):
        started = []
        create_subprocess_exec = asyncio.create_subprocess_exec

        async def spawn(*args, **kwargs):
            process = await create_subprocess_exec(*args, **kwargs)
            started.append(process)
            return process

        fetcher = SubprocessQuotaFetcher(python_command("import time; time.sleep(10)"), timeout=30)
        with patch("quota_bar.api.fetcher.asyncio.create_subprocess_exec", side_effect=spawn):
            task = asyncio.ensure_future(fetcher.fetch(FetchRequest(enabled_providers=PROVIDER_PRIORITY)))
            while not started:
                await asyncio.sleep(0.01)
            task.cancel()
            with self.assertRaises(asyncio.CancelledError):
                await task

        returncode = await asyncio.wait_for(started[0].wait(), timeout=5)
        self.assertNotEqual(returncode, 0)


if __name__ == "__main__":
    unittest.main()

#!/usr/bin/env python3
"""
Tests for the CLI flags and the once command.
"""

import io
import json
import os
import sys
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

# Add parent directory to path to import helpers
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from helpers.fetchers import FakeFetcher

from quota_bar.api.fetcher import FetchTransportError
from quota_bar.cli.main import main
from quota_bar.cli.parser import create_argument_parser
from quota_bar.config import SettingsStore
from quota_bar.constants import (
    EXIT_CONFIG_ERROR,
    EXIT_FETCH_FAILURE,
    EXIT_INTERRUPTED,
)
from quota_bar.models import PROVIDER_PRIORITY, ProviderId, RenderMode


class TestCliFlags(unittest.TestCase):
    @patch.dict(os.environ, {"QUOTA_REFRESH_INTERVAL_MINUTES": "3"}, clear=True)
    def test_flags_override_environment(self):
        parser = create_argument_parser()
        args = parser.parse_args([
            "watch",
            "--providers", "gemini,claude",
            "--use-cached", "false",
            "--interval", "10",
            "--mode", "per-provider",
            "--fetcher", "python cclimits.py",
            "--fetch-timeout", "30",
        ])
        config = SettingsStore(cli_args=args).read()

        self.assertEqual(config.enabled_providers, (ProviderId.CLAUDE, ProviderId.GEMINI))
        self.assertFalse(config.use_cache)
        self.assertEqual(config.refresh_interval_seconds, 600)
        self.assertEqual(config.render_mode, RenderMode.PER_PROVIDER)
        self.assertEqual(config.fetcher_command, "python cclimits.py")
        self.assertEqual(config.fetch_timeout_seconds, 30)

    @patch.dict(os.environ, {"QUOTA_REFRESH_INTERVAL_MINUTES": "3"}, clear=True)
    def test_environment_used_when_flags_absent(self):
        args = create_argument_parser().parse_args(["once"])
        config = SettingsStore(cli_args=args).read()
        self.assertEqual(config.refresh_interval_seconds, 180)
        self.assertFalse(args.json)

    def test_command_required(self):
        with redirect_stdout(io.StringIO()), patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                create_argument_parser().parse_args([])

    def test_help_lists_providers_in_priority_order(self):
        epilog = create_argument_parser().epilog
        positions = [epilog.index(p.description) for p in PROVIDER_PRIORITY]
        self.assertEqual(positions, sorted(positions))
        self.assertIn("openrouter  OpenRouter API credit balance", epilog)

    def test_invalid_mode_rejected(self):
        with patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                create_argument_parser().parse_args(["once", "--mode", "stacked"])


@patch("quota_bar.cli.main.setup_logging")
class TestMainOnce(unittest.TestCase):
    def run_main(self, argv, fetcher):
        output = io.StringIO()
        with patch.object(sys, "argv", ["quota-bar"] + argv), \
                patch("quota_bar.core.pipeline.create_quota_fetcher", return_value=fetcher), \
                redirect_stdout(output):
            try:
                main()
                code = 0
            except SystemExit as e:
                code = e.code
        return code, output.getvalue()

    @patch.dict(os.environ, {}, clear=True)
    def test_once_json(self, _setup_logging):
        fetcher = FakeFetcher()
        code, output = self.run_main(["once", "--json"], fetcher)

        self.assertEqual(code, 0)
        data = json.loads(output)
        self.assertEqual(data["state"], "ok")
        self.assertEqual(data["prioritized_provider_id"], "claude")
        self.assertFalse(fetcher.requests[0].use_cache)

    @patch.dict(os.environ, {}, clear=True)
    def test_once_fetch_failure_exit_code(self, _setup_logging):
        fetcher = FakeFetcher(error=FetchTransportError("Fetcher exited with status 1"))
        code, output = self.run_main(["once", "--json"], fetcher)

        self.assertEqual(code, EXIT_FETCH_FAILURE)
        self.assertEqual(json.loads(output)["state"], "error")

    @patch.dict(os.environ, {"QUOTA_REFRESH_INTERVAL_MINUTES": "100"}, clear=True)
    def test_config_error_exit_code(self, _setup_logging):
        code, _ = self.run_main(["once"], FakeFetcher())
        self.assertEqual(code, EXIT_CONFIG_ERROR)

    @patch.dict(os.environ, {}, clear=True)
    def test_interrupted_exit_code(self, _setup_logging):
        with patch("quota_bar.cli.main.run_watch", side_effect=KeyboardInterrupt):
            code, _ = self.run_main(["watch"], FakeFetcher())
        self.assertEqual(code, EXIT_INTERRUPTED)


if __name__ == "__main__":
    unittest.main()

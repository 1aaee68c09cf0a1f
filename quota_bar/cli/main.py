"""
CLI main application module.

This module contains the main application entry point and the high-level
flow of the `once` and `watch` commands.
"""

import asyncio
import logging
import sys

from ..constants import (
    EXIT_SUCCESS,
    EXIT_CONFIG_ERROR,
    EXIT_FETCH_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_UNEXPECTED_ERROR,
)

from ..config import ConfigError, SettingsStore

from ..core import (
    RefreshPipeline,
    RenderSink,
    StatusController,
)

from ..models.snapshot import SnapshotState

from .console import ConsoleHost

from .parser import (
    create_argument_parser,
)

from ..utils import (
    setup_logging,
)

logger = logging.getLogger(__name__)


async def run_once(settings: SettingsStore, as_json: bool = False) -> int:
    """
    Run a single cache-bypassing cycle and print the result.

    Returns:
        Process exit code
    """
    config = settings.read()
    sink = RenderSink(config.render_mode)
    if not as_json:
        ConsoleHost(timestamps=False, show_tooltips=True).attach(sink)

    pipeline = RefreshPipeline(settings, sink)
    snapshot = await pipeline.run_cycle(bypass_cache=True, trigger="manual")

    if as_json:
        print(snapshot.to_json())

    if snapshot.state == SnapshotState.ERROR:
        return EXIT_FETCH_FAILURE
    return EXIT_SUCCESS


async def run_watch(settings: SettingsStore, log_output: bool = False) -> None:
    """Refresh on the configured interval until cancelled."""
    config = settings.read()
    sink = RenderSink(config.render_mode)
    ConsoleHost().attach(sink)

    pipeline = RefreshPipeline(settings, sink)
    controller = StatusController(settings, pipeline, log_output=log_output)

    logger.info(f"Watching providers: {', '.join(p.value for p in config.enabled_providers) or 'none'}")
    logger.debug(f"Configuration: {settings.masked()}")

    controller.start()
    try:
        # Ticks are driven by the scheduler's timer; just keep the loop alive
        while True:
            await asyncio.sleep(3600)
    finally:
        controller.stop()
        await controller.scheduler.wait_idle()


def main():
    """Main entry point for the script."""
    parser = create_argument_parser()
    args = parser.parse_args()

    # Setup logging with verbose flag
    setup_logging(verbose=args.verbose)

    settings = SettingsStore(cli_args=args)
    try:
        # Validate configuration up front so errors exit with a clear code
        settings.read()
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(EXIT_CONFIG_ERROR)

    try:
        if args.command == "once":
            exit_code = asyncio.run(run_once(settings, as_json=args.json))
        else:
            asyncio.run(run_watch(settings, log_output=args.log_output))
            exit_code = EXIT_SUCCESS

    except KeyboardInterrupt:
        logger.warning("Interrupted by user (Ctrl+C)")
        sys.exit(EXIT_INTERRUPTED)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(EXIT_CONFIG_ERROR)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        sys.exit(EXIT_UNEXPECTED_ERROR)

    if exit_code != EXIT_SUCCESS:
        sys.exit(exit_code)

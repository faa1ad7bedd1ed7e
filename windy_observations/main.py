"""
Windy Observations Application Entry Point

Handles command-line arguments, configuration loading, signal handling and
the service lifecycle.

Usage:
    windy-observations                          # Run with default config
    windy-observations --config /path/to/config.yaml
    windy-observations --log-level DEBUG
    windy-observations --once                   # Single cycle, then exit
    windy-observations --dry-run                # Validate config without starting

Entry Points:
    - CLI: `windy-observations` command (via pyproject.toml)
    - Direct: `python -m windy_observations.main`
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from typing import TYPE_CHECKING

from windy_observations import __version__
from windy_observations.config import WindyObservationsConfig, load_config
from windy_observations.constants import PLUGIN_NAME
from windy_observations.exceptions import ConfigurationError, WindyObservationsError
from windy_observations.logging_config import get_logger, set_service_level, setup_logging
from windy_observations.scheduler import ObservationScheduler

from services.signalk import ObservationPublisher, SignalKClient
from services.windy import ExclusionFilter, StationDirectory, StationFetcher, WindyClient

if TYPE_CHECKING:
    from types import FrameType

__all__ = ["main", "async_main", "create_parser", "build_scheduler"]

logger = get_logger(__name__)


# =============================================================================
# Argument Parser
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="windy-observations",
        description="Publish nearby Windy station observations to Signal K",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        metavar="PATH",
        help="Path to configuration file (default: auto-discover)",
    )
    parser.add_argument(
        "-l",
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level (overrides config file)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        metavar="PATH",
        help="Path to log file (default: stdout only)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single discovery cycle immediately and exit",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate configuration and exit without polling",
    )

    return parser


# =============================================================================
# Signal Handlers
# =============================================================================


class GracefulShutdown:
    """Sets an asyncio event on SIGINT/SIGTERM; a second signal exits.

    The handler runs outside the event loop, so the event is set through
    ``call_soon_threadsafe``, which also wakes a loop blocked in select().
    """

    def __init__(self) -> None:
        self._shutdown_requested = False
        self._shutdown_event: asyncio.Event | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._original_handlers: dict[int, signal.Handlers] = {}

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_requested

    def install_handlers(self) -> None:
        self._original_handlers[signal.SIGINT] = signal.signal(
            signal.SIGINT, self._handle_signal
        )
        self._original_handlers[signal.SIGTERM] = signal.signal(
            signal.SIGTERM, self._handle_signal
        )
        logger.debug("Signal handlers installed for graceful shutdown")

    def restore_handlers(self) -> None:
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        signal_name = signal.Signals(signum).name
        if self._shutdown_requested:
            logger.warning(f"Received {signal_name} again - forcing immediate exit")
            sys.exit(1)

        logger.info(f"Received {signal_name} - shutting down...")
        self._shutdown_requested = True
        if self._shutdown_event is None:
            return
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._shutdown_event.set)
        else:
            self._shutdown_event.set()

    def get_shutdown_event(self) -> asyncio.Event:
        """Shutdown event bound to the running loop; call from a coroutine."""
        if self._shutdown_event is None:
            self._loop = asyncio.get_running_loop()
            self._shutdown_event = asyncio.Event()
            if self._shutdown_requested:
                self._shutdown_event.set()
        return self._shutdown_event


# =============================================================================
# Wiring
# =============================================================================


def build_scheduler(
    config: WindyObservationsConfig,
    windy: WindyClient,
    signalk: SignalKClient,
) -> ObservationScheduler:
    """Assemble the pipeline from configuration and the two clients."""
    exclusion = ExclusionFilter.from_config(config.exclusion)
    if len(exclusion):
        logger.info(f"Excluding {len(exclusion)} stations")

    publisher = ObservationPublisher(signalk, context=config.signalk.context)
    fetcher = StationFetcher(
        windy,
        exclusion=exclusion,
        publisher=publisher,
        info_url=config.windy.info_url,
    )
    return ObservationScheduler(
        position_provider=signalk,
        directory=StationDirectory(windy),
        fetcher=fetcher,
        zoom=config.windy.zoom,
        warmup_delay=config.schedule.warmup_delay,
        poll_interval=config.schedule.poll_interval,
    )


# =============================================================================
# Main Entry Points
# =============================================================================


async def async_main(
    args: argparse.Namespace,
    config: WindyObservationsConfig,
    shutdown: GracefulShutdown | None = None,
) -> int:
    """Run the scheduler until shutdown (or one cycle with --once)."""
    windy = WindyClient(
        base_url=config.windy.stations_url,
        user_agent=config.windy.user_agent,
        timeout=config.windy.request_timeout,
    )
    signalk = SignalKClient(url=config.signalk.url, timeout=config.signalk.timeout)
    scheduler = build_scheduler(config, windy, signalk)

    try:
        if args.once:
            report = await scheduler.run_cycle()
            if report.skipped:
                logger.warning(f"Cycle skipped: {report.skipped_reason}")
                return 1
            return 0

        shutdown = shutdown or GracefulShutdown()
        shutdown_event = shutdown.get_shutdown_event()

        await scheduler.start()
        logger.info(f"{PLUGIN_NAME} running. Press Ctrl+C to stop.")
        await shutdown_event.wait()

        await scheduler.stop()
        if not await scheduler.wait_idle(timeout=config.windy.request_timeout):
            logger.warning("Abandoning in-flight cycle")
        return 0
    finally:
        await windy.close()
        await signalk.close()


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = create_parser()
    args = parser.parse_args()

    setup_logging(log_level=args.log_level or "INFO", log_file=args.log_file)
    logger.info(f"{PLUGIN_NAME} v{__version__} starting...")

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    if args.log_level is None or (args.log_file is None and config.log_file):
        setup_logging(
            log_level=args.log_level or config.log_level,
            log_file=args.log_file or config.log_file,
        )
    for service, level in config.service_log_levels.items():
        set_service_level(service, level)

    if args.dry_run:
        logger.info("Dry run mode - configuration valid, exiting")
        return 0

    shutdown = GracefulShutdown()
    shutdown.install_handlers()

    try:
        return asyncio.run(async_main(args, config, shutdown))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except WindyObservationsError as e:
        logger.error(f"{PLUGIN_NAME} error: {e}")
        return 1
    finally:
        shutdown.restore_handlers()
        logger.info(f"{PLUGIN_NAME} shutdown complete")


if __name__ == "__main__":
    sys.exit(main())

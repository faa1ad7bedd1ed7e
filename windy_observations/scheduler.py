"""
Windy Observations Scheduler.

Drives the observation pipeline on a fixed cadence:

    timer tick
      -> position provider (skip the cycle if no position yet)
      -> tile of the position
      -> station directory for the tile
      -> per station: exclusion -> fetch -> unit conversion -> publish

Two timers, both started by ``start()`` and cancelled by ``stop()``:
- Warm-up: fires once after ``warmup_delay`` so the host has time to
  learn the vessel position.
- Recurring: fires every ``poll_interval``.

Timers never wait for a cycle; each tick spawns the cycle as a task.
A tick that arrives while the previous cycle is still running is skipped.
Stations within a cycle are fetched concurrently and each reading is
published as soon as it arrives.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from windy_observations.constants import POLL_INTERVAL_SEC, WARMUP_DELAY_SEC, ZOOM_LEVEL
from windy_observations.exceptions import InvalidPositionError
from windy_observations.types import PositionProvider, TileCoordinate

from services.geo import locate_position
from services.windy.directory import StationDirectory
from services.windy.stations import StationFetcher

logger = logging.getLogger("windy_observations.scheduler")


@dataclass
class CycleReport:
    """Outcome of one polling cycle."""
    tile: Optional[TileCoordinate] = None
    discovered: int = 0
    excluded: int = 0
    published: int = 0
    failed: int = 0
    skipped_reason: Optional[str] = None
    stations: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None


class ObservationScheduler:
    """
    Periodic station discovery and publishing.

    Collaborators are passed in, so several independent schedulers (or
    test doubles) can coexist in one process.
    """

    def __init__(
        self,
        position_provider: PositionProvider,
        directory: StationDirectory,
        fetcher: StationFetcher,
        zoom: int = ZOOM_LEVEL,
        warmup_delay: float = WARMUP_DELAY_SEC,
        poll_interval: float = POLL_INTERVAL_SEC,
    ):
        self._position_provider = position_provider
        self._directory = directory
        self._fetcher = fetcher
        self.zoom = zoom
        self.warmup_delay = warmup_delay
        self.poll_interval = poll_interval

        self._running = False
        self._warmup_task: Optional[asyncio.Task] = None
        self._interval_task: Optional[asyncio.Task] = None
        self._cycle_task: Optional[asyncio.Task] = None

        self.ticks = 0
        self.skipped_ticks = 0
        self.last_report: Optional[CycleReport] = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_busy(self) -> bool:
        """True while a cycle is in flight."""
        return self._cycle_task is not None and not self._cycle_task.done()

    async def start(self):
        """Start the warm-up and recurring timers."""
        if self._running:
            return

        self._running = True
        self._warmup_task = asyncio.create_task(self._warmup())
        self._interval_task = asyncio.create_task(self._recurring())
        logger.info(
            f"Scheduler started: first cycle in {self.warmup_delay:.0f}s, "
            f"then every {self.poll_interval / 60:.0f} min"
        )

    async def stop(self):
        """
        Stop both timers.

        A cycle already in flight is left to finish; use wait_idle() to
        drain it.
        """
        self._running = False
        for task in (self._warmup_task, self._interval_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._warmup_task = None
        self._interval_task = None
        logger.info("Scheduler stopped")

    async def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for an in-flight cycle to finish.

        Returns:
            True if no cycle is running afterwards
        """
        if not self.is_busy:
            return True
        done, _ = await asyncio.wait({self._cycle_task}, timeout=timeout)
        return bool(done)

    async def _warmup(self):
        await asyncio.sleep(self.warmup_delay)
        self._tick("warm-up")

    async def _recurring(self):
        while self._running:
            await asyncio.sleep(self.poll_interval)
            self._tick("interval")

    def _tick(self, trigger: str):
        if not self._running:
            return
        if self.is_busy:
            self.skipped_ticks += 1
            logger.warning(f"Previous cycle still running, skipping {trigger} tick")
            return

        self.ticks += 1
        logger.debug(f"Cycle triggered by {trigger} timer")
        self._cycle_task = asyncio.create_task(self._run_cycle_logged())

    async def _run_cycle_logged(self):
        try:
            await self.run_cycle()
        except Exception as e:
            logger.exception(f"Observation cycle failed: {e}")

    # =========================================================================
    # Pipeline
    # =========================================================================

    async def run_cycle(self) -> CycleReport:
        """
        Run one discovery -> fetch -> publish pass.

        Never raises for provider or position problems; those end the cycle
        early and are recorded in the report.
        """
        report = CycleReport()
        self.last_report = report

        position = await self._position_provider.get_position()
        if position is None:
            logger.info("No vessel position available yet, skipping cycle")
            report.skipped_reason = "no position"
            return report

        try:
            report.tile = locate_position(position, self.zoom)
        except InvalidPositionError as e:
            logger.warning(f"Cannot locate tile: {e}")
            report.skipped_reason = "invalid position"
            return report

        stations = await self._directory.list_stations(report.tile)
        report.discovered = len(stations)

        to_fetch = []
        for station in stations:
            if self._fetcher.is_excluded(station):
                logger.debug(f"Excluded station {station}, skipping")
                report.excluded += 1
            else:
                to_fetch.append(station)
        report.stations = to_fetch

        results = await asyncio.gather(
            *(self._fetcher.fetch_and_publish(s) for s in to_fetch),
            return_exceptions=True,
        )
        for station, result in zip(to_fetch, results):
            if result is True:
                report.published += 1
            else:
                report.failed += 1
                if isinstance(result, BaseException):
                    logger.error(f"Station {station} failed: {result!r}")

        logger.info(
            f"Tile {report.tile.path}: published {report.published}/{len(to_fetch)} "
            f"stations ({report.excluded} excluded)"
        )
        return report

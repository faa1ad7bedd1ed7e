"""
End-to-end tests for the observation pipeline.

The first group drives the pipeline with in-memory collaborators; the
second runs the real HTTP and WebSocket clients against the simulator.
"""

import asyncio

import pytest

from services.signalk import ObservationPublisher
from services.windy import ExclusionFilter, StationDirectory, StationFetcher
from windy_observations.scheduler import ObservationScheduler
from windy_observations.types import Position

PREFIX = "observations.windy.abc"


async def wait_for(predicate, timeout: float = 2.0, interval: float = 0.01) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` elapses.

    Deltas reach the simulator over the WebSocket after send_json returns.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()


def build_pipeline(windy_client, signalk, exclude=(), warmup_delay=5.0, poll_interval=900.0):
    publisher = ObservationPublisher(signalk)
    fetcher = StationFetcher(windy_client, ExclusionFilter.of(exclude), publisher)
    return ObservationScheduler(
        position_provider=signalk,
        directory=StationDirectory(windy_client),
        fetcher=fetcher,
        zoom=8,
        warmup_delay=warmup_delay,
        poll_interval=poll_interval,
    )


def delta_values(deltas) -> dict:
    values = {}
    for delta in deltas:
        for update in delta["updates"]:
            for entry in update["values"]:
                values[entry["path"]] = entry["value"]
    return values


# =============================================================================
# In-memory Pipeline
# =============================================================================


class TestPipelineWithMocks:
    """Discovery, fetch, conversion and publishing with mock collaborators."""

    @pytest.mark.asyncio
    async def test_station_published(self, windy_client, signalk):
        scheduler = build_pipeline(windy_client, signalk)
        report = await scheduler.run_cycle()

        assert report.published == 1
        assert len(signalk.deltas) == 1
        update = signalk.deltas[0]["updates"][0]
        assert len(update["values"]) == 8

        values = signalk.values
        assert values[f"{PREFIX}.name"] == "Test"
        assert values[f"{PREFIX}.date"] == "2024-05-01T12:00:00Z"
        assert values[f"{PREFIX}.position"] == {"latitude": 47.01, "longitude": -122.01}
        assert values[f"{PREFIX}.wind.speed"] == 5
        assert values[f"{PREFIX}.wind.gust"] == 7
        assert values[f"{PREFIX}.wind.direction"] == pytest.approx(1.5708, abs=1e-4)
        assert values[f"{PREFIX}.temperature"] == pytest.approx(293.15)
        assert values[f"{PREFIX}.url"] == "https://www.windy.com/station/abc"

    @pytest.mark.asyncio
    async def test_excluded_station_produces_nothing(self, windy_client, signalk):
        scheduler = build_pipeline(windy_client, signalk, exclude=["ABC"])
        await scheduler.run_cycle()

        assert signalk.deltas == []
        assert "ABC" not in windy_client.requests


# =============================================================================
# Simulator Pipeline
# =============================================================================


class TestPipelineWithSimulator:
    """Real clients against the local Windy and Signal K simulator."""

    @pytest.mark.asyncio
    async def test_position_from_server(self, signalk_server):
        assert await signalk_server.get_position() == Position(47.0, -122.0)

    @pytest.mark.asyncio
    async def test_no_position_yet(self, simulator, signalk_server):
        simulator.position = None
        assert await signalk_server.get_position() is None

    @pytest.mark.asyncio
    async def test_cycle_publishes_over_stream(self, simulator, windy, signalk_server):
        scheduler = build_pipeline(windy, signalk_server)
        report = await scheduler.run_cycle()

        assert report.published == 1
        assert await wait_for(lambda: len(simulator.deltas) == 1)

        delta = simulator.deltas[0]
        assert delta["context"] == "vessels.self"
        assert delta["updates"][0]["$source"] == "windy-observations"
        values = delta_values(simulator.deltas)
        assert len(values) == 8
        assert values[f"{PREFIX}.wind.direction"] == pytest.approx(1.5708, abs=1e-4)
        assert values[f"{PREFIX}.temperature"] == pytest.approx(293.15)

    @pytest.mark.asyncio
    async def test_requests_hit_tile_and_station(self, simulator, windy, signalk_server):
        await build_pipeline(windy, signalk_server).run_cycle()
        assert simulator.requests == [
            "/pois/stations/tiles/8/41/90",
            "/pois/stations/ABC",
        ]

    @pytest.mark.asyncio
    async def test_excluded_station_not_requested(self, simulator, windy, signalk_server):
        await build_pipeline(windy, signalk_server, exclude=["abc"]).run_cycle()

        assert simulator.requests == ["/pois/stations/tiles/8/41/90"]
        assert simulator.deltas == []

    @pytest.mark.asyncio
    async def test_wider_tuples(self, simulator, windy, signalk_server):
        simulator.items = 9
        simulator.add_station("DEF", name="Second", lat=47.02, lon=-122.02, wind=3, dir=180)

        report = await build_pipeline(windy, signalk_server).run_cycle()

        assert report.discovered == 2
        assert report.published == 2
        assert await wait_for(lambda: len(simulator.deltas) == 2)
        values = delta_values(simulator.deltas)
        assert values["observations.windy.def.wind.direction"] == pytest.approx(3.14159, abs=1e-4)
        assert values["observations.windy.def.temperature"] is None

    @pytest.mark.asyncio
    async def test_failing_station_skipped(self, simulator, windy, signalk_server):
        simulator.add_station("DEF", name="Broken", lat=47.02, lon=-122.02)
        simulator.failing_stations.add("DEF")

        report = await build_pipeline(windy, signalk_server).run_cycle()

        assert report.published == 1
        assert report.failed == 1
        assert await wait_for(lambda: len(simulator.deltas) == 1)

    @pytest.mark.asyncio
    async def test_no_position_skips_provider(self, simulator, windy, signalk_server):
        simulator.position = None
        report = await build_pipeline(windy, signalk_server).run_cycle()

        assert report.skipped_reason == "no position"
        assert simulator.requests == []

    @pytest.mark.asyncio
    async def test_scheduler_warmup_cycle(self, simulator, windy, signalk_server):
        scheduler = build_pipeline(windy, signalk_server, warmup_delay=0.05)
        await scheduler.start()
        try:
            assert await wait_for(lambda: len(simulator.deltas) == 1, timeout=5.0)
        finally:
            await scheduler.stop()
            await scheduler.wait_idle(timeout=5.0)

        assert scheduler.ticks == 1

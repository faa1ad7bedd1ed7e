"""
Pytest Fixtures for Windy Observations Testing.

Usage:
    # In test files, fixtures are automatically available:
    async def test_cycle(windy_client, signalk):
        signalk.position = Position(47.0, -122.0)
        ...
"""

import pytest

from windy_observations.types import Position

from services.signalk import ObservationPublisher
from services.windy import ExclusionFilter, StationDirectory, StationFetcher

from tests.fixtures import MockSignalK, MockWindyClient, station_listing

# Tile of (47.0, -122.0) at zoom 8
TEST_TILE_PATH = "tiles/8/41/90"

SAMPLE_READING = {
    "name": "Test",
    "time": "2024-05-01T12:00:00Z",
    "lat": 47.01,
    "lon": -122.01,
    "wind": 5,
    "gust": 7,
    "dir": 90,
    "temp": 20,
}


@pytest.fixture
def sample_reading() -> dict:
    return dict(SAMPLE_READING)


@pytest.fixture
def windy_client() -> MockWindyClient:
    """Mock Windy client with one station, ABC, in the test tile."""
    return MockWindyClient(routes={
        TEST_TILE_PATH: station_listing(["ABC"]),
        "ABC": dict(SAMPLE_READING),
    })


@pytest.fixture
def signalk() -> MockSignalK:
    """Mock Signal K server that knows the vessel position."""
    return MockSignalK(position=Position(47.0, -122.0))


@pytest.fixture
def publisher(signalk) -> ObservationPublisher:
    return ObservationPublisher(signalk)


@pytest.fixture
def fetcher(windy_client, publisher) -> StationFetcher:
    return StationFetcher(windy_client, ExclusionFilter(), publisher)


@pytest.fixture
def directory(windy_client) -> StationDirectory:
    return StationDirectory(windy_client)

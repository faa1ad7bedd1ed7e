"""
Integration fixtures: simulator server and real clients pointed at it.
"""

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer

from services.signalk import SignalKClient
from services.windy import WindyClient
from windy_observations.types import Position

from tests.conftest import SAMPLE_READING
from tests.fixtures.simulator import ProviderSimulator, create_app


@pytest.fixture
def simulator() -> ProviderSimulator:
    """Vessel at (47, -122) with station ABC in the same zoom-8 tile."""
    sim = ProviderSimulator(position=Position(47.0, -122.0))
    sim.add_station("ABC", **SAMPLE_READING)
    return sim


@pytest_asyncio.fixture
async def sim_server(simulator):
    server = TestServer(create_app(simulator))
    await server.start_server()
    yield server
    await server.close()


@pytest_asyncio.fixture
async def windy(sim_server):
    client = WindyClient(base_url=str(sim_server.make_url("/pois/stations")), timeout=5.0)
    yield client
    await client.close()


@pytest_asyncio.fixture
async def signalk_server(sim_server):
    client = SignalKClient(url=str(sim_server.make_url("/")), timeout=5.0)
    yield client
    await client.close()

"""
Unit tests for station readings and the station fetcher.
"""

import math

import pytest
from unittest.mock import AsyncMock

from services.windy.exclusion import ExclusionFilter
from services.windy.stations import (
    Observation,
    RawReading,
    StationFetcher,
    build_observation,
)
from windy_observations.exceptions import ProviderError, StationFetchError

from tests.fixtures import MockWindyClient


# =============================================================================
# RawReading Tests
# =============================================================================


class TestRawReading:
    """Tests for RawReading.from_json()."""

    def test_all_fields(self, sample_reading):
        reading = RawReading.from_json(sample_reading)
        assert reading.name == "Test"
        assert reading.time == "2024-05-01T12:00:00Z"
        assert reading.lat == 47.01
        assert reading.lon == -122.01
        assert reading.wind == 5
        assert reading.gust == 7
        assert reading.dir == 90
        assert reading.temp == 20

    def test_missing_fields_are_none(self):
        reading = RawReading.from_json({"name": "Sparse"})
        assert reading.name == "Sparse"
        assert reading.dir is None
        assert reading.temp is None
        assert reading.gust is None

    def test_non_object_rejected(self):
        with pytest.raises(StationFetchError):
            RawReading.from_json(["not", "an", "object"])

    @pytest.mark.parametrize("field,value", [
        ("dir", "90"),
        ("temp", True),
        ("wind", {"value": 5}),
        ("lat", [47.0]),
    ])
    def test_non_numeric_field_rejected(self, sample_reading, field, value):
        data = dict(sample_reading, **{field: value})
        with pytest.raises(StationFetchError) as exc_info:
            RawReading.from_json(data)
        assert field in str(exc_info.value)

    def test_null_numeric_fields_accepted(self):
        reading = RawReading.from_json({"name": "N", "dir": None, "temp": None, "wind": 0})
        assert reading.dir is None
        assert reading.wind == 0


# =============================================================================
# Observation Tests
# =============================================================================


class TestBuildObservation:
    """Tests for build_observation()."""

    def test_converts_units(self, sample_reading):
        obs = build_observation("ABC", RawReading.from_json(sample_reading))
        assert obs.wind_direction == pytest.approx(math.pi / 2)
        assert obs.temperature == pytest.approx(293.15)

    def test_copies_verbatim_fields(self, sample_reading):
        obs = build_observation("ABC", RawReading.from_json(sample_reading))
        assert obs.name == "Test"
        assert obs.date == "2024-05-01T12:00:00Z"
        assert obs.position == {"latitude": 47.01, "longitude": -122.01}
        assert obs.wind_speed == 5
        assert obs.wind_gust == 7

    def test_lower_cases_station_id(self):
        obs = build_observation("AbC", RawReading())
        assert obs.station_id == "abc"
        assert obs.url == "https://www.windy.com/station/abc"

    def test_custom_info_url(self):
        obs = build_observation("ABC", RawReading(), info_url="https://example.test/s/")
        assert obs.url == "https://example.test/s/abc"

    def test_nulls_preserved(self):
        obs = build_observation("ABC", RawReading(name="N"))
        assert obs.wind_direction is None
        assert obs.temperature is None
        assert obs.wind_speed is None

    def test_eight_values_in_stable_order(self, sample_reading):
        obs = build_observation("ABC", RawReading.from_json(sample_reading))
        paths = [path for path, _ in obs.values()]
        assert paths == [
            "name",
            "date",
            "position",
            "wind.speed",
            "wind.gust",
            "wind.direction",
            "temperature",
            "url",
        ]

    def test_values_keep_nulls(self):
        obs = build_observation("ABC", RawReading())
        values = dict(obs.values())
        assert values["wind.direction"] is None
        assert values["temperature"] is None
        assert values["position"] == {"latitude": None, "longitude": None}


# =============================================================================
# StationFetcher Tests
# =============================================================================


class TestStationFetcher:
    """Tests for StationFetcher."""

    @pytest.mark.asyncio
    async def test_fetch_observation(self, windy_client):
        fetcher = StationFetcher(windy_client)
        obs = await fetcher.fetch_observation("ABC")

        assert isinstance(obs, Observation)
        assert obs.station_id == "abc"
        assert windy_client.requests == ["ABC"]

    @pytest.mark.asyncio
    async def test_excluded_station_not_requested(self, windy_client):
        fetcher = StationFetcher(windy_client, ExclusionFilter.of(["ABC"]))
        assert await fetcher.fetch_observation("ABC") is None
        assert windy_client.requests == []

    @pytest.mark.asyncio
    async def test_provider_error_yields_none(self):
        client = MockWindyClient(routes={"ABC": ProviderError("down", status=500)})
        fetcher = StationFetcher(client)
        assert await fetcher.fetch_observation("ABC") is None

    @pytest.mark.asyncio
    async def test_unknown_station_yields_none(self):
        fetcher = StationFetcher(MockWindyClient())
        assert await fetcher.fetch_observation("NOPE") is None

    @pytest.mark.asyncio
    async def test_malformed_reading_yields_none(self):
        client = MockWindyClient(routes={"ABC": "garbage"})
        assert await StationFetcher(client).fetch_observation("ABC") is None

    @pytest.mark.asyncio
    async def test_non_numeric_reading_yields_none(self, sample_reading, caplog):
        client = MockWindyClient(routes={"ABC": dict(sample_reading, dir="north")})
        with caplog.at_level("WARNING", logger="windy_observations.services.windy"):
            assert await StationFetcher(client).fetch_observation("ABC") is None
        assert "Error retrieving station ABC" in caplog.text

    @pytest.mark.asyncio
    async def test_station_id_quoted_in_path(self, sample_reading):
        client = MockWindyClient(routes={"A%2FB%3Fc": dict(sample_reading)})
        obs = await StationFetcher(client).fetch_observation("A/B?c")

        assert client.requests == ["A%2FB%3Fc"]
        assert obs.station_id == "a/b?c"

    @pytest.mark.asyncio
    async def test_fetch_and_publish(self, windy_client):
        publisher = AsyncMock()
        publisher.publish.return_value = True
        fetcher = StationFetcher(windy_client, publisher=publisher)

        assert await fetcher.fetch_and_publish("ABC") is True
        publisher.publish.assert_awaited_once()
        observation = publisher.publish.await_args.args[0]
        assert observation.station_id == "abc"

    @pytest.mark.asyncio
    async def test_fetch_and_publish_excluded(self, windy_client):
        publisher = AsyncMock()
        fetcher = StationFetcher(windy_client, ExclusionFilter.of(["ABC"]), publisher)

        assert await fetcher.fetch_and_publish("ABC") is False
        publisher.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_and_publish_failure(self):
        publisher = AsyncMock()
        fetcher = StationFetcher(MockWindyClient(), publisher=publisher)

        assert await fetcher.fetch_and_publish("ABC") is False
        publisher.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_without_publisher(self, windy_client):
        fetcher = StationFetcher(windy_client)
        assert await fetcher.fetch_and_publish("ABC") is False

"""
Windy Observations - Station Readings

Fetches one Windy station's latest reading and maps it onto a canonical
Observation in Signal K units.

Station detail response:
    {"name": "Test", "time": "2024-05-01T12:00:00Z", "lat": 47.1,
     "lon": -122.3, "wind": 5.0, "gust": 7.0, "dir": 90, "temp": 20.0}

Any field may be missing or null. Speeds are passed through; direction is
converted to radians and temperature to Kelvin.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol
from urllib.parse import quote

from windy_observations.constants import WINDY_INFO_URL
from windy_observations.exceptions import ProviderError, StationFetchError
from windy_observations.types import Kelvin, MetersPerSecond, Radians

from .client import WindyClient
from .exclusion import ExclusionFilter
from .units import celsius_to_kelvin, degrees_to_radians

logger = logging.getLogger("windy_observations.services.windy")

NUMERIC_FIELDS = ("lat", "lon", "wind", "gust", "dir", "temp")


@dataclass
class RawReading:
    """Station reading as reported by Windy."""
    name: Optional[str] = None
    time: Optional[Any] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    wind: Optional[float] = None
    gust: Optional[float] = None
    dir: Optional[float] = None
    temp: Optional[float] = None

    @classmethod
    def from_json(cls, data: Any) -> "RawReading":
        """
        Build from a station detail response.

        Raises:
            StationFetchError: Not an object, or a numeric field holds
                something other than a number or null
        """
        if not isinstance(data, dict):
            raise StationFetchError("Station reading is not an object")

        for key in NUMERIC_FIELDS:
            value = data.get(key)
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise StationFetchError(f"Station reading field '{key}' is not numeric: {value!r}")

        return cls(
            name=data.get("name"),
            time=data.get("time"),
            lat=data.get("lat"),
            lon=data.get("lon"),
            wind=data.get("wind"),
            gust=data.get("gust"),
            dir=data.get("dir"),
            temp=data.get("temp"),
        )


@dataclass
class Observation:
    """One normalized station reading, ready to publish."""
    station_id: str                       # lower-cased, used in paths
    name: Optional[str]
    date: Optional[Any]
    latitude: Optional[float]
    longitude: Optional[float]
    wind_speed: Optional[MetersPerSecond]
    wind_gust: Optional[MetersPerSecond]
    wind_direction: Optional[Radians]
    temperature: Optional[Kelvin]
    url: str

    @property
    def position(self) -> dict[str, Optional[float]]:
        return {"latitude": self.latitude, "longitude": self.longitude}

    def values(self) -> list[tuple[str, Any]]:
        """The eight ``(path, value)`` pairs relative to the station key.

        Order is fixed: name, date, position, wind.speed, wind.gust,
        wind.direction, temperature, url.
        """
        return [
            ("name", self.name),
            ("date", self.date),
            ("position", self.position),
            ("wind.speed", self.wind_speed),
            ("wind.gust", self.wind_gust),
            ("wind.direction", self.wind_direction),
            ("temperature", self.temperature),
            ("url", self.url),
        ]


def build_observation(
    station_id: str,
    reading: RawReading,
    info_url: str = WINDY_INFO_URL,
) -> Observation:
    """Map a raw reading onto an Observation."""
    key = station_id.lower()
    return Observation(
        station_id=key,
        name=reading.name,
        date=reading.time,
        latitude=reading.lat,
        longitude=reading.lon,
        wind_speed=reading.wind,
        wind_gust=reading.gust,
        wind_direction=degrees_to_radians(reading.dir),
        temperature=celsius_to_kelvin(reading.temp),
        url=f"{info_url.rstrip('/')}/{key}",
    )


class ObservationSink(Protocol):
    async def publish(self, observation: Observation) -> bool:
        ...


class StationFetcher:
    """
    Fetches station readings, skipping excluded stations.

    Excluded stations are filtered before any request is made, so they
    cost no API quota.
    """

    def __init__(
        self,
        client: WindyClient,
        exclusion: Optional[ExclusionFilter] = None,
        publisher: Optional[ObservationSink] = None,
        info_url: str = WINDY_INFO_URL,
    ):
        self._client = client
        self.exclusion = exclusion or ExclusionFilter()
        self._publisher = publisher
        self.info_url = info_url

    def is_excluded(self, station_id: str) -> bool:
        return self.exclusion.is_excluded(station_id)

    async def fetch_observation(self, station_id: str) -> Optional[Observation]:
        """
        Fetch and normalize one station's reading.

        Returns:
            Observation, or None if the station is excluded or the request
            failed
        """
        if self.is_excluded(station_id):
            logger.debug(f"Excluded station {station_id}, skipping")
            return None

        logger.debug(f"Retrieving station {station_id}")
        try:
            data = await self._client.fetch_json(quote(station_id, safe=""))
            reading = RawReading.from_json(data)
        except ProviderError as e:
            logger.warning(f"Error retrieving station {station_id}: {e}")
            return None

        return build_observation(station_id, reading, self.info_url)

    async def fetch_and_publish(self, station_id: str) -> bool:
        """
        Fetch one station and hand the result straight to the publisher.

        Returns:
            True if an observation was published
        """
        observation = await self.fetch_observation(station_id)
        if observation is None or self._publisher is None:
            return False
        return await self._publisher.publish(observation)

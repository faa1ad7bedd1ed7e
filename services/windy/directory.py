"""
Windy station directory.

The tile endpoint returns every station of a map tile as one flattened
array of fixed-width tuples, with the tuple width alongside:

    {"items": 7, "data": ["ABC", 47.1, -122.3, ..., "XYZ", 47.4, ...]}

Field 0 of each tuple is the station identifier. The width comes from
the response; it is never assumed.
"""

import logging
from typing import Any

from windy_observations.exceptions import DirectoryFetchError, ProviderError
from windy_observations.types import TileCoordinate

from .client import WindyClient

logger = logging.getLogger("windy_observations.services.windy")


def decode_station_ids(payload: Any) -> list[str]:
    """
    Extract station identifiers from a tile listing.

    Station count is ``len(data) // items``; a trailing partial tuple is
    ignored.

    Args:
        payload: Decoded tile response

    Returns:
        Identifiers in listing order

    Raises:
        DirectoryFetchError: Payload is not a listing, or ``items`` is not a
            positive integer
    """
    if not isinstance(payload, dict):
        raise DirectoryFetchError("Station listing is not an object")

    width = payload.get("items")
    data = payload.get("data")

    if isinstance(width, bool) or not isinstance(width, int) or width <= 0:
        raise DirectoryFetchError(f"Invalid station tuple width: {width!r}")
    if not isinstance(data, list):
        raise DirectoryFetchError("Station listing has no data array")

    count = len(data) // width
    if len(data) % width:
        logger.debug(
            f"Listing length {len(data)} is not a multiple of {width}, "
            f"ignoring trailing fields"
        )

    return [str(data[i * width]) for i in range(count)]


class StationDirectory:
    """Lists the stations of a map tile."""

    def __init__(self, client: WindyClient):
        self._client = client

    async def list_stations(self, tile: TileCoordinate) -> list[str]:
        """
        Fetch and decode the station listing for ``tile``.

        Failures are logged and produce an empty list; the next polling
        cycle is the retry.
        """
        path = f"tiles/{tile.path}"
        logger.debug(f"Retrieving stations via {self._client.url_for(path)}")

        try:
            payload = await self._client.fetch_json(path)
            stations = decode_station_ids(payload)
        except ProviderError as e:
            logger.warning(f"Error retrieving stations for tile {tile.path}: {e}")
            return []

        logger.info(f"Tile {tile.path}: {len(stations)} stations")
        return stations

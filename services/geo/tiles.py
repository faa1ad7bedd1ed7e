"""
Slippy-map tile math.

Converts a latitude/longitude into the Web Mercator tile that indexes the
Windy station directory. Standard OSM tiling: x grows eastward from
longitude -180, y grows southward from the northern projection limit.

Usage
-----
    tile = locate(47.0, -122.0, zoom=8)
    url = f"{base}/tiles/{tile.path}"
"""
from __future__ import annotations

import logging
import math

from windy_observations.exceptions import InvalidPositionError
from windy_observations.types import Position, TileCoordinate

logger = logging.getLogger("windy_observations.services.geo")

# Web Mercator is undefined at the poles; atan(sinh(pi)) in degrees
MAX_LATITUDE = 85.0511287798066


def locate(latitude: float, longitude: float, zoom: int) -> TileCoordinate:
    """Return the tile containing (latitude, longitude) at ``zoom``.

    Latitude is clamped to the Web Mercator limit and the indices are kept
    inside ``[0, 2**zoom - 1]``, so polar latitudes and longitude 180 map to
    the edge tiles instead of overflowing.

    Raises
    ------
    InvalidPositionError
        Non-finite coordinates or a negative zoom.
    """
    if zoom < 0:
        raise InvalidPositionError("Zoom level must be non-negative", zoom=zoom)
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise InvalidPositionError(
            "Position is not finite", latitude=latitude, longitude=longitude,
        )

    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, latitude))
    lat_rad = math.radians(lat)
    n = 2 ** zoom

    x = math.floor((longitude + 180.0) / 360.0 * n)
    y = math.floor((1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n)

    return TileCoordinate(
        zoom=zoom,
        x=_clamp(x, n),
        y=_clamp(y, n),
    )


def locate_position(position: Position, zoom: int) -> TileCoordinate:
    """``locate`` for a Position."""
    tile = locate(position.latitude, position.longitude, zoom)
    logger.debug(
        f"Position {position.latitude:.4f}, {position.longitude:.4f} -> tile {tile.path}"
    )
    return tile


def _clamp(index: int, n: int) -> int:
    return max(0, min(n - 1, index))

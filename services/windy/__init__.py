"""
Windy Observations - Windy Provider

Station discovery and reading retrieval from the Windy station API.
"""

from .client import WindyClient
from .directory import StationDirectory, decode_station_ids
from .exclusion import ExclusionFilter
from .stations import (
    Observation,
    RawReading,
    StationFetcher,
    build_observation,
)
from .units import celsius_to_kelvin, degrees_to_radians

__all__ = [
    "WindyClient",
    "StationDirectory",
    "decode_station_ids",
    "ExclusionFilter",
    "Observation",
    "RawReading",
    "StationFetcher",
    "build_observation",
    "celsius_to_kelvin",
    "degrees_to_radians",
]

"""
Windy Observations - Signal K weather-station observations

Discovers Windy weather-observation stations around the vessel's current
position, fetches their latest readings, normalizes units and republishes
them to a Signal K server under ``observations.windy``.

Architecture:
    - Tile discovery: slippy-map tile of the vessel position indexes the
      Windy station directory
    - Station fetch: one request per discovered, non-excluded station
    - Publishing: one Signal K delta per station reading
    - Scheduling: warm-up cycle plus a fixed 15 minute polling cadence

License: Apache-2.0
"""

__version__ = "0.2.0"
__author__ = "Windy Observations contributors"
__license__ = "Apache-2.0"

# Core exceptions (import base class for convenience)
from windy_observations.exceptions import WindyObservationsError

# Core constants
from windy_observations.constants import (
    PLUGIN_ID,
    PLUGIN_NAME,
)

# Core types
from windy_observations.types import (
    Position,
    TileCoordinate,
)

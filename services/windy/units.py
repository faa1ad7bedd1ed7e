"""
Unit conversion into Signal K base units.

Signal K carries angles in radians and temperatures in Kelvin. Windy
reports degrees and Celsius. Absent readings stay absent: None is never
turned into a number.
"""

import math
from typing import Optional

from windy_observations.types import Celsius, Degrees, Kelvin, Radians

ZERO_CELSIUS_K = 273.15


def degrees_to_radians(value: Optional[Degrees]) -> Optional[Radians]:
    """Convert degrees to radians, passing None through."""
    if value is None:
        return None
    return math.radians(value)


def celsius_to_kelvin(value: Optional[Celsius]) -> Optional[Kelvin]:
    """Convert Celsius to Kelvin, passing None through."""
    if value is None:
        return None
    return value + ZERO_CELSIUS_K

"""
Geospatial helpers

Slippy-map tile lookup for station discovery.
"""

from .tiles import MAX_LATITUDE, locate, locate_position

__all__ = [
    "MAX_LATITUDE",
    "locate",
    "locate_position",
]

"""
Windy Observations - Signal K Integration

Vessel position source and delta publishing against a Signal K server.
"""

from .client import SignalKClient, parse_position
from .publisher import ObservationPublisher, build_delta, observation_values

__all__ = [
    "SignalKClient",
    "parse_position",
    "ObservationPublisher",
    "build_delta",
    "observation_values",
]

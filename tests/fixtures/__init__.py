"""
Shared test doubles and the provider simulator.
"""

from .mock_windy import MockSignalK, MockWindyClient, station_listing

__all__ = ["MockSignalK", "MockWindyClient", "station_listing"]

"""
Windy Observations Services Package

Service modules of the observation pipeline, organized by function.

Services
========

- services.geo: Slippy-map tile lookup for a vessel position
- services.windy: Windy station directory, station readings, unit
  conversion and the station exclusion policy
- services.signalk: Signal K position source and delta publishing

The pipeline itself is driven by ``windy_observations.scheduler``.
"""

__version__ = "0.2.0"

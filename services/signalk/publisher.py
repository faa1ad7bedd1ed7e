"""
Windy Observations - Signal K Publisher

Turns an Observation into one Signal K delta under
``observations.windy.<station id, lower-cased>`` and hands it to a delta
sink. Each delta carries exactly eight values:

    name, date, position, wind.speed, wind.gust, wind.direction,
    temperature, url
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from windy_observations.constants import OBSERVATIONS_KEY, PLUGIN_ID, SIGNALK_CONTEXT
from windy_observations.exceptions import PublishError
from windy_observations.types import Delta, DeltaSink, PathValue

from services.windy.stations import Observation

logger = logging.getLogger("windy_observations.services.signalk")


def observation_values(
    observation: Observation,
    key: str = OBSERVATIONS_KEY,
) -> list[PathValue]:
    """Full-path ``{path, value}`` entries for one observation."""
    prefix = f"{key}.{observation.station_id}"
    return [
        {"path": f"{prefix}.{path}", "value": value}
        for path, value in observation.values()
    ]


def build_delta(
    observation: Observation,
    context: str = SIGNALK_CONTEXT,
    source: str = PLUGIN_ID,
    timestamp: Optional[datetime] = None,
) -> Delta:
    """Wrap an observation's values in a single-update delta."""
    timestamp = timestamp or datetime.now(timezone.utc)
    return {
        "context": context,
        "updates": [
            {
                "$source": source,
                "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
                "values": observation_values(observation),
            }
        ],
    }


class ObservationPublisher:
    """Publishes observations to a delta sink."""

    def __init__(
        self,
        sink: DeltaSink,
        context: str = SIGNALK_CONTEXT,
        source: str = PLUGIN_ID,
    ):
        self._sink = sink
        self.context = context
        self.source = source
        self.published_count = 0

    async def publish(self, observation: Observation) -> bool:
        """
        Send one observation.

        Returns:
            True if the sink accepted the delta. Sink failures are logged
            and reported as False.
        """
        delta = build_delta(observation, self.context, self.source)
        try:
            await self._sink.send_delta(delta)
        except PublishError as e:
            logger.warning(f"Could not publish station {observation.station_id}: {e}")
            return False

        self.published_count += 1
        logger.debug(f"Published station {observation.station_id}")
        return True

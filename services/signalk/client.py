"""
Windy Observations - Signal K Server Client

Host-side collaborators of the observation pipeline, backed by a Signal K
server:

- Position provider: REST read of ``navigation.position`` of the self
  vessel. Until the server knows a position the path is absent (404) and
  the provider reports None.
- Delta sink: deltas are written to the server's WebSocket stream
  (``/signalk/v1/stream?subscribe=none``), one JSON message per delta.
"""

import asyncio
import logging
import math
from typing import Any, Optional

import aiohttp

from windy_observations.constants import POSITION_PATH, SIGNALK_URL, USER_AGENT
from windy_observations.exceptions import PublishError
from windy_observations.types import Delta, Position

logger = logging.getLogger("windy_observations.services.signalk")

API_PATH = "/signalk/v1/api/vessels/self"
STREAM_PATH = "/signalk/v1/stream?subscribe=none"


def parse_position(data: Any) -> Optional[Position]:
    """
    Extract a Position from a Signal K ``navigation.position`` document.

    Accepts the full leaf (``{"value": {...}, "timestamp": ...}``) or the
    bare value object. Anything without finite numeric latitude and
    longitude yields None.
    """
    if not isinstance(data, dict):
        return None
    value = data.get("value", data)
    if not isinstance(value, dict):
        return None

    lat = value.get("latitude")
    lon = value.get("longitude")
    for v in (lat, lon):
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
            return None
    return Position(latitude=float(lat), longitude=float(lon))


class SignalKClient:
    """
    Client for a Signal K server's REST API and WebSocket stream.

    Implements both PositionProvider and DeltaSink.
    """

    def __init__(
        self,
        url: str = SIGNALK_URL,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.url = url.rstrip("/")
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._ws_lock = asyncio.Lock()

    @property
    def stream_url(self) -> str:
        if self.url.startswith("https://"):
            return "wss://" + self.url[len("https://"):] + STREAM_PATH
        return "ws://" + self.url[len("http://"):] + STREAM_PATH

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": USER_AGENT}
            )
        return self._session

    async def close(self):
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        self._ws = None
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None

    # =========================================================================
    # Position Provider
    # =========================================================================

    async def get_position(self) -> Optional[Position]:
        """
        Current vessel position, or None if the server has none yet.

        Transport failures are logged and reported as "no position"; the
        caller skips the cycle either way.
        """
        url = f"{self.url}{API_PATH}/{POSITION_PATH.replace('.', '/')}"
        try:
            session = await self._get_session()
            async with session.get(
                url, timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                if response.status == 404:
                    return None
                if response.status != 200:
                    logger.warning(f"Signal K position request returned status {response.status}")
                    return None
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"Signal K position request failed: {e}")
            return None

        position = parse_position(data)
        if position is None:
            logger.debug(f"No usable position in {data!r}")
        return position

    # =========================================================================
    # Delta Sink
    # =========================================================================

    async def _connect_stream(self) -> aiohttp.ClientWebSocketResponse:
        if self._ws is None or self._ws.closed:
            session = await self._get_session()
            logger.info(f"Connecting to Signal K stream {self.stream_url}")
            self._ws = await session.ws_connect(self.stream_url, heartbeat=30.0)
        return self._ws

    async def send_delta(self, delta: Delta) -> None:
        """
        Write one delta to the stream, connecting on first use.

        Raises:
            PublishError: Connection or send failed
        """
        async with self._ws_lock:
            try:
                ws = await self._connect_stream()
                await ws.send_json(delta)
            except (aiohttp.ClientError, asyncio.TimeoutError, ConnectionError) as e:
                self._ws = None
                raise PublishError(
                    f"Failed to send delta: {e}", server=self.url
                ) from e

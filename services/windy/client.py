"""
Windy Observations - Windy HTTP Client

Async JSON client for the Windy points-of-interest station API. Owns a
single aiohttp session for all requests of the process; every request
carries the plugin User-Agent.

Endpoints:
    GET {stations_url}/tiles/{zoom}/{x}/{y}   station directory for a tile
    GET {stations_url}/{station_id}           latest station reading
"""

import asyncio
from typing import Any, Optional

import aiohttp

from windy_observations.constants import REQUEST_TIMEOUT_SEC, USER_AGENT, WINDY_STATIONS_URL
from windy_observations.exceptions import ProviderError


class WindyClient:
    """
    Async client for the Windy station API.

    A session may be injected (shared with other clients, or a test double);
    otherwise one is created lazily and closed by ``close()``.
    """

    def __init__(
        self,
        base_url: str = WINDY_STATIONS_URL,
        user_agent: str = USER_AGENT,
        timeout: float = REQUEST_TIMEOUT_SEC,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": self.user_agent}
            )
        return self._session

    async def close(self):
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "WindyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def fetch_json(self, path: str) -> Any:
        """
        GET ``path`` relative to the base URL and decode the JSON body.

        Args:
            path: Endpoint path, e.g. ``tiles/8/41/90`` or ``ABC``

        Returns:
            Decoded JSON document

        Raises:
            ProviderError: Transport failure, non-2xx status or a body that
                is not JSON
        """
        url = self.url_for(path)
        session = await self._get_session()

        try:
            async with session.get(
                url,
                headers={"User-Agent": self.user_agent},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if not 200 <= response.status < 300:
                    raise ProviderError(
                        f"Windy API returned status {response.status}",
                        url=url,
                        status=response.status,
                    )
                # Windy does not always label its JSON responses
                return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise ProviderError(f"Windy API request failed: {e}", url=url) from e
        except asyncio.TimeoutError as e:
            raise ProviderError("Windy API request timed out", url=url) from e
        except ValueError as e:
            raise ProviderError(f"Windy API returned invalid JSON: {e}", url=url) from e

from typing import Any, Dict, List, Optional
import logging

import httpx

from ..core.config import settings

logger = logging.getLogger(__name__)

class GeocodingError(Exception):
    """The geocoding provider could not answer the query."""

class GeoServer:
    """Address lookup against a Nominatim compatible search API.

    Results are the provider's JSON records, returned as-is. No retry,
    throttling or caching happens here.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.GEOCODER_BASE_URL).rstrip("/")
        self.user_agent = user_agent or settings.GEOCODER_USER_AGENT
        self.timeout = timeout if timeout is not None else settings.GEOCODER_TIMEOUT_SECONDS
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
            transport=self.transport,
        )

    async def search(self, query: str, **params: Any) -> List[Dict[str, Any]]:
        """Free-text search, e.g. ``search("Via Roma 1, Torino", limit=5)``."""
        query_params = {
            key: value for key, value in params.items() if value is not None
        }
        query_params.update({"q": query, "format": "json"})

        async with self._client() as client:
            try:
                response = await client.get("/search", params=query_params)
            except httpx.HTTPError as e:
                logger.error(f"Geocoding request failed: {e!r}")
                raise GeocodingError("Geocoding provider unreachable") from e

        if response.status_code != 200:
            logger.error(
                f"Geocoding provider returned {response.status_code} for query {query!r}"
            )
            raise GeocodingError(
                f"Geocoding provider returned status {response.status_code}"
            )

        try:
            results = response.json()
        except ValueError as e:
            logger.error(f"Geocoding provider returned invalid JSON: {e!r}")
            raise GeocodingError("Geocoding provider returned invalid JSON") from e

        if not isinstance(results, list):
            raise GeocodingError("Unexpected geocoding response format")

        return results

geo_server = GeoServer()

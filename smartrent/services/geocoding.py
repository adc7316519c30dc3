"""
Geocoding service: turns a free-text address into coordinates.
Lookups are best effort; a failure leaves the listing without coordinates.
"""

from typing import Optional, Tuple
from smartrent.config import Settings, settings as default_settings
import httpx
import logging

logger = logging.getLogger(__name__)

Coordinates = Tuple[float, float]


class GeocodingService:
    """
    Client for the Google Maps Geocoding JSON API.

    Args:
        settings: Application settings providing the API key, endpoint and timeout
        transport: Optional httpx transport, used to swap the network out in tests
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings or default_settings
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.settings.google_maps_api_key)

    async def geocode(self, address: Optional[str]) -> Optional[Coordinates]:
        """
        Look up the coordinates of an address.

        Args:
            address: Free-text street address

        Returns:
            (latitude, longitude) of the first result, or None when no key is
            configured, the address is blank, or the lookup fails for any reason
        """
        if not address or not address.strip():
            return None

        if not self.enabled:
            logger.debug("Geocoding skipped: no API key configured")
            return None

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.geocoding_timeout,
                transport=self.transport
            ) as client:
                response = await client.get(
                    self.settings.geocoding_url,
                    params={"address": address, "key": self.settings.google_maps_api_key}
                )
                response.raise_for_status()
                data = response.json()

            return self._parse_first_result(data)
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError, IndexError) as e:
            logger.warning(f"Geocoding failed for address '{address}': {e}")
            return None

    @staticmethod
    def _parse_first_result(data: dict) -> Optional[Coordinates]:
        """
        Extract the first result's location from a geocoding response.

        Raises:
            KeyError, TypeError, ValueError, AttributeError: If the payload is malformed
        """
        results = data.get("results") or []
        if not results:
            logger.warning(f"Geocoding returned no results (status: {data.get('status')})")
            return None

        location = results[0]["geometry"]["location"]
        return float(location["lat"]), float(location["lng"])

"""
Geocoder clients.

NominatimClient wraps a single OpenStreetMap Nominatim search call. Every
failure (network, timeout, HTTP error, bad payload) is logged and turned into
an empty candidate list so callers only ever see "no usable candidates".
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from vicaddr.address_models import GeocodeCandidate

logger = logging.getLogger(__name__)


class GeocodeClient(ABC):
    """Narrow geocoder interface: one lookup per address."""

    __slots__ = ()

    @abstractmethod
    async def lookup(self, address: str) -> list[GeocodeCandidate]:
        ...

    @property
    def available(self) -> bool:
        return True


class DisabledGeocodeClient(GeocodeClient):
    """Geocoder switched off by configuration; forces the regex fallback."""

    __slots__ = ()

    async def lookup(self, address: str) -> list[GeocodeCandidate]:
        return []

    @property
    def available(self) -> bool:
        return False


class NominatimClient(GeocodeClient):
    """
    Nominatim search client.

    Does not throttle or retry: one request per lookup. Batch callers space
    out their calls (see BatchProcessor).

    Usage:
        client = NominatimClient(user_agent="my-app/1.0")
        candidates = await client.lookup("90 Forman Road Shelbourne")
    """

    __slots__ = ("base_url", "user_agent", "email", "timeout", "country_codes", "limit", "_http_client")

    def __init__(
        self,
        *,
        base_url: str = "https://nominatim.openstreetmap.org/search",
        user_agent: str = "vic-address-validator/1.0",
        email: Optional[str] = None,
        timeout: float = 5.0,
        country_codes: str = "au",
        limit: int = 5,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url
        self.user_agent = user_agent
        self.email = email
        self.timeout = timeout
        self.country_codes = country_codes
        self.limit = limit
        self._http_client = http_client

    def _params(self, address: str) -> dict[str, Any]:
        params: dict[str, Any] = {
            "q": address,
            "format": "jsonv2",
            "addressdetails": 1,
            "limit": self.limit,
        }
        if self.country_codes:
            params["countrycodes"] = self.country_codes
        if self.email:
            params["email"] = self.email
        return params

    async def _get(self, address: str) -> httpx.Response:
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if self._http_client is not None:
            return await self._http_client.get(
                self.base_url, params=self._params(address), headers=headers, timeout=self.timeout
            )
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(self.base_url, params=self._params(address), headers=headers)

    async def lookup(self, address: str) -> list[GeocodeCandidate]:
        """
        Search the geocoder for an address.

        Args:
            address: Raw address text, sent as the query.

        Returns:
            Candidates in provider order; empty on any failure.
        """
        if not address or not address.strip():
            return []

        try:
            response = await self._get(address)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Nominatim returned HTTP {e.response.status_code} for {address[:50]!r}")
            return []
        except httpx.HTTPError as e:
            logger.warning(f"Nominatim request failed ({type(e).__name__}): {e}")
            return []
        except ValueError as e:
            logger.warning(f"Nominatim returned invalid JSON: {e}")
            return []

        if not isinstance(payload, list):
            logger.warning(f"Nominatim returned unexpected payload type {type(payload).__name__}")
            return []

        candidates = [GeocodeCandidate.from_dict(item) for item in payload if isinstance(item, dict)]
        logger.debug(f"Nominatim returned {len(candidates)} candidates for {address[:50]!r}")
        return candidates


"""
Google Maps geocoding for cafe signups.

Selected by the geo factory outside development mode. Needs
GOOGLE_MAPS_API_KEY with the Geocoding API enabled; lookups are biased to
GEOCODING_REGION.

    https://developers.google.com/maps/documentation/geocoding
"""

import asyncio
import logging
from datetime import datetime

import googlemaps
from googlemaps.exceptions import ApiError, Timeout, TransportError

from caffio.core.config import get_settings
from caffio.services.geo.base import BaseGeoService, GeocodingResult

logger = logging.getLogger(__name__)

FAILURES = {
    Timeout: ("timeout", "Geocoding timed out"),
    ApiError: ("api_error", "Geocoding service error"),
    TransportError: ("transport_error", "Unable to reach geocoding service"),
}


class GoogleGeoService(BaseGeoService):
    """
    Address to coordinates through ``googlemaps.Client``.

    Example:
        >>> service = GoogleGeoService()
        >>> result = await service.geocode("Albion St, Surry Hills NSW")
        >>> result.formatted_address
        'Albion St, Surry Hills NSW 2010, Australia'
    """

    def __init__(self):
        settings = get_settings()
        if not settings.google_maps_api_key:
            raise ValueError(f"GOOGLE_MAPS_API_KEY must be set when ENV_MODE={settings.env_mode.value}")

        self._client = googlemaps.Client(key=settings.google_maps_api_key)
        self._region = settings.geocoding_region
        logger.info(f"GoogleGeoService ready (region={self._region})")

    @property
    def provider_name(self) -> str:
        return "google"

    async def geocode(self, address: str) -> GeocodingResult:
        started = datetime.now()

        try:
            matches = await asyncio.to_thread(self._client.geocode, address, region=self._region)
        except (Timeout, ApiError, TransportError) as e:
            code, message = next(v for k, v in FAILURES.items() if isinstance(e, k))
            logger.error(f"Google: geocode failed [{code}] for {address!r} - {e}")
            return GeocodingResult(
                success=False,
                error_message=message,
                error_code=code,
                response_time_ms=(datetime.now() - started).total_seconds() * 1000,
            )

        elapsed_ms = (datetime.now() - started).total_seconds() * 1000
        if not matches:
            logger.warning(f"Google: no match for {address!r}")
            return GeocodingResult(
                success=False,
                error_message="Address not found",
                error_code="address_not_found",
                response_time_ms=elapsed_ms,
            )

        best = matches[0]
        location = best.get("geometry", {}).get("location", {})
        logger.info(f"Google: {address!r} → {best.get('formatted_address')}")

        return GeocodingResult(
            success=True,
            latitude=location.get("lat"),
            longitude=location.get("lng"),
            formatted_address=best.get("formatted_address", address),
            response_time_ms=elapsed_ms,
        )

    async def health_check(self) -> bool:
        try:
            return bool(await asyncio.to_thread(self._client.geocode, "Sydney NSW"))
        except (ApiError, Timeout, TransportError) as e:
            logger.error(f"Google: probe geocode failed - {e}")
            return False

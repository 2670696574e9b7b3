"""
Deterministic geocoding for development mode.

Every address maps to a fixed point within ~5km of Sydney CBD, seeded by
the normalized address text, so repeated signups land in the same place.
MOCK_FAILURE_RATE makes some lookups fail to exercise the (0, 0) fallback.
"""

import asyncio
import random
import logging

from caffio.services.geo.base import BaseGeoService, GeocodingResult

logger = logging.getLogger(__name__)


class MockGeoService(BaseGeoService):
    """Stand-in for Google geocoding with configurable outages and delay."""

    # Sydney CBD, where the seeded cafes are
    CENTER_LAT = -33.8688
    CENTER_LNG = 151.2093

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency

        logger.info(f"MockGeoService ready ({failure_rate:.0%} failures)")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _delay(self) -> float:
        latency = random.uniform(self.min_latency, self.max_latency)
        if latency > 0:
            await asyncio.sleep(latency)
        return latency * 1000

    def _outage(self) -> bool:
        return random.random() < self.failure_rate

    def _generate_coordinates(self, address: str) -> tuple[float, float]:
        """Coordinates near Sydney CBD, the same for the same address."""
        rng = random.Random(address.strip().lower())
        lat = self.CENTER_LAT + rng.uniform(-0.05, 0.05)
        lng = self.CENTER_LNG + rng.uniform(-0.05, 0.05)
        return round(lat, 6), round(lng, 6)

    async def geocode(self, address: str) -> GeocodingResult:
        latency_ms = await self._delay()

        if not address or not address.strip():
            return GeocodingResult(
                success=False,
                error_message="Address is empty",
                error_code="address_not_found",
                response_time_ms=latency_ms,
            )

        if self._outage():
            logger.debug(f"Mock: Simulated geocoding failure - {address}")
            return GeocodingResult(
                success=False,
                error_message="Geocoding service error",
                error_code="api_error",
                response_time_ms=latency_ms,
            )

        lat, lng = self._generate_coordinates(address)
        logger.debug(f"Mock: Geocoded {address} -> ({lat}, {lng})")

        return GeocodingResult(
            success=True,
            latitude=lat,
            longitude=lng,
            formatted_address=f"{address.strip()}, Australia",
            response_time_ms=latency_ms,
        )

    async def health_check(self) -> bool:
        """Always healthy."""
        return True

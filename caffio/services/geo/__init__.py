"""
Geo Service Factory

Provides a single entry point for obtaining a geo service instance.
Automatically selects Mock or Google Maps based on ENV_MODE configuration.

Usage:
    from caffio.services.geo import get_geo_service

    geo_service = get_geo_service()
    result = await geo_service.geocode("Reservoir St, Surry Hills NSW")
"""

import logging
from functools import lru_cache

from caffio.core.config import get_settings
from caffio.services.geo.base import BaseGeoService, GeocodingResult
from caffio.services.geo.mock import MockGeoService
from caffio.services.geo.google import GoogleGeoService

logger = logging.getLogger(__name__)


@lru_cache()
def get_geo_service() -> BaseGeoService:
    """
    Get the configured geo service instance.

    Raises:
        ValueError: If staging/production mode but Google API key not configured
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Geo Service: Using MockGeoService (development mode)")
        return MockGeoService(
            failure_rate=settings.mock_failure_rate,
            max_latency=settings.mock_latency_seconds,
        )

    logger.info(
        f"Geo Service: Using GoogleGeoService "
        f"({settings.env_mode.value} mode)"
    )
    return GoogleGeoService()


def reset_geo_service() -> None:
    """Clear the cached geo service instance."""
    get_geo_service.cache_clear()
    logger.debug("Geo service cache cleared")


__all__ = [
    "get_geo_service",
    "reset_geo_service",
    "BaseGeoService",
    "GeocodingResult",
    "MockGeoService",
    "GoogleGeoService",
]

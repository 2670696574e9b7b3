"""
Geo Service Abstract Base Class

Defines the interface contract for geocoding implementations.
Both MockGeoService and GoogleGeoService implement these methods.

Use Cases:
    - Filling in cafe coordinates at owner signup when the app did not
      send lat/lon
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class GeocodingResult:
    """
    Standardized result from a geocoding lookup.

    Attributes:
        success: Whether the address resolved to coordinates
        latitude: GPS latitude coordinate
        longitude: GPS longitude coordinate
        formatted_address: Standardized address format
        error_message: Error description if the lookup failed
        error_code: Machine-readable error code
        response_time_ms: API response time
    """
    success: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    formatted_address: Optional[str] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    response_time_ms: float = 0.0


class BaseGeoService(ABC):
    """
    Abstract base class for geocoding services.

    Geocoding is best-effort: implementations report failures through
    ``GeocodingResult.success`` instead of raising.

    Example:
        >>> service = get_geo_service()
        >>> result = await service.geocode("Reservoir St, Surry Hills NSW")
        >>> if result.success:
        ...     print(result.latitude, result.longitude)
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the geo provider ("mock", "google")."""
        pass

    @abstractmethod
    async def geocode(self, address: str) -> GeocodingResult:
        """
        Resolve a free-form address to coordinates.

        Args:
            address: Street address as typed by the cafe owner

        Returns:
            GeocodingResult: Coordinates and formatted address on success
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the geo service.

        Returns:
            bool: True if service is operational
        """
        pass

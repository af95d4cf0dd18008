"""Location resolution for weather lookups."""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from classy_weather.config import (
    GEOCODING_API_URL, REVERSE_GEOCODING_API_URL, TIMEZONE_API_URL
)
from classy_weather.weather.cancellation import CancelToken
from classy_weather.weather.client import JsonApiClient
from classy_weather.weather.errors import (
    NotFoundError, PermissionDeniedError, TransportError
)
from classy_weather.weather.models import (
    Coordinates, GeocodingResponse, PositionReport, ResolvedLocation,
    ReverseGeocodeResponse, TimezoneResponse
)

logger = logging.getLogger(__name__)


class GeoResolver(JsonApiClient):
    """Resolves free-text place names with the Open-Meteo geocoding API."""

    FETCH_FAILED = "Something went wrong with fetching geolocation"
    NOT_FOUND = "Location not found"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = GEOCODING_API_URL
    ):
        super().__init__(client)
        self.base_url = base_url

    async def resolve(
        self,
        place_name: str,
        cancel_token: Optional[CancelToken] = None
    ) -> ResolvedLocation:
        """Convert a place name to a location.

        The first match is used; no ranking beyond provider order.

        Args:
            place_name: Free-text place name
            cancel_token: Token of the chain this request belongs to

        Returns:
            Resolved location

        Raises:
            NotFoundError: If nothing matches
            TransportError: If the geocoding request fails
            RequestCancelled: If the chain was superseded
        """
        logger.info(f"Geocoding place: {place_name}")
        data = await self._get_json(
            self.base_url, {"name": place_name}, self.FETCH_FAILED, cancel_token
        )

        try:
            response = GeocodingResponse(**data)
            if not response.results:
                logger.info(f"No geocoding match for '{place_name}'")
                raise NotFoundError(self.NOT_FOUND)

            match = response.results[0]
            location = ResolvedLocation(
                latitude=match.latitude,
                longitude=match.longitude,
                timezone=match.timezone,
                name=match.name,
                country_code=match.country_code
            )
        except (ValidationError, TypeError) as e:
            logger.error(f"Invalid geocoding response format: {e}")
            raise TransportError(self.FETCH_FAILED) from e

        logger.info(f"Successfully geocoded '{place_name}' to ({location.latitude}, {location.longitude})")
        return location


class CurrentPositionResolver(JsonApiClient):
    """Resolves the device position to a location."""

    TIMEZONE_FAILED = "Something went wrong with fetching the current timezone"
    PLACE_FAILED = "Something went wrong with fetching the current location data"
    PERMISSION_DENIED = "User denied geolocation"
    UNKNOWN_PLACE = "Unknown location"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timezone_url: str = TIMEZONE_API_URL,
        reverse_url: str = REVERSE_GEOCODING_API_URL
    ):
        super().__init__(client)
        self.timezone_url = timezone_url
        self.reverse_url = reverse_url

    async def request_browser_location(self, report: PositionReport) -> Coordinates:
        """Turn the browser's geolocation outcome into coordinates.

        Raises:
            PermissionDeniedError: If the browser reported an error or no position
        """
        if report.error or report.latitude is None or report.longitude is None:
            message = report.error or self.PERMISSION_DENIED
            logger.info(f"Device position unavailable: {message}")
            raise PermissionDeniedError(message)
        return Coordinates(latitude=report.latitude, longitude=report.longitude)

    async def resolve_from_coordinates(
        self,
        latitude: float,
        longitude: float,
        cancel_token: Optional[CancelToken] = None
    ) -> ResolvedLocation:
        """Look up timezone and place name for coordinates.

        Both lookups must succeed; they run one after the other.

        Args:
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees
            cancel_token: Token of the chain these requests belong to

        Returns:
            Resolved location

        Raises:
            TransportError: If either lookup fails
            RequestCancelled: If the chain was superseded
        """
        logger.info(f"Finding timezone for coordinates: ({latitude}, {longitude})")
        data = await self._get_json(
            self.timezone_url,
            {"latitude": latitude, "longitude": longitude},
            self.TIMEZONE_FAILED,
            cancel_token
        )
        try:
            timezone = TimezoneResponse(**data)
        except (ValidationError, TypeError) as e:
            logger.error(f"Invalid timezone response format: {e}")
            raise TransportError(self.TIMEZONE_FAILED) from e

        logger.info(f"Reverse geocoding coordinates: ({latitude}, {longitude})")
        data = await self._get_json(
            self.reverse_url,
            {"lat": latitude, "lon": longitude},
            self.PLACE_FAILED,
            cancel_token
        )
        try:
            address = ReverseGeocodeResponse(**data).address
        except (ValidationError, TypeError) as e:
            logger.error(f"Invalid reverse geocoding response format: {e}")
            raise TransportError(self.PLACE_FAILED) from e

        name = address.town or address.county or self.UNKNOWN_PLACE
        logger.info(f"Resolved ({latitude}, {longitude}) to '{name}' in {timezone.timezone_id}")

        return ResolvedLocation(
            latitude=latitude,
            longitude=longitude,
            timezone=timezone.timezone_id,
            name=name,
            country_code=timezone.country_code
        )

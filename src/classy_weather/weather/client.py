"""HTTP clients for the Open-Meteo forecast API."""

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from classy_weather.config import (
    FORECAST_API_URL, FORECAST_DAILY_VARIABLES, HTTP_TIMEOUT_SECONDS, USER_AGENT
)
from classy_weather.weather.cancellation import CancelToken
from classy_weather.weather.errors import TransportError
from classy_weather.weather.models import ForecastSeries, OpenMeteoForecastResponse

logger = logging.getLogger(__name__)


class JsonApiClient:
    """Async JSON client shared by the provider lookups."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, user_agent: str = USER_AGENT):
        """Initialize the client.

        Args:
            client: HTTP client to use (creates default if None)
            user_agent: User-Agent header for API requests
        """
        self.user_agent = user_agent
        self.client = client or httpx.AsyncClient(
            headers={"User-Agent": self.user_agent},
            timeout=HTTP_TIMEOUT_SECONDS
        )

    async def _get_json(
        self,
        url: str,
        params: Dict[str, Any],
        error_message: str,
        cancel_token: Optional[CancelToken] = None
    ) -> Any:
        """GET ``url`` and decode the JSON body.

        Args:
            url: Endpoint URL
            params: Query parameters
            error_message: Message of the TransportError raised on failure
            cancel_token: Token aborting the request when the chain is superseded

        Returns:
            Decoded JSON body

        Raises:
            TransportError: If the request fails or the status is not successful
            RequestCancelled: If the token fires before the response arrives
        """
        request = self.client.get(url, params=params)
        try:
            if cancel_token is not None:
                response = await cancel_token.run(request)
            else:
                response = await request
        except httpx.RequestError as e:
            logger.error(f"Request error to {url}: {e}")
            raise TransportError(error_message) from e

        if response.is_error:
            logger.error(f"HTTP error from {url}: {response.status_code} - {response.text}")
            raise TransportError(error_message)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {url}: {e}")
            raise TransportError(error_message) from e

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()


class ForecastFetcher(JsonApiClient):
    """Fetches daily forecasts from Open-Meteo."""

    FETCH_FAILED = "Something went wrong with fetching weather"
    MALFORMED = "Received malformed forecast data"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = FORECAST_API_URL
    ):
        super().__init__(client)
        self.base_url = base_url

    async def fetch(
        self,
        latitude: float,
        longitude: float,
        timezone: str,
        cancel_token: Optional[CancelToken] = None
    ) -> ForecastSeries:
        """Fetch the daily forecast for given coordinates.

        Args:
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees
            timezone: Timezone the daily boundaries are computed in
            cancel_token: Token of the chain this request belongs to

        Returns:
            Daily forecast series

        Raises:
            TransportError: If the request fails or the data is malformed
            RequestCancelled: If the chain was superseded
        """
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "timezone": timezone,
            "daily": FORECAST_DAILY_VARIABLES,
        }

        logger.info(f"Fetching forecast for lat={latitude}, lon={longitude}, timezone={timezone}")
        data = await self._get_json(self.base_url, params, self.FETCH_FAILED, cancel_token)

        try:
            forecast = ForecastSeries.from_daily(OpenMeteoForecastResponse(**data).daily)
        except (ValidationError, TypeError) as e:
            logger.error(f"Invalid forecast response format: {e}")
            raise TransportError(self.MALFORMED) from e

        logger.info(f"Successfully fetched forecast with {len(forecast)} days")
        return forecast

import asyncio
from typing import Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from classy_weather.weather.errors import NotFoundError
from classy_weather.weather.geocoding import CurrentPositionResolver
from classy_weather.weather.models import ForecastSeries, ResolvedLocation


def make_http_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient answering every request with ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class FakeGeoResolver:
    """Geocoder answering from a dict; lookups for gated names wait for their event.

    Ignores the cancel token, like a response that already arrived.
    """

    def __init__(
        self,
        locations: Dict[str, ResolvedLocation],
        gates: Optional[Dict[str, asyncio.Event]] = None
    ):
        self.locations = locations
        self.gates = gates or {}
        self.calls: List[str] = []
        self.closed = False

    async def resolve(self, place_name, cancel_token=None):
        self.calls.append(place_name)
        gate = self.gates.get(place_name)
        if gate is not None:
            await gate.wait()
        if place_name not in self.locations:
            raise NotFoundError("Location not found")
        return self.locations[place_name]

    async def aclose(self):
        self.closed = True


class FakeForecastFetcher:
    """Forecast client keyed by coordinates; gated coordinates wait for their event."""

    def __init__(
        self,
        forecast: ForecastSeries,
        gates: Optional[Dict[Tuple[float, float], asyncio.Event]] = None,
        errors: Optional[Dict[Tuple[float, float], Exception]] = None
    ):
        self.forecast = forecast
        self.gates = gates or {}
        self.errors = errors or {}
        self.calls: List[Tuple[float, float, str]] = []
        self.closed = False

    async def fetch(self, latitude, longitude, timezone, cancel_token=None):
        self.calls.append((latitude, longitude, timezone))
        gate = self.gates.get((latitude, longitude))
        if gate is not None:
            await gate.wait()
        error = self.errors.get((latitude, longitude))
        if error is not None:
            raise error
        return self.forecast

    async def aclose(self):
        self.closed = True


class FakePositionResolver:
    """Resolves every position to a fixed location."""

    PERMISSION_DENIED = CurrentPositionResolver.PERMISSION_DENIED
    request_browser_location = CurrentPositionResolver.request_browser_location

    def __init__(self, location: ResolvedLocation, gate: Optional[asyncio.Event] = None):
        self.location = location
        self.gate = gate
        self.calls: List[Tuple[float, float]] = []
        self.closed = False

    async def resolve_from_coordinates(self, latitude, longitude, cancel_token=None):
        self.calls.append((latitude, longitude))
        if self.gate is not None:
            await self.gate.wait()
        return self.location

    async def aclose(self):
        self.closed = True


@pytest.fixture
def forecast_payload():
    """Open-Meteo forecast response with two days."""
    return {
        "latitude": 48.86,
        "longitude": 2.35,
        "timezone": "Europe/Paris",
        "daily": {
            "time": ["2024-01-01", "2024-01-02"],
            "weathercode": [0, 3],
            "temperature_2m_max": [10.4, 8.1],
            "temperature_2m_min": [2.2, -1.9],
        },
    }


@pytest.fixture
def geocoding_payload():
    """Open-Meteo geocoding response for 'Paris'."""
    return {
        "results": [
            {
                "id": 2988507,
                "name": "Paris",
                "latitude": 48.8566,
                "longitude": 2.3522,
                "timezone": "Europe/Paris",
                "country_code": "FR",
            },
            {
                "id": 4717560,
                "name": "Paris",
                "latitude": 33.66094,
                "longitude": -95.55551,
                "timezone": "America/Chicago",
                "country_code": "US",
            },
        ]
    }


@pytest.fixture
def forecast():
    return ForecastSeries(
        dates=["2024-01-01", "2024-01-02"],
        min_temps=[2.2, -1.9],
        max_temps=[10.4, 8.1],
        condition_codes=[0, 3],
    )


@pytest.fixture
def paris():
    return ResolvedLocation(
        latitude=48.8566, longitude=2.3522, timezone="Europe/Paris", name="Paris", country_code="FR"
    )


@pytest.fixture
def pa():
    return ResolvedLocation(
        latitude=8.25, longitude=-80.5, timezone="America/Panama", name="Pa", country_code="PA"
    )


@pytest.fixture
def berlin():
    return ResolvedLocation(
        latitude=52.52437, longitude=13.41053, timezone="Europe/Berlin", name="Berlin", country_code="DE"
    )


@pytest.fixture
def here():
    return ResolvedLocation(
        latitude=45.0, longitude=7.0, timezone="Europe/Rome", name="Torino", country_code="IT"
    )

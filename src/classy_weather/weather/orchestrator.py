"""Request lifecycle for the weather widget."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set, Tuple

from classy_weather.config import MIN_QUERY_LENGTH
from classy_weather.storage import MemoryQueryStore, QueryStore
from classy_weather.weather.cancellation import CancelToken
from classy_weather.weather.client import ForecastFetcher
from classy_weather.weather.errors import RequestCancelled, WeatherLookupError
from classy_weather.weather.geocoding import CurrentPositionResolver, GeoResolver
from classy_weather.weather.models import (
    Coordinates, ErrorState, ForecastSeries, IdleState, LoadedState,
    LoadingState, LocationState, ResolvedLocation, WidgetView
)

logger = logging.getLogger(__name__)

Chain = Awaitable[Tuple[ResolvedLocation, ForecastSeries]]


async def fetch_forecast(
    forecast_fetcher: ForecastFetcher,
    location: ResolvedLocation,
    cancel_token: Optional[CancelToken] = None
) -> ForecastSeries:
    """Second stage of every chain: the forecast for a resolved location."""
    if cancel_token is not None:
        cancel_token.raise_if_cancelled()
    return await forecast_fetcher.fetch(
        location.latitude, location.longitude, location.timezone, cancel_token
    )


async def search_weather(
    geo_resolver: GeoResolver,
    forecast_fetcher: ForecastFetcher,
    query: str,
    cancel_token: Optional[CancelToken] = None
) -> Tuple[ResolvedLocation, ForecastSeries]:
    """Geocode ``query`` and then fetch its forecast.

    Raises:
        NotFoundError: If the place is unknown
        TransportError: If either request fails
        RequestCancelled: If the chain was superseded
    """
    location = await geo_resolver.resolve(query, cancel_token)
    forecast = await fetch_forecast(forecast_fetcher, location, cancel_token)
    return location, forecast


class QueryOrchestrator:
    """Owns the widget's query and the state rendered from it.

    Every query change and every current-location request starts a new
    generation. Only the chain of the current generation may write
    ``state``; results of older chains are dropped when they complete.
    """

    def __init__(
        self,
        geo_resolver: Optional[GeoResolver] = None,
        forecast_fetcher: Optional[ForecastFetcher] = None,
        position_resolver: Optional[CurrentPositionResolver] = None,
        store: Optional[QueryStore] = None,
        min_query_length: int = MIN_QUERY_LENGTH
    ):
        """Initialize the orchestrator.

        Args:
            geo_resolver: Place name resolver (creates default if None)
            forecast_fetcher: Forecast client (creates default if None)
            position_resolver: Device position resolver (creates default if None)
            store: Last-query store (in-memory if None)
            min_query_length: Shortest trimmed query that triggers a lookup
        """
        self.geo_resolver = geo_resolver or GeoResolver()
        self.forecast_fetcher = forecast_fetcher or ForecastFetcher()
        self.position_resolver = position_resolver or CurrentPositionResolver()
        self.store = store or MemoryQueryStore()
        self.min_query_length = min_query_length

        self.query = ""
        self.state: LocationState = IdleState()
        self.generation = 0
        self._token: Optional[CancelToken] = None
        self._tasks: Set[asyncio.Task] = set()
        self._pending_locates = 0

    @property
    def is_locating(self) -> bool:
        """Whether a device position request is pending."""
        return self._pending_locates > 0

    @property
    def is_busy(self) -> bool:
        """Whether a forecast is loading or a position request is pending."""
        return isinstance(self.state, LoadingState) or self.is_locating

    async def restore(self) -> Optional[asyncio.Task]:
        """Start from the stored query, if any.

        Returns:
            The lookup task, or None when the stored query is too short
        """
        try:
            stored = await self.store.get()
        except Exception as e:
            logger.warning(f"Could not read stored query: {e}")
            stored = None

        logger.info(f"Restoring query: {stored!r}")
        return await self.on_query_change(stored or "")

    async def on_query_change(self, new_query: str) -> Optional[asyncio.Task]:
        """Handle a new search text.

        Args:
            new_query: Current contents of the search box

        Returns:
            The lookup task, or None when no lookup was started
        """
        self.query = new_query
        generation, token = self._advance()

        await self._persist(new_query)
        if generation != self.generation:
            # Superseded while the query was being stored
            return None

        query = new_query.strip()
        if len(query) < self.min_query_length:
            self._reconcile(generation, IdleState())
            return None

        self._reconcile(generation, LoadingState())
        chain = search_weather(self.geo_resolver, self.forecast_fetcher, query, token)
        return self._spawn(self._run(generation, chain))

    async def use_current_location(
        self,
        locate: Callable[[], Awaitable[Coordinates]]
    ) -> asyncio.Task:
        """Show the forecast for the device position.

        Args:
            locate: Requests the device position; raises PermissionDeniedError
                when it is unavailable

        Returns:
            The lookup task
        """
        generation, token = self._advance()
        return self._spawn(self._run(generation, self._position_chain(generation, token, locate)))

    async def _position_chain(
        self,
        generation: int,
        token: CancelToken,
        locate: Callable[[], Awaitable[Coordinates]]
    ) -> Tuple[ResolvedLocation, ForecastSeries]:
        self._pending_locates += 1
        try:
            position = await token.run(locate())
        finally:
            self._pending_locates -= 1

        if not self._reconcile(generation, LoadingState()):
            raise RequestCancelled()

        location = await self.position_resolver.resolve_from_coordinates(
            position.latitude, position.longitude, token
        )
        forecast = await fetch_forecast(self.forecast_fetcher, location, token)
        return location, forecast

    async def _run(self, generation: int, chain: Chain) -> None:
        """Await a chain and write its outcome if it is still current."""
        try:
            location, forecast = await chain
        except RequestCancelled:
            logger.debug(f"Chain of generation {generation} cancelled")
            return
        except WeatherLookupError as e:
            self._reconcile(generation, ErrorState(message=e.message))
        except Exception as e:
            logger.exception(f"Unexpected error in chain of generation {generation}: {e}")
            self._reconcile(generation, ErrorState(message=str(e) or "Unexpected error"))
        else:
            self._reconcile(generation, LoadedState(location=location, forecast=forecast))

    def _reconcile(self, generation: int, state: LocationState) -> bool:
        """Write ``state`` if ``generation`` is still the current one.

        Returns:
            True if the state was written
        """
        if generation != self.generation:
            logger.debug(
                f"Discarding {state.status} state of generation {generation}, current is {self.generation}"
            )
            return False

        if isinstance(state, ErrorState):
            logger.warning(f"Lookup failed: {state.message}")
        else:
            logger.info(f"State -> {state.status} (generation {generation})")
        self.state = state
        return True

    def _advance(self) -> Tuple[int, CancelToken]:
        """Start a new generation and abort the previous chain."""
        if self._token is not None:
            self._token.cancel()
        self.generation += 1
        self._token = CancelToken()
        return self.generation, self._token

    def _spawn(self, coro: Awaitable[None]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _persist(self, query: str) -> None:
        try:
            await self.store.set(query)
        except Exception as e:
            logger.warning(f"Could not store query: {e}")

    def view(self) -> WidgetView:
        """Snapshot of everything the widget renders."""
        title = None
        days = []
        if isinstance(self.state, LoadedState):
            title = self.state.location.display_name
            days = self.state.forecast.day_entries()
        return WidgetView(
            query=self.query,
            is_locating=self.is_locating,
            state=self.state,
            title=title,
            days=days
        )

    async def aclose(self):
        """Abort pending lookups and release clients."""
        self._advance()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        for resource in (self.geo_resolver, self.forecast_fetcher, self.position_resolver, self.store):
            try:
                await resource.aclose()
            except Exception as e:
                logger.error(f"Error closing {type(resource).__name__}: {e}")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()

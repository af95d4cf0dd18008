"""API endpoints for the weather widget."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi_cache.decorator import cache

from classy_weather.config import CACHE_EXPIRE_SECONDS, MIN_QUERY_LENGTH
from classy_weather.weather.errors import NotFoundError, TransportError
from classy_weather.weather.models import (
    ForecastView, PositionReport, QueryRequest, WidgetView
)
from classy_weather.weather.orchestrator import QueryOrchestrator, search_weather

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/weather", tags=["weather"])


def get_orchestrator(request: Request) -> QueryOrchestrator:
    """Dependency returning the widget session of the application."""
    return request.app.state.orchestrator


@router.get("/state", response_model=WidgetView)
async def get_state(orchestrator: QueryOrchestrator = Depends(get_orchestrator)) -> WidgetView:
    """Current widget state.

    Returns:
        Query, loading flags, state and rendered days
    """
    return orchestrator.view()


@router.put("/query", response_model=WidgetView)
async def update_query(
    body: QueryRequest,
    orchestrator: QueryOrchestrator = Depends(get_orchestrator)
) -> WidgetView:
    """Update the search text.

    The lookup runs in the background; poll ``/weather/state`` for its outcome.
    """
    await orchestrator.on_query_change(body.query)
    return orchestrator.view()


@router.post("/current-location", response_model=WidgetView)
async def use_current_location(
    report: PositionReport,
    orchestrator: QueryOrchestrator = Depends(get_orchestrator)
) -> WidgetView:
    """Show the weather at the position reported by the browser."""
    resolver = orchestrator.position_resolver
    await orchestrator.use_current_location(lambda: resolver.request_browser_location(report))
    return orchestrator.view()


@router.get("/forecast", response_model=ForecastView)
@cache(expire=CACHE_EXPIRE_SECONDS)
async def get_forecast(
    query: str = Query(..., description="Place name to look up"),
    orchestrator: QueryOrchestrator = Depends(get_orchestrator)
) -> ForecastView:
    """One-shot forecast lookup, independent of the widget session.

    Args:
        query: Place name

    Returns:
        ForecastView with the location and rendered days

    Raises:
        HTTPException: If the query is too short, unknown or a provider fails
    """
    query = query.strip()
    if len(query) < MIN_QUERY_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Query must be at least {MIN_QUERY_LENGTH} characters long."
        )

    try:
        location, forecast = await search_weather(
            orchestrator.geo_resolver, orchestrator.forecast_fetcher, query
        )

    except NotFoundError as e:
        logger.info(f"No forecast for '{query}': {e}")
        raise HTTPException(status_code=404, detail=e.message)

    except TransportError as e:
        logger.error(f"Provider error getting forecast for '{query}': {e}")
        raise HTTPException(status_code=502, detail=e.message)

    logger.info(f"Successfully retrieved forecast with {len(forecast)} days")
    return ForecastView(
        location=location,
        title=location.display_name,
        days=forecast.day_entries()
    )


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Health status response
    """
    return {"status": "healthy", "service": "classy-weather"}

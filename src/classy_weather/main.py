"""Main FastAPI application for the weather widget service."""

import logging
import traceback
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import redis.asyncio as redis
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi_cache import FastAPICache
from fastapi_cache.backends.redis import RedisBackend

from classy_weather.api.endpoints import router as weather_router
from classy_weather.config import HOST, PORT, DEBUG, REDIS_URL, CACHE_PREFIX
from classy_weather.logging_config import configure_logging
from classy_weather.storage import RedisQueryStore
from classy_weather.weather.orchestrator import QueryOrchestrator

# Configure logging
configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    orchestrator = None
    try:
        logger.info(f"Connecting to Redis at {REDIS_URL}")
        redis_client = redis.from_url(REDIS_URL)
        FastAPICache.init(RedisBackend(redis_client), prefix=CACHE_PREFIX)
        logger.info("Cache initialized with Redis backend")

        orchestrator = QueryOrchestrator(store=RedisQueryStore(redis_client))
        app.state.orchestrator = orchestrator
        await orchestrator.restore()

        logger.info("Starting Classy Weather service")
        yield
    except Exception as e:
        logger.error(f"Startup error: {e}")
        logger.error(traceback.format_exc())
        raise
    finally:
        logger.info("Shutting down Classy Weather service")
        if orchestrator is not None:
            await orchestrator.aclose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Classy Weather",
        description="Weather lookup widget backed by the Open-Meteo geocoding and forecast APIs",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(weather_router)

    @app.get("/api", tags=["root"])
    async def api_info() -> dict:
        """API information endpoint.

        Returns:
            Basic service information
        """
        return {
            "message": "Classy Weather",
            "docs": "/docs",
            "redoc": "/redoc",
            "state": "/weather/state",
            "forecast": "/weather/forecast",
            "health": "/weather/health"
        }

    return app


# Create app instance for uvicorn
app = create_app()


def main() -> None:
    """Main entry point for the application."""
    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(
        app,
        host=HOST,
        port=PORT,
        reload=DEBUG,
        log_level="info" if not DEBUG else "debug"
    )


if __name__ == "__main__":
    main()

"""Configuration settings for the weather widget service."""

import os
from typing import Final
from dotenv import load_dotenv

load_dotenv()

# API Configuration
GEOCODING_API_URL: Final[str] = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_API_URL: Final[str] = "https://api.open-meteo.com/v1/forecast"
TIMEZONE_API_URL: Final[str] = "https://timeapi.io/api/Time/current/coordinate"
REVERSE_GEOCODING_API_URL: Final[str] = "https://geocode.maps.co/reverse"
USER_AGENT: Final[str] = "ClassyWeather/0.1 (user@example.com)"

# Daily variables requested from the forecast endpoint
FORECAST_DAILY_VARIABLES: Final[str] = "weathercode,temperature_2m_max,temperature_2m_min"

HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))

# Widget behaviour
MIN_QUERY_LENGTH: Final[int] = 2
QUERY_STORAGE_KEY: str = os.getenv("QUERY_STORAGE_KEY", "location")

# Server configuration
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

# Redis cache configuration
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
CACHE_EXPIRE_SECONDS: int = int(os.getenv("CACHE_EXPIRE_SECONDS", "60"))  # 60 seconds default
CACHE_PREFIX: str = os.getenv("CACHE_PREFIX", "classy-weather")

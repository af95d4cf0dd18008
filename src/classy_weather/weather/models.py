"""Data models for the weather widget."""

import datetime
import math
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from classy_weather.weather.formatting import country_flag, format_day, weather_icon


class Coordinates(BaseModel):
    """Device position."""
    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")


class ResolvedLocation(BaseModel):
    """Location a forecast is fetched for."""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")
    timezone: str = Field(..., description="Timezone identifier")
    name: str = Field(..., description="Place name")
    country_code: str = Field(..., min_length=2, max_length=2, description="ISO 3166-1 alpha-2 country code")

    @property
    def display_name(self) -> str:
        return f"{self.name} {country_flag(self.country_code)}"


class ForecastSeries(BaseModel):
    """Daily forecast as parallel sequences; index 0 is today."""
    model_config = ConfigDict(frozen=True)

    dates: List[str] = Field(..., min_length=1, description="ISO dates")
    min_temps: List[float] = Field(..., description="Daily minimum temperatures in Celsius")
    max_temps: List[float] = Field(..., description="Daily maximum temperatures in Celsius")
    condition_codes: List[int] = Field(..., description="WMO weather codes")

    @field_validator("dates")
    @classmethod
    def check_iso_dates(cls, dates: List[str]) -> List[str]:
        for value in dates:
            try:
                datetime.date.fromisoformat(value)
            except ValueError:
                raise ValueError(f"invalid ISO date: {value!r}")
        return dates

    @model_validator(mode="after")
    def check_equal_lengths(self) -> "ForecastSeries":
        lengths = {len(self.dates), len(self.min_temps), len(self.max_temps), len(self.condition_codes)}
        if len(lengths) != 1:
            raise ValueError("daily series have different lengths")
        return self

    def __len__(self) -> int:
        return len(self.dates)

    @classmethod
    def from_daily(cls, daily: "OpenMeteoDaily") -> "ForecastSeries":
        return cls(
            dates=daily.time,
            min_temps=daily.temperature_2m_min,
            max_temps=daily.temperature_2m_max,
            condition_codes=daily.weathercode,
        )

    def day_entries(self) -> List["DayEntry"]:
        """Build the rendered day list.

        Returns:
            One DayEntry per day, the first labelled "Today"
        """
        return [
            DayEntry(
                date=date,
                label="Today" if i == 0 else format_day(date),
                icon=weather_icon(code),
                min_temp=math.floor(low),
                max_temp=math.ceil(high),
            )
            for i, (date, low, high, code) in enumerate(
                zip(self.dates, self.min_temps, self.max_temps, self.condition_codes)
            )
        ]


class DayEntry(BaseModel):
    """One rendered day of the forecast."""
    date: str = Field(..., description="Date in YYYY-MM-DD format")
    label: str = Field(..., description="'Today' or short weekday name")
    icon: str = Field(..., description="Weather icon")
    min_temp: int = Field(..., description="Minimum temperature in Celsius, floored")
    max_temp: int = Field(..., description="Maximum temperature in Celsius, ceiled")


# View-state

class IdleState(BaseModel):
    model_config = ConfigDict(frozen=True)
    status: Literal["idle"] = "idle"


class LoadingState(BaseModel):
    model_config = ConfigDict(frozen=True)
    status: Literal["loading"] = "loading"


class ErrorState(BaseModel):
    model_config = ConfigDict(frozen=True)
    status: Literal["error"] = "error"
    message: str = Field(..., description="User-visible error message")


class LoadedState(BaseModel):
    model_config = ConfigDict(frozen=True)
    status: Literal["loaded"] = "loaded"
    location: ResolvedLocation
    forecast: ForecastSeries


LocationState = Annotated[
    Union[IdleState, LoadingState, ErrorState, LoadedState],
    Field(discriminator="status")
]


# Raw provider responses

class GeocodingResult(BaseModel):
    """Single match from the Open-Meteo geocoding API."""
    latitude: float
    longitude: float
    timezone: str
    name: str
    country_code: str


class GeocodingResponse(BaseModel):
    """Raw response from the Open-Meteo geocoding API."""
    results: Optional[List[GeocodingResult]] = Field(None, description="Matches in provider order")


class OpenMeteoDaily(BaseModel):
    """Daily block of the Open-Meteo forecast response."""
    time: List[str]
    weathercode: List[int]
    temperature_2m_max: List[float]
    temperature_2m_min: List[float]


class OpenMeteoForecastResponse(BaseModel):
    """Raw response from the Open-Meteo forecast API."""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    daily: OpenMeteoDaily


class TimezoneResponse(BaseModel):
    """Raw response from the timezone-by-coordinate API."""
    model_config = ConfigDict(populate_by_name=True)

    timezone_id: str = Field(..., alias="timezoneId")
    country_code: str = Field(..., alias="countryCode")


class ReverseAddress(BaseModel):
    town: Optional[str] = None
    county: Optional[str] = None


class ReverseGeocodeResponse(BaseModel):
    """Raw response from the reverse geocoding API."""
    address: ReverseAddress = Field(default_factory=ReverseAddress)


# API payloads

class QueryRequest(BaseModel):
    """Search box update."""
    query: str = Field(..., description="Current search text")


class PositionReport(BaseModel):
    """Outcome of the browser geolocation request."""
    latitude: Optional[float] = Field(None, ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: Optional[float] = Field(None, ge=-180, le=180, description="Longitude in decimal degrees")
    error: Optional[str] = Field(None, description="Geolocation error reported by the browser")


class WidgetView(BaseModel):
    """Everything the widget needs to render."""
    query: str = Field(..., description="Current search text")
    is_locating: bool = Field(..., description="Whether the device position is being requested")
    state: LocationState
    title: Optional[str] = Field(None, description="Display name of the loaded location")
    days: List[DayEntry] = Field(default_factory=list, description="Rendered forecast days")


class ForecastView(BaseModel):
    """One-shot forecast lookup response."""
    location: ResolvedLocation
    title: str
    days: List[DayEntry]

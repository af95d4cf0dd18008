import pytest
from pydantic import TypeAdapter, ValidationError

from classy_weather.weather.models import (
    ErrorState, ForecastSeries, IdleState, LoadedState, LocationState,
    OpenMeteoDaily, ResolvedLocation
)


class TestForecastSeries:
    """Test cases for the daily forecast series."""

    def test_from_daily(self, forecast_payload):
        series = ForecastSeries.from_daily(OpenMeteoDaily(**forecast_payload["daily"]))

        assert series.dates == ["2024-01-01", "2024-01-02"]
        assert series.condition_codes == [0, 3]
        assert series.max_temps == [10.4, 8.1]
        assert series.min_temps == [2.2, -1.9]
        assert len(series) == 2

    def test_unequal_lengths_rejected(self):
        with pytest.raises(ValidationError, match="different lengths"):
            ForecastSeries(
                dates=["2024-01-01", "2024-01-02"],
                min_temps=[1.0],
                max_temps=[2.0, 3.0],
                condition_codes=[0, 1],
            )

    def test_empty_series_rejected(self):
        with pytest.raises(ValidationError):
            ForecastSeries(dates=[], min_temps=[], max_temps=[], condition_codes=[])

    def test_day_entries(self, forecast):
        days = forecast.day_entries()

        assert [d.label for d in days] == ["Today", "Tue"]
        assert days[0].date == "2024-01-01"
        assert days[0].icon == "☀️"
        assert (days[0].min_temp, days[0].max_temp) == (2, 11)
        assert days[1].icon == "☁️"
        assert (days[1].min_temp, days[1].max_temp) == (-2, 9)


class TestLocationState:
    """Test cases for the view-state variants."""

    def test_display_name_has_flag(self, paris):
        assert paris.display_name == "Paris 🇫🇷"

    def test_location_is_immutable(self, paris):
        with pytest.raises(ValidationError):
            paris.name = "Lyon"

    def test_country_code_must_have_two_letters(self):
        with pytest.raises(ValidationError):
            ResolvedLocation(latitude=0, longitude=0, timezone="UTC", name="X", country_code="FRA")

    def test_discriminated_by_status(self, paris, forecast):
        adapter = TypeAdapter(LocationState)

        assert isinstance(adapter.validate_python({"status": "idle"}), IdleState)
        error = adapter.validate_python({"status": "error", "message": "Location not found"})
        assert isinstance(error, ErrorState)
        assert error.message == "Location not found"

        loaded = LoadedState(location=paris, forecast=forecast)
        assert isinstance(adapter.validate_python(loaded.model_dump()), LoadedState)

"""Display helpers for forecast data."""

from datetime import date

WEATHER_ICONS = {
    (0,): "☀️",
    (1,): "🌤",
    (2,): "⛅️",
    (3,): "☁️",
    (45, 48): "🌫",
    (51, 56, 61, 66, 80): "🌦",
    (53, 55, 63, 65, 57, 67, 81, 82): "🌧",
    (71, 73, 75, 77, 85, 86): "🌨",
    (95,): "🌩",
    (96, 99): "⛈",
}

UNKNOWN_ICON = "NOT FOUND"

# English labels regardless of the process locale
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# Offset from an ASCII capital letter to its regional indicator symbol
REGIONAL_INDICATOR_OFFSET = 127397


def weather_icon(wmo_code: int) -> str:
    """Map a WMO weather code to an icon."""
    for codes, icon in WEATHER_ICONS.items():
        if wmo_code in codes:
            return icon
    return UNKNOWN_ICON


def country_flag(country_code: str) -> str:
    """Build the flag emoji for a two-letter country code."""
    return "".join(chr(REGIONAL_INDICATOR_OFFSET + ord(char)) for char in country_code.upper())


def format_day(date_str: str) -> str:
    """Short weekday name for an ISO date, e.g. 'Mon'."""
    return WEEKDAYS[date.fromisoformat(date_str).weekday()]

"""Errors raised while looking up locations and forecasts."""


class WeatherLookupError(Exception):
    """Base class for failures that are shown to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(WeatherLookupError):
    """Raised when geocoding yields no match."""
    pass


class TransportError(WeatherLookupError):
    """Raised when a provider answers with a failure status or cannot be reached."""
    pass


class PermissionDeniedError(WeatherLookupError):
    """Raised when the device position cannot be obtained."""
    pass


class RequestCancelled(Exception):
    """Raised when a request chain is superseded before it completes.

    Not a WeatherLookupError: supersession is expected and is never shown.
    """
    pass

"""Error taxonomy shared by the HTTP client, query builders and tool pipeline."""


class WeatherError(Exception):
    """Base class for every failure a tool invocation can report."""


class InvalidQueryError(WeatherError):
    """Malformed, ambiguous or missing caller input."""


class UpstreamApiError(WeatherError):
    """OpenWeatherMap answered with an error body (or an unusable payload)."""

    def __init__(self, code, message: str):
        self.code = code
        self.message = message
        super().__init__(f"OpenWeatherMap API error ({code}): {message}")


class NetworkError(WeatherError):
    """Transport-level failure: DNS, connect, timeout."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Network error: {message}")


class CancelledRequestError(WeatherError):
    """The caller cancelled the tool call before all lookups were made."""

    def __init__(self, message: str = "request cancelled by the caller"):
        super().__init__(message)

"""Interface for weather data sources."""

from __future__ import annotations

from typing import Iterable, List, Protocol

from openweather_mcp.domain import (
    AirQualityResponse,
    CurrentWeatherResponse,
    ForecastResponse,
    GeocodeResult,
    HistoricalWeatherResponse,
    LocationQuery,
    OneCallResponse,
)


class WeatherDataSource(Protocol):
    """Anything that can answer the OpenWeatherMap-shaped queries the tools need."""

    def get_current_weather(self, query: LocationQuery, *, units: str = "metric", lang: str = "en") -> CurrentWeatherResponse:
        """Return the current conditions for a location."""
        ...

    def get_forecast(
        self,
        query: LocationQuery,
        *,
        cnt: int | None = None,
        units: str = "metric",
        lang: str = "en",
    ) -> ForecastResponse:
        """Return the 5 day / 3 hour forecast for a location."""
        ...

    def get_air_quality(self, lat: float, lon: float) -> AirQualityResponse:
        """Return the current air-quality sample."""
        ...

    def get_historical_air_quality(self, lat: float, lon: float, start: int, end: int) -> AirQualityResponse:
        """Return air-quality samples between two unix timestamps."""
        ...

    def get_air_quality_forecast(self, lat: float, lon: float) -> AirQualityResponse:
        """Return hourly air-quality forecast samples."""
        ...

    def get_one_call(
        self,
        lat: float,
        lon: float,
        *,
        exclude: Iterable[str] | None = None,
        units: str = "metric",
        lang: str = "en",
    ) -> OneCallResponse:
        """Return the One Call bundle (current conditions and alerts)."""
        ...

    def get_historical_weather(
        self,
        lat: float,
        lon: float,
        dt: int,
        *,
        units: str = "metric",
        lang: str = "en",
    ) -> HistoricalWeatherResponse:
        """Return hourly observations for the day containing ``dt``."""
        ...

    def geocode(self, q: str, limit: int | None = None) -> List[GeocodeResult]:
        """Resolve a place name to coordinates."""
        ...

    def reverse_geocode(self, lat: float, lon: float, limit: int | None = None) -> List[GeocodeResult]:
        """Resolve coordinates to place names."""
        ...

    def tile_url(self, layer: str, zoom: int, x: int, y: int) -> str:
        """Return the URL of a weather map tile."""
        ...

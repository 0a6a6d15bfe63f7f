"""Data sources that answer weather queries."""

from .base import WeatherDataSource
from .openweather_client import OpenWeatherClient

__all__ = [
    "WeatherDataSource",
    "OpenWeatherClient",
]

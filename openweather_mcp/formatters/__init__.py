"""Pure functions that turn typed provider responses into text reports."""

from .air_quality import format_air_quality, format_air_quality_forecast
from .alerts import format_alerts
from .current import format_current_weather
from .forecast import format_forecast
from .geocoding import format_geocoding, format_reverse_geocoding
from .historical import format_historical_comparison, format_historical_weather
from .maps import format_multi_layer_map, format_region_map, format_tile_map

__all__ = [
    "format_air_quality",
    "format_air_quality_forecast",
    "format_alerts",
    "format_current_weather",
    "format_forecast",
    "format_geocoding",
    "format_reverse_geocoding",
    "format_historical_comparison",
    "format_historical_weather",
    "format_multi_layer_map",
    "format_region_map",
    "format_tile_map",
]

"""MCP server exposing OpenWeatherMap as a set of weather tools.

Each tool runs its WeatherToolService call on a worker thread and wraps the resulting ToolReport
in a CallToolResult: the report text, one resource link per map tile, and
``isError`` for failed invocations. stdout belongs to the MCP stdio transport,
so all logging goes to stderr.
"""
from __future__ import annotations

import asyncio
import sys
import threading
from typing import Annotated, Callable, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, ResourceLink, TextContent
from pydantic import Field

from openweather_mcp.analysis import load_severity_keywords
from openweather_mcp.app_types import ToolReport
from openweather_mcp.check_api_key import check_api_key
from openweather_mcp.config import Settings, settings
from openweather_mcp.data_sources import OpenWeatherClient, WeatherDataSource
from openweather_mcp.domain import Language, LocationQuery, MapLayer, Units
from openweather_mcp.service import DEFAULT_REGION_ZOOM, WeatherToolService
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")

SERVER_NAME = "openweather-mcp"

mcp = FastMCP(SERVER_NAME)

_service: WeatherToolService | None = None


def build_service(cfg: Settings, client: WeatherDataSource | None = None) -> WeatherToolService:
    """Wire the data source, defaults and alert keywords from configuration."""
    return WeatherToolService(
        client or OpenWeatherClient.from_settings(cfg),
        default_units=cfg.default_units,
        default_lang=cfg.default_lang,
        severity_keywords=load_severity_keywords(cfg.alert_keywords_path),
    )


def set_service(service: WeatherToolService | None) -> None:
    global _service
    _service = service


def get_service() -> WeatherToolService:
    global _service
    if _service is None:
        _service = build_service(settings)
    return _service


def to_call_tool_result(report: ToolReport) -> CallToolResult:
    content: list = [TextContent(type="text", text=report.text)]
    for image in report.images:
        content.append(
            ResourceLink(
                type="resource_link",
                uri=image.url,
                name=f"{image.layer}/{image.zoom}/{image.x}/{image.y}",
                description=f"{image.layer} weather map tile",
                mimeType="image/png",
            )
        )
    return CallToolResult(content=content, isError=report.is_error)


async def _call(method: Callable[..., ToolReport], *args, **kwargs) -> CallToolResult:
    """Run a blocking service call on a worker thread; the event loop keeps serving."""
    report = await asyncio.to_thread(method, *args, **kwargs)
    return to_call_tool_result(report)


# ---------------------------------------------------------------------------
# Parameter types
# ---------------------------------------------------------------------------

Latitude = Annotated[float, Field(description="Latitude in degrees, -90 to 90")]
Longitude = Annotated[float, Field(description="Longitude in degrees, -180 to 180")]
UnitsParam = Annotated[
    Optional[Units],
    Field(description="Unit system: standard (K), metric (°C, m/s) or imperial (°F, mph)"),
]
LangParam = Annotated[Optional[Language], Field(description="Language for provider descriptions")]
City = Annotated[Optional[str], Field(description="City name, e.g. 'London' or 'Paris,FR'")]
OptionalLat = Annotated[Optional[float], Field(description="Latitude (use together with lon)")]
OptionalLon = Annotated[Optional[float], Field(description="Longitude (use together with lat)")]
Zip = Annotated[Optional[str], Field(description="Postal code, e.g. '10001' or '10001,US'")]
Country = Annotated[Optional[str], Field(description="ISO 3166 country code appended to city or zip")]
Zoom = Annotated[int, Field(description="Zoom level, 0 to 10")]
Limit = Annotated[Optional[int], Field(description="Maximum number of results, 1 to 5 (default 5)")]


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool()
async def get_current_weather(
    city: City = None,
    lat: OptionalLat = None,
    lon: OptionalLon = None,
    zip: Zip = None,
    country: Country = None,
    units: UnitsParam = None,
    lang: LangParam = None,
) -> CallToolResult:
    """Current weather for a city, coordinates or postal code: temperature, humidity,
    wind, pressure, visibility, cloud cover, precipitation, sunrise and sunset."""
    query = LocationQuery(city=city, lat=lat, lon=lon, zip=zip, country=country)
    return await _call(get_service().current_weather, query, units=units, lang=lang)


@mcp.tool()
async def get_weather_forecast(
    city: City = None,
    lat: OptionalLat = None,
    lon: OptionalLon = None,
    zip: Zip = None,
    country: Country = None,
    cnt: Annotated[Optional[int], Field(description="Number of 3-hour slots, 1 to 40")] = None,
    units: UnitsParam = None,
    lang: LangParam = None,
) -> CallToolResult:
    """5 day forecast in 3-hour steps, grouped by day, with a summary and advice."""
    query = LocationQuery(city=city, lat=lat, lon=lon, zip=zip, country=country)
    return await _call(get_service().forecast, query, cnt=cnt, units=units, lang=lang)


@mcp.tool()
async def get_air_quality(
    lat: Latitude,
    lon: Longitude,
    start: Annotated[Optional[int], Field(description="Range start, unix seconds (historical data)")] = None,
    end: Annotated[Optional[int], Field(description="Range end, unix seconds (historical data)")] = None,
) -> CallToolResult:
    """Air quality index and pollutant concentrations. Give start and end for
    historical statistics and trend; omit both for the current reading."""
    return await _call(get_service().air_quality, lat, lon, start=start, end=end)


@mcp.tool()
async def get_air_quality_forecast(lat: Latitude, lon: Longitude) -> CallToolResult:
    """Hourly air quality forecast; the first five samples are reported."""
    return await _call(get_service().air_quality_forecast, lat, lon)


@mcp.tool()
async def get_weather_map(
    layer: Annotated[MapLayer, Field(description="Map layer")],
    z: Zoom,
    x: Annotated[int, Field(description="Tile column, 0 to 2^z - 1")],
    y: Annotated[int, Field(description="Tile row, 0 to 2^z - 1")],
) -> CallToolResult:
    """Weather map tile by tile address, with the tile's geographic bounds."""
    return await _call(get_service().weather_map, layer, z, x, y)


@mcp.tool()
async def get_region_weather_map(
    layer: Annotated[MapLayer, Field(description="Map layer")],
    lat: Latitude,
    lon: Longitude,
    zoom: Zoom = DEFAULT_REGION_ZOOM,
) -> CallToolResult:
    """Weather map tile containing the given point."""
    return await _call(get_service().region_weather_map, layer, lat, lon, zoom)


@mcp.tool()
async def get_multi_layer_weather_map(
    layers: Annotated[List[MapLayer], Field(description="Map layers to include, in display order")],
    lat: Latitude,
    lon: Longitude,
    zoom: Zoom = DEFAULT_REGION_ZOOM,
) -> CallToolResult:
    """The tile containing the given point, once per requested layer."""
    return await _call(get_service().multi_layer_weather_map, layers, lat, lon, zoom)


@mcp.tool()
async def get_weather_alerts(lat: Latitude, lon: Longitude, lang: LangParam = None) -> CallToolResult:
    """Government weather alerts for a point, ranked by estimated severity, with safety advice."""
    return await _call(get_service().weather_alerts, lat, lon, lang=lang)


@mcp.tool()
async def get_historical_weather(
    lat: Latitude,
    lon: Longitude,
    dt: Annotated[int, Field(description="Unix timestamp (seconds) within the day to look up")],
    units: UnitsParam = None,
    lang: LangParam = None,
) -> CallToolResult:
    """Hourly historical weather for one day with daily statistics and analysis."""
    return await _call(get_service().historical_weather, lat, lon, dt, units=units, lang=lang)


@mcp.tool()
async def compare_historical_weather(
    lat: Latitude,
    lon: Longitude,
    timestamps: Annotated[List[int], Field(description="Unix timestamps (seconds), one per day to compare")],
    units: UnitsParam = None,
    lang: LangParam = None,
) -> CallToolResult:
    """Side-by-side summaries of several historical days, in the order given."""
    cancelled = threading.Event()
    try:
        return await _call(
            get_service().historical_comparison,
            lat,
            lon,
            timestamps,
            units=units,
            lang=lang,
            cancelled=cancelled.is_set,
        )
    except asyncio.CancelledError:
        cancelled.set()
        raise


@mcp.tool()
async def geocoding(
    q: Annotated[str, Field(description="Place name, e.g. 'London' or 'London,GB'")],
    limit: Limit = None,
) -> CallToolResult:
    """Find coordinates for a place name."""
    return await _call(get_service().geocode, q, limit)


@mcp.tool()
async def reverse_geocoding(lat: Latitude, lon: Longitude, limit: Limit = None) -> CallToolResult:
    """Find place names near a pair of coordinates."""
    return await _call(get_service().reverse_geocode, lat, lon, limit)


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------

GUIDE = """# OpenWeatherMap MCP server guide

## Tools

1. **get_current_weather**: current conditions for a city, coordinates or postal code.
2. **get_weather_forecast**: 5 day forecast in 3-hour steps.
3. **get_air_quality**: air quality index and pollutant concentrations, current or historical.
4. **get_air_quality_forecast**: hourly air quality forecast.
5. **get_weather_map**: weather map tile by tile address.
6. **get_region_weather_map**: weather map tile around a point.
7. **get_multi_layer_weather_map**: one tile across several map layers.
8. **get_weather_alerts**: government weather alerts with safety advice.
9. **get_historical_weather**: hourly weather for a past day.
10. **compare_historical_weather**: several past days side by side.
11. **geocoding**: place name to coordinates.
12. **reverse_geocoding**: coordinates to place names.

Map layers: clouds_new, precipitation_new, pressure_new, wind_new, temp_new.
Units: standard, metric (default), imperial.

## Configuration

- `OPENWEATHER_API_KEY`: OpenWeatherMap API key (required).
- `OPENWEATHER_DEFAULT_UNITS`, `OPENWEATHER_DEFAULT_LANG`: defaults for queries.
- `OPENWEATHER_ALERT_KEYWORDS_PATH`: optional JSON file with extra alert severity keywords.
- `OPENWEATHER_TRANSPORT`: stdio (default), sse or streamable-http.

Alerts and historical weather use the One Call 3.0 API, which needs its own subscription.

## Getting an API key

Register at https://openweathermap.org/api to get a free key.
"""


@mcp.resource(
    "weather://guide",
    name="weather_api_guide",
    title="OpenWeatherMap MCP guide",
    description="Usage guide for the weather tools",
    mime_type="text/markdown",
)
def weather_guide() -> str:
    return GUIDE


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def maybe_check_api_key(client: WeatherDataSource, cfg: Settings = settings) -> None:
    """
    Run the API key preflight unless OPENWEATHER_SKIP_KEY_CHECK=true.
    """
    if cfg.skip_key_check:
        logger.info("Skipping API key preflight (OPENWEATHER_SKIP_KEY_CHECK=true)")
        return
    try:
        check_api_key(client)
    except SystemExit:
        logger.error("API key preflight failed; set OPENWEATHER_SKIP_KEY_CHECK=true to bypass during dev/tests.")
        raise


def main() -> None:
    setup_logging(level=settings.log_level, job_name=SERVER_NAME)

    if not settings.api_key:
        logger.error("\nERROR: OPENWEATHER_API_KEY is not set.\n"
                     "   Get a key at https://openweathermap.org/api and export it before starting the server.")
        sys.exit(1)

    client = OpenWeatherClient.from_settings(settings)
    maybe_check_api_key(client)
    set_service(build_service(settings, client))

    logger.info(f"Starting {SERVER_NAME} over {settings.transport}")
    mcp.run(transport=settings.transport)


if __name__ == "__main__":
    main()

"""Run weather tool invocations: build the query, fetch, format, report errors."""
from __future__ import annotations

import time
from typing import Callable, Iterable, List, Sequence, Tuple

from openweather_mcp import formatters
from openweather_mcp.analysis import DEFAULT_SEVERITY_KEYWORDS, SeverityKeywords
from openweather_mcp.app_types import MapImage, ToolReport
from openweather_mcp.data_sources import WeatherDataSource
from openweather_mcp.domain import (
    HistoricalWeatherResponse,
    Language,
    LocationQuery,
    MapLayer,
    TileCoordinate,
    Units,
)
from openweather_mcp.errors import CancelledRequestError, InvalidQueryError, WeatherError
from openweather_mcp.queries import validate_coordinates, validate_time_range
from openweather_mcp.tiles import lat_lon_to_tile, tile_to_bounds, validate_tile, validate_zoom
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="service")

DEFAULT_REGION_ZOOM = 5
ALERT_EXCLUDES = ("minutely", "hourly", "daily")


def _enum_value(enum_cls, value, default: str, label: str) -> str:
    """Accept an enum member or its string value; None means `default`."""
    if value is None:
        return default
    try:
        return enum_cls(getattr(value, "value", value)).value
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidQueryError(f"Unsupported {label} '{value}'; expected one of: {allowed}") from exc


def parse_layer(layer) -> MapLayer:
    if layer is None:
        raise InvalidQueryError("A map layer is required")
    return MapLayer(_enum_value(MapLayer, layer, "", "map layer"))


class WeatherToolService:
    """One method per tool. Each returns a ToolReport and never raises."""

    def __init__(
        self,
        data_source: WeatherDataSource,
        *,
        default_units: str = "metric",
        default_lang: str = "en",
        severity_keywords: SeverityKeywords = DEFAULT_SEVERITY_KEYWORDS,
        clock: Callable[[], float] = time.time,
    ):
        self.data_source = data_source
        self.default_units = _enum_value(Units, default_units, Units.METRIC.value, "units")
        self.default_lang = _enum_value(Language, default_lang, Language.EN.value, "language")
        self.severity_keywords = severity_keywords
        self.clock = clock

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _run(self, action: str, build: Callable[[], ToolReport]) -> ToolReport:
        """Execute one invocation; every failure becomes an error report."""
        logger.info(f"Running tool: {action}")
        try:
            report = build()
        except WeatherError as exc:
            logger.warning(f"Tool failed: {action}: {exc}")
            return ToolReport.error(action, str(exc))
        except Exception as exc:
            logger.exception(f"Unexpected tool failure: {action}")
            return ToolReport.error(action, f"unexpected error: {exc}")
        logger.debug(f"Tool finished: {action} ({len(report.text)} chars)")
        return report

    def _units(self, units) -> str:
        return _enum_value(Units, units, self.default_units, "units")

    def _lang(self, lang) -> str:
        return _enum_value(Language, lang, self.default_lang, "language")

    # ------------------------------------------------------------------
    # Current weather and forecast
    # ------------------------------------------------------------------

    def current_weather(self, query: LocationQuery, *, units=None, lang=None) -> ToolReport:
        def build() -> ToolReport:
            u = self._units(units)
            resp = self.data_source.get_current_weather(query, units=u, lang=self._lang(lang))
            return ToolReport(formatters.format_current_weather(resp, u))

        return self._run("get current weather", build)

    def forecast(self, query: LocationQuery, *, cnt: int | None = None, units=None, lang=None) -> ToolReport:
        def build() -> ToolReport:
            u = self._units(units)
            resp = self.data_source.get_forecast(query, cnt=cnt, units=u, lang=self._lang(lang))
            return ToolReport(formatters.format_forecast(resp, u))

        return self._run("get weather forecast", build)

    # ------------------------------------------------------------------
    # Air quality
    # ------------------------------------------------------------------

    def air_quality(self, lat: float, lon: float, *, start: int | None = None, end: int | None = None) -> ToolReport:
        """Current sample, or history when either end of a time range is given."""
        def build() -> ToolReport:
            validate_coordinates(lat, lon)
            if start is None and end is None:
                resp = self.data_source.get_air_quality(lat, lon)
                return ToolReport(formatters.format_air_quality(resp))
            validate_time_range(start, end)
            resp = self.data_source.get_historical_air_quality(lat, lon, start, end)
            return ToolReport(formatters.format_air_quality(resp, start, end))

        return self._run("get air quality", build)

    def air_quality_forecast(self, lat: float, lon: float) -> ToolReport:
        def build() -> ToolReport:
            validate_coordinates(lat, lon)
            resp = self.data_source.get_air_quality_forecast(lat, lon)
            return ToolReport(formatters.format_air_quality_forecast(resp))

        return self._run("get air quality forecast", build)

    # ------------------------------------------------------------------
    # Maps
    # ------------------------------------------------------------------

    def _image(self, layer: MapLayer, zoom: int, x: int, y: int) -> MapImage:
        url = self.data_source.tile_url(layer.value, zoom, x, y)
        return MapImage(layer=layer.value, url=url, zoom=zoom, x=x, y=y)

    def weather_map(self, layer, zoom: int, x: int, y: int) -> ToolReport:
        def build() -> ToolReport:
            map_layer = parse_layer(layer)
            validate_tile(x, y, zoom)
            image = self._image(map_layer, zoom, x, y)
            tile = TileCoordinate(x=x, y=y, zoom=zoom)
            text = formatters.format_tile_map(map_layer, tile, tile_to_bounds(x, y, zoom), image.url)
            return ToolReport(text, images=[image])

        return self._run("get weather map", build)

    def region_weather_map(self, layer, lat: float, lon: float, zoom: int = DEFAULT_REGION_ZOOM) -> ToolReport:
        def build() -> ToolReport:
            map_layer = parse_layer(layer)
            validate_coordinates(lat, lon)
            validate_zoom(zoom)
            tile = lat_lon_to_tile(lat, lon, zoom)
            image = self._image(map_layer, zoom, tile.x, tile.y)
            text = formatters.format_region_map(map_layer, lat, lon, tile, image.url)
            return ToolReport(text, images=[image])

        return self._run("get region weather map", build)

    def multi_layer_weather_map(
        self,
        layers: Sequence,
        lat: float,
        lon: float,
        zoom: int = DEFAULT_REGION_ZOOM,
    ) -> ToolReport:
        """The same tile for several layers, in the order requested."""
        def build() -> ToolReport:
            if not layers:
                raise InvalidQueryError("At least one map layer is required")
            map_layers = [parse_layer(layer) for layer in layers]
            validate_coordinates(lat, lon)
            validate_zoom(zoom)
            tile = lat_lon_to_tile(lat, lon, zoom)
            images = [self._image(layer, zoom, tile.x, tile.y) for layer in map_layers]
            text = formatters.format_multi_layer_map(
                lat, lon, tile, [(layer, image.url) for layer, image in zip(map_layers, images)]
            )
            return ToolReport(text, images=images)

        return self._run("get multi-layer weather map", build)

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    def weather_alerts(self, lat: float, lon: float, *, lang=None) -> ToolReport:
        def build() -> ToolReport:
            validate_coordinates(lat, lon)
            language = self._lang(lang)
            resp = self.data_source.get_one_call(
                lat, lon, exclude=ALERT_EXCLUDES, units=self.default_units, lang=language
            )
            text = formatters.format_alerts(resp, lat, lon, now=self.clock(), keywords=self.severity_keywords)
            return ToolReport(text)

        return self._run("get weather alerts", build)

    # ------------------------------------------------------------------
    # Historical weather
    # ------------------------------------------------------------------

    def historical_weather(self, lat: float, lon: float, dt: int, *, units=None, lang=None) -> ToolReport:
        def build() -> ToolReport:
            u = self._units(units)
            validate_coordinates(lat, lon)
            resp = self.data_source.get_historical_weather(lat, lon, dt, units=u, lang=self._lang(lang))
            return ToolReport(formatters.format_historical_weather(resp, dt, u))

        return self._run("get historical weather", build)

    def historical_comparison(
        self,
        lat: float,
        lon: float,
        timestamps: Iterable[int],
        *,
        units=None,
        lang=None,
        cancelled: Callable[[], bool] | None = None,
    ) -> ToolReport:
        """
        One lookup per timestamp, fetched one after another; any failure fails the whole report.

        `cancelled` is polled before each lookup. Once it returns True no further
        requests are made and the comparison is reported as failed.
        """
        def build() -> ToolReport:
            stamps = list(timestamps or [])
            if not stamps:
                raise InvalidQueryError("At least one timestamp is required for a comparison")
            u = self._units(units)
            language = self._lang(lang)
            validate_coordinates(lat, lon)
            days: List[Tuple[int, HistoricalWeatherResponse]] = []
            for dt in stamps:
                if cancelled is not None and cancelled():
                    raise CancelledRequestError()
                days.append((dt, self.data_source.get_historical_weather(lat, lon, dt, units=u, lang=language)))
            return ToolReport(formatters.format_historical_comparison(days, u))

        return self._run("compare historical weather", build)

    # ------------------------------------------------------------------
    # Geocoding
    # ------------------------------------------------------------------

    def geocode(self, q: str, limit: int | None = None) -> ToolReport:
        def build() -> ToolReport:
            results = self.data_source.geocode(q, limit)
            return ToolReport(formatters.format_geocoding(results, (q or "").strip()))

        return self._run("geocode location", build)

    def reverse_geocode(self, lat: float, lon: float, limit: int | None = None) -> ToolReport:
        def build() -> ToolReport:
            validate_coordinates(lat, lon)
            results = self.data_source.reverse_geocode(lat, lon, limit)
            return ToolReport(formatters.format_reverse_geocoding(results, lat, lon))

        return self._run("reverse geocode coordinates", build)

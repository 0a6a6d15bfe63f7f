"""Thin HTTP client for the OpenWeatherMap REST endpoints.

Every call is a single GET with ``appid`` appended and a fixed timeout. The
JSON body is validated into the typed models from ``openweather_mcp.domain``;
nothing downstream reads raw provider dicts. No retries, no caching.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Type, TypeVar

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from openweather_mcp.data_sources.base import WeatherDataSource
from openweather_mcp.domain import (
    AirQualityResponse,
    CurrentWeatherResponse,
    ForecastResponse,
    GeocodeResult,
    HistoricalWeatherResponse,
    LocationQuery,
    OneCallResponse,
)
from openweather_mcp.errors import NetworkError, UpstreamApiError
from openweather_mcp.queries import (
    build_location_params,
    clamp_limit,
    require_text,
    validate_coordinates,
    validate_forecast_count,
    validate_time_range,
)
from openweather_mcp.tiles import build_tile_url, validate_tile
from utils.logging_utils import get_tagged_logger, mask_secrets, mask_url

logger = get_tagged_logger(__name__, tag="openweather_client")

DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5"
DEFAULT_ONE_CALL_BASE_URL = "https://api.openweathermap.org/data/3.0"
DEFAULT_GEO_BASE_URL = "https://api.openweathermap.org/geo/1.0"
DEFAULT_TILE_BASE_URL = "https://tile.openweathermap.org/map"
DEFAULT_TIMEOUT_SECONDS = 10.0

ModelT = TypeVar("ModelT", bound=BaseModel)

_GEOCODE_LIST = TypeAdapter(List[GeocodeResult])


class OpenWeatherClient(WeatherDataSource):
    """Blocking OpenWeatherMap client backed by one ``requests.Session``."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        one_call_base_url: str = DEFAULT_ONE_CALL_BASE_URL,
        geo_base_url: str = DEFAULT_GEO_BASE_URL,
        tile_base_url: str = DEFAULT_TILE_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.one_call_base_url = one_call_base_url.rstrip("/")
        self.geo_base_url = geo_base_url.rstrip("/")
        self.tile_base_url = tile_base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings, session: requests.Session | None = None) -> "OpenWeatherClient":
        """Build a client from a ``config.Settings`` instance."""
        return cls(
            settings.api_key or "",
            base_url=settings.base_url,
            one_call_base_url=settings.one_call_base_url,
            geo_base_url=settings.geo_base_url,
            tile_base_url=settings.tile_base_url,
            timeout=settings.request_timeout_seconds,
            session=session,
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _get(self, base: str, path: str, params: Dict[str, Any]) -> Any:
        """GET ``base + path`` and return the decoded JSON body."""
        url = f"{base}{path}"
        query = {k: v for k, v in params.items() if v is not None}
        query["appid"] = self.api_key

        try:
            resp = self.session.get(url, params=query, timeout=self.timeout)
        except requests.RequestException as exc:
            message = mask_secrets(str(exc), self.api_key)
            logger.warning(f"OpenWeatherMap request to {url} failed: {message}")
            raise NetworkError(message) from exc

        shown_url = mask_url(getattr(resp, "url", None) or url)
        logger.debug(f"OpenWeatherMap response {resp.status_code} for {shown_url}")

        if not 200 <= resp.status_code < 300:
            raise self._error_from_response(resp)

        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamApiError(resp.status_code, f"Response body is not valid JSON: {exc}") from exc

    @staticmethod
    def _error_from_response(resp) -> UpstreamApiError:
        """Prefer the provider's ``{cod, message}`` body; fall back to HTTP status."""
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            code = body.get("cod", resp.status_code)
            return UpstreamApiError(code, str(body["message"]))
        reason = getattr(resp, "reason", None) or getattr(resp, "text", "") or "HTTP error"
        return UpstreamApiError(resp.status_code, reason)

    @staticmethod
    def _parse(model: Type[ModelT], payload: Any) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            logger.warning(f"Unexpected OpenWeatherMap payload for {model.__name__}")
            raise UpstreamApiError("invalid_payload", f"Unexpected {model.__name__} payload: {exc}") from exc

    # ------------------------------------------------------------------
    # Weather
    # ------------------------------------------------------------------

    def get_current_weather(self, query: LocationQuery, *, units: str = "metric", lang: str = "en") -> CurrentWeatherResponse:
        params = {**build_location_params(query), "units": units, "lang": lang}
        return self._parse(CurrentWeatherResponse, self._get(self.base_url, "/weather", params))

    def get_forecast(
        self,
        query: LocationQuery,
        *,
        cnt: int | None = None,
        units: str = "metric",
        lang: str = "en",
    ) -> ForecastResponse:
        params = {
            **build_location_params(query),
            "units": units,
            "lang": lang,
            "cnt": validate_forecast_count(cnt),
        }
        return self._parse(ForecastResponse, self._get(self.base_url, "/forecast", params))

    # ------------------------------------------------------------------
    # Air quality
    # ------------------------------------------------------------------

    def get_air_quality(self, lat: float, lon: float) -> AirQualityResponse:
        validate_coordinates(lat, lon)
        payload = self._get(self.base_url, "/air_pollution", {"lat": lat, "lon": lon})
        return self._parse(AirQualityResponse, payload)

    def get_historical_air_quality(self, lat: float, lon: float, start: int, end: int) -> AirQualityResponse:
        validate_coordinates(lat, lon)
        validate_time_range(start, end)
        params = {"lat": lat, "lon": lon, "start": start, "end": end}
        return self._parse(AirQualityResponse, self._get(self.base_url, "/air_pollution/history", params))

    def get_air_quality_forecast(self, lat: float, lon: float) -> AirQualityResponse:
        validate_coordinates(lat, lon)
        payload = self._get(self.base_url, "/air_pollution/forecast", {"lat": lat, "lon": lon})
        return self._parse(AirQualityResponse, payload)

    # ------------------------------------------------------------------
    # One Call 3.0
    # ------------------------------------------------------------------

    def get_one_call(
        self,
        lat: float,
        lon: float,
        *,
        exclude: Iterable[str] | None = None,
        units: str = "metric",
        lang: str = "en",
    ) -> OneCallResponse:
        validate_coordinates(lat, lon)
        params = {
            "lat": lat,
            "lon": lon,
            "units": units,
            "lang": lang,
            "exclude": ",".join(exclude) if exclude else None,
        }
        return self._parse(OneCallResponse, self._get(self.one_call_base_url, "/onecall", params))

    def get_historical_weather(
        self,
        lat: float,
        lon: float,
        dt: int,
        *,
        units: str = "metric",
        lang: str = "en",
    ) -> HistoricalWeatherResponse:
        validate_coordinates(lat, lon)
        params = {"lat": lat, "lon": lon, "dt": dt, "units": units, "lang": lang}
        payload = self._get(self.one_call_base_url, "/onecall/timemachine", params)
        return self._parse(HistoricalWeatherResponse, payload)

    # ------------------------------------------------------------------
    # Geocoding
    # ------------------------------------------------------------------

    def _parse_geocode(self, payload: Any) -> List[GeocodeResult]:
        try:
            return _GEOCODE_LIST.validate_python(payload)
        except ValidationError as exc:
            raise UpstreamApiError("invalid_payload", f"Unexpected geocoding payload: {exc}") from exc

    def geocode(self, q: str, limit: int | None = None) -> List[GeocodeResult]:
        params = {"q": require_text(q, "Location name"), "limit": clamp_limit(limit)}
        return self._parse_geocode(self._get(self.geo_base_url, "/direct", params))

    def reverse_geocode(self, lat: float, lon: float, limit: int | None = None) -> List[GeocodeResult]:
        validate_coordinates(lat, lon)
        params = {"lat": lat, "lon": lon, "limit": clamp_limit(limit)}
        return self._parse_geocode(self._get(self.geo_base_url, "/reverse", params))

    # ------------------------------------------------------------------
    # Map tiles
    # ------------------------------------------------------------------

    def tile_url(self, layer: str, zoom: int, x: int, y: int) -> str:
        """URL of one weather map tile. Constructed only, never fetched."""
        validate_tile(x, y, zoom)
        return build_tile_url(self.tile_base_url, layer, zoom, x, y, self.api_key)

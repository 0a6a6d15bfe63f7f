"""Turn caller-supplied query shapes into OpenWeatherMap query parameters."""
from __future__ import annotations

from typing import Any, Dict

from openweather_mcp.domain import LocationQuery
from openweather_mcp.errors import InvalidQueryError

MIN_GEOCODE_LIMIT = 1
MAX_GEOCODE_LIMIT = 5
MAX_FORECAST_COUNT = 40


def _present(value: str | None) -> bool:
    """Blank strings count as unset."""
    return value is not None and value.strip() != ""


def _with_country(value: str, country: str | None) -> str:
    """Append an ISO country code unless the value already carries one."""
    value = value.strip()
    if not _present(country) or "," in value:
        return value
    return f"{value},{country.strip().upper()}"


def validate_coordinates(lat: float | None, lon: float | None) -> None:
    """Raise InvalidQueryError unless lat/lon are present and in range."""
    if lat is None or lon is None:
        raise InvalidQueryError("Both latitude and longitude are required")
    if not -90.0 <= lat <= 90.0:
        raise InvalidQueryError(f"Latitude {lat} is outside [-90, 90]")
    if not -180.0 <= lon <= 180.0:
        raise InvalidQueryError(f"Longitude {lon} is outside [-180, 180]")


def build_location_params(query: LocationQuery) -> Dict[str, Any]:
    """
    Build the location part of a /weather or /forecast request.

    Exactly one descriptor is expected. When several are set the first match
    wins, in the order city > lat/lon > zip.
    """
    if _present(query.city):
        return {"q": _with_country(query.city, query.country)}
    if query.lat is not None and query.lon is not None:
        validate_coordinates(query.lat, query.lon)
        return {"lat": query.lat, "lon": query.lon}
    if _present(query.zip):
        return {"zip": _with_country(query.zip, query.country)}
    raise InvalidQueryError("A city name, a latitude/longitude pair or a postal code is required")


def clamp_limit(limit: int | None) -> int:
    """Clamp a geocoding result limit into [1, 5]; None means the maximum."""
    if limit is None:
        return MAX_GEOCODE_LIMIT
    return max(MIN_GEOCODE_LIMIT, min(MAX_GEOCODE_LIMIT, int(limit)))


def validate_forecast_count(cnt: int | None) -> int | None:
    """Forecast `cnt` must be between 1 and 40 timestamps when given."""
    if cnt is None:
        return None
    if not 1 <= cnt <= MAX_FORECAST_COUNT:
        raise InvalidQueryError(f"Forecast count {cnt} is outside [1, {MAX_FORECAST_COUNT}]")
    return cnt


def validate_time_range(start: int | None, end: int | None) -> None:
    """Historical air-quality lookups need both ends of the range, in order."""
    if start is None or end is None:
        raise InvalidQueryError("Historical air quality needs both start and end timestamps")
    if start > end:
        raise InvalidQueryError(f"Start timestamp {start} is after end timestamp {end}")


def require_text(value: str | None, field: str) -> str:
    """Return the stripped value or raise if it is blank."""
    if not _present(value):
        raise InvalidQueryError(f"{field} must not be empty")
    return value.strip()

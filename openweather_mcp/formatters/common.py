"""Display helpers shared by every report formatter."""
from __future__ import annotations

import datetime as dt

from openweather_mcp.analysis import round_half_up

TEMPERATURE_SUFFIX = {
    "metric": "°C",
    "imperial": "°F",
    "standard": "K",
}

WIND_SPEED_SUFFIX = {
    "metric": "m/s",
    "imperial": "mph",
    "standard": "m/s",
}

NO_DATA = "No data available"

MPH_PER_METRE_PER_SECOND = 2.23694
FAHRENHEIT_PER_CELSIUS_DEGREE = 1.8


def _units(units) -> str:
    return getattr(units, "value", units) or "metric"


def format_number(value: float, digits: int | None = None) -> str:
    """Render a number without a trailing '.0'; round to `digits` places if given."""
    if digits is not None:
        value = round(value, digits)
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.{digits}f}" if digits is not None else str(value)


def format_temperature(temp: float, units="metric") -> str:
    """Whole-degree temperature tagged with the unit system's symbol."""
    suffix = TEMPERATURE_SUFFIX.get(_units(units), "°C")
    return f"{round_half_up(temp)}{suffix}"


def format_wind_speed(speed: float, units="metric") -> str:
    suffix = WIND_SPEED_SUFFIX.get(_units(units), "m/s")
    return f"{format_number(speed)} {suffix}"


def wind_speed_in_units(metres_per_second: float, units="metric") -> float:
    """Express a wind speed given in m/s in the unit system's wind unit."""
    if _units(units) == "imperial":
        return metres_per_second * MPH_PER_METRE_PER_SECOND
    return metres_per_second


def temperature_delta_in_units(celsius_degrees: float, units="metric") -> float:
    """Express a temperature difference given in Celsius degrees; kelvin steps equal Celsius steps."""
    if _units(units) == "imperial":
        return celsius_degrees * FAHRENHEIT_PER_CELSIUS_DEGREE
    return celsius_degrees


def _shifted(timestamp: int, offset_seconds: int = 0) -> dt.datetime:
    """UTC datetime shifted by the location's offset; the result reads as local wall time."""
    return dt.datetime.fromtimestamp(timestamp + (offset_seconds or 0), tz=dt.timezone.utc)


def format_datetime(timestamp: int, offset_seconds: int = 0) -> str:
    return _shifted(timestamp, offset_seconds).strftime("%Y-%m-%d %H:%M:%S")


def format_date(timestamp: int, offset_seconds: int = 0) -> str:
    return _shifted(timestamp, offset_seconds).strftime("%Y-%m-%d")


def format_time(timestamp: int, offset_seconds: int = 0) -> str:
    return _shifted(timestamp, offset_seconds).strftime("%H:%M")


def format_coordinates(lat: float, lon: float) -> str:
    return f"{lat:.4f}, {lon:.4f}"

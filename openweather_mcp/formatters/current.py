"""Current conditions report."""
from __future__ import annotations

from typing import List

from openweather_mcp.analysis import wind_direction
from openweather_mcp.domain import CurrentWeatherResponse
from openweather_mcp.formatters.common import (
    format_coordinates,
    format_datetime,
    format_number,
    format_temperature,
    format_wind_speed,
)


def _location(resp: CurrentWeatherResponse) -> str:
    return ", ".join(part for part in (resp.name, resp.sys.country) if part) or "Unknown location"


def format_current_weather(resp: CurrentWeatherResponse, units="metric") -> str:
    condition = resp.weather[0] if resp.weather else None
    main = resp.main
    lines: List[str] = [f"🌍 **{_location(resp)}** current weather", ""]

    lines.append(
        f"🌡️ **Temperature**: {format_temperature(main.temp, units)} "
        f"(feels like {format_temperature(main.feels_like, units)})"
    )
    if main.temp_min is not None and main.temp_max is not None:
        lines.append(
            f"📊 **Range**: {format_temperature(main.temp_min, units)} ~ {format_temperature(main.temp_max, units)}"
        )
    lines.append(f"☁️ **Conditions**: {condition.description if condition and condition.description else 'unknown'}")
    lines.append(f"💧 **Humidity**: {format_number(main.humidity)}%")

    wind = f"🌬️ **Wind**: {format_wind_speed(resp.wind.speed, units)}"
    compass = wind_direction(resp.wind.deg)
    if compass:
        wind += f" {compass}"
    if resp.wind.gust is not None:
        wind += f" (gusts {format_wind_speed(resp.wind.gust, units)})"
    lines.append(wind)
    lines.append(f"📏 **Pressure**: {format_number(main.pressure)} hPa")

    if resp.visibility is not None:
        lines.append(f"👁️ **Visibility**: {resp.visibility / 1000:.1f} km")
    lines.append(f"☁️ **Cloud cover**: {format_number(resp.clouds.all)}%")

    for label, icon, volume in (("Rain", "🌧️", resp.rain), ("Snow", "❄️", resp.snow)):
        if volume is None:
            continue
        if volume.one_hour is not None:
            lines.append(f"{icon} **{label} (1h)**: {format_number(volume.one_hour)} mm")
        if volume.three_hour is not None:
            lines.append(f"{icon} **{label} (3h)**: {format_number(volume.three_hour)} mm")

    if resp.sys.sunrise is not None or resp.sys.sunset is not None:
        lines.append("")
        if resp.sys.sunrise is not None:
            lines.append(f"🌅 **Sunrise**: {format_datetime(resp.sys.sunrise, resp.timezone)}")
        if resp.sys.sunset is not None:
            lines.append(f"🌇 **Sunset**: {format_datetime(resp.sys.sunset, resp.timezone)}")

    lines.append("")
    lines.append(f"📍 **Coordinates**: {format_coordinates(resp.coord.lat, resp.coord.lon)}")
    lines.append(f"🕐 **Updated**: {format_datetime(resp.dt, resp.timezone)}")

    if condition is not None:
        lines.append("")
        lines.append(f"🎨 **Icon**: {condition.icon or 'N/A'} ({condition.main or 'unknown'})")

    return "\n".join(lines)

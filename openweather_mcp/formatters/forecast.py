"""5 day / 3 hour forecast report: per-day slots plus a summary with advice."""
from __future__ import annotations

from typing import Dict, List

from openweather_mcp.analysis import round_half_up, summarize, wind_direction
from openweather_mcp.domain import ForecastItem, ForecastResponse
from openweather_mcp.formatters.common import (
    NO_DATA,
    _shifted,
    format_coordinates,
    format_number,
    format_temperature,
    format_time,
    format_wind_speed,
    temperature_delta_in_units,
    wind_speed_in_units,
)

HIGH_PRECIPITATION_PROBABILITY = 0.7
# m/s and Celsius degrees; scaled to the requested unit system.
HIGH_WIND_SPEED = 10.0
WIDE_TEMPERATURE_RANGE = 15.0
HUMID_THRESHOLD = 80.0
DRY_THRESHOLD = 30.0


def group_by_local_date(items: List[ForecastItem], offset_seconds: int = 0) -> Dict[str, List[ForecastItem]]:
    """Group slots by the location's calendar date, keeping chronological order."""
    grouped: Dict[str, List[ForecastItem]] = {}
    for item in items:
        key = _shifted(item.dt, offset_seconds).strftime("%Y-%m-%d (%a)")
        grouped.setdefault(key, []).append(item)
    return grouped


def _format_slot(item: ForecastItem, units, offset_seconds: int) -> str:
    description = item.weather[0].description if item.weather and item.weather[0].description else "unknown"
    wind = format_wind_speed(item.wind.speed, units)
    compass = wind_direction(item.wind.deg)
    if compass:
        wind += f" {compass}"

    line = (
        f"🕐 **{format_time(item.dt, offset_seconds)}** - {description}\n"
        f"   🌡️ {format_temperature(item.main.temp, units)} (feels like {format_temperature(item.main.feels_like, units)})"
        f" | 💧 {format_number(item.main.humidity)}% | 🌬️ {wind}\n"
        f"   ☁️ {format_number(item.clouds.all)}% | 📏 {format_number(item.main.pressure)} hPa"
        f" | ☔ {round_half_up(item.pop * 100)}%"
    )
    if item.rain is not None and item.rain.three_hour:
        line += f" | 🌧️ {format_number(item.rain.three_hour)} mm"
    if item.snow is not None and item.snow.three_hour:
        line += f" | ❄️ {format_number(item.snow.three_hour)} mm"
    return line


def forecast_advice(items: List[ForecastItem], units="metric") -> List[str]:
    """Advice bullets derived from the whole forecast window."""
    temps = summarize([i.main.temp for i in items])
    humidity = summarize([i.main.humidity for i in items])
    if temps is None or humidity is None:
        return []
    max_pop = max(i.pop for i in items)
    max_wind = max(i.wind.speed for i in items)

    advice: List[str] = []
    if max_pop > HIGH_PRECIPITATION_PROBABILITY:
        advice.append("🌧️ High chance of precipitation, bring rain gear")
    if max_wind > wind_speed_in_units(HIGH_WIND_SPEED, units):
        advice.append("🌬️ Strong winds expected, take care outdoors")
    if temps.maximum - temps.minimum > temperature_delta_in_units(WIDE_TEMPERATURE_RANGE, units):
        advice.append("🌡️ Large temperature swings, dress in layers")
    if humidity.mean > HUMID_THRESHOLD:
        advice.append("💧 High humidity, it may feel muggy")
    elif humidity.mean < DRY_THRESHOLD:
        advice.append("💧 Low humidity, stay hydrated")
    return advice


def _format_summary(items: List[ForecastItem], units) -> List[str]:
    temps = summarize([i.main.temp for i in items])
    humidity = summarize([i.main.humidity for i in items])
    max_pop = max(i.pop for i in items)
    max_wind = max(i.wind.speed for i in items)

    lines = [
        "📈 **Summary**",
        "─" * 30,
        f"🌡️ **Temperature range**: {format_temperature(temps.minimum, units)} ~ {format_temperature(temps.maximum, units)}",
        f"📊 **Mean temperature**: {format_temperature(temps.mean, units)}",
        f"💧 **Mean humidity**: {round_half_up(humidity.mean)}%",
        f"☔ **Highest precipitation chance**: {round_half_up(max_pop * 100)}%",
        f"🌬️ **Strongest wind**: {format_wind_speed(max_wind, units)}",
    ]
    advice = forecast_advice(items, units)
    if advice:
        lines.append("")
        lines.append("💡 **Advice**:")
        lines.extend(f"• {a}" for a in advice)
    return lines


def format_forecast(resp: ForecastResponse, units="metric") -> str:
    city = resp.city
    location = ", ".join(p for p in (city.name, city.country) if p) or "Unknown location"
    if not resp.items:
        return f"🌍 **{location}** forecast\n\n{NO_DATA}: the provider returned no forecast slots."

    lines: List[str] = [
        f"🌍 **{location}** forecast",
        "",
        f"📊 **Forecast slots**: {len(resp.items)} (every 3 hours)",
        f"📍 **Coordinates**: {format_coordinates(city.coord.lat, city.coord.lon)}",
        "",
    ]
    for date, slots in group_by_local_date(resp.items, city.timezone).items():
        lines.append(f"📅 **{date}**")
        lines.append("─" * 50)
        for slot in slots:
            lines.append(_format_slot(slot, units, city.timezone))
        lines.append("")

    lines.extend(_format_summary(resp.items, units))
    return "\n".join(lines)

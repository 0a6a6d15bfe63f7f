"""Historical weather reports: a single day, or several days side by side."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from openweather_mcp.analysis import most_common, summarize, wind_direction
from openweather_mcp.domain import HistoricalWeatherResponse, HourlyObservation
from openweather_mcp.formatters.common import (
    format_date,
    format_number,
    format_temperature,
    format_time,
    format_wind_speed,
    temperature_delta_in_units,
    wind_speed_in_units,
)

MAX_HOURLY_LINES = 12

# m/s and Celsius degrees; scaled to the requested unit system.
WIDE_TEMPERATURE_RANGE = 15.0
NARROW_TEMPERATURE_RANGE = 5.0
HUMID_THRESHOLD = 80.0
DRY_THRESHOLD = 30.0
HIGH_WIND_SPEED = 10.0
LOW_PRESSURE = 1000.0
HIGH_PRESSURE = 1020.0


@dataclass(frozen=True)
class DayStatistics:
    avg_temp: float
    min_temp: float
    max_temp: float
    avg_humidity: float
    min_humidity: float
    max_humidity: float
    avg_wind_speed: float
    max_wind_speed: float
    avg_pressure: float
    min_pressure: float
    max_pressure: float
    weather: str | None


def day_statistics(observations: Sequence[HourlyObservation]) -> DayStatistics | None:
    """Aggregate one day of hourly observations; None when there are none."""
    temps = summarize([o.temp for o in observations])
    if temps is None:
        return None
    humidity = summarize([o.humidity for o in observations])
    wind = summarize([o.wind_speed for o in observations])
    pressure = summarize([o.pressure for o in observations])
    return DayStatistics(
        avg_temp=temps.mean,
        min_temp=temps.minimum,
        max_temp=temps.maximum,
        avg_humidity=humidity.mean,
        min_humidity=humidity.minimum,
        max_humidity=humidity.maximum,
        avg_wind_speed=wind.mean,
        max_wind_speed=wind.maximum,
        avg_pressure=pressure.mean,
        min_pressure=pressure.minimum,
        max_pressure=pressure.maximum,
        weather=most_common(o.weather[0].description if o.weather else None for o in observations),
    )


def _format_day_statistics(stats: DayStatistics, units) -> List[str]:
    lines = [
        "📈 **Day statistics**:",
        f"🌡️ **Temperature**: mean {format_temperature(stats.avg_temp, units)}, "
        f"low {format_temperature(stats.min_temp, units)}, high {format_temperature(stats.max_temp, units)}",
        f"💧 **Humidity**: mean {stats.avg_humidity:.0f}% "
        f"({format_number(stats.min_humidity)}% ~ {format_number(stats.max_humidity)}%)",
        f"🌬️ **Wind**: mean {format_wind_speed(round(stats.avg_wind_speed, 1), units)}, "
        f"max {format_wind_speed(stats.max_wind_speed, units)}",
        f"📏 **Pressure**: mean {stats.avg_pressure:.0f} hPa ({stats.min_pressure:.0f} ~ {stats.max_pressure:.0f})",
    ]
    if stats.weather:
        lines.append(f"☁️ **Prevailing conditions**: {stats.weather}")
    return lines


def _format_hour(obs: HourlyObservation, units, offset: int) -> str:
    description = obs.weather[0].description if obs.weather and obs.weather[0].description else "unknown"
    line = (
        f"🕐 **{format_time(obs.dt, offset)}** - {description}\n"
        f"   🌡️ {format_temperature(obs.temp, units)} (feels like {format_temperature(obs.feels_like, units)})"
        f" | 💧 {format_number(obs.humidity)}% | 🌬️ {format_wind_speed(obs.wind_speed, units)}"
    )
    compass = wind_direction(obs.wind_deg)
    if compass:
        line += f" {compass}"
    line += f" | 📏 {format_number(obs.pressure)} hPa"
    if obs.uvi is not None:
        line += f" | ☀️ UV {obs.uvi:.1f}"
    if obs.rain is not None and obs.rain.first_value() is not None:
        line += f" | 🌧️ {format_number(obs.rain.first_value())} mm"
    if obs.snow is not None and obs.snow.first_value() is not None:
        line += f" | ❄️ {format_number(obs.snow.first_value())} mm"
    return line


def weather_analysis(stats: DayStatistics, units) -> List[str]:
    """Observations about the day's temperature swing, humidity, wind and pressure."""
    notes: List[str] = []
    temp_range = stats.max_temp - stats.min_temp
    if temp_range > temperature_delta_in_units(WIDE_TEMPERATURE_RANGE, units):
        notes.append(f"🌡️ Large temperature swing ({temp_range:.1f}°), conditions changed noticeably")
    elif temp_range < temperature_delta_in_units(NARROW_TEMPERATURE_RANGE, units):
        notes.append(f"🌡️ Small temperature swing ({temp_range:.1f}°), temperatures were steady")

    if stats.avg_humidity > HUMID_THRESHOLD:
        notes.append(f"💧 High humidity ({stats.avg_humidity:.0f}%), likely muggy")
    elif stats.avg_humidity < DRY_THRESHOLD:
        notes.append(f"💧 Low humidity ({stats.avg_humidity:.0f}%), dry air")

    if stats.max_wind_speed > wind_speed_in_units(HIGH_WIND_SPEED, units):
        notes.append(f"🌬️ Strong wind (max {format_wind_speed(stats.max_wind_speed, units)})")

    if stats.avg_pressure < LOW_PRESSURE:
        notes.append(f"📏 Low pressure ({stats.avg_pressure:.0f} hPa), precipitation likely")
    elif stats.avg_pressure > HIGH_PRESSURE:
        notes.append(f"📏 High pressure ({stats.avg_pressure:.0f} hPa), fair weather")
    return notes


def format_historical_weather(resp: HistoricalWeatherResponse, dt: int, units="metric") -> str:
    lines = [
        "📅 **Historical weather**",
        "",
        f"📍 **Coordinates**: {resp.lat:.4f}°, {resp.lon:.4f}°",
        f"🗓️ **Date**: {format_date(dt, resp.timezone_offset)}",
        f"🌍 **Time zone**: {resp.timezone}",
        f"📊 **Observations**: {len(resp.data)}",
        "",
    ]
    if not resp.data:
        lines.append("❌ **No data**: no historical observations are available for this date")
        lines.append("💡 The date may be outside the provider's archive or the archive may be incomplete")
        return "\n".join(lines)

    stats = day_statistics(resp.data)
    if len(resp.data) > 1:
        lines.extend(_format_day_statistics(stats, units))
        lines.append("")

    lines.append("⏰ **Hourly detail**:")
    lines.append("─" * 50)
    for obs in resp.data[:MAX_HOURLY_LINES]:
        lines.append(_format_hour(obs, units, resp.timezone_offset))
    if len(resp.data) > MAX_HOURLY_LINES:
        lines.append(f"... {len(resp.data) - MAX_HOURLY_LINES} more hours not shown")

    notes = weather_analysis(stats, units)
    if notes:
        lines.append("")
        lines.append("🔍 **Analysis**:")
        lines.extend(f"• {note}" for note in notes)
    return "\n".join(lines)


def _comparison_analysis(days: List[Tuple[str, DayStatistics]], units) -> List[str]:
    # max/min return the first extreme, so ties go to the earliest requested day
    hottest = max(days, key=lambda d: d[1].avg_temp)
    coldest = min(days, key=lambda d: d[1].avg_temp)
    wettest = max(days, key=lambda d: d[1].avg_humidity)
    driest = min(days, key=lambda d: d[1].avg_humidity)
    return [
        "📊 **Comparison**:",
        f"• 🌡️ Hottest: {hottest[0]} ({format_temperature(hottest[1].avg_temp, units)})",
        f"• 🌡️ Coldest: {coldest[0]} ({format_temperature(coldest[1].avg_temp, units)})",
        f"• 💧 Most humid: {wettest[0]} ({wettest[1].avg_humidity:.0f}%)",
        f"• 💧 Driest: {driest[0]} ({driest[1].avg_humidity:.0f}%)",
    ]


def format_historical_comparison(
    days: Sequence[Tuple[int, HistoricalWeatherResponse]],
    units="metric",
) -> str:
    """Summaries for each requested timestamp, in the order given."""
    lines = ["📊 **Multi-day historical comparison**", ""]
    if days:
        first = days[0][1]
        lines.append(f"📍 **Coordinates**: {first.lat:.4f}°, {first.lon:.4f}°")
    lines.append(f"📅 **Days compared**: {len(days)}")
    lines.append("")

    with_data: List[Tuple[str, DayStatistics]] = []
    for dt, resp in days:
        label = format_date(dt, resp.timezone_offset)
        stats = day_statistics(resp.data)
        lines.append(f"📅 **{label}**:")
        if stats is None:
            lines.append("  ❌ no observations available")
            lines.append("")
            continue
        with_data.append((label, stats))
        lines.append(
            f"  🌡️ Temperature: {format_temperature(stats.avg_temp, units)} "
            f"({format_temperature(stats.min_temp, units)} ~ {format_temperature(stats.max_temp, units)})"
        )
        lines.append(f"  💧 Humidity: {stats.avg_humidity:.0f}%")
        lines.append(f"  🌬️ Wind: {format_wind_speed(round(stats.avg_wind_speed, 1), units)}")
        lines.append(f"  📏 Pressure: {stats.avg_pressure:.0f} hPa")
        if stats.weather:
            lines.append(f"  ☁️ Conditions: {stats.weather}")
        lines.append("")

    if len(with_data) >= 2:
        lines.extend(_comparison_analysis(with_data, units))
    return "\n".join(lines).rstrip("\n")

"""Air-quality reports: current sample, historical statistics, and forecast."""
from __future__ import annotations

from typing import List, Tuple

from openweather_mcp.analysis import (
    aqi_category,
    aqi_marker,
    average_components,
    classify_trend,
    primary_pollutant,
    round_half_up,
    summarize,
)
from openweather_mcp.domain import AirQualityComponents, AirQualityItem, AirQualityResponse, Trend
from openweather_mcp.formatters.common import NO_DATA, format_coordinates, format_date, format_datetime

DEFAULT_FORECAST_SAMPLES = 5

COMPONENT_LABELS: Tuple[Tuple[str, str], ...] = (
    ("co", "CO (carbon monoxide)"),
    ("no", "NO (nitric oxide)"),
    ("no2", "NO₂ (nitrogen dioxide)"),
    ("o3", "O₃ (ozone)"),
    ("so2", "SO₂ (sulphur dioxide)"),
    ("pm2_5", "PM2.5"),
    ("pm10", "PM10"),
    ("nh3", "NH₃ (ammonia)"),
)

AVERAGE_COMPONENT_LABELS: Tuple[Tuple[str, str], ...] = (
    ("pm2_5", "PM2.5"),
    ("pm10", "PM10"),
    ("o3", "O₃"),
    ("no2", "NO₂"),
    ("so2", "SO₂"),
    ("co", "CO"),
)

HEALTH_GUIDANCE = {
    1: (
        "Air quality is excellent and suitable for all outdoor activities",
        "Open the windows and enjoy the fresh air",
    ),
    2: (
        "Air quality is good and suitable for outdoor activities",
        "Unusually sensitive people may notice mild discomfort",
    ),
    3: (
        "Air quality is moderate; sensitive groups should limit time outdoors",
        "Consider closing windows and running an air purifier",
    ),
    4: (
        "Air quality is poor; everyone should reduce outdoor activity",
        "Wear a mask when going out",
        "Avoid strenuous exercise",
    ),
    5: (
        "Air quality is very poor; avoid outdoor activity",
        "Wear a respirator-grade mask if you must go out",
        "Keep windows closed and run an air purifier",
        "Sensitive groups should stay indoors",
    ),
}


def _components_block(components: AirQualityComponents, labels) -> List[str]:
    return [f"• {label}: {getattr(components, field):.2f}" for field, label in labels]


def _primary_pollutant_line(components: AirQualityComponents) -> str:
    primary = primary_pollutant(components)
    if primary is None:
        return "🎯 **Primary pollutant**: no pollutant exceeds its threshold"
    return f"🎯 **Primary pollutant**: {primary.label} ({primary.value:.2f} μg/m³)"


def format_sample(item: AirQualityItem) -> List[str]:
    """AQI headline, all eight concentrations, and the primary pollutant."""
    aqi = item.main.aqi
    lines = [f"{aqi_marker(aqi)} **AQI**: {aqi} ({aqi_category(aqi).value})", ""]
    lines.append("🧪 **Concentrations** (μg/m³):")
    lines.extend(_components_block(item.components, COMPONENT_LABELS))
    lines.append("")
    lines.append(_primary_pollutant_line(item.components))
    return lines


def _trend_lines(items: List[AirQualityItem]) -> List[str]:
    aqis = [i.main.aqi for i in items]
    trend = classify_trend(aqis, higher_is_worse=True)
    if trend is Trend.UNKNOWN:
        return []
    delta = aqis[-1] - aqis[0]
    if trend is Trend.WORSENING:
        text = f"Air quality is worsening (AQI up {delta})"
    elif trend is Trend.IMPROVING:
        text = f"Air quality is improving (AQI down {abs(delta)})"
    else:
        text = "AQI is the same at the start and end of the range (changes in between are not considered)"
    return ["📈 **Trend**:", f"• {text}"]


def format_statistics(items: List[AirQualityItem]) -> List[str]:
    """Summary over several samples: AQI mean/range, mean concentrations, trend."""
    stats = summarize([i.main.aqi for i in items])
    averages = average_components(items)
    lines = [
        "📊 **Overview**",
        f"• Mean AQI: {stats.mean:.1f} ({aqi_category(round_half_up(stats.mean)).value})",
        f"• AQI range: {int(stats.minimum)} - {int(stats.maximum)}",
        f"• Samples: {stats.count}",
        "",
        "📈 **Mean concentrations** (μg/m³):",
    ]
    lines.extend(_components_block(averages, AVERAGE_COMPONENT_LABELS))
    trend = _trend_lines(items)
    if trend:
        lines.append("")
        lines.extend(trend)
    return lines


def health_guidance(items: List[AirQualityItem]) -> List[str]:
    """Guidance keyed by the rounded mean AQI; empty for no samples or an unknown level."""
    stats = summarize([i.main.aqi for i in items])
    if stats is None:
        return []
    advice = HEALTH_GUIDANCE.get(round_half_up(stats.mean))
    if not advice:
        return []
    return ["💡 **Health guidance**:"] + [f"• {line}" for line in advice]


def format_air_quality(resp: AirQualityResponse, start: int | None = None, end: int | None = None) -> str:
    lines = [
        "🌍 **Air quality report**",
        f"📍 **Coordinates**: {format_coordinates(resp.coord.lat, resp.coord.lon)}",
        "",
    ]
    if start is not None and end is not None:
        lines.append(f"📅 **Range**: {format_date(start)} - {format_date(end)}")
        lines.append(f"📊 **Samples**: {len(resp.items)}")
    else:
        lines.append("📅 **Query**: current air quality")
    lines.append("")

    if not resp.items:
        lines.append(f"{NO_DATA}: the provider returned no air-quality samples.")
        return "\n".join(lines)

    if len(resp.items) > 1:
        lines.extend(format_statistics(resp.items))
    else:
        lines.extend(format_sample(resp.items[0]))

    guidance = health_guidance(resp.items)
    if guidance:
        lines.append("")
        lines.extend(guidance)
    return "\n".join(lines)


def format_air_quality_forecast(resp: AirQualityResponse, limit: int = DEFAULT_FORECAST_SAMPLES) -> str:
    lines = [
        "🌍 **Air quality forecast**",
        f"📍 **Coordinates**: {format_coordinates(resp.coord.lat, resp.coord.lon)}",
        f"📊 **Forecast samples**: {len(resp.items)}",
        "",
    ]
    if not resp.items:
        lines.append(f"{NO_DATA}: the provider returned no forecast samples.")
        return "\n".join(lines)

    for item in resp.items[:limit]:
        lines.append(f"📅 **{format_datetime(item.dt)[:16]} UTC**")
        lines.extend(format_sample(item))
        lines.append("")
    return "\n".join(lines).rstrip("\n")

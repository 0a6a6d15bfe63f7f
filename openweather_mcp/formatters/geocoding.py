"""Geocoding and reverse geocoding result lists."""
from __future__ import annotations

from typing import List, Sequence

from openweather_mcp.domain import GeocodeResult
from openweather_mcp.formatters.common import format_coordinates


def _format_result(index: int, result: GeocodeResult, *, with_coordinates: bool) -> List[str]:
    lines = [f"{index}. **{result.name}**"]
    if with_coordinates:
        lines.append(f"   📍 Coordinates: {format_coordinates(result.lat, result.lon)}")
    lines.append(f"   🏳️ Country: {result.country or 'unknown'}")
    if result.state:
        lines.append(f"   🏛️ State/region: {result.state}")
    lines.append("")
    return lines


def format_geocoding(results: Sequence[GeocodeResult], q: str) -> str:
    lines = [
        "🌍 **Geocoding results**",
        "",
        f"🔍 **Query**: {q}",
        f"📊 **Matches**: {len(results)}",
        "",
    ]
    if not results:
        lines.append("No places matched this name.")
    for index, result in enumerate(results, start=1):
        lines.extend(_format_result(index, result, with_coordinates=True))
    return "\n".join(lines).rstrip("\n")


def format_reverse_geocoding(results: Sequence[GeocodeResult], lat: float, lon: float) -> str:
    lines = [
        "🌍 **Reverse geocoding results**",
        "",
        f"📍 **Coordinates**: {format_coordinates(lat, lon)}",
        f"📊 **Matches**: {len(results)}",
        "",
    ]
    if not results:
        lines.append("No named places were found near these coordinates.")
    for index, result in enumerate(results, start=1):
        lines.extend(_format_result(index, result, with_coordinates=False))
    return "\n".join(lines).rstrip("\n")

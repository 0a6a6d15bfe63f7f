"""Weather map tile reports. The tile images themselves are never fetched."""
from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from openweather_mcp.domain import MapLayer, TileBounds, TileCoordinate

LAYER_DESCRIPTIONS: Dict[MapLayer, str] = {
    MapLayer.CLOUDS: "Cloud cover",
    MapLayer.PRECIPITATION: "Precipitation",
    MapLayer.PRESSURE: "Sea-level pressure",
    MapLayer.WIND: "Wind speed and direction",
    MapLayer.TEMPERATURE: "Temperature",
}

LAYER_USAGE: Dict[MapLayer, Tuple[str, ...]] = {
    MapLayer.CLOUDS: (
        "☁️ **Reading the cloud layer**:",
        "White areas show cloud cover",
        "Brighter shading means thicker cloud",
        "Useful for judging the chance of precipitation",
    ),
    MapLayer.PRECIPITATION: (
        "🌧️ **Reading the precipitation layer**:",
        "Blue areas show rain",
        "White areas show snow",
        "Darker shading means heavier precipitation",
    ),
    MapLayer.PRESSURE: (
        "📏 **Reading the pressure layer**:",
        "Isobars show how pressure is distributed",
        "High pressure usually brings fair weather",
        "Low pressure is associated with unsettled weather",
    ),
    MapLayer.WIND: (
        "🌬️ **Reading the wind layer**:",
        "Arrows show wind direction",
        "Colors show wind strength",
        "Useful for tracking how weather systems move",
    ),
    MapLayer.TEMPERATURE: (
        "🌡️ **Reading the temperature layer**:",
        "Colors show air temperature",
        "Red is warm and blue is cold",
        "Useful for spotting temperature gradients",
    ),
}

LAYER_INTERPRETATION: Dict[MapLayer, Tuple[str, ...]] = {
    MapLayer.CLOUDS: (
        "☁️ **Cloud analysis**:",
        "Dense cloud may signal precipitation",
        "Cloud motion follows the prevailing wind",
        "Cloud thickness limits sunshine",
    ),
    MapLayer.PRECIPITATION: (
        "🌧️ **Precipitation analysis**:",
        "Where it is raining or snowing now",
        "Intensity and type of precipitation",
        "Direction the precipitation system is moving",
    ),
    MapLayer.PRESSURE: (
        "📏 **Pressure analysis**:",
        "Tight pressure gradients mean stronger wind",
        "Falling or rising pressure signals a change in weather",
        "Pressure systems set the overall weather pattern",
    ),
    MapLayer.WIND: (
        "🌬️ **Wind analysis**:",
        "Distribution of wind speed and direction",
        "Zones where air converges or diverges",
        "Areas of wind shear and turbulence",
    ),
    MapLayer.TEMPERATURE: (
        "🌡️ **Temperature analysis**:",
        "Spatial spread of temperature",
        "Gradients that mark weather fronts",
        "Urban heat islands and cold air pools",
    ),
}

FALLBACK_USAGE = "Refer to the OpenWeatherMap documentation for the meaning of this layer."


def _layer(layer) -> MapLayer | None:
    try:
        return MapLayer(getattr(layer, "value", layer))
    except ValueError:
        return None


def layer_description(layer) -> str:
    known = _layer(layer)
    return LAYER_DESCRIPTIONS[known] if known else str(getattr(layer, "value", layer))


def _bullets(block: Tuple[str, ...]) -> List[str]:
    return [block[0]] + [f"• {line}" for line in block[1:]]


def layer_usage_guide(layer) -> List[str]:
    known = _layer(layer)
    return _bullets(LAYER_USAGE[known]) if known else [FALLBACK_USAGE]


def layer_interpretation(layer) -> List[str]:
    known = _layer(layer)
    return _bullets(LAYER_INTERPRETATION[known]) if known else []


def format_tile_map(layer, tile: TileCoordinate, bounds: TileBounds, url: str) -> str:
    lines = [
        "🗺️ **Weather map tile**",
        "",
        f"📊 **Layer**: {layer_description(layer)}",
        f"🔍 **Zoom**: {tile.zoom}",
        f"📍 **Tile**: X={tile.x}, Y={tile.y}",
        "🌍 **Bounds**:",
        f"  • North: {bounds.north:.4f}°",
        f"  • South: {bounds.south:.4f}°",
        f"  • East: {bounds.east:.4f}°",
        f"  • West: {bounds.west:.4f}°",
        f"🔗 **Tile URL**: {url}",
        "",
    ]
    lines.extend(layer_usage_guide(layer))
    return "\n".join(lines)


def format_region_map(layer, lat: float, lon: float, tile: TileCoordinate, url: str) -> str:
    lines = [
        "🗺️ **Regional weather map**",
        "",
        f"📊 **Layer**: {layer_description(layer)}",
        f"📍 **Center**: {lat:.4f}°, {lon:.4f}°",
        f"🔍 **Zoom**: {tile.zoom}",
        f"🎯 **Tile**: X={tile.x}, Y={tile.y}",
        f"🔗 **Tile URL**: {url}",
    ]
    interpretation = layer_interpretation(layer)
    if interpretation:
        lines.append("")
        lines.extend(interpretation)
    return "\n".join(lines)


def format_multi_layer_map(
    lat: float,
    lon: float,
    tile: TileCoordinate,
    layers: Sequence[Tuple[object, str]],
) -> str:
    """`layers` holds (layer, url) pairs in the order requested."""
    lines = [
        "🗺️ **Multi-layer weather map**",
        "",
        f"📍 **Center**: {lat:.4f}°, {lon:.4f}°",
        f"🔍 **Zoom**: {tile.zoom}",
        f"🎯 **Tile**: X={tile.x}, Y={tile.y}",
        f"📊 **Layers**: {len(layers)}",
        "",
        "📋 **Included layers**:",
    ]
    for index, (layer, url) in enumerate(layers, start=1):
        lines.append(f"{index}. **{layer_description(layer)}** ({getattr(layer, 'value', layer)})")
        lines.append(f"   🔗 {url}")
    lines.extend(
        [
            "",
            "💡 **How to use**:",
            "• Each layer shows a different weather element",
            "• Overlay them to see how the weather system fits together",
            "• Combine several layers for a fuller picture",
        ]
    )
    return "\n".join(lines)

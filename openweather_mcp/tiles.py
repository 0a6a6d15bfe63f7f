"""Web Mercator slippy-tile math and the weather map tile URL template."""
from __future__ import annotations

import math

from openweather_mcp.domain import TileBounds, TileCoordinate
from openweather_mcp.errors import InvalidQueryError

MIN_ZOOM = 0
MAX_ZOOM = 10


def validate_zoom(zoom: int, *, max_zoom: int = MAX_ZOOM) -> None:
    """Raise InvalidQueryError for zoom levels outside the supported range."""
    if not MIN_ZOOM <= zoom <= max_zoom:
        raise InvalidQueryError(f"Zoom level {zoom} is outside [{MIN_ZOOM}, {max_zoom}]")


def validate_tile(x: int, y: int, zoom: int) -> None:
    """Raise InvalidQueryError unless x and y are in [0, 2^zoom)."""
    validate_zoom(zoom)
    n = 2 ** zoom
    if not 0 <= x < n or not 0 <= y < n:
        raise InvalidQueryError(f"Tile ({x}, {y}) does not exist at zoom {zoom}; x and y must be in [0, {n})")


def lat_lon_to_tile(lat: float, lon: float, zoom: int) -> TileCoordinate:
    """Return the tile containing (lat, lon) at the given zoom."""
    n = 2 ** zoom
    lat_rad = math.radians(lat)
    x = math.floor((lon + 180.0) / 360.0 * n)
    y = math.floor((1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n)
    # lon=180 and latitudes beyond the Mercator cutoff (~85.0511) fall off the grid
    x = min(max(x, 0), n - 1)
    y = min(max(y, 0), n - 1)
    return TileCoordinate(x=x, y=y, zoom=zoom)


def _tile_lat(y: int, n: int) -> float:
    return math.degrees(math.atan(math.sinh(math.pi * (1.0 - 2.0 * y / n))))


def tile_to_bounds(x: int, y: int, zoom: int) -> TileBounds:
    """Return the geographic bounds of tile (x, y) at zoom."""
    n = 2 ** zoom
    west = x / n * 360.0 - 180.0
    east = (x + 1) / n * 360.0 - 180.0
    return TileBounds(north=_tile_lat(y, n), south=_tile_lat(y + 1, n), east=east, west=west)


def build_tile_url(tile_base_url: str, layer: str, zoom: int, x: int, y: int, api_key: str) -> str:
    """Weather map tile URL; no request is made."""
    return f"{tile_base_url.rstrip('/')}/{layer}/{zoom}/{x}/{y}.png?appid={api_key}"

import unittest

from openweather_mcp.errors import InvalidQueryError
from openweather_mcp.tiles import build_tile_url, lat_lon_to_tile, tile_to_bounds, validate_tile, validate_zoom


class TestTileMath(unittest.TestCase):
    def test_zoom_zero_is_single_tile(self):
        tile = lat_lon_to_tile(51.5, -0.12, 0)
        self.assertEqual((tile.x, tile.y, tile.zoom), (0, 0, 0))

    def test_known_tile(self):
        # London at zoom 10
        tile = lat_lon_to_tile(51.5074, -0.1278, 10)
        self.assertEqual((tile.x, tile.y), (511, 340))

    def test_point_lies_within_its_tile_bounds(self):
        points = [(51.5074, -0.1278), (-33.8688, 151.2093), (40.7128, -74.006), (0.0, 0.0), (64.1, -21.9)]
        for lat, lon in points:
            for zoom in (0, 3, 5, 10):
                tile = lat_lon_to_tile(lat, lon, zoom)
                bounds = tile_to_bounds(tile.x, tile.y, zoom)
                self.assertTrue(bounds.contains(lat, lon), (lat, lon, zoom, tile, bounds))

    def test_edges_clamp_into_grid(self):
        for lat, lon in ((90.0, 180.0), (-90.0, -180.0), (89.9, 179.999)):
            tile = lat_lon_to_tile(lat, lon, 4)
            self.assertTrue(0 <= tile.x < 16)
            self.assertTrue(0 <= tile.y < 16)

    def test_bounds_of_world_tile(self):
        bounds = tile_to_bounds(0, 0, 0)
        self.assertAlmostEqual(bounds.west, -180.0)
        self.assertAlmostEqual(bounds.east, 180.0)
        self.assertAlmostEqual(bounds.north, 85.0511, places=3)
        self.assertAlmostEqual(bounds.south, -85.0511, places=3)

    def test_validate_tile(self):
        validate_tile(31, 31, 5)
        with self.assertRaises(InvalidQueryError):
            validate_tile(32, 0, 5)
        with self.assertRaises(InvalidQueryError):
            validate_tile(0, -1, 5)
        with self.assertRaises(InvalidQueryError):
            validate_zoom(11)

    def test_tile_url(self):
        url = build_tile_url("https://tile.openweathermap.org/map/", "clouds_new", 5, 16, 10, "KEY")
        self.assertEqual(url, "https://tile.openweathermap.org/map/clouds_new/5/16/10.png?appid=KEY")


if __name__ == "__main__":
    unittest.main()

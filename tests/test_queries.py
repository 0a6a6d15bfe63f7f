import unittest

from openweather_mcp.domain import LocationQuery
from openweather_mcp.errors import InvalidQueryError
from openweather_mcp.queries import (
    build_location_params,
    clamp_limit,
    require_text,
    validate_coordinates,
    validate_forecast_count,
    validate_time_range,
)


class TestBuildLocationParams(unittest.TestCase):
    def test_city_wins_over_coordinates_and_zip(self):
        query = LocationQuery(city="London", lat=1.0, lon=2.0, zip="10001")
        self.assertEqual(build_location_params(query), {"q": "London"})

    def test_coordinates_win_over_zip(self):
        query = LocationQuery(lat=51.5, lon=-0.12, zip="10001")
        self.assertEqual(build_location_params(query), {"lat": 51.5, "lon": -0.12})

    def test_zip(self):
        self.assertEqual(build_location_params(LocationQuery(zip="10001")), {"zip": "10001"})

    def test_blank_city_is_ignored(self):
        query = LocationQuery(city="  ", zip="10001")
        self.assertEqual(build_location_params(query), {"zip": "10001"})

    def test_country_is_appended(self):
        self.assertEqual(build_location_params(LocationQuery(city="Paris", country="fr")), {"q": "Paris,FR"})
        self.assertEqual(build_location_params(LocationQuery(zip="10001", country="US")), {"zip": "10001,US"})

    def test_country_not_appended_twice(self):
        self.assertEqual(build_location_params(LocationQuery(city="Paris,FR", country="FR")), {"q": "Paris,FR"})

    def test_single_coordinate_is_not_a_location(self):
        with self.assertRaises(InvalidQueryError):
            build_location_params(LocationQuery(lat=10.0))

    def test_empty_query_fails(self):
        with self.assertRaises(InvalidQueryError):
            build_location_params(LocationQuery())

    def test_out_of_range_coordinates_fail(self):
        with self.assertRaises(InvalidQueryError):
            build_location_params(LocationQuery(lat=91.0, lon=0.0))
        with self.assertRaises(InvalidQueryError):
            build_location_params(LocationQuery(lat=0.0, lon=-180.5))


class TestValidators(unittest.TestCase):
    def test_validate_coordinates_bounds_inclusive(self):
        validate_coordinates(90.0, 180.0)
        validate_coordinates(-90.0, -180.0)
        with self.assertRaises(InvalidQueryError):
            validate_coordinates(None, 0.0)

    def test_clamp_limit(self):
        self.assertEqual(clamp_limit(None), 5)
        self.assertEqual(clamp_limit(0), 1)
        self.assertEqual(clamp_limit(-3), 1)
        self.assertEqual(clamp_limit(3), 3)
        self.assertEqual(clamp_limit(50), 5)

    def test_validate_forecast_count(self):
        self.assertIsNone(validate_forecast_count(None))
        self.assertEqual(validate_forecast_count(1), 1)
        self.assertEqual(validate_forecast_count(40), 40)
        for bad in (0, 41):
            with self.assertRaises(InvalidQueryError):
                validate_forecast_count(bad)

    def test_validate_time_range(self):
        validate_time_range(100, 100)
        with self.assertRaises(InvalidQueryError):
            validate_time_range(200, 100)
        with self.assertRaises(InvalidQueryError):
            validate_time_range(None, 100)

    def test_require_text(self):
        self.assertEqual(require_text("  Berlin ", "q"), "Berlin")
        with self.assertRaises(InvalidQueryError):
            require_text("   ", "q")


if __name__ == "__main__":
    unittest.main()

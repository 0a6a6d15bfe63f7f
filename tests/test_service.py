import unittest

from openweather_mcp.domain import (
    AirQualityResponse,
    CurrentWeatherResponse,
    ForecastResponse,
    GeocodeResult,
    HistoricalWeatherResponse,
    LocationQuery,
    MapLayer,
    OneCallResponse,
)
from openweather_mcp.errors import InvalidQueryError, NetworkError, UpstreamApiError
from openweather_mcp.queries import build_location_params
from openweather_mcp.service import WeatherToolService

NOW = 1700000000


class FakeDataSource:
    """In-memory stand-in for OpenWeatherClient that records every call."""

    def __init__(self, fail_with=None):
        self.calls = []
        self.fail_with = fail_with

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        if self.fail_with is not None:
            raise self.fail_with

    def get_current_weather(self, query, *, units="metric", lang="en"):
        self._record("current", query, units=units, lang=lang)
        build_location_params(query)
        return CurrentWeatherResponse.model_validate(
            {
                "coord": {"lat": 51.5, "lon": -0.12},
                "main": {"temp": 12.0, "feels_like": 11.0, "pressure": 1012, "humidity": 80},
                "wind": {"speed": 3.0},
                "clouds": {"all": 20},
                "dt": NOW,
                "name": "London",
            }
        )

    def get_forecast(self, query, *, cnt=None, units="metric", lang="en"):
        self._record("forecast", query, cnt=cnt, units=units, lang=lang)
        return ForecastResponse.model_validate(
            {"list": [], "city": {"name": "London", "coord": {"lat": 51.5, "lon": -0.12}}}
        )

    def get_air_quality(self, lat, lon):
        self._record("air", lat, lon)
        return AirQualityResponse.model_validate(
            {"coord": {"lat": lat, "lon": lon}, "list": [{"dt": NOW, "main": {"aqi": 2}, "components": {}}]}
        )

    def get_historical_air_quality(self, lat, lon, start, end):
        self._record("air_history", lat, lon, start, end)
        return AirQualityResponse.model_validate(
            {
                "coord": {"lat": lat, "lon": lon},
                "list": [{"dt": start, "main": {"aqi": 1}}, {"dt": end, "main": {"aqi": 3}}],
            }
        )

    def get_air_quality_forecast(self, lat, lon):
        self._record("air_forecast", lat, lon)
        return AirQualityResponse.model_validate({"coord": {"lat": lat, "lon": lon}, "list": []})

    def get_one_call(self, lat, lon, *, exclude=None, units="metric", lang="en"):
        self._record("one_call", lat, lon, exclude=exclude, units=units, lang=lang)
        return OneCallResponse.model_validate(
            {
                "lat": lat,
                "lon": lon,
                "alerts": [
                    {"event": "Fog advisory", "start": NOW, "end": NOW + 3600},
                    {"event": "Severe thunderstorm warning", "start": NOW + 600, "end": NOW + 7200},
                ],
            }
        )

    def get_historical_weather(self, lat, lon, dt, *, units="metric", lang="en"):
        self._record("history", lat, lon, dt, units=units, lang=lang)
        return HistoricalWeatherResponse.model_validate(
            {
                "lat": lat,
                "lon": lon,
                "data": [
                    {"dt": dt, "temp": dt % 7, "feels_like": 1, "pressure": 1010, "humidity": 50, "wind_speed": 2}
                ],
            }
        )

    def geocode(self, q, limit=None):
        self._record("geocode", q, limit)
        return [GeocodeResult(name="London", lat=51.5, lon=-0.12, country="GB")]

    def reverse_geocode(self, lat, lon, limit=None):
        self._record("reverse", lat, lon, limit)
        return []

    def tile_url(self, layer, zoom, x, y):
        self._record("tile", layer, zoom, x, y)
        return f"https://tiles.test/{layer}/{zoom}/{x}/{y}.png?appid=KEY"


class TestWeatherToolService(unittest.TestCase):
    def _service(self, source=None, **kwargs):
        source = source or FakeDataSource()
        return WeatherToolService(source, clock=lambda: NOW, **kwargs), source

    def test_current_weather_uses_defaults(self):
        service, source = self._service(default_units="imperial", default_lang="de")
        report = service.current_weather(LocationQuery(city="London"))
        self.assertFalse(report.is_error)
        self.assertIn("London", report.text)
        self.assertIn("°F", report.text)
        self.assertEqual(source.calls[0][2], {"units": "imperial", "lang": "de"})

    def test_invalid_query_becomes_error_report(self):
        service, _ = self._service()
        report = service.current_weather(LocationQuery())
        self.assertTrue(report.is_error)
        self.assertTrue(report.text.startswith("Failed to get current weather: "))

    def test_unknown_units_rejected(self):
        service, source = self._service()
        report = service.forecast(LocationQuery(city="London"), units="kelvin")
        self.assertTrue(report.is_error)
        self.assertIn("Unsupported units 'kelvin'", report.text)
        self.assertEqual(source.calls, [])

    def test_invalid_default_units_fail_at_construction(self):
        with self.assertRaises(InvalidQueryError):
            WeatherToolService(FakeDataSource(), default_units="kelvin")

    def test_upstream_and_network_errors(self):
        service, _ = self._service(FakeDataSource(UpstreamApiError(401, "Invalid API key")))
        report = service.geocode("London")
        self.assertTrue(report.is_error)
        self.assertEqual(report.text, "Failed to geocode location: OpenWeatherMap API error (401): Invalid API key")

        service, _ = self._service(FakeDataSource(NetworkError("timed out")))
        report = service.air_quality_forecast(1.0, 2.0)
        self.assertEqual(report.text, "Failed to get air quality forecast: Network error: timed out")

    def test_unexpected_exception_is_reported(self):
        service, _ = self._service(FakeDataSource(RuntimeError("boom")))
        with self.assertLogs("openweather_mcp.service", level="ERROR"):
            report = service.reverse_geocode(1.0, 2.0)
        self.assertTrue(report.is_error)
        self.assertEqual(report.text, "Failed to reverse geocode coordinates: unexpected error: boom")

    def test_forecast_passes_count(self):
        service, source = self._service()
        report = service.forecast(LocationQuery(zip="10001", country="US"), cnt=8)
        self.assertFalse(report.is_error)
        self.assertEqual(source.calls[0][2]["cnt"], 8)

    def test_air_quality_current_or_history(self):
        service, source = self._service()
        current = service.air_quality(39.9, 116.4)
        history = service.air_quality(39.9, 116.4, start=NOW - 7200, end=NOW)
        self.assertIn("current air quality", current.text)
        self.assertIn("worsening", history.text)
        self.assertEqual([c[0] for c in source.calls], ["air", "air_history"])

    def test_air_quality_rejects_half_range_and_bad_coordinates(self):
        service, source = self._service()
        self.assertTrue(service.air_quality(39.9, 116.4, start=NOW).is_error)
        self.assertTrue(service.air_quality(39.9, 116.4, start=NOW, end=NOW - 1).is_error)
        self.assertTrue(service.air_quality(95.0, 116.4).is_error)
        self.assertEqual(source.calls, [])

    def test_weather_map_returns_image(self):
        service, _ = self._service()
        report = service.weather_map("temp_new", 5, 16, 10)
        self.assertFalse(report.is_error)
        self.assertEqual(len(report.images), 1)
        image = report.images[0]
        self.assertEqual((image.layer, image.zoom, image.x, image.y), ("temp_new", 5, 16, 10))
        self.assertIn(image.url, report.text)

    def test_weather_map_rejects_bad_input(self):
        service, source = self._service()
        self.assertIn("Unsupported map layer", service.weather_map("rainbow", 1, 0, 0).text)
        self.assertTrue(service.weather_map(MapLayer.WIND, 2, 4, 0).is_error)
        self.assertTrue(service.weather_map(None, 2, 0, 0).is_error)
        self.assertEqual(source.calls, [])

    def test_region_map_uses_default_zoom(self):
        service, _ = self._service()
        report = service.region_weather_map(MapLayer.CLOUDS, 51.5074, -0.1278)
        image = report.images[0]
        self.assertEqual((image.zoom, image.x, image.y), (5, 15, 10))

    def test_multi_layer_map_order(self):
        service, _ = self._service()
        report = service.multi_layer_weather_map(["wind_new", MapLayer.PRECIPITATION], 51.5074, -0.1278, zoom=3)
        self.assertEqual([i.layer for i in report.images], ["wind_new", "precipitation_new"])
        self.assertEqual({(i.x, i.y) for i in report.images}, {(3, 2)})
        self.assertTrue(service.multi_layer_weather_map([], 0.0, 0.0).is_error)

    def test_weather_alerts(self):
        service, source = self._service()
        report = service.weather_alerts(51.5, -0.12, lang="fr")
        self.assertFalse(report.is_error)
        self.assertLess(report.text.index("Severe thunderstorm"), report.text.index("Fog advisory"))
        self.assertIn("🚨 **Urgency**: within 1 hour", report.text)
        name, _, kwargs = source.calls[0]
        self.assertEqual(name, "one_call")
        self.assertEqual(tuple(kwargs["exclude"]), ("minutely", "hourly", "daily"))
        self.assertEqual(kwargs["lang"], "fr")

    def test_historical_weather(self):
        service, _ = self._service()
        report = service.historical_weather(51.5, -0.12, NOW)
        self.assertFalse(report.is_error)
        self.assertIn("📊 **Observations**: 1", report.text)

    def test_historical_comparison_keeps_order(self):
        service, source = self._service()
        stamps = [NOW, NOW - 86400 * 2, NOW - 86400]
        report = service.historical_comparison(51.5, -0.12, stamps)
        self.assertFalse(report.is_error)
        self.assertEqual([c[1][2] for c in source.calls], stamps)
        self.assertLess(report.text.index("2023-11-14"), report.text.index("2023-11-12"))
        self.assertLess(report.text.index("2023-11-12"), report.text.index("2023-11-13"))

    def test_historical_comparison_stops_when_cancelled(self):
        service, source = self._service()
        report = service.historical_comparison(
            51.5, -0.12, [NOW, NOW - 86400, NOW - 86400 * 2], cancelled=lambda: len(source.calls) >= 1
        )
        self.assertTrue(report.is_error)
        self.assertEqual(report.text, "Failed to compare historical weather: request cancelled by the caller")
        self.assertEqual(len(source.calls), 1)

    def test_historical_comparison_requires_timestamps(self):
        service, source = self._service()
        report = service.historical_comparison(51.5, -0.12, [])
        self.assertTrue(report.is_error)
        self.assertTrue(report.text.startswith("Failed to compare historical weather:"))
        self.assertEqual(source.calls, [])

    def test_historical_comparison_fails_as_a_whole(self):
        service, _ = self._service(FakeDataSource(UpstreamApiError(400, "dt out of range")))
        report = service.historical_comparison(51.5, -0.12, [NOW, NOW - 86400])
        self.assertTrue(report.is_error)
        self.assertIn("dt out of range", report.text)

    def test_geocoding(self):
        service, source = self._service()
        report = service.geocode("  London ", 3)
        self.assertIn("🔍 **Query**: London", report.text)
        self.assertEqual(source.calls[0], ("geocode", ("  London ", 3), {}))

        report = service.reverse_geocode(0.0, -150.0)
        self.assertIn("No named places", report.text)


if __name__ == "__main__":
    unittest.main()

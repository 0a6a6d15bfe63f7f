import os
import unittest

from openweather_mcp.config import Settings


class TestConfig(unittest.TestCase):
    def _without(self, *names):
        return {name: os.environ.pop(name) for name in names if name in os.environ}

    def _restore(self, previous, *names):
        for name in names:
            os.environ.pop(name, None)
        os.environ.update(previous)

    def test_settings_defaults(self):
        names = ("OPENWEATHER_BASE_URL", "OPENWEATHER_DEFAULT_UNITS", "OPENWEATHER_DEFAULT_LANG",
                 "OPENWEATHER_TRANSPORT", "OPENWEATHER_REQUEST_TIMEOUT_SECONDS")
        previous = self._without(*names)
        try:
            s = Settings()
            self.assertEqual(s.base_url, "https://api.openweathermap.org/data/2.5")
            self.assertEqual(s.one_call_base_url, "https://api.openweathermap.org/data/3.0")
            self.assertEqual(s.geo_base_url, "https://api.openweathermap.org/geo/1.0")
            self.assertEqual(s.tile_base_url, "https://tile.openweathermap.org/map")
            self.assertEqual(s.request_timeout_seconds, 10.0)
            self.assertEqual(s.default_units, "metric")
            self.assertEqual(s.default_lang, "en")
            self.assertEqual(s.transport, "stdio")
        finally:
            self._restore(previous, *names)

    def test_settings_env_override_strips_trailing_slash(self):
        names = ("OPENWEATHER_BASE_URL",)
        previous = self._without(*names)
        try:
            os.environ["OPENWEATHER_BASE_URL"] = "http://localhost:9000/data/2.5/"
            s = Settings()
            self.assertEqual(s.base_url, "http://localhost:9000/data/2.5")
        finally:
            self._restore(previous, *names)

    def test_api_key_and_skip_flag_from_env(self):
        names = ("OPENWEATHER_API_KEY", "OPENWEATHER_SKIP_KEY_CHECK")
        previous = self._without(*names)
        try:
            os.environ["OPENWEATHER_API_KEY"] = "k"
            os.environ["OPENWEATHER_SKIP_KEY_CHECK"] = "true"
            s = Settings()
            self.assertEqual(s.api_key, "k")
            self.assertTrue(s.skip_key_check)
        finally:
            self._restore(previous, *names)


if __name__ == "__main__":
    unittest.main()

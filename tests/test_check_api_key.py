import unittest

from openweather_mcp.check_api_key import VALIDATION_QUERY, check_api_key, get_api_key_status
from openweather_mcp.errors import NetworkError, UpstreamApiError


class DummyClient:
    def __init__(self, error=None):
        self.error = error
        self.queries = []

    def get_current_weather(self, query, *, units="metric", lang="en"):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return object()


class TestCheckApiKey(unittest.TestCase):
    def test_status_ok(self):
        client = DummyClient()
        status = get_api_key_status(client)
        self.assertTrue(status["ok"])
        self.assertTrue(status["reachable"])
        self.assertTrue(status["key_valid"])
        self.assertIsNone(status["error"])
        self.assertEqual(client.queries, [VALIDATION_QUERY])
        self.assertEqual(VALIDATION_QUERY.city, "London")

    def test_status_rejected_key(self):
        status = get_api_key_status(DummyClient(UpstreamApiError(401, "Invalid API key")))
        self.assertFalse(status["ok"])
        self.assertTrue(status["reachable"])
        self.assertFalse(status["key_valid"])
        self.assertEqual(status["code"], 401)
        self.assertIn("Invalid API key", status["error"])

    def test_status_unreachable(self):
        status = get_api_key_status(DummyClient(NetworkError("connection refused")))
        self.assertFalse(status["ok"])
        self.assertFalse(status["reachable"])
        self.assertIsNone(status["code"])

    def test_check_exits_on_failure(self):
        with self.assertLogs("openweather_mcp.check_api_key", level="ERROR"):
            with self.assertRaises(SystemExit) as ctx:
                check_api_key(DummyClient(UpstreamApiError(401, "Invalid API key")))
        self.assertEqual(ctx.exception.code, 1)

    def test_check_passes(self):
        self.assertIsNone(check_api_key(DummyClient()))


if __name__ == "__main__":
    unittest.main()

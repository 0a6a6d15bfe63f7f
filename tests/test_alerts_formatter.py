import unittest

from openweather_mcp.analysis import SeverityKeywords
from openweather_mcp.domain import AlertSeverity, OneCallResponse
from openweather_mcp.formatters import format_alerts
from openweather_mcp.formatters.alerts import format_duration, overall_guidance, split_description

NOW = 1700000000


def _one_call(alerts, offset=0):
    return OneCallResponse.model_validate(
        {"lat": 51.5085, "lon": -0.1257, "timezone": "Europe/London", "timezone_offset": offset, "alerts": alerts}
    )


def _alert(event, description="", start=NOW, end=NOW + 3600, **extra):
    return dict(sender_name="Met Office", event=event, start=start, end=end, description=description, **extra)


class TestAlertHelpers(unittest.TestCase):
    def test_format_duration(self):
        self.assertEqual(format_duration(0, 300), "5m")
        self.assertEqual(format_duration(0, 7200), "2h")
        self.assertEqual(format_duration(0, 5400), "1h 30m")
        self.assertEqual(format_duration(0, 86400), "1d")
        self.assertEqual(format_duration(0, 90000), "1d 1h")
        self.assertEqual(format_duration(0, 0), "0m")

    def test_negative_duration_is_reported(self):
        self.assertEqual(format_duration(100, 0), "unknown (end time precedes start time)")

    def test_split_description(self):
        self.assertEqual(split_description("Heavy rain. Flooding likely! 注意安全。"), ["Heavy rain", "Flooding likely", "注意安全"])
        self.assertEqual(split_description("no terminator"), ["no terminator"])
        self.assertEqual(split_description(""), [])

    def test_overall_guidance_by_worst_severity(self):
        self.assertIn("Extreme weather alert", overall_guidance([AlertSeverity.MINOR, AlertSeverity.EXTREME])[0])
        self.assertIn("Severe weather alert", overall_guidance([AlertSeverity.SEVERE])[0])
        self.assertIn("Keep an eye on", overall_guidance([AlertSeverity.MODERATE])[0])
        self.assertTrue(overall_guidance([])[-1].startswith("📺"))


class TestFormatAlerts(unittest.TestCase):
    def test_no_alerts(self):
        text = format_alerts(_one_call([]), 51.5085, -0.1257, now=NOW)
        self.assertIn("✅ **Status**: no active weather alerts for this area", text)
        self.assertIn("⏰ **Checked at**: 2023-11-14 22:13:20", text)
        self.assertNotIn("Overall guidance", text)

    def test_alerts_ranked_worst_first(self):
        resp = _one_call(
            [
                _alert("Fog advisory", "Low visibility expected.", start=NOW + 7200, end=NOW + 10800),
                _alert(
                    "Extreme wind warning",
                    "Gusts up to 120 km/h. Stay indoors.",
                    start=NOW - 600,
                    end=NOW + 86400,
                    tags=["Wind"],
                ),
            ]
        )
        text = format_alerts(resp, 51.5085, -0.1257, now=NOW)

        self.assertIn("🚨 **Active alerts**: 2", text)
        self.assertIn("🔴 **Alert 1: Extreme wind warning**", text)
        self.assertIn("🟢 **Alert 2: Fog advisory**", text)
        self.assertLess(text.index("Alert 1"), text.index("Alert 2"))

        self.assertIn("🚨 **Urgency**: effective now", text)
        self.assertIn("🚨 **Urgency**: within 6 hours", text)
        self.assertIn("📅 **Duration**: 1d\n", text)
        self.assertIn("📅 **Duration**: 1h\n", text)
        self.assertIn("🏷️ **Tags**: Wind", text)
        self.assertIn("• Gusts up to 120 km/h", text)
        self.assertIn("• Stay indoors", text)
        self.assertIn("• Secure doors and windows and bring loose objects indoors", text)
        self.assertIn("• Follow weather updates and official notices closely", text)
        self.assertIn("🎯 **Overall guidance**:", text)
        self.assertIn("• ⚠️ Extreme weather alert in effect: take protective action now", text)

    def test_times_use_location_offset(self):
        resp = _one_call([_alert("Heat advisory", start=NOW, end=NOW + 3600)], offset=3600)
        text = format_alerts(resp, 51.5, -0.12, now=NOW)
        self.assertIn("⏰ **Starts**: 2023-11-14 23:13:20", text)
        self.assertIn("⏳ **Ends**: 2023-11-15 00:13:20", text)

    def test_inverted_alert_window(self):
        resp = _one_call([_alert("Flood watch", start=NOW + 3600, end=NOW)])
        text = format_alerts(resp, 51.5, -0.12, now=NOW)
        self.assertIn("unknown (end time precedes start time)", text)

    def test_custom_keywords(self):
        keywords = SeverityKeywords(severe={"it": ["grave"]})
        resp = _one_call([_alert("Allerta", "Rischio grave di temporali.")])
        text = format_alerts(resp, 45.46, 9.19, now=NOW, keywords=keywords)
        self.assertIn("⚡ **Severity**: severe", text)

    def test_foreign_language_alert_ranked_by_its_own_keywords(self):
        resp = _one_call([_alert("Fog advisory"), _alert("UNWETTERWARNUNG vor SCHWEREM GEWITTER")])
        text = format_alerts(resp, 52.52, 13.40, now=NOW)
        self.assertLess(text.index("UNWETTERWARNUNG"), text.index("Fog advisory"))
        self.assertIn("⚡ **Severity**: severe", text)


if __name__ == "__main__":
    unittest.main()

"""Weather alert report: alerts ranked by severity with safety advice."""
from __future__ import annotations

import re
import time
from typing import List, Sequence, Tuple

from openweather_mcp.analysis import (
    DEFAULT_SEVERITY_KEYWORDS,
    SEVERITY_MARKERS,
    SeverityKeywords,
    alert_urgency,
    safety_advice,
    sort_alerts,
)
from openweather_mcp.domain import AlertSeverity, OneCallResponse, WeatherAlert
from openweather_mcp.formatters.common import format_datetime

SENTENCE_BREAK = re.compile(r"[.。!！?？]")

ALL_CLEAR_NOTES = (
    "No weather warnings have been issued for this area",
    "Check the forecast regularly for changes",
    "Follow your local weather service for official information",
)

EXTREME_GUIDANCE = (
    "⚠️ Extreme weather alert in effect: take protective action now",
    "🚫 Cancel non-essential travel",
    "📞 Stay in touch with family and friends",
)
SEVERE_GUIDANCE = (
    "⚠️ Severe weather alert in effect: stay alert",
    "🏠 Stay in a safe indoor location where possible",
    "📱 Watch for updated warnings",
)
DEFAULT_GUIDANCE = (
    "ℹ️ Keep an eye on changing conditions and prepare accordingly",
    "📋 Check that your emergency kit is complete",
)
CLOSING_GUIDANCE = (
    "🆘 In an emergency, call your local emergency number",
    "📺 Follow official media for the latest information",
)


def format_duration(start: int, end: int) -> str:
    """Human duration between two unix timestamps; end before start is reported, not raised."""
    seconds = end - start
    if seconds < 0:
        return "unknown (end time precedes start time)"
    hours, remainder = divmod(seconds, 3600)
    minutes = remainder // 60
    if hours >= 24:
        days, hours = divmod(hours, 24)
        return f"{days}d {hours}h" if hours else f"{days}d"
    if hours > 0:
        return f"{hours}h {minutes}m" if minutes else f"{hours}h"
    return f"{minutes}m"


def split_description(description: str) -> List[str]:
    """Break a free-text description into bullet sentences."""
    sentences = [s.strip() for s in SENTENCE_BREAK.split(description)]
    sentences = [s for s in sentences if s]
    return sentences or ([description] if description else [])


def overall_guidance(severities: Sequence[AlertSeverity]) -> List[str]:
    if AlertSeverity.EXTREME in severities:
        lines = list(EXTREME_GUIDANCE)
    elif AlertSeverity.SEVERE in severities:
        lines = list(SEVERE_GUIDANCE)
    else:
        lines = list(DEFAULT_GUIDANCE)
    return lines + list(CLOSING_GUIDANCE)


def _format_alert(index: int, alert: WeatherAlert, severity: AlertSeverity, now: float, offset: int) -> List[str]:
    lines = [
        f"{SEVERITY_MARKERS[severity]} **Alert {index}: {alert.event or 'Weather alert'}**",
        f"📢 **Issued by**: {alert.sender_name or 'unknown'}",
        f"⚡ **Severity**: {severity.value}",
        f"🚨 **Urgency**: {alert_urgency(alert, now).value}",
        f"⏰ **Starts**: {format_datetime(alert.start, offset)}",
        f"⏳ **Ends**: {format_datetime(alert.end, offset)}",
        f"📅 **Duration**: {format_duration(alert.start, alert.end)}",
    ]
    if alert.tags:
        lines.append(f"🏷️ **Tags**: {', '.join(alert.tags)}")
    lines.append("")
    lines.append("📝 **Description**:")
    lines.extend(f"• {sentence}" for sentence in split_description(alert.description))
    lines.append("")
    lines.append("🛡️ **Safety advice**:")
    lines.extend(f"• {advice}" for advice in safety_advice(alert))
    return lines


def format_alerts(
    resp: OneCallResponse,
    lat: float,
    lon: float,
    *,
    now: float | None = None,
    keywords: SeverityKeywords = DEFAULT_SEVERITY_KEYWORDS,
) -> str:
    now = time.time() if now is None else now
    offset = resp.timezone_offset
    lines = [
        "⚠️ **Weather alerts**",
        "",
        f"📍 **Coordinates**: {lat:.4f}°, {lon:.4f}°",
        f"🌍 **Time zone**: {resp.timezone}",
        f"⏰ **Checked at**: {format_datetime(int(now), offset)}",
        "",
    ]

    if not resp.alerts:
        lines.append("✅ **Status**: no active weather alerts for this area")
        lines.append("")
        lines.append("💡 **Notes**:")
        lines.extend(f"• {note}" for note in ALL_CLEAR_NOTES)
        return "\n".join(lines)

    ranked: List[Tuple[WeatherAlert, AlertSeverity]] = sort_alerts(resp.alerts, keywords)
    lines.append(f"🚨 **Active alerts**: {len(ranked)}")
    lines.append("")
    for index, (alert, severity) in enumerate(ranked, start=1):
        lines.extend(_format_alert(index, alert, severity, now, offset))
        lines.append("")

    lines.append("🎯 **Overall guidance**:")
    lines.extend(f"• {line}" for line in overall_guidance([severity for _, severity in ranked]))
    return "\n".join(lines)

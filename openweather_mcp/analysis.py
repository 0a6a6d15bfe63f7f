"""Deterministic statistics and heuristics shared by the report formatters.

Covers aggregate statistics over small series, trend direction, AQI
categories, primary-pollutant selection, and the keyword heuristics used to
rank weather alerts. The keyword tables are plain data so that new locales can
be added (or loaded from JSON) without touching the matching logic. They are
approximate by nature: a keyword hit is a hint, not an official severity.
"""

from __future__ import annotations

import math
import time
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from openweather_mcp.domain import (
    AirQualityComponents,
    AirQualityItem,
    AlertSeverity,
    AlertUrgency,
    AqiCategory,
    Trend,
    WeatherAlert,
)
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="analysis")


# ---------------------------------------------------------------------------
# Aggregate statistics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SeriesStats:
    """Mean/min/max over a non-empty numeric series."""
    mean: float
    minimum: float
    maximum: float
    count: int


def summarize(values: Sequence[float]) -> SeriesStats | None:
    """Return mean/min/max for the series, or None when it is empty."""
    if not values:
        return None
    return SeriesStats(
        mean=sum(values) / len(values),
        minimum=min(values),
        maximum=max(values),
        count=len(values),
    )


def round_half_up(value: float) -> int:
    """Round .5 away from zero on the positive side (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def classify_trend(values: Sequence[float], *, higher_is_worse: bool = True) -> Trend:
    """
    Classify the direction of a time-ordered series by its last minus first value.

    Only an exact zero delta counts as stable; any nonzero change, however
    small, is reported as improving or worsening. Fewer than two points give
    UNKNOWN.
    """
    if len(values) < 2:
        return Trend.UNKNOWN
    delta = values[-1] - values[0]
    if delta == 0:
        return Trend.STABLE
    rising = delta > 0
    return Trend.WORSENING if rising == higher_is_worse else Trend.IMPROVING


def most_common(values: Iterable[str | None]) -> str | None:
    """Most frequent non-empty value; ties go to the value seen first."""
    counts = Counter(v for v in values if v)
    if not counts:
        return None
    return counts.most_common(1)[0][0]


# ---------------------------------------------------------------------------
# Air quality
# ---------------------------------------------------------------------------

AQI_CATEGORIES: Dict[int, AqiCategory] = {
    1: AqiCategory.EXCELLENT,
    2: AqiCategory.GOOD,
    3: AqiCategory.MODERATE,
    4: AqiCategory.POOR,
    5: AqiCategory.VERY_POOR,
}

AQI_MARKERS: Dict[AqiCategory, str] = {
    AqiCategory.EXCELLENT: "🟢",
    AqiCategory.GOOD: "🟡",
    AqiCategory.MODERATE: "🟠",
    AqiCategory.POOR: "🔴",
    AqiCategory.VERY_POOR: "🟣",
    AqiCategory.UNKNOWN: "⚪",
}


def aqi_category(aqi: int | None) -> AqiCategory:
    """Map the provider AQI (1-5) to a category; anything else is UNKNOWN."""
    return AQI_CATEGORIES.get(aqi, AqiCategory.UNKNOWN)


def aqi_marker(aqi: int | None) -> str:
    """Colored marker for the AQI category."""
    return AQI_MARKERS[aqi_category(aqi)]


@dataclass(frozen=True)
class PollutantThreshold:
    """Reference concentration (μg/m³) above which a pollutant is flagged."""
    label: str
    field: str
    threshold: float


POLLUTANT_THRESHOLDS: Tuple[PollutantThreshold, ...] = (
    PollutantThreshold("PM2.5", "pm2_5", 25.0),
    PollutantThreshold("PM10", "pm10", 50.0),
    PollutantThreshold("O₃", "o3", 100.0),
    PollutantThreshold("NO₂", "no2", 40.0),
    PollutantThreshold("SO₂", "so2", 20.0),
    PollutantThreshold("CO", "co", 10000.0),
)


@dataclass(frozen=True)
class PrimaryPollutant:
    label: str
    value: float
    threshold: float

    @property
    def ratio(self) -> float:
        return self.value / self.threshold


def primary_pollutant(components: AirQualityComponents) -> PrimaryPollutant | None:
    """
    Pick the pollutant with the largest value/threshold ratio among those
    strictly above their threshold. None when nothing exceeds.
    """
    best: PrimaryPollutant | None = None
    for spec in POLLUTANT_THRESHOLDS:
        value = getattr(components, spec.field)
        if value <= spec.threshold:
            continue
        candidate = PrimaryPollutant(spec.label, value, spec.threshold)
        if best is None or candidate.ratio > best.ratio:
            best = candidate
    return best


def average_components(items: Sequence[AirQualityItem]) -> AirQualityComponents | None:
    """Per-pollutant mean over the samples, or None for an empty list."""
    if not items:
        return None
    fields = AirQualityComponents.model_fields.keys()
    count = len(items)
    return AirQualityComponents(
        **{f: sum(getattr(i.components, f) for i in items) / count for f in fields}
    )


# ---------------------------------------------------------------------------
# Weather alerts
# ---------------------------------------------------------------------------


class SeverityKeywords(BaseModel):
    """Keyword lists per severity, keyed by language code."""

    model_config = ConfigDict(extra="forbid")

    extreme: Dict[str, List[str]] = Field(default_factory=dict)
    severe: Dict[str, List[str]] = Field(default_factory=dict)
    moderate: Dict[str, List[str]] = Field(default_factory=dict)

    def for_severity(self, severity: AlertSeverity) -> List[str]:
        """Lower-cased keywords for one severity, across every language."""
        table: Dict[str, List[str]] = getattr(self, severity.value)
        return [kw.lower() for words in table.values() for kw in words]

    def merged(self, other: "SeverityKeywords") -> "SeverityKeywords":
        """Return a table with `other`'s keywords appended per language."""
        data = self.model_dump()
        for severity, by_lang in other.model_dump().items():
            for lang, words in by_lang.items():
                existing = data[severity].setdefault(lang, [])
                existing.extend(w for w in words if w not in existing)
        return SeverityKeywords.model_validate(data)


DEFAULT_SEVERITY_KEYWORDS = SeverityKeywords(
    extreme={
        "en": ["extreme", "emergency"],
        "zh_cn": ["极端", "严重"],
        "es": ["extremo", "extrema"],
        "fr": ["extrême"],
        "de": ["extrem"],
    },
    severe={
        "en": ["severe"],
        "zh_cn": ["重大", "危险"],
        "es": ["severo", "severa"],
        "fr": ["sévère"],
        "de": ["schwer", "unwetter"],
    },
    moderate={
        "en": ["moderate"],
        "zh_cn": ["中等", "注意"],
        "es": ["moderado", "moderada"],
        "fr": ["modéré", "modérée"],
        "de": ["mäßig", "markant"],
    },
)

# Checked in this order; the first severity with a keyword hit wins.
SEVERITY_ORDER: Tuple[AlertSeverity, ...] = (
    AlertSeverity.EXTREME,
    AlertSeverity.SEVERE,
    AlertSeverity.MODERATE,
)

SEVERITY_RANK: Dict[AlertSeverity, int] = {
    AlertSeverity.EXTREME: 4,
    AlertSeverity.SEVERE: 3,
    AlertSeverity.MODERATE: 2,
    AlertSeverity.MINOR: 1,
}

SEVERITY_MARKERS: Dict[AlertSeverity, str] = {
    AlertSeverity.EXTREME: "🔴",
    AlertSeverity.SEVERE: "🟠",
    AlertSeverity.MODERATE: "🟡",
    AlertSeverity.MINOR: "🟢",
}


def load_severity_keywords(path: str | Path | None) -> SeverityKeywords:
    """
    Return the built-in keyword table, extended with a JSON file if given.

    The file uses the same shape as SeverityKeywords, e.g.
    {"severe": {"it": ["grave"]}, "extreme": {"it": ["estremo"]}}.
    """
    if not path:
        return DEFAULT_SEVERITY_KEYWORDS
    extra = SeverityKeywords.model_validate_json(Path(path).read_text(encoding="utf-8"))
    logger.info(f"Loaded alert severity keywords from {path}")
    return DEFAULT_SEVERITY_KEYWORDS.merged(extra)


def classify_alert_severity(
    alert: WeatherAlert,
    keywords: SeverityKeywords = DEFAULT_SEVERITY_KEYWORDS,
) -> AlertSeverity:
    """
    Heuristic severity from keywords in the event name and description.

    Alert text is published in the issuing agency's language whatever `lang`
    the caller asked for, so every locale in the table is checked.
    """
    text = f"{alert.event}\n{alert.description}".lower()
    for severity in SEVERITY_ORDER:
        if any(kw in text for kw in keywords.for_severity(severity)):
            return severity
    return AlertSeverity.MINOR


def alert_urgency(alert: WeatherAlert, now: float | None = None) -> AlertUrgency:
    """Bucket an alert by how long until it starts."""
    now = time.time() if now is None else now
    until_start = alert.start - now
    if until_start <= 0:
        return AlertUrgency.EFFECTIVE_NOW
    if until_start <= 3600:
        return AlertUrgency.WITHIN_1H
    if until_start <= 6 * 3600:
        return AlertUrgency.WITHIN_6H
    if until_start <= 24 * 3600:
        return AlertUrgency.WITHIN_24H
    return AlertUrgency.LATER


def sort_alerts(
    alerts: Sequence[WeatherAlert],
    keywords: SeverityKeywords = DEFAULT_SEVERITY_KEYWORDS,
) -> List[Tuple[WeatherAlert, AlertSeverity]]:
    """Most severe first; alerts of equal severity keep provider order."""
    ranked = [(alert, classify_alert_severity(alert, keywords)) for alert in alerts]
    return sorted(ranked, key=lambda pair: SEVERITY_RANK[pair[1]], reverse=True)


@dataclass(frozen=True)
class HazardAdvice:
    """Advice for one hazard. English keywords match the event name only;
    localized keywords match the description."""
    hazard: str
    event_keywords: Tuple[str, ...]
    description_keywords: Tuple[str, ...]
    advice: Tuple[str, ...]

    def matches(self, alert: WeatherAlert) -> bool:
        event = alert.event.lower()
        description = alert.description.lower()
        return any(kw in event for kw in self.event_keywords) or any(
            kw in description for kw in self.description_keywords
        )


HAZARD_ADVICE: Tuple[HazardAdvice, ...] = (
    HazardAdvice(
        "storm",
        ("storm", "thunder"),
        ("雷暴",),
        (
            "Avoid outdoor activity; stay away from tall structures and trees",
            "Unplug electrical appliances and avoid landline phones",
            "If outdoors, shelter in a sturdy building",
        ),
    ),
    HazardAdvice(
        "wind",
        ("wind", "gale"),
        ("大风", "风暴"),
        (
            "Secure doors and windows and bring loose objects indoors",
            "Avoid walking near high-rises and billboards",
            "Watch for crosswinds when driving",
        ),
    ),
    HazardAdvice(
        "flood",
        ("rain", "flood"),
        ("暴雨", "洪水"),
        (
            "Avoid low-lying areas and underground spaces",
            "Do not walk or drive through flood water",
            "Prepare emergency supplies and drinking water",
        ),
    ),
    HazardAdvice(
        "snow",
        ("snow", "ice", "blizzard"),
        ("暴雪", "冰雹"),
        (
            "Limit travel and keep warm",
            "Drive slowly and carry snow chains",
            "Clear heavy snow from roofs",
        ),
    ),
    HazardAdvice(
        "heat",
        ("heat",),
        ("高温", "热浪"),
        (
            "Avoid prolonged outdoor activity",
            "Drink plenty of water to prevent heat stroke",
            "Check on elderly people and children",
        ),
    ),
    HazardAdvice(
        "cold",
        ("cold", "freeze", "frost"),
        ("寒潮", "低温"),
        (
            "Dress warmly to prevent frostbite",
            "Check heaters and watch for carbon monoxide",
            "Protect water pipes from freezing",
        ),
    ),
)

GENERIC_ADVICE: Tuple[str, ...] = (
    "Follow weather updates and official notices closely",
    "Keep emergency supplies ready and stay reachable",
    "Follow guidance from local authorities and the weather service",
)


def safety_advice(alert: WeatherAlert) -> List[str]:
    """Advice lines for every hazard mentioned by the alert, or generic advice."""
    advice: List[str] = []
    for entry in HAZARD_ADVICE:
        if entry.matches(alert):
            advice.extend(entry.advice)
    return advice or list(GENERIC_ADVICE)


# ---------------------------------------------------------------------------
# Wind
# ---------------------------------------------------------------------------

COMPASS_POINTS: Tuple[str, ...] = (
    "N", "NNE", "NE", "ENE",
    "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW",
    "W", "WNW", "NW", "NNW",
)


def wind_direction(deg: float | None) -> str:
    """16-point compass label for a bearing in degrees."""
    if deg is None:
        return ""
    return COMPASS_POINTS[round_half_up(deg / 22.5) % 16]

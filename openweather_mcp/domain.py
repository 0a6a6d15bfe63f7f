"""Domain vocabulary and typed provider schemas for OpenWeatherMap responses.

Every JSON payload returned by OpenWeatherMap is validated into one of the
frozen models below before any formatter sees it, so a change in the provider
schema only touches this module. Unknown provider fields are ignored; optional
provider fields (rain, snow, uvi, gust, visibility...) are explicit Optionals.
No interpretation logic lives here.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class _ProviderModel(BaseModel):
    """Immutable record deserialized from a provider payload."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Units(str, Enum):
    """Unit system passed through to the provider."""
    STANDARD = "standard"
    METRIC = "metric"
    IMPERIAL = "imperial"


class Language(str, Enum):
    """Language codes the provider localizes descriptions into."""
    ZH_CN = "zh_cn"
    EN = "en"
    ES = "es"
    FR = "fr"
    DE = "de"
    JA = "ja"
    KO = "ko"
    RU = "ru"


class MapLayer(str, Enum):
    """Weather map tile layers."""
    CLOUDS = "clouds_new"
    PRECIPITATION = "precipitation_new"
    PRESSURE = "pressure_new"
    WIND = "wind_new"
    TEMPERATURE = "temp_new"


class Trend(str, Enum):
    """Trend direction for a measure over time."""
    IMPROVING = "improving"
    STABLE = "stable"
    WORSENING = "worsening"
    UNKNOWN = "unknown"


class AqiCategory(str, Enum):
    """Provider AQI (1-5) as a labelled category."""
    EXCELLENT = "excellent"
    GOOD = "good"
    MODERATE = "moderate"
    POOR = "poor"
    VERY_POOR = "very poor"
    UNKNOWN = "unknown"


class AlertSeverity(str, Enum):
    """Heuristic severity assigned to a weather alert."""
    EXTREME = "extreme"
    SEVERE = "severe"
    MODERATE = "moderate"
    MINOR = "minor"


class AlertUrgency(str, Enum):
    """Time-until-start buckets for a weather alert."""
    EFFECTIVE_NOW = "effective now"
    WITHIN_1H = "within 1 hour"
    WITHIN_6H = "within 6 hours"
    WITHIN_24H = "within 24 hours"
    LATER = "more than 24 hours away"


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class LocationQuery(_ProviderModel):
    """One of: city name, lat/lon pair, or postal code (plus optional country)."""
    city: str | None = None
    lat: float | None = None
    lon: float | None = None
    zip: str | None = None
    country: str | None = None


class TileCoordinate(_ProviderModel):
    """Slippy-map tile address."""
    x: int
    y: int
    zoom: int


class TileBounds(_ProviderModel):
    """Geographic box covered by a tile, in degrees."""
    north: float
    south: float
    east: float
    west: float

    def contains(self, lat: float, lon: float) -> bool:
        """Return True if the point lies inside (or on the edge of) the box."""
        return self.south <= lat <= self.north and self.west <= lon <= self.east


# ---------------------------------------------------------------------------
# Shared provider fragments
# ---------------------------------------------------------------------------


class Coordinates(_ProviderModel):
    lat: float
    lon: float


class WeatherCondition(_ProviderModel):
    id: int | None = None
    main: str = ""
    description: str = ""
    icon: str = ""


class MainWeatherData(_ProviderModel):
    temp: float
    feels_like: float
    temp_min: float | None = None
    temp_max: float | None = None
    pressure: float
    humidity: float
    sea_level: float | None = None
    grnd_level: float | None = None


class Wind(_ProviderModel):
    speed: float
    deg: float | None = None
    gust: float | None = None


class Clouds(_ProviderModel):
    all: float


class Precipitation(_ProviderModel):
    """Rain or snow volume for the last 1h/3h, in mm."""
    one_hour: float | None = Field(default=None, alias="1h")
    three_hour: float | None = Field(default=None, alias="3h")

    def first_value(self) -> float | None:
        """Return whichever volume is present, preferring the 1h reading."""
        return self.one_hour if self.one_hour is not None else self.three_hour


# ---------------------------------------------------------------------------
# Current weather
# ---------------------------------------------------------------------------


class CurrentSys(_ProviderModel):
    country: str = ""
    sunrise: int | None = None
    sunset: int | None = None


class CurrentWeatherResponse(_ProviderModel):
    """GET /data/2.5/weather"""
    coord: Coordinates
    weather: List[WeatherCondition] = Field(default_factory=list)
    main: MainWeatherData
    visibility: float | None = None
    wind: Wind
    clouds: Clouds
    rain: Precipitation | None = None
    snow: Precipitation | None = None
    dt: int
    sys: CurrentSys = Field(default_factory=CurrentSys)
    timezone: int = 0
    id: int | None = None
    name: str = ""


# ---------------------------------------------------------------------------
# Forecast
# ---------------------------------------------------------------------------


class ForecastItem(_ProviderModel):
    dt: int
    main: MainWeatherData
    weather: List[WeatherCondition] = Field(default_factory=list)
    clouds: Clouds
    wind: Wind
    visibility: float | None = None
    pop: float = Field(default=0.0, ge=0.0, le=1.0)
    rain: Precipitation | None = None
    snow: Precipitation | None = None
    dt_txt: str | None = None


class City(_ProviderModel):
    id: int | None = None
    name: str = ""
    coord: Coordinates
    country: str = ""
    population: int | None = None
    timezone: int = 0
    sunrise: int | None = None
    sunset: int | None = None


class ForecastResponse(_ProviderModel):
    """GET /data/2.5/forecast"""
    cnt: int = 0
    items: List[ForecastItem] = Field(default_factory=list, alias="list")
    city: City


# ---------------------------------------------------------------------------
# Air quality
# ---------------------------------------------------------------------------


class AirQualityComponents(_ProviderModel):
    """Pollutant concentrations, μg/m³."""
    co: float = 0.0
    no: float = 0.0
    no2: float = 0.0
    o3: float = 0.0
    so2: float = 0.0
    pm2_5: float = 0.0
    pm10: float = 0.0
    nh3: float = 0.0


class AirQualityMain(_ProviderModel):
    aqi: int


class AirQualityItem(_ProviderModel):
    dt: int
    main: AirQualityMain
    components: AirQualityComponents = Field(default_factory=AirQualityComponents)


class AirQualityResponse(_ProviderModel):
    """GET /data/2.5/air_pollution[/history|/forecast]"""
    coord: Coordinates
    items: List[AirQualityItem] = Field(default_factory=list, alias="list")


# ---------------------------------------------------------------------------
# One Call (alerts, historical)
# ---------------------------------------------------------------------------


class WeatherAlert(_ProviderModel):
    sender_name: str = ""
    event: str = ""
    start: int
    end: int
    description: str = ""
    tags: List[str] = Field(default_factory=list)


class HourlyObservation(_ProviderModel):
    """Flat weather reading used by One Call `current` and timemachine `data`."""
    dt: int
    sunrise: int | None = None
    sunset: int | None = None
    temp: float
    feels_like: float
    pressure: float
    humidity: float
    dew_point: float | None = None
    uvi: float | None = None
    clouds: float | None = None
    visibility: float | None = None
    wind_speed: float
    wind_deg: float | None = None
    wind_gust: float | None = None
    weather: List[WeatherCondition] = Field(default_factory=list)
    rain: Precipitation | None = None
    snow: Precipitation | None = None


class OneCallResponse(_ProviderModel):
    """GET /data/3.0/onecall"""
    lat: float
    lon: float
    timezone: str = "UTC"
    timezone_offset: int = 0
    current: HourlyObservation | None = None
    alerts: List[WeatherAlert] = Field(default_factory=list)


class HistoricalWeatherResponse(_ProviderModel):
    """GET /data/3.0/onecall/timemachine"""
    lat: float
    lon: float
    timezone: str = "UTC"
    timezone_offset: int = 0
    data: List[HourlyObservation] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Geocoding
# ---------------------------------------------------------------------------


class GeocodeResult(_ProviderModel):
    """GET /geo/1.0/direct and /geo/1.0/reverse items."""
    name: str
    local_names: Dict[str, str] | None = None
    lat: float
    lon: float
    country: str = ""
    state: str | None = None

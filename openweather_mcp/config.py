"""Application configuration pulled from environment variables via pydantic."""
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the openweather-mcp server."""
    model_config = SettingsConfigDict(env_prefix="OPENWEATHER_", extra="ignore")

    api_key: str | None = None
    base_url: str = "https://api.openweathermap.org/data/2.5"
    one_call_base_url: str = "https://api.openweathermap.org/data/3.0"
    geo_base_url: str = "https://api.openweathermap.org/geo/1.0"
    tile_base_url: str = "https://tile.openweathermap.org/map"
    request_timeout_seconds: float = 10.0
    default_units: Literal["standard", "metric", "imperial"] = "metric"
    default_lang: Literal["zh_cn", "en", "es", "fr", "de", "ja", "ko", "ru"] = "en"
    alert_keywords_path: str | None = None
    transport: Literal["stdio", "sse", "streamable-http"] = "stdio"
    log_level: str = "INFO"
    skip_key_check: bool = False

    @field_validator("base_url", "one_call_base_url", "geo_base_url", "tile_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'api_key'})}")

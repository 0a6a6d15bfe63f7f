"""Startup validation of the OpenWeatherMap API key."""

import sys
from typing import Any, Dict

from openweather_mcp.data_sources import WeatherDataSource
from openweather_mcp.domain import LocationQuery
from openweather_mcp.errors import NetworkError, UpstreamApiError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="check_api_key")

VALIDATION_QUERY = LocationQuery(city="London")


def get_api_key_status(client: WeatherDataSource) -> Dict[str, Any]:
    """
    Non-fatal check: fetch current weather for London with the configured key.

    Returns a dict like:
    {
      "ok": bool,
      "reachable": bool,     # the provider answered at all
      "key_valid": bool,     # the provider accepted the key
      "code": ...,           # provider error code, if any
      "error": "...",        # present if something went wrong
    }

    This NEVER sys.exit(). Suitable for health checks.
    """
    status: Dict[str, Any] = {
        "ok": False,
        "reachable": False,
        "key_valid": False,
        "code": None,
        "error": None,
    }

    try:
        client.get_current_weather(VALIDATION_QUERY)
    except NetworkError as e:
        status["error"] = str(e)
        return status
    except UpstreamApiError as e:
        status["reachable"] = True
        status["code"] = e.code
        status["error"] = str(e)
        return status

    status["reachable"] = True
    status["key_valid"] = True
    status["ok"] = True
    return status


def check_api_key(client: WeatherDataSource) -> None:
    """
    "Hard" check for startup. Fails with sys.exit(1) unless the validation
    request succeeds.
    """
    status = get_api_key_status(client)

    if status["ok"]:
        logger.info("OpenWeatherMap API key validated")
        return

    if not status["reachable"]:
        logger.error("\nERROR: OpenWeatherMap could not be reached while validating the API key.")
    else:
        logger.error(f"\nERROR: OpenWeatherMap rejected the API key validation request (code {status['code']}).")
    if status["error"]:
        logger.error(f"   Details: {status['error']}")
    logger.error("\n   Check OPENWEATHER_API_KEY. New keys can take a couple of hours to activate.\n"
                 "   Get a key at https://openweathermap.org/api\n"
                 "   Set OPENWEATHER_SKIP_KEY_CHECK=true to bypass this check during development.")
    sys.exit(1)

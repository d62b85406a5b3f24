import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

from src.utils.logger import get_logger


DEFAULT_PORT = 3000
DEFAULT_TIMEOUT = 30
DEFAULT_SERP_URL = "https://serpapi.com/search"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    serp_api_key: Optional[str] = None
    serp_api_url: str = DEFAULT_SERP_URL
    currency: str = "INR"
    locale: str = "en"
    request_timeout: int = DEFAULT_TIMEOUT
    round_trip_enabled: bool = True
    empty_results_as_failure: bool = False
    sort_by_price: bool = True
    debug: bool = False

    @property
    def serp_configured(self) -> bool:
        return bool(self.serp_api_key)


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        get_logger("config").warning(f"Invalid {name}={raw!r}, using {default}")
        return default


def load_settings() -> Settings:
    load_dotenv()

    # An absent key is reported by /health and per search, never raised here
    key = (os.getenv("SERP_API_KEY") or "").strip() or None

    return Settings(
        port=_int("PORT", DEFAULT_PORT),
        host=os.getenv("HOST", "0.0.0.0"),
        serp_api_key=key,
        serp_api_url=os.getenv("SERP_API_URL", DEFAULT_SERP_URL),
        currency=os.getenv("FLIGHTS_CURRENCY", "INR").strip().upper() or "INR",
        locale=os.getenv("FLIGHTS_LOCALE", "en").strip() or "en",
        request_timeout=_int("REQUEST_TIMEOUT", DEFAULT_TIMEOUT),
        round_trip_enabled=_flag("ROUND_TRIP_ENABLED", True),
        empty_results_as_failure=_flag("EMPTY_RESULTS_AS_FAILURE", False),
        sort_by_price=_flag("SORT_BY_PRICE", True),
        debug=os.getenv("APP_ENV", "production").strip().lower() == "development",
    )

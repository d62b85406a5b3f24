"""Google Flights (SerpApi) adapter for the Flight MCP Agent.

Maps a search request onto the provider's query vocabulary and returns the
decoded JSON body untouched. All flattening happens in FlightTools so it can
be exercised against synthetic fixtures.
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

import httpx

from src.utils.config import Settings
from src.utils.logger import get_logger


ENGINE = "google_flights"

# SerpApi trip type flag
ROUND_TRIP = "1"
ONE_WAY = "2"


class ProviderError(Exception):
    """Upstream failure: transport, timeout, HTTP status or unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details

    @property
    def provider_message(self) -> Optional[str]:
        if isinstance(self.details, dict) and self.details.get("error"):
            return str(self.details["error"])
        return None


class ProviderClient(Protocol):
    def search(
        self,
        origin: str,
        destination: str,
        departure_date: str,
        return_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        ...


class GoogleFlightsProvider:
    """Synchronous SerpApi client; one GET per search, no retries."""

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None):
        self.settings = settings
        self.logger = get_logger("flight_provider")
        self._client = client

    def build_params(
        self,
        origin: str,
        destination: str,
        departure_date: str,
        return_date: Optional[str] = None,
    ) -> Dict[str, str]:
        params = {
            "engine": ENGINE,
            "departure_id": origin,
            "arrival_id": destination,
            "outbound_date": departure_date,
            "type": ROUND_TRIP if return_date else ONE_WAY,
            "currency": self.settings.currency,
            "hl": self.settings.locale,
            "api_key": self.settings.serp_api_key or "",
        }
        if return_date:
            params["return_date"] = return_date
        return params

    def search(
        self,
        origin: str,
        destination: str,
        departure_date: str,
        return_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = self.build_params(origin, destination, departure_date, return_date)
        safe = {**params, "api_key": "***"}
        self.logger.info(f"Calling SerpApi: {safe}")

        client = self._client or httpx.Client(timeout=self.settings.request_timeout)
        try:
            resp = client.get(self.settings.serp_api_url, params=params)
        except httpx.TimeoutException as e:
            raise ProviderError(f"Request to flight provider timed out after {self.settings.request_timeout}s") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Flight provider request failed: {e}") from e
        finally:
            if self._client is None:
                client.close()

        self.logger.info(f"SerpApi response received, status: {resp.status_code}")
        data = self._decode(resp)

        if resp.is_error:
            raise ProviderError(
                f"Flight provider returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                details=data,
            )
        if not isinstance(data, dict):
            raise ProviderError("Flight provider returned a malformed response", status_code=resp.status_code, details=data)
        # SerpApi reports some failures (bad airport code, no quota) with a 200 and an error field
        if data.get("error"):
            raise ProviderError(str(data["error"]), status_code=resp.status_code, details=data)
        return data

    def _decode(self, resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            if resp.is_error:
                return resp.text or None
            raise ProviderError(
                "Flight provider returned a non-JSON response",
                status_code=resp.status_code,
                details=resp.text[:500] or None,
            )

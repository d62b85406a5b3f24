"""
Pytest configuration and shared fixtures for the flight relay tests.
"""

import os
from typing import Any, Dict, List, Optional

import pytest

# Keep a developer's .env from leaking a real key into tests
os.environ.setdefault("SERP_API_KEY", "")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from src.utils.config import Settings
from src.agents.flight_agent.provider import ProviderError


class FakeProvider:
    """Records every search call and returns a canned body or raises."""

    def __init__(self, response: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.response = response if response is not None else {}
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def search(self, origin, destination, departure_date, return_date=None):
        self.calls.append({
            "origin": origin,
            "destination": destination,
            "departure_date": departure_date,
            "return_date": return_date,
        })
        if self.error is not None:
            raise self.error
        return self.response


def make_leg(dep="BOM", arr="DEL", airline="IndiGo", number="6E 2131",
             dep_time="2026-01-15 06:00", arr_time="2026-01-15 08:10", duration=130):
    return {
        "airline": airline,
        "flight_number": number,
        "departure_airport": {"id": dep, "time": dep_time},
        "arrival_airport": {"id": arr, "time": arr_time},
        "duration": duration,
    }


@pytest.fixture
def settings():
    return Settings(serp_api_key="test-key", sort_by_price=False)


@pytest.fixture
def unconfigured_settings():
    return Settings(serp_api_key=None)


@pytest.fixture
def single_best_response():
    return {
        "best_flights": [
            {"flights": [make_leg()], "price": 5000, "carbon_emissions": {"this_flight": 98000}},
        ],
        "price_insights": {"lowest_price": 5000, "price_level": "typical"},
    }


@pytest.fixture
def fake_provider(single_best_response):
    return FakeProvider(single_best_response)


@pytest.fixture
def failing_provider():
    return FakeProvider(error=ProviderError(
        "Flight provider returned HTTP 401",
        status_code=401,
        details={"error": "Invalid API key."},
    ))

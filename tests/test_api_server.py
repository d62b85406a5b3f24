"""
Tests for the FastAPI relay surface.
"""

import re

import pytest
from fastapi.testclient import TestClient

from conftest import FakeProvider
from src.utils.config import Settings
from src.api.server import create_app


TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")
BOM_DEL = {"origin": "BOM", "destination": "DEL", "departure_date": "2026-01-15"}


@pytest.fixture
def client(settings, fake_provider):
    return TestClient(create_app(settings, provider=fake_provider))


class TestInfoEndpoints:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Google Flights MCP Server"
        assert data["status"] == "running"
        assert data["version"] == "1.0.0"
        assert data["port"] == 3000
        assert data["endpoints"] == {
            "root": "GET /",
            "health": "GET /health",
            "execute": "POST /execute-tool",
        }
        assert TIMESTAMP.match(data["timestamp"])

    def test_health_configured(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["serp_configured"] is True
        assert data["cors_enabled"] is True
        assert TIMESTAMP.match(data["timestamp"])

    def test_health_reports_missing_credential(self, unconfigured_settings):
        client = TestClient(create_app(unconfigured_settings, provider=FakeProvider()))
        assert client.get("/health").json()["serp_configured"] is False


class TestExecuteTool:
    def test_search_success(self, client):
        response = client.post("/execute-tool", json={"tool": "search_flights", "parameters": BOM_DEL})
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["route"] == "BOM to DEL"
        assert data["total_results"] == 1
        assert data["flights"][0]["type"] == "best"
        assert data["flights"][0]["price"] == 5000
        assert data["flights"][0]["stops"] == 0

    def test_upstream_failure_returns_200_envelope(self, settings, failing_provider):
        client = TestClient(create_app(settings, provider=failing_provider))
        response = client.post("/execute-tool", json={"tool": "search_flights", "parameters": BOM_DEL})
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["error"]
        assert all(part in data["fallback_message"] for part in ("BOM", "DEL", "2026-01-15"))

    def test_unknown_tool(self, client):
        response = client.post("/execute-tool", json={"tool": "search_hotels", "parameters": {}})
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Unknown tool: search_hotels",
            "available_tools": ["search_flights"],
        }

    def test_missing_parameters_echoes_body(self, client):
        response = client.post("/execute-tool", json={"tool": "search_flights"})
        assert response.status_code == 400
        assert response.json()["received"] == {"tool": "search_flights"}

    def test_missing_search_field_is_400(self, client, fake_provider):
        response = client.post(
            "/execute-tool",
            json={"tool": "search_flights", "parameters": {"origin": "BOM", "destination": "DEL"}},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert fake_provider.calls == []

    def test_invalid_json_is_400(self, client):
        response = client.post(
            "/execute-tool",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == 'Missing "tool" parameter'

    def test_internal_fault_is_generic_500(self, settings):
        class Exploding:
            def search(self, *args, **kwargs):
                raise RuntimeError("secret internals")

        client = TestClient(create_app(settings, provider=Exploding()))
        response = client.post("/execute-tool", json={"tool": "search_flights", "parameters": BOM_DEL})
        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Internal server error"}

    def test_internal_fault_detail_only_in_debug(self):
        class Exploding:
            def search(self, *args, **kwargs):
                raise RuntimeError("secret internals")

        cfg = Settings(serp_api_key="k", debug=True)
        client = TestClient(create_app(cfg, provider=Exploding()))
        response = client.post("/execute-tool", json={"tool": "search_flights", "parameters": BOM_DEL})
        assert response.status_code == 500
        assert response.json()["message"] == "secret internals"


class TestRoutingAndCors:
    def test_unknown_route(self, client):
        response = client.get("/flights")
        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "Route not found"
        assert data["method"] == "GET"
        assert data["path"] == "/flights"
        assert set(data["available_routes"]) == {"GET /", "GET /health", "POST /execute-tool"}

    def test_wrong_method_uses_route_not_found(self, client):
        response = client.get("/execute-tool")
        assert response.status_code == 404
        assert response.json()["error"] == "Route not found"

    def test_preflight(self, client):
        response = client.options(
            "/execute-tool",
            headers={
                "Origin": "http://localhost:5500",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "POST" in response.headers["access-control-allow-methods"]
        assert response.headers["access-control-max-age"] == "86400"

    def test_simple_request_allows_any_origin(self, client):
        response = client.get("/health", headers={"Origin": "https://example.org"})
        assert response.headers["access-control-allow-origin"] == "*"

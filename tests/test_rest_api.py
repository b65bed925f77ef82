"""
Tests for the REST convenience and liveness endpoints.
"""
import re

import pytest

from mcp_servers.demo_server import DAD_JOKES
from mcp_servers.rest_api import ADD_USAGE_ERROR, parse_int_param

METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "TRACE", "PROPFIND"]


class TestLiveness:
    """Test /health and /ready."""

    @pytest.mark.parametrize("method", METHODS)
    def test_health_any_method(self, rest_client, method):
        response = rest_client.request(method, "/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "mcp-demo"
        assert data["version"] == "0.0.1"
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z", data["time"])

    @pytest.mark.parametrize("method", METHODS)
    def test_ready_any_method(self, rest_client, method):
        response = rest_client.request(method, "/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_request_id_header(self, rest_client):
        response = rest_client.get("/health", headers={"x-request-id": "req-42"})
        assert response.headers["x-request-id"] == "req-42"

    def test_request_id_generated(self, rest_client):
        response = rest_client.get("/ready")
        assert response.headers["x-request-id"]


class TestJoke:
    """Test /api/joke."""

    def test_returns_joke_from_pool(self, rest_client):
        response = rest_client.get("/api/joke")
        assert response.status_code == 200
        assert response.json()["joke"] in DAD_JOKES

    def test_post_also_works(self, rest_client):
        response = rest_client.post("/api/joke")
        assert response.status_code == 200
        assert set(response.json()) == {"joke"}

    @pytest.mark.parametrize("method", METHODS)
    def test_any_method(self, rest_client, method):
        response = rest_client.request(method, "/api/joke")
        assert response.status_code == 200
        assert response.json()["joke"] in DAD_JOKES


class TestAdd:
    """Test /api/add."""

    def test_adds_query_integers(self, rest_client):
        response = rest_client.get("/api/add?a=5&b=3")
        assert response.status_code == 200
        assert response.json() == {"a": 5, "b": 3, "result": 8}

    @pytest.mark.parametrize("method", METHODS)
    def test_any_method(self, rest_client, method):
        response = rest_client.request(method, "/api/add?a=5&b=3")
        assert response.status_code == 200
        assert response.json() == {"a": 5, "b": 3, "result": 8}

    def test_repeated_key_uses_first_value(self, rest_client):
        response = rest_client.get("/api/add?a=1&a=2&b=3&b=9")
        assert response.status_code == 200
        assert response.json() == {"a": 1, "b": 3, "result": 4}

    def test_repeated_key_first_value_invalid(self, rest_client):
        response = rest_client.get("/api/add?a=x&a=2&b=3")
        assert response.status_code == 400
        assert response.json() == {"error": ADD_USAGE_ERROR}

    def test_signed_integers(self, rest_client):
        response = rest_client.get("/api/add", params={"a": "-7", "b": "+2"})
        assert response.status_code == 200
        assert response.json() == {"a": -7, "b": 2, "result": -5}

    @pytest.mark.parametrize("query", [
        "a=foo&b=3",
        "a=5",
        "b=3",
        "",
        "a=2.5&b=3",
        "a=&b=3",
        "a=1_000&b=3",
        "a=%205&b=3",
        "a=9223372036854775808&b=1",
    ])
    def test_invalid_parameters(self, rest_client, query):
        response = rest_client.get(f"/api/add?{query}")
        assert response.status_code == 400
        assert response.json() == {"error": ADD_USAGE_ERROR}


@pytest.mark.parametrize("value,expected", [
    ("0", 0),
    ("42", 42),
    ("-42", -42),
    ("+42", 42),
    ("007", 7),
    ("9223372036854775807", 2 ** 63 - 1),
    ("-9223372036854775808", -(2 ** 63)),
    (None, None),
    ("", None),
    ("4.0", None),
    ("1e3", None),
    (" 4", None),
    ("4 ", None),
    ("٤", None),
    ("+", None),
    ("9223372036854775808", None),
])
def test_parse_int_param(value, expected):
    assert parse_int_param(value) == expected

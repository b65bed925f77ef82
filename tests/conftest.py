"""
Pytest configuration and fixtures for the MCP demo server

Provides fixtures to:
1. Build a demo server with a fixed random seed
2. Serve the REST app and the composite HTTP app in-process
"""
import random
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from error_handling import ErrorHandlingConfig
from mcp_servers.config import ServerConfig
from mcp_servers.demo_server import DemoMCPServer
from mcp_servers.http_app import create_mcp_http_app
from mcp_servers.rest_api import create_rest_app


@pytest.fixture
def server():
    """Demo server whose joke selection is reproducible."""
    return DemoMCPServer(rng=random.Random(1234))


@pytest.fixture
def rest_client(server):
    """TestClient for the FastAPI app (REST, health and /mcp JSON-RPC)."""
    app = create_rest_app(server, ErrorHandlingConfig(enable_tracing=False))
    return TestClient(app)


@pytest.fixture
def server_config():
    return ServerConfig(mode="http", enable_tracing=False, json_response=True)


@pytest.fixture
def http_app(server, server_config):
    """Composite ASGI app serving every HTTP transport."""
    return create_mcp_http_app(server, server_config)


@pytest.fixture
def http_client(http_app):
    """TestClient without lifespan; enough for every route except Streamable HTTP."""
    return TestClient(http_app)


@pytest.fixture
def jsonrpc():
    """Build a JSON-RPC request body."""
    def _build(method, params=None, request_id=1):
        body = {"jsonrpc": "2.0", "id": request_id, "method": method}
        if params is not None:
            body["params"] = params
        return body
    return _build

"""
REST convenience and liveness endpoints.

These routes call the demo tools directly, bypassing MCP framing:

  ANY /health      -> static liveness payload
  ANY /ready       -> static readiness payload
  ANY /api/joke    -> {"joke": "..."}
  ANY /api/add     -> {"a": 5, "b": 3, "result": 8} for ?a=5&b=3
  POST /mcp        -> plain JSON-RPC, see mcp_servers.jsonrpc
"""

import re
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from error_handling import ErrorHandlingConfig, setup_app, trace_function
from mcp_servers.config import SERVICE_NAME, VERSION
from mcp_servers.demo_server import DemoMCPServer
from mcp_servers.jsonrpc import add_any_method_route, add_jsonrpc_route

logger = logging.getLogger("mcp_servers.rest_api")

ADD_USAGE_ERROR = "Invalid parameters. Use: /api/add?a=5&b=3"

# Decimal integer: optional sign, ASCII digits only
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1


def parse_int_param(value: Optional[str]) -> Optional[int]:
    """
    Parse a query-string integer, or return None.

    Only plain decimal integers fitting in a signed 64-bit value are accepted;
    floats, whitespace and digit separators are rejected.
    """
    if value is None or not _INTEGER_RE.fullmatch(value):
        return None
    number = int(value)
    if number < _INT64_MIN or number > _INT64_MAX:
        return None
    return number


def first_query_value(request: Request, key: str) -> Optional[str]:
    """First value of a repeated query parameter, or None when absent."""
    values = request.query_params.getlist(key)
    return values[0] if values else None


def utc_timestamp() -> str:
    """Current UTC time as RFC 3339 with second precision."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def create_rest_app(
    server: DemoMCPServer,
    config: Optional[ErrorHandlingConfig] = None,
) -> FastAPI:
    """Create the FastAPI app serving the REST, liveness and JSON-RPC routes."""
    app = FastAPI(
        title=f"{SERVICE_NAME} REST API",
        version=VERSION,
        description="REST and JSON-RPC access to the demo MCP tools",
    )
    app = setup_app(app, config or ErrorHandlingConfig(service_name=SERVICE_NAME, service_version=VERSION))
    app.state.server = server

    async def health(request: Request) -> Response:
        """Liveness probe."""
        return JSONResponse({
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": VERSION,
            "time": utc_timestamp(),
        })

    async def ready(request: Request) -> Response:
        """Readiness probe."""
        return JSONResponse({"status": "ready"})

    @trace_function()
    async def api_joke(request: Request) -> Response:
        return JSONResponse({"joke": server.random_joke()})

    @trace_function()
    async def api_add(request: Request) -> Response:
        a = parse_int_param(first_query_value(request, "a"))
        b = parse_int_param(first_query_value(request, "b"))
        if a is None or b is None:
            logger.debug(f"Rejected /api/add query: {request.url.query}")
            return JSONResponse(status_code=400, content={"error": ADD_USAGE_ERROR})
        return JSONResponse({"a": a, "b": b, "result": a + b})

    add_jsonrpc_route(app, server)
    add_any_method_route(app, "/health", health)
    add_any_method_route(app, "/ready", ready)
    add_any_method_route(app, "/api/joke", api_joke)
    add_any_method_route(app, "/api/add", api_add)

    return app

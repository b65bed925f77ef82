"""
Plain JSON-RPC over HTTP

A single POST endpoint that understands `tools/list` and `tools/call` without
any MCP session handshake. Useful for curl, load tests and API gateways that
cannot speak Streamable HTTP or SSE.

Responses:
- success: {"jsonrpc": "2.0", "id": ..., "result": {...}}
- dispatch errors: JSON-RPC error object, HTTP status from the error type
- unparseable or non-object body: plain {"error": "..."} with HTTP 400
- non-POST request, any method: plain {"error": "..."} with HTTP 405
- `null` body: treated as an empty request, so 501 method not found
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from opentelemetry import trace
from starlette.requests import ClientDisconnect
from starlette.types import Receive, Scope, Send

from error_handling import (
    MalformedRequestError,
    MethodNotAllowedError,
    MethodNotFoundError,
    ToolServerError,
    log_error,
    trace_span,
)
from mcp_servers.base import BaseMCPServer

logger = logging.getLogger("mcp_servers.jsonrpc")

RequestHandler = Callable[[Request], Awaitable[Response]]


class AnyMethodEndpoint:
    """ASGI endpoint answering every HTTP method with one request handler."""

    def __init__(self, handler: RequestHandler):
        self.handler = handler

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = await self.handler(Request(scope, receive))
        await response(scope, receive, send)


def add_any_method_route(app: FastAPI, path: str, handler: RequestHandler, name: Optional[str] = None) -> None:
    """Route `path` to `handler` for every HTTP method, including nonstandard ones."""
    # Starlette only enforces a method list on plain function endpoints
    app.add_route(path, AnyMethodEndpoint(handler), name=name or handler.__name__)


@trace_span("mcp.jsonrpc.dispatch", kind=trace.SpanKind.SERVER)
def dispatch(server: BaseMCPServer, message: Dict[str, Any]) -> Dict[str, Any]:
    """
    Execute one JSON-RPC request against the server's tool registry.

    Returns the full JSON-RPC success envelope; raises ToolServerError
    subclasses for anything the client got wrong.
    """
    request_id = message.get("id")
    method = message.get("method")
    if not isinstance(method, str):
        method = ""

    if method == "tools/list":
        result = {"tools": [tool.to_dict() for tool in server.get_tools()]}

    elif method == "tools/call":
        params = message.get("params")
        if not isinstance(params, dict):
            params = {}
        tool_name = params.get("name")
        if not isinstance(tool_name, str):
            tool_name = ""
        arguments = params.get("arguments")
        if not isinstance(arguments, dict):
            arguments = {}

        logger.debug(f"tools/call {tool_name} {arguments}")
        result = server.call_tool(tool_name, arguments).to_dict()

    else:
        raise MethodNotFoundError(method)

    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _plain_error(error: ToolServerError) -> JSONResponse:
    """Non JSON-RPC error body, used before a request id is known."""
    log_error(error, logger, level=logging.WARNING)
    return JSONResponse(status_code=error.status_code, content={"error": error.message})


def add_jsonrpc_route(app: FastAPI, server: BaseMCPServer, path: str = "/mcp") -> None:
    """Serve plain JSON-RPC for `server` at `path` on `app`."""

    async def jsonrpc_endpoint(request: Request) -> Response:
        if request.method != "POST":
            return _plain_error(MethodNotAllowedError())

        try:
            body = await request.body()
        except ClientDisconnect as e:
            return _plain_error(MalformedRequestError("Failed to read request body", cause=e))

        try:
            message = json.loads(body)
        except ValueError as e:
            return _plain_error(MalformedRequestError(cause=e))
        if message is None:
            # null decodes to an empty request, which has no method
            message = {}
        if not isinstance(message, dict):
            return _plain_error(MalformedRequestError())

        try:
            return JSONResponse(content=dispatch(server, message))
        except ToolServerError as e:
            log_error(
                e,
                logger,
                request_id=getattr(request.state, "request_id", ""),
                level=logging.WARNING if e.status_code < 500 else logging.ERROR,
            )
            return JSONResponse(status_code=e.status_code, content=e.to_jsonrpc(message.get("id")))

    add_any_method_route(app, path, jsonrpc_endpoint, name="jsonrpc")

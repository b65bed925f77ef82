"""
MCP HTTP Application Factory

Creates the ASGI application that serves every HTTP transport of a
BaseMCPServer from one port.

Architecture:
- FastMCP is generated from the server's tool registry, so the MCP transports
  (stdio, SSE, Streamable HTTP) and the plain JSON-RPC endpoint advertise the
  same tools
- A declarative route table maps reserved paths to the SSE transport or the
  FastAPI REST app
- Every other path goes to FastMCP's Streamable HTTP session manager
"""

import inspect
import json
import logging
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Optional, Tuple

from mcp.server.fastmcp import FastMCP
from mcp.server.sse import SseServerTransport
from pydantic import Field
from starlette.types import ASGIApp, Receive, Scope, Send

from error_handling import ErrorHandlingConfig, ToolServerError, log_error
from mcp_servers.base import BaseMCPServer, ToolDescriptor
from mcp_servers.config import SERVICE_NAME, VERSION, ServerConfig
from mcp_servers.rest_api import create_rest_app

logger = logging.getLogger("mcp_servers.http_app")

_PYTHON_TYPES = {
    "number": float,
    "integer": int,
    "string": str,
    "boolean": bool,
}


@dataclass(frozen=True)
class HttpRoute:
    """A reserved path and the sub-application that owns it."""
    path: str
    target: str
    label: str
    methods: Optional[Tuple[str, ...]] = None
    example: str = ""


# Paths listed here never reach the Streamable HTTP catch-all
ROUTES: Tuple[HttpRoute, ...] = (
    HttpRoute("/sse", "sse", "SSE endpoint", methods=("GET",)),
    HttpRoute("/message", "sse_message", "Message endpoint", methods=("POST",)),
    HttpRoute("/mcp", "rest", "MCP JSON-RPC"),
    HttpRoute("/health", "rest", "Health check"),
    HttpRoute("/ready", "rest", "Readiness check"),
    HttpRoute("/api/joke", "rest", "Try"),
    HttpRoute("/api/add", "rest", "Try", example="?a=5&b=3"),
)


def _signature_for(descriptor: ToolDescriptor) -> inspect.Signature:
    """Keyword-only signature FastMCP can turn into an argument model."""
    params = []
    for param in descriptor.parameters:
        python_type = _PYTHON_TYPES.get(param.type, Any)
        if param.required:
            params.append(inspect.Parameter(
                param.name,
                inspect.Parameter.KEYWORD_ONLY,
                annotation=Annotated[python_type, Field(description=param.description)],
            ))
        else:
            params.append(inspect.Parameter(
                param.name,
                inspect.Parameter.KEYWORD_ONLY,
                default=None,
                annotation=Annotated[Optional[python_type], Field(description=param.description)],
            ))
    return inspect.Signature(params)


def create_fastmcp(
    base_server: BaseMCPServer,
    host: str = "0.0.0.0",
    port: int = 8080,
    json_response: bool = False,
    message_path: str = "/message",
) -> FastMCP:
    """
    Creates a FastMCP instance exposing every tool of a BaseMCPServer.

    Each registered tool gets a bridge handler whose signature is built from
    the tool descriptor; FastMCP validates arguments against it and then the
    handler dispatches through the server's registry.

    Args:
        base_server: The server whose registry should be exposed
        host: Interface the HTTP transports bind to
        port: Port the HTTP transports bind to
        json_response: Answer Streamable HTTP requests with plain JSON instead of SSE
        message_path: Path SSE clients post their messages to
    """
    mcp = FastMCP(
        name=base_server.name,
        instructions=f"MCP server for {base_server.name}",
        host=host,
        port=port,
        streamable_http_path="/",
        message_path=message_path,
        json_response=json_response,
    )
    # Advertised in the initialize response
    mcp._mcp_server.version = base_server.version

    def create_tool_handler(captured_tool_name: str) -> Callable:
        """Creates a tool handler closure that captures the tool name."""

        async def tool_handler(**arguments: Any):
            # Optional arguments the client left out arrive as None
            arguments = {k: v for k, v in arguments.items() if v is not None}
            try:
                result = base_server.call_tool(captured_tool_name, arguments)
            except ToolServerError as e:
                # FastMCP reports the raised error back as an isError result
                log_error(e, base_server.logger, level=logging.WARNING)
                raise
            return result.content

        return tool_handler

    for descriptor in base_server.get_tools():
        handler = create_tool_handler(descriptor.name)
        handler.__signature__ = _signature_for(descriptor)  # type: ignore
        handler.__name__ = descriptor.name
        handler.__doc__ = descriptor.description

        mcp.add_tool(
            handler,
            name=descriptor.name,
            description=descriptor.description,
            structured_output=False,
        )
        base_server.logger.info(f"Registered tool: {descriptor.name}")

    return mcp


async def _send_json(send: Send, status: int, payload: Any) -> None:
    await send({
        "type": "http.response.start",
        "status": status,
        "headers": [[b"content-type", b"application/json"]],
    })
    await send({
        "type": "http.response.body",
        "body": json.dumps(payload).encode(),
    })


def create_mcp_http_app(
    base_server: BaseMCPServer,
    config: Optional[ServerConfig] = None,
) -> ASGIApp:
    """
    Creates the composite ASGI application for a BaseMCPServer.

    Routes:
    - GET /sse, POST /message -> MCP over SSE
    - /mcp, /health, /ready, /api/* -> FastAPI REST app
    - anything else -> MCP Streamable HTTP

    Args:
        base_server: The server to expose
        config: Server settings; defaults to ServerConfig()

    Returns:
        ASGI application compatible with uvicorn. Lifespan events are
        forwarded to the Streamable HTTP app, whose session manager must run
        for as long as the server does.
    """
    config = config or ServerConfig()

    mcp = create_fastmcp(
        base_server,
        host=config.host,
        port=config.port,
        json_response=config.json_response,
    )
    low_level_server = mcp._mcp_server

    # Creates the session manager and its lifespan
    mcp_app = mcp.streamable_http_app()
    session_manager = mcp.session_manager

    sse = SseServerTransport(mcp.settings.message_path)

    async def handle_sse(scope: Scope, receive: Receive, send: Send) -> None:
        async with sse.connect_sse(scope, receive, send) as (read_stream, write_stream):
            await low_level_server.run(
                read_stream,
                write_stream,
                low_level_server.create_initialization_options(),
            )

    rest_app = create_rest_app(
        base_server,
        ErrorHandlingConfig(
            service_name=SERVICE_NAME,
            service_version=VERSION,
            environment=config.environment,
            otlp_endpoint=config.otlp_endpoint,
            enable_tracing=config.enable_tracing,
            log_level=config.log_level,
        ),
    )

    targets = {
        "sse": handle_sse,
        "sse_message": sse.handle_post_message,
        "rest": rest_app,
    }
    routes = {route.path: route for route in ROUTES}

    async def composite_asgi_app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            route = routes.get(scope["path"])
            if route is None:
                await session_manager.handle_request(scope, receive, send)
            elif route.methods and scope["method"] not in route.methods:
                await _send_json(send, 405, {
                    "error": f"Method {scope['method']} not allowed on {route.path}",
                })
            else:
                await targets[route.target](scope, receive, send)
        else:
            # Lifespan (startup/shutdown) and anything else belong to FastMCP
            await mcp_app(scope, receive, send)

    base_server.logger.info(
        f"Created MCP HTTP app for {base_server.name} with {len(base_server.get_tools())} tools"
    )

    return composite_asgi_app


def log_routes(config: ServerConfig) -> None:
    """Log where each HTTP surface is reachable."""
    base_url = f"http://localhost:{config.port}"
    logger.info(f"Server starting on {base_url}")
    logger.info(f"Streamable HTTP endpoint: {base_url}/")
    for route in ROUTES:
        logger.info(f"{route.label}: {base_url}{route.path}{route.example}")

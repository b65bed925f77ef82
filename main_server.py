"""
MCP Demo Server entry point

Runs the demo tools (add, dad_joke) over one of two modes:

- stdio (default): a single MCP session on stdin/stdout, for local MCP hosts
- http (SERVER_MODE=http): one port serving Streamable HTTP, SSE, plain
  JSON-RPC on /mcp, the REST endpoints and health probes

Run:
  python main_server.py
  SERVER_MODE=http PORT=8080 python main_server.py
"""
import sys
import time
import random
import logging

import uvicorn
from dotenv import load_dotenv

from error_handling import TransportError, configure_logging, log_error, setup_tracing
from mcp_servers.config import SERVICE_NAME, VERSION, ServerConfig
from mcp_servers.demo_server import DemoMCPServer
from mcp_servers.http_app import create_fastmcp, create_mcp_http_app, log_routes

logger = logging.getLogger("mcp_demo")


def build_server() -> DemoMCPServer:
    """Create the demo server with a time-seeded random source."""
    return DemoMCPServer(rng=random.Random(time.time_ns()))


def run_stdio(server: DemoMCPServer) -> None:
    logger.info("Starting stdio MCP server")
    create_fastmcp(server).run(transport="stdio")


def run_http(server: DemoMCPServer, config: ServerConfig) -> None:
    logger.info(f"Starting HTTP server on port {config.port}")
    app = create_mcp_http_app(server, config)
    log_routes(config)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


def main() -> int:
    load_dotenv()

    try:
        config = ServerConfig.from_env()
    except ValueError as e:
        configure_logging()
        logger.critical(f"Invalid configuration: {e}")
        return 1

    configure_logging(config.log_level)
    if config.enable_tracing:
        setup_tracing(
            service_name=SERVICE_NAME,
            environment=config.environment,
            otlp_endpoint=config.otlp_endpoint,
            service_version=VERSION,
        )

    server = build_server()
    transport = "http" if config.http_mode else "stdio"
    try:
        if config.http_mode:
            run_http(server, config)
        else:
            run_stdio(server)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception as e:
        log_error(TransportError(transport, cause=e), logger, level=logging.CRITICAL)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
MCP Servers Module

This module contains the demo Model Context Protocol (MCP) server and the
transports that expose it:

- Demo tools: add, dad_joke
- MCP over stdio, SSE and Streamable HTTP (FastMCP)
- Plain JSON-RPC, REST and health endpoints (FastAPI)
"""

from mcp_servers.base import BaseMCPServer, ToolDescriptor, ToolParameter, ToolRegistry, ToolResult
from mcp_servers.demo_server import DemoMCPServer
from mcp_servers.http_app import create_fastmcp, create_mcp_http_app

__all__ = [
    "BaseMCPServer",
    "ToolDescriptor",
    "ToolParameter",
    "ToolRegistry",
    "ToolResult",
    "DemoMCPServer",
    "create_fastmcp",
    "create_mcp_http_app",
]

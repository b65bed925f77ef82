"""
Tests for the composite HTTP app and the FastMCP bridge.

REST and SSE routing is exercised without the lifespan; the Streamable HTTP
catch-all needs the session manager running, so those tests enter the
TestClient context.
"""
import pytest
from fastapi.testclient import TestClient
from mcp.server.fastmcp.exceptions import ToolError

from mcp_servers.demo_server import DAD_JOKES
from mcp_servers.http_app import ROUTES, create_fastmcp

MCP_HEADERS = {
    "accept": "application/json, text/event-stream",
    "content-type": "application/json",
}

INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {
        "protocolVersion": "2025-03-26",
        "capabilities": {},
        "clientInfo": {"name": "pytest", "version": "0.0.0"},
    },
}


def _content(result):
    # Newer SDKs return (content, structured) from FastMCP.call_tool
    return result[0] if isinstance(result, tuple) else result


class TestRouting:
    """Test the declarative route table."""

    def test_route_table_paths(self):
        assert [route.path for route in ROUTES] == [
            "/sse", "/message", "/mcp", "/health", "/ready", "/api/joke", "/api/add",
        ]

    @pytest.mark.parametrize("path", ["/health", "/ready"])
    @pytest.mark.parametrize("method", ["DELETE", "TRACE", "PROPFIND"])
    def test_liveness_through_composite(self, http_client, path, method):
        assert http_client.request(method, path).status_code == 200

    def test_jsonrpc_rejects_other_methods_through_composite(self, http_client):
        response = http_client.request("TRACE", "/mcp")
        assert response.status_code == 405
        assert response.json() == {"error": "Only POST method is allowed"}

    def test_rest_through_composite(self, http_client):
        response = http_client.get("/api/add", params={"a": 5, "b": 3})
        assert response.json() == {"a": 5, "b": 3, "result": 8}

    def test_jsonrpc_through_composite(self, http_client):
        response = http_client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
        assert response.status_code == 200
        assert len(response.json()["result"]["tools"]) == 2

    def test_sse_rejects_post(self, http_client):
        response = http_client.post("/sse")
        assert response.status_code == 405
        assert "error" in response.json()

    def test_message_rejects_get(self, http_client):
        response = http_client.get("/message")
        assert response.status_code == 405

    def test_message_requires_session(self, http_client):
        response = http_client.post("/message", json=INITIALIZE)
        assert response.status_code == 400


class TestStreamableHTTP:
    """Test the Streamable HTTP catch-all."""

    @pytest.mark.parametrize("path", ["/", "/anything/else"])
    def test_initialize(self, http_app, path):
        with TestClient(http_app) as client:
            response = client.post(path, json=INITIALIZE, headers=MCP_HEADERS)
        assert response.status_code == 200
        result = response.json()["result"]
        assert result["serverInfo"]["name"] == "demo"
        assert result["serverInfo"]["version"] == "0.0.1"
        assert "tools" in result["capabilities"]


class TestFastMCPBridge:
    """Test the tools FastMCP generates from the registry."""

    @pytest.mark.asyncio
    async def test_lists_registry_tools(self, server):
        mcp = create_fastmcp(server)
        tools = await mcp.list_tools()
        assert [tool.name for tool in tools] == ["add", "dad_joke"]
        add_schema = tools[0].inputSchema
        assert add_schema["required"] == ["a", "b"]
        assert add_schema["properties"]["a"]["type"] == "number"
        assert add_schema["properties"]["a"]["description"] == "First integer"
        assert tools[1].inputSchema.get("properties", {}) == {}

    @pytest.mark.asyncio
    async def test_call_add(self, server):
        mcp = create_fastmcp(server)
        content = _content(await mcp.call_tool("add", {"a": 2.9, "b": 3.9}))
        assert len(content) == 1
        assert content[0].text == "5"

    @pytest.mark.asyncio
    async def test_call_dad_joke(self, server):
        mcp = create_fastmcp(server)
        content = _content(await mcp.call_tool("dad_joke", {}))
        assert content[0].text in DAD_JOKES

    @pytest.mark.asyncio
    @pytest.mark.parametrize("arguments", [{"a": 1}, {"a": "x", "b": 2}])
    async def test_invalid_add_is_an_error(self, server, arguments):
        mcp = create_fastmcp(server)
        with pytest.raises(ToolError):
            await mcp.call_tool("add", arguments)

"""
Base MCP Server Utilities

Provides shared functionality for all MCP servers including:
- Tool descriptors and the tool registry
- Common result structure
- Environment helpers
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Tuple
from abc import ABC, abstractmethod

from mcp import types
from opentelemetry.trace import Status, StatusCode

from error_handling import ToolNotFoundError, get_tracer

logger = logging.getLogger("mcp_servers")


@dataclass(frozen=True)
class ToolParameter:
    """A single named argument in a tool's input schema."""
    name: str
    type: str
    description: str = ""
    required: bool = True

    def to_schema(self) -> Dict[str, Any]:
        schema = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        return schema


@dataclass(frozen=True)
class ToolDescriptor:
    """Name, description and ordered input parameters of a tool."""
    name: str
    description: str
    parameters: Tuple[ToolParameter, ...] = ()

    def input_schema(self) -> Dict[str, Any]:
        """JSON schema of the tool arguments, as advertised to MCP clients."""
        schema: Dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.to_schema() for p in self.parameters},
        }
        required = [p.name for p in self.parameters if p.required]
        if required:
            schema["required"] = required
        return schema

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


@dataclass
class ToolResult:
    """Standard result structure for MCP tool calls."""
    content: List[types.TextContent] = field(default_factory=list)

    @classmethod
    def text(cls, text: str) -> "ToolResult":
        return cls(content=[types.TextContent(type="text", text=text)])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": [
                block.model_dump(by_alias=True, exclude_none=True)
                for block in self.content
            ]
        }


ToolHandler = Callable[[Mapping[str, Any]], ToolResult]


class ToolRegistry:
    """
    In-memory table of tools, keyed by name.

    Populated once at startup and only read afterwards, so transports share a
    single instance without locking.
    """

    def __init__(self):
        self._tools: Dict[str, Tuple[ToolDescriptor, ToolHandler]] = {}

    def register(self, descriptor: ToolDescriptor, handler: ToolHandler) -> None:
        if descriptor.name in self._tools:
            raise ValueError(f"Tool already registered: {descriptor.name}")
        self._tools[descriptor.name] = (descriptor, handler)
        logger.debug(f"Registered tool: {descriptor.name}")

    def lookup(self, name: str) -> ToolHandler:
        try:
            return self._tools[name][1]
        except KeyError:
            raise ToolNotFoundError(name) from None

    def list(self) -> List[ToolDescriptor]:
        return [descriptor for descriptor, _ in self._tools.values()]

    def call(self, name: str, arguments: Mapping[str, Any]) -> ToolResult:
        """Look up a tool and invoke it with the given arguments."""
        handler = self.lookup(name)
        tracer = get_tracer(__name__)
        with tracer.start_as_current_span(f"mcp.tool.{name}") as span:
            span.set_attribute("mcp.tool.name", name)
            try:
                return handler(arguments)
            except Exception as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


class BaseMCPServer(ABC):
    """
    Base class for MCP servers.

    Each server exposes a registry of tools that every transport dispatches
    through.
    """

    version: str = "0.0.1"

    def __init__(self):
        self.logger = logging.getLogger(f"mcp_servers.{self.name}")
        self.registry = ToolRegistry()
        self.register_tools(self.registry)
        self.logger.info(f"Registered {len(self.registry)} tools: {[t.name for t in self.registry.list()]}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the server name."""
        pass

    @abstractmethod
    def register_tools(self, registry: ToolRegistry) -> None:
        """Populate the registry with this server's tools."""
        pass

    def get_tools(self) -> List[ToolDescriptor]:
        """Return the descriptors of every registered tool."""
        return self.registry.list()

    def call_tool(self, tool_name: str, arguments: Mapping[str, Any]) -> ToolResult:
        """
        Execute a tool and return the result.

        Args:
            tool_name: The tool to execute
            arguments: Tool parameters

        Returns:
            ToolResult with the tool's content blocks

        Raises:
            ToolNotFoundError: no tool with that name is registered
            InvalidParametersError: the arguments do not match the tool
        """
        return self.registry.call(tool_name, arguments)


def get_env_or_default(key: str, default: str) -> str:
    """Get environment variable or return default."""
    return os.environ.get(key) or default

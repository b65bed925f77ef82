"""
Server configuration read from the environment.
"""

from dataclasses import dataclass
from typing import Optional

from mcp_servers.base import get_env_or_default

SERVICE_NAME = "mcp-demo"
VERSION = "0.0.1"


def _env_flag(key: str, default: str) -> bool:
    return get_env_or_default(key, default).lower() == "true"


@dataclass
class ServerConfig:
    """Process-wide settings for the demo server."""
    mode: str = "stdio"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    environment: str = "development"
    enable_tracing: bool = True
    otlp_endpoint: Optional[str] = None
    json_response: bool = False

    @property
    def http_mode(self) -> bool:
        return self.mode == "http"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Build the configuration from environment variables.

        SERVER_MODE=http selects the HTTP server; any other value selects stdio.

        Raises:
            ValueError: PORT is not an integer
        """
        port = get_env_or_default("PORT", "8080")
        try:
            port_number = int(port)
        except ValueError:
            raise ValueError(f"PORT must be an integer, got {port!r}") from None

        return cls(
            mode=get_env_or_default("SERVER_MODE", "stdio"),
            host=get_env_or_default("HOST", "0.0.0.0"),
            port=port_number,
            log_level=get_env_or_default("LOG_LEVEL", "INFO"),
            environment=get_env_or_default("ENV", "development"),
            enable_tracing=_env_flag("ENABLE_TRACING", "true"),
            otlp_endpoint=get_env_or_default("OTEL_EXPORTER_OTLP_ENDPOINT", "") or None,
            json_response=_env_flag("MCP_JSON_RESPONSE", "false"),
        )

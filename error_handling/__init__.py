"""
Error handling module for the MCP demo server.

This module provides a structured way to raise, log and report errors across
the transports. Every error carries both an HTTP status and a JSON-RPC code so
the same exception can be rendered by the REST layer and the `/mcp` endpoint.
"""
from enum import Enum
from typing import Optional, Dict, Any, Union
import logging
from fastapi import status
from pydantic import BaseModel

# Import all from submodules to make them available at the package level
from .tracing import *
from .middleware import *
from .utils import *

__all__ = [
    # Error codes and base classes
    'ErrorCode',
    'JsonRpcCode',
    'ErrorResponse',
    'ToolServerError',

    # Common error types
    'InvalidParametersError',
    'ToolNotFoundError',
    'MethodNotFoundError',
    'MalformedRequestError',
    'MethodNotAllowedError',
    'TransportError',

    # Utility functions
    'log_error',
    'setup_error_handling',
    'ErrorHandlingMiddleware',

    # Tracing
    'setup_tracing',
    'get_tracer',
    'trace_span',
    'instrument_fastapi',

    # Utils
    'ErrorHandlingConfig',
    'configure_logging',
    'setup_app',
    'trace_function',
]


class ErrorCode(str, Enum):
    """Application error codes."""
    # Request errors
    INVALID_PARAMETERS = "invalid_parameters"
    MALFORMED_REQUEST = "malformed_request"
    METHOD_NOT_ALLOWED = "method_not_allowed"

    # Dispatch errors
    TOOL_NOT_FOUND = "tool_not_found"
    METHOD_NOT_FOUND = "method_not_found"

    # Transport errors
    TRANSPORT_ERROR = "transport_error"

    UNKNOWN_ERROR = "unknown_error"


class JsonRpcCode:
    """JSON-RPC 2.0 reserved error codes."""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603




class ErrorResponse(BaseModel):
    """Standard error response format for API responses."""
    error: Dict[str, Any]

    class Config:
        json_schema_extra = {
            "example": {
                "error": {
                    "code": "unknown_error",
                    "message": "An unexpected error occurred",
                    "details": {"exception_type": "RuntimeError"},
                    "request_id": "req_12345",
                    "trace_id": "trace_12345"
                }
            }
        }


class ToolServerError(Exception):
    """Base exception class for all MCP demo server errors."""

    def __init__(
        self,
        code: Union[ErrorCode, str],
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        jsonrpc_code: int = JsonRpcCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        self.code = ErrorCode(code) if isinstance(code, str) else code
        self.message = message
        self.status_code = status_code
        self.jsonrpc_code = jsonrpc_code
        self.details = details or {}
        self.cause = cause
        super().__init__(message)

    def to_dict(self, request_id: str = "", trace_id: str = "") -> Dict[str, Any]:
        """Convert the error to a dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "request_id": request_id,
            "trace_id": trace_id,
        }

    def to_jsonrpc(self, request_id: Any = None) -> Dict[str, Any]:
        """Render the error as a JSON-RPC 2.0 error response."""
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": {
                "code": self.jsonrpc_code,
                "message": self.message,
            },
        }

    @classmethod
    def from_exception(cls, exc: Exception) -> 'ToolServerError':
        """Create a ToolServerError from a generic exception."""
        if isinstance(exc, ToolServerError):
            return exc
        return cls(
            code=ErrorCode.UNKNOWN_ERROR,
            message=str(exc) or "An unknown error occurred",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"exception_type": exc.__class__.__name__},
            cause=exc
        )


class InvalidParametersError(ToolServerError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.INVALID_PARAMETERS,
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            jsonrpc_code=JsonRpcCode.INVALID_PARAMS,
            details=details
        )


class ToolNotFoundError(ToolServerError):
    def __init__(self, tool_name: str):
        super().__init__(
            code=ErrorCode.TOOL_NOT_FOUND,
            message=f"Tool not found: {tool_name}",
            status_code=status.HTTP_404_NOT_FOUND,
            jsonrpc_code=JsonRpcCode.METHOD_NOT_FOUND,
            details={"tool": tool_name}
        )


class MethodNotFoundError(ToolServerError):
    def __init__(self, method: str):
        super().__init__(
            code=ErrorCode.METHOD_NOT_FOUND,
            message=f"Method not found: {method}",
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            jsonrpc_code=JsonRpcCode.METHOD_NOT_FOUND,
            details={"method": method}
        )


class MalformedRequestError(ToolServerError):
    def __init__(self, message: str = "Invalid JSON-RPC request", cause: Optional[Exception] = None):
        super().__init__(
            code=ErrorCode.MALFORMED_REQUEST,
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            jsonrpc_code=JsonRpcCode.PARSE_ERROR,
            cause=cause
        )


class MethodNotAllowedError(ToolServerError):
    def __init__(self, message: str = "Only POST method is allowed"):
        super().__init__(
            code=ErrorCode.METHOD_NOT_ALLOWED,
            message=message,
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            jsonrpc_code=JsonRpcCode.INVALID_REQUEST
        )


class TransportError(ToolServerError):
    def __init__(self, transport: str, cause: Optional[Exception] = None):
        super().__init__(
            code=ErrorCode.TRANSPORT_ERROR,
            message=f"{transport} transport failed",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            jsonrpc_code=JsonRpcCode.INTERNAL_ERROR,
            details={"transport": transport},
            cause=cause
        )


def log_error(
    error: Exception,
    logger: logging.Logger,
    request_id: str = "",
    level: int = logging.ERROR,
    extra: Optional[Dict[str, Any]] = None
) -> None:
    """
    Helper function to log errors with structured context.

    Args:
        error: The exception to log
        logger: Logger instance to use
        request_id: Optional request ID for correlation
        level: Log level (default: ERROR)
        extra: Additional context to include in the log
    """
    extra = extra or {}
    if request_id:
        extra["request_id"] = request_id

    if isinstance(error, ToolServerError):
        extra.update({
            "error_code": error.code.value,
            "status_code": error.status_code,
            "jsonrpc_code": error.jsonrpc_code,
            "error_details": error.details,
        })
        if error.cause:
            extra["cause"] = str(error.cause)
    else:
        extra.update({
            "error_type": error.__class__.__name__,
            "error_message": str(error)
        })

    logger.log(level, str(error), extra=extra, exc_info=level >= logging.ERROR)

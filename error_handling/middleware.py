"""
Error handling middleware for FastAPI applications.

This module provides middleware to catch and process exceptions in a consistent way.
"""
import logging
import uuid
from typing import Callable
from fastapi import Request, status
from fastapi.responses import JSONResponse
from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request as StarletteRequest

logger = logging.getLogger("mcp_demo.error_handling")


def _current_trace_id() -> str:
    span = trace.get_current_span()
    context = span.get_span_context() if span else None
    return format(context.trace_id, "032x") if context and context.is_valid else ""


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware for handling exceptions and formatting error responses."""

    def __init__(self, app, service_name: str = "mcp-demo"):
        super().__init__(app)
        self.service_name = service_name

    async def dispatch(self, request: StarletteRequest, call_next: Callable):
        """Process the request and handle any exceptions."""
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        trace_id = _current_trace_id()

        try:
            response = await call_next(request)

            response.headers["X-Request-ID"] = request_id
            if trace_id:
                response.headers["X-Trace-ID"] = trace_id

            return response

        except Exception as exc:
            return await self._handle_exception(exc, request_id, trace_id, request)

    async def _handle_exception(
        self,
        exc: Exception,
        request_id: str,
        trace_id: str,
        request: StarletteRequest
    ) -> JSONResponse:
        """Handle an exception and return an appropriate response."""
        # Import here to avoid circular dependency
        from error_handling import ToolServerError, ErrorResponse, log_error

        if not isinstance(exc, ToolServerError):
            exc = ToolServerError.from_exception(exc)

        log_error(
            exc,
            logger,
            request_id=request_id,
            level=logging.ERROR if exc.status_code >= 500 else logging.WARNING,
            extra={
                "path": request.url.path,
                "method": request.method,
                "trace_id": trace_id,
                "service": self.service_name,
            }
        )

        error_response = ErrorResponse(
            error=exc.to_dict(request_id=request_id, trace_id=trace_id)
        )

        return JSONResponse(
            content=error_response.model_dump(),
            status_code=exc.status_code,
            headers={
                "X-Request-ID": request_id,
                "X-Trace-ID": trace_id,
                "Cache-Control": "no-store"
            }
        )


def setup_error_handling(app, service_name: str = "mcp-demo") -> None:
    """Set up error handling middleware for a FastAPI application."""
    from error_handling import ErrorResponse

    app.add_middleware(ErrorHandlingMiddleware, service_name=service_name)

    @app.exception_handler(status.HTTP_500_INTERNAL_SERVER_ERROR)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        from . import ToolServerError, ErrorCode

        request_id = getattr(request.state, "request_id", "") or str(uuid.uuid4())
        trace_id = _current_trace_id()

        logger.error(
            f"Unhandled exception: {str(exc)}",
            exc_info=exc,
            extra={
                "request_id": request_id,
                "trace_id": trace_id,
                "path": request.url.path,
                "method": request.method,
            }
        )

        error = ToolServerError(
            code=ErrorCode.UNKNOWN_ERROR,
            message="An unexpected error occurred",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={
                "exception_type": exc.__class__.__name__,
                "exception_message": str(exc)
            }
        )

        return JSONResponse(
            status_code=error.status_code,
            content=ErrorResponse(
                error=error.to_dict(request_id=request_id, trace_id=trace_id)
            ).model_dump(),
            headers={
                "X-Request-ID": request_id,
                "X-Trace-ID": trace_id,
                "Cache-Control": "no-store"
            }
        )

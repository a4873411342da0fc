"""Error handlers for different types of errors"""

from typing import Any

from fastapi import status
from starlette.exceptions import HTTPException

from .base import ApplicationError, ErrorCode, ErrorLevel
from .error_context import ErrorContext, ErrorContextManager
from .logging import get_logger

logger = get_logger(__name__)

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.AUTHENTICATION_FAILED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.AUTHORIZATION_FAILED: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.DB_RECORD_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    ErrorCode.DB_CONNECTION: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.DB_QUERY: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.DB_VALIDATION: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.DB_OPERATION: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.CIRCUIT_OPEN: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(error: ApplicationError) -> int:
    """HTTP status code an application error is rendered with."""
    return STATUS_BY_CODE.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)


class ErrorHandler:
    """Base class for error handlers"""

    def __init__(self, context_manager: ErrorContextManager | None = None):
        self.context_manager = context_manager or ErrorContextManager()

    def _format_response(
        self,
        error_context: ErrorContext,
        level: ErrorLevel,
        additional_context: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Format error response"""
        response: dict[str, Any] = {
            "error": str(error_context.error),
            "error_code": (additional_context or {}).get("error_code", ErrorCode.PROCESSING_FAILED.value),
            "level": level.value,
            "trace_id": error_context.trace_id,
            "timestamp": error_context.timestamp.isoformat(),
        }

        if isinstance(error_context.error, ApplicationError):
            response["error"] = error_context.error.message
            response["error_code"] = error_context.error.code.value
            response["details"] = error_context.error.details.model_dump(mode="json")

        if additional_context and additional_context.get("suggested_solution"):
            response["suggested_solution"] = additional_context["suggested_solution"]

        return response

    async def handle_async(
        self, error: Exception, level: ErrorLevel, context: dict[str, Any]
    ) -> dict[str, Any]:
        """Handle error asynchronously"""
        error_context = await self.context_manager.capture_context(error, **context)
        logger.log(level.to_logging_level(), "Handled error", **error_context.to_dict())
        return self._format_response(error_context, level, context)

    def handle_sync(
        self, error: Exception, level: ErrorLevel, context: dict[str, Any]
    ) -> dict[str, Any]:
        """Handle error synchronously"""
        with ErrorContextManager(error, **context) as error_context:
            logger.log(level.to_logging_level(), "Handled error", **error_context.to_dict())
            return self._format_response(error_context, level, context)


class GlobalErrorHandler(ErrorHandler):
    """Global error handler for FastAPI application"""

    async def handle_application_error(
        self, error: ApplicationError, path: str | None = None
    ) -> tuple[int, dict[str, Any]]:
        """Render an application error as an HTTP status and JSON body"""
        status_code = status_for(error)
        error_context = await self.context_manager.capture_context(
            error, status_code=status_code, path=path
        )
        logger.log(
            error.level.to_logging_level(),
            "Request failed",
            **error_context.to_dict(),
        )
        return status_code, self._format_response(error_context, error.level)

    async def handle_http_exception(self, error: HTTPException) -> dict[str, Any]:
        """Handle HTTP exceptions"""
        level = (
            ErrorLevel.ERROR
            if error.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
            else ErrorLevel.WARNING
        )
        error_context = await self.context_manager.capture_context(
            error, status_code=error.status_code
        )
        return self._format_response(error_context=error_context, level=level)

"""Specific error types for the chat companion pipeline."""

from .base import (
    AIServiceErrorDetails,
    ApplicationError,
    DatabaseErrorDetails,
    ErrorCode,
    ErrorDetails,
    ErrorLevel,
    ResourceErrorDetails,
    ServiceErrorDetails,
    ValidationErrorDetails,
)


class ServiceError(ApplicationError):
    """Error from external service calls."""

    def __init__(self, message: str, details: ServiceErrorDetails | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.SERVICE_UNAVAILABLE,
            level=ErrorLevel.ERROR,
            details=details or ServiceErrorDetails(
                source="service",
                operation="external_call",
                service_name="unknown",
            ),
        )


class OracleError(ApplicationError):
    """The generative model failed, refused or returned nothing usable."""

    def __init__(
        self,
        message: str,
        details: AIServiceErrorDetails | None = None,
        code: ErrorCode = ErrorCode.MODEL_ERROR,
    ):
        super().__init__(
            message=message,
            code=code,
            level=ErrorLevel.WARNING,
            details=details or AIServiceErrorDetails(
                source="oracle",
                operation="generate",
                service_name="oracle",
            ),
        )


class StoreError(ApplicationError):
    """Document store reads, writes or record validation failed."""

    def __init__(
        self,
        message: str,
        details: DatabaseErrorDetails | None = None,
        code: ErrorCode = ErrorCode.DB_OPERATION,
    ):
        super().__init__(
            message=message,
            code=code,
            level=ErrorLevel.ERROR,
            details=details or DatabaseErrorDetails(
                source="document_store",
                operation="unknown",
                service_name="document_store",
            ),
        )


class AuthenticationError(ApplicationError):
    """Authentication-related errors."""

    def __init__(self, message: str, details: ErrorDetails | dict | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.AUTHENTICATION_FAILED,
            level=ErrorLevel.WARNING,
            details=details,
        )


class AuthorizationError(ApplicationError):
    """Caller is authenticated but may not act on the resource."""

    def __init__(self, message: str, details: ResourceErrorDetails | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.AUTHORIZATION_FAILED,
            level=ErrorLevel.WARNING,
            details=details,
        )


class InvalidRequestError(ApplicationError):
    """Malformed or incomplete caller input."""

    def __init__(self, message: str, details: ValidationErrorDetails | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_REQUEST,
            level=ErrorLevel.WARNING,
            details=details,
        )


class TimeoutError(ApplicationError):
    """Timeout errors."""

    def __init__(self, message: str, details: ErrorDetails | dict | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.TIMEOUT,
            level=ErrorLevel.WARNING,
            details=details,
        )

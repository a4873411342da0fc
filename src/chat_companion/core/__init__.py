from .base import ApplicationError, ErrorCode, ErrorLevel
from .circuit_breaker import CircuitBreaker, CircuitOpenError, CircuitState
from .errors import (
    AuthenticationError,
    AuthorizationError,
    InvalidRequestError,
    OracleError,
    ServiceError,
    StoreError,
)

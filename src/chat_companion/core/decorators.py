"""Error handling and session decorators"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar, cast

from .base import ApplicationError, ErrorLevel
from .error_context import ErrorContextManager
from .handlers import ErrorHandler
from .logging import get_logger

logger = get_logger(__name__)
P = ParamSpec("P")
T = TypeVar("T")


def _level_for(error: Exception, default: ErrorLevel) -> ErrorLevel:
    return error.level if isinstance(error, ApplicationError) else default


def with_error_handling(
    error_level: ErrorLevel = ErrorLevel.ERROR,
    reraise: bool = True,
    error_handler: ErrorHandler | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator for logging errors raised by a function with their context.

    Application errors are logged at their own level, anything else at
    ``error_level``.

    Args:
        error_level: Severity level for non-application errors
        reraise: Whether to re-raise the error after handling
        error_handler: Optional custom error handler

    Returns:
        Decorated function with error handling
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        original_signature = inspect.signature(func)

        if asyncio.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                try:
                    return await cast("Callable[P, Awaitable[T]]", func)(*args, **kwargs)
                except Exception as e:
                    level = _level_for(e, error_level)
                    async with ErrorContextManager(e) as ctx:
                        error_context: dict[str, Any] = {
                            "function": func.__name__,
                            "error_context": ctx.to_dict(),
                        }
                        if error_handler:
                            await error_handler.handle_async(e, level, error_context)
                        else:
                            logger.log(
                                level.to_logging_level(),
                                f"Error in {func.__name__}: {e!s}",
                                extra=error_context,
                            )
                        if reraise:
                            raise
                        return cast("T", None)

            # FastAPI reads the signature to resolve dependencies
            async_wrapper.__signature__ = original_signature  # type: ignore[attr-defined]
            return cast("Callable[P, T]", async_wrapper)

        @wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                level = _level_for(e, error_level)
                with ErrorContextManager(e) as ctx:
                    error_context: dict[str, Any] = {
                        "function": func.__name__,
                        "error_context": ctx.to_dict(),
                    }
                    if error_handler:
                        error_handler.handle_sync(e, level, error_context)
                    else:
                        logger.log(
                            level.to_logging_level(),
                            f"Error in {func.__name__}: {e!s}",
                            extra=error_context,
                        )
                    if reraise:
                        raise
                    return cast("T", None)

        sync_wrapper.__signature__ = original_signature  # type: ignore[attr-defined]
        return sync_wrapper

    return decorator


def with_session(driver_attr: str = "driver") -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:  # noqa: E501
    """Decorator to automatically manage Neo4j session lifecycle.

    The session is injected as the first parameter after ``self``.

    Usage:
        @with_session()
        async def my_method(self, session, other_args):
            result = await session.run(query)
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            if not args:
                raise ValueError(f"{func.__name__} requires at least 'self' argument")

            self_obj = args[0]
            driver = getattr(self_obj, driver_attr, None)

            if driver is None:
                raise AttributeError(
                    f"Object {self_obj.__class__.__name__} has no attribute '{driver_attr}'. "
                    f"Either provide the correct driver_attr or ensure the object has a driver."
                )

            async with driver.session() as session:
                return await func(self_obj, session, *args[1:], **kwargs)

        return wrapper

    return decorator

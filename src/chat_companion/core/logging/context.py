"""Request-scoped logging context.

Values bound here go into structlog's contextvars, so every log line
emitted while handling one event carries the same chat and message ids.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog


@contextmanager
def log_context(**values: Any) -> Iterator[None]:
    """Bind values for the duration of a block, restoring the previous ones after."""
    with structlog.contextvars.bound_contextvars(**values):
        yield

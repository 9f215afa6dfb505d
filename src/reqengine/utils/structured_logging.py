r"""Structured logging for machine-readable engine events.

The engine mirrors every request and response summary through
``log_structured`` so the same events can be shipped to a log aggregator
as JSON. The formatter is opt-in: attach it to the ``reqengine`` logger.

Example:
    Emit engine events as JSON lines:

    ```python
    import logging
    from reqengine.utils.structured_logging import StructuredFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logger = logging.getLogger("reqengine")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    ```

    Tag every event of a logical request with a correlation id:

    ```python
    from reqengine.utils.structured_logging import correlation_scope

    with correlation_scope("order-42"):
        engine.execute(descriptor)
    ```
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_correlation_id",
    "correlation_scope",
    "get_correlation_id",
    "log_structured",
    "set_correlation_id",
]

import contextvars
import json
import logging
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "reqengine_correlation_id", default=None
)

# Attributes every LogRecord carries; anything else came through ``extra``
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


def get_correlation_id() -> str | None:
    """Return the correlation id of the current context, if any.

    Example:
        ```pycon
        >>> from reqengine.utils.structured_logging import get_correlation_id
        >>> get_correlation_id() is None
        True

        ```
    """
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation id of the current context.

    The id lives in a context variable, so threads and tasks each see their
    own value.
    """
    _correlation_id.set(correlation_id)


def clear_correlation_id() -> None:
    _correlation_id.set(None)


@contextmanager
def correlation_scope(correlation_id: str) -> Iterator[str]:
    """Set a correlation id for the duration of a ``with`` block.

    The previous id is restored on exit, so scopes can be nested.

    Example:
        ```pycon
        >>> from reqengine.utils.structured_logging import (
        ...     correlation_scope,
        ...     get_correlation_id,
        ... )
        >>> with correlation_scope("outer"):
        ...     with correlation_scope("inner"):
        ...         print(get_correlation_id())
        ...     print(get_correlation_id())
        ...
        inner
        outer

        ```
    """
    token = _correlation_id.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id.reset(token)


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Each object holds ``timestamp`` (ISO 8601, UTC), ``level``, ``logger``,
    ``message``, ``module``, ``function``, ``line`` and ``thread``, the
    current ``correlation_id`` when one is set, ``exception`` when the
    record carries exception info, and every field passed through
    ``extra``. Values that are not JSON serializable are rendered with
    ``str``.

    Example:
        ```pycon
        >>> import json
        >>> import logging
        >>> from reqengine.utils.structured_logging import StructuredFormatter
        >>> record = logging.LogRecord(
        ...     "reqengine", logging.INFO, __file__, 1, "sent", None, None
        ... )
        >>> record.status_code = 200
        >>> data = json.loads(StructuredFormatter().format(record))
        >>> data["message"], data["status_code"]
        ('sent', 200)

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread": record.threadName,
        }
        correlation_id = get_correlation_id()
        if correlation_id is not None:
            data["correlation_id"] = correlation_id
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES:
                data[key] = value
        return json.dumps(data, default=str)

    def formatTime(  # noqa: N802
        self,
        record: logging.LogRecord,
        datefmt: str | None = None,  # noqa: ARG002
    ) -> str:
        """Format the record time as ISO 8601 with millisecond precision.

        ``datefmt`` is ignored.
        """
        seconds = time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
        return f"{seconds}.{int(record.msecs):03d}Z"


def log_structured(logger: logging.Logger, level: int, message: str, **extra: Any) -> None:
    """Log ``message`` with structured fields.

    Args:
        logger: Logger to use.
        level: Log level, e.g. ``logging.DEBUG``.
        message: Log message.
        **extra: Fields added to the record, rendered by
            ``StructuredFormatter``.
    """
    logger.log(level, message, extra=extra)

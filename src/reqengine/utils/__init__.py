r"""Logging utilities of the request engine."""

from __future__ import annotations

__all__ = [
    "LoggingSink",
    "RequestLogger",
    "StdLoggingSink",
    "StructuredFormatter",
    "clear_correlation_id",
    "correlation_scope",
    "get_correlation_id",
    "log_structured",
    "set_correlation_id",
]

from reqengine.utils.request_logging import LoggingSink, RequestLogger, StdLoggingSink
from reqengine.utils.structured_logging import (
    StructuredFormatter,
    clear_correlation_id,
    correlation_scope,
    get_correlation_id,
    log_structured,
    set_correlation_id,
)

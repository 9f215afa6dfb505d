r"""Configuration defaults and parameter validation shared by the
descriptor, the engine and the client."""

from __future__ import annotations

__all__ = [
    "DEFAULT_MAX_RETRY_INTERVAL",
    "DEFAULT_PROGRESS_STEP",
    "DEFAULT_RETRY_COUNT",
    "DEFAULT_TIMEOUT",
    "EngineConfig",
    "is_ok_status",
    "validate_progress_step",
    "validate_retry_params",
    "validate_timeout",
]

from reqengine.core.config import (
    DEFAULT_MAX_RETRY_INTERVAL,
    DEFAULT_PROGRESS_STEP,
    DEFAULT_RETRY_COUNT,
    DEFAULT_TIMEOUT,
    EngineConfig,
    is_ok_status,
)
from reqengine.core.validation import (
    validate_progress_step,
    validate_retry_params,
    validate_timeout,
)

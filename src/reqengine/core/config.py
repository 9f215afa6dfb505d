r"""Configuration dataclass and defaults for the execution engine.

This module provides default constants and a dataclass-based
configuration object used to stamp out request descriptors with shared
timeout, retry and logging settings.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_MAX_RETRY_INTERVAL",
    "DEFAULT_PROGRESS_STEP",
    "DEFAULT_RETRY_COUNT",
    "DEFAULT_TIMEOUT",
    "EngineConfig",
    "is_ok_status",
]

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from reqengine.core.validation import validate_retry_params, validate_timeout

if TYPE_CHECKING:
    from collections.abc import Callable

    from reqengine.descriptor import RequestDescriptor
    from reqengine.retry.policy import RetryPolicy


# Default timeout in seconds for a single attempt
DEFAULT_TIMEOUT = 10.0

# Default number of retries after the initial attempt
# Total attempts = retry_count + 1
DEFAULT_RETRY_COUNT = 0

# Default cap in seconds on the wait between two attempts
# 0 disables waiting entirely
DEFAULT_MAX_RETRY_INTERVAL = 0.0

# Default number of bytes between two download progress events
DEFAULT_PROGRESS_STEP = 8192


def is_ok_status(status_code: int) -> bool:
    """Return whether a status code is in the conventional OK range.

    Args:
        status_code: The HTTP status code to classify.

    Returns:
        ``True`` for 200 <= status_code < 300, otherwise ``False``.

    Example:
        ```pycon
        >>> from reqengine.core.config import is_ok_status
        >>> is_ok_status(204)
        True
        >>> is_ok_status(404)
        False

        ```
    """
    return 200 <= status_code < 300


@dataclass
class EngineConfig:
    """Shared defaults applied to every descriptor built from this
    configuration.

    Args:
        timeout: Maximum seconds to wait for a single attempt. Must be > 0.
        retry_count: Maximum number of retries after the initial attempt.
            Must be >= 0.
        max_retry_interval: Maximum wait in seconds between two attempts.
            Must be >= 0. 0 disables waiting.
        log_enabled: Whether request/response summaries are emitted.
        success_predicate: Classifies a status code as success or failure.
        retry_policy: Optional policy overriding the engine default.

    Example:
        ```pycon
        >>> from reqengine.core.config import EngineConfig
        >>> config = EngineConfig(retry_count=2)
        >>> config.merge(retry_count=5).retry_count
        5
        >>> config.retry_count
        2
        >>> descriptor = config.build_descriptor("https://example.com/items")
        >>> descriptor.method, descriptor.retry_count
        ('GET', 2)

        ```
    """

    timeout: float = DEFAULT_TIMEOUT
    retry_count: int = DEFAULT_RETRY_COUNT
    max_retry_interval: float = DEFAULT_MAX_RETRY_INTERVAL
    log_enabled: bool = False
    success_predicate: Callable[[int], bool] = is_ok_status
    retry_policy: RetryPolicy | None = None

    def __post_init__(self) -> None:
        validate_timeout(self.timeout)
        validate_retry_params(
            retry_count=self.retry_count, max_retry_interval=self.max_retry_interval
        )

    def merge(self, **overrides: Any) -> EngineConfig:
        """Create a new config with the given parameters overridden.

        Only non-None override values are applied.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new ``EngineConfig`` instance with overrides applied.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)

    def to_dict(self) -> dict[str, Any]:
        """Convert the configuration to descriptor keyword arguments.

        Returns:
            Dictionary with the descriptor parameters this config controls.
        """
        return {
            "timeout": self.timeout,
            "retry_count": self.retry_count,
            "max_retry_interval": self.max_retry_interval,
            "log_enabled": self.log_enabled,
            "success_predicate": self.success_predicate,
            "retry_policy": self.retry_policy,
        }

    def build_descriptor(
        self, url: str, method: str = "GET", **overrides: Any
    ) -> RequestDescriptor:
        """Build a request descriptor seeded with this configuration.

        Args:
            url: The resolved request URL.
            method: The HTTP method.
            **overrides: Descriptor fields overriding the config values.

        Returns:
            A new ``RequestDescriptor``.
        """
        from reqengine.descriptor import RequestDescriptor

        params = self.to_dict()
        params.update(overrides)
        return RequestDescriptor(url=url, method=method, **params)

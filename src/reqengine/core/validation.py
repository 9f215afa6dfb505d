r"""Parameter validation utilities for request descriptors and engine
configuration.

This module provides validation functions to ensure that timeouts,
retry limits and progress settings meet their constraints before a
descriptor is handed to the execution engine.
"""

from __future__ import annotations

__all__ = ["validate_progress_step", "validate_retry_params", "validate_timeout"]


def validate_timeout(timeout: float) -> None:
    """Validate timeout parameter.

    Args:
        timeout: Maximum seconds to wait for a single attempt.
            Must be > 0.

    Raises:
        ValueError: If timeout is <= 0.

    Example:
        ```pycon
        >>> from reqengine.core.validation import validate_timeout
        >>> validate_timeout(10.0)
        >>> validate_timeout(0)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValueError: timeout must be > 0, got 0

        ```
    """
    if timeout <= 0:
        msg = f"timeout must be > 0, got {timeout}"
        raise ValueError(msg)


def validate_retry_params(retry_count: int, max_retry_interval: float = 0.0) -> None:
    """Validate retry parameters.

    Args:
        retry_count: Maximum number of retries after the initial attempt.
            Must be >= 0. A value of 0 means only the initial attempt.
        max_retry_interval: Maximum wait in seconds between two attempts.
            Must be >= 0. A value of 0 disables waiting between attempts.

    Raises:
        ValueError: If retry_count or max_retry_interval are negative.

    Example:
        ```pycon
        >>> from reqengine.core.validation import validate_retry_params
        >>> validate_retry_params(retry_count=3)
        >>> validate_retry_params(retry_count=3, max_retry_interval=5.0)
        >>> validate_retry_params(retry_count=-1)  # doctest: +SKIP

        ```
    """
    if retry_count < 0:
        msg = f"retry_count must be >= 0, got {retry_count}"
        raise ValueError(msg)
    if max_retry_interval < 0:
        msg = f"max_retry_interval must be >= 0, got {max_retry_interval}"
        raise ValueError(msg)


def validate_progress_step(progress_step: int) -> None:
    """Validate the chunk size used for progress reporting.

    Args:
        progress_step: Number of bytes between two progress events.
            Must be > 0.

    Raises:
        ValueError: If progress_step is <= 0.
    """
    if progress_step <= 0:
        msg = f"progress_step must be > 0, got {progress_step}"
        raise ValueError(msg)

r"""Retry policies deciding whether another attempt may occur.

A policy is a pure decision function over a ``RetryContext``. It may also
suggest how long to wait before the next attempt, but it never waits
itself: the engine honors the delay, so the same policy serves both
blocking and callback-driven execution.
"""

from __future__ import annotations

__all__ = ["BackoffRetryPolicy", "DefaultRetryPolicy", "NeverRetryPolicy", "RetryPolicy"]

import logging
import random
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from reqengine.retry.backoff import ExponentialBackoff
from reqengine.retry.retry_after import parse_retry_after

if TYPE_CHECKING:
    from reqengine.retry.backoff import BaseBackoffStrategy
    from reqengine.retry.context import RetryContext

logger: logging.Logger = logging.getLogger(__name__)


class RetryPolicy(ABC):
    """Abstract base class for retry policies."""

    @abstractmethod
    def should_retry(self, context: RetryContext) -> bool:
        """Decide whether another attempt may occur.

        Args:
            context: The failed attempt.

        Returns:
            ``True`` to allow another attempt, ``False`` to make the failure
            terminal.
        """

    def next_delay(self, context: RetryContext) -> float:  # noqa: ARG002
        """Return the seconds to wait before the next attempt.

        Only called after ``should_retry`` allowed the attempt.

        Args:
            context: The failed attempt.

        Returns:
            The delay in seconds. Defaults to no wait.
        """
        return 0.0


class NeverRetryPolicy(RetryPolicy):
    """Policy denying every retry."""

    def should_retry(self, context: RetryContext) -> bool:  # noqa: ARG002
        return False


class DefaultRetryPolicy(RetryPolicy):
    """Policy driven by the descriptor's retry limits.

    Another attempt is allowed while ``attempt < descriptor.retry_count``.
    The wait grows with the backoff strategy and is capped by
    ``descriptor.max_retry_interval``; an interval of 0 disables waiting.

    Args:
        backoff_strategy: Strategy computing the uncapped delay.
            Defaults to ``ExponentialBackoff(base_delay=1.0)``.

    Example:
        ```pycon
        >>> from reqengine.descriptor import RequestDescriptor
        >>> from reqengine.exceptions import TransportError
        >>> from reqengine.retry import DefaultRetryPolicy, RetryContext
        >>> descriptor = RequestDescriptor(
        ...     "https://example.com", retry_count=2, max_retry_interval=1.5
        ... )
        >>> error = TransportError(method="GET", url=descriptor.url, message="reset")
        >>> policy = DefaultRetryPolicy()
        >>> [policy.should_retry(RetryContext(descriptor, n, error)) for n in range(3)]
        [True, True, False]
        >>> policy.next_delay(RetryContext(descriptor, 1, error))
        1.5

        ```
    """

    def __init__(self, backoff_strategy: BaseBackoffStrategy | None = None) -> None:
        self.backoff_strategy: BaseBackoffStrategy = (
            backoff_strategy if backoff_strategy is not None else ExponentialBackoff()
        )

    def should_retry(self, context: RetryContext) -> bool:
        return context.attempt < context.descriptor.retry_count

    def next_delay(self, context: RetryContext) -> float:
        max_interval = context.descriptor.max_retry_interval
        if max_interval <= 0:
            return 0.0
        return min(self.backoff_strategy.calculate(context.attempt), max_interval)


class BackoffRetryPolicy(RetryPolicy):
    """Configurable policy with backoff, jitter and Retry-After support.

    The delay is calculated as follows:
    1. Use the Retry-After header of a failing reply if present,
       otherwise ``backoff_strategy.calculate(attempt)``
    2. Cap it at ``max_wait_time`` if set
    3. Add ``random.uniform(0, jitter_factor) * delay`` if jitter is enabled

    Args:
        max_retries: Retry limit. Defaults to the descriptor's
            ``retry_count``.
        backoff_strategy: Strategy computing the base delay.
            Defaults to ``ExponentialBackoff(base_delay=0.3)``.
        jitter_factor: Factor for adding random jitter. Must be >= 0.
        max_wait_time: Optional cap in seconds on each delay.
        retry_on: Optional exception types; when set, only failures whose
            cause (or underlying cause) is an instance are retried.

    Example:
        ```pycon
        >>> from reqengine.retry import BackoffRetryPolicy
        >>> from reqengine.retry.backoff import ConstantBackoff
        >>> policy = BackoffRetryPolicy(max_retries=5, backoff_strategy=ConstantBackoff(0.2))
        >>> policy.max_retries
        5

        ```
    """

    def __init__(
        self,
        *,
        max_retries: int | None = None,
        backoff_strategy: BaseBackoffStrategy | None = None,
        jitter_factor: float = 0.0,
        max_wait_time: float | None = None,
        retry_on: type[BaseException] | tuple[type[BaseException], ...] | None = None,
    ) -> None:
        if max_retries is not None and max_retries < 0:
            msg = f"max_retries must be >= 0, got {max_retries}"
            raise ValueError(msg)
        if jitter_factor < 0:
            msg = f"jitter_factor must be >= 0, got {jitter_factor}"
            raise ValueError(msg)
        if max_wait_time is not None and max_wait_time <= 0:
            msg = f"max_wait_time must be > 0, got {max_wait_time}"
            raise ValueError(msg)
        self.max_retries = max_retries
        self.backoff_strategy: BaseBackoffStrategy = (
            backoff_strategy if backoff_strategy is not None else ExponentialBackoff(0.3)
        )
        self.jitter_factor = jitter_factor
        self.max_wait_time = max_wait_time
        self.retry_on = retry_on

    def should_retry(self, context: RetryContext) -> bool:
        limit = self.max_retries if self.max_retries is not None else context.descriptor.retry_count
        if context.attempt >= limit:
            return False
        if self.retry_on is None:
            return True
        return isinstance(context.cause, self.retry_on) or isinstance(
            context.cause.cause, self.retry_on
        )

    def next_delay(self, context: RetryContext) -> float:
        delay: float | None = None
        if context.response is not None:
            delay = parse_retry_after(context.response.headers.get("Retry-After"))
            if delay is not None:
                logger.debug(f"Using Retry-After header value: {delay:.2f}s")
        if delay is None:
            delay = self.backoff_strategy.calculate(context.attempt)

        if self.max_wait_time is not None and delay > self.max_wait_time:
            logger.debug(f"Capping delay from {delay:.2f}s to {self.max_wait_time:.2f}s")
            delay = self.max_wait_time

        if self.jitter_factor > 0:
            delay += random.uniform(0, self.jitter_factor) * delay  # noqa: S311
        return delay

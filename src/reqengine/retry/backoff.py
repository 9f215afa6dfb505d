r"""Backoff strategies computing the wait between two attempts.

A backoff strategy only computes a delay; the retry policy decides
whether a further attempt happens, and the engine performs the wait.
"""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy", "ConstantBackoff", "ExponentialBackoff", "LinearBackoff"]

from abc import ABC, abstractmethod


class BaseBackoffStrategy(ABC):
    """Abstract base class for backoff strategies."""

    @abstractmethod
    def calculate(self, attempt: int) -> float:
        """Calculate the delay after a failed attempt.

        Args:
            attempt: The zero-based index of the attempt that failed.

        Returns:
            The delay in seconds before the next attempt.
        """


class ExponentialBackoff(BaseBackoffStrategy):
    """Exponential backoff strategy.

    Calculates delay as: base_delay * (2 ** attempt), optionally capped.

    Args:
        base_delay: Delay after the first failed attempt, in seconds.
        max_delay: Optional cap in seconds.

    Example:
        ```pycon
        >>> from reqengine.retry.backoff import ExponentialBackoff
        >>> backoff = ExponentialBackoff(base_delay=1.0, max_delay=5.0)
        >>> [backoff.calculate(attempt) for attempt in range(4)]
        [1.0, 2.0, 4.0, 5.0]

        ```
    """

    def __init__(self, base_delay: float = 1.0, max_delay: float | None = None) -> None:
        if base_delay < 0:
            msg = f"base_delay must be >= 0, got {base_delay}"
            raise ValueError(msg)
        if max_delay is not None and max_delay <= 0:
            msg = f"max_delay must be > 0, got {max_delay}"
            raise ValueError(msg)
        self.base_delay = base_delay
        self.max_delay = max_delay

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(base_delay={self.base_delay}, "
            f"max_delay={self.max_delay})"
        )

    def calculate(self, attempt: int) -> float:
        delay = self.base_delay * (2**attempt)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay


class LinearBackoff(BaseBackoffStrategy):
    """Linear backoff strategy.

    Calculates delay as: base_delay * (attempt + 1), optionally capped.

    Args:
        base_delay: Delay after the first failed attempt, in seconds.
        max_delay: Optional cap in seconds.

    Example:
        ```pycon
        >>> from reqengine.retry.backoff import LinearBackoff
        >>> [LinearBackoff(base_delay=0.5).calculate(attempt) for attempt in range(3)]
        [0.5, 1.0, 1.5]

        ```
    """

    def __init__(self, base_delay: float = 1.0, max_delay: float | None = None) -> None:
        if base_delay < 0:
            msg = f"base_delay must be >= 0, got {base_delay}"
            raise ValueError(msg)
        if max_delay is not None and max_delay <= 0:
            msg = f"max_delay must be > 0, got {max_delay}"
            raise ValueError(msg)
        self.base_delay = base_delay
        self.max_delay = max_delay

    def calculate(self, attempt: int) -> float:
        delay = self.base_delay * (attempt + 1)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay


class ConstantBackoff(BaseBackoffStrategy):
    """Constant backoff strategy: every wait lasts ``delay`` seconds.

    Example:
        ```pycon
        >>> from reqengine.retry.backoff import ConstantBackoff
        >>> ConstantBackoff(delay=2.0).calculate(7)
        2.0

        ```
    """

    def __init__(self, delay: float = 1.0) -> None:
        if delay < 0:
            msg = f"delay must be >= 0, got {delay}"
            raise ValueError(msg)
        self.delay = delay

    def calculate(self, attempt: int) -> float:  # noqa: ARG002
        return self.delay

r"""Retry context describing one failed attempt."""

from __future__ import annotations

__all__ = ["RetryContext"]

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reqengine.descriptor import RequestDescriptor
    from reqengine.exceptions import RequestError
    from reqengine.response import Response


@dataclass(frozen=True)
class RetryContext:
    """Information handed to a retry policy after a failed attempt.

    Attributes:
        descriptor: The descriptor of the request, for its retry limits.
        attempt: The zero-based index of the attempt that failed.
        cause: A ``TransportError`` (no reply) or an ``ApplicationError``
            (reply classified as a failure).
        response: The failing response for application errors, None for
            transport errors.

    Example:
        ```pycon
        >>> from reqengine.descriptor import RequestDescriptor
        >>> from reqengine.exceptions import TransportError
        >>> from reqengine.retry.context import RetryContext
        >>> descriptor = RequestDescriptor("https://example.com", retry_count=3)
        >>> error = TransportError(method="GET", url="https://example.com", message="reset")
        >>> RetryContext(descriptor=descriptor, attempt=1, cause=error).remaining
        2

        ```
    """

    descriptor: RequestDescriptor
    attempt: int
    cause: RequestError
    response: Response | None = None

    @property
    def remaining(self) -> int:
        """Retries still allowed by the descriptor's retry-count limit."""
        return max(0, self.descriptor.retry_count - self.attempt)

    @property
    def is_transport_failure(self) -> bool:
        return self.response is None

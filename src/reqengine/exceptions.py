r"""Exception taxonomy for the request execution engine.

The engine distinguishes failures where no reply was obtained
(``TransportError``) from replies that were obtained but classified as
failures (``ApplicationError``). Both are offered to the retry policy first;
``RetryExhaustedError`` marks a transport failure that the policy refused
to retry, and ``DecodeError`` is raised when a response body cannot be
converted to the requested result type.
"""

from __future__ import annotations

__all__ = [
    "ApplicationError",
    "DecodeError",
    "RequestError",
    "RetryExhaustedError",
    "TransportError",
]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from reqengine.response import Response


class RequestError(Exception):
    """Base class for all errors raised while executing a request.

    Args:
        method: The HTTP method of the request.
        url: The URL of the request.
        message: A descriptive error message.
        status_code: The HTTP status code, if a reply was obtained.
        response: The response associated with the error, if any.
        cause: The underlying exception, if any.

    Example:
        ```pycon
        >>> from reqengine.exceptions import RequestError
        >>> error = RequestError(method="GET", url="https://example.com", message="boom")
        >>> error.method, error.url, error.status_code
        ('GET', 'https://example.com', None)

        ```
    """

    def __init__(
        self,
        method: str,
        url: str,
        message: str,
        status_code: int | None = None,
        response: Response | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.message = message
        self.status_code = status_code
        self.response = response
        self.cause = cause


class TransportError(RequestError):
    """Raised when an attempt produced no reply (connect error, reset,
    timeout)."""


class ApplicationError(RequestError):
    """Raised when a reply was obtained but failed the success predicate.

    Example:
        ```pycon
        >>> from reqengine.exceptions import ApplicationError
        >>> error = ApplicationError(
        ...     method="GET", url="https://example.com", message="failed", status_code=503
        ... )
        >>> error.status_code
        503

        ```
    """


class RetryExhaustedError(RequestError):
    """Raised when the retry policy denied another attempt after a
    transport failure.

    Args:
        attempts: The number of attempts performed (initial attempt included).
        **kwargs: See ``RequestError``.
    """

    def __init__(self, *, attempts: int, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.attempts = attempts


class DecodeError(RequestError):
    """Raised when a response body cannot be converted to the requested
    result type."""

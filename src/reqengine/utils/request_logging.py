r"""Human-readable request and response summaries.

For every attempt of a request whose descriptor has logging enabled, the
engine emits one request summary before sending and one response summary
per response it creates. Summaries are pre-formatted strings handed to a
``LoggingSink``:

```
Request:
    [Retry: 1] POST https://example.com/items?page=2 HTTPS
    Headers:
        Content-Type: application/json
    Body: {"name": "x"}
Response: Status = 200, Time = 12ms
```
"""

from __future__ import annotations

__all__ = ["LoggingSink", "RequestLogger", "StdLoggingSink"]

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import httpx

from reqengine.utils.structured_logging import log_structured

if TYPE_CHECKING:
    from reqengine.descriptor import RequestDescriptor
    from reqengine.response import Response

logger: logging.Logger = logging.getLogger(__name__)


class LoggingSink(ABC):
    """Destination of formatted request and response summaries."""

    @abstractmethod
    def log(self, content: str) -> None:
        """Receive one summary."""


class StdLoggingSink(LoggingSink):
    r"""Sink writing summaries to a standard library logger.

    Args:
        logger: The logger to write to. Defaults to the ``reqengine``
            logger.
        level: The level of the records.

    Example:
        ```pycon
        >>> import logging
        >>> from reqengine.utils.request_logging import StdLoggingSink
        >>> sink = StdLoggingSink()
        >>> sink.logger.name, sink.level == logging.INFO
        ('reqengine', True)

        ```
    """

    prefix = "[reqengine] "

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.logger = logger or logging.getLogger("reqengine")
        self.level = level

    def log(self, content: str) -> None:
        self.logger.log(self.level, f"{self.prefix}{content}")


class RequestLogger:
    r"""Format request and response summaries and send them to a sink.

    Nothing is formatted unless the descriptor has ``log_enabled`` set.

    Args:
        sink: Destination of the summaries. Defaults to ``StdLoggingSink``.

    Example:
        ```pycon
        >>> from reqengine.descriptor import RequestDescriptor
        >>> from reqengine.utils.request_logging import RequestLogger
        >>> descriptor = RequestDescriptor("https://example.com/items", method="DELETE")
        >>> RequestLogger().format_request_line(descriptor, None, attempt=2)
        '[Retry: 2] DELETE https://example.com/items HTTPS'

        ```
    """

    def __init__(self, sink: LoggingSink | None = None) -> None:
        self.sink: LoggingSink = sink or StdLoggingSink()

    def log_request(self, descriptor: RequestDescriptor, request: Any, attempt: int) -> None:
        """Emit the summary of one attempt before it is sent.

        Args:
            descriptor: The descriptor of the request.
            request: The wire request of the attempt. Summaries use it when
                it is an ``httpx.Request``, otherwise the descriptor.
            attempt: The zero-based index of the attempt.
        """
        if not descriptor.log_enabled:
            return
        self.sink.log(self.format_request(descriptor, request, attempt))
        log_structured(
            logger,
            logging.DEBUG,
            "request sent",
            method=descriptor.method,
            url=descriptor.url,
            attempt=attempt,
        )

    def log_response(self, response: Response) -> None:
        """Emit the summary of a created response."""
        descriptor = response.descriptor
        if not descriptor.log_enabled:
            return
        self.sink.log(self.format_response(response))
        log_structured(
            logger,
            logging.DEBUG,
            "response received",
            method=descriptor.method,
            url=descriptor.url,
            attempt=response.attempt,
            status_code=response.status_code,
            duration_ms=_elapsed_ms(response),
            success=response.is_success,
        )

    def format_request(self, descriptor: RequestDescriptor, request: Any, attempt: int) -> str:
        content = "Request: \n\t" + self.format_request_line(descriptor, request, attempt)
        headers = self.format_headers(descriptor, request)
        if headers:
            content += "\n\tHeaders: \n" + headers
        body = self.format_body(descriptor, request)
        if body:
            content += "\n\tBody: " + body
        return content

    def format_request_line(self, descriptor: RequestDescriptor, request: Any, attempt: int) -> str:
        if isinstance(request, httpx.Request):
            url = request.url
        else:
            url = httpx.URL(descriptor.url, params=descriptor.query or None)
        line = f"{descriptor.method} {url} {url.scheme.upper()}"
        if attempt == 0:
            return line
        return f"[Retry: {attempt}] {line}"

    def format_headers(self, descriptor: RequestDescriptor, request: Any) -> str:
        headers = request.headers if isinstance(request, httpx.Request) else descriptor.headers
        return "\n".join(f"\t\t{name}: {value}" for name, value in headers.multi_items())

    def format_body(self, descriptor: RequestDescriptor, request: Any) -> str:
        if isinstance(request, httpx.Request):
            text = request.content.decode(descriptor.charset, errors="replace")
        else:
            text = "".join(
                fragment.decode(descriptor.charset, errors="replace")
                if isinstance(fragment, bytes)
                else str(fragment)
                for fragment in descriptor.body
            )
        return "\\n".join(text.splitlines())

    def format_response(self, response: Response) -> str:
        return f"Response: Status = {response.status_code}, Time = {_elapsed_ms(response)}ms"


def _elapsed_ms(response: Response) -> int:
    return int(response.elapsed * 1000)

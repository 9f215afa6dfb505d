r"""Response entity handed back to callers.

A ``Response`` exists for every terminal outcome, including attempts where
the transport produced no reply: in that case it is a sentinel with an
undefined status code that is never classified as a success. The body is
materialized lazily on first read and cached, so reading it twice never
triggers a second transfer.
"""

from __future__ import annotations

__all__ = ["Progress", "Response"]

import json
import logging
import threading
import time
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from reqengine.descriptor import RequestDescriptor
    from reqengine.handler import LifecycleHandler

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Progress:
    """Download progress reported while a body is materialized.

    Attributes:
        descriptor: The descriptor of the request being downloaded.
        current: Number of bytes read so far.
        total: Expected number of bytes, or None if the reply did not
            declare a Content-Length.
        done: Whether the body has been read completely.
    """

    descriptor: RequestDescriptor
    current: int
    total: int | None
    done: bool

    @property
    def rate(self) -> float | None:
        """Fraction of the body read so far, if the total is known."""
        if not self.total:
            return None
        return self.current / self.total


class Response:
    r"""Outcome of one attempt, as delivered to handlers and callers.

    Args:
        descriptor: The descriptor of the request this response answers.
        raw: The raw transport reply, or None when no reply was obtained.
        handler: Optional lifecycle handler receiving download progress.
        attempt: The zero-based index of the attempt this response answers.
        started_at: Timestamp (``time.time()``) when the attempt was sent.
        finished_at: Timestamp when the reply (or failure) was observed.
        cause: The error that prevented a reply, if any.

    Example:
        ```pycon
        >>> import httpx
        >>> from reqengine.descriptor import RequestDescriptor
        >>> from reqengine.response import Response
        >>> descriptor = RequestDescriptor("https://example.com")
        >>> response = Response(descriptor, httpx.Response(200, content=b"ok"))
        >>> response.status_code, response.is_success, response.text
        (200, True, 'ok')
        >>> Response(descriptor, None).is_success
        False

        ```
    """

    def __init__(
        self,
        descriptor: RequestDescriptor,
        raw: Any | None,
        *,
        handler: LifecycleHandler | None = None,
        attempt: int = 0,
        started_at: float | None = None,
        finished_at: float | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.descriptor = descriptor
        self.raw = raw
        self.cause = cause
        self.attempt = attempt
        self.finished_at = finished_at if finished_at is not None else time.time()
        self.started_at = started_at if started_at is not None else self.finished_at
        self._handler = handler
        self._content: bytes | None = None
        self._content_lock = threading.Lock()

    def __repr__(self) -> str:
        if self.is_absent:
            return f"<{self.__class__.__qualname__} [absent]>"
        return f"<{self.__class__.__qualname__} [{self.status_code}]>"

    @property
    def is_absent(self) -> bool:
        """Whether the transport produced no reply for this attempt."""
        return self.raw is None

    @cached_property
    def status_code(self) -> int | None:
        if self.raw is None:
            return None
        return self.raw.status_code

    @cached_property
    def headers(self) -> httpx.Headers:
        if self.raw is None:
            return httpx.Headers()
        return httpx.Headers(self.raw.headers)

    @cached_property
    def is_success(self) -> bool:
        """Success verdict of the descriptor's predicate, evaluated once."""
        if self.status_code is None:
            return False
        return bool(self.descriptor.success_predicate(self.status_code))

    @property
    def is_error(self) -> bool:
        return not self.is_success

    @property
    def elapsed(self) -> float:
        """Seconds between sending the attempt and observing its outcome."""
        return self.finished_at - self.started_at

    @property
    def content(self) -> bytes:
        """The response body, read from the transport at most once."""
        with self._content_lock:
            if self._content is None:
                self._content = self._read_body()
            return self._content

    @property
    def encoding(self) -> str:
        encoding = getattr(self.raw, "charset_encoding", None)
        return encoding or self.descriptor.charset

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding, errors="replace")

    def json(self, **kwargs: Any) -> Any:
        return json.loads(self.content, **kwargs)

    def _read_body(self) -> bytes:
        if self.raw is None:
            return b""
        if self._handler is None or self.descriptor.on_progress is None:
            return self.raw.read()
        return self._read_with_progress()

    def _read_with_progress(self) -> bytes:
        total = _content_length(self.headers)
        chunks: list[bytes] = []
        current = 0
        for chunk in self.raw.iter_bytes(chunk_size=self.descriptor.progress_step):
            chunks.append(chunk)
            current += len(chunk)
            self._handler.handle_progress(
                Progress(self.descriptor, current=current, total=total, done=False)
            )
        self._handler.handle_progress(
            Progress(self.descriptor, current=current, total=total or current, done=True)
        )
        logger.debug(f"Read {current} bytes from {self.descriptor.method} {self.descriptor.url}")
        return b"".join(chunks)


def _content_length(headers: httpx.Headers) -> int | None:
    value = headers.get("Content-Length")
    if value is None or not value.isdigit():
        return None
    return int(value)

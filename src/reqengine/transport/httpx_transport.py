r"""Transport implementation backed by ``httpx``."""

from __future__ import annotations

__all__ = ["HttpxCall", "HttpxTransport"]

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

import httpx

from reqengine.core.config import DEFAULT_TIMEOUT
from reqengine.exceptions import TransportError
from reqengine.transport.base import CallHandle, Transport
from reqengine.transport.wire import WireRequestBuilder

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType
    from typing import Self

    from reqengine.descriptor import RequestDescriptor

logger: logging.Logger = logging.getLogger(__name__)


class HttpxCall(CallHandle):
    """Call handle wrapping an ``httpx.Request`` and its reply."""

    def __init__(self, descriptor: RequestDescriptor, request: httpx.Request) -> None:
        super().__init__(descriptor, request)
        self.reply: httpx.Response | None = None

    def _release(self) -> None:
        if self.reply is not None:
            # The body is already buffered, so closing keeps it readable
            self.reply.close()


class HttpxTransport(Transport):
    r"""Transport sending requests through an ``httpx.Client``.

    Replies are read completely before being handed to the engine. Async
    submissions run on a thread pool so ``send_async`` never blocks the
    caller. ``httpx.RequestError`` (timeouts, connection, read and protocol
    errors) is reported as ``TransportError``.

    If no client is given, one is created and closed with the transport;
    a client passed in is left to its owner.

    Args:
        client: Optional ``httpx.Client`` used to send requests.
        builder: Optional builder translating descriptors into requests.
        max_workers: Maximum number of threads for async submissions.

    Example:
        ```pycon
        >>> import httpx
        >>> from reqengine.descriptor import RequestDescriptor
        >>> from reqengine.transport import HttpxTransport
        >>> mock = httpx.MockTransport(lambda request: httpx.Response(200, text="ok"))
        >>> with HttpxTransport(httpx.Client(transport=mock)) as transport:
        ...     call = transport.acquire(RequestDescriptor("https://example.com"))
        ...     reply = transport.send_sync(call)
        ...
        >>> reply.status_code, reply.text
        (200, 'ok')

        ```
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        builder: WireRequestBuilder | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client: httpx.Client = client or httpx.Client(timeout=DEFAULT_TIMEOUT)
        self._builder: WireRequestBuilder = builder or WireRequestBuilder()
        self._max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None
        self._lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def client(self) -> httpx.Client:
        return self._client

    @property
    def closed(self) -> bool:
        return self._closed

    def acquire(self, descriptor: RequestDescriptor) -> HttpxCall:
        return HttpxCall(descriptor, self._builder.build(descriptor, self._client))

    def send_sync(self, call: CallHandle) -> httpx.Response:
        descriptor = call.descriptor
        if self._closed:
            raise self._closed_error(descriptor)
        try:
            reply = self._client.send(call.request)
        except httpx.RequestError as exc:
            msg = f"{descriptor.method} request to {descriptor.url} failed: {exc}"
            raise TransportError(
                method=descriptor.method, url=descriptor.url, message=msg, cause=exc
            ) from exc
        if isinstance(call, HttpxCall):
            call.reply = reply
        return reply

    def send_async(
        self,
        call: CallHandle,
        on_complete: Callable[[Any], None],
        on_failure: Callable[[BaseException], None],
    ) -> None:
        with self._lock:
            if self._closed:
                raise self._closed_error(call.descriptor)
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="reqengine"
                )
            self._executor.submit(self._run, call, on_complete, on_failure)

    def close(self) -> None:
        """Stop the worker threads and close the client if owned.

        Sending after ``close`` raises ``TransportError``, so retries still
        scheduled by the engine fail instead of reopening the transport.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
        if self._owns_client:
            self._client.close()

    def _closed_error(self, descriptor: RequestDescriptor) -> TransportError:
        return TransportError(
            method=descriptor.method,
            url=descriptor.url,
            message=f"{descriptor.method} request to {descriptor.url} failed: transport is closed",
        )

    def _run(
        self,
        call: CallHandle,
        on_complete: Callable[[Any], None],
        on_failure: Callable[[BaseException], None],
    ) -> None:
        try:
            reply = self.send_sync(call)
        except TransportError as exc:
            on_failure(exc)
            return
        except Exception as exc:
            descriptor = call.descriptor
            logger.debug(f"Unexpected error while sending {descriptor.method} {descriptor.url}")
            on_failure(
                TransportError(
                    method=descriptor.method,
                    url=descriptor.url,
                    message=f"{descriptor.method} request to {descriptor.url} failed: {exc}",
                    cause=exc,
                )
            )
            return
        on_complete(reply)

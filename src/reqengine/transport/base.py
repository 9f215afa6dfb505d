r"""Abstract transport seam between the engine and the wire."""

from __future__ import annotations

__all__ = ["CallHandle", "Transport"]

import logging
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from reqengine.descriptor import RequestDescriptor

logger: logging.Logger = logging.getLogger(__name__)


class CallHandle:
    r"""Handle on one attempt's wire request.

    A handle is acquired per attempt and released with ``close()`` once the
    attempt's outcome is known. Closing is idempotent.

    Args:
        descriptor: The descriptor the call was built from.
        request: The wire request ready to be sent.

    Example:
        ```pycon
        >>> from reqengine.descriptor import RequestDescriptor
        >>> from reqengine.transport import CallHandle
        >>> call = CallHandle(RequestDescriptor("https://example.com"), request=None)
        >>> call.closed
        False
        >>> call.close()
        >>> call.closed
        True

        ```
    """

    def __init__(self, descriptor: RequestDescriptor, request: Any) -> None:
        self.descriptor = descriptor
        self.request = request
        self._closed = False
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(method={self.descriptor.method!r}, "
            f"url={self.descriptor.url!r}, closed={self._closed})"
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the resources held by this attempt."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._release()

    def _release(self) -> None:
        """Hook for subclasses holding wire resources."""


class Transport(ABC):
    """Component owning the blocking I/O of the engine.

    Implementations raise (or report) ``reqengine.exceptions.TransportError``
    or an ``OSError`` when an attempt produces no reply; the engine wraps
    the latter in a ``TransportError``. A reply with any status code,
    including 4xx and 5xx, is a reply and never a transport error.
    """

    @abstractmethod
    def acquire(self, descriptor: RequestDescriptor) -> CallHandle:
        """Build the call for one attempt of ``descriptor``."""

    @abstractmethod
    def send_sync(self, call: CallHandle) -> Any:
        """Send the call and block until the reply is available.

        Args:
            call: The call to send.

        Returns:
            The raw reply.

        Raises:
            TransportError: if no reply was obtained. An ``OSError`` is
                treated the same way.
        """

    @abstractmethod
    def send_async(
        self,
        call: CallHandle,
        on_complete: Callable[[Any], None],
        on_failure: Callable[[BaseException], None],
    ) -> None:
        """Submit the call without blocking the caller.

        Exactly one of the callbacks is expected to be invoked, from any
        thread, possibly before this method returns.

        Args:
            call: The call to send.
            on_complete: Receives the raw reply.
            on_failure: Receives the ``TransportError``.
        """

r"""Lifecycle handlers receiving the outcomes of a request.

The engine never delivers results itself: it hands responses, failures and
progress events to a ``LifecycleHandler``. ``DefaultLifecycleHandler``
routes them through the descriptor's decoder and ``on_success`` /
``on_error`` / ``on_progress`` callbacks.
"""

from __future__ import annotations

__all__ = ["DefaultLifecycleHandler", "LifecycleHandler"]

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from reqengine.exceptions import DecodeError, RetryExhaustedError, TransportError

if TYPE_CHECKING:
    from reqengine.descriptor import RequestDescriptor
    from reqengine.future import ResultFuture
    from reqengine.response import Progress, Response
    from reqengine.response_factory import ResponseFactory

logger: logging.Logger = logging.getLogger(__name__)


class LifecycleHandler(ABC):
    """Capability set receiving the outcomes of one logical request."""

    @abstractmethod
    def handle_success(self, response: Response) -> Any:
        """Deliver a successful response to the descriptor's success
        callback.

        Args:
            response: The successful response.

        Returns:
            The result delivered to the caller.
        """

    @abstractmethod
    def handle_error(
        self, descriptor: RequestDescriptor, response: Response, cause: Exception
    ) -> Any:
        """Deliver a terminal failure.

        Args:
            descriptor: The descriptor of the failed request.
            response: The response of the failed attempt. For transport
                failures this is the absent-reply sentinel.
            cause: The failure.
        """

    @abstractmethod
    def handle_sync(self, raw: Any | None, response: Response) -> Any:
        """Deliver a response through the plain result path.

        Used for successes without a success callback and for replies that
        failed the success predicate once retries are exhausted.

        Args:
            raw: The raw transport reply.
            response: The response built from it.

        Returns:
            The result delivered to the caller.
        """

    def handle_future(self, future: ResultFuture, factory: ResponseFactory) -> Any:  # noqa: ARG002
        """Return what an asynchronous ``execute`` hands back to its caller.

        Defaults to the future itself.
        """
        return future

    def handle_progress(self, progress: Progress) -> None:  # noqa: B027
        """Receive download progress. Ignored by default."""


class DefaultLifecycleHandler(LifecycleHandler):
    r"""Handler routing outcomes through the descriptor's callbacks.

    Results are produced by ``descriptor.decoder`` when set, otherwise the
    ``Response`` itself is the result. Decoder failures are wrapped in
    ``DecodeError`` and delivered through ``handle_error``.

    Terminal failures are delivered to ``descriptor.on_error`` when set.
    Without one, a synchronous request raises the failure (a
    ``RetryExhaustedError`` for transport failures); an asynchronous request
    leaves it to the future.

    Example:
        ```pycon
        >>> import httpx
        >>> from reqengine.descriptor import RequestDescriptor
        >>> from reqengine.handler import DefaultLifecycleHandler
        >>> from reqengine.response import Response
        >>> descriptor = RequestDescriptor("https://example.com", decoder=lambda r: r.text.upper())
        >>> response = Response(descriptor, httpx.Response(200, content=b"ok"))
        >>> DefaultLifecycleHandler().handle_sync(response.raw, response)
        'OK'

        ```
    """

    def handle_success(self, response: Response) -> Any:
        result = self._decode(response)
        if response.descriptor.on_success is not None:
            response.descriptor.on_success(result, response.descriptor, response)
        return result

    def handle_error(
        self, descriptor: RequestDescriptor, response: Response, cause: Exception
    ) -> None:
        logger.debug(f"{descriptor.method} request to {descriptor.url} failed: {cause}")
        if descriptor.on_error is not None:
            descriptor.on_error(cause, descriptor, response)
            return
        if descriptor.is_async:
            return
        if isinstance(cause, TransportError):
            raise RetryExhaustedError(
                method=descriptor.method,
                url=descriptor.url,
                message=f"{descriptor.method} request to {descriptor.url} failed: {cause.message}",
                response=response,
                cause=cause,
                attempts=response.attempt + 1,
            ) from cause
        raise cause

    def handle_sync(self, raw: Any | None, response: Response) -> Any:  # noqa: ARG002
        if response.is_error:
            return response
        return self._decode(response)

    def handle_progress(self, progress: Progress) -> None:
        on_progress = progress.descriptor.on_progress
        if on_progress is not None:
            on_progress(progress)

    def _decode(self, response: Response) -> Any:
        decoder = response.descriptor.decoder
        if decoder is None:
            return response
        try:
            return decoder(response)
        except Exception as exc:
            descriptor = response.descriptor
            error = DecodeError(
                method=descriptor.method,
                url=descriptor.url,
                message=f"Failed to decode response of {descriptor.method} {descriptor.url}: {exc}",
                status_code=response.status_code,
                response=response,
                cause=exc,
            )
            self.handle_error(descriptor, response, error)
            if descriptor.is_async:
                raise error from exc
            return None

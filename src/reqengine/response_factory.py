r"""Factory building ``Response`` entities from raw transport replies."""

from __future__ import annotations

__all__ = ["ResponseFactory"]

import logging
import time
from typing import TYPE_CHECKING, Any

from reqengine.response import Response

if TYPE_CHECKING:
    from reqengine.descriptor import RequestDescriptor
    from reqengine.handler import LifecycleHandler

logger: logging.Logger = logging.getLogger(__name__)


class ResponseFactory:
    """Build the single ``Response`` type used downstream of the transport.

    An absent reply yields the sentinel response (undefined status, never a
    success) instead of None, so logging and handlers deal with one type.

    Example:
        ```pycon
        >>> import httpx
        >>> from reqengine.descriptor import RequestDescriptor
        >>> from reqengine.response_factory import ResponseFactory
        >>> factory = ResponseFactory()
        >>> descriptor = RequestDescriptor("https://example.com")
        >>> factory.create_response(descriptor, httpx.Response(503), None).is_success
        False
        >>> factory.create_response(descriptor, None, None).status_code is None
        True

        ```
    """

    def create_response(
        self,
        descriptor: RequestDescriptor,
        raw: Any | None,
        handler: LifecycleHandler | None,
        *,
        attempt: int = 0,
        started_at: float | None = None,
        cause: BaseException | None = None,
    ) -> Response:
        """Create the response for one attempt.

        Args:
            descriptor: The descriptor of the request.
            raw: The raw transport reply, or None if no reply was obtained.
            handler: Lifecycle handler receiving download progress events.
            attempt: The zero-based index of the attempt.
            started_at: Timestamp when the attempt was sent.
            cause: The error that prevented a reply, if any.

        Returns:
            The response. Its success verdict is already evaluated.
        """
        response = Response(
            descriptor,
            raw,
            handler=handler,
            attempt=attempt,
            started_at=started_at,
            finished_at=time.time(),
            cause=cause,
        )
        if raw is None:
            logger.debug(f"No reply for {descriptor.method} {descriptor.url}: {cause}")
        # Evaluate the predicate once, while the attempt is still current
        response.is_success  # noqa: B018
        return response

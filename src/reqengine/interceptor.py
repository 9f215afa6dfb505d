r"""Interceptors observing and vetoing the execution of a request.

An ``Interceptor`` is attached to a ``RequestDescriptor`` and consulted by
the engine around one logical request:

- ``before_execute`` runs once before the first attempt and can veto the
  request by returning ``False``;
- ``on_success`` runs after a successful reply has been delivered;
- ``on_error`` runs before a terminal transport failure is delivered;
- ``after_execute`` runs once the outcome has been delivered, whatever it
  was.

Interceptors that need per-request state keep it in the descriptor's
attachment store.
"""

from __future__ import annotations

__all__ = ["Interceptor", "InterceptorChain"]

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

    from reqengine.descriptor import RequestDescriptor
    from reqengine.response import Response

logger: logging.Logger = logging.getLogger(__name__)


class Interceptor:
    r"""Base class of request interceptors.

    Every hook is a no-op by default, so subclasses only override the hooks
    they need.

    Example:
        ```pycon
        >>> from reqengine.descriptor import RequestDescriptor
        >>> from reqengine.interceptor import Interceptor
        >>> class BlockDeletes(Interceptor):
        ...     def before_execute(self, descriptor):
        ...         return descriptor.method != "DELETE"
        ...
        >>> descriptor = RequestDescriptor("https://example.com", method="delete")
        >>> BlockDeletes().before_execute(descriptor)
        False

        ```
    """

    def before_execute(self, descriptor: RequestDescriptor) -> bool:  # noqa: ARG002
        """Return ``False`` to prevent the request from being sent."""
        return True

    def on_success(self, result: Any, descriptor: RequestDescriptor, response: Response) -> None:
        """Observe the result delivered for a successful reply."""

    def on_error(
        self, error: Exception, descriptor: RequestDescriptor, response: Response
    ) -> None:
        """Observe a terminal failure before it is delivered."""

    def after_execute(self, descriptor: RequestDescriptor, response: Response) -> None:
        """Observe the final response once the outcome is delivered."""


class InterceptorChain:
    r"""Ordered interceptors invoked as one.

    ``before_execute`` stops at the first interceptor vetoing the request.
    The other hooks invoke every interceptor in insertion order.

    Example:
        ```pycon
        >>> from reqengine.descriptor import RequestDescriptor
        >>> from reqengine.interceptor import Interceptor, InterceptorChain
        >>> chain = InterceptorChain([Interceptor()])
        >>> len(chain), chain.before_execute(RequestDescriptor("https://example.com"))
        (1, True)

        ```
    """

    def __init__(self, interceptors: list[Interceptor] | None = None) -> None:
        self._interceptors: list[Interceptor] = list(interceptors or [])

    def __len__(self) -> int:
        return len(self._interceptors)

    def __iter__(self) -> Iterator[Interceptor]:
        return iter(self._interceptors)

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}({self._interceptors!r})"

    def add(self, interceptor: Interceptor) -> InterceptorChain:
        self._interceptors.append(interceptor)
        return self

    def before_execute(self, descriptor: RequestDescriptor) -> bool:
        for interceptor in self._interceptors:
            if not interceptor.before_execute(descriptor):
                logger.debug(
                    f"{descriptor.method} request to {descriptor.url} vetoed by {interceptor!r}"
                )
                return False
        return True

    def on_success(self, result: Any, descriptor: RequestDescriptor, response: Response) -> None:
        for interceptor in self._interceptors:
            interceptor.on_success(result, descriptor, response)

    def on_error(
        self, error: Exception, descriptor: RequestDescriptor, response: Response
    ) -> None:
        for interceptor in self._interceptors:
            interceptor.on_error(error, descriptor, response)

    def after_execute(self, descriptor: RequestDescriptor, response: Response) -> None:
        for interceptor in self._interceptors:
            interceptor.after_execute(descriptor, response)

r"""Request descriptor and request-scoped attachment store.

A ``RequestDescriptor`` is the fully resolved configuration of one
logical request: URL, method, headers, query parameters, body fragments,
retry limits, async flag, success classification and the user callbacks.
It is built once by the caller and handed to the execution engine, which
only reads it.
"""

from __future__ import annotations

__all__ = ["AttachmentKey", "AttachmentStore", "RequestDescriptor"]

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar
from urllib.parse import urlencode

import httpx

from reqengine.core.config import (
    DEFAULT_MAX_RETRY_INTERVAL,
    DEFAULT_PROGRESS_STEP,
    DEFAULT_RETRY_COUNT,
    DEFAULT_TIMEOUT,
    is_ok_status,
)
from reqengine.core.validation import (
    validate_progress_step,
    validate_retry_params,
    validate_timeout,
)
from reqengine.interceptor import InterceptorChain

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from reqengine.interceptor import Interceptor
    from reqengine.response import Progress, Response
    from reqengine.retry.policy import RetryPolicy

T = TypeVar("T")

_MISSING = object()


class AttachmentKey(Generic[T]):
    """Opaque capability tag used to address an ``AttachmentStore``.

    Keys compare by identity: two keys with the same name are distinct,
    so an extension can only read the values it holds the key for.

    Args:
        name: A human readable name, used in ``repr`` only.

    Example:
        ```pycon
        >>> from reqengine.descriptor import AttachmentKey
        >>> AttachmentKey("trace-id")
        AttachmentKey('trace-id')
        >>> AttachmentKey("trace-id") == AttachmentKey("trace-id")
        False

        ```
    """

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}({self.name!r})"


class AttachmentStore:
    """Request-scoped key→value store for cross-cutting extensions.

    Example:
        ```pycon
        >>> from reqengine.descriptor import AttachmentKey, AttachmentStore
        >>> TRACE_ID = AttachmentKey("trace-id")
        >>> store = AttachmentStore()
        >>> store.set(TRACE_ID, "abc")
        >>> store.get(TRACE_ID)
        'abc'
        >>> TRACE_ID in store, len(store)
        (True, 1)

        ```
    """

    def __init__(self) -> None:
        self._values: dict[AttachmentKey[Any], Any] = {}

    def set(self, key: AttachmentKey[T], value: T) -> None:
        self._values[key] = value

    def get(self, key: AttachmentKey[T], default: T | None = None) -> T | None:
        return self._values.get(key, default)

    def pop(self, key: AttachmentKey[T], default: Any = _MISSING) -> T:
        """Remove and return the value stored under ``key``.

        Raises:
            KeyError: If the key is absent and no default is given.
        """
        if default is _MISSING:
            return self._values.pop(key)
        return self._values.pop(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[AttachmentKey[Any]]:
        return iter(self._values)


@dataclass
class RequestDescriptor:
    """Fully resolved configuration of one logical request.

    Args:
        url: The resolved request URL.
        method: The HTTP method. Stored upper-cased.
        headers: Ordered header multimap.
        query: Ordered query parameters as name/value pairs.
        body: Ordered body fragments (``str``, ``bytes`` or mappings).
        content_type: Optional Content-Type of the body.
        charset: Charset used to encode text fragments and decode text
            replies that do not declare one.
        timeout: Maximum seconds to wait for a single attempt.
        retry_count: Maximum number of retries after the initial attempt.
        max_retry_interval: Maximum wait in seconds between two attempts.
        is_async: Whether the engine dispatches without blocking the caller.
        success_predicate: Classifies a status code as success or failure.
        log_enabled: Whether request/response summaries are emitted.
        on_success: Optional callback ``(result, descriptor, response)``.
        on_error: Optional callback ``(error, descriptor, response)``.
        on_progress: Optional callback receiving download ``Progress``.
        progress_step: Number of bytes between two progress events.
        decoder: Optional callable converting a ``Response`` to a result.
        retry_policy: Optional policy overriding the engine default.
        attachments: Request-scoped extension store.
        interceptors: Interceptors consulted around the execution. A
            list is converted to an ``InterceptorChain``.

    Example:
        ```pycon
        >>> from reqengine.descriptor import RequestDescriptor
        >>> descriptor = RequestDescriptor("https://example.com/items", method="post")
        >>> _ = descriptor.add_query("page", 2).add_header("Accept", "application/json")
        >>> descriptor.query_string
        'page=2'

        ```
    """

    url: str
    method: str = "GET"
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    query: list[tuple[str, str]] = field(default_factory=list)
    body: list[Any] = field(default_factory=list)
    content_type: str | None = None
    charset: str = "utf-8"
    timeout: float = DEFAULT_TIMEOUT
    retry_count: int = DEFAULT_RETRY_COUNT
    max_retry_interval: float = DEFAULT_MAX_RETRY_INTERVAL
    is_async: bool = False
    success_predicate: Callable[[int], bool] = is_ok_status
    log_enabled: bool = False
    on_success: Callable[[Any, RequestDescriptor, Response], None] | None = None
    on_error: Callable[[Exception, RequestDescriptor, Response], None] | None = None
    on_progress: Callable[[Progress], None] | None = None
    progress_step: int = DEFAULT_PROGRESS_STEP
    decoder: Callable[[Response], Any] | None = None
    retry_policy: RetryPolicy | None = None
    attachments: AttachmentStore = field(default_factory=AttachmentStore)
    interceptors: InterceptorChain = field(default_factory=InterceptorChain)

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if not isinstance(self.headers, httpx.Headers):
            self.headers = httpx.Headers(self.headers)
        self.query = [(str(name), str(value)) for name, value in self.query]
        if not isinstance(self.interceptors, InterceptorChain):
            self.interceptors = InterceptorChain(list(self.interceptors))
        validate_timeout(self.timeout)
        validate_retry_params(
            retry_count=self.retry_count, max_retry_interval=self.max_retry_interval
        )
        validate_progress_step(self.progress_step)

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(url={self.url!r}, method={self.method!r}, ...)"

    @property
    def query_string(self) -> str:
        """The query parameters encoded in insertion order."""
        return urlencode(self.query)

    def add_header(self, name: str, value: str) -> RequestDescriptor:
        self.headers = httpx.Headers([*self.headers.multi_items(), (name, str(value))])
        return self

    def add_query(self, name: str, value: object) -> RequestDescriptor:
        self.query.append((name, str(value)))
        return self

    def add_body(self, fragment: Any) -> RequestDescriptor:
        self.body.append(fragment)
        return self

    def replace_body(self, fragments: Iterable[Any]) -> RequestDescriptor:
        self.body = list(fragments)
        return self

    def add_interceptor(self, interceptor: Interceptor) -> RequestDescriptor:
        self.interceptors.add(interceptor)
        return self

    def set_attachment(self, key: AttachmentKey[T], value: T) -> RequestDescriptor:
        self.attachments.set(key, value)
        return self

    def get_attachment(self, key: AttachmentKey[T], default: T | None = None) -> T | None:
        return self.attachments.get(key, default)

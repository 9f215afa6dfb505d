r"""Context manager client executing requests through the engine.

``EngineClient`` bundles an ``EngineConfig``, an ``HttpxTransport`` and an
``ExecutionEngine`` so that many requests share one connection pool and one
set of retry and logging defaults.
"""

from __future__ import annotations

__all__ = ["EngineClient"]

import json as jsonlib
from typing import TYPE_CHECKING, Any

from reqengine.core.config import EngineConfig
from reqengine.engine import ExecutionEngine
from reqengine.transport import HttpxTransport

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType
    from typing import Self

    import httpx

    from reqengine.descriptor import RequestDescriptor
    from reqengine.handler import LifecycleHandler
    from reqengine.transport import Transport
    from reqengine.utils.request_logging import LoggingSink


class EngineClient:
    r"""Client executing requests with shared configuration.

    The transport is created from ``client`` (or a default ``httpx.Client``)
    unless one is given. A transport created by ``EngineClient`` is closed
    when the ``with`` block exits; a transport or ``httpx.Client`` passed in
    is left open for its owner.

    .. code-block:: python

        from reqengine import EngineClient, EngineConfig

        with EngineClient(config=EngineConfig(retry_count=3)) as client:
            response = client.get("https://api.example.com/items", params={"page": 2})
            future = client.post(
                "https://api.example.com/items", json={"name": "x"}, is_async=True
            )

    Args:
        config: Defaults applied to every request. Defaults to
            ``EngineConfig()``.
        client: Optional ``httpx.Client`` used by the default transport.
        transport: Optional transport replacing the default one.
        logging_sink: Optional destination of request and response
            summaries.

    Example:
        ```pycon
        >>> import httpx
        >>> from reqengine import EngineClient
        >>> mock = httpx.MockTransport(lambda request: httpx.Response(200, text="ok"))
        >>> with EngineClient(client=httpx.Client(transport=mock)) as client:
        ...     response = client.get("https://example.com")
        ...
        >>> response.status_code
        200

        ```
    """

    def __init__(
        self,
        *,
        config: EngineConfig | None = None,
        client: httpx.Client | None = None,
        transport: Transport | None = None,
        logging_sink: LoggingSink | None = None,
    ) -> None:
        self._config: EngineConfig = config or EngineConfig()
        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpxTransport(client)
        self._engine = ExecutionEngine(
            self._transport,
            retry_policy=self._config.retry_policy,
            logging_sink=logging_sink,
        )

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
    def config(self) -> EngineConfig:
        return self._config

    @property
    def engine(self) -> ExecutionEngine:
        return self._engine

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            self._transport.close()

    def build_descriptor(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        content: str | bytes | None = None,
        data: Mapping[str, Any] | None = None,
        json: Any = None,
        **overrides: Any,
    ) -> RequestDescriptor:
        r"""Build the descriptor of a request from the client defaults.

        Args:
            method: The HTTP method.
            url: The request URL.
            headers: Optional request headers.
            params: Optional query parameters.
            content: Optional raw body.
            data: Optional form body.
            json: Optional JSON body, serialized with the descriptor's
                charset.
            **overrides: Descriptor fields overriding the config values,
                for example ``retry_count``, ``is_async`` or ``decoder``.

        Returns:
            The descriptor.

        Raises:
            ValueError: if more than one of ``content``, ``data`` and
                ``json`` is given.
        """
        bodies = [
            name
            for name, value in (("content", content), ("data", data), ("json", json))
            if value is not None
        ]
        if len(bodies) > 1:
            msg = f"Only one of content, data and json can be given, got {', '.join(bodies)}"
            raise ValueError(msg)
        descriptor = self._config.build_descriptor(url, method, **overrides)
        for name, value in (headers or {}).items():
            descriptor.add_header(name, value)
        for name, value in (params or {}).items():
            descriptor.add_query(name, value)
        if content is not None:
            descriptor.add_body(content)
        if data is not None:
            descriptor.add_body(data)
        if json is not None:
            descriptor.add_body(jsonlib.dumps(json).encode(descriptor.charset))
            if descriptor.content_type is None:
                descriptor.content_type = "application/json"
        return descriptor

    def request(
        self, method: str, url: str, *, handler: LifecycleHandler | None = None, **kwargs: Any
    ) -> Any:
        r"""Execute a request.

        Args:
            method: The HTTP method.
            url: The request URL.
            handler: Optional lifecycle handler receiving the outcome.
            **kwargs: See ``build_descriptor``.

        Returns:
            The result delivered by the engine: a ``Response`` (or decoded
            result) for synchronous requests, a ``ResultFuture`` for
            asynchronous ones.

        Raises:
            RetryExhaustedError: if a synchronous request failed without
                reply after all retries.
        """
        return self._engine.execute(self.build_descriptor(method, url, **kwargs), handler)

    def get(self, url: str, **kwargs: Any) -> Any:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> Any:
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> Any:
        return self.request("PUT", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> Any:
        return self.request("DELETE", url, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> Any:
        return self.request("PATCH", url, **kwargs)

    def head(self, url: str, **kwargs: Any) -> Any:
        return self.request("HEAD", url, **kwargs)

    def options(self, url: str, **kwargs: Any) -> Any:
        return self.request("OPTIONS", url, **kwargs)

r"""reqengine - Request execution engine with pluggable retries and
transports.

This package executes fully resolved request descriptors against a
transport, retrying failed attempts according to a retry policy and
delivering the outcome through a lifecycle handler, either synchronously or
through a single-assignment future.

Key Features:
    - One engine for blocking and callback-driven execution
    - Retry policies deciding on transport failures and failing replies alike
    - Exponential, linear and constant backoff with Retry-After support
    - Lazily read, cached response bodies with download progress events
    - Request and response summaries with optional JSON structured logging
    - ``httpx`` transport and a context manager client

Example:
    ```pycon
    >>> from reqengine import EngineClient, EngineConfig
    >>> with EngineClient(config=EngineConfig(retry_count=3)) as client:  # doctest: +SKIP
    ...     response = client.get("https://api.example.com/data")
    ...

    ```
"""

from __future__ import annotations

__all__ = [
    "ApplicationError",
    "AttachmentKey",
    "BackoffRetryPolicy",
    "CallHandle",
    "DecodeError",
    "DefaultLifecycleHandler",
    "DefaultRetryPolicy",
    "EngineClient",
    "EngineConfig",
    "ExecutionEngine",
    "FutureState",
    "HttpxTransport",
    "Interceptor",
    "InterceptorChain",
    "LifecycleHandler",
    "NeverRetryPolicy",
    "Progress",
    "RequestDescriptor",
    "RequestError",
    "Response",
    "ResponseFactory",
    "ResultFuture",
    "RetryContext",
    "RetryExhaustedError",
    "RetryPolicy",
    "Transport",
    "TransportError",
    "__version__",
]

from importlib.metadata import PackageNotFoundError, version

from reqengine.client import EngineClient
from reqengine.core.config import EngineConfig
from reqengine.descriptor import AttachmentKey, RequestDescriptor
from reqengine.engine import ExecutionEngine
from reqengine.exceptions import (
    ApplicationError,
    DecodeError,
    RequestError,
    RetryExhaustedError,
    TransportError,
)
from reqengine.future import FutureState, ResultFuture
from reqengine.handler import DefaultLifecycleHandler, LifecycleHandler
from reqengine.interceptor import Interceptor, InterceptorChain
from reqengine.response import Progress, Response
from reqengine.response_factory import ResponseFactory
from reqengine.retry import (
    BackoffRetryPolicy,
    DefaultRetryPolicy,
    NeverRetryPolicy,
    RetryContext,
    RetryPolicy,
)
from reqengine.transport import CallHandle, HttpxTransport, Transport

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

r"""Transport layer sending wire requests on behalf of the engine."""

from __future__ import annotations

__all__ = ["CallHandle", "HttpxCall", "HttpxTransport", "Transport", "WireRequestBuilder"]

from reqengine.transport.base import CallHandle, Transport
from reqengine.transport.httpx_transport import HttpxCall, HttpxTransport
from reqengine.transport.wire import WireRequestBuilder

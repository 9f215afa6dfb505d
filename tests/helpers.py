r"""Shared test doubles for the engine and transport tests.

``StubTransport`` replays a scripted sequence of outcomes and counts every
interaction, so tests can assert how many attempts were sent and that each
call was closed exactly once.
"""

from __future__ import annotations

__all__ = [
    "StubCall",
    "StubTransport",
    "count_summaries",
    "make_transport_error",
    "status_reply",
]

import threading
from typing import TYPE_CHECKING, Any

import httpx

from reqengine.exceptions import TransportError
from reqengine.transport import CallHandle, Transport

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from unittest.mock import Mock

    from reqengine.descriptor import RequestDescriptor


def make_transport_error(message: str = "connection reset") -> TransportError:
    return TransportError(
        method="GET",
        url="https://example.com/items",
        message=message,
        cause=httpx.ConnectError(message),
    )


def status_reply(status_code: int) -> Callable[[int], httpx.Response]:
    """Return an outcome producing a fresh reply tagged with its attempt."""

    def reply(attempt: int) -> httpx.Response:
        return httpx.Response(
            status_code, headers={"X-Attempt": str(attempt)}, content=f"attempt {attempt}".encode()
        )

    return reply


def count_summaries(sink: Mock, prefix: str) -> int:
    """Count the summaries starting with ``prefix`` sent to a mock sink."""
    return sum(1 for c in sink.log.call_args_list if c.args[0].startswith(prefix))


class StubCall(CallHandle):
    def __init__(self, descriptor: RequestDescriptor, attempt: int) -> None:
        super().__init__(descriptor, request=None)
        self.attempt = attempt
        self.close_count = 0

    def close(self) -> None:
        self.close_count += 1
        super().close()


class StubTransport(Transport):
    r"""Transport replaying scripted outcomes.

    Each outcome is a raw reply, an exception, or a callable receiving the
    attempt index and returning one of those. The last outcome repeats once
    the script is exhausted.

    Args:
        outcomes: The scripted outcomes.
        threaded: Whether ``send_async`` completes on a separate thread
            instead of inline.
        double_callback: Whether ``send_async`` invokes both callbacks.
        raise_on_submit: Whether ``send_async`` raises transport errors
            instead of reporting them through ``on_failure``.
    """

    def __init__(
        self,
        outcomes: Sequence[Any],
        *,
        threaded: bool = False,
        double_callback: bool = False,
        raise_on_submit: bool = False,
    ) -> None:
        self.outcomes = list(outcomes)
        self.threaded = threaded
        self.double_callback = double_callback
        self.raise_on_submit = raise_on_submit
        self.calls: list[StubCall] = []
        self.sends = 0
        self._lock = threading.Lock()

    def acquire(self, descriptor: RequestDescriptor) -> StubCall:
        call = StubCall(descriptor, attempt=len(self.calls))
        self.calls.append(call)
        return call

    def send_sync(self, call: CallHandle) -> Any:
        outcome = self._next_outcome()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def send_async(
        self,
        call: CallHandle,
        on_complete: Callable[[Any], None],
        on_failure: Callable[[BaseException], None],
    ) -> None:
        outcome = self._next_outcome()
        if isinstance(outcome, BaseException) and self.raise_on_submit:
            raise outcome

        def run() -> None:
            if isinstance(outcome, BaseException):
                on_failure(outcome)
                if self.double_callback:
                    on_complete(httpx.Response(200))
            else:
                on_complete(outcome)
                if self.double_callback:
                    on_failure(make_transport_error("late failure"))

        if self.threaded:
            threading.Thread(target=run, daemon=True).start()
        else:
            run()

    @property
    def close_counts(self) -> list[int]:
        return [call.close_count for call in self.calls]

    def _next_outcome(self) -> Any:
        with self._lock:
            attempt = self.sends
            self.sends += 1
        outcome = self.outcomes[min(attempt, len(self.outcomes) - 1)]
        if callable(outcome) and not isinstance(outcome, BaseException):
            return outcome(attempt)
        return outcome

r"""Execution engine driving the attempt loop of a request.

One engine serves both execution modes of a descriptor:

- synchronous: the calling thread blocks in an explicit attempt loop and
  receives the delivered result;
- asynchronous: ``execute`` returns immediately and the outcome is delivered
  through a ``ResultFuture`` from whichever thread the transport completes
  on. Retries are re-submitted through a trampoline, never by recursion, so
  a transport calling back synchronously cannot grow the stack.

Interceptors attached to the descriptor are consulted once before the
first attempt, which they can veto, and once the outcome is delivered.

Transport failures and replies failing the success predicate are both
offered to the retry policy first. Once the policy denies another attempt, a
transport failure is a true failure (``handle_error``, failed future) while
a failing reply is data delivered through the regular result path.
"""

from __future__ import annotations

__all__ = ["ExecutionEngine"]

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from reqengine.exceptions import ApplicationError, RequestError, TransportError
from reqengine.future import ResultFuture
from reqengine.handler import DefaultLifecycleHandler
from reqengine.response_factory import ResponseFactory
from reqengine.retry import DefaultRetryPolicy, RetryContext
from reqengine.utils.request_logging import RequestLogger

if TYPE_CHECKING:
    from reqengine.descriptor import RequestDescriptor
    from reqengine.handler import LifecycleHandler
    from reqengine.response import Response
    from reqengine.retry import RetryPolicy
    from reqengine.transport import CallHandle, Transport
    from reqengine.utils.request_logging import LoggingSink

logger: logging.Logger = logging.getLogger(__name__)


class _OutcomeKind(Enum):
    RETRY = "retry"
    SUCCESS = "success"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class _Outcome:
    kind: _OutcomeKind
    delay: float = 0.0
    raw: Any = None
    response: Response | None = None
    cause: RequestError | None = None


class ExecutionEngine:
    r"""Drive a request descriptor through its attempts.

    Args:
        transport: The transport sending each attempt.
        response_factory: Factory building responses. Defaults to
            ``ResponseFactory()``.
        retry_policy: Policy used for descriptors without their own.
            Defaults to ``DefaultRetryPolicy()``.
        logging_sink: Destination of request and response summaries of
            descriptors with logging enabled. Defaults to
            ``StdLoggingSink()``.

    Example:
        ```pycon
        >>> import httpx
        >>> from reqengine import ExecutionEngine, HttpxTransport, RequestDescriptor
        >>> mock = httpx.MockTransport(lambda request: httpx.Response(200, text="ok"))
        >>> with HttpxTransport(httpx.Client(transport=mock)) as transport:
        ...     response = ExecutionEngine(transport).execute(
        ...         RequestDescriptor("https://example.com")
        ...     )
        ...
        >>> response.status_code, response.text
        (200, 'ok')

        ```
    """

    def __init__(
        self,
        transport: Transport,
        *,
        response_factory: ResponseFactory | None = None,
        retry_policy: RetryPolicy | None = None,
        logging_sink: LoggingSink | None = None,
    ) -> None:
        self.transport = transport
        self.response_factory: ResponseFactory = response_factory or ResponseFactory()
        self.retry_policy = retry_policy
        self.request_logger = RequestLogger(logging_sink)

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(transport={self.transport!r})"

    def execute(
        self, descriptor: RequestDescriptor, handler: LifecycleHandler | None = None
    ) -> Any:
        r"""Execute the request described by ``descriptor``.

        Args:
            descriptor: The fully resolved request.
            handler: The handler receiving the outcome. Defaults to
                ``DefaultLifecycleHandler()``.

        Returns:
            In synchronous mode, the delivered result: the handler's result
            for a success or a rejected reply, or the return value of
            ``handle_error`` for a terminal transport failure. In
            asynchronous mode, ``handler.handle_future(future, factory)``,
            the ``ResultFuture`` by default. When an interceptor vetoes the
            request nothing is sent: ``None`` is returned in synchronous
            mode and the future completes with ``None``.

        Raises:
            RetryExhaustedError: in synchronous mode, when the default
                handler receives a terminal transport failure and the
                descriptor has no ``on_error`` callback.
        """
        handler = handler or DefaultLifecycleHandler()
        if not descriptor.interceptors.before_execute(descriptor):
            if descriptor.is_async:
                future = ResultFuture()
                future.completed(None)
                return handler.handle_future(future, self.response_factory)
            return None
        policy = self._policy_for(descriptor)
        if descriptor.is_async:
            future = ResultFuture()
            _AsyncExecution(self, descriptor, handler, policy, future).submit(0)
            return handler.handle_future(future, self.response_factory)
        return self._execute_sync(descriptor, handler, policy)

    def _policy_for(self, descriptor: RequestDescriptor) -> RetryPolicy:
        if descriptor.retry_policy is not None:
            return descriptor.retry_policy
        if self.retry_policy is not None:
            return self.retry_policy
        return DefaultRetryPolicy()

    def _execute_sync(
        self, descriptor: RequestDescriptor, handler: LifecycleHandler, policy: RetryPolicy
    ) -> Any:
        attempt = 0
        while True:
            call = self.transport.acquire(descriptor)
            try:
                outcome = self._attempt_sync(descriptor, handler, policy, call, attempt)
                if outcome.kind is not _OutcomeKind.RETRY:
                    return self._deliver(descriptor, handler, outcome)
            finally:
                call.close()
            if outcome.delay > 0:
                logger.debug(f"Waiting {outcome.delay:.2f}s before attempt {attempt + 2}")
                time.sleep(outcome.delay)
            attempt += 1

    def _attempt_sync(
        self,
        descriptor: RequestDescriptor,
        handler: LifecycleHandler,
        policy: RetryPolicy,
        call: CallHandle,
        attempt: int,
    ) -> _Outcome:
        started_at = time.time()
        self.request_logger.log_request(descriptor, call.request, attempt)
        try:
            raw = self.transport.send_sync(call)
        except (TransportError, OSError) as exc:
            cause = _as_transport_error(descriptor, exc)
            return self._evaluate(descriptor, handler, policy, attempt, started_at, None, cause)
        return self._evaluate(descriptor, handler, policy, attempt, started_at, raw, None)

    def _evaluate(
        self,
        descriptor: RequestDescriptor,
        handler: LifecycleHandler,
        policy: RetryPolicy,
        attempt: int,
        started_at: float,
        raw: Any | None,
        cause: RequestError | None,
    ) -> _Outcome:
        """Classify the outcome of one attempt and consult the policy."""
        if cause is not None:
            context = RetryContext(descriptor=descriptor, attempt=attempt, cause=cause)
            if policy.should_retry(context):
                logger.debug(
                    f"{descriptor.method} request to {descriptor.url} failed on attempt "
                    f"{attempt + 1}, retrying: {cause.message}"
                )
                return _Outcome(_OutcomeKind.RETRY, delay=policy.next_delay(context))
            response = self.response_factory.create_response(
                descriptor, None, handler, attempt=attempt, started_at=started_at, cause=cause
            )
            self.request_logger.log_response(response)
            return _Outcome(_OutcomeKind.FAILED, response=response, cause=cause)

        response = self.response_factory.create_response(
            descriptor, raw, handler, attempt=attempt, started_at=started_at
        )
        self.request_logger.log_response(response)
        if response.is_success:
            return _Outcome(_OutcomeKind.SUCCESS, raw=raw, response=response)

        error = ApplicationError(
            method=descriptor.method,
            url=descriptor.url,
            message=(
                f"{descriptor.method} request to {descriptor.url} failed with status "
                f"{response.status_code}"
            ),
            status_code=response.status_code,
            response=response,
        )
        context = RetryContext(
            descriptor=descriptor, attempt=attempt, cause=error, response=response
        )
        if policy.should_retry(context):
            logger.debug(f"{error.message} on attempt {attempt + 1}, retrying")
            return _Outcome(_OutcomeKind.RETRY, delay=policy.next_delay(context))
        logger.debug(f"{error.message}, delivering the reply after {attempt + 1} attempt(s)")
        return _Outcome(_OutcomeKind.REJECTED, raw=raw, response=response)

    def _deliver(
        self, descriptor: RequestDescriptor, handler: LifecycleHandler, outcome: _Outcome
    ) -> Any:
        """Hand a terminal outcome to the handler and the interceptors and
        return the result."""
        interceptors = descriptor.interceptors
        try:
            if outcome.kind is _OutcomeKind.FAILED:
                interceptors.on_error(outcome.cause, descriptor, outcome.response)
                return handler.handle_error(descriptor, outcome.response, outcome.cause)
            if outcome.kind is _OutcomeKind.SUCCESS and descriptor.on_success is not None:
                result = handler.handle_success(outcome.response)
            else:
                result = handler.handle_sync(outcome.raw, outcome.response)
            if outcome.kind is _OutcomeKind.SUCCESS:
                interceptors.on_success(result, descriptor, outcome.response)
            return result
        finally:
            interceptors.after_execute(descriptor, outcome.response)


class _AsyncExecution:
    """Asynchronous attempt chain of one logical request.

    ``submit`` is a trampoline: the thread that starts a drain loop sends
    every attempt queued while it runs, so a transport completing inline
    hands the next attempt back to the loop instead of nesting a call.
    """

    def __init__(
        self,
        engine: ExecutionEngine,
        descriptor: RequestDescriptor,
        handler: LifecycleHandler,
        policy: RetryPolicy,
        future: ResultFuture,
    ) -> None:
        self._engine = engine
        self._descriptor = descriptor
        self._handler = handler
        self._policy = policy
        self._future = future
        self._lock = threading.Lock()
        self._next_attempt: int | None = None
        self._running = False

    def submit(self, attempt: int) -> None:
        with self._lock:
            self._next_attempt = attempt
            if self._running:
                return
            self._running = True
        while True:
            with self._lock:
                attempt = self._next_attempt
                self._next_attempt = None
                if attempt is None:
                    self._running = False
                    return
            self._send(attempt)

    def _send(self, attempt: int) -> None:
        descriptor = self._descriptor
        transport = self._engine.transport
        try:
            call = transport.acquire(descriptor)
        except Exception as exc:  # noqa: BLE001
            self._future.failed(exc)
            return

        started_at = time.time()
        once = _Once()

        def on_complete(raw: Any) -> None:
            if not once.claim():
                logger.debug(f"Ignoring duplicate completion of attempt {attempt + 1}")
                return
            self._resolve(call, attempt, started_at, raw, None)

        def on_failure(exc: BaseException) -> None:
            if not once.claim():
                logger.debug(f"Ignoring duplicate failure of attempt {attempt + 1}: {exc}")
                return
            self._resolve(call, attempt, started_at, None, _as_transport_error(descriptor, exc))

        try:
            self._engine.request_logger.log_request(descriptor, call.request, attempt)
            transport.send_async(call, on_complete, on_failure)
        except (TransportError, OSError) as exc:
            on_failure(exc)
        except Exception as exc:  # noqa: BLE001
            if once.claim():
                call.close()
                self._future.failed(exc)

    def _resolve(
        self,
        call: CallHandle,
        attempt: int,
        started_at: float,
        raw: Any | None,
        cause: RequestError | None,
    ) -> None:
        try:
            outcome = self._engine._evaluate(
                self._descriptor, self._handler, self._policy, attempt, started_at, raw, cause
            )
            if outcome.kind is not _OutcomeKind.RETRY:
                self._complete(outcome)
                return
        except Exception as exc:  # noqa: BLE001
            logger.debug(f"Delivery of {self._descriptor.method} {self._descriptor.url} failed")
            self._future.failed(exc)
            return
        finally:
            call.close()
        self._schedule(attempt + 1, outcome.delay)

    def _complete(self, outcome: _Outcome) -> None:
        result = self._engine._deliver(self._descriptor, self._handler, outcome)
        if outcome.kind is _OutcomeKind.FAILED:
            self._future.failed(outcome.cause)
            return
        self._future.completed(result)

    def _schedule(self, attempt: int, delay: float) -> None:
        if delay <= 0:
            self.submit(attempt)
            return
        logger.debug(f"Scheduling attempt {attempt + 1} in {delay:.2f}s")
        timer = threading.Timer(delay, self.submit, args=(attempt,))
        timer.daemon = True
        timer.start()


class _Once:
    """Thread-safe flag that can be claimed a single time."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._claimed = False

    def claim(self) -> bool:
        with self._lock:
            if self._claimed:
                return False
            self._claimed = True
            return True


def _as_transport_error(descriptor: RequestDescriptor, exc: BaseException) -> RequestError:
    if isinstance(exc, RequestError):
        return exc
    return TransportError(
        method=descriptor.method,
        url=descriptor.url,
        message=f"{descriptor.method} request to {descriptor.url} failed: {exc}",
        cause=exc,
    )

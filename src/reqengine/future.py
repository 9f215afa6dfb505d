r"""Single-assignment completion handle for asynchronous requests.

A ``ResultFuture`` transitions exactly once from ``PENDING`` to either
``COMPLETED`` or ``FAILED``. Later attempts to complete or fail it are
ignored, so a transport that reports an attempt twice can never cause a
second delivery.
"""

from __future__ import annotations

__all__ = ["FutureState", "ResultFuture"]

import logging
import threading
from concurrent.futures import Future
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)


class FutureState(Enum):
    """Result future states.

    Attributes:
        PENDING: No outcome has been delivered yet.
        COMPLETED: A result was delivered.
        FAILED: A failure was delivered.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class ResultFuture:
    r"""Thread-safe single-assignment future.

    Example:
        ```pycon
        >>> from reqengine.future import ResultFuture
        >>> future = ResultFuture()
        >>> future.completed("data")
        True
        >>> future.failed(RuntimeError("late"))
        False
        >>> future.state
        <FutureState.COMPLETED: 'completed'>
        >>> future.result()
        'data'

        ```
    """

    def __init__(self) -> None:
        self._future: Future[Any] = Future()
        self._claimed = False
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<{self.__class__.__qualname__} state={self.state.value}>"

    @property
    def state(self) -> FutureState:
        # Read from the inner future so a settled state always has its value
        if not self._future.done():
            return FutureState.PENDING
        if self._future.exception() is not None:
            return FutureState.FAILED
        return FutureState.COMPLETED

    def done(self) -> bool:
        return self._future.done()

    def completed(self, result: Any) -> bool:
        """Deliver a result.

        Args:
            result: The value to deliver.

        Returns:
            ``True`` if this call performed the transition, ``False`` if the
            future was already settled.
        """
        if not self._claim():
            logger.debug(f"Ignoring completion of settled future {self!r}")
            return False
        self._future.set_result(result)
        return True

    def failed(self, exception: BaseException) -> bool:
        """Deliver a failure.

        Args:
            exception: The failure to deliver.

        Returns:
            ``True`` if this call performed the transition, ``False`` if the
            future was already settled.
        """
        if not self._claim():
            logger.debug(f"Ignoring failure of settled future {self!r}: {exception}")
            return False
        self._future.set_exception(exception)
        return True

    def result(self, timeout: float | None = None) -> Any:
        """Block until the future is settled and return its result.

        Args:
            timeout: Maximum seconds to wait, or None to wait forever.

        Returns:
            The delivered result.

        Raises:
            TimeoutError: If the future is not settled within ``timeout``.
            Exception: The delivered failure, re-raised.
        """
        return self._future.result(timeout=timeout)

    def exception(self, timeout: float | None = None) -> BaseException | None:
        """Block until the future is settled and return its failure, if
        any."""
        return self._future.exception(timeout=timeout)

    def add_done_callback(self, fn: Callable[[ResultFuture], None]) -> None:
        """Invoke ``fn(self)`` once the future is settled.

        If the future is already settled, ``fn`` runs immediately in the
        calling thread.
        """
        self._future.add_done_callback(lambda _: fn(self))

    def _claim(self) -> bool:
        with self._lock:
            if self._claimed:
                return False
            self._claimed = True
            return True

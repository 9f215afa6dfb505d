r"""Unit tests for the retry policies."""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from reqengine.descriptor import RequestDescriptor
from reqengine.exceptions import ApplicationError, TransportError
from reqengine.response import Response
from reqengine.retry import (
    BackoffRetryPolicy,
    ConstantBackoff,
    DefaultRetryPolicy,
    ExponentialBackoff,
    LinearBackoff,
    NeverRetryPolicy,
    RetryContext,
    RetryPolicy,
)
from tests.helpers import make_transport_error


def transport_context(attempt: int, **kwargs: object) -> RetryContext:
    descriptor = RequestDescriptor("https://example.com", **kwargs)
    return RetryContext(descriptor=descriptor, attempt=attempt, cause=make_transport_error())


def status_context(attempt: int, status_code: int, headers: dict | None = None) -> RetryContext:
    descriptor = RequestDescriptor("https://example.com", retry_count=5)
    response = Response(descriptor, httpx.Response(status_code, headers=headers))
    error = ApplicationError(
        method="GET",
        url="https://example.com",
        message="failed",
        status_code=status_code,
        response=response,
    )
    return RetryContext(descriptor=descriptor, attempt=attempt, cause=error, response=response)


#################################
#     Tests for RetryPolicy     #
#################################


def test_retry_policy_default_delay() -> None:
    class AlwaysRetry(RetryPolicy):
        def should_retry(self, context: RetryContext) -> bool:  # noqa: ARG002
            return True

    assert AlwaysRetry().next_delay(transport_context(0)) == 0.0


######################################
#     Tests for NeverRetryPolicy     #
######################################


def test_never_retry_policy() -> None:
    assert not NeverRetryPolicy().should_retry(transport_context(0, retry_count=10))


########################################
#     Tests for DefaultRetryPolicy     #
########################################


@pytest.mark.parametrize(
    ("attempt", "retry_count", "expected"),
    [(0, 0, False), (0, 1, True), (1, 1, False), (2, 3, True), (3, 3, False)],
)
def test_default_retry_policy_should_retry(attempt: int, retry_count: int, expected: bool) -> None:
    context = transport_context(attempt, retry_count=retry_count)
    assert DefaultRetryPolicy().should_retry(context) == expected


def test_default_retry_policy_application_error() -> None:
    assert DefaultRetryPolicy().should_retry(status_context(4, 503))
    assert not DefaultRetryPolicy().should_retry(status_context(5, 503))


def test_default_retry_policy_no_wait_without_interval() -> None:
    assert DefaultRetryPolicy().next_delay(transport_context(3, retry_count=5)) == 0.0


@pytest.mark.parametrize(("attempt", "delay"), [(0, 1.0), (1, 2.0), (2, 4.0), (3, 5.0)])
def test_default_retry_policy_delay_capped(attempt: int, delay: float) -> None:
    context = transport_context(attempt, retry_count=5, max_retry_interval=5.0)
    assert DefaultRetryPolicy().next_delay(context) == delay


def test_default_retry_policy_custom_backoff() -> None:
    policy = DefaultRetryPolicy(backoff_strategy=LinearBackoff(base_delay=0.5))
    context = transport_context(2, retry_count=5, max_retry_interval=10.0)
    assert policy.next_delay(context) == 1.5


########################################
#     Tests for BackoffRetryPolicy     #
########################################


def test_backoff_retry_policy_defaults() -> None:
    policy = BackoffRetryPolicy()
    assert policy.max_retries is None
    assert isinstance(policy.backoff_strategy, ExponentialBackoff)
    assert policy.backoff_strategy.base_delay == 0.3
    assert policy.jitter_factor == 0.0
    assert policy.max_wait_time is None
    assert policy.retry_on is None


def test_backoff_retry_policy_uses_descriptor_limit() -> None:
    policy = BackoffRetryPolicy()
    assert policy.should_retry(transport_context(1, retry_count=2))
    assert not policy.should_retry(transport_context(2, retry_count=2))


def test_backoff_retry_policy_max_retries() -> None:
    policy = BackoffRetryPolicy(max_retries=3)
    assert policy.should_retry(transport_context(2, retry_count=0))
    assert not policy.should_retry(transport_context(3, retry_count=10))


def test_backoff_retry_policy_retry_on_cause() -> None:
    policy = BackoffRetryPolicy(max_retries=3, retry_on=httpx.ConnectError)
    assert policy.should_retry(transport_context(0))
    assert not policy.should_retry(status_context(0, 503))


def test_backoff_retry_policy_retry_on_error_type() -> None:
    policy = BackoffRetryPolicy(max_retries=3, retry_on=(ApplicationError,))
    assert policy.should_retry(status_context(0, 503))
    assert not policy.should_retry(transport_context(0))


def test_backoff_retry_policy_retry_on_transport_error() -> None:
    policy = BackoffRetryPolicy(max_retries=3, retry_on=TransportError)
    assert policy.should_retry(transport_context(1))


def test_backoff_retry_policy_delay() -> None:
    policy = BackoffRetryPolicy(backoff_strategy=ConstantBackoff(0.7))
    assert policy.next_delay(transport_context(4)) == 0.7


def test_backoff_retry_policy_retry_after() -> None:
    policy = BackoffRetryPolicy(backoff_strategy=ConstantBackoff(0.7))
    assert policy.next_delay(status_context(0, 429, headers={"Retry-After": "3"})) == 3.0


def test_backoff_retry_policy_invalid_retry_after_falls_back() -> None:
    policy = BackoffRetryPolicy(backoff_strategy=ConstantBackoff(0.7))
    assert policy.next_delay(status_context(0, 429, headers={"Retry-After": "soon"})) == 0.7


def test_backoff_retry_policy_max_wait_time() -> None:
    policy = BackoffRetryPolicy(max_wait_time=2.0)
    assert policy.next_delay(status_context(0, 503, headers={"Retry-After": "60"})) == 2.0


def test_backoff_retry_policy_jitter() -> None:
    policy = BackoffRetryPolicy(backoff_strategy=ConstantBackoff(2.0), jitter_factor=0.5)
    with patch("random.uniform", return_value=0.25) as mock_uniform:
        assert policy.next_delay(transport_context(0)) == 2.5
    mock_uniform.assert_called_once_with(0, 0.5)


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"max_retries": -1}, "max_retries must be >= 0"),
        ({"jitter_factor": -0.1}, "jitter_factor must be >= 0"),
        ({"max_wait_time": 0}, "max_wait_time must be > 0"),
    ],
)
def test_backoff_retry_policy_invalid(kwargs: dict, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        BackoffRetryPolicy(**kwargs)

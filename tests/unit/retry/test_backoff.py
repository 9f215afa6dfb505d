r"""Unit tests for the backoff strategies."""

from __future__ import annotations

import pytest

from reqengine.retry.backoff import (
    BaseBackoffStrategy,
    ConstantBackoff,
    ExponentialBackoff,
    LinearBackoff,
)

########################################
#     Tests for ExponentialBackoff     #
########################################


def test_exponential_backoff_defaults() -> None:
    backoff = ExponentialBackoff()
    assert isinstance(backoff, BaseBackoffStrategy)
    assert backoff.base_delay == 1.0
    assert backoff.max_delay is None


@pytest.mark.parametrize(("attempt", "delay"), [(0, 0.5), (1, 1.0), (2, 2.0), (5, 16.0)])
def test_exponential_backoff_calculate(attempt: int, delay: float) -> None:
    assert ExponentialBackoff(base_delay=0.5).calculate(attempt) == delay


def test_exponential_backoff_max_delay() -> None:
    backoff = ExponentialBackoff(base_delay=1.0, max_delay=3.0)
    assert [backoff.calculate(attempt) for attempt in range(4)] == [1.0, 2.0, 3.0, 3.0]


def test_exponential_backoff_invalid_base_delay() -> None:
    with pytest.raises(ValueError, match="base_delay must be >= 0"):
        ExponentialBackoff(base_delay=-1.0)


def test_exponential_backoff_invalid_max_delay() -> None:
    with pytest.raises(ValueError, match="max_delay must be > 0"):
        ExponentialBackoff(max_delay=0)


def test_exponential_backoff_repr() -> None:
    assert repr(ExponentialBackoff(2.0)) == "ExponentialBackoff(base_delay=2.0, max_delay=None)"


###################################
#     Tests for LinearBackoff     #
###################################


@pytest.mark.parametrize(("attempt", "delay"), [(0, 2.0), (1, 4.0), (3, 8.0)])
def test_linear_backoff_calculate(attempt: int, delay: float) -> None:
    assert LinearBackoff(base_delay=2.0).calculate(attempt) == delay


def test_linear_backoff_max_delay() -> None:
    assert LinearBackoff(base_delay=2.0, max_delay=5.0).calculate(10) == 5.0


def test_linear_backoff_invalid_base_delay() -> None:
    with pytest.raises(ValueError, match="base_delay must be >= 0"):
        LinearBackoff(base_delay=-0.1)


#####################################
#     Tests for ConstantBackoff     #
#####################################


@pytest.mark.parametrize("attempt", [0, 1, 10])
def test_constant_backoff_calculate(attempt: int) -> None:
    assert ConstantBackoff(delay=0.25).calculate(attempt) == 0.25


def test_constant_backoff_invalid_delay() -> None:
    with pytest.raises(ValueError, match="delay must be >= 0"):
        ConstantBackoff(delay=-1)

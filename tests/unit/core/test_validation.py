r"""Unit tests for parameter validation."""

from __future__ import annotations

import pytest

from reqengine.core import validate_progress_step, validate_retry_params, validate_timeout

######################################
#     Tests for validate_timeout     #
######################################


@pytest.mark.parametrize("timeout", [0.1, 1, 30.0])
def test_validate_timeout_valid(timeout: float) -> None:
    validate_timeout(timeout)


@pytest.mark.parametrize("timeout", [0, 0.0, -1])
def test_validate_timeout_invalid(timeout: float) -> None:
    with pytest.raises(ValueError, match=rf"timeout must be > 0, got {timeout}"):
        validate_timeout(timeout)


###########################################
#     Tests for validate_retry_params     #
###########################################


@pytest.mark.parametrize(("retry_count", "max_retry_interval"), [(0, 0.0), (3, 1.5), (10, 0)])
def test_validate_retry_params_valid(retry_count: int, max_retry_interval: float) -> None:
    validate_retry_params(retry_count, max_retry_interval)


def test_validate_retry_params_negative_retry_count() -> None:
    with pytest.raises(ValueError, match=r"retry_count must be >= 0, got -1"):
        validate_retry_params(-1)


def test_validate_retry_params_negative_interval() -> None:
    with pytest.raises(ValueError, match=r"max_retry_interval must be >= 0, got -2"):
        validate_retry_params(1, max_retry_interval=-2)


############################################
#     Tests for validate_progress_step     #
############################################


def test_validate_progress_step_valid() -> None:
    validate_progress_step(1024)


@pytest.mark.parametrize("step", [0, -8])
def test_validate_progress_step_invalid(step: int) -> None:
    with pytest.raises(ValueError, match="progress_step must be > 0"):
        validate_progress_step(step)

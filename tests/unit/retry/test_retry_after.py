r"""Unit tests for Retry-After header parsing."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import Mock, patch

import pytest

from reqengine.retry import parse_retry_after

#######################################
#     Tests for parse_retry_after     #
#######################################


@pytest.mark.parametrize(
    ("header", "seconds"), [("1", 1.0), ("0", 0.0), ("120", 120.0), ("2.5", 2.5), ("-3", 0.0)]
)
def test_parse_retry_after_seconds(header: str, seconds: float) -> None:
    assert parse_retry_after(header) == seconds


@pytest.mark.parametrize("header", [None, "invalid", "not a number", "1.2.3", ""])
def test_parse_retry_after_none(header: str | None) -> None:
    assert parse_retry_after(header) is None


def test_parse_retry_after_http_date() -> None:
    mock_datetime = Mock(
        spec=datetime,
        now=Mock(return_value=datetime(2015, 10, 21, 7, 28, 0, tzinfo=timezone.utc)),
    )
    with patch("reqengine.retry.retry_after.datetime", mock_datetime):
        assert parse_retry_after("Wed, 21 Oct 2015 07:29:00 GMT") == 60.0


def test_parse_retry_after_http_date_in_the_past() -> None:
    assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") == 0.0

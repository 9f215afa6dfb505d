from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import Mock, patch

import httpx
import pytest

from reqengine.descriptor import RequestDescriptor
from reqengine.handler import DefaultLifecycleHandler
from reqengine.utils.request_logging import LoggingSink

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def mock_sleep() -> Generator[Mock, None, None]:
    """Patch time.sleep to make tests run faster."""
    with patch("time.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def mock_sink() -> Mock:
    """Create a mock logging sink recording the emitted summaries."""
    return Mock(spec=LoggingSink)


@pytest.fixture
def handler() -> Mock:
    """Create a handler recording its calls while keeping the default
    behavior."""
    return Mock(wraps=DefaultLifecycleHandler())


@pytest.fixture
def descriptor() -> RequestDescriptor:
    """Create a plain GET descriptor without retries."""
    return RequestDescriptor("https://example.com/items")


@pytest.fixture
def ok_response() -> httpx.Response:
    """Create a successful raw reply."""
    return httpx.Response(200, content=b"ok")

r"""Unit tests for EngineClient."""

from __future__ import annotations

import json
from unittest.mock import Mock

import httpx
import pytest

from reqengine import EngineClient, EngineConfig, NeverRetryPolicy, RetryExhaustedError
from reqengine.future import ResultFuture
from reqengine.transport import HttpxTransport
from tests.helpers import StubTransport, count_summaries, make_transport_error, status_reply


@pytest.fixture
def requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def http_client(requests: list[httpx.Request]) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"method": request.method})

    return httpx.Client(transport=httpx.MockTransport(handler))


##################################
#     Tests for EngineClient     #
##################################


def test_engine_client_defaults() -> None:
    with EngineClient() as client:
        assert isinstance(client.config, EngineConfig)
        assert isinstance(client.engine.transport, HttpxTransport)


@pytest.mark.parametrize("method", ["get", "post", "put", "delete", "patch", "head", "options"])
def test_engine_client_methods(
    method: str, http_client: httpx.Client, requests: list[httpx.Request]
) -> None:
    with EngineClient(client=http_client) as client:
        response = getattr(client, method)("https://example.com/items")
    assert response.status_code == 200
    assert requests[0].method == method.upper()


def test_engine_client_request(http_client: httpx.Client, requests: list[httpx.Request]) -> None:
    with EngineClient(client=http_client) as client:
        response = client.request(
            "post",
            "https://example.com/items",
            headers={"Authorization": "Bearer token"},
            params={"page": 2},
            json={"name": "x"},
        )
    assert response.json() == {"method": "POST"}
    request = requests[0]
    assert str(request.url) == "https://example.com/items?page=2"
    assert request.headers["Authorization"] == "Bearer token"
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.content) == {"name": "x"}


def test_engine_client_form_data(http_client: httpx.Client, requests: list[httpx.Request]) -> None:
    with EngineClient(client=http_client) as client:
        client.post("https://example.com/login", data={"user": "a"})
    assert requests[0].content == b"user=a"


def test_engine_client_raw_content(
    http_client: httpx.Client, requests: list[httpx.Request]
) -> None:
    with EngineClient(client=http_client) as client:
        client.put("https://example.com/blob", content=b"\x00\x01")
    assert requests[0].content == b"\x00\x01"


@pytest.mark.parametrize("body", ["hello", 3, None, [1, "a"], {"a": {"b": True}}])
def test_engine_client_json_body_serialized(
    body: object, http_client: httpx.Client, requests: list[httpx.Request]
) -> None:
    with EngineClient(client=http_client) as client:
        descriptor = client.build_descriptor("POST", "https://example.com/items", json=body)
        client.engine.execute(descriptor)
    if body is None:
        assert requests[0].content == b""
    else:
        assert json.loads(requests[0].content) == body
        assert requests[0].headers["Content-Type"] == "application/json"


def test_engine_client_json_string_is_quoted(
    http_client: httpx.Client, requests: list[httpx.Request]
) -> None:
    with EngineClient(client=http_client) as client:
        client.post("https://example.com/items", json="hello")
    assert requests[0].content == b'"hello"'


@pytest.mark.parametrize(
    "kwargs",
    [
        {"json": {"a": 1}, "content": b"x"},
        {"json": {"a": 1}, "data": {"b": "2"}},
        {"content": "x", "data": {"b": "2"}},
    ],
)
def test_engine_client_rejects_multiple_bodies(kwargs: dict, http_client: httpx.Client) -> None:
    with (
        EngineClient(client=http_client) as client,
        pytest.raises(ValueError, match="Only one of content, data and json"),
    ):
        client.post("https://example.com/items", **kwargs)


def test_engine_client_does_not_close_external_client(http_client: httpx.Client) -> None:
    with EngineClient(client=http_client) as client:
        client.get("https://example.com")
    assert not http_client.is_closed
    http_client.close()


def test_engine_client_closes_own_transport() -> None:
    client = EngineClient()
    transport = client.engine.transport
    client.close()
    assert transport.client.is_closed


def test_engine_client_leaves_given_transport_open() -> None:
    transport = Mock(spec=HttpxTransport)
    EngineClient(transport=transport).close()
    transport.close.assert_not_called()


def test_engine_client_config_applied(mock_sleep: Mock) -> None:
    transport = StubTransport([make_transport_error(), status_reply(200)])
    config = EngineConfig(retry_count=1, max_retry_interval=0.5)
    with EngineClient(config=config, transport=transport) as client:
        response = client.get("https://example.com")
    assert response.status_code == 200
    assert transport.sends == 2
    mock_sleep.assert_called_once_with(0.5)


def test_engine_client_overrides() -> None:
    transport = StubTransport([make_transport_error()])
    with EngineClient(config=EngineConfig(retry_count=3), transport=transport) as client:
        with pytest.raises(RetryExhaustedError):
            client.get("https://example.com", retry_count=0)
    assert transport.sends == 1


def test_engine_client_config_retry_policy() -> None:
    transport = StubTransport([status_reply(503)])
    config = EngineConfig(retry_count=3, retry_policy=NeverRetryPolicy())
    with EngineClient(config=config, transport=transport) as client:
        assert client.get("https://example.com").status_code == 503
    assert transport.sends == 1


def test_engine_client_async(http_client: httpx.Client) -> None:
    with EngineClient(client=http_client) as client:
        future = client.get("https://example.com", is_async=True)
        assert isinstance(future, ResultFuture)
        assert future.result(timeout=5).status_code == 200


def test_engine_client_logging_sink(mock_sink: Mock) -> None:
    transport = StubTransport([status_reply(200)])
    config = EngineConfig(log_enabled=True)
    with EngineClient(config=config, transport=transport, logging_sink=mock_sink) as client:
        client.get("https://example.com")
    assert count_summaries(mock_sink, "Request:") == 1
    assert count_summaries(mock_sink, "Response:") == 1


def test_engine_client_handler(http_client: httpx.Client) -> None:
    handler = Mock()
    with EngineClient(client=http_client) as client:
        result = client.get("https://example.com", handler=handler)
    assert result is handler.handle_sync.return_value

"""Tests for API client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from homelist.services.api.client import APIClient


def _response(status: int, method: str = "GET", body=None) -> httpx.Response:
    return httpx.Response(
        status,
        json=body if body is not None else {},
        request=httpx.Request(method, "http://127.0.0.1:8000/v1/tasks"),
    )


@pytest.fixture
def client(tmp_config):
    return APIClient(tmp_config)


@pytest.fixture
def transport(client):
    """Replace the underlying httpx client with a mock."""
    http = MagicMock(spec=httpx.AsyncClient)
    http.request = AsyncMock()
    client._client = http
    with patch.object(client, "_get_client", AsyncMock(return_value=http)):
        yield http


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("homelist.services.api.client.asyncio.sleep", new=AsyncMock()) as sleep:
        yield sleep


def test_client_initialization(client):
    assert client.base_url == "http://127.0.0.1:8000"
    assert client.timeout == 30


def test_headers_without_credentials(client):
    headers = client._get_headers()

    assert headers["Accept"] == "application/json"
    assert "Authorization" not in headers


def test_headers_with_credentials(client, tmp_config):
    tmp_config.save_credentials("tok")

    assert client._get_headers()["Authorization"] == "Bearer tok"


@pytest.mark.asyncio
async def test_get_client_creates_httpx_client(client):
    http = await client._get_client()

    assert isinstance(http, httpx.AsyncClient)
    await client.close()
    assert client._client is None


@pytest.mark.asyncio
async def test_request_success(client, transport):
    transport.request.return_value = _response(200, body={"items": []})

    response = await client.get("/v1/tasks", params={"limit": 8})

    assert response.json() == {"items": []}
    transport.request.assert_called_once_with(
        method="GET", url="/v1/tasks", json=None, params={"limit": 8}, headers=None
    )


@pytest.mark.asyncio
async def test_get_is_retried_on_server_error(client, transport, no_sleep):
    transport.request.side_effect = [_response(503), _response(200)]

    response = await client.get("/v1/tasks")

    assert response.status_code == 200
    assert transport.request.call_count == 2
    no_sleep.assert_awaited_once_with(1)


@pytest.mark.asyncio
async def test_get_gives_up_after_configured_retries(client, transport):
    transport.request.side_effect = httpx.ConnectError("refused")

    with pytest.raises(httpx.ConnectError):
        await client.get("/v1/tasks")

    assert transport.request.call_count == 4


@pytest.mark.asyncio
async def test_client_errors_are_not_retried(client, transport):
    transport.request.return_value = _response(404)

    with pytest.raises(httpx.HTTPStatusError):
        await client.get("/v1/tasks/x")

    assert transport.request.call_count == 1


@pytest.mark.asyncio
async def test_mutations_are_sent_once(client, transport):
    transport.request.return_value = _response(500, method="PATCH")

    with pytest.raises(httpx.HTTPStatusError):
        await client.patch("/v1/tasks/t/position", json={"position": 5})

    assert transport.request.call_count == 1


@pytest.mark.asyncio
async def test_extra_headers_are_forwarded(client, transport):
    transport.request.return_value = _response(200, method="PUT")

    await client.request("PUT", "api/tasks/edit/t", json={}, headers={"Authorization": "s"})

    kwargs = transport.request.call_args.kwargs
    assert kwargs["url"] == "/api/tasks/edit/t"
    assert kwargs["headers"] == {"Authorization": "s"}

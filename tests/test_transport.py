import asyncio
import pytest
from unittest.mock import MagicMock, patch, AsyncMock
import aiohttp

from airstack.api.transport import RawResponse, Transport
from airstack.exceptions import MalformedErrorBody, TransportError
from fake_airstack_server import FakeAirstackServer

def _mock_session(status=200, body=b"{}"):
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.read.return_value = body

    mock_request_ctx = AsyncMock()
    mock_request_ctx.__aenter__.return_value = mock_response
    mock_request_ctx.__aexit__.return_value = None

    mock_session = MagicMock()
    mock_session.request.return_value = mock_request_ctx
    mock_session.closed = False
    mock_session.close = AsyncMock()
    return mock_session

@pytest.mark.asyncio
async def test_send_returns_body_and_status():
    mock_session = _mock_session(body=b'{"data": {}}')

    with patch("aiohttp.ClientSession", return_value=mock_session):
        transport = Transport()
        response = await transport.send("POST", "http://test.com/gql", {"X-A": "1"}, b"payload")

    assert response == RawResponse(body=b'{"data": {}}', status_code=200)
    args, kwargs = mock_session.request.call_args
    assert args == ("POST", "http://test.com/gql")
    assert kwargs["data"] == b"payload"
    assert kwargs["timeout"].total == 60.0

@pytest.mark.asyncio
async def test_send_adds_duplicate_headers():
    mock_session = _mock_session()

    with patch("aiohttp.ClientSession", return_value=mock_session):
        transport = Transport()
        await transport.send("POST", "http://test.com", [("X-Tag", "a"), ("x-tag", "b")])

    headers = mock_session.request.call_args.kwargs["headers"]
    assert headers.getall("X-Tag") == ["a", "b"]

@pytest.mark.asyncio
async def test_send_reuses_session_and_closes_it():
    mock_session = _mock_session()

    with patch("aiohttp.ClientSession", return_value=mock_session) as session_cls:
        async with Transport() as transport:
            await transport.send("GET", "http://test.com")
            await transport.send("GET", "http://test.com")

    assert session_cls.call_count == 1
    mock_session.close.assert_awaited_once()

@pytest.mark.asyncio
async def test_send_per_call_timeout_override():
    mock_session = _mock_session()

    with patch("aiohttp.ClientSession", return_value=mock_session):
        transport = Transport(timeout=30)
        await transport.send("GET", "http://test.com", timeout=1.5)

    assert mock_session.request.call_args.kwargs["timeout"].total == 1.5

@pytest.mark.asyncio
async def test_non_success_status_is_returned_not_raised():
    mock_session = _mock_session(status=422, body=b'{"message": "bad request"}')

    with patch("aiohttp.ClientSession", return_value=mock_session):
        response = await Transport().send("POST", "http://test.com")

    assert response.status_code == 422
    assert response.body == b'{"message": "bad request"}'
    assert response.error is None

@pytest.mark.asyncio
async def test_malformed_error_body_is_advisory():
    mock_session = _mock_session(status=500, body=b"Internal Server Error")

    with patch("aiohttp.ClientSession", return_value=mock_session):
        response = await Transport().send("POST", "http://test.com")

    assert response.status_code == 500
    assert response.body == b"Internal Server Error"
    assert isinstance(response.error, MalformedErrorBody)

@pytest.mark.asyncio
async def test_incomplete_read_raises_transport_error():
    mock_session = _mock_session()
    mock_response = mock_session.request.return_value.__aenter__.return_value
    mock_response.read.side_effect = aiohttp.ClientPayloadError("Response payload is not completed")

    with patch("aiohttp.ClientSession", return_value=mock_session):
        with pytest.raises(TransportError, match="not completed"):
            await Transport().send("POST", "http://test.com")

@pytest.mark.asyncio
async def test_timeout_raises_transport_error():
    mock_session = _mock_session()
    mock_session.request.return_value.__aenter__.side_effect = asyncio.TimeoutError()

    with patch("aiohttp.ClientSession", return_value=mock_session):
        with pytest.raises(TransportError, match="timed out"):
            await Transport().send("POST", "http://test.com")

@pytest.mark.asyncio
async def test_connection_refused_raises_transport_error():
    async with FakeAirstackServer() as server:
        url = server.url
    # Server is gone, nothing listens on the port any more

    async with Transport(timeout=5) as transport:
        with pytest.raises(TransportError):
            await transport.send("POST", url, body=b"{}")

@pytest.mark.asyncio
async def test_non_positive_timeout_is_rejected():
    mock_session = _mock_session()

    with pytest.raises(ValueError):
        Transport(timeout=0)
    with pytest.raises(ValueError):
        Transport(timeout=-1)

    with patch("aiohttp.ClientSession", return_value=mock_session):
        transport = Transport()
        with pytest.raises(ValueError):
            await transport.send("POST", "http://test.com", timeout=0)

    assert mock_session.request.call_count == 0

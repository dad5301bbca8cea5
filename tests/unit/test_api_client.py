from __future__ import annotations

from typing import Any

import httpx
import pytest

from collector.api_client import (
    APIClient,
    APIServerError,
    APITimeoutError,
    APIUnexpectedStatusError,
    MalformedPayload,
    RateLimitError,
)
from utils.errors import TransportFailure


def _patch_response(monkeypatch: pytest.MonkeyPatch, client: APIClient, response: httpx.Response | Exception) -> list[dict[str, Any]]:
    calls: list[dict[str, Any]] = []

    async def fake_request(**kwargs: Any) -> httpx.Response:
        calls.append(kwargs)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(client._client, "request", fake_request)
    return calls


@pytest.mark.asyncio
async def test_get_returns_json_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    client = APIClient(base_url="https://example.test/v2/")
    calls = _patch_response(monkeypatch, client, httpx.Response(200, json=[{"name": "Argentina"}]))

    result = await client.get("all", params={"fields": "name"})
    await client.aclose()

    assert result.status_code == 200
    assert result.data == [{"name": "Argentina"}]
    assert calls == [{"method": "GET", "url": "/all", "params": {"fields": "name"}}]


@pytest.mark.asyncio
async def test_absolute_endpoint_is_not_prefixed(monkeypatch: pytest.MonkeyPatch) -> None:
    client = APIClient()
    calls = _patch_response(monkeypatch, client, httpx.Response(200, json={"rates": {}}))

    await client.get("https://api.ratesapi.io/api/latest")
    await client.aclose()

    assert calls[0]["url"] == "https://api.ratesapi.io/api/latest"


@pytest.mark.asyncio
async def test_no_content(monkeypatch: pytest.MonkeyPatch) -> None:
    client = APIClient()
    _patch_response(monkeypatch, client, httpx.Response(204))

    result = await client.get("/all")
    await client.aclose()

    assert result.status_code == 204
    assert result.data is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "exc_type"),
    [
        (429, RateLimitError),
        (500, APIServerError),
        (503, APIServerError),
        (404, APIUnexpectedStatusError),
        (401, APIUnexpectedStatusError),
    ],
)
async def test_error_statuses_raise_transport_failure(monkeypatch: pytest.MonkeyPatch, status: int, exc_type: type) -> None:
    client = APIClient()
    _patch_response(monkeypatch, client, httpx.Response(status, text="nope"))

    with pytest.raises(exc_type) as exc:
        await client.get("/all")
    await client.aclose()

    assert isinstance(exc.value, TransportFailure)


@pytest.mark.asyncio
async def test_unexpected_status_keeps_body(monkeypatch: pytest.MonkeyPatch) -> None:
    client = APIClient()
    _patch_response(monkeypatch, client, httpx.Response(404, text="Not Found"))

    with pytest.raises(APIUnexpectedStatusError) as exc:
        await client.get("/all")
    await client.aclose()

    assert exc.value.status_code == 404
    assert exc.value.body_text == "Not Found"


@pytest.mark.asyncio
async def test_invalid_json_is_malformed_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    client = APIClient()
    _patch_response(monkeypatch, client, httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(MalformedPayload):
        await client.get("/all")
    await client.aclose()


@pytest.mark.asyncio
async def test_timeout_and_network_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    client = APIClient()
    _patch_response(monkeypatch, client, httpx.ReadTimeout("slow"))
    with pytest.raises(APITimeoutError):
        await client.get("/all")

    _patch_response(monkeypatch, client, httpx.ConnectError("refused"))
    with pytest.raises(TransportFailure) as exc:
        await client.get("/all")
    assert isinstance(exc.value.__cause__, httpx.ConnectError)
    await client.aclose()


@pytest.mark.asyncio
async def test_header_only():
    client = APIClient()
    with pytest.raises(ValueError):
        await client.request("GET", "/all", headers={"x-test": "nope"})
    await client.aclose()


@pytest.mark.asyncio
async def test_get_only():
    async with APIClient() as client:
        with pytest.raises(ValueError):
            await client.request("POST", "/all")


@pytest.mark.asyncio
async def test_other_success_statuses_return_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    client = APIClient()
    _patch_response(monkeypatch, client, httpx.Response(203, json=[{"name": "Belize"}]))
    result = await client.get("/all")
    assert result.status_code == 203
    assert result.data == [{"name": "Belize"}]

    _patch_response(monkeypatch, client, httpx.Response(202))
    result = await client.get("/all")
    await client.aclose()

    assert result.status_code == 202
    assert result.data is None

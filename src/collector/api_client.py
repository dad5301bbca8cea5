from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from utils.errors import TransportFailure


class APITimeoutError(TransportFailure):
    pass


class RateLimitError(TransportFailure):
    pass


class APIServerError(TransportFailure):
    pass


class MalformedPayload(TransportFailure):
    pass


class APIUnexpectedStatusError(TransportFailure):
    def __init__(self, status_code: int, body_text: str | None = None) -> None:
        super().__init__(f"Unexpected status code: {status_code}")
        self.status_code = status_code
        self.body_text = body_text


@dataclass(frozen=True)
class APIResult:
    status_code: int
    data: Any
    headers: dict[str, str]


class APIClient:
    """
    Reference data client
    - GET-only
    - No auth, no custom headers
    - Async httpx, one request per call (no retries)
    """

    def __init__(
        self,
        *,
        base_url: str = "https://restcountries.com/v2",
        timeout_seconds: float = 30.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = float(timeout_seconds)
        self._client = httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)

    async def __aenter__(self) -> APIClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> APIResult:
        return await self.request("GET", endpoint, params=params)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> APIResult:
        if method.upper() != "GET":
            raise ValueError("GET only: POST/PUT/DELETE are not supported")

        if headers:
            raise ValueError("Custom headers are not supported.")

        # Absolute URLs bypass base_url (httpx merges only relative paths).
        if "://" not in endpoint and not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"

        try:
            resp = await self._client.request(method="GET", url=endpoint, params=params or {})
        except httpx.TimeoutException as e:
            raise APITimeoutError("Request timeout") from e
        except httpx.RequestError as e:
            raise TransportFailure(f"Request error: {e}") from e

        resp_headers = {k: v for k, v in resp.headers.items()}

        if resp.status_code == 204 or (resp.is_success and not resp.content):
            return APIResult(status_code=resp.status_code, data=None, headers=resp_headers)

        if resp.is_success:
            try:
                data = resp.json()
            except ValueError as e:
                raise MalformedPayload("Failed to parse JSON") from e
            return APIResult(status_code=resp.status_code, data=data, headers=resp_headers)

        if resp.status_code == 429:
            raise RateLimitError("Too Many Requests (429): rate limit exceeded")

        if resp.status_code in (500, 502, 503, 504):
            raise APIServerError(f"API server error ({resp.status_code})")

        body_text: str | None
        try:
            body_text = resp.text
        except UnicodeDecodeError:
            body_text = None
        raise APIUnexpectedStatusError(resp.status_code, body_text=body_text)

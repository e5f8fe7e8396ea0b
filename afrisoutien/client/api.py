"""
HTTP client for the Afri Soutien API with transparent session renewal.

Cookies live in the ``httpx.AsyncClient`` jar, so every call carries the
session the way a browser does with ``credentials: "include"``.  When a
call fails with ``401 TOKEN_EXPIRED`` the client asks ``/api/auth/refresh``
for a new access token once and replays the call once; every other
failure goes straight back to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

import httpx

logger = logging.getLogger(__name__)

REFRESH_PATH = "/api/auth/refresh"
_TOKEN_EXPIRED = "TOKEN_EXPIRED"


class ApiError(Exception):
    """Non-2xx answer; the message reads ``"{status}: {body text}"``."""

    def __init__(self, status: int, text: str) -> None:
        super().__init__(f"{status}: {text}")
        self.status = status
        self.text = text


def _is_token_expired(response: httpx.Response) -> bool:
    if response.status_code != 401:
        return False
    try:
        body = response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and body.get("code") == _TOKEN_EXPIRED


def _raise_for_status(response: httpx.Response) -> None:
    if not response.is_success:
        raise ApiError(response.status_code, response.text or response.reason_phrase)


class ApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        refresh_path: str = REFRESH_PATH,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.refresh_path = refresh_path
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    async def _send(self, method: str, url: str, json: Any = None) -> httpx.Response:
        response = await self._client.request(method, url, json=json)
        if not _is_token_expired(response):
            return response

        refresh = await self._client.post(self.refresh_path)
        if not refresh.is_success:
            logger.info("Session refresh failed with %s", refresh.status_code)
            return response

        logger.debug("Session refreshed, replaying %s %s", method, url)
        return await self._client.request(method, url, json=json)

    async def request(self, method: str, url: str, json: Any = None) -> httpx.Response:
        """Send a call, renewing an expired session at most once."""
        response = await self._send(method, url, json)
        _raise_for_status(response)
        return response

    async def query(
        self,
        url: str,
        on_401: Literal["throw", "return_null"] = "throw",
    ) -> Any:
        """GET *url* and decode JSON; ``return_null`` turns a final 401 into ``None``."""
        response = await self._send("GET", url)
        if on_401 == "return_null" and response.status_code == 401:
            return None
        _raise_for_status(response)
        return response.json()

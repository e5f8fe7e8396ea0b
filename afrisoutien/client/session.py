"""
Client-side auth state.

``AuthSession`` owns the signed-in user for one ``ApiClient`` and tells
subscribers whenever it changes.  Nothing is module-global: each session
object is created and passed around by the code that needs it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from afrisoutien.client.api import ApiClient, ApiError

logger = logging.getLogger(__name__)

Listener = Callable[["dict[str, Any] | None"], None]


class AuthSession:
    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self._user: dict[str, Any] | None = None
        self._listeners: list[Listener] = []

    # ── Store ───────────────────────────────────────────────────────
    @property
    def user(self) -> dict[str, Any] | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def is_admin(self) -> bool:
        return self._user is not None and self._user.get("role") == "admin"

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with the user on every change; returns the unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def invalidate(self) -> None:
        """Drop the cached user; subscribers are expected to refetch."""
        self._set_user(None)

    def _set_user(self, user: dict[str, Any] | None) -> None:
        self._user = user
        for listener in list(self._listeners):
            listener(user)

    # ── Operations ──────────────────────────────────────────────────
    async def login(self, email: str, password: str) -> dict[str, Any]:
        response = await self.api.request(
            "POST", "/api/auth/login", {"email": email, "password": password}
        )
        user = response.json()["user"]
        self._set_user(user)
        return user

    async def register(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        role: str = "beneficiary",
    ) -> dict[str, Any]:
        response = await self.api.request(
            "POST",
            "/api/auth/register",
            {
                "firstName": first_name,
                "lastName": last_name,
                "email": email,
                "password": password,
                "role": role,
            },
        )
        return response.json()

    async def verify_email(self, token: str) -> str:
        response = await self.api.request(
            "GET", str(httpx.URL("/api/auth/verify-email", params={"token": token}))
        )
        return response.json()["message"]

    async def forgot_password(self, email: str) -> str:
        response = await self.api.request("POST", "/api/auth/forgot-password", {"email": email})
        return response.json()["message"]

    async def reset_password(self, token: str, password: str) -> str:
        response = await self.api.request(
            "POST", "/api/auth/reset-password", {"token": token, "password": password}
        )
        return response.json()["message"]

    async def fetch_current_user(self) -> dict[str, Any] | None:
        data = await self.api.query("/api/auth/me", on_401="return_null")
        self._set_user(data["user"] if data else None)
        return self._user

    async def logout(self) -> None:
        """End the session; local state is cleared even if the server call fails."""
        try:
            await self.api.request("POST", "/api/auth/logout")
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Logout request failed: %s", exc)
        finally:
            self._set_user(None)

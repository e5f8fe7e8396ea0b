"""
Session cookie helpers.

``jwt`` carries the access token on every request.  ``refresh_token`` is
scoped to the auth path so the browser only ever sends it to
``/api/auth/*`` and never on ordinary API calls.
"""

from __future__ import annotations

from starlette.responses import Response

from afrisoutien.core.config import settings

ACCESS_COOKIE = "jwt"
REFRESH_COOKIE = "refresh_token"
REFRESH_COOKIE_PATH = f"{settings.API_PREFIX}/auth"


def set_access_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=ACCESS_COOKIE,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


def set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        path=REFRESH_COOKIE_PATH,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
    )


def clear_session_cookies(response: Response) -> None:
    # Path and attributes must match the ones used when setting, or the
    # browser keeps the original cookie.
    response.delete_cookie(
        ACCESS_COOKIE,
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    response.delete_cookie(
        REFRESH_COOKIE,
        path=REFRESH_COOKIE_PATH,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
    )

"""
FastAPI dependencies — database session and auth guards.

``get_current_user`` resolves a request to a user or fails with one of
the auth error codes:

* no token                  → 401 ``TOKEN_MISSING``
* expired token             → 401 ``TOKEN_EXPIRED``  (client may refresh)
* bad signature / malformed → 403 ``TOKEN_INVALID``  (no retry)
* user gone since issuance  → 401 ``USER_NOT_FOUND``
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from afrisoutien.core.cookies import ACCESS_COOKIE
from afrisoutien.core.exceptions import AuthError, AuthErrorCode
from afrisoutien.core.security import (TokenExpiredError, TokenInvalidError,
                                       verify_access_token)
from afrisoutien.crud.user import get_user
from afrisoutien.db.session import async_session_factory
from afrisoutien.models.user import Role, User
from afrisoutien.services.audit import AuditAction, AuditLog, get_audit_log

# auto_error=False so we can fall back to the HttpOnly cookie if the header is missing
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    access_cookie: Optional[str] = Cookie(default=None, alias=ACCESS_COOKIE),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Verify the access token from the Bearer header or cookie, load the user."""

    # Priority: Header > Cookie
    final_token = token or access_cookie
    if not final_token:
        raise AuthError(
            status.HTTP_401_UNAUTHORIZED,
            "Access token required",
            AuthErrorCode.TOKEN_MISSING,
        )

    try:
        claims = verify_access_token(final_token)
    except TokenExpiredError:
        raise AuthError(
            status.HTTP_401_UNAUTHORIZED,
            "Token expired",
            AuthErrorCode.TOKEN_EXPIRED,
        ) from None
    except TokenInvalidError:
        raise AuthError(
            status.HTTP_403_FORBIDDEN,
            "Invalid token",
            AuthErrorCode.TOKEN_INVALID,
        ) from None

    user = await get_user(db, claims.user_id)
    if user is None:
        raise AuthError(
            status.HTTP_401_UNAUTHORIZED,
            "User not found",
            AuthErrorCode.USER_NOT_FOUND,
        )
    return user


def require_role(role: Role):
    """Build a guard that admits only users holding *role*."""

    async def _guard(
        request: Request,
        current_user: User = Depends(get_current_user),
        audit_log: AuditLog = Depends(get_audit_log),
    ) -> User:
        if current_user.role != role:
            if role is Role.ADMIN:
                audit_log.record(
                    request,
                    AuditAction.ADMIN_ACCESS_DENIED,
                    user=current_user,
                    success=False,
                    resource=request.url.path,
                    details={"reason": "insufficient role"},
                )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{role.value.capitalize()} access required",
            )
        return current_user

    return _guard


require_admin = require_role(Role.ADMIN)

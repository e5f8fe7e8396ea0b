"""
JWT token issuance / verification, password hashing (bcrypt) and the
opaque one-time tokens used by the e-mail verification and password
reset flows.

Access and refresh tokens are signed with two distinct secrets, so a
token of one kind never verifies as the other.  Verification reports
*why* a token was rejected: an expired access token is the only case
in which a client may attempt a silent refresh.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from afrisoutien.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_ALGORITHM = settings.JWT_ALGORITHM

ACCESS_TOKEN_TTL = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
REFRESH_TOKEN_TTL = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)


# ── Errors ──────────────────────────────────────────────────────────
class TokenError(Exception):
    """Base class for token verification failures."""


class TokenExpiredError(TokenError):
    """Signature is good but the ``exp`` claim is in the past."""


class TokenInvalidError(TokenError):
    """Bad signature, wrong secret, malformed token or missing claims."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    issued_at: datetime
    expires_at: datetime


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # Unrecognised / corrupted hash in the store
        return False


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


# ── JWT tokens ──────────────────────────────────────────────────────
def _issue(user_id: int, secret: str, ttl: timedelta, now: datetime | None) -> str:
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "userId": int(user_id),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(claims, secret, algorithm=_ALGORITHM)


def issue_access_token(user_id: int, now: datetime | None = None) -> str:
    """Short-lived (1h) token proving identity on ordinary API calls."""
    return _issue(user_id, settings.JWT_SECRET, ACCESS_TOKEN_TTL, now)


def issue_refresh_token(user_id: int, now: datetime | None = None) -> str:
    """Long-lived (7d) token, only ever sent to the refresh endpoint."""
    return _issue(user_id, settings.REFRESH_SECRET, REFRESH_TOKEN_TTL, now)


def verify_token(token: str, secret: str) -> TokenClaims:
    """Check signature and expiry of *token* against *secret*.

    Raises :class:`TokenExpiredError` or :class:`TokenInvalidError`.
    """
    try:
        payload = jwt.decode(
            token, secret, algorithms=[_ALGORITHM], options={"require_exp": True}
        )
    except ExpiredSignatureError as exc:
        raise TokenExpiredError("token expired") from exc
    except JWTError as exc:
        raise TokenInvalidError("token invalid") from exc

    user_id = payload.get("userId")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise TokenInvalidError("token has no user id")

    return TokenClaims(
        user_id=user_id,
        issued_at=datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def verify_access_token(token: str) -> TokenClaims:
    return verify_token(token, settings.JWT_SECRET)


def verify_refresh_token(token: str) -> TokenClaims:
    return verify_token(token, settings.REFRESH_SECRET)


# ── One-time tokens ─────────────────────────────────────────────────
def generate_one_time_token() -> str:
    """32-character URL-safe token for verification / reset links."""
    return secrets.token_urlsafe(24)

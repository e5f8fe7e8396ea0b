"""
Auth endpoints — registration, login, token refresh, logout, e-mail
verification and password reset.

No postponed annotations here: the rate-limited routes are wrapped by
slowapi and FastAPI must see real types through the wrapper.
"""

import logging

from fastapi import APIRouter, Cookie, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from afrisoutien.api.deps import get_current_user, get_db
from afrisoutien.core.config import settings
from afrisoutien.core.cookies import (REFRESH_COOKIE, clear_session_cookies,
                                      set_access_cookie, set_refresh_cookie)
from afrisoutien.core.exceptions import AuthError, AuthErrorCode, EmailSendError
from afrisoutien.core.limiter import limiter
from afrisoutien.core.security import (TokenExpiredError, TokenInvalidError,
                                       generate_one_time_token, get_password_hash,
                                       issue_access_token, issue_refresh_token,
                                       verify_password, verify_refresh_token)
from afrisoutien.crud import user as user_crud
from afrisoutien.models.user import User
from afrisoutien.schemas.base import MessageResponse
from afrisoutien.schemas.user import (EmailRequest, LoginRequest, RefreshResponse,
                                      RegisterResponse, ResetPasswordRequest,
                                      UserEnvelope, UserRead, UserRegister,
                                      UserSummary)
from afrisoutien.services.audit import AuditAction, AuditLog, get_audit_log
from afrisoutien.services.notifications import NotificationService, get_notifier

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

_GENERIC_RESET_MESSAGE = "If the email exists, a reset link has been sent"
_GENERIC_VERIFY_MESSAGE = "If the email exists, a verification link has been sent"


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    body: UserRegister,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> RegisterResponse:
    """Create an unverified account and mail the verification link."""
    if await user_crud.get_user_by_email(db, body.email) is not None:
        raise HTTPException(status_code=400, detail="User already exists")

    verification_token = generate_one_time_token()
    user = await user_crud.create_user(
        db,
        email=body.email,
        password_hash=get_password_hash(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        role=body.role,
        email_verification_token=verification_token,
    )
    logger.info("User registered: id=%s role=%s", user.id, user.role.value)

    try:
        await notifier.send_verification_email(user.email, verification_token)
    except EmailSendError:
        # Account stays usable; the user can ask for a new link
        logger.warning("Verification e-mail not sent for user id=%s", user.id)

    return RegisterResponse(
        message="User created successfully. Please check your email to verify your account.",
        user=UserSummary.model_validate(user),
    )


@router.post("/login", response_model=UserEnvelope)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    audit_log: AuditLog = Depends(get_audit_log),
) -> UserEnvelope:
    """Check credentials, set the ``jwt`` and ``refresh_token`` HttpOnly cookies."""
    user = await user_crud.get_user_by_email(db, body.email)

    # Same answer for unknown e-mail and wrong password
    if user is None or not verify_password(body.password, user.password_hash):
        if user is not None and user.is_admin:
            audit_log.record(
                request,
                AuditAction.ADMIN_LOGIN_FAILED,
                success=False,
                user_email=user.email,
                resource="authentication",
                details={"reason": "Invalid credentials"},
            )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    set_access_cookie(response, issue_access_token(user.id))
    set_refresh_cookie(response, issue_refresh_token(user.id))

    if user.is_admin:
        audit_log.record(
            request, AuditAction.ADMIN_LOGIN_SUCCESS, user=user, resource="authentication"
        )
    logger.info("User logged in: id=%s", user.id)
    return UserEnvelope(user=UserRead.model_validate(user))


@router.post("/refresh", response_model=RefreshResponse)
@limiter.limit(settings.REFRESH_RATE_LIMIT)
async def refresh(
    request: Request,
    response: Response,
    refresh_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE),
    db: AsyncSession = Depends(get_db),
) -> RefreshResponse:
    """Mint a new access token from the refresh cookie.

    The refresh token itself is not rotated: the same cookie keeps working
    until its own expiry.
    """
    if not refresh_cookie:
        raise AuthError(
            status.HTTP_401_UNAUTHORIZED,
            "Refresh token required",
            AuthErrorCode.REFRESH_TOKEN_MISSING,
        )

    try:
        claims = verify_refresh_token(refresh_cookie)
    except TokenExpiredError:
        raise AuthError(
            status.HTTP_401_UNAUTHORIZED,
            "Refresh token expired",
            AuthErrorCode.REFRESH_TOKEN_EXPIRED,
            clear_session=True,
        ) from None
    except TokenInvalidError:
        raise AuthError(
            status.HTTP_403_FORBIDDEN,
            "Invalid refresh token",
            AuthErrorCode.REFRESH_TOKEN_INVALID,
        ) from None

    user = await user_crud.get_user(db, claims.user_id)
    if user is None:
        raise AuthError(
            status.HTTP_401_UNAUTHORIZED,
            "User not found",
            AuthErrorCode.USER_NOT_FOUND,
        )

    set_access_cookie(response, issue_access_token(user.id))
    return RefreshResponse(
        message="Token refreshed successfully",
        user=UserRead.model_validate(user),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    """Clear both session cookies; safe to call without a session."""
    clear_session_cookies(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserEnvelope)
async def read_current_user(
    current_user: User = Depends(get_current_user),
) -> UserEnvelope:
    """Return profile of the currently authenticated user."""
    return UserEnvelope(user=UserRead.model_validate(current_user))


# ── E-mail verification ─────────────────────────────────────────────
@router.get("/verify-email", response_model=MessageResponse)
async def verify_email(
    token: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    if not token:
        raise HTTPException(status_code=400, detail="Token is required")

    user = await user_crud.get_user_by_verification_token(db, token)
    if user is None:
        raise HTTPException(status_code=400, detail="Invalid or expired verification token")

    await user_crud.update_user(db, user, is_verified=True, email_verification_token=None)
    logger.info("E-mail verified for user id=%s", user.id)
    return MessageResponse(message="Email verified successfully")


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    body: EmailRequest,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> MessageResponse:
    user = await user_crud.get_user_by_email(db, body.email)
    if user is None:
        return MessageResponse(message=_GENERIC_VERIFY_MESSAGE)
    if user.is_verified:
        raise HTTPException(status_code=400, detail="Email is already verified")

    token = generate_one_time_token()
    await user_crud.update_user(db, user, email_verification_token=token)

    try:
        await notifier.send_verification_email(user.email, token)
    except EmailSendError:
        raise HTTPException(status_code=500, detail="Failed to send verification email") from None
    return MessageResponse(message="Verification email sent successfully")


# ── Password reset ──────────────────────────────────────────────────
@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: EmailRequest,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> MessageResponse:
    """Always answers the same way so e-mail addresses cannot be probed."""
    user = await user_crud.get_user_by_email(db, body.email)
    if user is None:
        return MessageResponse(message=_GENERIC_RESET_MESSAGE)

    token = generate_one_time_token()
    await user_crud.update_user(db, user, password_reset_token=token)

    try:
        await notifier.send_password_reset_email(user.email, token)
    except EmailSendError:
        logger.warning("Password reset e-mail not sent for user id=%s", user.id)
    return MessageResponse(message=_GENERIC_RESET_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    user = await user_crud.get_user_by_reset_token(db, body.token)
    if user is None:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    await user_crud.update_user(
        db,
        user,
        password_hash=get_password_hash(body.password),
        password_reset_token=None,
    )
    logger.info("Password reset for user id=%s", user.id)
    return MessageResponse(message="Password reset successfully")

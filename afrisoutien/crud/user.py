"""
User persistence — point lookups and updates used by the auth flows.

Verification and reset tokens are unique, indexed columns so both
lookups are a single indexed query.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from afrisoutien.models.user import Role, User


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.strip()))
    return result.scalar_one_or_none()


async def get_user_by_verification_token(db: AsyncSession, token: str) -> User | None:
    result = await db.execute(select(User).where(User.email_verification_token == token))
    return result.scalar_one_or_none()


async def get_user_by_reset_token(db: AsyncSession, token: str) -> User | None:
    result = await db.execute(select(User).where(User.password_reset_token == token))
    return result.scalar_one_or_none()


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


async def create_user(
    db: AsyncSession,
    *,
    email: str,
    password_hash: str,
    first_name: str,
    last_name: str,
    role: Role = Role.BENEFICIARY,
    is_verified: bool = False,
    email_verification_token: str | None = None,
) -> User:
    user = User(
        email=email,
        password_hash=password_hash,
        first_name=first_name,
        last_name=last_name,
        role=role,
        is_verified=is_verified,
        email_verification_token=email_verification_token,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def update_user(db: AsyncSession, user: User, **changes: Any) -> User:
    for field, value in changes.items():
        setattr(user, field, value)
    await db.commit()
    await db.refresh(user)
    return user


async def ensure_admin(db: AsyncSession, *, email: str, password_hash: str) -> User:
    """Create the bootstrap admin verified, or promote the existing account."""
    user = await get_user_by_email(db, email)
    if user is None:
        return await create_user(
            db,
            email=email,
            password_hash=password_hash,
            first_name="Admin",
            last_name="Afri Soutien",
            role=Role.ADMIN,
            is_verified=True,
        )
    if user.role != Role.ADMIN or not user.is_verified:
        user = await update_user(db, user, role=Role.ADMIN, is_verified=True)
    return user

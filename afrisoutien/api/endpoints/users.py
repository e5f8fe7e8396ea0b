"""
Self-service endpoints for the signed-in user.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from afrisoutien.api.deps import get_current_user, get_db
from afrisoutien.core.security import get_password_hash
from afrisoutien.crud.user import update_user
from afrisoutien.models.boutique import BoutiqueOrder
from afrisoutien.models.campaign import Campaign
from afrisoutien.models.user import User
from afrisoutien.schemas.boutique import BoutiqueOrderRead
from afrisoutien.schemas.campaign import CampaignRead
from afrisoutien.schemas.user import UserEnvelope, UserRead, UserSelfUpdate

router = APIRouter(prefix="/users/me", tags=["users"])


@router.get("/campaigns", response_model=list[CampaignRead])
async def my_campaigns(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[Campaign]:
    result = await db.execute(
        select(Campaign)
        .where(Campaign.user_id == current_user.id)
        .order_by(Campaign.created_at.desc(), Campaign.id.desc())
    )
    return list(result.scalars().all())


@router.get("/orders", response_model=list[BoutiqueOrderRead])
async def my_orders(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[BoutiqueOrder]:
    result = await db.execute(
        select(BoutiqueOrder)
        .where(BoutiqueOrder.user_id == current_user.id)
        .order_by(BoutiqueOrder.created_at.desc(), BoutiqueOrder.id.desc())
    )
    return list(result.scalars().all())


@router.put("", response_model=UserEnvelope)
async def update_me(
    body: UserSelfUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserEnvelope:
    """Update names and/or password.  Role, e-mail and verification are admin-only."""
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    password = changes.pop("password", None)
    if password:
        changes["password_hash"] = get_password_hash(password)

    user = await update_user(db, current_user, **changes)
    return UserEnvelope(user=UserRead.model_validate(user))

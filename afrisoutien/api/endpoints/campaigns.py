"""
Campaign endpoints.

- GET operations are public and default to approved campaigns.
- POST requires an authenticated user, who becomes the campaign owner.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from afrisoutien.api.deps import get_current_user, get_db
from afrisoutien.models.campaign import Campaign
from afrisoutien.models.user import User
from afrisoutien.schemas.campaign import CampaignCreate, CampaignRead

router = APIRouter(prefix="/campaigns", tags=["campaigns"])
logger = logging.getLogger(__name__)


async def list_campaigns(
    db: AsyncSession, status: str | None = None, limit: int | None = None
) -> list[Campaign]:
    """Newest first, optionally filtered by status."""
    query = select(Campaign)
    if status:
        query = query.where(Campaign.status == status)
    query = query.order_by(Campaign.created_at.desc(), Campaign.id.desc())
    if limit:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.get("", response_model=list[CampaignRead])
async def get_campaigns(
    status: str = Query(default="approved"),
    limit: int | None = Query(default=None, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
) -> list[Campaign]:
    return await list_campaigns(db, status, limit)


@router.get("/{campaign_id}", response_model=CampaignRead)
async def get_campaign(campaign_id: int, db: AsyncSession = Depends(get_db)) -> Campaign:
    campaign = await db.get(Campaign, campaign_id)
    if campaign is None:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return campaign


@router.post("", response_model=CampaignRead, status_code=201)
async def create_campaign(
    body: CampaignCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Campaign:
    """Submit a campaign for moderation (status ``pending``)."""
    campaign = Campaign(user_id=current_user.id, **body.model_dump())
    db.add(campaign)
    await db.commit()
    await db.refresh(campaign)
    logger.info("Campaign %s submitted by user id=%s", campaign.id, current_user.id)
    return campaign

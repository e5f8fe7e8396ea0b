"""
Boutique endpoints — browse published items, request one.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from afrisoutien.api.deps import get_current_user, get_db
from afrisoutien.models.boutique import BoutiqueItem, BoutiqueOrder
from afrisoutien.models.user import User
from afrisoutien.schemas.boutique import (BoutiqueItemRead, BoutiqueOrderCreate,
                                          BoutiqueOrderRead)

router = APIRouter(prefix="/boutique", tags=["boutique"])
logger = logging.getLogger(__name__)


@router.get("/items", response_model=list[BoutiqueItemRead])
async def list_items(
    status: str = Query(default="available"),
    category: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> list[BoutiqueItem]:
    query = select(BoutiqueItem).where(BoutiqueItem.status == status)
    if category:
        query = query.where(BoutiqueItem.category == category)
    result = await db.execute(
        query.order_by(BoutiqueItem.published_at.desc(), BoutiqueItem.id.desc())
    )
    return list(result.scalars().all())


@router.get("/items/{item_id}", response_model=BoutiqueItemRead)
async def get_item(item_id: int, db: AsyncSession = Depends(get_db)) -> BoutiqueItem:
    item = await db.get(BoutiqueItem, item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.post("/orders", response_model=BoutiqueOrderRead, status_code=201)
async def create_order(
    body: BoutiqueOrderCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BoutiqueOrder:
    item = await db.get(BoutiqueItem, body.item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    if item.status != "available":
        raise HTTPException(status_code=400, detail="Item is not available")

    order = BoutiqueOrder(user_id=current_user.id, status="pending_approval", **body.model_dump())
    db.add(order)
    await db.commit()
    await db.refresh(order)
    logger.info("Boutique order %s for item %s by user id=%s", order.id, item.id, current_user.id)
    return order

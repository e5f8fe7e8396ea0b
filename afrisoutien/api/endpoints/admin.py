"""
Admin back-office — moderation of campaigns, material donations,
boutique orders and user accounts.

Every route sits behind ``require_admin`` and leaves an entry in the
audit trail.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from afrisoutien.api.deps import get_db, require_admin
from afrisoutien.api.endpoints.campaigns import list_campaigns
from afrisoutien.crud import user as user_crud
from afrisoutien.models.boutique import (BOUTIQUE_ORDER_STATUSES, BoutiqueItem,
                                         BoutiqueOrder, MaterialDonation)
from afrisoutien.models.campaign import CAMPAIGN_STATUSES, Campaign, FinancialDonation
from afrisoutien.models.user import EMAIL_MAX_LENGTH, Role, User
from afrisoutien.schemas.base import MessageResponse
from afrisoutien.schemas.boutique import (BoutiqueItemRead, BoutiqueOrderRead,
                                          MaterialDonationRead, OrderStatusUpdate,
                                          PublishRequest)
from afrisoutien.schemas.campaign import CampaignRead, CampaignStatusUpdate
from afrisoutien.schemas.user import RoleUpdate, UserRead, VerificationUpdate
from afrisoutien.services.audit import AuditAction, AuditLog, get_audit_log

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


# ── Campaigns ───────────────────────────────────────────────────────
@router.get("/campaigns", response_model=list[CampaignRead])
async def admin_list_campaigns(
    request: Request,
    status: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> list[Campaign]:
    audit_log.record(
        request,
        AuditAction.LIST_CAMPAIGNS,
        user=admin,
        resource="campaigns",
        details={"status": status} if status else None,
    )
    return await list_campaigns(db, status)


@router.get("/campaigns/pending", response_model=list[CampaignRead])
async def admin_pending_campaigns(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> list[Campaign]:
    audit_log.record(
        request, AuditAction.LIST_CAMPAIGNS, user=admin, resource="campaigns",
        details={"status": "pending"},
    )
    return await list_campaigns(db, "pending")


@router.put("/campaigns/{campaign_id}/status", response_model=CampaignRead)
async def change_campaign_status(
    campaign_id: int,
    body: CampaignStatusUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> Campaign:
    if body.status not in CAMPAIGN_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    campaign = await db.get(Campaign, campaign_id)
    if campaign is None:
        raise HTTPException(status_code=404, detail="Campaign not found")

    previous = campaign.status
    campaign.status = body.status
    await db.commit()
    await db.refresh(campaign)

    audit_log.record(
        request,
        AuditAction.CHANGE_CAMPAIGN_STATUS,
        user=admin,
        resource="campaigns",
        resource_id=campaign.id,
        details={"from": previous, "to": body.status},
    )
    return campaign


@router.delete("/campaigns/{campaign_id}", response_model=MessageResponse)
async def delete_campaign(
    campaign_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> MessageResponse:
    if await db.get(Campaign, campaign_id) is None:
        raise HTTPException(status_code=404, detail="Campaign not found")

    await db.execute(
        sa_delete(FinancialDonation).where(FinancialDonation.campaign_id == campaign_id)
    )
    await db.execute(sa_delete(Campaign).where(Campaign.id == campaign_id))
    await db.commit()

    audit_log.record(
        request, AuditAction.DELETE_CAMPAIGN, user=admin, resource="campaigns",
        resource_id=campaign_id,
    )
    return MessageResponse(message="Campaign deleted successfully")


# ── Material donations ──────────────────────────────────────────────
async def _material_donations(db: AsyncSession, status: str | None = None) -> list[MaterialDonation]:
    query = select(MaterialDonation)
    if status:
        query = query.where(MaterialDonation.status == status)
    result = await db.execute(
        query.order_by(MaterialDonation.created_at.desc(), MaterialDonation.id.desc())
    )
    return list(result.scalars().all())


@router.get("/material-donations/pending", response_model=list[MaterialDonationRead])
async def pending_material_donations(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> list[MaterialDonation]:
    audit_log.record(
        request, AuditAction.LIST_DONATIONS, user=admin, resource="material_donations",
        details={"status": "pending_verification"},
    )
    return await _material_donations(db, "pending_verification")


@router.get("/donations", response_model=list[MaterialDonationRead])
async def all_material_donations(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> list[MaterialDonation]:
    audit_log.record(request, AuditAction.LIST_DONATIONS, user=admin, resource="material_donations")
    return await _material_donations(db)


@router.post(
    "/material-donations/{donation_id}/publish",
    response_model=BoutiqueItemRead,
    status_code=201,
)
async def publish_material_donation(
    donation_id: int,
    body: PublishRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> BoutiqueItem:
    """Turn a verified donation into an ``available`` boutique item."""
    donation = await db.get(MaterialDonation, donation_id)
    if donation is None:
        raise HTTPException(status_code=404, detail="Donation not found")

    donation.status = "published_in_store"
    item = BoutiqueItem(
        source_donation_id=donation.id,
        title=body.title,
        description=body.description,
        category=body.category,
        image_urls=donation.image_urls,
        status="available",
        published_by_admin_id=admin.id,
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)

    audit_log.record(
        request,
        AuditAction.PUBLISH_MATERIAL_DONATION,
        user=admin,
        resource="material_donations",
        resource_id=donation.id,
        details={"boutique_item_id": item.id},
    )
    return item


@router.delete("/donations/{donation_id}", response_model=MessageResponse)
async def reject_material_donation(
    donation_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> MessageResponse:
    """Soft reject: the row stays, its status becomes ``rejected``."""
    donation = await db.get(MaterialDonation, donation_id)
    if donation is None:
        raise HTTPException(status_code=404, detail="Donation not found")

    donation.status = "rejected"
    await db.commit()

    audit_log.record(
        request, AuditAction.REJECT_MATERIAL_DONATION, user=admin,
        resource="material_donations", resource_id=donation_id,
    )
    return MessageResponse(message="Donation rejected successfully")


# ── Boutique orders ─────────────────────────────────────────────────
@router.get("/boutique/orders/pending", response_model=list[BoutiqueOrderRead])
async def pending_orders(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> list[BoutiqueOrder]:
    result = await db.execute(
        select(BoutiqueOrder)
        .where(BoutiqueOrder.status == "pending_approval")
        .order_by(BoutiqueOrder.created_at.asc(), BoutiqueOrder.id.asc())
    )
    audit_log.record(request, AuditAction.LIST_ORDERS, user=admin, resource="boutique_orders")
    return list(result.scalars().all())


@router.put("/boutique/orders/{order_id}/status", response_model=BoutiqueOrderRead)
async def change_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> BoutiqueOrder:
    if body.status not in BOUTIQUE_ORDER_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    order = await db.get(BoutiqueOrder, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    order.status = body.status
    order.handled_by_admin_id = admin.id
    await db.commit()
    await db.refresh(order)

    audit_log.record(
        request,
        AuditAction.CHANGE_ORDER_STATUS,
        user=admin,
        resource="boutique_orders",
        resource_id=order.id,
        details={"status": body.status},
    )
    return order


# ── Users ───────────────────────────────────────────────────────────
async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await user_crud.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/users", response_model=list[UserRead])
async def admin_list_users(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> list[User]:
    audit_log.record(request, AuditAction.LIST_USERS, user=admin, resource="users")
    return await user_crud.list_users(db)


@router.put("/users/{user_id}/role", response_model=UserRead)
async def change_user_role(
    user_id: int,
    body: RoleUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> User:
    try:
        role = Role(body.role)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid role") from None

    user = await _get_user_or_404(db, user_id)
    previous = user.role
    user = await user_crud.update_user(db, user, role=role)

    audit_log.record(
        request,
        AuditAction.CHANGE_USER_ROLE,
        user=admin,
        resource="users",
        resource_id=user.id,
        details={"from": previous.value, "to": role.value},
    )
    return user


@router.put("/users/{user_id}/status", response_model=UserRead)
async def change_user_verification(
    user_id: int,
    body: VerificationUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> User:
    user = await _get_user_or_404(db, user_id)
    user = await user_crud.update_user(db, user, is_verified=body.is_verified)

    audit_log.record(
        request,
        AuditAction.UPDATE_USER,
        user=admin,
        resource="users",
        resource_id=user.id,
        details={"is_verified": body.is_verified},
    )
    return user


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> MessageResponse:
    """Soft delete: unverify and free the e-mail address."""
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")

    user = await _get_user_or_404(db, user_id)
    original_email = user.email
    await user_crud.update_user(
        db,
        user,
        is_verified=False,
        # The id prefix keeps truncated tombstones unique
        email=f"deleted_{user_id}_{original_email}"[:EMAIL_MAX_LENGTH],
    )

    audit_log.record(
        request,
        AuditAction.DELETE_USER,
        user=admin,
        resource="users",
        resource_id=user_id,
        details={"email": original_email},
    )
    logger.info("User id=%s soft-deleted by admin id=%s", user_id, admin.id)
    return MessageResponse(message="User deleted successfully")

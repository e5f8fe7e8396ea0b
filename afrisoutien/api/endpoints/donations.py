"""
Donation endpoints — financial donations through mobile-money operators
and material donations for the boutique.

The operator integration is a stub: ``initiate`` records a pending
donation under a generated transaction reference, and the operator's
webhook settles it through ``callback``.
"""

from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from afrisoutien.api.deps import get_db
from afrisoutien.core.exceptions import EmailSendError
from afrisoutien.models.boutique import MaterialDonation
from afrisoutien.models.campaign import Campaign, FinancialDonation
from afrisoutien.models.user import User
from afrisoutien.schemas.base import MessageResponse
from afrisoutien.schemas.boutique import MaterialDonationCreate, MaterialDonationRead
from afrisoutien.schemas.campaign import (DonationInitiate, DonationInitiateResponse,
                                          DonationRead, PaymentCallback)
from afrisoutien.services.notifications import NotificationService, get_notifier

router = APIRouter(tags=["donations"])
logger = logging.getLogger(__name__)

_ANONYMOUS_DONOR = "Donateur anonyme"


@router.post("/donations/initiate", response_model=DonationInitiateResponse, status_code=201)
async def initiate_donation(
    body: DonationInitiate,
    db: AsyncSession = Depends(get_db),
) -> DonationInitiateResponse:
    campaign = await db.get(Campaign, body.campaign_id)
    if campaign is None:
        raise HTTPException(status_code=404, detail="Campaign not found")

    donation = FinancialDonation(
        **body.model_dump(),
        operator_transaction_id=f"AS-{secrets.token_hex(8).upper()}",
        status="pending",
    )
    db.add(donation)
    await db.commit()
    await db.refresh(donation)
    logger.info(
        "Donation %s initiated: campaign=%s operator=%s",
        donation.id,
        campaign.id,
        donation.payment_operator,
    )
    return DonationInitiateResponse(
        donation=DonationRead.model_validate(donation),
        message="Donation initiated. You will receive SMS/notification to complete payment.",
    )


@router.post("/donations/callback/{operator}", response_model=MessageResponse)
async def payment_callback(
    operator: str,
    body: PaymentCallback,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> MessageResponse:
    """Settle a pending donation from the operator webhook."""
    logger.info("Payment webhook from %s: %s - %s", operator, body.transaction_id, body.status)

    result = await db.execute(
        select(FinancialDonation).where(
            FinancialDonation.operator_transaction_id == body.transaction_id
        )
    )
    donation = result.scalar_one_or_none()
    if donation is None:
        raise HTTPException(status_code=404, detail="Donation not found")

    if donation.status == "completed":
        # Operators retry webhooks; never credit the campaign twice
        return MessageResponse(message="Callback already processed")

    settled = body.status == "success"
    result = await db.execute(
        update(FinancialDonation)
        .where(FinancialDonation.id == donation.id, FinancialDonation.status != "completed")
        .values(status="completed" if settled else "failed")
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        return MessageResponse(message="Callback already processed")
    if not settled:
        await db.commit()
        return MessageResponse(message="Callback processed successfully")

    await db.execute(
        update(Campaign)
        .where(Campaign.id == donation.campaign_id)
        .values(current_amount=Campaign.current_amount + donation.amount)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    campaign = await db.get(Campaign, donation.campaign_id)
    if campaign is None:
        return MessageResponse(message="Callback processed successfully")

    donor_name = donation.donor_name or _ANONYMOUS_DONOR
    if donation.donor_email:
        try:
            await notifier.send_donation_receipt(
                donation.donor_email,
                donor_name=donor_name,
                amount=donation.amount,
                campaign_title=campaign.title,
                donation_id=donation.id,
            )
        except EmailSendError:
            logger.warning("Receipt not sent for donation %s", donation.id)

    owner = await db.get(User, campaign.user_id)
    if owner is not None:
        try:
            await notifier.send_campaign_owner_notification(
                owner.email,
                campaign_title=campaign.title,
                donor_name=donor_name,
                amount=donation.amount,
            )
        except EmailSendError:
            logger.warning("Owner notification not sent for donation %s", donation.id)

    return MessageResponse(message="Callback processed successfully")


@router.post("/material-donations", response_model=MaterialDonationRead, status_code=201)
async def create_material_donation(
    body: MaterialDonationCreate,
    db: AsyncSession = Depends(get_db),
) -> MaterialDonation:
    donation = MaterialDonation(**body.model_dump(), status="pending_verification")
    db.add(donation)
    await db.commit()
    await db.refresh(donation)
    logger.info("Material donation %s offered", donation.id)
    return donation

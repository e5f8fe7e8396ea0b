"""
Public content endpoints — contact form, CMS pages, health check.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from afrisoutien.api.deps import get_db
from afrisoutien.core.exceptions import EmailSendError
from afrisoutien.models.content import ContactMessage, SitePage
from afrisoutien.schemas.base import HealthResponse
from afrisoutien.schemas.content import ContactRequest, ContactResponse, PublicPage
from afrisoutien.services.notifications import NotificationService, get_notifier

router = APIRouter(tags=["content"])
logger = logging.getLogger(__name__)


@router.post("/contact", response_model=ContactResponse)
async def contact(
    body: ContactRequest,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> ContactResponse:
    """Store the message, forward it to support, acknowledge the sender."""
    message = ContactMessage(
        sender_name=body.name,
        sender_email=body.email,
        subject=body.subject,
        message=body.message,
        status="unread",
    )
    db.add(message)
    await db.commit()
    logger.info("Contact message %s stored", message.id)

    try:
        await notifier.send_contact_form(
            sender_name=body.name,
            sender_email=body.email,
            subject=body.subject,
            message=body.message,
        )
    except EmailSendError:
        raise HTTPException(status_code=500, detail="Failed to send message") from None

    try:
        await notifier.send_contact_acknowledgment(
            sender_name=body.name, sender_email=body.email, subject=body.subject
        )
    except EmailSendError:
        logger.warning("Acknowledgment not sent for contact message %s", message.id)

    return ContactResponse(
        success=True,
        message=(
            "Votre message a été envoyé avec succès. "
            "Nous vous répondrons dans les plus brefs délais."
        ),
    )


@router.get("/pages/{slug}", response_model=PublicPage)
async def get_page(slug: str, db: AsyncSession = Depends(get_db)) -> SitePage:
    result = await db.execute(
        select(SitePage).where(SitePage.slug == slug, SitePage.status == "published")
    )
    page = result.scalar_one_or_none()
    if page is None:
        raise HTTPException(status_code=404, detail="Page not found")
    return page


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Public health check — database connectivity."""
    try:
        await db.execute(select(1))
    except Exception as e:
        logger.error("Health check DB failure: %s", e)
        return HealthResponse(status="degraded", db=False)
    return HealthResponse(status="ok", db=True)

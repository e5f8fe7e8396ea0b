"""
Admin content management — CMS pages, site settings, contact inbox.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from afrisoutien.api.deps import get_db, require_admin
from afrisoutien.models.content import ContactMessage, SitePage, SiteSetting
from afrisoutien.models.user import User
from afrisoutien.schemas.content import (ContactMessageRead, ContactMessageUpdate,
                                         SitePageCreate, SitePageRead, SitePageUpdate,
                                         SiteSettingRead, SiteSettingUpdate)
from afrisoutien.services.audit import AuditAction, AuditLog, get_audit_log

router = APIRouter(prefix="/admin/content", tags=["admin-content"])


# ── Pages ───────────────────────────────────────────────────────────
async def _get_page_or_404(db: AsyncSession, page_id: int) -> SitePage:
    page = await db.get(SitePage, page_id)
    if page is None:
        raise HTTPException(status_code=404, detail="Page not found")
    return page


@router.get("/pages", response_model=list[SitePageRead])
async def list_pages(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> list[SitePage]:
    result = await db.execute(select(SitePage).order_by(SitePage.slug))
    audit_log.record(request, AuditAction.VIEW_CONTENT, user=admin, resource="site_pages")
    return list(result.scalars().all())


@router.get("/pages/{page_id}", response_model=SitePageRead)
async def get_page(
    page_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> SitePage:
    return await _get_page_or_404(db, page_id)


@router.post("/pages", response_model=SitePageRead, status_code=201)
async def create_page(
    body: SitePageCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> SitePage:
    page = SitePage(**body.model_dump(), updated_by_admin_id=admin.id)
    db.add(page)
    await db.commit()
    await db.refresh(page)
    audit_log.record(
        request, AuditAction.UPDATE_CONTENT, user=admin, resource="site_pages",
        resource_id=page.id, details={"slug": page.slug, "op": "create"},
    )
    return page


@router.put("/pages/{page_id}", response_model=SitePageRead)
async def update_page(
    page_id: int,
    body: SitePageUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> SitePage:
    page = await _get_page_or_404(db, page_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(page, field, value)
    page.updated_by_admin_id = admin.id
    await db.commit()
    await db.refresh(page)
    audit_log.record(
        request, AuditAction.UPDATE_CONTENT, user=admin, resource="site_pages",
        resource_id=page.id, details={"slug": page.slug, "op": "update"},
    )
    return page


@router.delete("/pages/{page_id}", status_code=204)
async def delete_page(
    page_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> Response:
    page = await _get_page_or_404(db, page_id)
    await db.delete(page)
    await db.commit()
    audit_log.record(
        request, AuditAction.UPDATE_CONTENT, user=admin, resource="site_pages",
        resource_id=page_id, details={"op": "delete"},
    )
    return Response(status_code=204)


# ── Settings ────────────────────────────────────────────────────────
@router.get("/settings", response_model=list[SiteSettingRead])
async def list_settings(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> list[SiteSetting]:
    result = await db.execute(select(SiteSetting).order_by(SiteSetting.category, SiteSetting.key))
    audit_log.record(request, AuditAction.VIEW_CONTENT, user=admin, resource="site_settings")
    return list(result.scalars().all())


@router.put("/settings/{key}", response_model=SiteSettingRead)
async def upsert_setting(
    key: str,
    body: SiteSettingUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> SiteSetting:
    """Set *key* to a new value, creating the setting on first write."""
    result = await db.execute(select(SiteSetting).where(SiteSetting.key == key))
    setting = result.scalar_one_or_none()
    if setting is None:
        setting = SiteSetting(key=key, value=body.value, updated_by_admin_id=admin.id)
        db.add(setting)
    else:
        setting.value = body.value
        setting.updated_by_admin_id = admin.id
    await db.commit()
    await db.refresh(setting)
    audit_log.record(
        request, AuditAction.UPDATE_CONTENT, user=admin, resource="site_settings",
        resource_id=setting.id, details={"key": key},
    )
    return setting


# ── Contact messages ────────────────────────────────────────────────
async def _get_message_or_404(db: AsyncSession, message_id: int) -> ContactMessage:
    message = await db.get(ContactMessage, message_id)
    if message is None:
        raise HTTPException(status_code=404, detail="Message not found")
    return message


@router.get("/messages", response_model=list[ContactMessageRead])
async def list_messages(
    request: Request,
    status: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> list[ContactMessage]:
    query = select(ContactMessage)
    if status:
        query = query.where(ContactMessage.status == status)
    result = await db.execute(
        query.order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
    )
    audit_log.record(request, AuditAction.VIEW_CONTENT, user=admin, resource="contact_messages")
    return list(result.scalars().all())


@router.get("/messages/{message_id}", response_model=ContactMessageRead)
async def get_message(
    message_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> ContactMessage:
    return await _get_message_or_404(db, message_id)


@router.put("/messages/{message_id}", response_model=ContactMessageRead)
async def update_message(
    message_id: int,
    body: ContactMessageUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> ContactMessage:
    """Change status and/or record the admin's answer."""
    message = await _get_message_or_404(db, message_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(message, field, value)
    message.responded_by_admin_id = admin.id
    message.responded_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(message)
    audit_log.record(
        request, AuditAction.UPDATE_CONTENT, user=admin, resource="contact_messages",
        resource_id=message.id, details={"status": message.status},
    )
    return message

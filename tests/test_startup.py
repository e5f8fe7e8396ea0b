"""Tests for app assembly and the bootstrap admin account."""

from sqlalchemy.ext.asyncio import AsyncSession

from afrisoutien.core.limiter import limiter
from afrisoutien.core.security import get_password_hash, verify_password
from afrisoutien.crud.user import ensure_admin, get_user_by_email
from afrisoutien.main import app
from afrisoutien.models.user import Role
from afrisoutien.services.audit import AuditAction, AuditLog


def test_app_state_is_wired():
    assert app.state.limiter is limiter
    assert isinstance(app.state.audit_log, AuditLog)
    assert "/api/auth/login" in app.openapi()["paths"]


async def test_ensure_admin_creates_verified_admin(db_session: AsyncSession):
    admin = await ensure_admin(
        db_session, email="root@afrisoutien.com", password_hash=get_password_hash("s3cret-pass")
    )
    assert admin.role == Role.ADMIN
    assert admin.is_verified is True
    assert verify_password("s3cret-pass", admin.password_hash)

    again = await ensure_admin(
        db_session, email="root@afrisoutien.com", password_hash=get_password_hash("other")
    )
    assert again.id == admin.id


async def test_ensure_admin_promotes_existing_account(db_session: AsyncSession, donor):
    await ensure_admin(db_session, email=donor.email, password_hash=get_password_hash("x" * 12))

    promoted = await get_user_by_email(db_session, donor.email)
    assert promoted.id == donor.id
    assert promoted.role == Role.ADMIN
    assert promoted.is_verified is True


async def test_audit_queries_by_user(async_client, donor, donor_headers, admin_user, admin_headers):
    await async_client.get("/api/admin/users", headers=donor_headers)
    await async_client.get("/api/admin/stats", headers=admin_headers)

    audit_log = app.state.audit_log
    assert [e.action for e in audit_log.by_user(donor.id)] == [AuditAction.ADMIN_ACCESS_DENIED]
    assert [e.action for e in audit_log.by_user(admin_user.id)] == [AuditAction.VIEW_DASHBOARD]
    assert len(audit_log) == 2

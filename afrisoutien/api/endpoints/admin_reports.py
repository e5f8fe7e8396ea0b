"""
Admin dashboard, reports and audit-log endpoints.

Figures are computed with aggregate SQL queries rather than by loading
whole tables.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from afrisoutien.api.deps import get_db, require_admin
from afrisoutien.models.boutique import BoutiqueOrder, MaterialDonation
from afrisoutien.models.campaign import Campaign, FinancialDonation
from afrisoutien.models.user import Role, User
from afrisoutien.schemas.admin import (ActivityItem, AuditEntryRead, CampaignReport,
                                       CampaignTrends, DashboardStats, FinancialReport,
                                       MonthlyReport, RoleDistribution, UserReport,
                                       WeeklyUserActivity)
from afrisoutien.services.audit import AuditAction, AuditLog, get_audit_log

router = APIRouter(prefix="/admin", tags=["admin-reports"])

_FRENCH_MONTHS = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)


# ── Helpers ─────────────────────────────────────────────────────────
def _decimal(value) -> Decimal:
    return Decimal(str(value or 0))


def _percent(part: int | Decimal, whole: int | Decimal) -> int:
    if not whole:
        return 0
    return round(part * 100 / whole)


def _week_ago() -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=7)


async def _count(db: AsyncSession, column, *criteria) -> int:
    result = await db.execute(select(func.count(column)).where(*criteria))
    return result.scalar() or 0


async def _campaign_amount_total(db: AsyncSession) -> Decimal:
    result = await db.execute(select(func.coalesce(func.sum(Campaign.current_amount), 0)))
    return _decimal(result.scalar())


# ── Dashboard ───────────────────────────────────────────────────────
@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> DashboardStats:
    week_ago = _week_ago()
    stats = DashboardStats(
        total_users=await _count(db, User.id),
        total_campaigns=await _count(db, Campaign.id),
        total_donations=await _count(db, MaterialDonation.id),
        total_amount=await _campaign_amount_total(db),
        active_campaigns=await _count(db, Campaign.id, Campaign.status == "active"),
        pending_campaigns=await _count(db, Campaign.id, Campaign.status == "pending"),
        recent_users=await _count(db, User.id, User.created_at > week_ago),
        recent_donations=await _count(
            db, MaterialDonation.id, MaterialDonation.created_at > week_ago
        ),
        pending_orders=await _count(
            db, BoutiqueOrder.id, BoutiqueOrder.status == "pending_approval"
        ),
        material_donations=await _count(
            db, MaterialDonation.id, MaterialDonation.status == "published_in_store"
        ),
    )
    audit_log.record(request, AuditAction.VIEW_DASHBOARD, user=admin, resource="dashboard")
    return stats


@router.get("/recent-activity", response_model=list[ActivityItem])
async def recent_activity(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> list[ActivityItem]:
    """Last week's new campaigns, material donations and sign-ups (max 5)."""
    week_ago = _week_ago()

    campaigns = await db.execute(
        select(Campaign)
        .where(Campaign.created_at > week_ago)
        .order_by(Campaign.created_at.desc())
        .limit(2)
    )
    donations = await db.execute(
        select(MaterialDonation)
        .where(MaterialDonation.created_at > week_ago)
        .order_by(MaterialDonation.created_at.desc())
        .limit(2)
    )
    users = await db.execute(
        select(User).where(User.created_at > week_ago).order_by(User.created_at.desc()).limit(1)
    )

    activity = [
        ActivityItem(description=f"Nouvelle campagne: {c.title}", timestamp=c.created_at)
        for c in campaigns.scalars()
    ]
    activity += [
        ActivityItem(description=f"Don matériel proposé: {d.title}", timestamp=d.created_at)
        for d in donations.scalars()
    ]
    activity += [
        ActivityItem(
            description=f"Nouvel utilisateur: {u.first_name} {u.last_name}",
            timestamp=u.created_at,
        )
        for u in users.scalars()
    ]

    audit_log.record(request, AuditAction.VIEW_DASHBOARD, user=admin, resource="recent_activity")
    return activity[:5]


# ── Reports ─────────────────────────────────────────────────────────
@router.get("/reports/monthly", response_model=MonthlyReport)
async def monthly_report(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> MonthlyReport:
    now = datetime.now(timezone.utc)
    month_start = datetime(now.year, now.month, 1, tzinfo=timezone.utc)

    new_users = await _count(db, User.id, User.created_at >= month_start)
    new_campaigns = await _count(db, Campaign.id, Campaign.created_at >= month_start)
    successful = await _count(
        db, Campaign.id, Campaign.created_at >= month_start, Campaign.status == "completed"
    )

    audit_log.record(
        request, AuditAction.VIEW_REPORT, user=admin, resource="reports",
        details={"report": "monthly"},
    )
    return MonthlyReport(
        period=f"{_FRENCH_MONTHS[now.month - 1]} {now.year}",
        total_revenue=await _campaign_amount_total(db),
        new_users=new_users,
        successful_campaigns=successful,
        average_engagement=_percent(new_campaigns, max(new_users, 1)),
    )


@router.get("/reports/financial", response_model=FinancialReport)
async def financial_report(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> FinancialReport:
    """Settled amounts and the share of each operator among completed donations."""
    result = await db.execute(
        select(
            FinancialDonation.status,
            func.count(FinancialDonation.id),
            func.coalesce(func.sum(FinancialDonation.amount), 0),
        ).group_by(FinancialDonation.status)
    )
    counts: dict[str, int] = {}
    total_collected = Decimal("0")
    for status, count, amount in result.all():
        counts[status] = count
        if status == "completed":
            total_collected = _decimal(amount)

    operators = await db.execute(
        select(FinancialDonation.payment_operator, func.count(FinancialDonation.id))
        .where(FinancialDonation.status == "completed")
        .group_by(FinancialDonation.payment_operator)
    )
    completed = counts.get("completed", 0)
    payment_methods = {
        operator: _percent(count, completed) for operator, count in operators.all()
    }

    audit_log.record(
        request, AuditAction.VIEW_REPORT, user=admin, resource="reports",
        details={"report": "financial"},
    )
    return FinancialReport(
        total_collected=total_collected,
        completed_donations=completed,
        failed_donations=counts.get("failed", 0),
        pending_donations=counts.get("pending", 0),
        payment_methods=payment_methods,
    )


@router.get("/reports/users", response_model=UserReport)
async def users_report(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> UserReport:
    result = await db.execute(select(User.role, func.count(User.id)).group_by(User.role))
    by_role = {role: count for role, count in result.all()}
    total = sum(by_role.values())
    verified = await _count(db, User.id, User.is_verified.is_(True))

    week_ago = _week_ago()
    recent = await _count(db, User.id, User.created_at > week_ago)
    recent_verified = await _count(
        db, User.id, User.created_at > week_ago, User.is_verified.is_(True)
    )

    audit_log.record(
        request, AuditAction.VIEW_REPORT, user=admin, resource="reports",
        details={"report": "users"},
    )
    return UserReport(
        total_users=total,
        verification_rate=_percent(verified, total),
        role_distribution=RoleDistribution(
            beneficiaries=by_role.get(Role.BENEFICIARY, 0),
            donors=by_role.get(Role.DONOR, 0),
            admins=by_role.get(Role.ADMIN, 0),
        ),
        weekly_activity=WeeklyUserActivity(
            new_registrations=recent,
            verified_accounts=recent_verified,
        ),
    )


@router.get("/reports/campaigns", response_model=CampaignReport)
async def campaigns_report(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> CampaignReport:
    totals = await db.execute(
        select(
            func.count(Campaign.id),
            func.coalesce(func.sum(Campaign.goal_amount), 0),
            func.coalesce(func.sum(Campaign.current_amount), 0),
        )
    )
    total, goal_sum, current_sum = totals.one()
    goal_sum, current_sum = _decimal(goal_sum), _decimal(current_sum)

    completed = await _count(db, Campaign.id, Campaign.status == "completed")
    categories = await db.execute(
        select(Campaign.category, func.count(Campaign.id))
        .where(Campaign.category.is_not(None))
        .group_by(Campaign.category)
    )

    audit_log.record(
        request, AuditAction.VIEW_REPORT, user=admin, resource="reports",
        details={"report": "campaigns"},
    )
    return CampaignReport(
        total_campaigns=total,
        success_rate=_percent(completed, total),
        average_goal_achievement=_percent(current_sum, goal_sum),
        category_performance={category: count for category, count in categories.all()},
        trends=CampaignTrends(
            campaign_creation=await _count(db, Campaign.id, Campaign.created_at > _week_ago()),
            average_amount=(current_sum / total).quantize(Decimal("1")) if total else Decimal("0"),
        ),
    )


# ── Audit trail ─────────────────────────────────────────────────────
@router.get("/logs", response_model=list[AuditEntryRead])
async def audit_logs(
    request: Request,
    limit: int = Query(default=100, ge=1, le=1000),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> list[AuditEntryRead]:
    entries = audit_log.latest(limit)
    audit_log.record(request, AuditAction.VIEW_LOGS, user=admin, resource="audit_logs")
    return [AuditEntryRead.model_validate(e.as_dict()) for e in entries]


@router.get("/logs/security", response_model=list[AuditEntryRead])
async def security_logs(
    request: Request,
    limit: int = Query(default=50, ge=1, le=1000),
    admin: User = Depends(require_admin),
    audit_log: AuditLog = Depends(get_audit_log),
) -> list[AuditEntryRead]:
    """Failed actions plus login failures, denials, deletions and role changes."""
    entries = audit_log.security(limit)
    audit_log.record(
        request, AuditAction.VIEW_LOGS, user=admin, resource="audit_logs",
        details={"view": "security"},
    )
    return [AuditEntryRead.model_validate(e.as_dict()) for e in entries]

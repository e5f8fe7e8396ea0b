"""Pydantic schemas for the admin dashboard, reports and audit trail."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from afrisoutien.schemas.base import CamelModel


class DashboardStats(CamelModel):
    total_users: int
    total_campaigns: int
    total_donations: int
    total_amount: Decimal
    active_campaigns: int
    pending_campaigns: int
    recent_users: int
    recent_donations: int
    pending_orders: int
    material_donations: int


class ActivityItem(CamelModel):
    description: str
    timestamp: datetime


class MonthlyReport(CamelModel):
    period: str
    total_revenue: Decimal
    new_users: int
    successful_campaigns: int
    average_engagement: int


class FinancialReport(CamelModel):
    total_collected: Decimal
    completed_donations: int
    failed_donations: int
    pending_donations: int
    payment_methods: dict[str, int]


class RoleDistribution(CamelModel):
    beneficiaries: int
    donors: int
    admins: int


class WeeklyUserActivity(CamelModel):
    new_registrations: int
    verified_accounts: int


class UserReport(CamelModel):
    total_users: int
    verification_rate: int
    role_distribution: RoleDistribution
    weekly_activity: WeeklyUserActivity


class CampaignTrends(CamelModel):
    campaign_creation: int
    average_amount: Decimal


class CampaignReport(CamelModel):
    total_campaigns: int
    success_rate: int
    average_goal_achievement: int
    category_performance: dict[str, int]
    trends: CampaignTrends


class AuditEntryRead(CamelModel):
    timestamp: datetime
    user_id: int | None = None
    user_email: str | None = None
    action: str
    resource: str | None = None
    resource_id: int | None = None
    ip_address: str
    user_agent: str
    success: bool
    details: dict[str, Any] | None = None

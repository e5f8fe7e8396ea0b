"""Pydantic schemas for campaigns and financial donations."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from afrisoutien.schemas.base import CamelModel


class CampaignCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    goal_amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    image_urls: list[str] | None = None
    category: str | None = Field(default=None, max_length=100)


class CampaignRead(CamelModel):
    id: int
    user_id: int
    title: str
    description: str
    goal_amount: Decimal
    current_amount: Decimal
    status: str
    image_urls: list[str] | None = None
    category: str | None = None
    created_at: datetime | None = None


class CampaignStatusUpdate(CamelModel):
    status: str


class DonationInitiate(CamelModel):
    campaign_id: int
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    payment_operator: str = Field(min_length=1, max_length=50)
    donor_name: str | None = Field(default=None, max_length=255)
    donor_email: str | None = Field(default=None, max_length=255)
    user_id: int | None = None


class DonationRead(CamelModel):
    id: int
    campaign_id: int
    user_id: int | None = None
    donor_name: str | None = None
    donor_email: str | None = None
    amount: Decimal
    payment_operator: str
    operator_transaction_id: str | None = None
    status: str
    created_at: datetime | None = None


class DonationInitiateResponse(CamelModel):
    donation: DonationRead
    message: str


class PaymentCallback(CamelModel):
    """Webhook body posted by the mobile-money operator (snake_case keys)."""

    transaction_id: str = Field(alias="transaction_id", min_length=1)
    status: str
    amount: Decimal | None = None

"""
Campaign & financial donation models — the crowdfunding side.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (JSON, Column, DateTime, ForeignKey, Integer, Numeric,
                        String, Text)
from sqlalchemy.orm import relationship

from afrisoutien.db.base import Base

CAMPAIGN_STATUSES = ("pending", "approved", "active", "completed", "rejected")
DONATION_STATUSES = ("pending", "completed", "failed")


class Campaign(Base):
    __tablename__ = "campaigns"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # type: ignore[assignment]
    title: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    description: str = Column(Text, nullable=False)  # type: ignore[assignment]
    goal_amount: Decimal = Column(Numeric(12, 2), nullable=False)  # type: ignore[assignment]
    current_amount: Decimal = Column(  # type: ignore[assignment]
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    status: str = Column(String(20), nullable=False, default="pending", index=True)  # type: ignore[assignment]
    image_urls: list[str] | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    category: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    donations = relationship(
        "FinancialDonation",
        back_populates="campaign",
        cascade="all, delete-orphan",
    )


class FinancialDonation(Base):
    __tablename__ = "financial_donations"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    campaign_id: int = Column(Integer, ForeignKey("campaigns.id"), nullable=False)  # type: ignore[assignment]
    user_id: int | None = Column(Integer, ForeignKey("users.id"), nullable=True)  # type: ignore[assignment]
    donor_name: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    donor_email: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    amount: Decimal = Column(Numeric(12, 2), nullable=False)  # type: ignore[assignment]
    payment_operator: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    operator_transaction_id: str | None = Column(  # type: ignore[assignment]
        String(255), unique=True, nullable=True, index=True
    )
    status: str = Column(String(20), nullable=False, default="pending")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    campaign = relationship("Campaign", back_populates="donations")

"""
Material donations and the boutique they are published into.

A material donation is offered by anyone, checked by an admin, then
published as a boutique item that beneficiaries can request.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text

from afrisoutien.db.base import Base

MATERIAL_DONATION_STATUSES = ("pending_verification", "published_in_store", "rejected")
BOUTIQUE_ITEM_STATUSES = ("available", "reserved", "given")
BOUTIQUE_ORDER_STATUSES = ("pending_approval", "approved", "rejected", "delivered")


class MaterialDonation(Base):
    __tablename__ = "material_donations"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    donor_name: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    donor_contact: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    title: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    description: str = Column(Text, nullable=False)  # type: ignore[assignment]
    image_urls: list[str] | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    pickup_location: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    category: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(50), nullable=False, default="pending_verification", index=True
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class BoutiqueItem(Base):
    __tablename__ = "boutique_items"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    source_donation_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("material_donations.id"), nullable=True
    )
    title: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    description: str = Column(Text, nullable=False)  # type: ignore[assignment]
    image_urls: list[str] | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    category: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    status: str = Column(String(50), nullable=False, default="available", index=True)  # type: ignore[assignment]
    published_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    published_by_admin_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id"), nullable=False
    )


class BoutiqueOrder(Base):
    __tablename__ = "boutique_orders"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # type: ignore[assignment]
    item_id: int = Column(Integer, ForeignKey("boutique_items.id"), nullable=False)  # type: ignore[assignment]
    motivation_message: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(50), nullable=False, default="pending_approval", index=True
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    handled_by_admin_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id"), nullable=True
    )
    requester_name: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    requester_email: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    requester_phone: str | None = Column(String(50), nullable=True)  # type: ignore[assignment]
    request_reason: str = Column(Text, nullable=False)  # type: ignore[assignment]
    delivery_address: str | None = Column(Text, nullable=True)  # type: ignore[assignment]

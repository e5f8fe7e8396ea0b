"""
Content management models — static pages, key/value site settings and
messages received through the contact form.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from afrisoutien.db.base import Base

PAGE_STATUSES = ("draft", "published")
MESSAGE_STATUSES = ("unread", "read", "responded")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SitePage(Base):
    __tablename__ = "site_pages"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    title: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    slug: str = Column(String(255), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    content: str = Column(Text, nullable=False)  # type: ignore[assignment]
    meta_description: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="draft")  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), nullable=False, default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )
    updated_by_admin_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]


class SiteSetting(Base):
    __tablename__ = "site_settings"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    key: str = Column(String(255), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    value: str = Column(Text, nullable=False)  # type: ignore[assignment]
    type: str = Column(String(50), nullable=False, default="text")  # type: ignore[assignment]
    description: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    category: str = Column(String(100), nullable=False, default="general")  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )
    updated_by_admin_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]


class ContactMessage(Base):
    __tablename__ = "contact_messages"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    sender_name: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    sender_email: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    subject: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    message: str = Column(Text, nullable=False)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="unread", index=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), nullable=False, default=_utcnow)  # type: ignore[assignment]
    responded_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    responded_by_admin_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id"), nullable=True
    )
    admin_response: str | None = Column(Text, nullable=True)  # type: ignore[assignment]

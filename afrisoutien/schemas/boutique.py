"""Pydantic schemas for material donations and the boutique."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from afrisoutien.schemas.base import CamelModel


class MaterialDonationCreate(CamelModel):
    donor_name: str = Field(min_length=1, max_length=255)
    donor_contact: str = Field(min_length=1, max_length=255)
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    pickup_location: str = Field(min_length=1, max_length=255)
    image_urls: list[str] | None = None
    category: str | None = Field(default=None, max_length=100)


class MaterialDonationRead(CamelModel):
    id: int
    donor_name: str
    donor_contact: str
    title: str
    description: str
    image_urls: list[str] | None = None
    pickup_location: str
    category: str | None = None
    status: str
    created_at: datetime | None = None


class PublishRequest(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=100)


class BoutiqueItemRead(CamelModel):
    id: int
    source_donation_id: int | None = None
    title: str
    description: str
    image_urls: list[str] | None = None
    category: str
    status: str
    published_at: datetime | None = None
    published_by_admin_id: int


class BoutiqueOrderCreate(CamelModel):
    item_id: int
    requester_name: str = Field(min_length=1, max_length=255)
    requester_email: str = Field(min_length=3, max_length=255)
    request_reason: str = Field(min_length=1)
    requester_phone: str | None = Field(default=None, max_length=50)
    delivery_address: str | None = None
    motivation_message: str | None = None


class BoutiqueOrderRead(CamelModel):
    id: int
    user_id: int
    item_id: int
    motivation_message: str | None = None
    status: str
    created_at: datetime | None = None
    handled_by_admin_id: int | None = None
    requester_name: str
    requester_email: str
    requester_phone: str | None = None
    request_reason: str
    delivery_address: str | None = None


class OrderStatusUpdate(CamelModel):
    status: str

"""Pydantic schemas for site pages, settings and contact messages."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from afrisoutien.models.content import MESSAGE_STATUSES, PAGE_STATUSES
from afrisoutien.schemas.base import CamelModel


class SitePageCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255, pattern=r"^[a-z0-9][a-z0-9-]*$")
    content: str
    meta_description: str | None = None
    status: str = "draft"

    @field_validator("status")
    @classmethod
    def _status(cls, v: str) -> str:
        if v not in PAGE_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(PAGE_STATUSES)}")
        return v


class SitePageUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, min_length=1, max_length=255, pattern=r"^[a-z0-9][a-z0-9-]*$")
    content: str | None = None
    meta_description: str | None = None
    status: str | None = None

    @field_validator("status")
    @classmethod
    def _status(cls, v: str | None) -> str | None:
        if v is not None and v not in PAGE_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(PAGE_STATUSES)}")
        return v


class SitePageRead(CamelModel):
    id: int
    title: str
    slug: str
    content: str
    meta_description: str | None = None
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    updated_by_admin_id: int


class PublicPage(CamelModel):
    title: str
    slug: str
    content: str
    meta_description: str | None = None


class SiteSettingRead(CamelModel):
    id: int
    key: str
    value: str
    type: str
    description: str | None = None
    category: str
    updated_at: datetime | None = None
    updated_by_admin_id: int


class SiteSettingUpdate(CamelModel):
    value: str


class ContactRequest(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    subject: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)


class ContactResponse(CamelModel):
    success: bool
    message: str


class ContactMessageRead(CamelModel):
    id: int
    sender_name: str
    sender_email: str
    subject: str
    message: str
    status: str
    created_at: datetime | None = None
    responded_at: datetime | None = None
    responded_by_admin_id: int | None = None
    admin_response: str | None = None


class ContactMessageUpdate(CamelModel):
    status: str | None = None
    admin_response: str | None = None

    @field_validator("status")
    @classmethod
    def _status(cls, v: str | None) -> str | None:
        if v is not None and v not in MESSAGE_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(MESSAGE_STATUSES)}")
        return v

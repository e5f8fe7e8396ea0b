"""
User model — authentication, e-mail verification & role-based access.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String

from afrisoutien.db.base import Base

EMAIL_MAX_LENGTH = 255


class Role(str, enum.Enum):
    ADMIN = "admin"
    DONOR = "donor"
    BENEFICIARY = "beneficiary"


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    first_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    last_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    email: str = Column(String(EMAIL_MAX_LENGTH), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    password_hash: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    role: Role = Column(  # type: ignore[assignment]
        Enum(
            Role,
            native_enum=False,
            length=20,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
        default=Role.BENEFICIARY,
    )
    is_verified: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    # At most one outstanding token of each kind; a new request overwrites.
    email_verification_token: str | None = Column(  # type: ignore[assignment]
        String(255), unique=True, nullable=True, index=True
    )
    password_reset_token: str | None = Column(  # type: ignore[assignment]
        String(255), unique=True, nullable=True, index=True
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

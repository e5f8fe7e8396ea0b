"""Pydantic schemas for users and the auth flows."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from afrisoutien.models.user import Role
from afrisoutien.schemas.base import CamelModel

# Admin accounts are only ever created by the bootstrap or promoted by an admin
_SELF_SERVICE_ROLES = {Role.DONOR, Role.BENEFICIARY}


def _normalise_email(v: str) -> str:
    v = v.strip()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError("Invalid email address")
    return v


class UserRegister(CamelModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(max_length=255)
    password: str = Field(min_length=8, max_length=128)
    role: Role = Role.BENEFICIARY

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)

    @field_validator("role")
    @classmethod
    def _role(cls, v: Role) -> Role:
        if v not in _SELF_SERVICE_ROLES:
            raise ValueError("Role must be donor or beneficiary")
        return v


class LoginRequest(CamelModel):
    email: str
    password: str


class EmailRequest(CamelModel):
    email: str


class ResetPasswordRequest(CamelModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=8, max_length=128)


class UserSummary(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str


class UserRead(CamelModel):
    """Public profile — never carries the hash or one-time tokens."""

    id: int
    email: str
    first_name: str
    last_name: str
    role: Role
    is_verified: bool
    created_at: datetime | None = None


class UserEnvelope(CamelModel):
    user: UserRead


class RegisterResponse(CamelModel):
    message: str
    user: UserSummary


class RefreshResponse(CamelModel):
    message: str
    user: UserRead


class UserSelfUpdate(CamelModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    password: str | None = Field(default=None, min_length=8, max_length=128)


class RoleUpdate(CamelModel):
    role: str


class VerificationUpdate(CamelModel):
    is_verified: bool

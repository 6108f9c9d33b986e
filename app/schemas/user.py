# app/schemas/user.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field, field_validator

from app.schemas.base import CamelModel

# App-level roles. "guest" = no token, so we don't store it here.
Role = Literal["user", "admin"]


class UserRead(CamelModel):
    """Response schema returned to clients."""

    id: uuid.UUID
    email: str
    name: str
    phone: str | None
    role: Role
    created_at: datetime
    updated_at: datetime


class UserUpdate(CamelModel):
    """
    Partial profile update for authenticated users.
    Email and role are not editable here.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=20)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


class UserRoleUpdate(CamelModel):
    """
    Admin-only role update schema.
    """

    model_config = ConfigDict(extra="forbid")
    role: Role


class UserAdminRead(UserRead):
    """User row on the admin screen, with the number of orders placed."""

    order_count: int = 0

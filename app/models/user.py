# app/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Persistent user profile for the storefront.

    Identity:
      - id: MUST match the auth provider's user id (UUID from JWT "sub")

    Role:
      - "user" | "admin"
      - "guest" is represented by the absence of a row / missing token.

    This table is *not* responsible for password hashes. The auth provider
    keeps credentials; we only mirror identity, contact details and
    application role.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches the token 'sub' claim",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email from the token",
    )

    name: str = Field(
        max_length=100,
        description="Display name; first part of email by default",
    )

    phone: str | None = Field(
        default=None,
        max_length=20,
    )

    # Application role
    role: str = Field(
        default="user",
        index=True,
        description="Application role: user | admin",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"onupdate": lambda: datetime.now(timezone.utc)},
    )

# app/schemas/review.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, Field, field_validator

from app.schemas.base import CamelModel


class ReviewCreate(CamelModel):
    """
    Payload for posting a review.

    The author comes from the token. Rating range and a non-empty comment
    are checked by the service so the error messages stay specific.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    rating: int
    title: str | None = Field(default=None, max_length=200)
    comment: str

    @field_validator("title", "comment")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v


class ReviewVerify(CamelModel):
    """Admin payload to verify or unverify a review."""

    model_config = ConfigDict(extra="forbid")

    verified: bool


class ReviewAuthorRead(CamelModel):
    id: uuid.UUID
    name: str


class ReviewProductRead(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    images: list[str]


class ReviewRead(CamelModel):
    id: uuid.UUID
    rating: int
    title: str | None
    comment: str
    verified: bool
    created_at: datetime
    updated_at: datetime
    user: ReviewAuthorRead
    product: ReviewProductRead

# app/schemas/category.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, Field, field_validator

from app.schemas.base import CamelModel


class CategoryCreate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=100)
    slug: str | None = None
    description: str | None = None
    image: str | None = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class CategoryUpdate(CamelModel):
    """
    Partial update payload for categories.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    slug: str | None = None
    description: str | None = None
    image: str | None = None

    @field_validator("name", "slug")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class CategoryRead(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    description: str | None
    image: str | None
    created_at: datetime
    product_count: int = 0

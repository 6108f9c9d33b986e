# app/schemas/product.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, Field, field_validator

from app.schemas.base import CamelModel


class ProductSizeBase(CamelModel):
    name: str = Field(min_length=1, max_length=50)
    price: float = Field(gt=0)
    original_price: float | None = Field(default=None, gt=0)
    available: bool = True

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("size name cannot be empty")
        return v


class ProductSizeCreate(ProductSizeBase):
    pass


class ProductSizeRead(ProductSizeBase):
    id: uuid.UUID
    sort_order: int


class ProductCreate(CamelModel):
    """
    Admin product form.

    - slug is optional: if omitted, generated from `name`.
    - at least one image URL is required.
    - sizes are stored in the order given; the first one is the cart default.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=255)
    slug: str | None = None
    description: str = Field(min_length=1)
    short_description: str = Field(min_length=1)
    price: float = Field(gt=0)
    original_price: float | None = Field(default=None, gt=0)
    category_id: uuid.UUID
    images: list[str] = Field(min_length=1)
    tags: list[str] = []
    in_stock: bool = True
    featured: bool = False
    sizes: list[ProductSizeCreate] = []

    @field_validator("name", "description", "short_description")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("slug")
    @classmethod
    def normalize_slug(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("slug cannot be empty if provided")
        return v

    @field_validator("images")
    @classmethod
    def validate_images(cls, v: list[str]) -> list[str]:
        for url in v:
            if not url.startswith(("http://", "https://", "/")):
                raise ValueError(f"invalid image URL: {url}")
        return v

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        return [t.strip().lower() for t in v if t.strip()]


class ProductUpdate(CamelModel):
    """
    Partial update payload for products.
    All fields are optional. `sizes`, when given, replaces the size list.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    slug: str | None = None
    description: str | None = None
    short_description: str | None = None
    price: float | None = Field(default=None, gt=0)
    original_price: float | None = Field(default=None, gt=0)
    category_id: uuid.UUID | None = None
    images: list[str] | None = None
    tags: list[str] | None = None
    in_stock: bool | None = None
    featured: bool | None = None
    sizes: list[ProductSizeCreate] | None = None

    @field_validator("name", "slug", "description", "short_description")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("images")
    @classmethod
    def validate_images(cls, v: list[str] | None) -> list[str] | None:
        if v is not None and not v:
            raise ValueError("at least one image is required")
        return v


class ProductCategoryRead(CamelModel):
    id: uuid.UUID
    name: str
    slug: str


class ProductRead(CamelModel):
    """
    Product representation for clients.
    """

    id: uuid.UUID
    name: str
    slug: str
    description: str
    short_description: str
    price: float
    original_price: float | None
    images: list[str]
    tags: list[str]
    in_stock: bool
    featured: bool
    category: ProductCategoryRead | None
    sizes: list[ProductSizeRead]
    created_at: datetime
    updated_at: datetime

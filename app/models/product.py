# app/models/product.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Category(SQLModel, table=True):
    """
    Catalog category (e.g. whey, plant protein, recovery, accessories).
    """

    __tablename__ = "categories"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(max_length=100)

    slug: str = Field(
        max_length=255,
        unique=True,
        index=True,
    )

    description: str | None = None
    image: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    images / tags are stored as JSON lists. The cart never copies price
    or stock from here; it re-reads them on every aggregation.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=255,
        index=True,
        description="Display name of the product",
    )

    slug: str = Field(
        max_length=255,
        unique=True,
        index=True,
        description="URL-friendly identifier (unique)",
    )

    description: str = Field(default="")
    short_description: str = Field(default="")

    price: float = Field(
        gt=0,
        description="Unit price in whole currency units (INR)",
    )

    original_price: float | None = Field(
        default=None,
        description="Pre-discount price, shown struck through",
    )

    images: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    tags: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    in_stock: bool = Field(
        default=True,
        index=True,
    )

    featured: bool = Field(
        default=False,
        index=True,
    )

    category_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="categories.id",
        index=True,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"onupdate": lambda: datetime.now(timezone.utc)},
    )


class ProductSize(SQLModel, table=True):
    """
    A size variant declared for a product (e.g. "500g", "1kg").

    sort_order keeps declaration order; the first declared size is the
    cart's fallback when a customer adds without choosing one.
    """

    __tablename__ = "product_sizes"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    name: str = Field(max_length=50, description="Size label")

    price: float = Field(gt=0)
    original_price: float | None = None
    available: bool = True

    sort_order: int = Field(
        default=0,
        ge=0,
        description="Ordering index within the product's size list",
    )

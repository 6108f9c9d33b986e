# app/schemas/cart.py
import uuid
from datetime import datetime

from app.schemas.base import CamelModel, MessageResponse


class CartItemCreate(CamelModel):
    """
    Payload for adding to cart.

    quantity / size are optional: quantity defaults to 1 and size falls
    back to the product's first declared size. Range checks live in
    CartService so they hold for every caller, not only HTTP.
    """

    product_id: uuid.UUID
    quantity: int = 1
    size: str | None = None


class CartItemUpdate(CamelModel):
    """
    Payload for setting the quantity of a cart line. 0 removes the line.
    """

    cart_item_id: uuid.UUID
    quantity: int


class CartCategoryRead(CamelModel):
    id: uuid.UUID
    name: str
    slug: str


class CartSizeRead(CamelModel):
    name: str
    price: float
    original_price: float | None = None
    available: bool


class CartProductRead(CamelModel):
    """
    Current product data attached to a cart line.
    """

    id: uuid.UUID
    name: str
    slug: str
    price: float
    original_price: float | None = None
    images: list[str]
    in_stock: bool
    category: CartCategoryRead | None = None
    sizes: list[CartSizeRead] = []


class CartItemRead(CamelModel):
    """
    Read model for a single cart line, including subtotal at current price.
    """

    id: uuid.UUID
    quantity: int
    size: str
    product: CartProductRead
    subtotal: float
    created_at: datetime
    updated_at: datetime


class CartSummary(CamelModel):
    """
    Derived cart totals. Never persisted.
    """

    item_count: int
    subtotal: float
    shipping_cost: float
    shipping_threshold: float
    tax: float
    tax_rate: float
    total: float


class CartRead(CamelModel):
    """
    Full cart response: lines (newest first) plus summary.
    """

    items: list[CartItemRead]
    summary: CartSummary


class CartItemMutationResponse(MessageResponse):
    item: CartItemRead | None = None


class CartClearResponse(MessageResponse):
    removed: int

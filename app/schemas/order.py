# app/schemas/order.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator

from app.schemas.base import CamelModel

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]


class CheckoutCreate(CamelModel):
    """
    Payload for creating an order from the current cart.

    Backend derives:
      - user_id from token
      - status = 'pending'
      - items and all amounts from the cart
    """

    model_config = ConfigDict(extra="forbid")

    full_name: str
    phone_number: str
    email: str | None = None
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    zip_code: str
    country: str = "India"
    note: str | None = None

    @field_validator(
        "full_name", "phone_number", "address_line1", "city", "state", "zip_code", "country"
    )
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("email", "address_line2", "note")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


class OrderItemRead(CamelModel):
    id: uuid.UUID
    product_id: uuid.UUID | None
    name: str
    size: str
    quantity: int
    price: float
    line_total: float


class OrderRead(CamelModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    order_number: str
    user_id: uuid.UUID
    status: OrderStatus
    full_name: str
    phone_number: str
    email: str | None
    address_line1: str
    address_line2: str | None
    city: str
    state: str
    zip_code: str
    country: str
    note: str | None
    subtotal: float
    shipping_cost: float
    tax: float
    total: float
    created_at: datetime
    updated_at: datetime


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]


class OrderStatusUpdate(CamelModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus

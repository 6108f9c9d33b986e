# app/models/order.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order created at checkout.

    Unlike cart lines, an order freezes its amounts: subtotal, shipping,
    tax and total are copied from the cart summary at checkout time.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_number: str = Field(
        unique=True,
        index=True,
        description="Human-facing order reference, e.g. ORD-20260101-1A2B3C",
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    # Shipping contact
    full_name: str
    phone_number: str
    email: str | None = None

    # Shipping address
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    zip_code: str
    country: str = Field(default="India")

    note: str | None = Field(
        default=None,
        description="Optional note / special instructions",
    )

    # pending | processing | shipped | delivered | cancelled
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    subtotal: float
    shipping_cost: float
    tax: float
    total: float = Field(
        description="subtotal + shipping_cost + tax",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"onupdate": lambda: datetime.now(timezone.utc)},
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    # Nullable so that deleting a product does not break order history
    product_id: uuid.UUID | None = Field(
        default=None,
        index=True,
    )

    name: str = Field(description="Product name at time of order")
    size: str

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    price: float = Field(
        description="Unit price at time of order (pre-tax)",
    )

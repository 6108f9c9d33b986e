# app/services/order_service.py
import logging
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.order import Order, OrderItem
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.schemas.order import (
    CheckoutCreate,
    OrderItemRead,
    OrderRead,
    OrderStatusUpdate,
    OrderWithItemsRead,
)
from app.services.cart_service import CartService

logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 5

# Allowed admin status transitions
STATUS_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"processing", "cancelled"},
    "processing": {"shipped", "cancelled"},
    "shipped": {"delivered"},
    "delivered": set(),
    "cancelled": set(),
}


def generate_order_number(now: datetime | None = None) -> str:
    """ORD-YYYYMMDD-XXXXXX with a random hex suffix."""
    now = now or datetime.now(timezone.utc)
    return f"ORD-{now:%Y%m%d}-{uuid.uuid4().hex[:6].upper()}"


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Create order from cart, priced exactly like the cart summary
      - Validate cart lines against products (stock flag)
      - Freeze unit prices and totals on the order
      - Clear cart in the same transaction
      - Enforce simple status transitions (admin)
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        cart_service: CartService,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo
        self.cart_service = cart_service

    def _new_order_number(self, session: Session) -> str:
        for _ in range(ORDER_NUMBER_ATTEMPTS):
            candidate = generate_order_number()
            if not self.order_repo.order_number_exists(session, candidate):
                return candidate
        raise RuntimeError("Could not allocate a unique order number")

    # -------- User-facing operations --------

    def checkout(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CheckoutCreate,
    ) -> OrderWithItemsRead:
        """
        Convert the current user's cart into an Order.

        Steps:
          1. Price the cart through CartService (same constants as the cart page).
          2. Reject an empty cart.
          3. Reject if any line's product is out of stock (per-line reasons).
          4. Create Order (status='pending') with the summary amounts.
          5. Create OrderItem rows with unit prices frozen.
          6. Clear cart.
          7. Commit once and return full order.
        """
        cart = self.cart_service.get_cart(session, user_id)

        if not cart.items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty",
            )

        errors = [
            {"cartItemId": str(line.id), "reason": f"{line.product.name} is out of stock"}
            for line in cart.items
            if not line.product.in_stock
        ]
        if errors:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Cart validation failed", "items": errors},
            )

        summary = cart.summary
        order = Order(
            order_number=self._new_order_number(session),
            user_id=user_id,
            full_name=payload.full_name,
            phone_number=payload.phone_number,
            email=payload.email,
            address_line1=payload.address_line1,
            address_line2=payload.address_line2,
            city=payload.city,
            state=payload.state,
            zip_code=payload.zip_code,
            country=payload.country,
            note=payload.note,
            status="pending",
            subtotal=summary.subtotal,
            shipping_cost=summary.shipping_cost,
            tax=summary.tax,
            total=summary.total,
        )
        order = self.order_repo.add(session, order)

        order_items = self.order_repo.add_items(
            session,
            [
                OrderItem(
                    order_id=order.id,
                    product_id=line.product.id,
                    name=line.product.name,
                    size=line.size,
                    quantity=line.quantity,
                    price=line.product.price,
                )
                for line in cart.items
            ],
        )

        self.cart_repo.clear_user_cart(session, user_id, commit=False)

        session.commit()
        session.refresh(order)
        for item in order_items:
            session.refresh(item)

        logger.info(
            "Order placed: %s user=%s total=%.2f lines=%d",
            order.order_number, user_id, order.total, len(order_items),
        )
        return self._build_order_with_items_dto(order, order_items)

    def list_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderWithItemsRead]:
        """
        Order history for the given user, newest first, items included.
        """
        orders = self.order_repo.list_for_user(session, user_id, skip, limit)
        items = self.order_repo.items_by_order(session, [o.id for o in orders])
        return [self._build_order_with_items_dto(o, items.get(o.id, [])) for o in orders]

    def get_user_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        """
        Get a single order for the user, including items.

        - 404 if order not found or does not belong to this user.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

        items = self.order_repo.items_by_order(session, [order.id])
        return self._build_order_with_items_dto(order, items.get(order.id, []))

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        status_filter: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        """
        List all orders (admin only).
        """
        orders = self.order_repo.list_all(session, status_filter, skip, limit)
        return [OrderRead.model_validate(o) for o in orders]

    def update_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderStatusUpdate,
    ) -> OrderRead:
        """
        Admin-only status update with simple state machine:

          pending    -> processing, cancelled
          processing -> shipped, cancelled
          shipped    -> delivered
          delivered  -> (no change)
          cancelled  -> (no change)

        Any invalid transition raises 400.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

        current = order.status
        new = payload.status

        if current == new:
            return OrderRead.model_validate(order)

        if new not in STATUS_TRANSITIONS.get(current, set()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status transition: {current} -> {new}",
            )

        order.status = new
        self.order_repo.add(session, order)
        session.commit()
        session.refresh(order)

        logger.info("Order %s status %s -> %s", order.order_number, current, new)
        return OrderRead.model_validate(order)

    # -------- Helper DTO builder --------

    @staticmethod
    def _build_order_with_items_dto(
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        item_dtos = [
            OrderItemRead(
                id=it.id,
                product_id=it.product_id,
                name=it.name,
                size=it.size,
                quantity=it.quantity,
                price=it.price,
                line_total=it.quantity * it.price,
            )
            for it in items
        ]
        base = OrderRead.model_validate(order).model_dump()
        return OrderWithItemsRead(**base, items=item_dtos)

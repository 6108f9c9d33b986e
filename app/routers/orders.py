# app/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_auth, require_admin
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.category_repo import CategoryRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.order import (
    CheckoutCreate,
    OrderRead,
    OrderStatus,
    OrderStatusUpdate,
    OrderWithItemsRead,
)
from app.services.cart_service import CartService
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])
admin_router = APIRouter(prefix="/admin/orders", tags=["Admin Orders"])

order_repo = OrderRepository()
cart_repo = CartRepository()
cart_service = CartService(cart_repo, ProductRepository(), CategoryRepository())
service = OrderService(order_repo, cart_repo, cart_service)


# -------- User-facing endpoints --------


@router.post(
    "/checkout",
    response_model=OrderWithItemsRead,
    status_code=status.HTTP_201_CREATED,
)
def checkout(
    payload: CheckoutCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Create an order from the current user's cart and empty the cart.
    """
    return service.checkout(session, current_user.id, payload)


@router.get("", response_model=list[OrderWithItemsRead])
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    skip: int = 0,
    limit: int = 50,
):
    """
    List the authenticated user's orders with their items, newest first.
    """
    return service.list_user_orders(session, current_user.id, skip, limit)


@router.get("/{order_id}", response_model=OrderWithItemsRead)
def get_my_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get a single order (with items) belonging to the current user.
    """
    return service.get_user_order(session, current_user.id, order_id)


# -------- Admin endpoints --------


@admin_router.get(
    "",
    response_model=list[OrderRead],
    dependencies=[Depends(require_admin)],
)
def list_all_orders(
    session: Session = Depends(get_session),
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    skip: int = 0,
    limit: int = 50,
):
    """
    List all orders, optionally filtered by status (admin only).
    """
    return service.list_all_orders(session, status_filter, skip, limit)


@admin_router.patch(
    "/{order_id}/status",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Update order status (admin only) with simple state machine.

      pending    -> processing, cancelled

      processing -> shipped, cancelled

      shipped    -> delivered

    """
    return service.update_status(session, order_id, payload)

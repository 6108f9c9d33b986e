# app/routers/cart.py
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session

from app.core.auth import require_user_id
from app.database import get_session
from app.repositories.cart_repo import CartRepository
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.base import MessageResponse
from app.schemas.cart import (
    CartClearResponse,
    CartItemCreate,
    CartItemMutationResponse,
    CartItemUpdate,
    CartRead,
)
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
category_repo = CategoryRepository()
service = CartService(cart_repo, product_repo, category_repo)

# Guests are rejected with 401 while dependencies resolve, before the
# body or itemId is validated. CartService repeats the owner check.


@router.get("", response_model=CartRead)
def get_my_cart(
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(require_user_id),
):
    """
    Get current user's cart lines (newest first) with summary:
    itemCount, subtotal, shippingCost, shippingThreshold, tax, taxRate, total.
    """
    return service.get_cart(session, user_id)


@router.post("", response_model=CartItemMutationResponse)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(require_user_id),
):
    """
    Add a product to the current user's cart.

    Re-adding the same product + size increments the existing line.
    """
    item = service.add_item(session, user_id, payload)
    return CartItemMutationResponse(message="Item added to cart successfully", item=item)


@router.put(
    "",
    response_model=CartItemMutationResponse,
    response_model_exclude_unset=True,
)
def update_cart_item(
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(require_user_id),
):
    """
    Set the quantity of a cart line.

    quantity=0 removes the line; the response then has no `item`.
    """
    item = service.update_item(session, user_id, payload.cart_item_id, payload.quantity)
    if item is None:
        return CartItemMutationResponse(message="Item removed from cart")
    return CartItemMutationResponse(message="Cart item updated successfully", item=item)


@router.delete("", response_model=MessageResponse)
def remove_cart_item(
    item_id: uuid.UUID | None = Query(default=None, alias="itemId"),
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(require_user_id),
):
    """
    Remove one line: DELETE /cart?itemId=<id>.
    """
    if item_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cart item ID is required",
        )

    service.remove_item(session, user_id, item_id)
    return MessageResponse(message="Item removed from cart successfully")


@router.delete("/items", response_model=CartClearResponse)
def clear_cart(
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(require_user_id),
):
    """
    Remove every line of the current user's cart, all-or-nothing.
    """
    removed = service.clear_cart(session, user_id)
    return CartClearResponse(message="Cart cleared", removed=removed)

# app/services/cart_service.py
import logging
import uuid
from decimal import Decimal, ROUND_HALF_UP

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.cart import CartItem, DEFAULT_SIZE
from app.models.product import Category, Product, ProductSize
from app.repositories.cart_repo import CartRepository
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartCategoryRead,
    CartItemCreate,
    CartItemRead,
    CartProductRead,
    CartRead,
    CartSizeRead,
    CartSummary,
)

logger = logging.getLogger(__name__)

# Free shipping at or above this subtotal (INR)
FREE_SHIPPING_THRESHOLD = 2000.0

# Flat fee below the threshold
SHIPPING_FEE = 99.0

# Flat GST rate applied to the subtotal
TAX_RATE = 0.18


def round_half_up(value: float) -> float:
    """Round to the nearest whole currency unit, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_summary(items: list[CartItemRead]) -> CartSummary:
    """
    Cart-level totals from decorated lines.

      - shipping is 0 at or above FREE_SHIPPING_THRESHOLD, else SHIPPING_FEE
      - tax = subtotal * TAX_RATE, rounded to a whole unit
      - total = subtotal + shipping + tax
    """
    item_count = sum(it.quantity for it in items)
    subtotal = float(sum(it.subtotal for it in items))
    shipping_cost = 0.0 if subtotal >= FREE_SHIPPING_THRESHOLD else SHIPPING_FEE
    tax = round_half_up(subtotal * TAX_RATE)

    return CartSummary(
        item_count=item_count,
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        shipping_threshold=FREE_SHIPPING_THRESHOLD,
        tax=tax,
        tax_rate=TAX_RATE,
        total=subtotal + shipping_cost + tax,
    )


def resolve_size(requested: str | None, sizes: list[ProductSize]) -> str:
    """
    Effective size label for an add-to-cart:
    the requested one, else the first declared size, else DEFAULT_SIZE.
    """
    if requested and requested.strip():
        return requested.strip()
    if sizes:
        return sizes[0].name
    return DEFAULT_SIZE


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - reject callers without an identity before touching storage
      - validate quantities and product existence / stock flag
      - resolve the effective size of a line
      - decorate lines with the product's *current* price and compute totals

    Prices are never frozen on cart lines: every read re-prices the cart
    from the products table.
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        category_repo: CategoryRepository,
    ):
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.category_repo = category_repo

    # ---- internal helpers ----

    @staticmethod
    def _require_owner(user_id: uuid.UUID | None) -> uuid.UUID:
        if user_id is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unauthorized",
            )
        return user_id

    def _decorate(self, session: Session, items: list[CartItem]) -> list[CartItemRead]:
        """
        Join lines with product, category and size data (one query each).
        """
        product_ids = list({it.product_id for it in items})
        products = self.product_repo.get_many(session, product_ids)
        sizes = self.product_repo.list_sizes_for_products(session, product_ids)
        categories = self.category_repo.get_many(
            session,
            list({p.category_id for p in products.values() if p.category_id}),
        )

        reads: list[CartItemRead] = []
        for it in items:
            product = products.get(it.product_id)
            if product is None:
                logger.warning("Cart line %s references missing product %s", it.id, it.product_id)
                continue
            reads.append(
                self._line_read(
                    it,
                    product,
                    categories.get(product.category_id),
                    sizes.get(product.id, []),
                )
            )
        return reads

    @staticmethod
    def _line_read(
        item: CartItem,
        product: Product,
        category: Category | None,
        sizes: list[ProductSize],
    ) -> CartItemRead:
        return CartItemRead(
            id=item.id,
            quantity=item.quantity,
            size=item.size,
            product=CartProductRead(
                id=product.id,
                name=product.name,
                slug=product.slug,
                price=product.price,
                original_price=product.original_price,
                images=list(product.images or []),
                in_stock=product.in_stock,
                category=(
                    CartCategoryRead(id=category.id, name=category.name, slug=category.slug)
                    if category is not None
                    else None
                ),
                sizes=[
                    CartSizeRead(
                        name=s.name,
                        price=s.price,
                        original_price=s.original_price,
                        available=s.available,
                    )
                    for s in sizes
                ],
            ),
            subtotal=item.quantity * product.price,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )

    def _read_one(self, session: Session, item: CartItem) -> CartItemRead:
        reads = self._decorate(session, [item])
        if not reads:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return reads[0]

    # ---- aggregator ----

    def get_cart(self, session: Session, user_id: uuid.UUID | None) -> CartRead:
        """
        Return every line of the owner (newest first) with a summary.
        Pure read.
        """
        owner = self._require_owner(user_id)
        items = self._decorate(session, self.cart_repo.list_lines(session, owner))
        return CartRead(items=items, summary=compute_summary(items))

    # ---- mutator ----

    def add_item(
        self,
        session: Session,
        user_id: uuid.UUID | None,
        payload: CartItemCreate,
    ) -> CartItemRead:
        """
        Add a product to the owner's cart.

        Rules:
          - quantity must be >= 1
          - product must exist and be in stock
          - size defaults to the product's first declared size, else "Default"
          - re-adding the same (product, size) increments the existing line
        """
        owner = self._require_owner(user_id)

        if payload.quantity < 1:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid product ID or quantity",
            )

        product = self.product_repo.get_by_id(session, payload.product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        if not product.in_stock:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product is out of stock",
            )

        sizes = self.product_repo.list_sizes(session, product.id)
        size = resolve_size(payload.size, sizes)

        item = self.cart_repo.upsert_line(
            session,
            user_id=owner,
            product_id=product.id,
            size=size,
            quantity=payload.quantity,
        )
        logger.info(
            "Cart add: user=%s product=%s size=%s qty=+%d -> %d",
            owner, product.id, size, payload.quantity, item.quantity,
        )
        return self._read_one(session, item)

    def update_item(
        self,
        session: Session,
        user_id: uuid.UUID | None,
        item_id: uuid.UUID,
        quantity: int,
    ) -> CartItemRead | None:
        """
        Overwrite a line's quantity.

        quantity == 0 deletes the line and returns None.
        """
        owner = self._require_owner(user_id)

        if quantity < 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid cart item ID or quantity",
            )

        item = self.cart_repo.get_owned_line(session, owner, item_id)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Cart item not found",
            )

        if quantity == 0:
            self.cart_repo.delete_line(session, item)
            logger.info("Cart remove (qty 0): user=%s item=%s", owner, item_id)
            return None

        item = self.cart_repo.set_quantity(session, item, quantity)
        return self._read_one(session, item)

    def remove_item(
        self,
        session: Session,
        user_id: uuid.UUID | None,
        item_id: uuid.UUID,
    ) -> None:
        """
        Delete a line owned by the caller. Missing or foreign lines are 404.
        """
        owner = self._require_owner(user_id)

        item = self.cart_repo.get_owned_line(session, owner, item_id)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Cart item not found",
            )

        self.cart_repo.delete_line(session, item)
        logger.info("Cart remove: user=%s item=%s", owner, item_id)

    def clear_cart(self, session: Session, user_id: uuid.UUID | None) -> int:
        """
        Remove every line of the owner in one transaction.
        Returns how many lines were removed.
        """
        owner = self._require_owner(user_id)
        removed = self.cart_repo.clear_user_cart(session, owner)
        logger.info("Cart cleared: user=%s lines=%d", owner, removed)
        return removed

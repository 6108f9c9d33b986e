# app/repositories/cart_repo.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, select

from app.models.cart import CartItem

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class CartRepository:
    """
    Data access layer for cart lines.

    - Pure DB operations, no FastAPI, no pricing.
    - A line is keyed by (user_id, product_id, size).
    """

    def list_lines(self, session: Session, user_id: uuid.UUID) -> list[CartItem]:
        """All lines of a user, most recently created first."""
        stmt = (
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at.desc())
        )
        return list(session.exec(stmt).all())

    def find_line(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        size: str,
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id,
            CartItem.size == size,
        )
        return session.exec(stmt).first()

    def get_owned_line(
        self,
        session: Session,
        user_id: uuid.UUID,
        item_id: uuid.UUID,
    ) -> CartItem | None:
        """Return the line only if it belongs to user_id."""
        stmt = select(CartItem).where(
            CartItem.id == item_id,
            CartItem.user_id == user_id,
        )
        return session.exec(stmt).first()

    def upsert_line(
        self,
        session: Session,
        *,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        size: str,
        quantity: int,
    ) -> CartItem:
        """
        Insert a new line or add `quantity` to the existing one, in a single
        INSERT ... ON CONFLICT DO UPDATE statement.

        Two concurrent adds of the same key both land; neither overwrites
        the other.
        """
        dialect = session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise RuntimeError(f"Cart upsert is not supported on dialect '{dialect}'")

        table = CartItem.__table__
        now = datetime.now(timezone.utc)

        stmt = insert(table).values(
            id=uuid.uuid4(),
            user_id=user_id,
            product_id=product_id,
            size=size,
            quantity=quantity,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.user_id, table.c.product_id, table.c.size],
            set_={
                "quantity": table.c.quantity + stmt.excluded.quantity,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        session.exec(stmt)
        session.commit()

        # commit() expired any cached instance, so this reads the stored row
        return self.find_line(session, user_id, product_id, size)

    def set_quantity(self, session: Session, item: CartItem, quantity: int) -> CartItem:
        item.quantity = quantity
        item.updated_at = datetime.now(timezone.utc)
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete_line(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.commit()

    def clear_user_cart(
        self,
        session: Session,
        user_id: uuid.UUID,
        commit: bool = True,
    ) -> int:
        """
        Delete every line of a user in one statement / one transaction.

        commit=False leaves the delete pending in a larger transaction
        (checkout). Returns the number of deleted lines.
        """
        result = session.exec(delete(CartItem).where(CartItem.user_id == user_id))
        if commit:
            session.commit()
        return result.rowcount

    def delete_for_product(self, session: Session, product_id: uuid.UUID) -> None:
        """
        Remove a product from every cart. Does not commit; runs inside the
        product deletion transaction.
        """
        session.exec(delete(CartItem).where(CartItem.product_id == product_id))

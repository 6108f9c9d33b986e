# app/repositories/order_repo.py
import uuid
from collections import defaultdict

from sqlmodel import Session, select

from app.models.order import Order, OrderItem


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; checkout writes the order, its items and the
        cart clear in one transaction. The service calls session.commit().
    """

    # ---- Orders ----

    def list_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def list_all(
        self,
        session: Session,
        status: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = select(Order)
        if status is not None:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def order_number_exists(self, session: Session, order_number: str) -> bool:
        stmt = select(Order.id).where(Order.order_number == order_number)
        return session.exec(stmt).first() is not None

    def add(self, session: Session, order: Order) -> Order:
        """
        Stage an Order (insert or update) and flush so its id is usable.
        """
        session.add(order)
        session.flush()
        return order

    # ---- Order items ----

    def items_by_order(
        self,
        session: Session,
        order_ids: list[uuid.UUID],
    ) -> dict[uuid.UUID, list[OrderItem]]:
        """
        Items for several orders in one query, grouped by order id.
        """
        grouped: dict[uuid.UUID, list[OrderItem]] = defaultdict(list)
        if not order_ids:
            return grouped
        stmt = select(OrderItem).where(OrderItem.order_id.in_(order_ids))
        for item in session.exec(stmt).all():
            grouped[item.order_id].append(item)
        return grouped

    def add_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        return items

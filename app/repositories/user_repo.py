# app/repositories/user_repo.py
import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.models.order import Order
from app.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (lookups, listing, updates)
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def list_with_order_counts(
        self,
        session: Session,
        role: str | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[tuple[User, int]]:
        """
        Users for the admin screen, newest first, each paired with the
        number of orders they have placed.

        Args:
            role: only users with this role
            search: case-insensitive substring of name or email
        """
        order_count = func.count(Order.id).label("order_count")
        stmt = (
            select(User, order_count)
            .join(Order, Order.user_id == User.id, isouter=True)
            .group_by(User.id)
        )
        if role is not None:
            stmt = stmt.where(User.role == role)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

        stmt = stmt.order_by(User.created_at.desc()).offset(skip).limit(limit)
        return [(user, int(count)) for user, count in session.exec(stmt).all()]

    def count_orders(self, session: Session, user_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(Order).where(Order.user_id == user_id)
        return int(session.exec(stmt).one() or 0)

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

# app/repositories/stats_repo.py
from datetime import datetime

from sqlalchemy import case, extract, func
from sqlmodel import Session, select

from app.models.order import Order, OrderItem
from app.models.product import Category, Product
from app.models.review import Review
from app.models.user import User

# Cancelled orders never count toward revenue or sales figures
COUNTED = Order.status != "cancelled"


class StatsRepository:
    """
    Read-only aggregated queries for the admin dashboard.
    """

    def _count(self, session: Session, model, *where) -> int:
        stmt = select(func.count()).select_from(model)
        for clause in where:
            stmt = stmt.where(clause)
        return int(session.exec(stmt).one() or 0)

    def count_users(self, session: Session) -> int:
        return self._count(session, User)

    def count_customers(self, session: Session) -> int:
        return self._count(session, User, User.role == "user")

    def count_orders(self, session: Session) -> int:
        return self._count(session, Order)

    def count_products(self, session: Session) -> int:
        return self._count(session, Product)

    def count_out_of_stock(self, session: Session) -> int:
        return self._count(session, Product, Product.in_stock == False)  # noqa: E712

    def count_categories(self, session: Session) -> int:
        return self._count(session, Category)

    def sales_totals(self, session: Session) -> tuple[float, float]:
        """
        (sum, average) of order totals over non-cancelled orders.
        """
        stmt = select(
            func.coalesce(func.sum(Order.total), 0.0),
            func.coalesce(func.avg(Order.total), 0.0),
        ).where(COUNTED)
        total, average = session.exec(stmt).one()
        return float(total or 0.0), float(average or 0.0)

    def orders_by_status(self, session: Session) -> dict[str, int]:
        stmt = select(Order.status, func.count()).group_by(Order.status)
        return {row_status: int(count) for row_status, count in session.exec(stmt).all()}

    def products_by_category(self, session: Session) -> list[tuple[Category, int]]:
        stmt = (
            select(Category, func.count(Product.id))
            .join(Product, Product.category_id == Category.id, isouter=True)
            .group_by(Category.id)
            .order_by(Category.name)
        )
        return [(category, int(count)) for category, count in session.exec(stmt).all()]

    def top_selling(self, session: Session, limit: int = 5) -> list[tuple]:
        """
        Best sellers by units sold on non-cancelled orders.

        Rows are (product_id, name, units_sold, order_count). The name is
        the one frozen on the order items, so deleted products still show.
        """
        units = func.sum(OrderItem.quantity).label("units")
        stmt = (
            select(
                OrderItem.product_id,
                func.max(OrderItem.name),
                units,
                func.count(func.distinct(OrderItem.order_id)),
            )
            .join(Order, Order.id == OrderItem.order_id)
            .where(COUNTED)
            .group_by(OrderItem.product_id)
            .order_by(units.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def latest_orders(
        self,
        session: Session,
        limit: int = 5,
    ) -> list[Order]:
        """
        Latest N orders by created_at (any status).
        """
        stmt = (
            select(Order)
            .order_by(Order.created_at.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def review_summary(self, session: Session) -> tuple[int, float]:
        """(count, average rating) over all reviews."""
        stmt = select(func.count(Review.id), func.coalesce(func.avg(Review.rating), 0.0))
        count, average = session.exec(stmt).one()
        return int(count or 0), float(average or 0.0)

    # ----- Range analytics: windows are [start, end) on created_at -----

    def window_orders(
        self,
        session: Session,
        start: datetime,
        end: datetime,
    ) -> tuple[int, int, float]:
        """
        (order count, billable order count, revenue) for orders created in
        the window. Cancelled orders count as orders but are not billable.
        """
        billable = func.sum(case((COUNTED, 1), else_=0))
        revenue = func.sum(case((COUNTED, Order.total), else_=0.0))
        stmt = select(
            func.count(Order.id),
            func.coalesce(billable, 0),
            func.coalesce(revenue, 0.0),
        ).where(
            Order.created_at >= start,
            Order.created_at < end,
        )
        count, billable_count, total = session.exec(stmt).one()
        return int(count or 0), int(billable_count or 0), float(total or 0.0)

    def window_new_customers(
        self,
        session: Session,
        start: datetime,
        end: datetime,
    ) -> int:
        return self._count(
            session,
            User,
            User.role == "user",
            User.created_at >= start,
            User.created_at < end,
        )

    def monthly_orders(self, session: Session, start: datetime) -> list[tuple]:
        """
        Rows of (year, month, order_count, revenue) from `start` onwards.
        """
        year_expr = extract("year", Order.created_at)
        month_expr = extract("month", Order.created_at)
        stmt = (
            select(
                year_expr,
                month_expr,
                func.count(Order.id),
                func.coalesce(func.sum(case((COUNTED, Order.total), else_=0.0)), 0.0),
            )
            .where(Order.created_at >= start)
            .group_by(year_expr, month_expr)
        )
        return list(session.exec(stmt).all())

    def monthly_new_customers(self, session: Session, start: datetime) -> list[tuple]:
        """
        Rows of (year, month, new_customer_count) from `start` onwards.
        """
        year_expr = extract("year", User.created_at)
        month_expr = extract("month", User.created_at)
        stmt = (
            select(year_expr, month_expr, func.count(User.id))
            .where(User.role == "user", User.created_at >= start)
            .group_by(year_expr, month_expr)
        )
        return list(session.exec(stmt).all())

# app/services/stats_service.py
import calendar
from datetime import datetime, timedelta, timezone

from sqlmodel import Session

from app.repositories.stats_repo import StatsRepository
from app.schemas.order import OrderRead
from app.schemas.stats import (
    AdminAnalytics,
    AdminDashboardStats,
    AnalyticsRange,
    CategoryProductCount,
    GrowthPercent,
    MonthlyBreakdown,
    PeriodTotals,
    TopSellingProduct,
)
from app.services.cart_service import round_half_up

RANGE_DAYS = {"7days": 7, "30days": 30, "90days": 90}


def growth_percent(current: float, previous: float) -> int:
    """
    Whole-percent change from `previous` to `current`.
    With nothing to compare against: 100 if anything happened, else 0.
    """
    if previous > 0:
        return int(round_half_up((current - previous) / previous * 100))
    return 100 if current > 0 else 0


def range_start(range_: AnalyticsRange, now: datetime) -> datetime:
    """
    Start of the analytics window ending at `now`.

    Day ranges reach back that many days. "12months" starts at the first
    day of the month eleven months back, so it spans 12 calendar months.
    """
    if range_ in RANGE_DAYS:
        return now - timedelta(days=RANGE_DAYS[range_])
    year, month = now.year, now.month - 11
    if month < 1:
        year, month = year - 1, month + 12
    return now.replace(year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0)


def months_between(start: datetime, end: datetime) -> list[tuple[int, int]]:
    """Every (year, month) from start's month through end's month."""
    months = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        months.append((year, month))
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    return months


class StatsService:
    """
    Orchestrates aggregated admin dashboard statistics.
    """

    def __init__(self, repo: StatsRepository):
        self.repo = repo

    def get_admin_dashboard_stats(
        self,
        session: Session,
        latest_n_orders: int = 5,
    ) -> AdminDashboardStats:
        total_sales, average = self.repo.sales_totals(session)
        total_reviews, average_rating = self.repo.review_summary(session)

        return AdminDashboardStats(
            total_sales=total_sales,
            average_order_value=round_half_up(average),
            total_orders=self.repo.count_orders(session),
            orders_by_status=self.repo.orders_by_status(session),
            total_products=self.repo.count_products(session),
            out_of_stock_products=self.repo.count_out_of_stock(session),
            total_categories=self.repo.count_categories(session),
            total_users=self.repo.count_users(session),
            total_customers=self.repo.count_customers(session),
            total_reviews=total_reviews,
            average_rating=round(average_rating, 1),
            products_by_category=[
                CategoryProductCount(
                    category_id=category.id,
                    category_name=category.name,
                    product_count=count,
                )
                for category, count in self.repo.products_by_category(session)
            ],
            top_selling=[
                TopSellingProduct(
                    product_id=product_id,
                    name=name,
                    units_sold=int(units or 0),
                    order_count=int(orders or 0),
                )
                for product_id, name, units, orders in self.repo.top_selling(session)
            ],
            latest_orders=[
                OrderRead.model_validate(o)
                for o in self.repo.latest_orders(session, limit=latest_n_orders)
            ],
        )

    def _period(self, session: Session, start: datetime, end: datetime) -> PeriodTotals:
        orders, billable, revenue = self.repo.window_orders(session, start, end)
        return PeriodTotals(
            orders=orders,
            billable_orders=billable,
            revenue=revenue,
            new_customers=self.repo.window_new_customers(session, start, end),
        )

    def get_analytics(
        self,
        session: Session,
        range_: AnalyticsRange = "12months",
        now: datetime | None = None,
    ) -> AdminAnalytics:
        """
        Totals for the requested window against the window of equal length
        right before it, plus a month-by-month breakdown of the window.
        """
        end = now or datetime.now(timezone.utc)
        start = range_start(range_, end)
        previous_start = start - (end - start)

        current = self._period(session, start, end)
        previous = self._period(session, previous_start, start)

        order_rows = {
            (int(y), int(m)): (int(count or 0), float(revenue or 0.0))
            for y, m, count, revenue in self.repo.monthly_orders(session, start)
        }
        customer_rows = {
            (int(y), int(m)): int(count or 0)
            for y, m, count in self.repo.monthly_new_customers(session, start)
        }
        monthly = []
        for year, month in months_between(start, end):
            orders, sales = order_rows.get((year, month), (0, 0.0))
            monthly.append(
                MonthlyBreakdown(
                    year=year,
                    month=month,
                    label=calendar.month_abbr[month],
                    sales=sales,
                    orders=orders,
                    customers=customer_rows.get((year, month), 0),
                )
            )

        return AdminAnalytics(
            range=range_,
            start=start,
            end=end,
            current=current,
            previous=previous,
            growth=GrowthPercent(
                revenue=growth_percent(current.revenue, previous.revenue),
                orders=growth_percent(current.orders, previous.orders),
                customers=growth_percent(current.new_customers, previous.new_customers),
            ),
            average_order_value=(
                round_half_up(current.revenue / current.billable_orders)
                if current.billable_orders
                else 0.0
            ),
            monthly=monthly,
        )

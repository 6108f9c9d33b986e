# app/schemas/stats.py
import uuid
from datetime import datetime
from typing import Literal

from app.schemas.base import CamelModel
from app.schemas.order import OrderRead


class CategoryProductCount(CamelModel):
    category_id: uuid.UUID
    category_name: str
    product_count: int


class TopSellingProduct(CamelModel):
    product_id: uuid.UUID | None
    name: str
    units_sold: int
    order_count: int


class AdminDashboardStats(CamelModel):
    """
    Full payload for admin dashboard.

    Sales figures exclude cancelled orders; order counts do not.
    """

    total_sales: float
    average_order_value: float
    total_orders: int
    orders_by_status: dict[str, int]
    total_products: int
    out_of_stock_products: int
    total_categories: int
    total_users: int
    total_customers: int
    total_reviews: int
    average_rating: float
    products_by_category: list[CategoryProductCount]
    top_selling: list[TopSellingProduct]
    latest_orders: list[OrderRead]


AnalyticsRange = Literal["7days", "30days", "90days", "12months"]


class PeriodTotals(CamelModel):
    orders: int
    billable_orders: int
    revenue: float
    new_customers: int


class GrowthPercent(CamelModel):
    """Whole-percent change against the previous period of equal length."""

    revenue: int
    orders: int
    customers: int


class MonthlyBreakdown(CamelModel):
    year: int
    month: int
    label: str
    sales: float
    orders: int
    customers: int


class AdminAnalytics(CamelModel):
    """
    Range analytics: totals for the window, the same totals for the
    window just before it, growth between the two, and a per-month
    breakdown of the window (empty months included).
    """

    range: AnalyticsRange
    start: datetime
    end: datetime
    current: PeriodTotals
    previous: PeriodTotals
    growth: GrowthPercent
    average_order_value: float
    monthly: list[MonthlyBreakdown]

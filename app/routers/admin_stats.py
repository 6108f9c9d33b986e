# app/routers/admin_stats.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.stats_repo import StatsRepository
from app.schemas.stats import AdminAnalytics, AdminDashboardStats, AnalyticsRange
from app.services.stats_service import StatsService

router = APIRouter(prefix="/admin/stats", tags=["Admin Stats"])

service = StatsService(StatsRepository())


@router.get(
    "",
    response_model=AdminDashboardStats,
    dependencies=[Depends(require_admin)],
)
def get_admin_dashboard_stats(
    session: Session = Depends(get_session),
    latest: int = Query(default=5, ge=1, le=20),
):
    """
    Aggregated statistics for the admin dashboard.

    `latest` controls how many recent orders are included.
    """
    return service.get_admin_dashboard_stats(session, latest_n_orders=latest)


@router.get(
    "/analytics",
    response_model=AdminAnalytics,
    dependencies=[Depends(require_admin)],
)
def get_admin_analytics(
    session: Session = Depends(get_session),
    range_: AnalyticsRange = Query(default="12months", alias="range"),
):
    """
    Orders, revenue and new customers for the window against the previous
    window of the same length, with growth percentages and a monthly
    breakdown.

    `range`: 7days | 30days | 90days | 12months
    """
    return service.get_analytics(session, range_)

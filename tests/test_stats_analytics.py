"""
Range analytics: window arithmetic, growth figures and the monthly
breakdown, computed against a fixed clock.
"""
import uuid
from datetime import datetime, timezone

import pytest

from app.models.order import Order
from app.models.user import User
from app.repositories.stats_repo import StatsRepository
from app.services.stats_service import (
    StatsService,
    growth_percent,
    months_between,
    range_start,
)

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def at(month, day, year=2026):
    return datetime(year, month, day, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def stats():
    return StatsService(StatsRepository())


@pytest.fixture
def add_user(session):
    def _add(created_at, role="user"):
        user = User(
            id=uuid.uuid4(),
            email=f"{uuid.uuid4().hex[:8]}@example.com",
            name="Dated User",
            role=role,
            created_at=created_at,
            updated_at=created_at,
        )
        session.add(user)
        session.commit()
        return user

    return _add


@pytest.fixture
def add_order(session):
    def _add(user, created_at, total, status="pending"):
        order = Order(
            order_number=f"ORD-TEST-{uuid.uuid4().hex[:6]}",
            user_id=user.id,
            full_name="Dated Buyer",
            phone_number="9000000000",
            address_line1="1 Main St",
            city="Pune",
            state="Maharashtra",
            zip_code="411001",
            status=status,
            subtotal=total,
            shipping_cost=0.0,
            tax=0.0,
            total=total,
            created_at=created_at,
            updated_at=created_at,
        )
        session.add(order)
        session.commit()
        return order

    return _add


def test_growth_percent():
    assert growth_percent(1000, 400) == 150
    assert growth_percent(1, 2) == -50
    assert growth_percent(5, 0) == 100
    assert growth_percent(0, 0) == 0


def test_range_start():
    assert range_start("7days", NOW) == datetime(2026, 3, 8, 12, 0, tzinfo=timezone.utc)
    assert range_start("90days", NOW) == datetime(2025, 12, 15, 12, 0, tzinfo=timezone.utc)
    assert range_start("12months", NOW) == datetime(2025, 4, 1, tzinfo=timezone.utc)


def test_months_between_crosses_year_end():
    assert months_between(at(11, 20, 2025), at(2, 3)) == [
        (2025, 11),
        (2025, 12),
        (2026, 1),
        (2026, 2),
    ]


def test_thirty_day_window_against_previous(stats, session, add_user, add_order):
    recent = add_user(at(3, 5))
    add_user(at(2, 10))
    add_user(at(1, 20))
    add_user(at(3, 6), role="admin")

    add_order(recent, at(3, 10), 1000.0)
    add_order(recent, at(3, 1), 500.0, status="cancelled")
    add_order(recent, at(2, 1), 400.0, status="delivered")

    result = stats.get_analytics(session, "30days", now=NOW)

    assert (result.current.orders, result.current.billable_orders) == (2, 1)
    assert result.current.revenue == 1000.0
    assert result.current.new_customers == 1
    assert (result.previous.orders, result.previous.revenue) == (1, 400.0)
    assert result.previous.new_customers == 2

    assert result.growth.revenue == 150
    assert result.growth.orders == 100
    assert result.growth.customers == -50
    assert result.average_order_value == 1000.0

    assert [(m.label, m.orders, m.sales, m.customers) for m in result.monthly] == [
        ("Feb", 0, 0.0, 0),
        ("Mar", 2, 1000.0, 1),
    ]


def test_twelve_months_lists_every_month(stats, session, add_user, add_order):
    buyer = add_user(at(6, 2, 2025))
    add_order(buyer, at(6, 3, 2025), 750.0)

    result = stats.get_analytics(session, "12months", now=NOW)

    assert len(result.monthly) == 12
    assert (result.monthly[0].year, result.monthly[0].label) == (2025, "Apr")
    assert (result.monthly[-1].year, result.monthly[-1].label) == (2026, "Mar")
    june = next(m for m in result.monthly if (m.year, m.month) == (2025, 6))
    assert (june.orders, june.sales, june.customers) == (1, 750.0, 1)
    assert sum(m.orders for m in result.monthly) == 1


class TestAnalyticsEndpoint:
    def test_recent_checkout_is_in_current_window(
        self, client, admin_headers, customer_headers, make_product
    ):
        product = make_product()
        client.post("/api/cart", json={"productId": str(product.id)}, headers=customer_headers)
        order = client.post(
            "/api/orders/checkout",
            json={
                "fullName": "Buyer",
                "phoneNumber": "9000000000",
                "addressLine1": "1 Main St",
                "city": "Pune",
                "state": "Maharashtra",
                "zipCode": "411001",
            },
            headers=customer_headers,
        ).json()

        response = client.get(
            "/api/admin/stats/analytics", params={"range": "7days"}, headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["range"] == "7days"
        assert data["current"]["orders"] == 1
        assert data["current"]["revenue"] == order["total"]
        assert data["previous"]["orders"] == 0
        assert data["growth"]["orders"] == 100
        assert sum(m["orders"] for m in data["monthly"]) == 1

    def test_default_range_is_twelve_months(self, client, admin_headers):
        data = client.get("/api/admin/stats/analytics", headers=admin_headers).json()
        assert data["range"] == "12months"
        assert len(data["monthly"]) == 12

    def test_unknown_range_is_400(self, client, admin_headers):
        response = client.get(
            "/api/admin/stats/analytics", params={"range": "2weeks"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_customers_are_forbidden(self, client, customer_headers):
        response = client.get("/api/admin/stats/analytics", headers=customer_headers)
        assert response.status_code == 403

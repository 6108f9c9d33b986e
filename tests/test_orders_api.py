"""
HTTP tests for checkout, order history and admin order management.
"""
import uuid

CHECKOUT_URL = "/api/orders/checkout"

SHIPPING = {
    "fullName": "Asha Rao",
    "phoneNumber": "9876543210",
    "addressLine1": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "zipCode": "560001",
}


def add(client, headers, product, quantity=1, size=None):
    body = {"productId": str(product.id), "quantity": quantity}
    if size:
        body["size"] = size
    response = client.post("/api/cart", json=body, headers=headers)
    assert response.status_code == 200
    return response.json()["item"]


class TestCheckout:
    def test_checkout_freezes_cart_summary_and_empties_cart(
        self, client, customer_headers, make_product
    ):
        whey = make_product(name="Whey Isolate", price=1500.0, sizes=("1kg",))
        bar = make_product(name="Protein Bar", price=120.0)
        add(client, customer_headers, whey, quantity=1)
        add(client, customer_headers, bar, quantity=3)
        summary = client.get("/api/cart", headers=customer_headers).json()["summary"]

        response = client.post(CHECKOUT_URL, json=SHIPPING, headers=customer_headers)

        assert response.status_code == 201
        order = response.json()
        assert order["status"] == "pending"
        assert order["orderNumber"].startswith("ORD-")
        assert order["subtotal"] == summary["subtotal"] == 1860.0
        assert order["shippingCost"] == summary["shippingCost"] == 99.0
        assert order["tax"] == summary["tax"] == 335.0
        assert order["total"] == summary["total"] == 2294.0
        assert sorted((i["name"], i["size"], i["quantity"]) for i in order["items"]) == [
            ("Protein Bar", "Default", 3),
            ("Whey Isolate", "1kg", 1),
        ]

        assert client.get("/api/cart", headers=customer_headers).json()["items"] == []

    def test_order_prices_do_not_follow_later_price_changes(
        self, client, session, customer_headers, make_product
    ):
        product = make_product(price=1000.0)
        add(client, customer_headers, product, quantity=1)
        order = client.post(CHECKOUT_URL, json=SHIPPING, headers=customer_headers).json()

        product.price = 5000.0
        session.add(product)
        session.commit()

        fetched = client.get(f"/api/orders/{order['id']}", headers=customer_headers).json()
        assert fetched["items"][0]["price"] == 1000.0
        assert fetched["total"] == order["total"]

    def test_empty_cart_cannot_check_out(self, client, customer_headers):
        response = client.post(CHECKOUT_URL, json=SHIPPING, headers=customer_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Cart is empty"}

    def test_out_of_stock_line_blocks_checkout(
        self, client, session, customer_headers, make_product
    ):
        product = make_product(name="Casein")
        line = add(client, customer_headers, product)

        product.in_stock = False
        session.add(product)
        session.commit()

        response = client.post(CHECKOUT_URL, json=SHIPPING, headers=customer_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Cart validation failed"
        assert body["items"] == [{"cartItemId": line["id"], "reason": "Casein is out of stock"}]
        assert len(client.get("/api/cart", headers=customer_headers).json()["items"]) == 1

    def test_guest_cannot_check_out(self, client):
        response = client.post(CHECKOUT_URL, json=SHIPPING)
        assert response.status_code == 401


class TestOrderHistory:
    def test_list_and_ownership(self, client, customer_headers, make_user, make_product, headers_for):
        add(client, customer_headers, make_product())
        order = client.post(CHECKOUT_URL, json=SHIPPING, headers=customer_headers).json()

        mine = client.get("/api/orders", headers=customer_headers).json()
        assert [o["id"] for o in mine] == [order["id"]]
        assert [i["quantity"] for i in mine[0]["items"]] == [1]

        other = headers_for(make_user())
        assert client.get("/api/orders", headers=other).json() == []
        response = client.get(f"/api/orders/{order['id']}", headers=other)
        assert response.status_code == 404

        assert client.get(f"/api/orders/{uuid.uuid4()}", headers=customer_headers).status_code == 404


class TestAdminOrders:
    def _place_order(self, client, headers, make_product):
        add(client, headers, make_product())
        return client.post(CHECKOUT_URL, json=SHIPPING, headers=headers).json()

    def test_status_transitions(self, client, admin_headers, customer_headers, make_product):
        order = self._place_order(client, customer_headers, make_product)
        url = f"/api/admin/orders/{order['id']}/status"

        for new_status in ("processing", "shipped", "delivered"):
            response = client.patch(url, json={"status": new_status}, headers=admin_headers)
            assert response.status_code == 200
            assert response.json()["status"] == new_status

        response = client.patch(url, json={"status": "cancelled"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid status transition: delivered -> cancelled"}

    def test_list_filters_by_status(self, client, admin_headers, customer_headers, make_product):
        order = self._place_order(client, customer_headers, make_product)

        pending = client.get(
            "/api/admin/orders", params={"status": "pending"}, headers=admin_headers
        ).json()
        shipped = client.get(
            "/api/admin/orders", params={"status": "shipped"}, headers=admin_headers
        ).json()

        assert [o["id"] for o in pending] == [order["id"]]
        assert shipped == []

    def test_customers_are_forbidden(self, client, customer_headers):
        response = client.get("/api/admin/orders", headers=customer_headers)
        assert response.status_code == 403

    def test_dashboard_stats(self, client, admin_headers, customer_headers, make_product):
        order = self._place_order(client, customer_headers, make_product)
        make_product(name="Creatine", in_stock=False)

        stats = client.get("/api/admin/stats", headers=admin_headers).json()

        assert stats["totalOrders"] == 1
        assert stats["ordersByStatus"] == {"pending": 1}
        assert stats["totalSales"] == order["total"]
        assert stats["averageOrderValue"] == order["total"]
        assert stats["totalProducts"] == 2
        assert stats["outOfStockProducts"] == 1
        assert stats["totalCategories"] == 1
        assert stats["totalUsers"] == 2
        assert stats["totalCustomers"] == 1
        assert stats["totalReviews"] == 0
        assert stats["averageRating"] == 0.0
        assert stats["productsByCategory"][0]["productCount"] == 2
        assert stats["topSelling"] == [
            {
                "productId": order["items"][0]["productId"],
                "name": "Whey Isolate",
                "unitsSold": 1,
                "orderCount": 1,
            }
        ]
        assert [o["id"] for o in stats["latestOrders"]] == [order["id"]]

    def test_cancelled_orders_do_not_count_as_sales(
        self, client, admin_headers, customer_headers, make_product
    ):
        order = self._place_order(client, customer_headers, make_product)
        client.patch(
            f"/api/admin/orders/{order['id']}/status",
            json={"status": "cancelled"},
            headers=admin_headers,
        )

        stats = client.get("/api/admin/stats", headers=admin_headers).json()

        assert stats["totalOrders"] == 1
        assert stats["totalSales"] == 0.0
        assert stats["topSelling"] == []

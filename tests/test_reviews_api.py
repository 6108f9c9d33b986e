"""
HTTP tests for /api/reviews: posting, listing and admin moderation.
"""
import uuid

REVIEWS_URL = "/api/reviews"


def post_review(client, headers, product, rating=5, comment="Mixes well", title=None):
    body = {"productId": str(product.id), "rating": rating, "comment": comment}
    if title is not None:
        body["title"] = title
    return client.post(REVIEWS_URL, json=body, headers=headers)


class TestPostReview:
    def test_creates_unverified_review(self, client, customer, customer_headers, make_product):
        product = make_product(name="Whey Isolate")

        response = post_review(client, customer_headers, product, rating=4, title="  Good  ")

        assert response.status_code == 201
        data = response.json()
        assert data["rating"] == 4
        assert data["title"] == "Good"
        assert data["comment"] == "Mixes well"
        assert data["verified"] is False
        assert data["user"] == {"id": str(customer.id), "name": customer.name}
        assert data["product"]["id"] == str(product.id)
        assert data["product"]["slug"] == product.slug
        assert data["product"]["images"] == ["https://cdn.example.com/p.png"]

    def test_guest_is_rejected(self, client, make_product):
        response = post_review(client, {}, make_product())
        assert response.status_code == 401

    def test_guest_is_rejected_before_body_validation(self, client):
        response = client.post(REVIEWS_URL, json={})
        assert response.status_code == 401

    def test_rating_out_of_range(self, client, customer_headers, make_product):
        product = make_product()
        for rating in (0, 6):
            response = post_review(client, customer_headers, product, rating=rating)
            assert response.status_code == 400
            assert response.json() == {"error": "Rating must be between 1 and 5"}

    def test_blank_comment(self, client, customer_headers, make_product):
        response = post_review(client, customer_headers, make_product(), comment="   ")
        assert response.status_code == 400
        assert response.json() == {"error": "Product ID, rating, and comment are required"}

    def test_missing_fields_are_400(self, client, customer_headers):
        response = client.post(
            REVIEWS_URL, json={"productId": str(uuid.uuid4())}, headers=customer_headers
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Validation error"

    def test_unknown_product(self, client, customer_headers):
        response = client.post(
            REVIEWS_URL,
            json={"productId": str(uuid.uuid4()), "rating": 5, "comment": "Great"},
            headers=customer_headers,
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Product not found"}

    def test_one_review_per_product(self, client, customer_headers, make_product):
        product = make_product()
        assert post_review(client, customer_headers, product).status_code == 201

        response = post_review(client, customer_headers, product, rating=1)

        assert response.status_code == 400
        assert response.json() == {"error": "You have already reviewed this product"}


class TestListReviews:
    def test_newest_first_and_product_filter(
        self, client, make_user, headers_for, make_product
    ):
        whey = make_product(name="Whey Isolate")
        bar = make_product(name="Protein Bar")
        first, second = make_user(), make_user()
        post_review(client, headers_for(first), whey, comment="first")
        post_review(client, headers_for(second), whey, comment="second")
        post_review(client, headers_for(first), bar, comment="bar")

        all_reviews = client.get(REVIEWS_URL).json()
        assert [r["comment"] for r in all_reviews] == ["bar", "second", "first"]

        whey_reviews = client.get(REVIEWS_URL, params={"productId": str(whey.id)}).json()
        assert [r["comment"] for r in whey_reviews] == ["second", "first"]

        page = client.get(REVIEWS_URL, params={"limit": 1, "offset": 1}).json()
        assert [r["comment"] for r in page] == ["second"]


class TestModeration:
    def test_admin_verifies_and_filters(
        self, client, admin_headers, customer_headers, make_product
    ):
        review = post_review(client, customer_headers, make_product()).json()

        response = client.put(
            f"{REVIEWS_URL}/{review['id']}", json={"verified": True}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["verified"] is True

        verified = client.get(REVIEWS_URL, params={"verified": "true"}).json()
        pending = client.get(REVIEWS_URL, params={"verified": "false"}).json()
        assert [r["id"] for r in verified] == [review["id"]]
        assert pending == []

    def test_admin_deletes(self, client, admin_headers, customer_headers, make_product):
        review = post_review(client, customer_headers, make_product()).json()

        response = client.delete(f"{REVIEWS_URL}/{review['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert client.get(REVIEWS_URL).json() == []
        again = client.delete(f"{REVIEWS_URL}/{review['id']}", headers=admin_headers)
        assert again.status_code == 404

    def test_customers_cannot_moderate(self, client, customer_headers, make_product):
        review = post_review(client, customer_headers, make_product()).json()
        response = client.put(
            f"{REVIEWS_URL}/{review['id']}", json={"verified": True}, headers=customer_headers
        )
        assert response.status_code == 403

    def test_deleting_product_removes_its_reviews(
        self, client, admin_headers, customer_headers, make_product
    ):
        product = make_product()
        post_review(client, customer_headers, product)

        response = client.delete(f"/api/products/{product.id}", headers=admin_headers)

        assert response.status_code == 200
        assert client.get(REVIEWS_URL).json() == []


def test_dashboard_counts_reviews(client, admin_headers, make_user, headers_for, make_product):
    product = make_product()
    post_review(client, headers_for(make_user()), product, rating=5)
    post_review(client, headers_for(make_user()), product, rating=4)
    post_review(client, headers_for(make_user()), product, rating=4)

    stats = client.get("/api/admin/stats", headers=admin_headers).json()

    assert stats["totalReviews"] == 3
    assert stats["averageRating"] == 4.3

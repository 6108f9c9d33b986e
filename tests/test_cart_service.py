"""
Service-level tests for cart pricing and mutations.

These call CartService directly with a Session and an explicit owner id,
without going through HTTP.
"""
import uuid

import pytest
from fastapi import HTTPException

from app.repositories.cart_repo import CartRepository
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import CartItemCreate
from app.services.cart_service import (
    FREE_SHIPPING_THRESHOLD,
    SHIPPING_FEE,
    TAX_RATE,
    CartService,
    round_half_up,
)


@pytest.fixture
def service():
    return CartService(CartRepository(), ProductRepository(), CategoryRepository())


def test_round_half_up_rounds_halves_away_from_zero():
    assert round_half_up(4.5) == 5.0
    assert round_half_up(2.5) == 3.0
    assert round_half_up(179.82) == 180.0
    assert round_half_up(0.0) == 0.0


def test_missing_owner_is_rejected_before_storage(service):
    # session=None: any storage access would blow up with AttributeError
    with pytest.raises(HTTPException) as exc:
        service.get_cart(None, None)
    assert exc.value.status_code == 401

    with pytest.raises(HTTPException) as exc:
        service.add_item(None, None, CartItemCreate(product_id=uuid.uuid4()))
    assert exc.value.status_code == 401

    with pytest.raises(HTTPException) as exc:
        service.update_item(None, None, uuid.uuid4(), 2)
    assert exc.value.status_code == 401

    with pytest.raises(HTTPException) as exc:
        service.remove_item(None, None, uuid.uuid4())
    assert exc.value.status_code == 401

    with pytest.raises(HTTPException) as exc:
        service.clear_cart(None, None)
    assert exc.value.status_code == 401


def test_empty_cart_summary(service, session, customer):
    cart = service.get_cart(session, customer.id)

    assert cart.items == []
    assert cart.summary.item_count == 0
    assert cart.summary.subtotal == 0
    assert cart.summary.shipping_cost == SHIPPING_FEE
    assert cart.summary.tax == 0
    assert cart.summary.total == SHIPPING_FEE
    assert cart.summary.shipping_threshold == FREE_SHIPPING_THRESHOLD
    assert cart.summary.tax_rate == TAX_RATE


def test_repeated_adds_accumulate_on_one_line(service, session, customer, make_product):
    product = make_product(sizes=("500g", "1kg"))

    for qty in (1, 2, 3):
        service.add_item(
            session,
            customer.id,
            CartItemCreate(product_id=product.id, quantity=qty, size="1kg"),
        )

    cart = service.get_cart(session, customer.id)
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 6
    assert cart.items[0].size == "1kg"


def test_same_product_different_sizes_are_separate_lines(service, session, customer, make_product):
    product = make_product(sizes=("500g", "1kg"))

    service.add_item(session, customer.id, CartItemCreate(product_id=product.id, size="500g"))
    service.add_item(session, customer.id, CartItemCreate(product_id=product.id, size="1kg"))

    cart = service.get_cart(session, customer.id)
    assert sorted(line.size for line in cart.items) == ["1kg", "500g"]
    assert cart.summary.item_count == 2


def test_size_falls_back_to_first_declared_then_default(service, session, customer, make_product):
    sized = make_product(name="Plant Protein", sizes=("500g", "1kg"))
    unsized = make_product(name="Shaker")

    line = service.add_item(session, customer.id, CartItemCreate(product_id=sized.id))
    assert line.size == "500g"

    line = service.add_item(session, customer.id, CartItemCreate(product_id=unsized.id))
    assert line.size == "Default"


def test_add_validates_quantity_and_product(service, session, customer, make_product):
    with pytest.raises(HTTPException) as exc:
        service.add_item(session, customer.id, CartItemCreate(product_id=uuid.uuid4(), quantity=0))
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        service.add_item(session, customer.id, CartItemCreate(product_id=uuid.uuid4()))
    assert exc.value.status_code == 404

    sold_out = make_product(in_stock=False)
    with pytest.raises(HTTPException) as exc:
        service.add_item(session, customer.id, CartItemCreate(product_id=sold_out.id))
    assert exc.value.status_code == 400
    assert exc.value.detail == "Product is out of stock"
    assert service.get_cart(session, customer.id).items == []


def test_totals_follow_current_product_price(service, session, customer, make_product):
    product = make_product(price=1000.0)
    service.add_item(session, customer.id, CartItemCreate(product_id=product.id, quantity=2))

    product.price = 1500.0
    session.add(product)
    session.commit()

    cart = service.get_cart(session, customer.id)
    assert cart.items[0].subtotal == 3000.0
    assert cart.summary.subtotal == 3000.0
    assert cart.summary.shipping_cost == 0
    assert cart.summary.tax == 540.0
    assert cart.summary.total == 3540.0


def test_summary_total_is_exact_sum(service, session, customer, make_product):
    a = make_product(name="Creatine", price=799.0)
    b = make_product(name="BCAA", price=349.0)
    service.add_item(session, customer.id, CartItemCreate(product_id=a.id, quantity=1))
    service.add_item(session, customer.id, CartItemCreate(product_id=b.id, quantity=3))

    summary = service.get_cart(session, customer.id).summary
    assert summary.item_count == 4
    assert summary.subtotal == 1846.0
    assert summary.shipping_cost == SHIPPING_FEE
    assert summary.tax == 332.0
    assert summary.total == summary.subtotal + summary.shipping_cost + summary.tax

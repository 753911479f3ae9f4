from decimal import Decimal
from types import SimpleNamespace

import pytest

from storefront.domain.cart import Cart
from storefront.domain.errors import StockExceeded, ValidationError


def product(id=1, name="Laptop", price="999.99", stock=5, image_url=None):
    return SimpleNamespace(id=id, name=name, price=Decimal(price), stock_quantity=stock, image_url=image_url)


def test_add_line_inserts_new_line():
    cart = Cart()
    line = cart.add_line(product(), 2)

    assert len(cart) == 1
    assert line.quantity == 2
    assert line.unit_price == Decimal("999.99")


def test_add_same_product_merges_quantity():
    cart = Cart()
    cart.add_line(product(id=1))
    cart.add_line(product(id=2, name="Mouse", price="49.50", stock=10))
    cart.add_line(product(id=1), 2)

    assert [l.product_id for l in cart.lines] == [1, 2]
    assert cart.find(1).quantity == 3


def test_add_line_over_stock_leaves_cart_unchanged():
    cart = Cart()
    cart.add_line(product(stock=3), 2)

    with pytest.raises(StockExceeded) as exc:
        cart.add_line(product(stock=3), 2)

    assert exc.value.requested == 4
    assert exc.value.available == 3
    assert cart.find(1).quantity == 2


def test_add_line_first_time_over_stock():
    cart = Cart()
    with pytest.raises(StockExceeded):
        cart.add_line(product(stock=0))
    assert len(cart) == 0


def test_add_line_rejects_non_positive_quantity():
    cart = Cart()
    with pytest.raises(ValidationError):
        cart.add_line(product(), 0)


def test_remove_line_out_of_range_is_noop():
    cart = Cart()
    cart.add_line(product())

    assert cart.remove_line(5) is None
    assert cart.remove_line(-1) is None
    assert len(cart) == 1

    removed = cart.remove_line(0)
    assert removed.product_id == 1
    assert len(cart) == 0


def test_total_tracks_remaining_lines():
    cart = Cart()
    cart.add_line(product(id=1, price="999.99"), 2)
    cart.add_line(product(id=2, price="49.50", stock=10), 3)
    cart.add_line(product(id=3, price="0.10", stock=10), 3)
    assert cart.total() == Decimal("2148.78")

    cart.remove_line(1)
    assert cart.total() == sum(l.unit_price * l.quantity for l in cart.lines)
    assert cart.total() == Decimal("2000.28")

    cart.clear()
    assert cart.total() == Decimal("0.00")


def test_serialization_round_trip():
    cart = Cart()
    cart.add_line(product(id=1, image_url="https://cdn.example.com/a.png"), 2)
    cart.add_line(product(id=7, name="Mouse", price="49.50", stock=10))

    assert Cart.loads(cart.dumps()) == cart


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "{\"product_id\": 1}",
        "[{\"product_id\": 1, \"name\": \"x\", \"unit_price\": \"1.00\", \"stock\": 3, \"quantity\": 0}]",
        "[1, 2, 3]",
        "",
        None,
    ],
)
def test_corrupted_storage_gives_empty_cart(raw):
    assert len(Cart.loads(raw)) == 0


def test_discard_takes_out_bought_quantities_only():
    cart = Cart()
    cart.add_line(product(id=1), 2)
    bought = list(cart.lines)

    # meanwhile another tab raised the laptop and added a mouse
    cart.add_line(product(id=1), 1)
    cart.add_line(product(id=2, name="Mouse", price="49.50", stock=10))

    cart.discard(bought)

    assert [(l.product_id, l.quantity) for l in cart.lines] == [(1, 1), (2, 1)]

    cart.discard(list(cart.lines))
    assert len(cart) == 0
